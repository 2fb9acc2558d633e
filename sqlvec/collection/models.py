"""Collection data models."""

from pydantic import BaseModel, ConfigDict, Field

from sqlvec.config import IDENTIFIER_PATTERN


class CategoryHandle(BaseModel):
    """Immutable description of the category a collection works on.

    Attributes:
        name: Category name.
        dimension: Vector dimension; ``None`` means the embedder's.
        engine: MySQL storage engine for the category table.
        table_prefix: Table name prefix.
        table_suffix: Table name suffix.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, pattern=IDENTIFIER_PATTERN, description="Category name")
    dimension: int | None = Field(default=None, ge=1, description="Vector dimension")
    engine: str = Field(default="InnoDB", pattern=IDENTIFIER_PATTERN, description="Storage engine")
    table_prefix: str = Field(
        default="vectors_", pattern=IDENTIFIER_PATTERN, description="Table name prefix"
    )
    table_suffix: str = Field(
        default="", pattern=IDENTIFIER_PATTERN, description="Table name suffix"
    )

    @property
    def table_name(self) -> str:
        return f"{self.table_prefix}{self.name}{self.table_suffix}"


class Match(BaseModel):
    """A search hit reduced to id and similarity."""

    id: int = Field(description="Record identifier")
    similarity: float = Field(description="Cosine similarity to the query")
