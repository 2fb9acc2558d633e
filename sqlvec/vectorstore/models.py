"""Vector store data models."""

from datetime import datetime

from pydantic import BaseModel, Field


class VectorRecord(BaseModel):
    """A stored embedding with its derived fields.

    Attributes:
        id: Identifier assigned by the store.
        vector: Raw embedding as inserted.
        normalized_vector: Unit-length copy of ``vector``.
        magnitude: Euclidean norm used for normalization.
        binary_code: Packed sign bits of ``normalized_vector``.
        model_tag: Identifier of the model that produced ``vector``.
        created_at: Creation timestamp.
    """

    id: int = Field(description="Record identifier")
    vector: list[float] = Field(description="Raw embedding vector")
    normalized_vector: list[float] = Field(description="Unit-length vector")
    magnitude: float = Field(description="Euclidean norm of the raw vector")
    binary_code: bytes = Field(description="Sign-bit code")
    model_tag: str | None = Field(default=None, description="Embedding model tag")
    created_at: datetime | None = Field(default=None, description="Creation time")


class SearchResult(BaseModel):
    """A reranked hit from a two-phase search.

    Attributes:
        id: Record identifier.
        vector: Stored raw vector.
        normalized_vector: Stored unit-length vector.
        magnitude: Stored magnitude.
        similarity: Cosine similarity to the query (higher is more similar).
    """

    id: int = Field(description="Record identifier")
    vector: list[float] = Field(description="Raw embedding vector")
    normalized_vector: list[float] = Field(description="Unit-length vector")
    magnitude: float = Field(description="Euclidean norm of the raw vector")
    similarity: float = Field(description="Cosine similarity to the query")
