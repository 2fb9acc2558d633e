"""Embedding data models."""

from pydantic import BaseModel, Field, model_validator


class EmbeddingResult(BaseModel):
    """One text's vector as returned by the embedding service.

    Backends that answer with one vector per token are pooled before the
    result is built; ``pooled_tokens`` records how many vectors went in.

    Attributes:
        text: The segment that was embedded.
        embedding: The (pooled) embedding vector.
        model: The model used to generate the embedding.
        dimensions: Number of dimensions in the embedding.
        pooled_tokens: Token vectors averaged into ``embedding``.
    """

    text: str = Field(description="Embedded segment")
    embedding: list[float] = Field(description="Embedding vector")
    model: str = Field(description="Model used for embedding")
    dimensions: int = Field(description="Vector dimensions")
    pooled_tokens: int = Field(default=1, ge=1, description="Token vectors pooled")

    @model_validator(mode="after")
    def check_dimensions(self) -> "EmbeddingResult":
        if self.dimensions != len(self.embedding):
            raise ValueError(
                f"dimensions ({self.dimensions}) does not match "
                f"embedding length ({len(self.embedding)})"
            )
        return self
