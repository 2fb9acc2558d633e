"""Text-to-vector services used by collections."""

from sqlvec.embeddings.models import EmbeddingResult
from sqlvec.embeddings.service import EmbeddingService, HTTPEmbeddingService

__all__ = ["EmbeddingResult", "EmbeddingService", "HTTPEmbeddingService"]
