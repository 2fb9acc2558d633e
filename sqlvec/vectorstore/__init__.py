"""Vector store module."""

from sqlvec.vectorstore.models import SearchResult, VectorRecord
from sqlvec.vectorstore.scoring import (
    ClientScoreProvider,
    ScoreProvider,
    ServerScoreProvider,
    score_provider_for,
)
from sqlvec.vectorstore.service import SQLVectorStore, VectorStore

__all__ = [
    "ClientScoreProvider",
    "ScoreProvider",
    "SearchResult",
    "ServerScoreProvider",
    "SQLVectorStore",
    "VectorRecord",
    "VectorStore",
    "score_provider_for",
]
