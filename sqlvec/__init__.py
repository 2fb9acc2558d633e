"""Two-phase vector similarity search over a relational store."""

__version__ = "0.1.0"

from sqlvec.collection import CategoryHandle, Match, VectorCollection  # noqa: E402
from sqlvec.database import create_engine_from_settings  # noqa: E402
from sqlvec.vectorstore import SearchResult, SQLVectorStore, VectorRecord  # noqa: E402

__all__ = [
    "CategoryHandle",
    "Match",
    "SQLVectorStore",
    "SearchResult",
    "VectorCollection",
    "VectorRecord",
    "__version__",
    "create_engine_from_settings",
]
