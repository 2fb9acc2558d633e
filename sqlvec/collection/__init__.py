"""Text-level vector collection."""

from sqlvec.collection.models import CategoryHandle, Match
from sqlvec.collection.pooling import embed_text, segment_text
from sqlvec.collection.service import VectorCollection

__all__ = [
    "CategoryHandle",
    "Match",
    "VectorCollection",
    "embed_text",
    "segment_text",
]
