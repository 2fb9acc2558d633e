"""Observability module for metrics and monitoring."""

from sqlvec.observability.metrics import (
    get_metrics,
    get_metrics_content_type,
    timed_operation,
    track_embedding_request,
    track_search,
    track_vectorstore_operation,
)

__all__ = [
    "get_metrics",
    "get_metrics_content_type",
    "timed_operation",
    "track_embedding_request",
    "track_search",
    "track_vectorstore_operation",
]
