"""Prometheus metrics for sqlvec.

Provides metrics instrumentation for:
- Vector store operation latency
- Two-phase search candidate counts and scores
- Embedding request latency and batch sizes
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

from sqlvec.logging_config import get_logger

logger = get_logger(__name__)

# Vector Store Metrics
VECTORSTORE_OPERATION_DURATION = Histogram(
    "vectorstore_operation_duration_seconds",
    "Vector store operation duration",
    ["operation", "status"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

VECTORSTORE_OPERATION_TOTAL = Counter(
    "vectorstore_operations_total",
    "Total vector store operations",
    ["operation", "status"],
)

# Search Metrics
SEARCH_CANDIDATES = Histogram(
    "search_candidates",
    "Coarse-filter candidates per search",
    buckets=[0, 1, 2, 5, 10, 20, 50, 100, 250],
)

SEARCH_TOP_SIMILARITY = Histogram(
    "search_top_similarity",
    "Best reranked similarity per search",
    buckets=[-0.5, 0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 0.95, 0.99, 1.0],
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Embedding batch size",
    ["model"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Content type to serve ``get_metrics()`` output with."""
    return CONTENT_TYPE_LATEST


def track_vectorstore_operation(
    operation: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track a vector store operation.

    Args:
        operation: Operation name (e.g. "search", "upsert").
        duration: Duration in seconds.
        success: Whether the operation succeeded.
    """
    status = "success" if success else "error"

    VECTORSTORE_OPERATION_DURATION.labels(operation=operation, status=status).observe(
        duration
    )
    VECTORSTORE_OPERATION_TOTAL.labels(operation=operation, status=status).inc()


@contextmanager
def timed_operation(operation: str) -> Iterator[None]:
    """Time the enclosed block as one vector store operation."""
    start_time = time.perf_counter()
    success = False
    try:
        yield
        success = True
    finally:
        track_vectorstore_operation(
            operation, time.perf_counter() - start_time, success=success
        )


def track_search(candidates: int, top_similarity: float | None) -> None:
    """Track two-phase search metrics.

    Args:
        candidates: Number of coarse-filter candidates.
        top_similarity: Best similarity after rerank, if any.
    """
    SEARCH_CANDIDATES.observe(candidates)
    if top_similarity is not None:
        SEARCH_TOP_SIMILARITY.observe(top_similarity)


def track_embedding_request(
    model: str,
    duration: float,
    batch_size: int,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        batch_size: Number of texts in the batch.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(model=model).observe(batch_size)
