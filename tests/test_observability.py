"""Tests for observability module."""

import pytest
from prometheus_client import REGISTRY

from sqlvec.exceptions import NotFoundError
from sqlvec.observability import (
    get_metrics,
    get_metrics_content_type,
    timed_operation,
    track_embedding_request,
    track_search,
    track_vectorstore_operation,
)
from sqlvec.vectorstore.service import SQLVectorStore


def _operations(operation: str, status: str) -> float:
    value = REGISTRY.get_sample_value(
        "vectorstore_operations_total",
        {"operation": operation, "status": status},
    )
    return value or 0.0


class TestMetricsFunctions:
    """Tests for metrics tracking functions."""

    def test_get_metrics_returns_bytes(self) -> None:
        """get_metrics returns bytes."""
        metrics = get_metrics()
        assert isinstance(metrics, bytes)

    def test_content_type(self) -> None:
        """Metrics are served as Prometheus text."""
        assert "text/plain" in get_metrics_content_type()

    def test_track_vectorstore_operation(self) -> None:
        """track_vectorstore_operation counts by status."""
        before = _operations("lookup", "error")

        track_vectorstore_operation("lookup", 0.01, success=False)

        assert _operations("lookup", "error") == before + 1
        assert "vectorstore_operation_duration_seconds" in get_metrics().decode()

    def test_timed_operation_success(self) -> None:
        """A block that completes is counted as success."""
        before = _operations("timed", "success")

        with timed_operation("timed"):
            pass

        assert _operations("timed", "success") == before + 1

    def test_timed_operation_failure(self) -> None:
        """A block that raises is counted as error and the error propagates."""
        before = _operations("timed", "error")

        with pytest.raises(RuntimeError):
            with timed_operation("timed"):
                raise RuntimeError("boom")

        assert _operations("timed", "error") == before + 1

    def test_track_search(self) -> None:
        """track_search records candidates and best score."""
        before = REGISTRY.get_sample_value("search_candidates_count") or 0.0

        track_search(candidates=5, top_similarity=0.95)
        track_search(candidates=0, top_similarity=None)

        assert REGISTRY.get_sample_value("search_candidates_count") == before + 2
        assert "search_top_similarity" in get_metrics().decode()

    def test_track_embedding_request(self) -> None:
        """track_embedding_request records request."""
        track_embedding_request(
            model="bge-large",
            duration=0.1,
            batch_size=10,
            success=True,
        )

        metrics = get_metrics().decode()
        assert "embedding_request_duration_seconds" in metrics
        assert "embedding_batch_size" in metrics


class TestStoreInstrumentation:
    """Tests for metrics emitted by the vector store."""

    @pytest.mark.asyncio
    async def test_search_is_timed(self, store: SQLVectorStore) -> None:
        """Each search is counted once."""
        before = _operations("search", "success")

        await store.search([1.0, 0.0, 0.0, 0.0], n=1)

        assert _operations("search", "success") == before + 1

    @pytest.mark.asyncio
    async def test_failed_upsert_is_counted(self, store: SQLVectorStore) -> None:
        """Failed operations are counted as errors."""
        before = _operations("upsert", "error")

        with pytest.raises(NotFoundError):
            await store.upsert([1.0, 0.0, 0.0, 0.0], id=404)

        assert _operations("upsert", "error") == before + 1
