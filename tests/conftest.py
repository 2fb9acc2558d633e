"""Pytest configuration and shared fixtures."""

import hashlib
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from sqlvec.embeddings.models import EmbeddingResult
from sqlvec.embeddings.service import EmbeddingService
from sqlvec.vectorstore.service import SQLVectorStore


class FakeEmbedder(EmbeddingService):
    """Deterministic embedder for tests.

    Known segments map to fixed vectors; anything else is hashed into a
    vector, so equal texts always embed identically.
    """

    def __init__(
        self,
        dimensions: int = 8,
        identifier: str = "model-a",
        max_length: int = 64,
        vectors: dict[str, list[float]] | None = None,
    ) -> None:
        self._dimensions = dimensions
        self._identifier = identifier
        self._max_length = max_length
        self._vectors = vectors or {}
        self.calls: list[list[str]] = []

    def _vector_for(self, text: str) -> list[float]:
        if text in self._vectors:
            return self._vectors[text]
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [(digest[i % len(digest)] - 127.5) / 127.5 for i in range(self._dimensions)]

    async def embed(self, text: str) -> EmbeddingResult:
        return (await self.embed_batch([text]))[0]

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        self.calls.append(list(texts))
        return [
            EmbeddingResult(
                text=text,
                embedding=self._vector_for(text),
                model="fake",
                dimensions=self._dimensions,
            )
            for text in texts
        ]

    @property
    def model_name(self) -> str:
        return "fake"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def max_input_length(self) -> int:
        return self._max_length

    @property
    def model_identifier(self) -> str:
        return self._identifier


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite engine on a temporary database file.

    Yields:
        AsyncEngine for the test database.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'vectors.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
async def store(engine: AsyncEngine) -> SQLVectorStore:
    """Initialized four-dimensional store tagged ``model-a``."""
    store = SQLVectorStore(engine, "test", dimension=4, model_tag="model-a")
    await store.initialize()
    return store


@pytest.fixture
def make_embedder() -> Callable[..., FakeEmbedder]:
    """Factory for fake embedders."""
    return FakeEmbedder


@pytest.fixture
def embedder() -> FakeEmbedder:
    """Eight-dimensional fake embedder tagged ``model-a``."""
    return FakeEmbedder()
