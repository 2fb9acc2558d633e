"""Embedding service interface and implementations."""

import hashlib
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from sqlvec.config import EmbeddingSettings, get_settings
from sqlvec.embeddings.models import EmbeddingResult
from sqlvec.exceptions import EmbeddingError, ErrorCode
from sqlvec.logging_config import get_logger
from sqlvec.observability.metrics import track_embedding_request
from sqlvec.vectors.vectormath import mean_pool

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts.

        Args:
            texts: List of texts to embed.

        Returns:
            List of EmbeddingResult objects, one per text, in input order.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding dimensions."""
        ...

    @property
    @abstractmethod
    def max_input_length(self) -> int:
        """Longest text, in characters, embedded as a single segment."""
        ...

    @property
    @abstractmethod
    def model_identifier(self) -> str:
        """Stable hash of the model, stored as the vectors' model tag."""
        ...


class HTTPEmbeddingService(EmbeddingService):
    """Embedding service using HTTP API.

    Talks to OpenAI-style ``/embeddings`` endpoints, including
    text-embeddings-inference (TEI) servers. Responses carrying one vector
    per token are mean-pooled so every input text maps to one vector.
    """

    # Output sizes of common embedding models
    MODEL_DIMENSIONS = {
        "mixedbread-ai/mxbai-embed-large-v1": 1024,
        "BAAI/bge-large-en-v1.5": 1024,
        "BAAI/bge-base-en-v1.5": 768,
        "BAAI/bge-small-en-v1.5": 384,
        "sentence-transformers/all-MiniLM-L6-v2": 384,
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
    }
    DEFAULT_DIMENSIONS = 1024

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client to reuse. One is created lazily otherwise.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None
        self._learned_dimensions: int | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        return self._settings.model

    @property
    def dimensions(self) -> int:
        """Configured, learned or known dimensions, in that order."""
        if self._settings.dimensions is not None:
            return self._settings.dimensions
        if self._learned_dimensions is not None:
            return self._learned_dimensions
        return self.MODEL_DIMENSIONS.get(self._settings.model, self.DEFAULT_DIMENSIONS)

    @property
    def max_input_length(self) -> int:
        return self._settings.max_input_length

    @property
    def model_identifier(self) -> str:
        """MD5 of the model name and revision."""
        key = f"{self._settings.model}@{self._settings.model_revision}"
        return hashlib.md5(key.encode("utf-8")).hexdigest()

    @property
    def _endpoint(self) -> str:
        return f"{self._settings.base_url.rstrip('/')}/embeddings"

    async def embed(self, text: str) -> EmbeddingResult:
        """Embed one text as a single-item batch."""
        [result] = await self.embed_batch([text])
        return result

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed texts in requests of at most ``batch_size`` inputs.

        Raises:
            EmbeddingError: If any request fails; earlier batches are discarded.
        """
        if not texts:
            return []

        client = await self._get_client()
        batch_size = self._settings.batch_size
        results: list[EmbeddingResult] = []

        for start in range(0, len(texts), batch_size):
            batch = texts[start : start + batch_size]
            started = time.perf_counter()
            success = False
            try:
                payload = await self._post(client, batch)
                results.extend(self._parse(payload, batch))
                success = True
            finally:
                track_embedding_request(
                    model=self._settings.model,
                    duration=time.perf_counter() - started,
                    batch_size=len(batch),
                    success=success,
                )

        logger.debug(
            f"Embedded {len(texts)} texts",
            extra={"model": self._settings.model, "batches": -(-len(texts) // batch_size)},
        )
        return results

    async def _post(self, client: httpx.AsyncClient, batch: list[str]) -> Any:
        """Send one batch and return the decoded JSON body.

        Raises:
            EmbeddingError: On transport errors, error statuses or non-JSON bodies.
        """
        url = self._endpoint
        try:
            response = await client.post(
                url, json={"input": batch, "model": self._settings.model}
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(
                f"Embedding request failed: {status}",
                extra={"url": url, "status": status},
            )
            raise EmbeddingError(
                f"Embedding service returned {status}",
                details={"status_code": status},
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                details={"url": url},
            ) from e
        except ValueError as e:
            raise EmbeddingError(
                f"Embedding service returned invalid JSON: {e}",
                details={"url": url},
            ) from e

    def _parse(self, payload: Any, batch: list[str]) -> list[EmbeddingResult]:
        """Turn a response body into one result per input, in input order.

        Items are ordered by their ``index`` field when the server sends one.

        Raises:
            EmbeddingError: If the body is malformed or the counts differ.
        """
        try:
            items = list(payload["data"])
            if len(items) != len(batch):
                raise ValueError(f"expected {len(batch)} embeddings, got {len(items)}")
            if all("index" in item for item in items):
                items.sort(key=lambda item: item["index"])

            results = [
                self._to_result(text, item["embedding"]) for text, item in zip(batch, items)
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        if self._learned_dimensions is None and results:
            self._learned_dimensions = results[0].dimensions
        return results

    def _to_result(self, text: str, embedding: Any) -> EmbeddingResult:
        # Token-level output arrives as a matrix
        if embedding and isinstance(embedding[0], list):
            vector, tokens = mean_pool(embedding), len(embedding)
        else:
            vector, tokens = list(embedding), 1

        return EmbeddingResult(
            text=text,
            embedding=vector,
            model=self._settings.model,
            dimensions=len(vector),
            pooled_tokens=tokens,
        )
