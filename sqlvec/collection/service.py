"""Text-level operations over a vector category."""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncEngine

from sqlvec.collection.models import CategoryHandle, Match
from sqlvec.collection.pooling import embed_text
from sqlvec.config import VectorSettings, get_settings
from sqlvec.embeddings.service import EmbeddingService
from sqlvec.exceptions import NotFoundError
from sqlvec.logging_config import get_logger
from sqlvec.vectorstore.models import SearchResult, VectorRecord
from sqlvec.vectorstore.service import SQLVectorStore

logger = get_logger(__name__)


class VectorCollection:
    """Stores and searches texts in one category.

    The category is fixed per instance; ``using_category`` and the other
    ``with_*`` methods return new collections sharing the same engine and
    embedder. The category table is created on first use.

    An instance caches its store and is meant for one logical session;
    share it between concurrent callers only with external locking.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        embedder: EmbeddingService,
        handle: CategoryHandle | None = None,
        settings: VectorSettings | None = None,
    ) -> None:
        """Initialize the collection.

        Args:
            engine: Async SQLAlchemy engine.
            embedder: Embedding service producing the vectors.
            handle: Category to work on. Built from settings if not provided.
            settings: Vector settings. Uses defaults if not provided.
        """
        self._engine = engine
        self._embedder = embedder
        self._settings = settings or get_settings().vector
        self._handle = handle or CategoryHandle(
            name=self._settings.category,
            dimension=self._settings.dimension,
            engine=self._settings.engine,
            table_prefix=self._settings.table_prefix,
            table_suffix=self._settings.table_suffix,
        )
        self._store: SQLVectorStore | None = None
        self._initialized = False
        self._dimension = self._handle.dimension

    @property
    def handle(self) -> CategoryHandle:
        return self._handle

    @property
    def dimension(self) -> int:
        """Category dimension, falling back to the embedder's.

        Without a fixed dimension this is the width of the first embedding
        once one has been made, and the embedder's advertised width before.
        """
        return self._dimension or self._embedder.dimensions

    def _with_handle(self, **changes: object) -> "VectorCollection":
        handle = CategoryHandle.model_validate(
            {**self._handle.model_dump(), **changes}
        )
        return VectorCollection(self._engine, self._embedder, handle, self._settings)

    def using_category(self, name: str) -> "VectorCollection":
        """Collection for another category."""
        return self._with_handle(name=name)

    def with_dimension(self, dimension: int) -> "VectorCollection":
        return self._with_handle(dimension=dimension)

    def with_engine(self, engine: str) -> "VectorCollection":
        return self._with_handle(engine=engine)

    def with_table_affixes(self, prefix: str, suffix: str = "") -> "VectorCollection":
        return self._with_handle(table_prefix=prefix, table_suffix=suffix)

    async def _get_store(self, initialize: bool = True) -> SQLVectorStore:
        if self._store is None:
            self._store = SQLVectorStore(
                self._engine,
                self._handle.name,
                await self._resolve_dimension(),
                storage_engine=self._handle.engine,
                table_prefix=self._handle.table_prefix,
                table_suffix=self._handle.table_suffix,
                model_tag=self._embedder.model_identifier,
                scoring=self._settings.scoring,
            )
        if initialize and not self._initialized:
            await self._store.initialize(if_not_exists=True)
            self._initialized = True
        return self._store

    async def _resolve_dimension(self) -> int:
        if self._dimension is None:
            # Unknown models only reveal their width in a response
            result = await self._embedder.embed("")
            self._dimension = result.dimensions
        return self._dimension

    async def _embed(self, text: str, normalized: bool = False) -> list[float]:
        vector = await embed_text(self._embedder, text, self._dimension, normalized)
        if self._dimension is None:
            self._dimension = len(vector)
        return vector

    async def category_exists(self) -> bool:
        store = await self._get_store(initialize=False)
        return await store.exists()

    async def recreate(self) -> None:
        """Drop the category table and create it again, empty."""
        store = await self._get_store(initialize=False)
        await store.drop()
        self._initialized = False
        await self._get_store()

    async def destroy(self) -> None:
        """Drop the category table."""
        store = await self._get_store(initialize=False)
        await store.drop()
        self._initialized = False

    async def _find_duplicate(self, vector: Sequence[float]) -> int | None:
        store = await self._get_store()
        nearest = await store.search(vector, 1)
        if not nearest or nearest[0].similarity < self._settings.duplicate_threshold:
            return None
        return nearest[0].id

    async def id_of_text(self, text: str) -> int | None:
        """Id of an already stored text, or None."""
        return await self._find_duplicate(await self._embed(text))

    async def store(self, text: str) -> int:
        """Store a text, reusing the id of an identical stored text.

        Returns:
            Id of the new or existing record.
        """
        vector = await self._embed(text)

        existing = await self._find_duplicate(vector)
        if existing is not None:
            logger.debug(f"Text already stored as {existing}")
            return existing

        store = await self._get_store()
        return await store.upsert(vector)

    async def store_batch(self, texts: Sequence[str]) -> list[int]:
        """Store many texts in one transaction, without duplicate checks."""
        vectors = [await self._embed(text) for text in texts]
        store = await self._get_store()
        return await store.batch_insert(vectors)

    async def update(self, id: int, text: str) -> None:
        """Replace the vector stored at ``id`` with the embedding of ``text``."""
        vector = await self._embed(text)
        store = await self._get_store()
        await store.upsert(vector, id=id)

    async def get_by_ids(
        self,
        ids: Sequence[int],
        include_outdated: bool = False,
    ) -> list[VectorRecord]:
        store = await self._get_store()
        return await store.select(ids, include_outdated=include_outdated)

    async def delete_by_id(self, id: int) -> None:
        store = await self._get_store()
        await store.delete(id)

    async def count(self) -> int:
        store = await self._get_store()
        return await store.count()

    def _limit(self, limit: int | None) -> int:
        return limit if limit is not None else self._settings.search_limit

    def _to_matches(self, results: list[SearchResult]) -> list[Match]:
        return [Match(id=r.id, similarity=r.similarity) for r in results]

    async def search(self, text: str, limit: int | None = None) -> list[Match]:
        """Find the stored texts most similar to ``text``."""
        vector = await self._embed(text)
        store = await self._get_store()
        results = await store.search(vector, self._limit(limit))
        return self._to_matches(results)

    async def _require_record(self, id: int) -> VectorRecord:
        store = await self._get_store()
        records = await store.select([id])
        if not records:
            raise NotFoundError(
                f"Vector with id {id} not found",
                details={"id": id, "category": self._handle.name},
            )
        return records[0]

    async def search_by_id(self, id: int, limit: int | None = None) -> list[Match]:
        """Find the records most similar to the one stored at ``id``.

        Raises:
            NotFoundError: If ``id`` is not stored under the current model.
        """
        record = await self._require_record(id)
        store = await self._get_store()
        results = await store.search(record.vector, self._limit(limit))
        return self._to_matches(results)

    async def similarity(self, text_a: str, text_b: str) -> float:
        """Exact cosine similarity of two texts."""
        vector_a = await self._embed(text_a, normalized=True)
        vector_b = await self._embed(text_b, normalized=True)
        store = await self._get_store()
        return await store.cosine(vector_a, vector_b)

    async def similarity_to_id(self, text: str, id: int) -> float:
        """Exact cosine similarity of a text and a stored record.

        Raises:
            NotFoundError: If ``id`` is not stored under the current model.
        """
        vector = await self._embed(text, normalized=True)
        record = await self._require_record(id)
        store = await self._get_store()
        return await store.cosine(vector, record.normalized_vector)
