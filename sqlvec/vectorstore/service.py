"""Vector store interface and SQL implementation."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, delete, func, insert, inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from sqlvec.config import ScoringMode
from sqlvec.exceptions import (
    DimensionMismatchError,
    ErrorCode,
    InvalidStateError,
    NotFoundError,
    SchemaError,
    StoreError,
    ValidationError,
)
from sqlvec.logging_config import get_logger
from sqlvec.observability.metrics import timed_operation, track_search
from sqlvec.vectors import quantizer, vectormath
from sqlvec.vectorstore.models import SearchResult, VectorRecord
from sqlvec.vectorstore.schema import build_vector_table
from sqlvec.vectorstore.scoring import ScoreProvider, score_provider_for

logger = get_logger(__name__)


class VectorStore(ABC):
    """Abstract base class for vector stores.

    A store owns the records of one category, all of dimension D.
    """

    @abstractmethod
    async def initialize(self, if_not_exists: bool = True) -> None:
        """Create the category schema.

        Args:
            if_not_exists: Leave an existing schema in place instead of failing.

        Raises:
            SchemaError: If creation fails. Nothing is left half-created.
        """
        ...

    @abstractmethod
    async def upsert(
        self,
        vector: Sequence[float],
        id: int | None = None,
        model_tag: str | None = None,
    ) -> int:
        """Insert a vector, or overwrite the record with ``id``.

        Args:
            vector: Raw vector of length D.
            id: Existing record to overwrite.
            model_tag: Tag to store (defaults to the active tag).

        Returns:
            The record id.

        Raises:
            DimensionMismatchError: If the vector length is not D.
            NotFoundError: If ``id`` matches no record.
            StoreError: If the store call fails.
        """
        ...

    @abstractmethod
    async def batch_insert(
        self,
        vectors: Sequence[Sequence[float]],
        model_tag: str | None = None,
    ) -> list[int]:
        """Insert many vectors atomically.

        Returns:
            Ids in input order.

        Raises:
            DimensionMismatchError: If any vector length is not D.
            StoreError: If any insert fails. Nothing is committed.
        """
        ...

    @abstractmethod
    async def select(
        self,
        ids: Sequence[int],
        include_outdated: bool = False,
    ) -> list[VectorRecord]:
        """Fetch records by id. Missing ids are skipped."""
        ...

    @abstractmethod
    async def select_all(self, include_outdated: bool = False) -> list[VectorRecord]:
        """Fetch every record."""
        ...

    @abstractmethod
    async def delete(self, id: int) -> None:
        """Remove a record. Unknown ids are ignored."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Number of stored records, regardless of tag."""
        ...

    @abstractmethod
    async def search(
        self,
        vector: Sequence[float],
        n: int = 10,
        include_outdated: bool = False,
    ) -> list[SearchResult]:
        """Two-phase similarity search.

        Args:
            vector: Query vector of length D.
            n: Number of results.
            include_outdated: Also consider records with another model tag.

        Returns:
            Up to ``n`` hits ordered by descending similarity.

        Raises:
            DimensionMismatchError: If the query length is not D.
            StoreError: If either phase fails.
        """
        ...

    @abstractmethod
    async def cosine(self, a: Sequence[float], b: Sequence[float]) -> float:
        """Cosine similarity of two vectors using the search scorer."""
        ...


class SQLVectorStore(VectorStore):
    """Vector store backed by one relational table per category.

    Search narrows the table to ``n`` candidates by Hamming distance over
    sign-bit codes, then reranks only those by exact cosine similarity.
    Candidates are not over-fetched, so a true neighbour lost in the
    coarse filter stays lost.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        category: str,
        dimension: int,
        *,
        storage_engine: str = "InnoDB",
        table_prefix: str = "vectors_",
        table_suffix: str = "",
        model_tag: str | None = None,
        score_provider: ScoreProvider | None = None,
        scoring: ScoringMode = ScoringMode.AUTO,
    ) -> None:
        """Initialize the store.

        Args:
            engine: Async SQLAlchemy engine.
            category: Category name.
            dimension: Vector dimension D.
            storage_engine: MySQL storage engine for the table.
            table_prefix: Table name prefix.
            table_suffix: Table name suffix.
            model_tag: Active model tag; ``None`` disables tag filtering.
            score_provider: Scoring capability (chosen from the dialect if omitted).
            scoring: Scoring placement used when choosing a provider.
        """
        if dimension < 1:
            raise ValidationError(
                f"Dimension must be positive, got {dimension}",
                details={"dimension": dimension},
            )

        self._engine = engine
        self._category = category
        self._dimension = dimension
        self._model_tag = model_tag
        self._table_name = f"{table_prefix}{category}{table_suffix}"
        self._table = build_vector_table(self._table_name, dimension, storage_engine)
        self._score_provider = score_provider or score_provider_for(
            engine.dialect.name, scoring
        )
        self._ready = False

    @property
    def category(self) -> str:
        return self._category

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def model_tag(self) -> str | None:
        """Tag of the model whose vectors count as current."""
        return self._model_tag

    def set_model_tag(self, model_tag: str | None) -> None:
        self._model_tag = model_tag

    def _details(self, **extra: Any) -> dict[str, Any]:
        return {"table": self._table_name, **extra}

    def _store_error(self, action: str, e: Exception) -> StoreError:
        logger.error(f"Failed to {action}: {e}", extra=self._details())
        return StoreError(
            f"Failed to {action}: {e}",
            details=self._details(error=str(e)),
        )

    def _check_dimension(self, vector: Sequence[float]) -> None:
        if len(vector) != self._dimension:
            raise DimensionMismatchError(
                expected=self._dimension,
                actual=len(vector),
                details={"table": self._table_name},
            )

    def _derive(
        self,
        vector: Sequence[float],
        model_tag: str | None,
    ) -> dict[str, Any]:
        """Column values for a raw vector. Derived fields are always recomputed together."""
        self._check_dimension(vector)
        raw = [float(value) for value in vector]
        norm = vectormath.magnitude(raw)
        normalized = vectormath.normalize(raw, norm)
        return {
            "vector": raw,
            "normalized_vector": normalized,
            "magnitude": norm,
            "binary_code": quantizer.encode(normalized),
            "model_tag": model_tag if model_tag is not None else self._model_tag,
        }

    def _filter_outdated(self, stmt: Select, include_outdated: bool) -> Select:
        if self._model_tag is not None and not include_outdated:
            stmt = stmt.where(self._table.c.model_tag == self._model_tag)
        return stmt

    async def _ensure_ready(self) -> None:
        if self._ready:
            return
        if not await self.exists():
            raise InvalidStateError(
                f"Category is not initialized: {self._category}",
                details=self._details(category=self._category),
            )
        self._ready = True

    async def exists(self) -> bool:
        """Check whether the category table exists."""
        try:
            async with self._engine.connect() as conn:
                return await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).has_table(self._table_name)
                )
        except SQLAlchemyError as e:
            raise self._store_error("check table", e) from e

    async def initialize(self, if_not_exists: bool = True) -> None:
        """Create the table, its code index and the scoring capability."""
        with timed_operation("initialize"):
            try:
                async with self._engine.begin() as conn:
                    await conn.run_sync(self._table.create, checkfirst=if_not_exists)
                    await self._score_provider.install(conn)
            except SQLAlchemyError as e:
                logger.error(f"Failed to create schema: {e}", extra=self._details())
                raise SchemaError(
                    f"Failed to create schema for {self._category}: {e}",
                    details=self._details(error=str(e)),
                ) from e

        self._ready = True
        logger.info(
            f"Initialized category: {self._category}",
            extra=self._details(dimension=self._dimension),
        )

    async def drop(self) -> None:
        """Drop the category table if it exists."""
        with timed_operation("drop"):
            try:
                async with self._engine.begin() as conn:
                    await conn.run_sync(self._table.drop, checkfirst=True)
            except SQLAlchemyError as e:
                logger.error(f"Failed to drop table: {e}", extra=self._details())
                raise SchemaError(
                    f"Failed to drop category {self._category}: {e}",
                    details=self._details(error=str(e)),
                ) from e

        self._ready = False
        logger.info(f"Dropped category: {self._category}", extra=self._details())

    async def upsert(
        self,
        vector: Sequence[float],
        id: int | None = None,
        model_tag: str | None = None,
    ) -> int:
        values = self._derive(vector, model_tag)

        with timed_operation("upsert"):
            await self._ensure_ready()
            try:
                async with self._engine.begin() as conn:
                    if id is None:
                        result = await conn.execute(insert(self._table).values(**values))
                        record_id = int(result.inserted_primary_key[0])
                    else:
                        result = await conn.execute(
                            update(self._table)
                            .where(self._table.c.id == id)
                            .values(**values)
                        )
                        if result.rowcount == 0:
                            raise NotFoundError(
                                f"Vector with id {id} not found",
                                details=self._details(id=id),
                            )
                        record_id = id
            except SQLAlchemyError as e:
                raise self._store_error("upsert vector", e) from e

        logger.debug(f"Upserted vector {record_id}", extra=self._details())
        return record_id

    async def batch_insert(
        self,
        vectors: Sequence[Sequence[float]],
        model_tag: str | None = None,
    ) -> list[int]:
        if not vectors:
            return []

        rows = [self._derive(vector, model_tag) for vector in vectors]

        with timed_operation("batch_insert"):
            await self._ensure_ready()
            ids: list[int] = []
            try:
                async with self._engine.begin() as conn:
                    for values in rows:
                        result = await conn.execute(insert(self._table).values(**values))
                        ids.append(int(result.inserted_primary_key[0]))
            except SQLAlchemyError as e:
                raise self._store_error("batch insert vectors", e) from e

        logger.debug(f"Inserted {len(ids)} vectors", extra=self._details())
        return ids

    def _to_record(self, row: Any) -> VectorRecord:
        return VectorRecord(
            id=row.id,
            vector=row.vector,
            normalized_vector=row.normalized_vector,
            magnitude=row.magnitude,
            binary_code=bytes(row.binary_code),
            model_tag=row.model_tag,
            created_at=row.created_at,
        )

    async def _fetch(self, stmt: Select, action: str) -> list[VectorRecord]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                return [self._to_record(row) for row in result]
        except SQLAlchemyError as e:
            raise self._store_error(action, e) from e

    async def select(
        self,
        ids: Sequence[int],
        include_outdated: bool = False,
    ) -> list[VectorRecord]:
        if not ids:
            return []

        with timed_operation("select"):
            await self._ensure_ready()
            stmt = (
                select(self._table)
                .where(self._table.c.id.in_(list(ids)))
                .order_by(self._table.c.id)
            )
            stmt = self._filter_outdated(stmt, include_outdated)
            return await self._fetch(stmt, "select vectors")

    async def select_all(self, include_outdated: bool = False) -> list[VectorRecord]:
        with timed_operation("select_all"):
            await self._ensure_ready()
            stmt = select(self._table).order_by(self._table.c.id)
            stmt = self._filter_outdated(stmt, include_outdated)
            return await self._fetch(stmt, "select vectors")

    async def delete(self, id: int) -> None:
        with timed_operation("delete"):
            await self._ensure_ready()
            try:
                async with self._engine.begin() as conn:
                    await conn.execute(delete(self._table).where(self._table.c.id == id))
            except SQLAlchemyError as e:
                raise self._store_error("delete vector", e) from e

        logger.debug(f"Deleted vector {id}", extra=self._details())

    async def count(self) -> int:
        with timed_operation("count"):
            await self._ensure_ready()
            try:
                async with self._engine.connect() as conn:
                    result = await conn.execute(
                        select(func.count()).select_from(self._table)
                    )
                    return int(result.scalar_one())
            except SQLAlchemyError as e:
                raise self._store_error("count vectors", e) from e

    async def search(
        self,
        vector: Sequence[float],
        n: int = 10,
        include_outdated: bool = False,
    ) -> list[SearchResult]:
        self._check_dimension(vector)
        if n < 1:
            raise ValidationError(
                f"Search limit must be positive, got {n}",
                details=self._details(n=n),
            )

        normalized = vectormath.normalize(vector)
        code = quantizer.encode(normalized)
        model_tag = None if include_outdated else self._model_tag

        with timed_operation("search"):
            await self._ensure_ready()
            try:
                async with self._engine.connect() as conn:
                    candidates = await self._score_provider.hamming_candidates(
                        conn, self._table, code, n, model_tag
                    )
                    if not candidates:
                        track_search(0, None)
                        return []

                    results = await self._score_provider.score_candidates(
                        conn, self._table, candidates, normalized
                    )
            except SQLAlchemyError as e:
                raise self._store_error("search", e) from e

        track_search(len(candidates), results[0].similarity if results else None)
        logger.debug(
            f"Search returned {len(results)} results",
            extra=self._details(n=n, candidates=len(candidates)),
        )
        return results[:n]

    async def cosine(self, a: Sequence[float], b: Sequence[float]) -> float:
        """Cosine similarity of two vectors.

        Both are normalized first and then scored the way search reranks.

        Raises:
            DimensionMismatchError: If the vectors differ in length.
            ValidationError: If either vector has zero magnitude.
        """
        if len(a) != len(b):
            raise DimensionMismatchError(expected=len(a), actual=len(b))

        norm_a = vectormath.magnitude(a)
        norm_b = vectormath.magnitude(b)
        if norm_a == 0 or norm_b == 0:
            raise ValidationError(
                "Cosine similarity is undefined for a zero-magnitude vector",
                code=ErrorCode.ZERO_MAGNITUDE,
            )

        with timed_operation("cosine"):
            try:
                async with self._engine.connect() as conn:
                    return await self._score_provider.similarity(
                        conn,
                        vectormath.normalize(a, norm_a),
                        vectormath.normalize(b, norm_b),
                    )
            except SQLAlchemyError as e:
                raise self._store_error("compute similarity", e) from e
