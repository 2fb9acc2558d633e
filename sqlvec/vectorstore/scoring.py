"""Similarity scoring for the two phases of search.

A score provider decides where Hamming distances and cosine scores are
computed: in Python over pulled rows, or inside the database.
"""

import heapq
import json
from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy import LargeBinary, Table, bindparam, func, select, text
from sqlalchemy.ext.asyncio import AsyncConnection

from sqlvec.config import ScoringMode
from sqlvec.exceptions import ConfigurationError
from sqlvec.logging_config import get_logger
from sqlvec.vectors import vectormath
from sqlvec.vectors.quantizer import hamming_distance
from sqlvec.vectorstore.models import SearchResult

logger = get_logger(__name__)

SERVER_SCORING_DIALECTS = frozenset({"mysql", "mariadb"})


def rank_by_similarity(
    results: Sequence[SearchResult],
    candidate_ids: Sequence[int],
) -> list[SearchResult]:
    """Order hits by descending similarity.

    Hits are first put in candidate order so that equal similarities keep
    their coarse-filter order.
    """
    position = {record_id: i for i, record_id in enumerate(candidate_ids)}
    in_candidate_order = sorted(results, key=lambda r: position[r.id])
    return sorted(in_candidate_order, key=lambda r: r.similarity, reverse=True)


class ScoreProvider(ABC):
    """Scoring capability used by the vector store."""

    @abstractmethod
    async def install(self, conn: AsyncConnection) -> None:
        """Ensure any server-side scoring objects exist.

        Runs inside the schema initialization transaction.
        """
        ...

    @abstractmethod
    async def hamming_candidates(
        self,
        conn: AsyncConnection,
        table: Table,
        code: bytes,
        n: int,
        model_tag: str | None = None,
    ) -> list[int]:
        """Ids of the ``n`` records whose codes are closest to ``code``.

        Args:
            conn: Open connection.
            table: Category table.
            code: Query binary code.
            n: Number of candidates.
            model_tag: Restrict to this tag when given.

        Returns:
            Ids ordered by Hamming distance, ties by ascending id.
        """
        ...

    @abstractmethod
    async def score_candidates(
        self,
        conn: AsyncConnection,
        table: Table,
        candidate_ids: Sequence[int],
        query: Sequence[float],
    ) -> list[SearchResult]:
        """Rerank candidates by cosine similarity to a normalized query.

        Returns:
            Hits ordered by descending similarity.
        """
        ...

    @abstractmethod
    async def similarity(
        self,
        conn: AsyncConnection,
        a: Sequence[float],
        b: Sequence[float],
    ) -> float:
        """Similarity of two normalized vectors."""
        ...


class ClientScoreProvider(ScoreProvider):
    """Pulls rows and scores them in Python.

    Works with every dialect.
    """

    async def install(self, conn: AsyncConnection) -> None:
        """Nothing to install."""

    async def hamming_candidates(
        self,
        conn: AsyncConnection,
        table: Table,
        code: bytes,
        n: int,
        model_tag: str | None = None,
    ) -> list[int]:
        stmt = select(table.c.id, table.c.binary_code).order_by(table.c.id)
        if model_tag is not None:
            stmt = stmt.where(table.c.model_tag == model_tag)

        result = await conn.execute(stmt)
        distances = (
            (hamming_distance(bytes(row.binary_code), code), row.id) for row in result
        )
        return [record_id for _, record_id in heapq.nsmallest(n, distances)]

    async def score_candidates(
        self,
        conn: AsyncConnection,
        table: Table,
        candidate_ids: Sequence[int],
        query: Sequence[float],
    ) -> list[SearchResult]:
        if not candidate_ids:
            return []

        stmt = select(
            table.c.id,
            table.c.vector,
            table.c.normalized_vector,
            table.c.magnitude,
        ).where(table.c.id.in_(list(candidate_ids)))

        result = await conn.execute(stmt)
        hits = [
            SearchResult(
                id=row.id,
                vector=row.vector,
                normalized_vector=row.normalized_vector,
                magnitude=row.magnitude,
                similarity=vectormath.dot(query, row.normalized_vector),
            )
            for row in result
        ]
        return rank_by_similarity(hits, candidate_ids)

    async def similarity(
        self,
        conn: AsyncConnection,
        a: Sequence[float],
        b: Sequence[float],
    ) -> float:
        return vectormath.dot(a, b)


class ServerScoreProvider(ScoreProvider):
    """Scores inside MySQL/MariaDB.

    Hamming distance uses ``BIT_COUNT`` over XOR-ed binary strings; cosine
    scores use a ``COSIM`` stored function over the JSON vector columns.
    """

    FUNCTION_NAME = "COSIM"

    CREATE_FUNCTION = (
        "CREATE FUNCTION COSIM(v1 JSON, v2 JSON) RETURNS DOUBLE DETERMINISTIC "
        "BEGIN "
        "DECLARE sim DOUBLE DEFAULT 0; "
        "DECLARE i INT DEFAULT 0; "
        "DECLARE len INT DEFAULT JSON_LENGTH(v1); "
        "IF JSON_LENGTH(v1) != JSON_LENGTH(v2) THEN RETURN NULL; END IF; "
        "WHILE i < len DO "
        "SET sim = sim + (JSON_EXTRACT(v1, CONCAT('$[', i, ']')) "
        "* JSON_EXTRACT(v2, CONCAT('$[', i, ']'))); "
        "SET i = i + 1; "
        "END WHILE; "
        "RETURN sim; "
        "END"
    )

    async def install(self, conn: AsyncConnection) -> None:
        await conn.execute(text(f"DROP FUNCTION IF EXISTS {self.FUNCTION_NAME}"))
        await conn.execute(text(self.CREATE_FUNCTION))
        logger.debug(f"Installed {self.FUNCTION_NAME} function")

    async def hamming_candidates(
        self,
        conn: AsyncConnection,
        table: Table,
        code: bytes,
        n: int,
        model_tag: str | None = None,
    ) -> list[int]:
        query_code = bindparam("query_code", code, type_=LargeBinary)
        distance = func.bit_count(table.c.binary_code.op("^")(query_code)).label(
            "hamming_distance"
        )
        stmt = select(table.c.id, distance)
        if model_tag is not None:
            stmt = stmt.where(table.c.model_tag == model_tag)
        stmt = stmt.order_by(distance, table.c.id).limit(n)

        result = await conn.execute(stmt)
        return [row.id for row in result]

    async def score_candidates(
        self,
        conn: AsyncConnection,
        table: Table,
        candidate_ids: Sequence[int],
        query: Sequence[float],
    ) -> list[SearchResult]:
        if not candidate_ids:
            return []

        similarity = getattr(func, self.FUNCTION_NAME)(
            table.c.normalized_vector, json.dumps(list(query))
        ).label("similarity")
        stmt = select(
            table.c.id,
            table.c.vector,
            table.c.normalized_vector,
            table.c.magnitude,
            similarity,
        ).where(table.c.id.in_(list(candidate_ids)))

        result = await conn.execute(stmt)
        hits = [
            SearchResult(
                id=row.id,
                vector=row.vector,
                normalized_vector=row.normalized_vector,
                magnitude=row.magnitude,
                similarity=float(row.similarity),
            )
            for row in result
        ]
        return rank_by_similarity(hits, candidate_ids)

    async def similarity(
        self,
        conn: AsyncConnection,
        a: Sequence[float],
        b: Sequence[float],
    ) -> float:
        stmt = select(
            getattr(func, self.FUNCTION_NAME)(json.dumps(list(a)), json.dumps(list(b)))
        )
        result = await conn.execute(stmt)
        return float(result.scalar_one())


def score_provider_for(
    dialect_name: str,
    mode: ScoringMode = ScoringMode.AUTO,
) -> ScoreProvider:
    """Pick the score provider for a database dialect.

    Args:
        dialect_name: SQLAlchemy dialect name (e.g. "sqlite", "mysql").
        mode: Requested scoring placement.

    Returns:
        A score provider instance.

    Raises:
        ConfigurationError: If server scoring is forced on an unsupported dialect.
    """
    if mode == ScoringMode.CLIENT:
        return ClientScoreProvider()

    supported = dialect_name in SERVER_SCORING_DIALECTS
    if mode == ScoringMode.SERVER and not supported:
        raise ConfigurationError(
            f"Server-side scoring is not available for {dialect_name}",
            details={"dialect": dialect_name},
        )

    return ServerScoreProvider() if supported else ClientScoreProvider()
