"""Recall of two-phase search against exact ranking.

The coarse filter keeps only ``n`` candidates by Hamming distance, so some
true nearest neighbours can be missed. These helpers measure how many.
"""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from sqlvec.logging_config import get_logger
from sqlvec.vectors import vectormath
from sqlvec.vectorstore.models import VectorRecord
from sqlvec.vectorstore.service import VectorStore

logger = get_logger(__name__)


class QueryRecall(BaseModel):
    """Recall for a single query.

    Attributes:
        expected_ids: Exact top-k ids.
        retrieved_ids: Ids returned by two-phase search.
        recall: Fraction of expected ids that were retrieved.
    """

    expected_ids: list[int] = Field(description="Exact top-k ids")
    retrieved_ids: list[int] = Field(description="Two-phase search ids")
    recall: float = Field(ge=0.0, le=1.0, description="Recall at k")


class RecallReport(BaseModel):
    """Recall over a set of queries."""

    k: int = Field(ge=1, description="Cut-off")
    queries: list[QueryRecall] = Field(default_factory=list)

    @property
    def mean_recall(self) -> float:
        if not self.queries:
            return 0.0
        return sum(q.recall for q in self.queries) / len(self.queries)


def exact_top_k(
    records: Sequence[VectorRecord],
    query: Sequence[float],
    k: int,
) -> list[tuple[int, float]]:
    """Rank records by exact similarity to ``query``.

    Returns:
        Up to ``k`` ``(id, similarity)`` pairs, best first; equal scores
        keep ascending id order.
    """
    normalized = vectormath.normalize(query)
    scored = [
        (record.id, vectormath.dot(normalized, record.normalized_vector))
        for record in sorted(records, key=lambda r: r.id)
    ]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored[:k]


class RecallEvaluator:
    """Compares store search results with exhaustive exact search."""

    def __init__(self, store: VectorStore, include_outdated: bool = False) -> None:
        """Initialize the evaluator.

        Args:
            store: Store to evaluate.
            include_outdated: Evaluate over records of every model tag.
        """
        self._store = store
        self._include_outdated = include_outdated

    async def evaluate(
        self,
        queries: Sequence[Sequence[float]],
        k: int = 10,
    ) -> RecallReport:
        """Measure recall@k for each query vector.

        Args:
            queries: Query vectors of the store's dimension.
            k: Number of results compared.

        Returns:
            RecallReport with one entry per query.
        """
        records = await self._store.select_all(include_outdated=self._include_outdated)
        report = RecallReport(k=k)

        for query in queries:
            expected = [record_id for record_id, _ in exact_top_k(records, query, k)]
            results = await self._store.search(
                query, k, include_outdated=self._include_outdated
            )
            retrieved = [r.id for r in results]

            recall = (
                len(set(expected) & set(retrieved)) / len(expected) if expected else 1.0
            )
            report.queries.append(
                QueryRecall(
                    expected_ids=expected,
                    retrieved_ids=retrieved,
                    recall=recall,
                )
            )

        logger.info(
            f"Recall@{k} over {len(report.queries)} queries: {report.mean_recall:.3f}",
            extra={"k": k, "records": len(records)},
        )
        return report
