"""Search quality evaluation."""

from sqlvec.evaluation.recall import (
    QueryRecall,
    RecallEvaluator,
    RecallReport,
    exact_top_k,
)

__all__ = [
    "QueryRecall",
    "RecallEvaluator",
    "RecallReport",
    "exact_top_k",
]
