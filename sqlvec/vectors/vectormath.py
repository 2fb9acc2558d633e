"""Pure numeric routines over plain float sequences."""

import math
from collections.abc import Sequence

from sqlvec.exceptions import DimensionMismatchError, ErrorCode, ValidationError

DEFAULT_EPSILON = 1e-10


def magnitude(vector: Sequence[float]) -> float:
    """Euclidean norm of a vector."""
    return math.sqrt(math.fsum(value * value for value in vector))


def normalize(
    vector: Sequence[float],
    norm: float | None = None,
    epsilon: float = DEFAULT_EPSILON,
) -> list[float]:
    """Scale a vector to unit length.

    Args:
        vector: Vector to normalize.
        norm: Precomputed magnitude. Computed when omitted.
        epsilon: Divisor used instead of a zero magnitude.

    Returns:
        New list with every component divided by the magnitude.
    """
    if norm is None:
        norm = magnitude(vector)
    if norm == 0:
        norm = epsilon
    return [value / norm for value in vector]


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    """Pairwise product sum.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(expected=len(a), actual=len(b))
    return math.fsum(x * y for x, y in zip(a, b))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors, in [-1, 1].

    Raises:
        DimensionMismatchError: If the vectors differ in length.
        ValidationError: If either vector has zero magnitude.
    """
    product = dot(a, b)
    norm_a = magnitude(a)
    norm_b = magnitude(b)
    if norm_a == 0 or norm_b == 0:
        raise ValidationError(
            "Cosine similarity is undefined for a zero-magnitude vector",
            code=ErrorCode.ZERO_MAGNITUDE,
        )
    # Rounding can push the ratio slightly past the unit interval.
    return max(-1.0, min(1.0, product / (norm_a * norm_b)))


def mean_pool(
    vectors: Sequence[Sequence[float]],
    dimensions: int | None = None,
) -> list[float]:
    """Per-dimension arithmetic mean of a group of vectors.

    Args:
        vectors: Vectors to combine. All must share one length.
        dimensions: Length of the zero vector returned for an empty group.
            Also enforced against the inputs when given.

    Returns:
        Mean vector, or the zero vector when ``vectors`` is empty.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if not vectors:
        return [0.0] * (dimensions or 0)

    width = dimensions if dimensions is not None else len(vectors[0])
    sums = [0.0] * width
    for vector in vectors:
        if len(vector) != width:
            raise DimensionMismatchError(expected=width, actual=len(vector))
        for i, value in enumerate(vector):
            sums[i] += value

    count = len(vectors)
    return [total / count for total in sums]
