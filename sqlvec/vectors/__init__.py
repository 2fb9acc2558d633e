"""Vector math and quantization."""

from sqlvec.vectors.quantizer import code_length, encode, hamming_distance
from sqlvec.vectors.vectormath import (
    cosine_similarity,
    dot,
    magnitude,
    mean_pool,
    normalize,
)

__all__ = [
    "code_length",
    "cosine_similarity",
    "dot",
    "encode",
    "hamming_distance",
    "magnitude",
    "mean_pool",
    "normalize",
]
