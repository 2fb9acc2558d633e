"""Sign-bit quantization of normalized vectors.

Each component becomes one bit (1 when positive), so the Hamming distance
between two codes approximates the angle between the vectors. Codes are
only compared, never decoded.
"""

import math
from collections.abc import Sequence


def code_length(dimensions: int) -> int:
    """Number of bytes needed for a code of ``dimensions`` bits."""
    return math.ceil(dimensions / 8)


def encode_bits(vector: Sequence[float]) -> str:
    """Sign pattern of a vector as a string of '0' and '1'."""
    return "".join("1" if value > 0 else "0" for value in vector)


def encode(vector: Sequence[float]) -> bytes:
    """Pack the sign pattern of a vector into ``ceil(D/8)`` bytes.

    Bits are grouped in eights from the first component. The final group
    may be shorter and is read as a plain binary number, so its unused
    high bits are zero.
    """
    bits = encode_bits(vector)
    return bytes(int(bits[i : i + 8], 2) for i in range(0, len(bits), 8))


def hamming_distance(a: bytes, b: bytes) -> int:
    """Count of differing bits between two equal-width codes."""
    if len(a) != len(b):
        raise ValueError(f"code widths differ: {len(a)} != {len(b)}")
    return (int.from_bytes(a, "big") ^ int.from_bytes(b, "big")).bit_count()
