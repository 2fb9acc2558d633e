"""Turning a text into one embedding vector."""

from sqlvec.embeddings.service import EmbeddingService
from sqlvec.vectors import vectormath


def segment_text(text: str, max_length: int) -> list[str]:
    """Split text into embeddable segments.

    The text is split on single spaces; empty words are dropped and longer
    words are cut into pieces of at most ``max_length`` characters. A text
    without words yields no segments.

    Args:
        text: Input text.
        max_length: Maximum segment length in characters.

    Returns:
        Segments in text order.
    """
    if max_length < 1:
        raise ValueError(f"max_length must be positive, got {max_length}")

    segments: list[str] = []
    for word in text.split(" "):
        segments.extend(word[i : i + max_length] for i in range(0, len(word), max_length))
    return segments


async def embed_text(
    embedder: EmbeddingService,
    text: str,
    dimensions: int | None = None,
    normalized: bool = False,
) -> list[float]:
    """Embed a text as the mean of its segment embeddings.

    A text without words (empty or only spaces) is sent to the embedder
    as a single segment.

    Args:
        embedder: Embedding service.
        text: Text to embed.
        dimensions: Expected vector length. Taken from the returned
            vectors when not given.
        normalized: Return the unit-length vector instead.

    Returns:
        Pooled vector.

    Raises:
        DimensionMismatchError: If the embeddings do not have ``dimensions``
            components.
    """
    max_length = embedder.max_input_length
    segments = segment_text(text, max_length) or [text[:max_length]]
    results = await embedder.embed_batch(segments)

    pooled = vectormath.mean_pool([r.embedding for r in results], dimensions)
    if normalized:
        return vectormath.normalize(pooled)
    return pooled
