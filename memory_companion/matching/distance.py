"""Distance and similarity primitives over fixed-length embeddings."""

from __future__ import annotations

import math
from collections.abc import Sequence

from memory_companion.exceptions import DimensionMismatchError


def _check_dimensions(a: Sequence[float], b: Sequence[float]) -> None:
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """L2 norm of ``a - b``.  Lower is more similar; unbounded above."""
    _check_dimensions(a, b)
    return math.sqrt(sum((x - y) * (x - y) for x, y in zip(a, b, strict=True)))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in ``[-1, 1]``.

    Returns ``0.0`` when either vector has zero magnitude instead of
    dividing by zero.
    """
    _check_dimensions(a, b)
    dot = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    # Rounding can push |a|=|b| parallel vectors a hair past 1.
    return max(-1.0, min(1.0, dot / (norm_a * norm_b)))
