"""Vector math for speaker embeddings."""

import math
from collections.abc import Sequence

import numpy as np

from .config import (
    ADAPTIVE_THRESHOLD_CEILING,
    ADAPTIVE_THRESHOLD_FLOOR,
    ADAPTIVE_THRESHOLD_STDDEV_FACTOR,
    DEFAULT_IDENTIFICATION_THRESHOLD,
)
from .exceptions import EmbeddingMismatchError

MAX_DISTANCE = 1.0


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine distance between two vectors (0 = same direction, 1 = orthogonal).

    Empty, zero-norm or differently sized vectors never match and get the
    maximum distance instead of an error.

    Args:
        a: First vector
        b: Second vector

    Returns:
        ``1 - clamp(cos(a, b), -1, 1)``, or 1.0 for incomparable vectors
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.ndim != 1 or va.shape != vb.shape or va.size == 0:
        return MAX_DISTANCE

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0 or not np.isfinite(norm_a * norm_b):
        return MAX_DISTANCE

    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    return 1.0 - max(-1.0, min(1.0, similarity))


def average_embeddings(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Element-wise mean of equally sized vectors.

    Raises:
        EmbeddingMismatchError: If the list is empty or lengths differ
    """
    if len(vectors) == 0:
        raise EmbeddingMismatchError("Cannot average an empty list of embeddings")

    first_length = len(vectors[0])
    for vector in vectors:
        if len(vector) != first_length:
            raise EmbeddingMismatchError(
                f"Embedding length {len(vector)} does not match {first_length}"
            )

    return np.mean(np.asarray(vectors, dtype=np.float64), axis=0)


def compute_adaptive_threshold(
    distances: Sequence[float],
    floor: float = ADAPTIVE_THRESHOLD_FLOOR,
    ceiling: float = ADAPTIVE_THRESHOLD_CEILING,
    default: float = DEFAULT_IDENTIFICATION_THRESHOLD,
    stddev_factor: float = ADAPTIVE_THRESHOLD_STDDEV_FACTOR,
) -> float:
    """
    Personal acceptance boundary from enrollment-sample spread.

    ``clamp(mean + k * stddev, floor, ceiling)`` using the sample standard
    deviation; fewer than two distances, or any non-finite result, yields
    ``default``.
    """
    if len(distances) < 2:
        return default

    values = np.asarray(distances, dtype=np.float64)
    raw = float(np.mean(values) + stddev_factor * np.std(values, ddof=1))
    if not math.isfinite(raw):
        return default

    return max(floor, min(ceiling, raw))
