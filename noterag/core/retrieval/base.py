"""
Vector similarity helpers for retrieval.
"""

from typing import Sequence
import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity ``dot(a, b) / (|a| * |b|)``.

    Returns 0.0 when either vector is empty or zero, or when the
    dimensions differ (e.g. after a model change without clearing the
    cache).
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(left)) * float(np.linalg.norm(right))
    if denom == 0.0:
        return 0.0

    similarity = float(np.dot(left, right)) / denom
    return max(-1.0, min(1.0, similarity))
