"""Cosine similarity between embeddings"""
import numpy as np

from .exceptions import DimensionMismatch


def cosine_similarity(a, b) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Accumulates in float64 regardless of the storage precision and clamps the
    result to [-1.0, 1.0]. A zero vector on either side gives 0.0.

    Raises:
        DimensionMismatch: If the vectors differ in length
    """
    left = np.asarray(a, dtype=np.float64).ravel()
    right = np.asarray(b, dtype=np.float64).ravel()
    if left.shape[0] != right.shape[0]:
        raise DimensionMismatch(left.shape[0], right.shape[0])

    norm_left = float(np.linalg.norm(left))
    norm_right = float(np.linalg.norm(right))
    if norm_left == 0.0 or norm_right == 0.0:
        return 0.0

    score = float(np.dot(left, right)) / (norm_left * norm_right)
    return max(-1.0, min(1.0, score))
