"""Vector similarity helpers."""

from typing import Sequence

import numpy as np

from app.core.exceptions import DataIntegrityError


def cosine_similarity(embedding1: Sequence[float], embedding2: Sequence[float]) -> float:
    """Compute cosine similarity (1 - cosine distance) between two vectors.

    Returns a value in [-1, 1]; zero vectors have similarity 0.
    """
    vec1 = np.asarray(embedding1, dtype=np.float64)
    vec2 = np.asarray(embedding2, dtype=np.float64)
    if vec1.shape != vec2.shape:
        raise DataIntegrityError(
            f"Vector dimension mismatch: {vec1.shape[0]} vs {vec2.shape[0]}"
        )

    norm1 = np.linalg.norm(vec1)
    norm2 = np.linalg.norm(vec2)
    if norm1 == 0 or norm2 == 0:
        return 0.0

    similarity = float(np.dot(vec1, vec2) / (norm1 * norm2))
    return max(-1.0, min(1.0, similarity))


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``."""
    vec = np.asarray(query, dtype=np.float64)
    if matrix.size == 0:
        return np.zeros(0, dtype=np.float64)
    if matrix.shape[1] != vec.shape[0]:
        raise DataIntegrityError(
            f"Vector dimension mismatch: {vec.shape[0]} vs {matrix.shape[1]}"
        )

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(vec)
    dots = matrix @ vec
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(norms > 0, dots / norms, 0.0)
    return np.clip(scores, -1.0, 1.0)
