"""Vector similarity helpers."""

import numpy as np


def normalize(vector: np.ndarray) -> np.ndarray:
    """Return ``vector`` scaled to unit L2 norm; zero vectors are returned as-is."""
    vector = np.asarray(vector, dtype=float)
    magnitude = np.linalg.norm(vector)
    if magnitude == 0:
        return vector
    return vector / magnitude


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity of two 1-D vectors, in ``[-1, 1]``.

    Vectors of different length, or with zero magnitude, have similarity 0.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        return 0.0

    magnitude_a = np.linalg.norm(a)
    magnitude_b = np.linalg.norm(b)
    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    similarity = float(np.dot(a, b) / (magnitude_a * magnitude_b))
    # Rounding can push |similarity| a hair past 1.
    return max(-1.0, min(1.0, similarity))
