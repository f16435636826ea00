"""k-means clustering of embeddings under cosine distance.

Distance is ``1 - cosine_similarity``. Centroids start as copies of randomly
sampled embeddings (with replacement) and are recomputed as the L2-normalized
mean of their members. A cluster that loses all members keeps its previous
centroid. Iteration stops when a round changes no assignment or after
``max_iterations`` rounds.
"""

from typing import Optional, Tuple

import numpy as np
import structlog

logger = structlog.get_logger("wiki_search.clustering")


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    # Zero rows stay zero, giving cosine similarity 0 against everything.
    return np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)


def kmeans_cosine(
    embeddings: np.ndarray,
    k: int,
    max_iterations: int = 100,
    rng: Optional[np.random.Generator] = None
) -> Tuple[np.ndarray, int]:
    """Cluster the rows of ``embeddings`` into ``k`` groups.

    Parameters
    - embeddings: ``(n, dim)`` float matrix
    - k: Number of clusters, at least 1
    - max_iterations: Upper bound on assignment rounds
    - rng: Random source for centroid sampling

    Returns
    - ``(assignments, rounds)``: cluster index in ``[0, k)`` per row and the
      number of rounds run
    """
    if k < 1:
        raise ValueError(f"Number of clusters must be at least 1, got {k}")

    matrix = np.asarray(embeddings, dtype=float)
    n = matrix.shape[0]
    if n == 0:
        return np.zeros(0, dtype=int), 0

    rng = rng if rng is not None else np.random.default_rng()
    unit = _unit_rows(matrix)
    centroids = matrix[rng.integers(0, n, size=k)].copy()
    assignments = np.zeros(n, dtype=int)

    rounds = 0
    for _ in range(max_iterations):
        rounds += 1
        distances = 1.0 - unit @ _unit_rows(centroids).T
        # argmin keeps the lowest cluster index on ties.
        new_assignments = np.argmin(distances, axis=1)

        if np.array_equal(new_assignments, assignments):
            break
        assignments = new_assignments

        for cluster in range(k):
            members = matrix[assignments == cluster]
            if len(members) == 0:
                continue
            mean = members.mean(axis=0)
            magnitude = np.linalg.norm(mean)
            centroids[cluster] = mean / magnitude if magnitude > 0 else mean

    logger.debug("k-means finished", documents=n, clusters=k, rounds=rounds)
    return assignments, rounds
