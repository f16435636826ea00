"""Random unit-vector embeddings used when no provider can answer."""

from typing import Optional

import numpy as np

from ..vector_store.similarity import normalize


class RandomEmbeddingGenerator:
    """Draws vectors uniformly from ``[-1, 1)^dimension`` and L2-normalizes them.

    The vectors carry no meaning; they only keep the indexing pipeline moving.
    Results are reproducible only when a seeded ``rng`` is supplied.
    """

    def __init__(self, dimension: int = 1536, rng: Optional[np.random.Generator] = None):
        if dimension <= 0:
            raise ValueError(f"Embedding dimension must be positive, got {dimension}")
        self.dimension = dimension
        self.rng = rng if rng is not None else np.random.default_rng()

    def generate(self) -> np.ndarray:
        return normalize(self.rng.uniform(-1.0, 1.0, self.dimension))
