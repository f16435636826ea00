"""Embedding provider interface.

Defines the contract the engine depends on, independent of where vectors come
from (a remote embedding service, a local model, a test double).

All methods are asynchronous: the provider call is the engine's only I/O
boundary.
"""

from abc import ABC, abstractmethod

import numpy as np


class EmbeddingProvider(ABC):
    """Abstract text -> vector service.

    Implementations should return vectors of one consistent length. They do
    not need to retry or time out on the engine's behalf; callers impose
    those at this boundary.
    """

    @abstractmethod
    async def embed(self, text: str) -> np.ndarray:
        """Embed a single text.

        Returns
        - A 1-D float ``np.ndarray``
        """
        pass


class EmbeddingError(Exception):
    """Base exception for embedding operations."""
    pass


class EmbeddingProviderError(EmbeddingError):
    """The provider failed or returned an unusable payload."""
    pass
