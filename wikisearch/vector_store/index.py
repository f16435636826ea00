"""In-memory embedding store with brute-force cosine search.

Every query scans all stored embeddings (O(N * dim)); there is no
approximate nearest-neighbour structure. The index also owns the embedding
step: it calls the injected provider and substitutes a random unit vector
when no provider is configured or the provider fails.
"""

import asyncio
import time
from typing import Dict, List, Optional, Sequence

import numpy as np
import structlog

from ..common.metrics import MetricsCollector
from ..encoders.base import EmbeddingProvider
from ..encoders.fallback import RandomEmbeddingGenerator
from ..models import VectorMatch
from .clustering import kmeans_cosine
from .similarity import cosine_similarity

logger = structlog.get_logger("wiki_search.vector_index")


class VectorIndex:
    """Document id -> embedding store.

    Parameters
    - dimension: Length of fallback vectors (provider vectors keep their own)
    - provider: Optional ``EmbeddingProvider``
    - rng: Random source for fallback vectors and k-means initialization
    - metrics: Optional ``MetricsCollector`` for embedding timings
    """

    def __init__(
        self,
        dimension: int = 1536,
        provider: Optional[EmbeddingProvider] = None,
        rng: Optional[np.random.Generator] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        self.provider = provider
        self.rng = rng if rng is not None else np.random.default_rng()
        self.fallback = RandomEmbeddingGenerator(dimension, self.rng)
        self.metrics = metrics
        self._embeddings: Dict[str, np.ndarray] = {}

    @property
    def dimension(self) -> int:
        return self.fallback.dimension

    @dimension.setter
    def dimension(self, value: int) -> None:
        self.fallback = RandomEmbeddingGenerator(value, self.rng)

    def add(self, document_id: str, embedding: Sequence[float]) -> None:
        self._embeddings[document_id] = np.asarray(embedding, dtype=float)

    def remove(self, document_id: str) -> bool:
        return self._embeddings.pop(document_id, None) is not None

    def clear(self) -> None:
        self._embeddings.clear()

    def get(self, document_id: str) -> Optional[np.ndarray]:
        return self._embeddings.get(document_id)

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._embeddings

    def __len__(self) -> int:
        return len(self._embeddings)

    async def embed(self, text: str) -> np.ndarray:
        """Embed ``text`` with the provider, falling back to a random unit vector."""
        start_time = time.perf_counter()

        if self.provider is None:
            vector = self.fallback.generate()
            self._record_embedding("fallback", start_time)
            return vector

        try:
            vector = np.asarray(await self.provider.embed(text), dtype=float)
        except Exception as e:
            logger.warning(
                "Embedding provider failed, using fallback embedding",
                error=str(e),
                text_length=len(text)
            )
            vector = self.fallback.generate()
            self._record_embedding("fallback", start_time)
            return vector

        self._record_embedding("provider", start_time)
        return vector

    async def embed_many(self, texts: Sequence[str], batch_size: int = 100) -> List[np.ndarray]:
        """Embed texts in batches, running at most ``batch_size`` calls at once."""
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")

        vectors: List[np.ndarray] = []
        for i in range(0, len(texts), batch_size):
            batch = texts[i:i + batch_size]
            vectors.extend(await asyncio.gather(*(self.embed(text) for text in batch)))
        return vectors

    def search(self, query_embedding: Sequence[float], top_n: int) -> List[VectorMatch]:
        """Rank every stored embedding by cosine similarity to the query."""
        if top_n <= 0:
            return []

        query = np.asarray(query_embedding, dtype=float)
        results = [
            VectorMatch(document_id=document_id, score=cosine_similarity(query, embedding))
            for document_id, embedding in self._embeddings.items()
        ]
        results.sort(key=lambda match: match.score, reverse=True)
        return results[:top_n]

    def find_similar(self, document_id: str, top_n: int) -> List[VectorMatch]:
        """Nearest neighbours of a stored document, excluding the document itself."""
        embedding = self._embeddings.get(document_id)
        if embedding is None or top_n <= 0:
            return []

        results = self.search(embedding, top_n + 1)
        return [match for match in results if match.document_id != document_id][:top_n]

    def cluster(self, k: int, max_iterations: int = 100) -> Dict[int, List[str]]:
        """Group stored embeddings into at most ``k`` clusters.

        Returns a mapping of cluster index to document ids; clusters that end
        up empty are omitted. Every stored document appears exactly once.
        """
        if k < 1:
            raise ValueError(f"Number of clusters must be at least 1, got {k}")

        document_ids = list(self._embeddings)
        if not document_ids:
            return {}

        shapes = {self._embeddings[document_id].shape for document_id in document_ids}
        if len(shapes) > 1:
            raise ValueError(
                f"Cannot cluster embeddings of inconsistent dimensions: {sorted(shapes)}"
            )

        matrix = np.stack([self._embeddings[document_id] for document_id in document_ids])
        assignments, rounds = kmeans_cosine(matrix, k, max_iterations=max_iterations, rng=self.rng)

        clusters: Dict[int, List[str]] = {}
        for document_id, cluster in zip(document_ids, assignments):
            clusters.setdefault(int(cluster), []).append(document_id)

        logger.info(
            "Documents clustered",
            documents=len(document_ids),
            requested_clusters=k,
            clusters=len(clusters),
            rounds=rounds
        )
        return clusters

    def _record_embedding(self, source: str, start_time: float) -> None:
        if self.metrics is not None:
            self.metrics.record_embedding(source, time.perf_counter() - start_time)
