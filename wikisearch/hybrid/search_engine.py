"""Hybrid lexical + semantic search engine.

Combines a TF-IDF inverted index (lexical) with brute-force cosine search
over document embeddings (semantic) and merges both rankings with weighted
score fusion. One engine instance owns one corpus; nothing is persisted, so
callers that need durability re-index on startup.

Concurrency
- Scoring and index maintenance are synchronous. The embedding provider call
  is the only await point.
- Indexing embeds each batch concurrently and commits the vectors once the
  batch has resolved.
- The engine expects a single writer. Reads may interleave with each other
  but not with ``index``/``remove_document``/``clear`` calls.
"""

import time
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np
import structlog

from ..common.config import SearchConfig
from ..common.logging import log_performance
from ..common.metrics import MetricsCollector, get_metrics_collector
from ..encoders.base import EmbeddingProvider
from ..encoders.factory import create_embedding_provider
from ..lexical.index import LexicalIndex
from ..lexical.tokenizer import tokenize
from ..models import Document, SearchOptions, SearchResult, SearchType
from ..ranking.fusion import ResultFusion
from ..ranking.highlight import Highlighter
from ..vector_store.index import VectorIndex

logger = structlog.get_logger("wiki_search.search_engine")


class HybridSearchEngine:
    """Public facade over the lexical index, vector index and fusion.

    Responsibilities
    - Keep documents, postings and embeddings consistent per document id
    - Generate embeddings through the configured provider, falling back to
      random vectors for texts the provider fails on
    - Rank, filter, threshold and highlight query results
    - Serve typeahead suggestions, related documents and clustering
    """

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        rng: Optional[np.random.Generator] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        """Construct an engine.

        Parameters
        - config: ``SearchConfig``; read from the environment when omitted
        - embedding_provider: Overrides the provider built from ``config``
        - rng: Random source for fallback embeddings and k-means; seeded from
          ``config.wiki_random_seed`` when omitted
        - metrics: ``MetricsCollector``; the process default when omitted
        """
        self.config = config or SearchConfig()
        self.metrics = metrics or get_metrics_collector("wiki-search")

        if rng is None:
            rng = np.random.default_rng(self.config.wiki_random_seed)
        if embedding_provider is None:
            embedding_provider = create_embedding_provider(self.config)

        self.batch_size = self.config.wiki_embedding_batch_size
        self.lexical_index = LexicalIndex()
        self.vector_index = VectorIndex(
            dimension=self.config.wiki_vector_dimension,
            provider=embedding_provider,
            rng=rng,
            metrics=self.metrics
        )
        self.fusion = ResultFusion(
            Highlighter(
                context_chars=self.config.wiki_snippet_context_chars,
                fallback_chars=self.config.wiki_snippet_fallback_chars
            )
        )
        self._documents: Dict[str, Document] = {}

    async def index(self, documents: Iterable[Document]) -> None:
        """Index documents, replacing any already indexed under the same id.

        Lexical postings are updated immediately; embeddings are generated in
        groups of ``batch_size`` concurrent provider calls. Without an
        embedding provider documents are indexed lexically only.
        """
        documents = list(documents)
        if not documents:
            return

        start_time = time.perf_counter()

        for document in documents:
            if document.id in self._documents:
                self._discard(document.id)
            self._documents[document.id] = document
            self.lexical_index.add(document)

        if self.vector_index.provider is None:
            logger.debug("No embedding provider, skipping embeddings", documents=len(documents))
        else:
            await self._embed_documents(documents)

        self.metrics.record_index_operation("index", len(documents))
        self.metrics.set_indexed_documents(len(self._documents))

        log_performance(
            "index",
            (time.perf_counter() - start_time) * 1000,
            documents=len(documents),
            total_documents=len(self._documents)
        )

    async def _embed_documents(self, documents: List[Document]) -> None:
        for i in range(0, len(documents), self.batch_size):
            batch = documents[i:i + self.batch_size]
            vectors = await self.vector_index.embed_many(
                [document.content for document in batch],
                batch_size=self.batch_size
            )
            for document, vector in zip(batch, vectors):
                # A later duplicate in the same call supersedes this one.
                if self._documents.get(document.id) is document:
                    self.vector_index.add(document.id, vector)

    async def index_document(self, document: Document) -> None:
        """Index (or re-index) a single document."""
        await self.index([document])

    def remove_document(self, document_id: str) -> bool:
        """Remove a document from both indices.

        Unknown ids are ignored. Returns ``True`` if something was removed.
        """
        if document_id not in self._documents:
            logger.debug("Remove ignored for unknown document", document_id=document_id)
            return False

        self._discard(document_id)
        self.metrics.record_index_operation("remove")
        self.metrics.set_indexed_documents(len(self._documents))
        logger.info("Document removed from index", document_id=document_id)
        return True

    def clear(self) -> None:
        """Drop all documents, postings and embeddings."""
        count = len(self._documents)
        self._documents.clear()
        self.lexical_index.clear()
        self.vector_index.clear()

        self.metrics.record_index_operation("clear")
        self.metrics.set_indexed_documents(0)
        logger.info("Search index cleared", documents_removed=count)

    def _discard(self, document_id: str) -> None:
        self._documents.pop(document_id, None)
        self.lexical_index.remove(document_id)
        self.vector_index.remove(document_id)

    def _semantic_available(self) -> bool:
        # Without a provider, stored embeddings are not comparable to a query.
        return self.vector_index.provider is not None and len(self.vector_index) > 0

    def default_options(self) -> SearchOptions:
        """Search options built from the configured defaults."""
        return SearchOptions(
            max_results=self.config.wiki_search_max_results,
            threshold=self.config.wiki_search_threshold,
            include_highlights=self.config.wiki_search_include_highlights,
            keyword_weight=self.config.wiki_search_keyword_weight,
            semantic_weight=self.config.wiki_search_semantic_weight
        )

    async def search(
        self,
        query: str,
        options: Optional[Union[SearchOptions, Dict[str, Any]]] = None
    ) -> List[SearchResult]:
        """Perform hybrid search.

        The query is tokenized for the lexical index and embedded as a whole
        for the vector index. Each side contributes up to ``2 * max_results``
        candidates before fusion. With no embedding provider only the lexical
        side runs.
        """
        if options is None:
            options = self.default_options()
        elif isinstance(options, dict):
            options = SearchOptions.model_validate(options)

        if not query.strip() or not self._documents:
            return []

        start_time = time.perf_counter()
        query_terms = tokenize(query)
        candidate_limit = options.max_results * 2

        lexical_results = self.lexical_index.search(query_terms, candidate_limit)

        semantic_results = []
        if self._semantic_available():
            query_embedding = await self.vector_index.embed(query)
            semantic_results = self.vector_index.search(query_embedding, candidate_limit)

        results = self.fusion.fuse(
            lexical_results,
            semantic_results,
            self._documents,
            options,
            query_terms
        )

        duration = time.perf_counter() - start_time
        self.metrics.record_search(SearchType.HYBRID.value, duration)
        logger.info(
            "Search completed",
            query=query[:50],
            lexical_candidates=len(lexical_results),
            semantic_candidates=len(semantic_results),
            results_count=len(results),
            duration_ms=duration * 1000
        )
        return results

    def keyword_search(self, query: str, max_results: int = 10) -> List[SearchResult]:
        """Rank documents by TF-IDF alone."""
        start_time = time.perf_counter()

        results = []
        for match in self.lexical_index.search(tokenize(query), max_results):
            results.append(
                SearchResult(
                    document=self._documents[match.document_id],
                    score=match.score,
                    search_type=SearchType.LEXICAL,
                    score_details={
                        "lexical_score": match.score,
                        "matched_terms": match.matched_terms,
                    },
                )
            )

        self.metrics.record_search(SearchType.LEXICAL.value, time.perf_counter() - start_time)
        return results

    async def semantic_search(self, query: str, max_results: int = 10) -> List[SearchResult]:
        """Rank documents by cosine similarity to the query embedding alone."""
        if not query.strip() or not self._semantic_available():
            return []

        start_time = time.perf_counter()
        query_embedding = await self.vector_index.embed(query)

        results = [
            SearchResult(
                document=self._documents[match.document_id],
                score=match.score,
                search_type=SearchType.SEMANTIC,
                score_details={"semantic_score": match.score},
            )
            for match in self.vector_index.search(query_embedding, max_results)
            if match.document_id in self._documents
        ]

        self.metrics.record_search(SearchType.SEMANTIC.value, time.perf_counter() - start_time)
        return results

    def get_suggestions(self, partial_query: str, max_suggestions: int = 5) -> List[str]:
        """Complete the last term of ``partial_query`` from the vocabulary.

        Returns up to ``max_suggestions`` indexed terms that start with the
        last query term and are longer than it. Order follows the index's
        insertion order and is not sorted.
        """
        terms = tokenize(partial_query)
        if not terms or max_suggestions <= 0:
            return []

        prefix = terms[-1]
        suggestions: List[str] = []
        for term in self.lexical_index.vocabulary():
            if term.startswith(prefix) and term != prefix:
                suggestions.append(term)
                if len(suggestions) >= max_suggestions:
                    break
        return suggestions

    def get_related_documents(self, document_id: str, max_results: int = 5) -> List[SearchResult]:
        """Documents whose embeddings are closest to ``document_id``'s."""
        if document_id not in self._documents:
            return []

        results = []
        for match in self.vector_index.find_similar(document_id, max_results * 2):
            related = self._documents.get(match.document_id)
            if related is None or match.document_id == document_id:
                continue
            results.append(
                SearchResult(
                    document=related,
                    score=match.score,
                    search_type=SearchType.SEMANTIC,
                    score_details={"semantic_score": match.score},
                )
            )
        return results[:max_results]

    def cluster_documents(self, k: int) -> Dict[int, List[str]]:
        """Partition embedded documents into ``k`` k-means clusters."""
        clusters = self.vector_index.cluster(k, max_iterations=self.config.wiki_kmeans_max_iterations)
        self.metrics.record_index_operation("cluster")
        return clusters

    def get_document_count(self) -> int:
        return len(self._documents)

    def get_document(self, document_id: str) -> Optional[Document]:
        return self._documents.get(document_id)

    def get_embedding(self, document_id: str) -> Optional[np.ndarray]:
        return self.vector_index.get(document_id)

    def set_embedding_provider(self, provider: Optional[EmbeddingProvider]) -> None:
        """Swap the embedding provider; ``None`` turns semantic ranking off.

        Existing embeddings are kept; re-index to regenerate them.
        """
        self.vector_index.provider = provider
        logger.info(
            "Embedding provider changed",
            provider=type(provider).__name__ if provider else None
        )

    def update_embedding_settings(
        self,
        dimension: Optional[int] = None,
        batch_size: Optional[int] = None
    ) -> None:
        """Change the fallback embedding dimension and/or indexing batch size."""
        if dimension is not None:
            if dimension <= 0:
                raise ValueError(f"Embedding dimension must be positive, got {dimension}")
            self.vector_index.dimension = dimension
        if batch_size is not None:
            if batch_size <= 0:
                raise ValueError(f"Batch size must be positive, got {batch_size}")
            self.batch_size = batch_size

    def get_index_stats(self) -> Dict[str, Any]:
        """Get search index statistics."""
        provider = self.vector_index.provider
        return {
            "documents": len(self._documents),
            "terms": self.lexical_index.term_count,
            "embeddings": len(self.vector_index),
            "embedding_dimension": self.vector_index.dimension,
            "embedding_provider": type(provider).__name__ if provider else None,
            "batch_size": self.batch_size,
        }

    async def cleanup(self) -> None:
        """Release the embedding provider's resources, if it holds any."""
        provider = self.vector_index.provider
        if provider is not None and hasattr(provider, "aclose"):
            await provider.aclose()
        logger.info("Search engine cleanup completed")
