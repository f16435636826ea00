"""Hybrid retrieval engine for the documentation wiki.

Subpackages:
- ``wikisearch.common``: configuration, logging, and metrics.
- ``wikisearch.lexical``: tokenizer and TF-IDF inverted index.
- ``wikisearch.vector_store``: embedding store, cosine search, and k-means.
- ``wikisearch.encoders``: embedding provider contract and implementations.
- ``wikisearch.ranking``: result fusion, filters, and highlighting.
- ``wikisearch.hybrid``: the ``HybridSearchEngine`` facade.

Usage:
- from wikisearch.hybrid.search_engine import HybridSearchEngine
"""
