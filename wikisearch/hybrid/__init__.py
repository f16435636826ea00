"""Hybrid search facade.

Contents
- ``search_engine``: ``HybridSearchEngine`` composing the lexical index,
  vector index and result fusion
"""
