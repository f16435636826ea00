"""Tests for the wiki search engine.

This package contains unit tests for the lexical index, vector store,
embedding providers and result fusion, plus end-to-end tests that drive
``HybridSearchEngine`` with deterministic in-memory embedding providers.
"""
