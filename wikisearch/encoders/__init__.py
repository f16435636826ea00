"""Embedding providers.

Primary components:
- ``base``: abstract ``EmbeddingProvider`` interface and common exceptions.
- ``http_provider``: client for a remote embedding service.
- ``fallback``: random unit-vector generator used when a provider fails.
- ``factory``: build a provider from ``EmbeddingConfig``.
"""
