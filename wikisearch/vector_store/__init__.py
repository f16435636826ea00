"""Dense-vector retrieval.

Primary components:
- ``similarity``: cosine similarity and normalization helpers.
- ``clustering``: k-means over cosine distance.
- ``index``: ``VectorIndex``, the per-document embedding store.
"""
