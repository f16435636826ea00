"""Lexical retrieval components.

Contents
- ``tokenizer``: text normalization shared by indexing and querying
- ``index``: inverted index with TF-IDF scoring
"""
