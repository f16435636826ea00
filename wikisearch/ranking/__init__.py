"""Search ranking and result fusion components.

This package combines lexical and semantic signals into one ranking and
post-processes it for display.

Contents
- ``fusion``: weighted score fusion
- ``filters``: metadata filter evaluation
- ``highlight``: content snippets around matched terms
"""
