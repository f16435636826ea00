"""Text normalization shared by indexing and querying."""

import re
from typing import List

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    """Split text into lowercase index terms.

    Punctuation becomes whitespace, terms of a single character are dropped.
    Duplicates are kept in order so callers can count occurrences.
    """
    normalized = _NON_WORD.sub(" ", text.lower())
    return [term for term in _WHITESPACE.split(normalized) if len(term) > 1]
