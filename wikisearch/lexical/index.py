"""Inverted index with TF-IDF scoring.

The index keeps two tables that are always mutated together:

- postings: term -> set of document ids whose content contains the term
- term frequencies: document id -> {term: occurrence count}

A term has a postings entry only while at least one document contains it.
Every indexed document owns a term-frequency table (possibly empty), so the
table count is the corpus size used by the IDF.
"""

import math
from collections import Counter
from typing import Dict, Iterator, List, Sequence, Set

import structlog

from ..models import Document, LexicalMatch
from .tokenizer import tokenize

logger = structlog.get_logger("wiki_search.lexical_index")


class LexicalIndex:
    """Term -> postings inverted index scored with TF-IDF."""

    def __init__(self):
        self._postings: Dict[str, Set[str]] = {}
        self._term_frequencies: Dict[str, Counter] = {}

    def add(self, document: Document) -> None:
        """Index a document, replacing any previous version with the same id."""
        if document.id in self._term_frequencies:
            self.remove(document.id)

        frequencies = Counter(tokenize(document.content))
        for term in frequencies:
            self._postings.setdefault(term, set()).add(document.id)
        self._term_frequencies[document.id] = frequencies

        logger.debug(
            "Document indexed lexically",
            document_id=document.id,
            distinct_terms=len(frequencies)
        )

    def remove(self, document_id: str) -> bool:
        """Drop a document's postings. Returns ``False`` for unknown ids."""
        frequencies = self._term_frequencies.pop(document_id, None)
        if frequencies is None:
            return False

        for term in frequencies:
            postings = self._postings.get(term)
            if postings is None:
                continue
            postings.discard(document_id)
            if not postings:
                del self._postings[term]
        return True

    def clear(self) -> None:
        self._postings.clear()
        self._term_frequencies.clear()

    def idf(self, term: str) -> float:
        """Inverse document frequency, ``ln(N / df)``; 0 for unseen terms."""
        postings = self._postings.get(term)
        if not postings:
            return 0.0
        return math.log(len(self._term_frequencies) / len(postings))

    def term_frequency(self, term: str, document_id: str) -> int:
        frequencies = self._term_frequencies.get(document_id)
        if frequencies is None:
            return 0
        return frequencies.get(term, 0)

    def search(self, query_terms: Sequence[str], top_n: int) -> List[LexicalMatch]:
        """Rank documents for already tokenized query terms.

        A document's score is the sum of ``tf * idf`` over the query terms
        divided by the number of query terms (repeated query terms count
        every time). Scores are not normalized by document length.
        """
        if not query_terms or top_n <= 0:
            return []

        scores: Dict[str, float] = {}
        matched: Dict[str, List[str]] = {}

        for term in query_terms:
            postings = self._postings.get(term)
            if not postings:
                continue
            idf = self.idf(term)
            for document_id in postings:
                tf = self._term_frequencies[document_id][term]
                scores[document_id] = scores.get(document_id, 0.0) + tf * idf
                matched.setdefault(document_id, []).append(term)

        results = [
            LexicalMatch(
                document_id=document_id,
                score=score / len(query_terms),
                matched_terms=matched[document_id],
            )
            for document_id, score in scores.items()
        ]
        results.sort(key=lambda match: match.score, reverse=True)
        return results[:top_n]

    def vocabulary(self) -> Iterator[str]:
        """Iterate indexed terms in insertion order."""
        return iter(self._postings)

    def postings(self, term: str) -> Set[str]:
        """Copy of the postings set for ``term`` (empty when unseen)."""
        return set(self._postings.get(term, ()))

    def terms_for(self, document_id: str) -> Set[str]:
        frequencies = self._term_frequencies.get(document_id)
        return set(frequencies) if frequencies else set()

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._term_frequencies

    @property
    def document_count(self) -> int:
        return len(self._term_frequencies)

    @property
    def term_count(self) -> int:
        return len(self._postings)
