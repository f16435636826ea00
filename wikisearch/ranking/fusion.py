"""Weighted score fusion of lexical and semantic rankings.

The fused score is ``lexical_score * keyword_weight + semantic_score *
semantic_weight``. The two inputs are combined as-is: TF-IDF scores are
unbounded and non-negative while cosine scores lie in ``[-1, 1]``, and no
normalization step brings them onto a common scale. Downstream rankings
depend on this, so it is kept.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

import structlog

from ..models import Document, LexicalMatch, SearchOptions, SearchResult, SearchType, VectorMatch
from .filters import passes_filters
from .highlight import Highlighter

logger = structlog.get_logger("wiki_search.fusion")


class ResultFusion:
    """Merges, filters, thresholds, truncates and highlights ranked lists."""

    def __init__(self, highlighter: Optional[Highlighter] = None):
        self.highlighter = highlighter or Highlighter()

    def fuse(
        self,
        lexical_results: Sequence[LexicalMatch],
        semantic_results: Sequence[VectorMatch],
        documents: Mapping[str, Document],
        options: SearchOptions,
        query_terms: Sequence[str] = ()
    ) -> List[SearchResult]:
        """Fuse both rankings into at most ``options.max_results`` results.

        Ids missing from ``documents`` are skipped. Results are sorted by
        descending fused score; ties keep lexical-first discovery order.
        """
        combined: Dict[str, Dict[str, Any]] = {}

        for match in lexical_results:
            combined[match.document_id] = {
                "lexical_score": match.score,
                "semantic_score": 0.0,
                "matched_terms": list(match.matched_terms),
            }

        for match in semantic_results:
            entry = combined.get(match.document_id)
            if entry is None:
                combined[match.document_id] = {
                    "lexical_score": 0.0,
                    "semantic_score": match.score,
                    "matched_terms": [],
                }
            else:
                entry["semantic_score"] = match.score

        results: List[SearchResult] = []
        for document_id, details in combined.items():
            document = documents.get(document_id)
            if document is None:
                continue
            score = (
                details["lexical_score"] * options.keyword_weight
                + details["semantic_score"] * options.semantic_weight
            )
            results.append(
                SearchResult(
                    document=document,
                    score=score,
                    search_type=SearchType.HYBRID,
                    score_details=details,
                )
            )

        candidate_count = len(results)

        if options.filters:
            results = [r for r in results if passes_filters(r.document, options.filters)]

        if options.threshold > 0:
            results = [r for r in results if r.score >= options.threshold]

        results.sort(key=lambda r: r.score, reverse=True)
        results = results[:options.max_results]

        if options.include_highlights:
            for result in results:
                result.highlights = self.highlighter.highlight(result.document, query_terms)

        logger.debug(
            "Weighted score fusion completed",
            lexical_count=len(lexical_results),
            semantic_count=len(semantic_results),
            candidate_count=candidate_count,
            result_count=len(results),
            keyword_weight=options.keyword_weight,
            semantic_weight=options.semantic_weight
        )

        return results
