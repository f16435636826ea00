"""Snippet extraction around matched query terms."""

import re
from typing import List, Sequence

from ..models import Document, HighlightSpan, SearchHighlight


class Highlighter:
    """Builds one content highlight per result.

    Query terms are tried in order; the first term found anywhere in the
    content (case-insensitive, first occurrence) produces a snippet of up to
    ``context_chars`` characters on either side, never extending past the
    line the match sits on. Its span holds the term's offsets in the full
    document content. When no term matches, the snippet is the first
    ``fallback_chars`` characters with no spans.
    """

    def __init__(self, context_chars: int = 50, fallback_chars: int = 100):
        self.context_chars = context_chars
        self.fallback_chars = fallback_chars

    def highlight(self, document: Document, query_terms: Sequence[str]) -> List[SearchHighlight]:
        content = document.content

        for term in query_terms:
            match = re.search(re.escape(term), content, re.IGNORECASE)
            if match is None:
                continue

            start, end = match.span()
            line_start = content.rfind("\n", 0, start) + 1
            line_end = content.find("\n", end)
            if line_end == -1:
                line_end = len(content)

            snippet = content[
                max(line_start, start - self.context_chars):min(line_end, end + self.context_chars)
            ]
            return [
                SearchHighlight(
                    field="content",
                    snippet=snippet,
                    positions=[HighlightSpan(start=start, end=end)],
                )
            ]

        return [
            SearchHighlight(
                field="content",
                snippet=content[:self.fallback_chars],
                positions=[],
            )
        ]
