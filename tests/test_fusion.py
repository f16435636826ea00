"""Tests for score fusion, result filters and highlighting."""

import pytest

from wikisearch.models import (
    Document,
    DocumentMetadata,
    LexicalMatch,
    SearchFilter,
    SearchOptions,
    SearchType,
    VectorMatch,
)
from wikisearch.ranking.filters import matches_filter, passes_filters, resolve_field
from wikisearch.ranking.fusion import ResultFusion
from wikisearch.ranking.highlight import Highlighter


def make_document(doc_id, content="", category="api", tags=None, word_count=0):
    return Document(
        id=doc_id,
        content=content,
        metadata=DocumentMetadata(
            page_id=doc_id,
            title=doc_id.title(),
            category=category,
            tags=tags or [],
            word_count=word_count,
        ),
    )


@pytest.fixture
def documents():
    return {
        "a": make_document("a", "alpha content", category="guide", tags=["intro"], word_count=120),
        "b": make_document("b", "beta content", category="api", tags=["reference"], word_count=40),
        "c": make_document("c", "gamma content", category="api", tags=["intro", "reference"], word_count=80),
    }


@pytest.fixture
def lexical():
    return [LexicalMatch("a", 2.0, ["alpha"]), LexicalMatch("b", 1.0, ["beta"])]


@pytest.fixture
def semantic():
    return [VectorMatch("b", 0.5), VectorMatch("c", 0.9)]


def fuse(lexical, semantic, documents, **options):
    return ResultFusion().fuse(lexical, semantic, documents, SearchOptions(**options), ["alpha"])


def test_weighted_fusion(lexical, semantic, documents):
    results = fuse(lexical, semantic, documents, keyword_weight=1.0, semantic_weight=1.0)

    assert [r.document.id for r in results] == ["a", "b", "c"]
    assert [r.score for r in results] == pytest.approx([2.0, 1.5, 0.9])
    assert all(r.search_type == SearchType.HYBRID for r in results)

    details = {r.document.id: r.score_details for r in results}
    assert details["b"]["lexical_score"] == 1.0
    assert details["b"]["semantic_score"] == 0.5
    assert details["c"]["lexical_score"] == 0.0
    assert details["a"]["semantic_score"] == 0.0
    assert details["a"]["matched_terms"] == ["alpha"]


def test_default_weights_halve_scores(lexical, semantic, documents):
    results = fuse(lexical, semantic, documents)
    assert [r.score for r in results] == pytest.approx([1.0, 0.75, 0.45])


def test_semantic_only_weights(lexical, semantic, documents):
    results = fuse(lexical, semantic, documents, keyword_weight=0.0, semantic_weight=1.0)
    assert [r.document.id for r in results] == ["c", "b", "a"]


def test_threshold_and_truncation(lexical, semantic, documents):
    results = fuse(lexical, semantic, documents, keyword_weight=1.0, semantic_weight=1.0, threshold=1.0)
    assert [r.document.id for r in results] == ["a", "b"]

    results = fuse(lexical, semantic, documents, keyword_weight=1.0, semantic_weight=1.0, max_results=1)
    assert [r.document.id for r in results] == ["a"]


def test_non_positive_threshold_is_ignored(documents):
    results = fuse([], [VectorMatch("a", -0.4)], documents, threshold=0.0)
    assert len(results) == 1
    assert results[0].score == pytest.approx(-0.2)


def test_unknown_ids_are_skipped(documents):
    results = fuse([LexicalMatch("ghost", 5.0, ["x"])], [VectorMatch("a", 0.3)], documents)
    assert [r.document.id for r in results] == ["a"]


def test_raising_keyword_weight_never_lowers_scores(lexical, semantic, documents):
    low = {r.document.id: r.score for r in fuse(lexical, semantic, documents, keyword_weight=0.2)}
    high = {r.document.id: r.score for r in fuse(lexical, semantic, documents, keyword_weight=0.8)}
    for doc_id, score in low.items():
        assert high[doc_id] >= score


def test_filters_applied_after_fusion(lexical, semantic, documents):
    results = fuse(
        lexical, semantic, documents,
        filters=[SearchFilter(field="metadata.category", operator="eq", value="api")]
    )
    assert {r.document.id for r in results} == {"b", "c"}


def test_highlights_attached_on_request(lexical, semantic, documents):
    results = fuse(lexical, semantic, documents, include_highlights=True)
    by_id = {r.document.id: r for r in results}

    assert by_id["a"].highlights[0].snippet == "alpha content"
    assert by_id["a"].highlights[0].positions[0].start == 0
    assert by_id["b"].highlights[0].positions == []

    assert all(r.highlights is None for r in fuse(lexical, semantic, documents))


@pytest.mark.parametrize("search_filter, expected", [
    (SearchFilter(field="metadata.category", operator="eq", value="api"), {"b", "c"}),
    (SearchFilter(field="metadata.category", operator="ne", value="api"), {"a"}),
    (SearchFilter(field="metadata.category", operator="in", value=["guide", "faq"]), {"a"}),
    (SearchFilter(field="metadata.category", operator="nin", value=["guide"]), {"b", "c"}),
    (SearchFilter(field="metadata.category", operator="in", value="api"), set()),
    (SearchFilter(field="metadata.word_count", operator="gt", value=80), {"a"}),
    (SearchFilter(field="metadata.word_count", operator="gte", value=80), {"a", "c"}),
    (SearchFilter(field="metadata.word_count", operator="lt", value=80), {"b"}),
    (SearchFilter(field="metadata.word_count", operator="lte", value=80), {"b", "c"}),
    (SearchFilter(field="metadata.title", operator="gt", value=1), set()),
    (SearchFilter(field="metadata.tags", operator="contains", value="intro"), {"a", "c"}),
    (SearchFilter(field="content", operator="contains", value="amm"), {"c"}),
    (SearchFilter(field="metadata.wordCount", operator="gte", value=100), {"a"}),
    (SearchFilter(field="metadata.missing", operator="eq", value=None), {"a", "b", "c"}),
    (SearchFilter(field="metadata.missing", operator="eq", value="x"), set()),
])
def test_filter_operators(documents, search_filter, expected):
    passing = {doc_id for doc_id, doc in documents.items() if passes_filters(doc, [search_filter])}
    assert passing == expected


def test_filters_are_conjunctive(documents):
    filters = [
        SearchFilter(field="metadata.category", operator="eq", value="api"),
        SearchFilter(field="metadata.tags", operator="contains", value="intro"),
    ]
    assert [doc_id for doc_id, doc in documents.items() if passes_filters(doc, filters)] == ["c"]
    assert passes_filters(documents["a"], [])


def test_resolve_field(documents):
    doc = documents["a"]
    assert resolve_field(doc, "id") == "a"
    assert resolve_field(doc, "metadata.pageId") == "a"
    assert resolve_field(doc, "metadata.tags") == ["intro"]
    assert resolve_field(doc, "metadata.section.name") is None
    assert resolve_field(doc, "nope") is None


def test_numeric_comparisons_exclude_booleans():
    search_filter = SearchFilter(field="x", operator="gt", value=0)
    assert matches_filter(True, search_filter) is False
    assert matches_filter(1.5, search_filter) is True


def test_highlight_window_and_span():
    content = "x" * 80 + "Needle" + "y" * 80
    highlights = Highlighter().highlight(make_document("d", content), ["needle"])

    assert len(highlights) == 1
    highlight = highlights[0]
    assert highlight.field == "content"
    assert highlight.snippet == "x" * 50 + "Needle" + "y" * 50
    assert highlight.positions[0].start == 80
    assert highlight.positions[0].end == 86


def test_highlight_uses_first_matching_term():
    doc = make_document("d", "the beta appears before the alpha here")
    highlight = Highlighter().highlight(doc, ["missing", "alpha", "beta"])[0]

    assert highlight.positions[0].start == doc.content.index("alpha")
    assert len(highlight.positions) == 1


def test_highlight_fallback_without_match():
    content = "z" * 150
    highlight = Highlighter().highlight(make_document("d", content), ["absent"])[0]
    assert highlight.snippet == "z" * 100
    assert highlight.positions == []


def test_highlight_respects_configured_widths():
    doc = make_document("d", "0123456789 target 0123456789")
    highlight = Highlighter(context_chars=3, fallback_chars=5).highlight(doc, ["target"])[0]
    assert highlight.snippet == "89 target 01"


def test_highlight_window_stops_at_line_breaks():
    content = "## Setup\nInstall the needle package first.\nThen run it."
    highlight = Highlighter().highlight(make_document("d", content), ["needle"])[0]

    assert highlight.snippet == "Install the needle package first."
    assert highlight.positions[0].start == content.index("needle")
    assert highlight.positions[0].end == content.index("needle") + len("needle")
