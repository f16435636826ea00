"""Metadata filters applied to fused results.

A filter names a document field (``id``, ``content``) or a dotted path into
the metadata (``metadata.category``, ``metadata.tags``). Path segments may be
snake_case or camelCase. A path that does not resolve yields ``None``, which
is then compared with the normal operator semantics.
"""

import re
from numbers import Number
from typing import Any, Iterable

from ..models import Document, FilterOperator, SearchFilter

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _lookup(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        if name in obj:
            return obj[name]
        return obj.get(_CAMEL_BOUNDARY.sub("_", name).lower())

    if hasattr(obj, name):
        return getattr(obj, name)
    return getattr(obj, _CAMEL_BOUNDARY.sub("_", name).lower(), None)


def resolve_field(document: Document, path: str) -> Any:
    """Resolve a dotted field path against a document, ``None`` when missing."""
    value: Any = document
    for segment in path.split("."):
        if value is None:
            return None
        value = _lookup(value, segment)
    return value


def matches_filter(value: Any, search_filter: SearchFilter) -> bool:
    """Evaluate one filter against an already resolved field value."""
    operator = search_filter.operator
    expected = search_filter.value

    if operator == FilterOperator.EQ:
        return value == expected
    if operator == FilterOperator.NE:
        return value != expected
    if operator == FilterOperator.IN:
        return isinstance(expected, (list, tuple, set)) and value in expected
    if operator == FilterOperator.NIN:
        return isinstance(expected, (list, tuple, set)) and value not in expected

    if operator in (FilterOperator.GT, FilterOperator.LT, FilterOperator.GTE, FilterOperator.LTE):
        if not (_is_number(value) and _is_number(expected)):
            return False
        if operator == FilterOperator.GT:
            return value > expected
        if operator == FilterOperator.LT:
            return value < expected
        if operator == FilterOperator.GTE:
            return value >= expected
        return value <= expected

    if operator == FilterOperator.CONTAINS:
        if isinstance(value, str):
            return isinstance(expected, str) and expected in value
        if isinstance(value, (list, tuple, set)):
            return expected in value
        return False

    return True


def passes_filters(document: Document, filters: Iterable[SearchFilter]) -> bool:
    """``True`` when the document satisfies every filter."""
    return all(
        matches_filter(resolve_field(document, search_filter.field), search_filter)
        for search_filter in filters
    )
