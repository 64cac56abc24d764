"""Attribute filtering for selective log output.

An attribute filter is a predicate called with each attribute key and value.
Attributes for which it returns False are removed before conversion. A filter
of None keeps every attribute.

Example:
    >>> from spanlog import SpanLogExporter
    >>> from spanlog.filters import exclude_prefixes
    >>> exporter = SpanLogExporter(attribute_filter=exclude_prefixes("http."))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional

AttributeFilter = Callable[[str, Any], bool]


def filter_attributes(
    attributes: Optional[Mapping[str, Any]],
    attribute_filter: Optional[AttributeFilter],
) -> Mapping[str, Any]:
    """Return the attributes accepted by the filter, in their original order.

    Args:
        attributes: Span or event attributes. None is treated as empty.
        attribute_filter: Predicate deciding inclusion, or None to keep all.

    Returns:
        The original mapping when no filter is given, otherwise a new dict.
    """
    if not attributes:
        return {}
    if attribute_filter is None:
        return attributes
    return {k: v for k, v in attributes.items() if attribute_filter(k, v)}


def include_keys(*keys: str) -> AttributeFilter:
    """Keep only the given keys."""
    allowed = frozenset(keys)

    def _filter(key: str, value: Any) -> bool:
        return key in allowed

    return _filter


def exclude_keys(*keys: str) -> AttributeFilter:
    """Drop the given keys."""
    denied = frozenset(keys)

    def _filter(key: str, value: Any) -> bool:
        return key not in denied

    return _filter


def exclude_prefixes(*prefixes: str) -> AttributeFilter:
    """Drop every key starting with one of the prefixes."""
    denied = tuple(prefixes)

    def _filter(key: str, value: Any) -> bool:
        return not key.startswith(denied)

    return _filter


def all_of(*filters: AttributeFilter) -> Optional[AttributeFilter]:
    """Combine filters; an attribute is kept only if every filter keeps it.

    Returns None when called without filters so the result can be passed
    straight to the exporter as "keep everything".
    """
    if not filters:
        return None
    if len(filters) == 1:
        return filters[0]

    def _filter(key: str, value: Any) -> bool:
        return all(f(key, value) for f in filters)

    return _filter
