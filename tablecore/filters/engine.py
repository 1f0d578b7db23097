"""
FilterEngine: free-text search and typed per-field filters over records.

A record is kept when it matches the search query (or the query is empty)
AND every constrained field matches its descriptor. Inputs are never
modified; the result is a new list in the original order.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from tablecore.dates import parse_date
from tablecore.filters.descriptors import (
    CheckboxFilter,
    DateRangeFilter,
    FilterDescriptor,
    RangeFilter,
    parse_descriptor,
    stringify_scalar,
)
from tablecore.logger import get_logger

logger = get_logger(__name__)

Record = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Query search
# ---------------------------------------------------------------------------

def _deep_contains(value: Any, needle: str, seen: Set[int]) -> bool:
    if value is None:
        return False
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        marker = id(value)
        if marker in seen:
            return False
        seen.add(marker)
        children = value.values() if isinstance(value, Mapping) else value
        return any(_deep_contains(child, needle, seen) for child in children)
    text = stringify_scalar(value)
    return text is not None and needle in text.lower()


def matches_query(record: Any, query: str, ignored_fields: Iterable[str] = ()) -> bool:
    """
    Case-insensitive substring search through every nested value of ``record``.

    Top-level keys listed in ``ignored_fields`` are not searched. An empty
    query matches everything.
    """
    if not query:
        return True
    needle = query.lower()
    seen: Set[int] = set()
    if not isinstance(record, Mapping):
        return _deep_contains(record, needle, seen)

    ignored = set(ignored_fields)
    seen.add(id(record))
    return any(
        _deep_contains(value, needle, seen)
        for key, value in record.items()
        if key not in ignored
    )


# ---------------------------------------------------------------------------
# Descriptor matching
# ---------------------------------------------------------------------------

def to_finite_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def matches_descriptor(value: Any, descriptor: Optional[FilterDescriptor]) -> bool:
    """Test one field value against one (already parsed) descriptor."""
    if descriptor is None:
        return True
    if isinstance(descriptor, CheckboxFilter):
        text = stringify_scalar(value)
        return (text if text is not None else "false") in descriptor.value
    if isinstance(descriptor, RangeFilter):
        number = to_finite_number(value)
        return number is not None and descriptor.min <= number <= descriptor.max
    if isinstance(descriptor, DateRangeFilter):
        parsed = parse_date(value)
        return parsed is not None and descriptor.start <= parsed <= descriptor.end
    return True


def _active_descriptors(filters: Optional[Mapping[str, Any]]) -> List[Tuple[str, FilterDescriptor]]:
    active: List[Tuple[str, FilterDescriptor]] = []
    for field, raw in (filters or {}).items():
        descriptor = parse_descriptor(raw)
        if descriptor is not None:
            active.append((field, descriptor))
    return active


def filter_records(
    records: Sequence[Record],
    query: str = "",
    filters: Optional[Mapping[str, Any]] = None,
    ignored_fields: Iterable[str] = (),
) -> List[Record]:
    """
    Return the records matching ``query`` and every descriptor in ``filters``.

    Args:
        records: rows to filter; not modified
        query: free-text search, case-insensitive; empty means no search
        filters: field name -> descriptor (model or raw mapping); ``None``,
            empty or malformed entries are unconstrained
        ignored_fields: top-level fields excluded from the text search
    """
    ignored = tuple(ignored_fields)
    active = _active_descriptors(filters)

    kept: List[Record] = []
    for record in records:
        if not matches_query(record, query, ignored):
            continue
        getter = record.get if isinstance(record, Mapping) else (lambda _field: None)
        if all(matches_descriptor(getter(field), descriptor) for field, descriptor in active):
            kept.append(record)

    logger.debug(
        "filter_records: kept %d/%d (query=%r, active_filters=%s)",
        len(kept), len(records), query, [field for field, _ in active],
    )
    return kept
