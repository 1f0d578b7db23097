"""
Record filtering subpackage.

Public API:
  - filter_records         (query + per-field filtering, in engine.py)
  - matches_query          (deep case-insensitive text search)
  - matches_descriptor     (one value against one descriptor)
  - parse_descriptor       (loose mapping -> descriptor model)
  - build_filter_options   (filter controls derived from schema + data)
"""

from tablecore.filters.descriptors import (
    CheckboxFilter,
    DateRangeFilter,
    FilterDescriptor,
    OtherFilter,
    RangeFilter,
    parse_descriptor,
)
from tablecore.filters.engine import filter_records, matches_descriptor, matches_query
from tablecore.filters.options import FilterOption, build_filter_options, get_filter_type

__all__ = [
    "CheckboxFilter",
    "DateRangeFilter",
    "FilterDescriptor",
    "OtherFilter",
    "RangeFilter",
    "parse_descriptor",
    "filter_records",
    "matches_descriptor",
    "matches_query",
    "FilterOption",
    "build_filter_options",
    "get_filter_type",
]
