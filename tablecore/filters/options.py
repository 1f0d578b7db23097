"""
Filter options: derive the filter controls for a table from its schema and data.

Given a SchemaCatalog table and the current records, ``build_filter_options``
reports, per field, which filter kind applies and what it should offer
(checkbox choices, numeric bounds, date bounds), along with whether the
field is currently constrained by the caller's FilterSpec.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from tablecore.dates import parse_date
from tablecore.filters.descriptors import (
    FILTER_CHECKBOX,
    FILTER_DATERANGE,
    FILTER_RANGE,
    stringify_scalar,
)
from tablecore.filters.engine import to_finite_number
from tablecore.logger import get_logger
from tablecore.schema import SchemaCatalog

logger = get_logger(__name__)

_TYPE_TO_FILTER = {
    "string": FILTER_CHECKBOX,
    "boolean": FILTER_CHECKBOX,
    "integer": FILTER_RANGE,
    "number": FILTER_RANGE,
    "date": FILTER_DATERANGE,
}


class CheckboxOption(BaseModel):
    label: Any
    value: Any
    checked: bool = False


class FilterOption(BaseModel):
    """Everything a UI needs to render the filter control for one field."""

    title: str
    filterable: bool = False
    type: str = ""
    selected: bool = False
    required: bool = False
    options: List[CheckboxOption] = Field(default_factory=list)
    min: Any = None
    max: Any = None


def get_filter_type(schema_type: Any) -> str:
    """Map a schema type to ``checkbox``/``range``/``daterange``, or ``""`` if none applies."""
    if isinstance(schema_type, (list, tuple)):
        schema_type = schema_type[0] if schema_type else None
    return _TYPE_TO_FILTER.get(schema_type, "") if isinstance(schema_type, str) else ""


def get_column_values(records: Any, column: str) -> List[Any]:
    """Distinct values of ``column`` in first-seen order, from rows that have it."""
    if not isinstance(records, (list, tuple)):
        return []
    values: List[Any] = []
    for row in records:
        if not isinstance(row, Mapping) or column not in row:
            continue
        value = row[column]
        if not any(value is v or (type(value) is type(v) and value == v) for v in values):
            values.append(value)
    return values


def _numeric_values(records: Sequence[Mapping[str, Any]], column: str) -> List[float]:
    numbers = []
    for value in get_column_values(records, column):
        if isinstance(value, str):
            continue
        number = to_finite_number(value)
        if number is not None:
            numbers.append(number)
    return numbers


def get_filter_min_value(records: Sequence[Mapping[str, Any]], column: str) -> float:
    """Smallest numeric value in ``column``; 0 when there is none."""
    numbers = _numeric_values(records, column)
    return min(numbers) if numbers else 0


def get_filter_max_value(records: Sequence[Mapping[str, Any]], column: str) -> float:
    numbers = _numeric_values(records, column)
    return max(numbers) if numbers else 0


def _dated_values(records: Sequence[Mapping[str, Any]], column: str) -> List[tuple]:
    dated = []
    for value in get_column_values(records, column):
        parsed = parse_date(value)
        if parsed is not None:
            dated.append((parsed, value))
    return dated


def get_filter_min_date(records: Sequence[Mapping[str, Any]], column: str) -> Any:
    """Earliest date in ``column`` as it appears in the data, or ``None``."""
    dated = _dated_values(records, column)
    return min(dated, key=lambda pair: pair[0])[1] if dated else None


def get_filter_max_date(records: Sequence[Mapping[str, Any]], column: str) -> Any:
    dated = _dated_values(records, column)
    return max(dated, key=lambda pair: pair[0])[1] if dated else None


def is_filter_selected(selected: Optional[Mapping[str, Any]], field: str) -> bool:
    entry = (selected or {}).get(field)
    if entry is None:
        return False
    if isinstance(entry, Mapping):
        return bool(entry)
    return True


def is_filter_checked(selected: Optional[Mapping[str, Any]], field: str, value: Any) -> bool:
    entry = (selected or {}).get(field)
    if entry is None:
        return False
    chosen = entry.get("value") if isinstance(entry, Mapping) else getattr(entry, "value", None)
    if not isinstance(chosen, (list, tuple, set, frozenset)):
        return False
    text = stringify_scalar(value)
    return (text if text is not None else "false") in {
        stringify_scalar(c) if c is not None else "false" for c in chosen
    }


def build_filter_options(
    catalog: SchemaCatalog,
    table: str,
    records: Sequence[Mapping[str, Any]],
    selected: Optional[Mapping[str, Any]] = None,
    locale: Optional[str] = None,
) -> Dict[str, FilterOption]:
    """
    Build the filter control description for every field of ``table``.

    Checkbox fields get one option per distinct value; a checkbox field
    whose first value parses as a date is promoted to a date range; boolean
    fields always offer exactly ``true`` and ``false``. Range fields carry
    numeric bounds taken from the data.
    """
    required = set(catalog.get_required_fields(table))
    result: Dict[str, FilterOption] = {}

    for field in catalog.get_field_names(table):
        field_type = catalog.get_field_type(table, field)
        option = FilterOption(
            title=catalog.get_field_title(table, field, locale),
            filterable=catalog.get_field_filterable(table, field),
            type=get_filter_type(field_type),
            selected=is_filter_selected(selected, field),
            required=field in required,
        )

        if field_type == "boolean":
            option.options = [
                CheckboxOption(label="true", value="true", checked=is_filter_checked(selected, field, "true")),
                CheckboxOption(label="false", value="false", checked=is_filter_checked(selected, field, "false")),
            ]
        elif option.type == FILTER_CHECKBOX:
            option.options = [
                CheckboxOption(label=v, value=v, checked=is_filter_checked(selected, field, v))
                for v in get_column_values(records, field)
            ]
            first = option.options[0].label if option.options else None
            if isinstance(first, str) and parse_date(first) is not None:
                option.type = FILTER_DATERANGE
                option.min = get_filter_min_date(records, field)
                option.max = get_filter_max_date(records, field)
        elif option.type == FILTER_RANGE:
            option.min = get_filter_min_value(records, field)
            option.max = get_filter_max_value(records, field)
        elif option.type == FILTER_DATERANGE:
            option.min = get_filter_min_date(records, field)
            option.max = get_filter_max_date(records, field)

        result[field] = option

    logger.debug("build_filter_options: table=%s fields=%d", table, len(result))
    return result
