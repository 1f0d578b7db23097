"""
Filter descriptors: the per-field filter configurations a FilterSpec holds.

Descriptors arrive from UI state as loose mappings such as
``{"type": "range", "value": [25, 30]}``. ``parse_descriptor`` turns them
into one of the models below, or ``None`` when the entry places no
constraint (absent, empty or malformed).
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from tablecore.dates import END_OF_DAY, parse_date_with_precision
from tablecore.logger import get_logger

logger = get_logger(__name__)

FILTER_CHECKBOX = "checkbox"
FILTER_RANGE = "range"
FILTER_DATERANGE = "daterange"


def stringify_scalar(value: Any) -> Optional[str]:
    """
    Text form of a scalar used by both query search and checkbox matching.

    ``None`` has no text form; booleans are ``"true"``/``"false"`` and
    integral floats drop their ``.0`` so ``25.0`` and ``25`` compare equal.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


class CheckboxFilter(BaseModel):
    """Keep records whose value is one of ``value`` (OR within the set)."""

    type: Literal["checkbox"] = FILTER_CHECKBOX
    value: List[str]

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_options(cls, v: Any) -> Any:
        if isinstance(v, (set, frozenset, tuple)):
            v = list(v)
        if isinstance(v, list):
            return [stringify_scalar(item) if item is not None else "false" for item in v]
        return v

    @property
    def selected(self) -> List[str]:
        return self.value


class RangeFilter(BaseModel):
    """Keep records whose numeric value lies in ``[min, max]``."""

    type: Literal["range"] = FILTER_RANGE
    value: Tuple[float, float]

    @field_validator("value")
    @classmethod
    def _finite_bounds(cls, v: Tuple[float, float]) -> Tuple[float, float]:
        if not all(math.isfinite(b) for b in v):
            raise ValueError("range bounds must be finite numbers")
        return v

    @property
    def min(self) -> float:
        return self.value[0]

    @property
    def max(self) -> float:
        return self.value[1]


class DateRangeFilter(BaseModel):
    """
    Keep records whose date lies in ``[start, end]``.

    A bound given as a bare date covers the whole day: the start bound
    begins at 00:00 and the end bound runs to 23:59:59.999999.
    """

    type: Literal["daterange"] = FILTER_DATERANGE
    value: Tuple[Any, Any]

    @field_validator("value")
    @classmethod
    def _parseable_bounds(cls, v: Tuple[Any, Any]) -> Tuple[Any, Any]:
        for bound in v:
            if parse_date_with_precision(bound) is None:
                raise ValueError(f"unparseable date bound: {bound!r}")
        return v

    @property
    def start(self) -> datetime:
        parsed, _ = parse_date_with_precision(self.value[0])
        return parsed

    @property
    def end(self) -> datetime:
        parsed, date_only = parse_date_with_precision(self.value[1])
        if date_only:
            return datetime.combine(parsed.date(), END_OF_DAY)
        return parsed


class OtherFilter(BaseModel):
    """Any unrecognised filter kind. It never hides a record."""

    model_config = ConfigDict(extra="allow")

    type: Any = None


FilterDescriptor = Union[CheckboxFilter, RangeFilter, DateRangeFilter, OtherFilter]

_MODELS = {
    FILTER_CHECKBOX: CheckboxFilter,
    FILTER_RANGE: RangeFilter,
    FILTER_DATERANGE: DateRangeFilter,
}


def parse_descriptor(raw: Any) -> Optional[FilterDescriptor]:
    """
    Normalise one FilterSpec entry.

    Returns ``None`` for entries that impose no constraint: ``None``, an
    empty mapping, or a known kind with a missing/invalid ``value``.
    """
    if raw is None:
        return None
    if isinstance(raw, (CheckboxFilter, RangeFilter, DateRangeFilter, OtherFilter)):
        return raw
    if not isinstance(raw, Mapping) or not raw:
        return None

    kind = raw.get("type")
    model = _MODELS.get(kind) if isinstance(kind, str) else None
    if model is None:
        logger.debug("Unrecognised filter type %r, treating as pass-through", kind)
        return OtherFilter.model_validate(dict(raw))
    if raw.get("value") is None:
        return None
    try:
        return model.model_validate(dict(raw))
    except ValidationError as e:
        logger.debug("Ignoring malformed %s filter: %s", kind, e.errors())
        return None
