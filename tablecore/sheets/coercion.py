"""
CellCoercer: turn raw spreadsheet cells into the value a field's schema type expects.

Rules:
- ``number`` / ``integer``: not-a-number -> ``None``; otherwise rounded to
  ``NUMBER_PRECISION`` decimals, half away from zero
- date/time cells: ``YYYY-MM-DD`` at midnight, ``YYYY-MM-DD HH:MM`` otherwise
- everything else: strings are stripped, other values pass through
"""

from __future__ import annotations

import math
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from numbers import Integral
from typing import Any, Optional, Union

import pandas as pd

from tablecore.config import get_settings
from tablecore.dates import format_cell_datetime

NUMERIC_TYPES = frozenset({"number", "integer"})
RE_THOUSANDS = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$")

Number = Union[int, float]


class CellCoercer:
    """Stateless helper applying the type-directed import rules."""

    def __init__(self, precision: Optional[int] = None):
        self.precision = get_settings().NUMBER_PRECISION if precision is None else precision

    # ----- numbers ----------------------------------------------------------

    @staticmethod
    def is_missing(value: Any) -> bool:
        if value is None:
            return True
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False

    def round_number(self, value: Number) -> Number:
        """Round half away from zero; integers come back unchanged."""
        if isinstance(value, Integral):
            return int(value)
        quantum = Decimal(1).scaleb(-self.precision)
        rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
        return float(rounded)

    @staticmethod
    def parse_number_text(text: str) -> Optional[Number]:
        """
        Parse numeric text. Commas are accepted only as thousands separators
        (``"1,234.5"``); a decimal comma such as ``"3,5"`` is not a number.
        """
        text = text.strip()
        if not text:
            return None
        if "," in text:
            if not RE_THOUSANDS.match(text):
                return None
            text = text.replace(",", "")
        try:
            return int(text) if text.lstrip("+-").isdigit() else float(text)
        except ValueError:
            return None

    def coerce_number(self, value: Any) -> Optional[Number]:
        """Parse and round a numeric cell; ``None`` when it is not a number."""
        if self.is_missing(value) or isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = self.parse_number_text(value)
            if value is None:
                return None
        elif isinstance(value, Integral):
            value = int(value)
        else:
            try:
                value = float(value)
            except (TypeError, ValueError):
                return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return self.round_number(value)
        except InvalidOperation:
            return None

    # ----- dispatch ---------------------------------------------------------

    def coerce(self, value: Any, declared_type: Optional[str]) -> Any:
        """Coerce one raw cell according to ``declared_type``."""
        if value is pd.NaT:
            return None
        if isinstance(value, pd.Timestamp):
            value = value.to_pydatetime()
        if isinstance(value, date):
            return format_cell_datetime(value)
        if declared_type in NUMERIC_TYPES:
            return self.coerce_number(value)
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, float) and math.isnan(value):
            return None
        return value


def coerce(value: Any, declared_type: Optional[str]) -> Any:
    """Module-level shortcut using the configured precision."""
    return CellCoercer().coerce(value, declared_type)
