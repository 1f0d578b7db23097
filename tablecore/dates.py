"""
Date helpers shared by the filter engine and the spreadsheet codec.

- ``parse_date``: lenient parsing of cell/record values into naive datetimes
- ``format_cell_datetime``: minute-granularity text used for imported date cells
- ``format_date_for_filename`` / ``to_iso_string_local``: download and
  filter-bound formatting
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any, Optional, Tuple

import pandas as pd

DATE_FORMATS: Tuple[Tuple[str, bool], ...] = (
    ("%Y/%m/%d", True),
    ("%Y/%m/%d %H:%M", False),
    ("%Y/%m/%d %H:%M:%S", False),
    ("%d/%m/%Y", True),
    ("%d/%m/%Y %H:%M", False),
    ("%Y.%m.%d", True),
    ("%d.%m.%Y", True),
    ("%Y%m%d", True),
)

RE_ISO_DATE_ONLY = re.compile(r"^\d{4}-?\d{2}-?\d{2}$")
END_OF_DAY = time(23, 59, 59, 999999)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date_with_precision(value: Any) -> Optional[Tuple[datetime, bool]]:
    """
    Parse ``value`` and report whether it carried only a calendar date.

    Returns ``(naive_datetime, date_only)`` or ``None`` when the value is not
    a date. Timezone-aware inputs are converted to UTC; numbers and booleans
    are never treated as dates.
    """
    if value is None or value is pd.NaT or isinstance(value, (bool, int, float)):
        return None
    if isinstance(value, pd.Timestamp):
        return _to_naive_utc(value.to_pydatetime()), False
    if isinstance(value, datetime):
        return _to_naive_utc(value), False
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day), True
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return _to_naive_utc(parsed), bool(RE_ISO_DATE_ONLY.match(text))
    except ValueError:
        pass

    for fmt, date_only in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt), date_only
        except ValueError:
            continue
    return None


def parse_date(value: Any) -> Optional[datetime]:
    """Parse ``value`` into a naive datetime, or ``None`` if it is not a date."""
    parsed = parse_date_with_precision(value)
    return parsed[0] if parsed else None


def is_date_value(value: Any) -> bool:
    return parse_date_with_precision(value) is not None


def format_cell_datetime(value: date) -> str:
    """
    Format a date/datetime cell at minute granularity.

    Values at midnight become ``YYYY-MM-DD``; anything else becomes
    ``YYYY-MM-DD HH:MM``. The value's own calendar fields are used as-is.
    """
    if not isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if value.hour == 0 and value.minute == 0:
        return value.strftime("%Y-%m-%d")
    return value.strftime("%Y-%m-%d %H:%M")


def format_date_for_filename(value: Any) -> str:
    """Format a date as ``YYYY-MM-DD-HH-MM`` for use in download file names."""
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Not a date: {value!r}")
    return parsed.strftime("%Y-%m-%d-%H-%M")


def to_iso_string_local(value: Optional[date], is_end_date: bool = False) -> Optional[str]:
    """
    Pin a date to the start (00:00) or end (23:59) of its local day and
    return an ISO string with the local UTC offset, e.g.
    ``2023-12-25T23:59:00.000+01:00``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        local = value.astimezone() if value.tzinfo is not None else value
        day = local.date()
    else:
        day = value
    pinned = datetime.combine(day, time(23, 59) if is_end_date else time(0, 0))
    return pinned.astimezone().isoformat(timespec="milliseconds")
