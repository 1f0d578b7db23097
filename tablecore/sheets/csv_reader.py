"""
CSV input: turn delimited text into a table of records.

The delimiter is guessed from the first line (comma, semicolon or tab).
Values are trimmed, surrounding quotes removed, and numeric text converted
to numbers; blank lines are skipped. A row shorter than the header only
gets the columns it actually has.
"""

from __future__ import annotations

import csv
from io import StringIO
from typing import Any, Dict, List, Tuple, Union

CANDIDATE_DELIMITERS: Tuple[str, ...] = (",", ";", "\t")
DEFAULT_DELIMITER = ","


def detect_delimiter(text: str) -> str:
    """Pick the candidate delimiter occurring most often on the first line."""
    first_line = str(text).split("\n", 1)[0]
    best, best_count = DEFAULT_DELIMITER, 0
    for delimiter in CANDIDATE_DELIMITERS:
        count = first_line.count(delimiter)
        if count > best_count:
            best, best_count = delimiter, count
    return best


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def convert_value(value: str) -> Union[str, int, float]:
    """``"42"`` -> 42, ``"3.5"`` -> 3.5, anything else unchanged."""
    text = _strip_quotes(value.strip())
    if not text:
        return text
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return text
    return number if text.lower() not in ("nan", "inf", "-inf", "infinity", "-infinity") else text


def read_csv_rows(text: str, delimiter: str = "") -> List[List[Any]]:
    """Parse CSV text into a raw cell matrix (header row included)."""
    delimiter = delimiter or detect_delimiter(text)
    rows: List[List[Any]] = []
    for row in csv.reader(StringIO(text), delimiter=delimiter):
        if not row or all(not cell.strip() for cell in row):
            continue
        rows.append([convert_value(cell) for cell in row])
    return rows


def parse_csv_content(text: str, delimiter: str) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Return ``(headers, records)`` for CSV ``text``."""
    rows = read_csv_rows(text, delimiter)
    if not rows:
        return [], []
    headers = [str(h).strip() for h in rows[0]]
    records = [
        {headers[i]: row[i] for i in range(min(len(headers), len(row)))}
        for row in rows[1:]
    ]
    return headers, records


def extract_table_name(filename: str) -> str:
    """``"orders.csv"`` -> ``"orders"``."""
    return filename.split(".")[0]


def parse_csv_to_data(text: str, filename: str) -> Tuple[str, Dict[str, List[Dict[str, Any]]]]:
    """Parse a CSV upload into ``(table_name, {table_name: records})``."""
    _, records = parse_csv_content(text, detect_delimiter(text))
    table_name = extract_table_name(filename)
    return table_name, {table_name: records}
