"""
WorkbookReader: load spreadsheet files into raw cell matrices.

Produces the ``{sheet_name: [[cell, ...], ...]}`` mapping the importer
consumes. ``.xlsx``/``.xlsm`` files are read with openpyxl (cached values,
dates as ``datetime``); ``.csv`` files become a single sheet named after
the file.
"""

from __future__ import annotations

import zipfile
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from openpyxl import load_workbook

from tablecore.errors import WorkbookReadError
from tablecore.logger import get_logger
from tablecore.sheets.csv_reader import extract_table_name, read_csv_rows

logger = get_logger(__name__)

RawSheets = Dict[str, List[List[Any]]]
Source = Union[str, Path, bytes, BytesIO]


def _trim_row(row: Iterable[Any]) -> List[Any]:
    cells = list(row)
    while cells and (cells[-1] is None or (isinstance(cells[-1], str) and not cells[-1].strip())):
        cells.pop()
    return cells


class WorkbookReader:
    """Read every (or selected) sheet of a workbook into lists of rows."""

    def read(self, source: Source, sheet_names: Optional[Iterable[str]] = None) -> RawSheets:
        if isinstance(source, (str, Path)) and Path(source).suffix.lower() == ".csv":
            return self._read_csv(Path(source))
        return self._read_xlsx(source, sheet_names)

    def _read_csv(self, path: Path) -> RawSheets:
        try:
            text = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise WorkbookReadError(f"Cannot read {path}: {e}") from e
        return {extract_table_name(path.name): read_csv_rows(text)}

    def _read_xlsx(self, source: Source, sheet_names: Optional[Iterable[str]]) -> RawSheets:
        handle = BytesIO(source) if isinstance(source, bytes) else source
        try:
            wb = load_workbook(handle, read_only=True, data_only=True)
        except (OSError, KeyError, ValueError, zipfile.BadZipFile) as e:
            raise WorkbookReadError(f"Cannot open workbook: {e}") from e

        wanted = set(sheet_names) if sheet_names is not None else None
        sheets: RawSheets = {}
        try:
            for ws in wb.worksheets:
                if wanted is not None and ws.title not in wanted:
                    continue
                rows = [_trim_row(row) for row in ws.iter_rows(values_only=True)]
                while rows and not rows[-1]:
                    rows.pop()
                sheets[ws.title] = rows
                logger.debug("Read sheet %s: %d rows", ws.title, len(rows))
        finally:
            wb.close()
        return sheets


def read_workbook_cells(source: Source, sheet_names: Optional[Iterable[str]] = None) -> RawSheets:
    """Shortcut for ``WorkbookReader().read(...)``."""
    return WorkbookReader().read(source, sheet_names)
