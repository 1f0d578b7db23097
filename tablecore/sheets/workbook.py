"""
Workbook containers the exporter writes into.

``WorkbookContainer`` is the small interface the exporter relies on
(``create_sheet`` + async ``serialize``). ``OpenpyxlWorkbook`` implements it
on top of openpyxl and adds header styling and column widths.
"""

from __future__ import annotations

import asyncio
import re
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from tablecore.config import get_settings
from tablecore.logger import get_logger
from tablecore.sheets.columns import number_to_letters

logger = get_logger(__name__)

MAX_SHEET_TITLE = 31
RE_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")

_THIN = Side(style="thin", color="A6A6A6")
HEADER_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


class Sheet(Protocol):
    def append_rows(self, rows: Iterable[Sequence[Any]]) -> None: ...


class WorkbookContainer(Protocol):
    def create_sheet(self, name: str) -> Sheet: ...

    async def serialize(self) -> bytes: ...


def sanitize_sheet_title(name: str) -> str:
    """Strip characters Excel forbids in sheet titles and cap the length."""
    title = RE_INVALID_TITLE_CHARS.sub("_", str(name)).strip("'") or "Sheet"
    return title[:MAX_SHEET_TITLE]


class OpenpyxlSheet:
    """One worksheet; rows are appended in order."""

    def __init__(self, worksheet: Worksheet):
        self.worksheet = worksheet

    @property
    def title(self) -> str:
        return self.worksheet.title

    def append_rows(self, rows: Iterable[Sequence[Any]]) -> None:
        for row in rows:
            self.worksheet.append(list(row))

    def rows(self) -> List[List[Any]]:
        return [list(r) for r in self.worksheet.iter_rows(values_only=True)]

    def format_header(self, column_count: int, row: int = 1) -> None:
        """Bold, filled and bordered header cells across ``column_count`` columns."""
        settings = get_settings()
        fill = PatternFill(start_color=settings.HEADER_FILL_COLOR, end_color=settings.HEADER_FILL_COLOR, fill_type="solid")
        for col in range(1, column_count + 1):
            cell = self.worksheet.cell(row, col)
            cell.font = Font(bold=True)
            cell.fill = fill
            cell.border = HEADER_BORDER

    def fit_column_widths(self) -> None:
        """Size each column to its longest rendered value, within the configured bounds."""
        settings = get_settings()
        widths: Dict[int, int] = {}
        for row in self.worksheet.iter_rows(values_only=True):
            for idx, value in enumerate(row, start=1):
                length = len(str(value)) if value is not None else 0
                widths[idx] = max(widths.get(idx, 0), length)
        for idx, length in widths.items():
            width = min(max(length + 2, settings.MIN_COLUMN_WIDTH), settings.MAX_COLUMN_WIDTH)
            self.worksheet.column_dimensions[number_to_letters(idx)].width = width


class OpenpyxlWorkbook:
    """In-memory ``.xlsx`` workbook implementing ``WorkbookContainer``."""

    def __init__(self, workbook: Optional[Workbook] = None):
        if workbook is None:
            workbook = Workbook()
            workbook.remove(workbook.active)
        self.workbook = workbook

    @property
    def sheet_names(self) -> List[str]:
        return list(self.workbook.sheetnames)

    def create_sheet(self, name: str) -> OpenpyxlSheet:
        title = sanitize_sheet_title(name)
        if title != name:
            logger.warning("Sheet title %r sanitized to %r", name, title)
        return OpenpyxlSheet(self.workbook.create_sheet(title=title))

    def get_sheet(self, name: str) -> OpenpyxlSheet:
        return OpenpyxlSheet(self.workbook[sanitize_sheet_title(name)])

    def to_bytes(self) -> bytes:
        if not self.workbook.sheetnames:
            self.workbook.create_sheet(title="Sheet")
        buffer = BytesIO()
        self.workbook.save(buffer)
        return buffer.getvalue()

    async def serialize(self) -> bytes:
        return await asyncio.to_thread(self.to_bytes)
