"""
TabularExporter: schema-typed record collections -> worksheets.

For each table present in the data (and visible in the catalog):

- ``array`` tables get a header row of display titles followed by one row
  per record, columns in catalog order restricted to visible fields. An
  empty table still gets its header row when it declares required fields.
- ``object`` tables get one ``(title, value)`` row per visible declared
  property.

Populating the workbook is synchronous; ``serialize()`` is the only awaited
step and the only failure surfaced to callers (as ``WorkbookExportError``).
"""

from __future__ import annotations

import json
import math
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from tablecore.errors import WorkbookExportError
from tablecore.logger import get_logger
from tablecore.schema import TABLE_TYPE_OBJECT, SchemaCatalog
from tablecore.sheets.importer import merge_object_records
from tablecore.sheets.workbook import OpenpyxlWorkbook, Sheet, WorkbookContainer

logger = get_logger(__name__)

README_SHEET = "_README"
TYPES_SHEET = "_TYPES"


def to_cell_value(value: Any) -> Any:
    """Render a record value as something a spreadsheet cell can hold."""
    if value is None:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (str, bool, int, float, date)):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _finish_sheet(sheet: Sheet, header_columns: int) -> None:
    format_header = getattr(sheet, "format_header", None)
    if header_columns and callable(format_header):
        format_header(header_columns)
    fit = getattr(sheet, "fit_column_widths", None)
    if callable(fit):
        fit()


class TabularExporter:
    """Write record collections into a ``WorkbookContainer``."""

    def __init__(self, locale: Optional[str] = None):
        self._locale = locale

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def populate(
        self,
        workbook: WorkbookContainer,
        data: Mapping[str, Any],
        schema: SchemaCatalog,
    ) -> List[str]:
        """Create one sheet per exportable table; return the tables written."""
        written: List[str] = []
        for table, table_data in data.items():
            if not schema.get_table_visible(table):
                logger.debug("Skipping hidden table %s", table)
                continue
            if schema.get_table_type(table) == TABLE_TYPE_OBJECT:
                created = self._write_object_table(workbook, table, table_data, schema)
            else:
                created = self._write_array_table(workbook, table, table_data, schema)
            if created:
                written.append(table)
        logger.info("Populated workbook with %d tables: %s", len(written), written)
        return written

    async def export_workbook(
        self,
        workbook: WorkbookContainer,
        data: Mapping[str, Any],
        schema: SchemaCatalog,
    ) -> bytes:
        """Populate ``workbook`` from ``data`` and serialize it; returns the bytes."""
        self.populate(workbook, data, schema)
        return await serialize_workbook(workbook)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _columns(self, table: str, records: Sequence[Mapping[str, Any]], schema: SchemaCatalog) -> List[str]:
        declared = schema.get_field_names(table)
        if declared:
            return [f for f in declared if schema.get_field_visible(table, f)]
        columns: Dict[str, None] = {}
        for record in records:
            columns.update(dict.fromkeys(record.keys()))
        return list(columns)

    def _write_array_table(
        self,
        workbook: WorkbookContainer,
        table: str,
        table_data: Any,
        schema: SchemaCatalog,
    ) -> bool:
        if isinstance(table_data, Mapping):
            records: List[Mapping[str, Any]] = [table_data]
        elif isinstance(table_data, (list, tuple)):
            records = [r for r in table_data if isinstance(r, Mapping)]
        else:
            records = []

        if not records and not schema.get_required_fields(table):
            logger.debug("Skipping empty table %s (no required fields)", table)
            return False

        columns = self._columns(table, records, schema)
        header = [schema.get_field_title(table, f, self._locale) for f in columns]
        rows = [[to_cell_value(record.get(f)) for f in columns] for record in records]

        sheet = workbook.create_sheet(table)
        sheet.append_rows([header] + rows)
        _finish_sheet(sheet, len(header))
        logger.debug("Wrote table %s: %d columns, %d rows", table, len(columns), len(rows))
        return True

    def _write_object_table(
        self,
        workbook: WorkbookContainer,
        table: str,
        table_data: Any,
        schema: SchemaCatalog,
    ) -> bool:
        if isinstance(table_data, (list, tuple)):
            values = merge_object_records([r for r in table_data if isinstance(r, Mapping)])
        elif isinstance(table_data, Mapping):
            values = dict(table_data)
        else:
            values = {}

        keys = schema.get_field_names(table) or list(values.keys())
        rows = [
            [schema.get_field_title(table, key, self._locale), to_cell_value(values.get(key))]
            for key in keys
            if schema.get_field_visible(table, key)
        ]

        sheet = workbook.create_sheet(table)
        sheet.append_rows(rows)
        _finish_sheet(sheet, 0)
        logger.debug("Wrote object table %s: %d properties", table, len(rows))
        return True

    # ------------------------------------------------------------------
    # Schema documentation sheets
    # ------------------------------------------------------------------

    def write_schema_readme(self, workbook: WorkbookContainer, schemas: Sequence[SchemaCatalog]) -> None:
        """Append ``_README`` (table descriptions) and ``_TYPES`` (column types) sheets."""
        readme_rows = [["table", "description"]]
        types_rows = [["table", "column", "type"]]
        for catalog in schemas:
            for table in catalog.table_names():
                readme_rows.append([table, catalog.get_table_description(table, self._locale)])
                for entry in catalog.describe_fields(table):
                    types_rows.append([entry["table"], entry["column"], entry["type"]])

        for name, rows in ((README_SHEET, readme_rows), (TYPES_SHEET, types_rows)):
            sheet = workbook.create_sheet(name)
            sheet.append_rows(rows)
            _finish_sheet(sheet, len(rows[0]))


async def serialize_workbook(workbook: WorkbookContainer) -> bytes:
    """Await the container's serialization, surfacing failures as ``WorkbookExportError``."""
    try:
        return await workbook.serialize()
    except Exception as e:
        logger.error("Workbook serialization failed: %s", e)
        raise WorkbookExportError(f"Failed to serialize workbook: {e}") from e


async def export_workbook(
    workbook: WorkbookContainer,
    data: Mapping[str, Any],
    schema: SchemaCatalog,
    locale: Optional[str] = None,
) -> bytes:
    """Shortcut for ``TabularExporter(locale).export_workbook(...)``."""
    return await TabularExporter(locale=locale).export_workbook(workbook, data, schema)


async def export_experiment(
    instance_data: Mapping[str, Any],
    instance_schema: SchemaCatalog,
    solution_data: Optional[Mapping[str, Any]] = None,
    solution_schema: Optional[SchemaCatalog] = None,
    locale: Optional[str] = None,
    include_readme: bool = False,
) -> bytes:
    """
    Build a single ``.xlsx`` holding an instance and, optionally, its solution.

    Tables from both collections share the workbook; with ``include_readme``
    the ``_README`` and ``_TYPES`` documentation sheets are appended.
    """
    exporter = TabularExporter(locale=locale)
    workbook = OpenpyxlWorkbook()
    exporter.populate(workbook, instance_data, instance_schema)
    catalogs = [instance_schema]
    if solution_data and solution_schema is not None:
        exporter.populate(workbook, solution_data, solution_schema)
        catalogs.append(solution_schema)
    if include_readme:
        exporter.write_schema_readme(workbook, catalogs)
    return await serialize_workbook(workbook)


def write_schema_readme(
    workbook: WorkbookContainer,
    schemas: Sequence[SchemaCatalog],
    locale: Optional[str] = None,
) -> None:
    """Shortcut for ``TabularExporter(locale).write_schema_readme(...)``."""
    TabularExporter(locale=locale).write_schema_readme(workbook, schemas)
