"""
TabularImporter: raw sheet matrices -> schema-typed record collections.

For every table the SchemaCatalog declares:

- ``array`` tables: row 0 is the header, each following row one record.
  A header cell naming a declared field (by key or display title) selects
  that field; any other header falls back to the field at the same
  position in catalog order.
- ``object`` tables: every row is a ``(key, value)`` pair and yields one
  single-field record ``{key: value}``, in sheet order.

A table whose sheet is missing or unreadable imports as ``[]``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from tablecore.logger import get_logger
from tablecore.schema import TABLE_TYPE_OBJECT, SchemaCatalog
from tablecore.sheets.coercion import CellCoercer
from tablecore.sheets.workbook import sanitize_sheet_title

logger = get_logger(__name__)

Record = Dict[str, Any]


def _header_key(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _is_blank_row(row: Sequence[Any]) -> bool:
    return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in row)


def _find_sheet(raw_sheets: Mapping[str, Any], table: str) -> Any:
    """Sheet rows for ``table``, also under the title the exporter gives it."""
    if not isinstance(raw_sheets, Mapping):
        return None
    if table in raw_sheets:
        return raw_sheets[table]
    return raw_sheets.get(sanitize_sheet_title(table))


def merge_object_records(records: Sequence[Mapping[str, Any]]) -> Record:
    """Collapse the one-record-per-property shape of an object table into one mapping."""
    merged: Record = {}
    for record in records:
        merged.update(record)
    return merged


class TabularImporter:
    """Convert raw cell matrices into records typed by a SchemaCatalog."""

    def __init__(self, coercer: Optional[CellCoercer] = None, locale: Optional[str] = None):
        self._coercer = coercer or CellCoercer()
        self._locale = locale

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def import_workbook(
        self,
        raw_sheets: Mapping[str, Any],
        schema: SchemaCatalog,
    ) -> Dict[str, List[Record]]:
        """Import every table declared by ``schema`` from ``raw_sheets``."""
        result: Dict[str, List[Record]] = {}
        for table in schema.table_names():
            rows = _find_sheet(raw_sheets, table)
            if not isinstance(rows, (list, tuple)):
                logger.debug("Sheet for table %s is missing or unreadable; importing as empty", table)
                result[table] = []
                continue
            result[table] = self.import_table(table, rows, schema)
            logger.info("Imported table %s: %d records", table, len(result[table]))
        return result

    def import_table(self, table: str, rows: Sequence[Any], schema: SchemaCatalog) -> List[Record]:
        clean_rows = [list(row) for row in rows if isinstance(row, (list, tuple))]
        if schema.get_table_type(table) == TABLE_TYPE_OBJECT:
            return self._import_object_table(table, clean_rows, schema)
        return self._import_array_table(table, clean_rows, schema)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _field_lookup(self, table: str, schema: SchemaCatalog) -> Dict[str, str]:
        """Map field keys and display titles to field keys."""
        lookup: Dict[str, str] = {}
        for field in schema.get_field_names(table):
            for title in (
                schema.get_field_title(table, field, self._locale),
                schema.get_field_title(table, field),
            ):
                lookup.setdefault(title.strip(), field)
        for field in schema.get_field_names(table):
            lookup[field] = field
        return lookup

    def _resolve_columns(self, table: str, header: Sequence[Any], schema: SchemaCatalog) -> List[Optional[str]]:
        field_names = schema.get_field_names(table)
        if not field_names:
            return [_header_key(h) or None for h in header]

        lookup = self._field_lookup(table, schema)
        columns: List[Optional[str]] = [lookup.get(_header_key(h)) for h in header]
        claimed = {c for c in columns if c is not None}
        for idx, column in enumerate(columns):
            if column is not None or idx >= len(field_names):
                continue
            candidate = field_names[idx]
            if candidate not in claimed:
                columns[idx] = candidate
                claimed.add(candidate)
            else:
                logger.debug("Table %s: dropping unmatched column %r", table, header[idx])
        return columns

    def _import_array_table(self, table: str, rows: List[List[Any]], schema: SchemaCatalog) -> List[Record]:
        if not rows:
            return []
        columns = self._resolve_columns(table, rows[0], schema)
        types = {c: schema.get_field_type(table, c) for c in columns if c is not None}

        records: List[Record] = []
        for row in rows[1:]:
            if _is_blank_row(row):
                continue
            record: Record = {}
            for idx, column in enumerate(columns):
                if column is None:
                    continue
                cell = row[idx] if idx < len(row) else None
                record[column] = self._coercer.coerce(cell, types[column])
            records.append(record)
        return records

    def _import_object_table(self, table: str, rows: List[List[Any]], schema: SchemaCatalog) -> List[Record]:
        lookup = self._field_lookup(table, schema)
        records: List[Record] = []
        for row in rows:
            key = _header_key(row[0]) if row else ""
            if not key:
                continue
            field = lookup.get(key, key)
            value = row[1] if len(row) > 1 else None
            records.append({field: self._coercer.coerce(value, schema.get_field_type(table, field))})
        return records


def import_workbook(
    raw_sheets: Mapping[str, Any],
    schema: SchemaCatalog,
    locale: Optional[str] = None,
) -> Dict[str, List[Record]]:
    """Shortcut for ``TabularImporter(locale=locale).import_workbook(...)``."""
    return TabularImporter(locale=locale).import_workbook(raw_sheets, schema)
