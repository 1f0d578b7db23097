"""
Spreadsheet codec subpackage.

Public API:
  - number_to_letters / letters_to_number   (column addresses, in columns.py)
  - WorkbookReader         (file I/O -> raw cell matrices)
  - CellCoercer            (type-directed cell normalisation)
  - TabularImporter        (raw sheets -> typed records)
  - TabularExporter        (typed records -> worksheets)
  - OpenpyxlWorkbook       (WorkbookContainer backed by openpyxl)
"""

from tablecore.sheets.coercion import CellCoercer, coerce
from tablecore.sheets.columns import letters_to_number, number_to_letters
from tablecore.sheets.exporter import TabularExporter, export_experiment, export_workbook
from tablecore.sheets.importer import TabularImporter, import_workbook, merge_object_records
from tablecore.sheets.reader import WorkbookReader, read_workbook_cells
from tablecore.sheets.workbook import OpenpyxlWorkbook, WorkbookContainer

__all__ = [
    "CellCoercer",
    "coerce",
    "letters_to_number",
    "number_to_letters",
    "TabularExporter",
    "export_experiment",
    "export_workbook",
    "TabularImporter",
    "import_workbook",
    "merge_object_records",
    "WorkbookReader",
    "read_workbook_cells",
    "OpenpyxlWorkbook",
    "WorkbookContainer",
]
