"""
Tests for tablecore.sheets.importer and tablecore.sheets.reader.
"""
from datetime import datetime

import pytest
from openpyxl import Workbook

from tablecore.errors import WorkbookReadError
from tablecore.schema import SchemaCatalog
from tablecore.sheets.importer import TabularImporter, import_workbook, merge_object_records
from tablecore.sheets.reader import read_workbook_cells


@pytest.fixture
def raw_sheets():
    return {
        "orders": [
            ["ID", "Customer", "Amount", "Placed"],
            [1, " acme ", 3.14159265359, datetime(2024, 1, 15)],
            [None, None, None, None],
            [2, "globex", float("nan"), datetime(2024, 1, 15, 9, 30)],
        ],
        "parameters": [
            ["Horizon", 12.345678],
            ["label", " run A "],
        ],
    }


def test_import_array_and_object_tables(raw_sheets, catalog):
    data = import_workbook(raw_sheets, catalog)

    assert data["orders"] == [
        {"id": 1, "customer": "acme", "amount": 3.1416, "placed": "2024-01-15"},
        {"id": 2, "customer": "globex", "amount": None, "placed": "2024-01-15 09:30"},
    ]
    assert data["parameters"] == [{"horizon": 12.3457}, {"label": "run A"}]


def test_missing_sheets_import_as_empty(raw_sheets, catalog):
    data = import_workbook(raw_sheets, catalog)
    assert data["notes"] == []
    assert data["audit"] == []
    assert list(data) == ["orders", "parameters", "notes", "audit"]


def test_unreadable_sheet_imports_as_empty(catalog):
    data = import_workbook({"orders": "garbage", "parameters": None}, catalog)
    assert data["orders"] == []
    assert data["parameters"] == []


def test_header_by_field_key_in_any_order(catalog):
    raw = {"orders": [["customer", "id"], ["acme", 5]]}
    assert import_workbook(raw, catalog)["orders"] == [{"customer": "acme", "id": 5}]


def test_header_in_requested_locale(catalog):
    raw = {"orders": [["ID", "Client"], [7, "initech"]]}
    assert import_workbook(raw, catalog, locale="fr")["orders"] == [{"id": 7, "customer": "initech"}]


def test_unknown_header_falls_back_to_position(catalog):
    raw = {"notes": [["Remark", "extra"], ["first", "ignored"]]}
    assert import_workbook(raw, catalog)["notes"] == [{"text": "first"}]


def test_short_rows_fill_missing_cells_with_none(catalog):
    raw = {"orders": [["ID", "Customer", "Amount"], [3]]}
    assert import_workbook(raw, catalog)["orders"] == [{"id": 3, "customer": None, "amount": None}]


def test_header_only_sheet_gives_no_records(catalog):
    assert import_workbook({"orders": [["ID", "Customer"]]}, catalog)["orders"] == []


def test_table_without_declared_fields_uses_header_text():
    catalog = SchemaCatalog({"properties": {"free": {"type": "array"}}})
    raw = {"free": [["a", "b"], [1, " x "]]}
    assert import_workbook(raw, catalog)["free"] == [{"a": 1, "b": "x"}]


def test_object_table_rows_without_key_are_skipped(catalog):
    raw = {"parameters": [[None, 1], [], ["horizon"]]}
    assert import_workbook(raw, catalog)["parameters"] == [{"horizon": None}]


def test_custom_precision_through_importer(catalog):
    from tablecore.sheets.coercion import CellCoercer

    importer = TabularImporter(coercer=CellCoercer(precision=2))
    data = importer.import_workbook({"parameters": [["horizon", 1.23456]]}, catalog)
    assert data["parameters"] == [{"horizon": 1.23}]


def test_merge_object_records():
    assert merge_object_records([{"a": 1}, {"b": 2}, {"a": 3}]) == {"a": 3, "b": 2}
    assert merge_object_records([]) == {}


class TestReader:
    def _write(self, path):
        wb = Workbook()
        ws = wb.active
        ws.title = "orders"
        ws.append(["ID", "Customer", "Placed"])
        ws.append([1, "acme", datetime(2024, 1, 15, 0, 0)])
        ws.append([2, "globex", datetime(2024, 1, 16, 13, 45)])
        other = wb.create_sheet("parameters")
        other.append(["horizon", 4])
        wb.save(path)

    def test_read_all_sheets(self, tmp_path):
        path = tmp_path / "book.xlsx"
        self._write(path)
        sheets = read_workbook_cells(path)
        assert list(sheets) == ["orders", "parameters"]
        assert sheets["orders"][0] == ["ID", "Customer", "Placed"]
        assert sheets["orders"][2] == [2, "globex", datetime(2024, 1, 16, 13, 45)]
        assert sheets["parameters"] == [["horizon", 4]]

    def test_read_selected_sheets_from_bytes(self, tmp_path):
        path = tmp_path / "book.xlsx"
        self._write(path)
        sheets = read_workbook_cells(path.read_bytes(), sheet_names=["parameters"])
        assert list(sheets) == ["parameters"]

    def test_read_then_import(self, tmp_path, catalog):
        path = tmp_path / "book.xlsx"
        self._write(path)
        data = import_workbook(read_workbook_cells(path), catalog)
        assert data["orders"] == [
            {"id": 1, "customer": "acme", "placed": "2024-01-15"},
            {"id": 2, "customer": "globex", "placed": "2024-01-16 13:45"},
        ]
        assert data["parameters"] == [{"horizon": 4}]

    def test_read_csv(self, tmp_path):
        path = tmp_path / "notes.csv"
        path.write_text("text;score\nhello;3\n", encoding="utf-8")
        assert read_workbook_cells(path) == {"notes": [["text", "score"], ["hello", 3]]}

    def test_unreadable_workbook(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a zip")
        with pytest.raises(WorkbookReadError):
            read_workbook_cells(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(WorkbookReadError):
            read_workbook_cells(tmp_path / "missing.xlsx")
