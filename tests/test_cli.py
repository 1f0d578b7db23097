import json

from app.cli import main
from tablecore.sheets.reader import read_workbook_cells


def _write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_export_then_import(tmp_path, schema_dict):
    schema = _write_json(tmp_path / "schema.json", schema_dict)
    data = _write_json(
        tmp_path / "data.json",
        {"orders": [{"id": 1, "customer": "acme", "amount": 2.5}], "parameters": {"horizon": 3}},
    )
    xlsx = tmp_path / "out.xlsx"

    assert main(["export", data, "--schema", schema, "--output", str(xlsx), "--readme"]) == 0
    assert list(read_workbook_cells(xlsx)) == ["orders", "parameters", "_README", "_TYPES"]

    result_path = tmp_path / "imported.json"
    assert main(["import", str(xlsx), "--schema", schema, "--output", str(result_path)]) == 0
    imported = json.loads(result_path.read_text(encoding="utf-8"))
    assert imported["orders"] == [{"id": 1, "customer": "acme", "amount": 2.5, "placed": None}]
    assert imported["parameters"] == [{"horizon": 3}, {"label": None}]
    assert imported["notes"] == []


def test_filter_prints_matching_records(tmp_path, people, capsys):
    data = _write_json(tmp_path / "data.json", {"people": people})
    filters = json.dumps({"age": {"type": "range", "value": [30, 40]}})

    assert main(["filter", data, "--table", "people", "--query", "john", "--filters", filters]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert [r["id"] for r in printed] == [2, 3]


def test_filter_with_ignored_fields(tmp_path, people, capsys):
    data = _write_json(tmp_path / "data.json", {"people": people})
    assert main(["filter", data, "--table", "people", "--query", "john", "--ignore", "address"]) == 0
    assert [r["id"] for r in json.loads(capsys.readouterr().out)] == [1]


def test_missing_schema_file_is_reported(tmp_path, capsys):
    data = _write_json(tmp_path / "data.json", {})
    assert main(["export", data, "--schema", str(tmp_path / "nope.json"), "--output", str(tmp_path / "x.xlsx")]) == 1
    assert "[error]" in capsys.readouterr().out
