import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tablecore.dates import format_date_for_filename
from tablecore.errors import TableCoreError
from tablecore.filters.engine import filter_records
from tablecore.schema import SchemaCatalog
from tablecore.sheets.exporter import export_experiment
from tablecore.sheets.importer import import_workbook
from tablecore.sheets.reader import read_workbook_cells


def load_json(path: str) -> Any:
    with open(Path(path).expanduser(), "r", encoding="utf-8") as f:
        return json.load(f)


def load_filters(raw: Optional[str]) -> Optional[dict]:
    """``--filters`` accepts inline JSON or a path to a JSON file."""
    if not raw:
        return None
    candidate = Path(raw).expanduser()
    if candidate.is_file():
        return load_json(str(candidate))
    return json.loads(raw)


def write_json(payload: Any, output: Optional[str]) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
    if output:
        Path(output).expanduser().write_text(text, encoding="utf-8")
        print("JSON:", output)
    else:
        print(text)


def cmd_import(args: argparse.Namespace) -> int:
    catalog = SchemaCatalog.from_file(args.schema)
    raw_sheets = read_workbook_cells(args.workbook)
    data = import_workbook(raw_sheets, catalog, locale=args.locale)
    write_json(data, args.output)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    instance_schema = SchemaCatalog.from_file(args.schema)
    solution_data = load_json(args.solution) if args.solution else None
    solution_schema = SchemaCatalog.from_file(args.solution_schema) if args.solution_schema else None
    content = asyncio.run(
        export_experiment(
            load_json(args.data),
            instance_schema,
            solution_data=solution_data,
            solution_schema=solution_schema,
            locale=args.locale,
            include_readme=args.readme,
        )
    )
    output = args.output
    if not output:
        output = f"export_{format_date_for_filename(datetime.now())}.xlsx"
    Path(output).expanduser().write_bytes(content)
    print("XLSX:", output)
    return 0


def cmd_filter(args: argparse.Namespace) -> int:
    data = load_json(args.data)
    records = data.get(args.table, []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        print(f"[error] table {args.table!r} is not a list of records.")
        return 1
    kept = filter_records(
        records,
        query=args.query,
        filters=load_filters(args.filters),
        ignored_fields=args.ignore,
    )
    write_json(kept, args.output)
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import, export and filter schema-typed spreadsheet tables."
    )
    parser.add_argument(
        "--locale",
        default=None,
        help="Locale for display titles (default: TABLECORE_DEFAULT_LOCALE).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Read an .xlsx/.csv file into JSON records.")
    p_import.add_argument("workbook", help="Path to the workbook.")
    p_import.add_argument("--schema", required=True, help="Schema file (.json or .yaml).")
    p_import.add_argument("--output", default=None, help="Write JSON here instead of stdout.")
    p_import.set_defaults(func=cmd_import)

    p_export = sub.add_parser("export", help="Write JSON records to an .xlsx file.")
    p_export.add_argument("data", help="JSON file mapping table names to records.")
    p_export.add_argument("--schema", required=True, help="Schema file (.json or .yaml).")
    p_export.add_argument("--output", default=None, help="Output .xlsx path (default: timestamped name).")
    p_export.add_argument("--solution", default=None, help="Optional solution JSON written to the same workbook.")
    p_export.add_argument("--solution-schema", default=None, help="Schema file for --solution.")
    p_export.add_argument("--readme", action="store_true", help="Append _README and _TYPES sheets.")
    p_export.set_defaults(func=cmd_export)

    p_filter = sub.add_parser("filter", help="Search and filter the records of one table.")
    p_filter.add_argument("data", help="JSON file mapping table names to records.")
    p_filter.add_argument("--table", required=True, help="Table to filter.")
    p_filter.add_argument("--query", default="", help="Free-text search.")
    p_filter.add_argument("--filters", default=None, help="Filter spec as inline JSON or a JSON file.")
    p_filter.add_argument("--ignore", nargs="*", default=[], help="Top-level fields excluded from search.")
    p_filter.add_argument("--output", default=None, help="Write JSON here instead of stdout.")
    p_filter.set_defaults(func=cmd_filter)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return args.func(args)
    except (TableCoreError, OSError, json.JSONDecodeError) as e:
        print(f"[error] {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
