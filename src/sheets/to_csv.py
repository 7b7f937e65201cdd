"""
Excel to CSV - Export workbook sheets as CSV files.

    excel-to-csv input.xlsx out_dir [--all-sheets] [--sheet-name NAME]
"""

import csv
import re
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional

import structlog

from core.cli import SkillArgumentParser, execute
from sheets.workbook import open_workbook, select_sheet

logger = structlog.get_logger()

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def csv_filename(sheet_name: str) -> str:
    return f"{UNSAFE_FILENAME_CHARS.sub('_', sheet_name)}.csv"


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def sheet_rows(worksheet) -> list[list[str]]:
    """Non-empty rows as strings, trailing empty cells dropped."""
    rows = []
    for values in worksheet.iter_rows(values_only=True):
        cells = [format_value(value) for value in values]
        while cells and cells[-1] == "":
            cells.pop()
        if cells:
            rows.append(cells)
    return rows


def excel_to_csv(
    xlsx_path: str,
    output_dir: str,
    all_sheets: bool = False,
    sheet_name: Optional[str] = None,
) -> list[Path]:
    """Write one CSV per selected sheet; formulas export their cached values."""
    workbook = open_workbook(xlsx_path, data_only=True)

    if all_sheets:
        sheets = workbook.worksheets
    else:
        sheets = [select_sheet(workbook, sheet_name)]

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    exported = []
    for worksheet in sheets:
        path = out_dir / csv_filename(worksheet.title)
        with open(path, "w", newline="", encoding="utf-8") as f:
            csv.writer(f, lineterminator="\n").writerows(sheet_rows(worksheet))
        exported.append(path)
        logger.info("sheet_exported", sheet=worksheet.title, path=str(path))

    logger.info("export_complete", sheets=len(exported))
    return exported


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(prog="excel-to-csv", description="Export Excel sheets to CSV format")
    parser.add_argument("input", help="Input .xlsx file")
    parser.add_argument("output_dir", help="Directory for CSV files")
    parser.add_argument("--all-sheets", action="store_true", help="Export every sheet")
    parser.add_argument("--sheet-name", help="Export only this sheet")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return execute(
        lambda: excel_to_csv(args.input, args.output_dir, args.all_sheets, args.sheet_name),
        skill="excel-to-csv",
    )


if __name__ == "__main__":
    raise SystemExit(main())
