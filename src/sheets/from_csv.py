"""
CSV to Excel - Convert a CSV file to a formatted single-sheet workbook.

    csv-to-excel input.csv output.xlsx [--header-row] [--auto-format]
"""

import csv
import math
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from core.cli import SkillArgumentParser, execute
from core.errors import DocumentError
from sheets.workbook import HEADER_FILL, save_workbook, style_header_row

logger = structlog.get_logger()

MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 50


def coerce_cell(text: str) -> Union[str, int, float]:
    """Numeric strings become int or float; everything else stays text."""
    value = text.strip()
    if not value:
        return value
    try:
        return int(value)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def read_csv_rows(path: Union[str, Path]) -> list[list[Any]]:
    """Parse a CSV file, skipping blank lines and coercing numbers."""
    path = Path(path)
    if not path.exists():
        raise DocumentError(f"CSV file not found: {path}", path=str(path))

    with open(path, newline="", encoding="utf-8-sig") as f:
        return [
            [coerce_cell(cell) for cell in row]
            for row in csv.reader(f)
            if any(cell.strip() for cell in row)
        ]


def auto_fit_columns(worksheet, min_width: int = MIN_COLUMN_WIDTH, max_width: int = MAX_COLUMN_WIDTH) -> None:
    for index, column in enumerate(worksheet.iter_cols(values_only=True), start=1):
        longest = max((len(str(value)) for value in column if value not in (None, "")), default=0)
        width = min(max(longest + 2, min_width), max_width)
        worksheet.column_dimensions[get_column_letter(index)].width = width


def csv_to_excel(
    csv_path: str,
    xlsx_path: str,
    header_row: bool = False,
    auto_format: bool = False,
) -> Workbook:
    rows = read_csv_rows(csv_path)

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Sheet1"
    for row in rows:
        worksheet.append(row)

    if header_row and rows:
        style_header_row(worksheet, fill=HEADER_FILL)

    if auto_format and rows:
        auto_fit_columns(worksheet)
        if header_row and len(rows) > 1:
            worksheet.auto_filter.ref = f"A1:{get_column_letter(len(rows[0]))}1"

    save_workbook(workbook, xlsx_path)
    logger.info(
        "csv_converted",
        source=csv_path,
        output=xlsx_path,
        rows=len(rows),
        columns=len(rows[0]) if rows else 0,
    )
    return workbook


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(prog="csv-to-excel", description="Convert CSV files to Excel with formatting")
    parser.add_argument("input", help="Input CSV file")
    parser.add_argument("output", help="Output .xlsx file")
    parser.add_argument("--header-row", action="store_true", help="Style the first row as a header")
    parser.add_argument("--auto-format", action="store_true", help="Fit column widths and filter the header")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return execute(
        lambda: csv_to_excel(args.input, args.output, args.header_row, args.auto_format),
        skill="csv-to-excel",
    )


if __name__ == "__main__":
    raise SystemExit(main())
