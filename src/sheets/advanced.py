"""
Advanced Excel Automation - analyze, create-chart, autofilter and compare actions.

    excel-advanced --action analyze --input data.xlsx --output report.xlsx
    excel-advanced --action create-chart --input data.xlsx --output chart.xlsx \\
        --chart-type bar --data-cols A,B,C
"""

from datetime import date, datetime, time
from typing import Any, Optional

import structlog
from openpyxl import Workbook
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from core.cli import SkillArgumentParser, execute
from core.errors import ArgumentError, DocumentError
from core.files import write_json
from sheets.workbook import (
    ANALYSIS_HEADER_FILL,
    HEADER_FONT,
    CHART_TYPES,
    build_chart,
    open_workbook,
    save_workbook,
    select_sheet,
    style_header_row,
)

logger = structlog.get_logger()

ACTIONS = ("analyze", "create-chart", "autofilter", "compare")
COMPARE_ROW_LIMIT = 100
CHART_SHEET = "Chart Data"
SUMMARY_SHEET = "Analysis Summary"
SUMMARY_COLUMNS = (
    ("Column", "column", 10),
    ("Header", "header", 20),
    ("Type", "type", 10),
    ("Count", "count", 10),
    ("Unique", "unique", 10),
    ("Min", "min", 15),
    ("Max", "max", 15),
    ("Average", "avg", 15),
    ("Sum", "sum", 15),
)


def value_type(value: Any) -> str:
    """Type name reported in column statistics."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (datetime, date, time)):
        return "date"
    return type(value).__name__


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def column_stats(worksheet: Worksheet) -> list[dict[str, Any]]:
    """
    Per-column statistics for rows 2..max_row.

    Columns with no values are omitted. min/max/avg/sum are present only
    when the first value in the column is numeric.
    """
    stats = []
    for col in range(1, worksheet.max_column + 1):
        values = [
            value
            for (value,) in worksheet.iter_rows(
                min_row=2, max_row=worksheet.max_row, min_col=col, max_col=col, values_only=True
            )
            if value is not None
        ]
        if not values:
            continue

        header = worksheet.cell(row=1, column=col).value
        entry: dict[str, Any] = {
            "column": get_column_letter(col),
            "header": header if header not in (None, "") else f"Column {col}",
            "count": len(values),
            "unique": len(set(values)),
            "type": value_type(values[0]),
        }

        if is_number(values[0]):
            numbers = [v for v in values if is_number(v)]
            total = sum(numbers)
            entry.update({
                "min": min(numbers),
                "max": max(numbers),
                "avg": total / len(numbers),
                "sum": total,
            })

        stats.append(entry)
    return stats


def analyze(input_path: str, output_path: str, sheet: Optional[str] = None) -> dict[str, Any]:
    """Write an "Analysis Summary" workbook with one row per non-empty column."""
    worksheet = select_sheet(open_workbook(input_path), sheet)
    columns = column_stats(worksheet)

    report = Workbook()
    summary = report.active
    summary.title = SUMMARY_SHEET
    summary.append([title for title, _, _ in SUMMARY_COLUMNS])
    style_header_row(summary, fill=ANALYSIS_HEADER_FILL)
    for entry in columns:
        summary.append([entry.get(key) for _, key, _ in SUMMARY_COLUMNS])
    for index, (_, _, width) in enumerate(SUMMARY_COLUMNS, start=1):
        summary.column_dimensions[get_column_letter(index)].width = max(width, 12)

    save_workbook(report, output_path)

    stats = {
        "sheetName": worksheet.title,
        "rowCount": worksheet.max_row,
        "columnCount": worksheet.max_column,
        "columns": columns,
    }
    logger.info(
        "analysis_complete",
        sheet=stats["sheetName"],
        rows=stats["rowCount"],
        columns=stats["columnCount"],
        output=output_path,
    )
    return stats


def create_chart(
    input_path: str,
    output_path: str,
    chart_type: str = "bar",
    title: str = "Chart",
    data_cols: Optional[list[str]] = None,
    sheet: Optional[str] = None,
) -> Worksheet:
    """
    Add a "Chart Data" sheet holding the chart configuration and a native chart.

    With two or more data columns the first supplies category labels.
    """
    workbook = open_workbook(input_path)
    source = select_sheet(workbook, sheet)
    letters = data_cols or [get_column_letter(c) for c in range(1, source.max_column + 1)]

    try:
        indexes = [column_index_from_string(letter.strip().upper()) for letter in letters]
    except ValueError as e:
        raise ArgumentError(f"Invalid data column: {e}", argument="--data-cols")

    chart_sheet = workbook.create_sheet(CHART_SHEET)
    chart_sheet.append(["Chart Configuration"])
    chart_sheet.append(["Type", chart_type])
    chart_sheet.append(["Title", title])
    chart_sheet.append(["Data Columns", ", ".join(letters)])
    chart_sheet["A1"].font = HEADER_FONT

    category_col = indexes[0] if len(indexes) > 1 else None
    series_cols = indexes[1:] if len(indexes) > 1 else indexes
    chart = build_chart(
        chart_type,
        title,
        source,
        series_cols,
        min_row=1,
        max_row=source.max_row,
        category_col=category_col,
    )
    chart_sheet.add_chart(chart, "D2")

    save_workbook(workbook, output_path)
    logger.info("chart_created", type=chart_type, columns=letters, output=output_path)
    return chart_sheet


def autofilter_range(worksheet: Worksheet) -> str:
    """`A1:<last column><last row>` of the used area."""
    return f"A1:{get_column_letter(worksheet.max_column)}{worksheet.max_row}"


def add_autofilter(
    input_path: str,
    output_path: str,
    cell_range: Optional[str] = None,
    sheet: Optional[str] = None,
) -> str:
    workbook = open_workbook(input_path)
    worksheet = select_sheet(workbook, sheet)

    ref = cell_range or autofilter_range(worksheet)
    worksheet.auto_filter.ref = ref
    worksheet.freeze_panes = "A2"

    save_workbook(workbook, output_path)
    logger.info("autofilter_added", range=ref, output=output_path)
    return ref


def _grid(worksheet: Worksheet, max_row: int, max_col: int) -> list[tuple]:
    if max_row < 1 or max_col < 1:
        return []
    return list(worksheet.iter_rows(min_row=1, max_row=max_row, max_col=max_col, values_only=True))


def compare_sheets(sheet1: Worksheet, sheet2: Worksheet) -> dict[str, Any]:
    """Row/column counts and differing cells over the first rows of two sheets."""
    # iter_rows creates empty cells, so dimensions are read before the grids
    row_count = {"file1": sheet1.max_row, "file2": sheet2.max_row}
    column_count = {"file1": sheet1.max_column, "file2": sheet2.max_column}
    max_row = min(COMPARE_ROW_LIMIT, max(row_count.values()))
    max_col = max(column_count.values())
    grid1 = _grid(sheet1, max_row, max_col)
    grid2 = _grid(sheet2, max_row, max_col)

    differences = []
    for row_index, (row1, row2) in enumerate(zip(grid1, grid2), start=1):
        for col_index, (value1, value2) in enumerate(zip(row1, row2), start=1):
            if value1 != value2:
                differences.append({
                    "cell": f"{get_column_letter(col_index)}{row_index}",
                    "file1": value1,
                    "file2": value2,
                })

    return {
        "name": sheet1.title,
        "rowCount": row_count,
        "columnCount": column_count,
        "cellDifferences": differences,
    }


def compare_workbooks(file1: str, file2: str) -> dict[str, Any]:
    workbook1 = open_workbook(file1)
    workbook2 = open_workbook(file2)

    return {
        "sheetCount": {"file1": len(workbook1.worksheets), "file2": len(workbook2.worksheets)},
        "sheets": [
            compare_sheets(sheet, workbook2[sheet.title])
            for sheet in workbook1.worksheets
            if sheet.title in workbook2.sheetnames
        ],
    }


def compare(input_path: str, output_path: str, file2: Optional[str]) -> dict[str, Any]:
    if not file2:
        raise ArgumentError("Second file not specified. Use --file2 parameter", argument="--file2")

    report = compare_workbooks(input_path, file2)
    write_json(output_path, report)
    logger.info(
        "comparison_complete",
        sheets_file1=report["sheetCount"]["file1"],
        sheets_file2=report["sheetCount"]["file2"],
        differences=sum(len(s["cellDifferences"]) for s in report["sheets"]),
        output=output_path,
    )
    return report


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="excel-advanced",
        description="Advanced Excel operations: analysis, charts, autofilter, comparison",
    )
    parser.add_argument("--action", required=True, choices=ACTIONS, help="Operation to run")
    parser.add_argument("--input", required=True, help="Input Excel file")
    parser.add_argument("--output", required=True, help="Output file")
    parser.add_argument("--sheet", help="Sheet name to work with")
    parser.add_argument("--range", dest="cell_range", help="Cell range (e.g., A1:D10)")
    parser.add_argument("--chart-type", choices=sorted(CHART_TYPES), default="bar", help="Chart type")
    parser.add_argument(
        "--data-cols",
        type=lambda value: [c for c in value.split(",") if c.strip()],
        help="Data columns (comma-separated)",
    )
    parser.add_argument("--title", default="Chart", help="Chart title")
    parser.add_argument("--file2", help="Second Excel file for compare")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    output = args.output

    def operation():
        if args.action == "analyze":
            return analyze(args.input, output, args.sheet)
        if args.action == "create-chart":
            return create_chart(args.input, output, args.chart_type, args.title, args.data_cols, args.sheet)
        if args.action == "autofilter":
            return add_autofilter(args.input, output, args.cell_range, args.sheet)
        if args.action == "compare":
            return compare(args.input, output, args.file2)
        raise DocumentError(f"Unknown action: {args.action}")

    return execute(operation, skill="excel-advanced")


if __name__ == "__main__":
    raise SystemExit(main())
