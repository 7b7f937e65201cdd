"""
Excel Chart Generator - Build a Data sheet and a Charts sheet from JSON.

data.json:
    {"data": {"headers": ["Month", "Revenue"], "rows": [["Jan", 100000]]},
     "charts": [{"type": "bar", "title": "Revenue", "dataRange": "A1:B2",
                 "series": ["Revenue"]}]}
"""

from typing import Any, Optional

import structlog
from openpyxl import Workbook
from openpyxl.utils import get_column_letter, range_boundaries

from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from core.errors import DocumentError
from sheets.workbook import HEADER_FONT, TITLE_FONT, build_chart, save_workbook

logger = structlog.get_logger()

DATA_COLUMN_WIDTH = 15
CHART_ROW_SPACING = 20


class TableData(CamelModel):
    headers: list[str]
    rows: list[list[Any]] = []


class ChartSpec(CamelModel):
    type: str = "bar"
    title: str = "Chart"
    data_range: str
    series: list[str] = []


class ChartWorkbookConfig(CamelModel):
    data: Optional[TableData] = None
    charts: list[ChartSpec] = []


def write_data_sheet(worksheet, data: TableData) -> None:
    worksheet.append(data.headers)
    for cell in worksheet[1]:
        cell.font = HEADER_FONT
    for row in data.rows:
        worksheet.append(row)
    for index in range(1, len(data.headers) + 1):
        worksheet.column_dimensions[get_column_letter(index)].width = DATA_COLUMN_WIDTH


def series_columns(data_sheet, spec: ChartSpec) -> tuple[int, list[int], int, int]:
    """
    Resolve a chart's data range into (category column, series columns, first row, last row).

    The first column of the range holds categories; the remaining columns are
    plotted, restricted to headers named in `series` when given.
    """
    try:
        min_col, min_row, max_col, max_row = range_boundaries(spec.data_range)
    except ValueError as e:
        raise DocumentError(f"Invalid data range {spec.data_range!r}: {e}")
    if None in (min_col, min_row, max_col, max_row):
        raise DocumentError(f"Data range {spec.data_range!r} must name both rows and columns")

    columns = list(range(min_col + 1, max_col + 1)) or [min_col]
    if spec.series:
        named = [c for c in columns if data_sheet.cell(row=min_row, column=c).value in spec.series]
        columns = named or columns
    return min_col, columns, min_row, max_row


def create_charts(config: ChartWorkbookConfig, output_path: str) -> Workbook:
    workbook = Workbook()
    data_sheet = workbook.active
    data_sheet.title = "Data"
    if config.data:
        write_data_sheet(data_sheet, config.data)

    charts_sheet = workbook.create_sheet("Charts")
    charts_sheet["A1"] = "Charts"
    charts_sheet["A1"].font = TITLE_FONT

    row = 3
    for index, spec in enumerate(config.charts):
        charts_sheet[f"A{row}"] = f"{spec.type} Chart: {spec.title}"
        charts_sheet[f"A{row}"].font = HEADER_FONT
        charts_sheet[f"A{row + 1}"] = f"Data Range: {spec.data_range}"
        charts_sheet[f"A{row + 2}"] = f"Series: {', '.join(spec.series)}"
        row += 4

        category_col, columns, min_row, max_row = series_columns(data_sheet, spec)
        chart = build_chart(
            spec.type,
            spec.title,
            data_sheet,
            columns,
            min_row=min_row,
            max_row=max_row,
            category_col=category_col if category_col not in columns else None,
        )
        charts_sheet.add_chart(chart, f"D{3 + index * CHART_ROW_SPACING}")

    save_workbook(workbook, output_path)
    logger.info("charts_workbook_created", output=output_path, charts=len(config.charts))
    return workbook


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(prog="create-charts", description="Create chart workbooks from JSON data")
    parser.add_argument("data", help="Chart data file (JSON or YAML)")
    parser.add_argument("output", help="Output .xlsx file")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_model(args.data, ChartWorkbookConfig)
        return create_charts(config, args.output)

    return execute(operation, skill="create-charts")


if __name__ == "__main__":
    raise SystemExit(main())
