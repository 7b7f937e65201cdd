"""Shared openpyxl helpers: loading, sheet lookup, header styling and native charts."""

import zipfile
from pathlib import Path
from typing import Optional, Union

import structlog
from openpyxl import Workbook, load_workbook
from openpyxl.chart import BarChart, LineChart, PieChart, Reference, ScatterChart, Series
from openpyxl.styles import Font, PatternFill
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from core.errors import DocumentError
from core.files import ensure_parent

logger = structlog.get_logger()

HEADER_FONT = Font(bold=True)
TITLE_FONT = Font(bold=True, size=14)
INPUT_FONT = Font(color="FF0000FF")
ANALYSIS_HEADER_FILL = PatternFill(start_color="FF4472C4", end_color="FF4472C4", fill_type="solid")
HEADER_FILL = PatternFill(start_color="FFD9D9D9", end_color="FFD9D9D9", fill_type="solid")

CHART_TYPES = {
    "bar": BarChart,
    "line": LineChart,
    "pie": PieChart,
    "scatter": ScatterChart,
}


def open_workbook(path: Union[str, Path], data_only: bool = False) -> Workbook:
    """Load an .xlsx file, mapping missing/corrupt files to DocumentError."""
    path = Path(path)
    if not path.exists():
        raise DocumentError(f"Workbook not found: {path}", path=str(path))
    try:
        return load_workbook(path, data_only=data_only)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise DocumentError(f"Cannot read workbook: {e}", path=str(path))


def save_workbook(workbook: Workbook, path: Union[str, Path]) -> Path:
    path = ensure_parent(path)
    workbook.save(path)
    logger.info("workbook_saved", path=str(path), sheets=workbook.sheetnames)
    return path


def select_sheet(workbook: Workbook, name: Optional[str] = None) -> Worksheet:
    """Named sheet, or the first sheet when no name is given."""
    if name is None:
        return workbook.worksheets[0]
    if name not in workbook.sheetnames:
        raise DocumentError(f'Sheet "{name}" not found')
    return workbook[name]


def style_header_row(worksheet: Worksheet, row: int = 1, fill: Optional[PatternFill] = None) -> None:
    for cell in worksheet[row]:
        cell.font = HEADER_FONT
        if fill is not None:
            cell.fill = fill


def build_chart(
    chart_type: str,
    title: str,
    worksheet: Worksheet,
    data_cols: list[int],
    min_row: int,
    max_row: int,
    category_col: Optional[int] = None,
):
    """
    Native chart over column ranges of `worksheet`.

    Row `min_row` holds series titles; categories (or scatter x values)
    come from `category_col` below the title row. Pie charts plot the
    first data column only.
    """
    if chart_type not in CHART_TYPES:
        raise DocumentError(f"Unsupported chart type: {chart_type}")

    chart = CHART_TYPES[chart_type]()
    chart.title = title
    if chart_type == "bar":
        chart.type = "col"
    if chart_type == "pie":
        data_cols = data_cols[:1]

    categories = None
    if category_col is not None:
        categories = Reference(worksheet, min_col=category_col, min_row=min_row + 1, max_row=max_row)

    if chart_type == "scatter":
        for col in data_cols:
            values = Reference(worksheet, min_col=col, min_row=min_row, max_row=max_row)
            chart.series.append(Series(values, categories, title_from_data=True))
    else:
        for col in data_cols:
            values = Reference(worksheet, min_col=col, min_row=min_row, max_row=max_row)
            chart.add_data(values, titles_from_data=True)
        if categories is not None:
            chart.set_categories(categories)

    return chart
