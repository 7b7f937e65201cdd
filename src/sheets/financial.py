"""
Financial Model Generator - Multi-sheet projection model with live formulas.

Assumption inputs live on their own sheet (blue font); every projected figure
on the Income Statement is a formula that references them, so editing an
assumption recalculates the whole model in Excel.
"""

from datetime import date
from typing import Optional

import structlog
from openpyxl import Workbook
from openpyxl.chart import LineChart, Reference
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from pydantic import Field

from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from sheets.workbook import HEADER_FONT, INPUT_FONT, TITLE_FONT, save_workbook

logger = structlog.get_logger()

CURRENCY_FORMAT = "$#,##0"
ACCOUNTING_FORMAT = "$#,##0;($#,##0);-"
PERCENT_FORMAT = "0.0%"
SECTION_FONT = Font(bold=True, size=12)

# Cell addresses on the Assumptions sheet
BASE_REVENUE_CELL = "B4"
GROWTH_RATE_CELL = "B5"
COGS_PERCENT_CELL = "B8"
OPEX_CELL = "B9"

# Row numbers on the Income Statement
YEAR_ROW = 3
REVENUE_ROW = 5
COGS_ROW = 6
GROSS_PROFIT_ROW = 7
OPEX_ROW = 9
EBIT_ROW = 10


class Assumptions(CamelModel):
    base_revenue: float = 1_000_000
    growth_rate: float = 0.15
    cogs_percent: float = 0.40
    opex: float = 200_000


class FinancialModelConfig(CamelModel):
    author: str = "Cowork Assistant"
    assumptions: Assumptions = Field(default_factory=Assumptions)
    projection_years: int = Field(default=5, ge=1)
    start_year: int = Field(default_factory=lambda: date.today().year)
    include_balance_sheet: bool = False
    include_cash_flow: bool = False
    include_dashboard: bool = False


def _year_columns(config: FinancialModelConfig) -> list[str]:
    return [get_column_letter(2 + i) for i in range(config.projection_years)]


def _sheet_title(sheet, title: str) -> None:
    sheet["A1"] = title
    sheet["A1"].font = TITLE_FONT


def _year_header(sheet, config: FinancialModelConfig, centered: bool = False) -> None:
    sheet[f"A{YEAR_ROW}"] = "Year"
    sheet[f"A{YEAR_ROW}"].font = HEADER_FONT
    for offset, col in enumerate(_year_columns(config)):
        cell = sheet[f"{col}{YEAR_ROW}"]
        cell.value = str(config.start_year + offset)
        cell.font = HEADER_FONT
        if centered:
            cell.alignment = Alignment(horizontal="center")


def create_assumptions_sheet(sheet, assumptions: Assumptions) -> None:
    _sheet_title(sheet, "Assumptions")

    sheet["A3"] = "Revenue Assumptions"
    sheet["A3"].font = HEADER_FONT
    inputs = [
        ("A4", "Base Revenue", BASE_REVENUE_CELL, assumptions.base_revenue, CURRENCY_FORMAT),
        ("A5", "Growth Rate (%)", GROWTH_RATE_CELL, assumptions.growth_rate, PERCENT_FORMAT),
        ("A8", "COGS (% of Revenue)", COGS_PERCENT_CELL, assumptions.cogs_percent, PERCENT_FORMAT),
        ("A9", "Operating Expenses", OPEX_CELL, assumptions.opex, CURRENCY_FORMAT),
    ]
    sheet["A7"] = "Cost Assumptions"
    sheet["A7"].font = HEADER_FONT

    for label_cell, label, value_cell, value, number_format in inputs:
        sheet[label_cell] = label
        sheet[value_cell] = value
        sheet[value_cell].font = INPUT_FONT
        sheet[value_cell].number_format = number_format

    sheet.column_dimensions["A"].width = 30
    sheet.column_dimensions["B"].width = 20


def income_statement_formulas(col: str, prev_col: Optional[str]) -> dict[int, str]:
    """Formulas for one projection year column, keyed by row."""
    revenue = (
        f"=Assumptions!{BASE_REVENUE_CELL}"
        if prev_col is None
        else f"={prev_col}{REVENUE_ROW}*(1+Assumptions!$B$5)"
    )
    return {
        REVENUE_ROW: revenue,
        COGS_ROW: f"={col}{REVENUE_ROW}*Assumptions!$B$8",
        GROSS_PROFIT_ROW: f"={col}{REVENUE_ROW}-{col}{COGS_ROW}",
        OPEX_ROW: f"=Assumptions!{OPEX_CELL}",
        EBIT_ROW: f"={col}{GROSS_PROFIT_ROW}-{col}{OPEX_ROW}",
    }


def create_income_statement(sheet, config: FinancialModelConfig) -> None:
    _sheet_title(sheet, "Income Statement")
    _year_header(sheet, config, centered=True)

    labels = {
        REVENUE_ROW: ("Revenue", True),
        COGS_ROW: ("Cost of Goods Sold", False),
        GROSS_PROFIT_ROW: ("Gross Profit", True),
        OPEX_ROW: ("Operating Expenses", False),
        EBIT_ROW: ("Operating Income (EBIT)", True),
    }
    for row, (label, bold) in labels.items():
        sheet[f"A{row}"] = label
        if bold:
            sheet[f"A{row}"].font = HEADER_FONT

    columns = _year_columns(config)
    for index, col in enumerate(columns):
        prev_col = columns[index - 1] if index else None
        for row, formula in income_statement_formulas(col, prev_col).items():
            sheet[f"{col}{row}"] = formula
            sheet[f"{col}{row}"].number_format = ACCOUNTING_FORMAT

    sheet.column_dimensions["A"].width = 30
    for col in columns:
        sheet.column_dimensions[col].width = 15


def create_balance_sheet(sheet, config: FinancialModelConfig) -> None:
    _sheet_title(sheet, "Balance Sheet")
    _year_header(sheet, config)

    sheet["A5"] = "ASSETS"
    sheet["A5"].font = SECTION_FONT
    sheet["A6"] = "Total Assets"
    sheet["A8"] = "LIABILITIES"
    sheet["A8"].font = SECTION_FONT

    sheet.column_dimensions["A"].width = 30


def create_cash_flow_statement(sheet, config: FinancialModelConfig) -> None:
    _sheet_title(sheet, "Cash Flow Statement")
    _year_header(sheet, config)

    sheet["A5"] = "Operating Income (EBIT)"
    for col in _year_columns(config):
        sheet[f"{col}5"] = f"='Income Statement'!{col}{EBIT_ROW}"
        sheet[f"{col}5"].number_format = ACCOUNTING_FORMAT

    sheet.column_dimensions["A"].width = 30


def create_dashboard(sheet, income_sheet, config: FinancialModelConfig) -> None:
    sheet["A1"] = "Financial Dashboard"
    sheet["A1"].font = Font(bold=True, size=16)

    sheet["A3"] = "Revenue Trend"
    sheet["A3"].font = HEADER_FONT

    last_col = 1 + config.projection_years
    chart = LineChart()
    chart.title = "Revenue"
    chart.add_data(
        Reference(income_sheet, min_col=1, max_col=last_col, min_row=REVENUE_ROW, max_row=REVENUE_ROW),
        from_rows=True,
        titles_from_data=True,
    )
    chart.set_categories(
        Reference(income_sheet, min_col=2, max_col=last_col, min_row=YEAR_ROW, max_row=YEAR_ROW)
    )
    sheet.add_chart(chart, "A4")

    sheet["A20"] = "Profitability Metrics"
    sheet["A20"].font = HEADER_FONT


def create_financial_model(config: FinancialModelConfig, output_path: str) -> Workbook:
    workbook = Workbook()
    workbook.properties.creator = config.author

    assumptions = workbook.active
    assumptions.title = "Assumptions"
    create_assumptions_sheet(assumptions, config.assumptions)

    income = workbook.create_sheet("Income Statement")
    create_income_statement(income, config)

    if config.include_balance_sheet:
        create_balance_sheet(workbook.create_sheet("Balance Sheet"), config)
    if config.include_cash_flow:
        create_cash_flow_statement(workbook.create_sheet("Cash Flow"), config)
    if config.include_dashboard:
        create_dashboard(workbook.create_sheet("Dashboard"), income, config)

    save_workbook(workbook, output_path)
    logger.info("financial_model_created", output=output_path, sheets=workbook.sheetnames)
    return workbook


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="create-financial-model",
        description="Create multi-sheet financial models with formulas",
    )
    parser.add_argument("config", help="Model configuration (JSON or YAML)")
    parser.add_argument("output", help="Output .xlsx file")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_model(args.config, FinancialModelConfig)
        return create_financial_model(config, args.output)

    return execute(operation, skill="create-financial-model")


if __name__ == "__main__":
    raise SystemExit(main())
