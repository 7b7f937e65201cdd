"""Tests for spreadsheet skills against real workbooks in temp dirs."""

import csv
import os
import sys
import tempfile

import pytest
from openpyxl import Workbook, load_workbook

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.errors import ArgumentError, DocumentError
from sheets.advanced import (
    add_autofilter,
    analyze,
    autofilter_range,
    column_stats,
    compare,
    compare_workbooks,
    create_chart,
)
from sheets.charts import ChartWorkbookConfig, create_charts
from sheets.financial import FinancialModelConfig, create_financial_model, income_statement_formulas
from sheets.from_csv import coerce_cell, csv_to_excel
from sheets.to_csv import csv_filename, excel_to_csv, format_value
from sheets.workbook import open_workbook


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def sales_xlsx(workdir):
    """Small sales sheet: text, numeric and sparse columns."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Sales"
    sheet.append(["Region", "Units", "Price", None])
    sheet.append(["North", 10, 2.5, None])
    sheet.append(["South", 20, 3.5, None])
    sheet.append(["North", 30, None, "note"])
    path = os.path.join(workdir, "sales.xlsx")
    workbook.save(path)
    return path


class TestColumnStats:
    """Per-column statistics."""

    def test_stats_properties(self, sales_xlsx):
        stats = column_stats(open_workbook(sales_xlsx)["Sales"])
        by_column = {entry["column"]: entry for entry in stats}

        assert set(by_column) == {"A", "B", "C", "D"}
        for entry in stats:
            assert 0 < entry["unique"] <= entry["count"]

        units = by_column["B"]
        assert units["header"] == "Units"
        assert units["type"] == "number"
        assert units["count"] == 3
        assert units["min"] <= units["avg"] <= units["max"]
        assert units["sum"] == 60
        assert units["avg"] == pytest.approx(20)

        region = by_column["A"]
        assert region["type"] == "string"
        assert region["unique"] == 2
        assert "min" not in region

        assert by_column["C"]["count"] == 2
        assert by_column["D"]["header"] == "Column 4"

    def test_analyze_writes_summary(self, sales_xlsx, workdir):
        output = os.path.join(workdir, "analysis.xlsx")

        stats = analyze(sales_xlsx, output)

        assert stats["sheetName"] == "Sales"
        assert stats["rowCount"] == 4
        assert stats["columnCount"] == 4
        summary = load_workbook(output)["Analysis Summary"]
        assert summary["A1"].value == "Column"
        assert summary.max_row == 1 + len(stats["columns"])


class TestAutofilter:
    """Filter range and frozen header."""

    def test_range_spans_used_area(self, sales_xlsx):
        assert autofilter_range(open_workbook(sales_xlsx)["Sales"]) == "A1:D4"

    def test_autofilter_saved(self, sales_xlsx, workdir):
        output = os.path.join(workdir, "filtered.xlsx")

        ref = add_autofilter(sales_xlsx, output)

        sheet = load_workbook(output)["Sales"]
        assert ref == "A1:D4"
        assert sheet.auto_filter.ref == "A1:D4"
        assert sheet.freeze_panes == "A2"


class TestCompare:
    """Workbook comparison."""

    def test_self_compare_has_no_differences(self, sales_xlsx):
        report = compare_workbooks(sales_xlsx, sales_xlsx)

        assert report["sheetCount"] == {"file1": 1, "file2": 1}
        assert report["sheets"][0]["cellDifferences"] == []

    def test_single_change_reported(self, sales_xlsx, workdir):
        changed = os.path.join(workdir, "changed.xlsx")
        workbook = load_workbook(sales_xlsx)
        workbook["Sales"]["B3"] = 25
        workbook.save(changed)

        differences = compare_workbooks(sales_xlsx, changed)["sheets"][0]["cellDifferences"]

        assert differences == [{"cell": "B3", "file1": 20, "file2": 25}]

    def test_counts_for_sheets_of_different_size(self, workdir):
        small = os.path.join(workdir, "small.xlsx")
        large = os.path.join(workdir, "large.xlsx")
        for path, rows, cols in ((small, 3, 2), (large, 5, 3)):
            workbook = Workbook()
            sheet = workbook.active
            sheet.title = "Data"
            for r in range(1, rows + 1):
                sheet.append([r * 10 + c for c in range(1, cols + 1)])
            workbook.save(path)

        report = compare_workbooks(small, large)["sheets"][0]

        assert report["rowCount"] == {"file1": 3, "file2": 5}
        assert report["columnCount"] == {"file1": 2, "file2": 3}
        cells = {d["cell"] for d in report["cellDifferences"]}
        assert {"C1", "A4", "C5"} <= cells
        assert "A1" not in cells

    def test_compare_requires_second_file(self, sales_xlsx, workdir):
        with pytest.raises(ArgumentError):
            compare(sales_xlsx, os.path.join(workdir, "diff.json"), None)


class TestCharts:
    """Native chart creation."""

    def test_create_chart_sheet(self, sales_xlsx, workdir):
        output = os.path.join(workdir, "chart.xlsx")

        create_chart(sales_xlsx, output, chart_type="line", title="Units", data_cols=["A", "B"])

        sheet = load_workbook(output)["Chart Data"]
        assert sheet["A2"].value == "Type"
        assert sheet["B2"].value == "line"
        assert sheet["B4"].value == "A, B"

    def test_invalid_column(self, sales_xlsx, workdir):
        with pytest.raises(ArgumentError):
            create_chart(sales_xlsx, os.path.join(workdir, "x.xlsx"), data_cols=["1"])

    def test_missing_workbook(self, workdir):
        with pytest.raises(DocumentError):
            open_workbook(os.path.join(workdir, "missing.xlsx"))

    def test_chart_workbook_from_config(self, workdir):
        config = ChartWorkbookConfig.model_validate({
            "data": {"headers": ["Month", "Revenue", "Costs"], "rows": [["Jan", 100, 60], ["Feb", 120, 70]]},
            "charts": [
                {"type": "bar", "title": "Revenue", "dataRange": "A1:C3", "series": ["Revenue"]},
                {"type": "pie", "title": "Split", "dataRange": "A1:B3"},
            ],
        })
        output = os.path.join(workdir, "charts.xlsx")

        workbook = create_charts(config, output)

        assert workbook.sheetnames == ["Data", "Charts"]
        assert len(workbook["Charts"]._charts) == 2
        saved = load_workbook(output)
        assert saved["Data"]["B3"].value == 120
        assert saved["Charts"]["A3"].value == "bar Chart: Revenue"


    def test_chart_range_needs_rows(self, workdir):
        config = ChartWorkbookConfig.model_validate({
            "data": {"headers": ["Month", "Revenue"], "rows": [["Jan", 100]]},
            "charts": [{"type": "bar", "title": "Revenue", "dataRange": "A:B"}],
        })

        with pytest.raises(DocumentError, match="rows and columns"):
            create_charts(config, os.path.join(workdir, "charts.xlsx"))

    def test_numeric_headers_accepted(self):
        config = ChartWorkbookConfig.model_validate({
            "data": {"headers": ["Year", 2024], "rows": [[2023, 1]]},
        })

        assert config.data.headers == ["Year", "2024"]


class TestCsvRoundTrip:
    """CSV -> xlsx -> CSV."""

    def test_coerce_cell(self):
        assert coerce_cell("42") == 42
        assert coerce_cell("3.5") == 3.5
        assert coerce_cell("nan") == "nan"
        assert coerce_cell("North") == "North"

    def test_round_trip_grid(self, workdir):
        source = os.path.join(workdir, "grid.csv")
        with open(source, "w", newline="") as f:
            csv.writer(f).writerows([["name", "qty", "price"], ["apple", "3", "1.5"], ["pear", "10", "2.0"]])

        xlsx = os.path.join(workdir, "grid.xlsx")
        csv_to_excel(source, xlsx, header_row=True, auto_format=True)
        exported = excel_to_csv(xlsx, os.path.join(workdir, "out"))

        assert [p.name for p in exported] == ["Sheet1.csv"]
        with open(exported[0], newline="") as f:
            rows = list(csv.reader(f))
        assert rows == [["name", "qty", "price"], ["apple", "3", "1.5"], ["pear", "10", "2"]]

        sheet = load_workbook(xlsx)["Sheet1"]
        assert sheet["A1"].font.bold
        assert sheet.auto_filter.ref == "A1:C1"

    def test_all_sheets_exported(self, workdir):
        workbook = Workbook()
        workbook.active.title = "Q1 Sales"
        workbook.active.append(["a", 1])
        workbook.create_sheet("Notes").append([True, None, None])
        path = os.path.join(workdir, "multi.xlsx")
        workbook.save(path)

        exported = excel_to_csv(path, os.path.join(workdir, "csv"), all_sheets=True)

        assert [p.name for p in exported] == ["Q1_Sales.csv", "Notes.csv"]
        assert exported[1].read_text() == "true\n"

    def test_format_value(self):
        assert format_value(None) == ""
        assert format_value(4.0) == "4"
        assert format_value(False) == "false"
        assert csv_filename("P&L 2024") == "P_L_2024.csv"


class TestFinancialModel:
    """Formula-driven projection workbook."""

    def test_first_and_later_year_formulas(self):
        first = income_statement_formulas("B", None)
        later = income_statement_formulas("C", "B")

        assert first[5] == "=Assumptions!B4"
        assert later[5] == "=B5*(1+Assumptions!$B$5)"
        assert later[6] == "=C5*Assumptions!$B$8"
        assert later[10] == "=C7-C9"

    def test_model_sheets(self, workdir):
        config = FinancialModelConfig.model_validate({
            "assumptions": {"baseRevenue": 500000, "growthRate": 0},
            "projectionYears": 3,
            "startYear": 2025,
            "includeBalanceSheet": True,
            "includeCashFlow": True,
            "includeDashboard": True,
        })
        output = os.path.join(workdir, "model.xlsx")

        create_financial_model(config, output)

        workbook = load_workbook(output)
        assert workbook.sheetnames == ["Assumptions", "Income Statement", "Balance Sheet", "Cash Flow", "Dashboard"]
        assert workbook["Assumptions"]["B4"].value == 500000
        assert workbook["Assumptions"]["B5"].value == 0
        income = workbook["Income Statement"]
        assert income["D3"].value == "2027"
        assert income["E5"].value is None
        assert workbook["Cash Flow"]["B5"].value == "='Income Statement'!B10"
