"""Tests for the dashboard monitor against fake page objects."""

import json
import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from chrome import monitor
from chrome.monitor import (
    Anomaly,
    MonitorResult,
    MonitorStatus,
    classify_status,
    detect_anomalies,
    extract_dashboard_data,
    find_empty_tables,
    find_undersized_charts,
    run_checks,
    summarize,
)
from core.config import ChromeConfig, MonitoringConfig
from core.errors import BrowserError


class FakeElement:
    """Element handle stand-in with canned answers."""

    def __init__(self, text="", attributes=None, box=None, rows=None, grid=None):
        self.text = text
        self.attributes = attributes or {}
        self.box = box
        self.rows = rows
        self.grid = grid or []

    async def text_content(self):
        return self.text

    async def get_attribute(self, name):
        return self.attributes.get(name)

    async def bounding_box(self):
        return self.box

    async def eval_on_selector_all(self, selector, script):
        return self.rows

    async def evaluate(self, script):
        return self.grid


class FakePage:
    """Page stand-in: selector -> list of FakeElement."""

    def __init__(self, elements=None, fail_goto=False, url="https://dash.example.com"):
        self.elements = elements or {}
        self.fail_goto = fail_goto
        self.url = url
        self.visits = 0

    async def goto(self, url, wait_until=None, timeout=None):
        self.visits += 1
        if self.fail_goto:
            raise RuntimeError("net::ERR_CONNECTION_REFUSED")
        self.url = url

    async def wait_for_timeout(self, ms):
        return None

    async def title(self):
        return "Sales Dashboard"

    async def query_selector_all(self, selector):
        return list(self.elements.get(selector, []))


def make_config(checks=1, interval=0):
    return ChromeConfig(monitoring=MonitoringConfig(checks=checks, interval=interval, settle_ms=0))


async def no_sleep(seconds):
    return None


class TestAnomalyDetection:
    """Checklist predicates."""

    @pytest.mark.asyncio
    async def test_clean_page_has_no_anomalies(self):
        anomalies = await detect_anomalies(FakePage())
        assert anomalies == []
        assert classify_status(anomalies) == MonitorStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_error_banner_and_loader(self):
        page = FakePage({
            ".error-message": [FakeElement("  Data failed to load  ")],
            ".spinner": [FakeElement(), FakeElement()],
        })

        anomalies = await detect_anomalies(page)
        types = [a.type for a in anomalies]

        assert types == ["error", "loading_stuck"]
        assert anomalies[0].message == "Data failed to load"
        assert anomalies[1].count == 2
        assert classify_status(anomalies) == MonitorStatus.ISSUES_DETECTED

    @pytest.mark.asyncio
    async def test_empty_table_detected(self):
        page = FakePage({"table": [FakeElement(rows=1), FakeElement(rows=5)]})

        anomalies = await find_empty_tables(page)

        assert len(anomalies) == 1
        assert anomalies[0].index == 0

    @pytest.mark.asyncio
    async def test_undersized_chart_detected(self):
        page = FakePage({
            ".chart-container": [
                FakeElement(box={"x": 0, "y": 0, "width": 400, "height": 300}),
                FakeElement(box={"x": 0, "y": 0, "width": 400, "height": 4}),
                FakeElement(box=None),
            ],
        })

        anomalies = await find_undersized_charts(page)

        assert [a.index for a in anomalies] == [1]
        assert anomalies[0].type == "chart_too_small"

    @pytest.mark.asyncio
    async def test_failing_predicate_becomes_detection_error(self):
        async def broken(page):
            raise ValueError("selector engine crashed")

        async def fine(page):
            return [Anomaly(type="error", message="x")]

        anomalies = await detect_anomalies(FakePage(), checks=[("broken", broken), ("fine", fine)])

        assert [a.type for a in anomalies] == ["detection_error", "error"]
        assert "broken" in anomalies[0].message
        assert "selector engine crashed" in anomalies[0].message


class TestDataExtraction:
    """Metrics, tables and chart counts."""

    @pytest.mark.asyncio
    async def test_extracts_metrics_and_tables(self):
        page = FakePage({
            ".metric-value": [FakeElement(" 1,234 ", {"aria-label": "Revenue"}), FakeElement("42")],
            "table": [FakeElement(grid=[["Region", "Sales"], ["EU", "10"]])],
            "svg, canvas": [FakeElement(), FakeElement(), FakeElement()],
        })

        data = await extract_dashboard_data(page)

        assert data["title"] == "Sales Dashboard"
        assert data["metrics"] == [
            {"value": "1,234", "label": "Revenue"},
            {"value": "42", "label": "Unlabeled"},
        ]
        assert data["tables"][0]["rows"] == 2
        assert data["charts"][0]["count"] == 3
        assert "error" not in data


class TestRunChecks:
    """Monitoring loop."""

    @pytest.mark.asyncio
    async def test_k_checks_produce_k_records(self):
        results = await run_checks(FakePage(), "https://dash.example.com", make_config(checks=3), sleep=no_sleep)

        assert [r.check for r in results] == [1, 2, 3]
        timestamps = [r.timestamp for r in results]
        assert timestamps == sorted(timestamps)
        for result in results:
            assert result.status in set(MonitorStatus)
            assert result.anomaly_count == len(result.anomalies)

    @pytest.mark.asyncio
    async def test_sleeps_between_checks_only(self):
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        await run_checks(FakePage(), "https://dash.example.com", make_config(checks=3, interval=7), sleep=record_sleep)

        assert sleeps == [7, 7]

    @pytest.mark.asyncio
    async def test_navigation_failure_becomes_error_record(self):
        page = FakePage(fail_goto=True)

        results = await run_checks(page, "https://down.example.com", make_config(checks=2), sleep=no_sleep)

        assert len(results) == 2
        assert all(r.status == MonitorStatus.ERROR for r in results)
        assert "ERR_CONNECTION_REFUSED" in results[0].error
        assert page.visits == 2

    @pytest.mark.asyncio
    async def test_issue_record_serialization(self):
        page = FakePage({".alert-danger": [FakeElement("Stale data")]})

        results = await run_checks(page, "https://dash.example.com", make_config(), sleep=no_sleep)
        record = results[0].to_record()

        assert record["status"] == "issues_detected"
        assert record["anomalyCount"] == 1
        assert record["anomalies"][0]["selector"] == ".alert-danger"
        assert "error" not in record
        assert record["timestamp"].endswith("Z")

    def test_summary_counts(self):
        results = [
            MonitorResult(check=1, timestamp="t1", status=MonitorStatus.HEALTHY),
            MonitorResult(check=2, timestamp="t2", status=MonitorStatus.ERROR, error="boom"),
            MonitorResult(check=3, timestamp="t3", status=MonitorStatus.HEALTHY),
        ]

        assert summarize(results) == {"total": 3, "healthy": 2, "issues_detected": 0, "errors": 1}

    def test_records_are_json_serializable(self):
        result = MonitorResult(check=1, timestamp="t", status=MonitorStatus.ERROR, error="boom")

        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "status.json")
            with open(path, "w") as f:
                json.dump([result.to_record()], f)
            with open(path) as f:
                loaded = json.load(f)

        assert loaded == [{"check": 1, "timestamp": "t", "status": "error", "anomalyCount": 0, "anomalies": [], "error": "boom"}]


class FakeBrowser:
    """BrowserManager stand-in handing out one FakePage."""

    def __init__(self, page, fail_on_close=False):
        self.page = page
        self.fail_on_close = fail_on_close

    def __call__(self, config):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.fail_on_close:
            raise BrowserError("browser closed unexpectedly")
        return False

    async def get_page(self):
        return self.page


class TestMonitorSession:
    """Full session with the results file."""

    def session_config(self, tmpdir, checks):
        config = make_config(checks=checks)
        config.monitoring.output = os.path.join(tmpdir, "status", "dashboard.json")
        return config

    @pytest.mark.asyncio
    async def test_output_holds_one_record_per_check(self, monkeypatch):
        monkeypatch.setattr(monitor, "BrowserManager", FakeBrowser(FakePage()))

        with tempfile.TemporaryDirectory() as tmpdir:
            config = self.session_config(tmpdir, checks=3)
            await monitor.monitor_dashboard("https://dash.example.com", config)
            with open(config.monitoring.output) as f:
                records = json.load(f)

        assert [r["check"] for r in records] == [1, 2, 3]
        assert all(r["status"] == "healthy" for r in records)

    @pytest.mark.asyncio
    async def test_results_written_when_session_fails(self, monkeypatch):
        monkeypatch.setattr(monitor, "BrowserManager", FakeBrowser(FakePage(), fail_on_close=True))

        with tempfile.TemporaryDirectory() as tmpdir:
            config = self.session_config(tmpdir, checks=2)
            with pytest.raises(BrowserError):
                await monitor.monitor_dashboard("https://dash.example.com", config)
            with open(config.monitoring.output) as f:
                records = json.load(f)

        assert len(records) == 2

    def test_zero_checks_rejected(self):
        assert monitor.main(["--url", "https://dash.example.com", "--checks", "0"]) == 1
