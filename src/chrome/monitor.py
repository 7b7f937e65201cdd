"""
Dashboard Monitor - Repeated health checks of a dashboard page.

Each check navigates the shared page, waits for network idle plus a settle
delay, runs a fixed checklist of DOM predicates and records the outcome.
Results accumulate in memory and are written once as a JSON array.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import structlog
from playwright.async_api import Page
from pydantic import BaseModel, Field

from browser.context import PageContext
from browser.manager import BrowserManager
from core.clock import utc_timestamp
from core.cli import SkillArgumentParser, add_browser_arguments, execute
from core.config import CamelModel, ChromeConfig, ConfigLoader
from core.errors import BrowserError
from core.files import write_json

logger = structlog.get_logger()

ERROR_SELECTORS = (
    ".error-message",
    ".data-error",
    "[data-error]",
    ".alert-danger",
    ".warning",
)
LOADING_SELECTORS = (".loading", ".spinner", '[data-loading="true"]')
CHART_SELECTORS = (
    'svg[class*="chart"]',
    'canvas[class*="chart"]',
    ".chart-container",
)
METRIC_SELECTORS = (".metric-value", ".kpi-value", "[data-metric]", ".scorecard-value")

MIN_CHART_SIZE_PX = 10

TABLE_GRID_SCRIPT = """
(table) => Array.from(table.querySelectorAll('tr')).map(
    (row) => Array.from(row.querySelectorAll('td, th')).map(
        (cell) => (cell.textContent || '').trim()
    )
)
"""


class MonitorStatus(str, Enum):
    """Outcome of a single check."""
    HEALTHY = "healthy"
    ISSUES_DETECTED = "issues_detected"
    ERROR = "error"


class Anomaly(BaseModel):
    """A dashboard condition found by the checklist."""
    type: str
    message: str = ""
    selector: Optional[str] = None
    count: Optional[int] = None
    index: Optional[int] = None


class MonitorResult(CamelModel):
    """One entry of the monitoring output array."""
    check: int
    timestamp: str
    status: MonitorStatus
    anomaly_count: int = 0
    anomalies: list[Anomaly] = Field(default_factory=list)
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


AnomalyCheck = Callable[[Page], Awaitable[list[Anomaly]]]


async def find_error_messages(page: Page) -> list[Anomaly]:
    """One anomaly per visible error/warning banner element."""
    anomalies = []
    for selector in ERROR_SELECTORS:
        for element in await page.query_selector_all(selector):
            text = await element.text_content()
            anomalies.append(
                Anomaly(type="error", selector=selector, message=(text or "").strip())
            )
    return anomalies


async def find_stuck_loaders(page: Page) -> list[Anomaly]:
    """One anomaly per loading selector that still matches after settling."""
    anomalies = []
    for selector in LOADING_SELECTORS:
        elements = await page.query_selector_all(selector)
        if elements:
            anomalies.append(
                Anomaly(
                    type="loading_stuck",
                    selector=selector,
                    count=len(elements),
                    message="Elements still in loading state",
                )
            )
    return anomalies


async def find_empty_tables(page: Page) -> list[Anomaly]:
    """Tables with at most a header row."""
    anomalies = []
    for index, table in enumerate(await page.query_selector_all("table")):
        row_count = await table.eval_on_selector_all("tr", "(rows) => rows.length")
        if row_count <= 1:
            anomalies.append(
                Anomaly(type="empty_table", index=index, message="Table appears to be empty")
            )
    return anomalies


async def find_undersized_charts(page: Page) -> list[Anomaly]:
    """Chart elements rendered narrower or shorter than MIN_CHART_SIZE_PX."""
    anomalies = []
    for selector in CHART_SELECTORS:
        for index, chart in enumerate(await page.query_selector_all(selector)):
            box = await chart.bounding_box()
            if box and (box["width"] < MIN_CHART_SIZE_PX or box["height"] < MIN_CHART_SIZE_PX):
                anomalies.append(
                    Anomaly(
                        type="chart_too_small",
                        selector=selector,
                        index=index,
                        message="Chart appears too small or hidden",
                    )
                )
    return anomalies


ANOMALY_CHECKS: list[tuple[str, AnomalyCheck]] = [
    ("error_messages", find_error_messages),
    ("stuck_loaders", find_stuck_loaders),
    ("empty_tables", find_empty_tables),
    ("undersized_charts", find_undersized_charts),
]


async def detect_anomalies(
    page: Page,
    checks: Optional[list[tuple[str, AnomalyCheck]]] = None,
) -> list[Anomaly]:
    """Evaluate the checklist in order; a failing predicate becomes a detection_error."""
    anomalies: list[Anomaly] = []
    for name, check in checks if checks is not None else ANOMALY_CHECKS:
        try:
            anomalies.extend(await check(page))
        except Exception as e:
            logger.warning("anomaly_check_failed", check=name, error=str(e))
            anomalies.append(Anomaly(type="detection_error", message=f"{name}: {e}"))
    return anomalies


def classify_status(anomalies: list[Anomaly]) -> MonitorStatus:
    return MonitorStatus.HEALTHY if not anomalies else MonitorStatus.ISSUES_DETECTED


async def extract_dashboard_data(page: Page) -> dict[str, Any]:
    """Collect visible metrics, table grids and chart counts."""
    data: dict[str, Any] = {
        "timestamp": utc_timestamp(),
        "title": await page.title(),
        "url": page.url,
        "metrics": [],
        "tables": [],
        "charts": [],
    }

    try:
        for selector in METRIC_SELECTORS:
            for metric in await page.query_selector_all(selector):
                text = await metric.text_content()
                label = (
                    await metric.get_attribute("aria-label")
                    or await metric.get_attribute("title")
                )
                data["metrics"].append({
                    "value": (text or "").strip(),
                    "label": label or "Unlabeled",
                })

        for index, table in enumerate(await page.query_selector_all("table")):
            grid = await table.evaluate(TABLE_GRID_SCRIPT)
            data["tables"].append({"index": index, "rows": len(grid), "data": grid})

        charts = await page.query_selector_all("svg, canvas")
        data["charts"].append({
            "count": len(charts),
            "message": f"Found {len(charts)} chart elements",
        })
    except Exception as e:
        logger.warning("dashboard_extraction_failed", error=str(e))
        data["error"] = str(e)

    return data


async def run_check(page: Page, url: str, check: int, config: ChromeConfig) -> MonitorResult:
    """Navigate, inspect and classify once."""
    ctx = PageContext(page, default_timeout=config.timeout)
    navigation = await ctx.navigate(
        url,
        wait_until="networkidle",
        settle_ms=config.monitoring.settle_ms,
    )
    if not navigation.success:
        raise BrowserError(navigation.error or "Navigation failed", url=url)

    anomalies = await detect_anomalies(page)
    data = await extract_dashboard_data(page)

    return MonitorResult(
        check=check,
        timestamp=utc_timestamp(),
        status=classify_status(anomalies),
        anomaly_count=len(anomalies),
        anomalies=anomalies,
        data=data,
    )


async def run_checks(
    page: Page,
    url: str,
    config: ChromeConfig,
    results: Optional[list[MonitorResult]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> list[MonitorResult]:
    """
    Perform `config.monitoring.checks` checks on one page.

    Appends to `results` as it goes so a caller can flush partial output.
    """
    results = results if results is not None else []
    total = config.monitoring.checks

    for check in range(1, total + 1):
        log = logger.bind(check=check, total=total, url=url)
        log.info("check_started")

        try:
            result = await run_check(page, url, check, config)
            log.info(
                "check_completed",
                status=result.status.value,
                anomalies=result.anomaly_count,
                metrics=len(result.data.get("metrics", [])),
                tables=len(result.data.get("tables", [])),
            )
        except Exception as e:
            log.error("check_failed", error=str(e))
            result = MonitorResult(
                check=check,
                timestamp=utc_timestamp(),
                status=MonitorStatus.ERROR,
                error=str(e),
            )

        results.append(result)

        if check < total:
            log.info("waiting_for_next_check", seconds=config.monitoring.interval)
            await sleep(config.monitoring.interval)

    return results


def summarize(results: list[MonitorResult]) -> dict[str, int]:
    return {
        "total": len(results),
        "healthy": sum(1 for r in results if r.status == MonitorStatus.HEALTHY),
        "issues_detected": sum(1 for r in results if r.status == MonitorStatus.ISSUES_DETECTED),
        "errors": sum(1 for r in results if r.status == MonitorStatus.ERROR),
    }


async def monitor_dashboard(url: str, config: ChromeConfig) -> list[MonitorResult]:
    """Run a full monitoring session and write the results file."""
    results: list[MonitorResult] = []
    output = config.monitoring.output

    try:
        async with BrowserManager(config) as browser:
            page = await browser.get_page()
            await run_checks(page, url, config, results=results)
    finally:
        if results:
            write_json(output, [r.to_record() for r in results])
            logger.info("results_saved", output=output, **summarize(results))

    return results


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="monitor-dashboard",
        description="Monitor a dashboard for anomalies and data updates",
    )
    parser.add_argument("--url", required=True, help="Dashboard URL to monitor")
    parser.add_argument("--config", help="Chrome skill config file (JSON or YAML)")
    parser.add_argument("--interval", type=int, metavar="SEC", help="Check interval in seconds (default: 300)")
    parser.add_argument("--output", help="Output file for status (default: dashboard_status.json)")
    parser.add_argument("--checks", type=int, metavar="NUM", help="Number of checks to perform (default: 1)")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_chrome_config(
            args.config,
            headless=args.headless,
            timeout=args.timeout,
            monitoring={"interval": args.interval, "checks": args.checks, "output": args.output},
        )
        return monitor_dashboard(args.url, config)

    return execute(operation, skill="monitor-dashboard")


if __name__ == "__main__":
    raise SystemExit(main())
