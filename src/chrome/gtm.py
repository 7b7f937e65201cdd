"""
GTM Checker - Inspect Google Tag Manager and Analytics setup on a page.

Page globals and script sources are collected in the browser; tag IDs are
pulled out in Python with fixed patterns and turned into a JSON report.
"""

import re
from typing import Any, Optional

import structlog
from playwright.async_api import Request

from browser.context import PageContext
from browser.manager import BrowserManager
from core.clock import utc_timestamp
from core.cli import SkillArgumentParser, add_browser_arguments, execute
from core.config import CamelModel, ChromeConfig, ConfigLoader
from core.errors import BrowserError
from core.files import write_json

logger = structlog.get_logger()

ANALYTICS_HOSTS = ("google-analytics.com", "googletagmanager.com", "analytics.google.com")
MAX_REPORTED_REQUESTS = 20
SETTLE_MS = 3000

GA4_ID_PATTERN = re.compile(r"""['"](G-[A-Z0-9]+)['"]""")
UA_ID_PATTERN = re.compile(r"""['"](UA-[0-9]+-[0-9]+)['"]""")
GTM_CONTAINER_PATTERN = re.compile(r"id=(GTM-[A-Z0-9]+)")
GTM_SCRIPT_MARKER = "googletagmanager.com/gtm.js"

PAGE_SNAPSHOT_SCRIPT = """
() => {
    let dataLayer = null;
    if (window.dataLayer) {
        try {
            dataLayer = JSON.parse(JSON.stringify(window.dataLayer));
        } catch (e) {
            dataLayer = Array.from(window.dataLayer, () => null);
        }
    }
    return {
        containerKeys: window.google_tag_manager ? Object.keys(window.google_tag_manager) : null,
        dataLayer: dataLayer,
        hasGtag: typeof window.gtag !== 'undefined',
        scripts: Array.from(document.querySelectorAll('script')).map((script) => ({
            text: script.textContent || '',
            src: script.src || '',
        })),
    };
}
"""


class TagManagerInfo(CamelModel):
    """What the page exposes about GTM and Google Analytics."""
    gtm_present: bool = False
    gtm_container_id: Optional[str] = None
    data_layer: Optional[list[Any]] = None
    data_layer_length: int = 0
    ga4_present: bool = False
    ga4_measurement_ids: list[str] = []
    universal_analytics_present: bool = False
    ua_property_ids: list[str] = []


def _unique(values: list[str]) -> list[str]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def is_analytics_request(url: str) -> bool:
    return any(host in url for host in ANALYTICS_HOSTS)


def parse_tag_info(snapshot: dict[str, Any]) -> TagManagerInfo:
    """Build TagManagerInfo from the raw page snapshot."""
    info = TagManagerInfo()

    container_keys = snapshot.get("containerKeys")
    if container_keys is not None:
        info.gtm_present = True
        info.gtm_container_id = container_keys[0] if container_keys else None

    data_layer = snapshot.get("dataLayer")
    if data_layer is not None:
        info.data_layer = data_layer
        info.data_layer_length = len(data_layer)

    info.ga4_present = bool(snapshot.get("hasGtag"))

    ga4_ids: list[str] = []
    ua_ids: list[str] = []
    for script in snapshot.get("scripts", []):
        content = script.get("text", "")
        ga4_ids.extend(GA4_ID_PATTERN.findall(content))
        ua_ids.extend(UA_ID_PATTERN.findall(content))

        src = script.get("src", "")
        if GTM_SCRIPT_MARKER in src and not info.gtm_container_id:
            match = GTM_CONTAINER_PATTERN.search(src)
            if match:
                info.gtm_container_id = match.group(1)
                info.gtm_present = True

    info.ga4_measurement_ids = _unique(ga4_ids)
    info.ua_property_ids = _unique(ua_ids)
    info.universal_analytics_present = bool(ua_ids)
    return info


def build_recommendations(info: TagManagerInfo, request_count: int) -> list[dict[str, str]]:
    """Fixed checklist of findings, in report order."""
    recommendations = []

    if not info.gtm_present:
        recommendations.append({
            "type": "warning",
            "message": "Google Tag Manager not detected on this page",
        })

    if not info.data_layer:
        recommendations.append({
            "type": "warning",
            "message": "Data Layer is empty or not found",
        })

    if not info.ga4_present and not info.universal_analytics_present:
        recommendations.append({
            "type": "warning",
            "message": "No Google Analytics implementation detected",
        })

    if info.universal_analytics_present:
        recommendations.append({
            "type": "info",
            "message": "Universal Analytics detected. Consider migrating to GA4 as UA is deprecated.",
        })

    if request_count == 0:
        recommendations.append({
            "type": "error",
            "message": "No analytics network requests detected",
        })

    return recommendations


def build_report(url: str, info: TagManagerInfo, requests: list[dict[str, str]]) -> dict[str, Any]:
    return {
        "timestamp": utc_timestamp(),
        "url": url,
        "gtm": info.model_dump(mode="json", by_alias=True),
        "networkRequests": {
            "total": len(requests),
            "requests": requests[:MAX_REPORTED_REQUESTS],
        },
        "recommendations": build_recommendations(info, len(requests)),
    }


async def check_gtm(url: str, output: str, config: ChromeConfig) -> dict[str, Any]:
    """Load the page, inspect it and write the report."""
    requests: list[dict[str, str]] = []

    def record_request(request: Request) -> None:
        if is_analytics_request(request.url):
            requests.append({
                "url": request.url,
                "method": request.method,
                "resourceType": request.resource_type,
            })

    async with BrowserManager(config) as browser:
        page = await browser.get_page()
        page.on("request", record_request)

        ctx = PageContext(page, default_timeout=config.timeout)
        navigation = await ctx.navigate(url, wait_until="networkidle", settle_ms=SETTLE_MS)
        if not navigation.success:
            raise BrowserError(navigation.error or "Navigation failed", url=url)

        snapshot = await page.evaluate(PAGE_SNAPSHOT_SCRIPT)

    info = parse_tag_info(snapshot)
    report = build_report(url, info, requests)
    write_json(output, report)

    logger.info(
        "gtm_check_complete",
        output=output,
        gtm_present=info.gtm_present,
        container_id=info.gtm_container_id,
        data_layer_events=info.data_layer_length,
        ga4_ids=info.ga4_measurement_ids,
        network_requests=len(requests),
    )
    for recommendation in report["recommendations"]:
        logger.info("gtm_recommendation", **recommendation)

    return report


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="check-gtm",
        description="Check Google Tag Manager configuration and data layer",
    )
    parser.add_argument("--url", required=True, help="Page URL to check")
    parser.add_argument("--output", default="gtm_report.json", help="Output file for report")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_chrome_config(headless=args.headless, timeout=args.timeout)
        return check_gtm(args.url, args.output, config)

    return execute(operation, skill="check-gtm")


if __name__ == "__main__":
    raise SystemExit(main())
