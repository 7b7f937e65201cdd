"""
Page Tester - Run declarative checks against a loaded page.

Suite file: {"tests": [{"name": ..., "type": "element_exists", "selector": ...}],
             "output_path": "results.json"}
"""

from typing import Awaitable, Callable, Optional

import structlog
from pydantic import Field

from browser.context import PageContext
from browser.manager import BrowserManager
from core.clock import utc_timestamp
from core.cli import EXIT_FAILURE, EXIT_OK, SkillArgumentParser, add_browser_arguments, execute
from core.config import CamelModel, ChromeConfig, ConfigLoader
from core.errors import BrowserError
from core.files import write_json

logger = structlog.get_logger()

VERIFY_TIMEOUT_MS = 5000


class CheckFailed(Exception):
    """A page check did not hold."""


class PageCheck(CamelModel):
    """One declarative page check."""
    name: str
    type: str
    selector: Optional[str] = None
    expected: Optional[str] = None
    click_selector: Optional[str] = None
    verify_selector: Optional[str] = None
    script: Optional[str] = None


class PageCheckSuite(CamelModel):
    checks: list[PageCheck] = Field(alias="tests")
    output_path: Optional[str] = None


class CheckResults(CamelModel):
    passed: list[dict[str, str]] = []
    failed: list[dict[str, str]] = []
    start_time: str = Field(default_factory=utc_timestamp)
    end_time: Optional[str] = None


def _require(check: PageCheck, *fields: str) -> None:
    missing = [name for name in fields if not getattr(check, name)]
    if missing:
        raise CheckFailed(f"Missing field(s) for {check.type}: {', '.join(missing)}")


async def check_element_exists(ctx: PageContext, check: PageCheck) -> str:
    _require(check, "selector")
    result = await ctx.wait_for_selector(check.selector, timeout=VERIFY_TIMEOUT_MS)
    if not result.success:
        raise CheckFailed(result.error)
    return f"Element found: {check.selector}"


async def check_text_contains(ctx: PageContext, check: PageCheck) -> str:
    _require(check, "selector", "expected")
    result = await ctx.extract_text(check.selector, timeout=VERIFY_TIMEOUT_MS)
    if not result.success:
        raise CheckFailed(result.error)
    text = result.data["text"]
    if check.expected not in text:
        raise CheckFailed(f"Expected text not found. Got: {text}")
    return f"Text contains: {check.expected}"


async def check_click_and_verify(ctx: PageContext, check: PageCheck) -> str:
    _require(check, "click_selector", "verify_selector")
    clicked = await ctx.click(check.click_selector)
    if not clicked.success:
        raise CheckFailed(clicked.error)
    verified = await ctx.wait_for_selector(check.verify_selector, timeout=VERIFY_TIMEOUT_MS)
    if not verified.success:
        raise CheckFailed(verified.error)
    return "Click successful and verified"


async def check_custom(ctx: PageContext, check: PageCheck) -> str:
    _require(check, "script")
    result = await ctx.evaluate(check.script)
    if not result.success:
        raise CheckFailed(result.error)
    if not result.data["result"]:
        raise CheckFailed("Custom test failed")
    return "Custom test passed"


CHECK_HANDLERS: dict[str, Callable[[PageContext, PageCheck], Awaitable[str]]] = {
    "element_exists": check_element_exists,
    "text_contains": check_text_contains,
    "click_and_verify": check_click_and_verify,
    "custom": check_custom,
}


async def run_page_checks(ctx: PageContext, suite: PageCheckSuite) -> CheckResults:
    """Run every check in order; failures are collected, never raised."""
    results = CheckResults()

    for check in suite.checks:
        logger.info("page_check_started", name=check.name, type=check.type)
        handler = CHECK_HANDLERS.get(check.type)
        try:
            if handler is None:
                raise CheckFailed(f"Unknown test type: {check.type}")
            message = await handler(ctx, check)
            results.passed.append({"name": check.name, "message": message})
        except CheckFailed as e:
            logger.warning("page_check_failed", name=check.name, error=str(e))
            results.failed.append({"name": check.name, "error": str(e)})

    results.end_time = utc_timestamp()
    return results


async def check_page(url: str, suite: PageCheckSuite, config: ChromeConfig) -> int:
    async with BrowserManager(config) as browser:
        ctx = PageContext(await browser.get_page(), default_timeout=config.timeout)
        navigation = await ctx.navigate(url, wait_until="networkidle")
        if not navigation.success:
            raise BrowserError(navigation.error or "Navigation failed", url=url)

        results = await run_page_checks(ctx, suite)

    logger.info("page_checks_complete", passed=len(results.passed), failed=len(results.failed))

    if suite.output_path:
        write_json(suite.output_path, results.model_dump(by_alias=True, exclude_none=True))
        logger.info("results_saved", output=suite.output_path)

    return EXIT_FAILURE if results.failed else EXIT_OK


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(prog="test-page", description="Automated checks for web pages")
    parser.add_argument("url", help="Page URL")
    parser.add_argument("config", help="Test suite file (JSON or YAML)")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        loader = ConfigLoader()
        suite = loader.load_model(args.config, PageCheckSuite)
        config = loader.load_chrome_config(headless=args.headless, timeout=args.timeout)
        return check_page(args.url, suite, config)

    return execute(operation, skill="test-page")


if __name__ == "__main__":
    raise SystemExit(main())
