"""
Form Filler - Type into and click form controls from a JSON description.

Form file: {"selectors": {"#name": "Ada", "#submit": "click"},
            "wait_for_navigation": true}
"""

from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import Field

from browser.context import PageContext
from browser.manager import BrowserManager
from core.cli import SkillArgumentParser, add_browser_arguments, execute
from core.config import CamelModel, ChromeConfig, ConfigLoader
from core.errors import BrowserError

logger = structlog.get_logger()

CLICK = "click"
FIELD_WAIT_MS = 5000
STEP_PAUSE_MS = 100
NAVIGATION_TIMEOUT_MS = 10000


class FormData(CamelModel):
    """Ordered selector → value steps plus post-submit behaviour."""
    selectors: dict[str, Any]
    wait_for_navigation: bool = Field(default=False)


def error_screenshot_path(screenshot_path: str) -> str:
    """`shot.png` → `shot_error.png` next to it."""
    path = Path(screenshot_path)
    return str(path.with_name(f"{path.stem}_error{path.suffix or '.png'}"))


async def fill_fields(ctx: PageContext, form: FormData) -> int:
    """Run every step in order; raises BrowserError on the first failed step."""
    steps = 0
    for selector, value in form.selectors.items():
        if value == CLICK:
            logger.info("form_click", selector=selector)
            result = await ctx.click(selector)
        else:
            logger.info("form_fill", selector=selector, length=len(str(value)))
            result = await ctx.type_text(selector, str(value), wait_timeout=FIELD_WAIT_MS)

        if not result.success:
            raise BrowserError(result.error or "Form step failed", selector=selector)

        steps += 1
        await ctx.pause(STEP_PAUSE_MS)

    if form.wait_for_navigation:
        await ctx.wait_for_navigation(timeout=NAVIGATION_TIMEOUT_MS)

    return steps


async def fill_form(
    url: str,
    form: FormData,
    config: ChromeConfig,
    screenshot_path: Optional[str] = None,
) -> int:
    async with BrowserManager(config) as browser:
        ctx = PageContext(await browser.get_page(), default_timeout=config.timeout)

        try:
            navigation = await ctx.navigate(url, wait_until="networkidle")
            if not navigation.success:
                raise BrowserError(navigation.error or "Navigation failed", url=url)

            steps = await fill_fields(ctx, form)

            if screenshot_path:
                shot = await ctx.screenshot(screenshot_path, full_page=True)
                if not shot.success:
                    raise BrowserError(shot.error or "Screenshot failed")
                logger.info("screenshot_saved", path=screenshot_path)
        except BrowserError:
            if screenshot_path:
                error_path = error_screenshot_path(screenshot_path)
                shot = await ctx.screenshot(error_path)
                if shot.success:
                    logger.info("error_screenshot_saved", path=error_path)
            raise

    logger.info("form_filled", steps=steps)
    return steps


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="fill-form",
        description="Automate filling out web forms",
    )
    parser.add_argument("url", help="Page URL")
    parser.add_argument("form_data", help="Form data file (JSON or YAML)")
    parser.add_argument("screenshot", nargs="?", help="Optional screenshot output (PNG)")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    async def operation():
        loader = ConfigLoader()
        form = loader.load_model(args.form_data, FormData)
        config = loader.load_chrome_config(headless=args.headless, timeout=args.timeout)
        await fill_form(args.url, form, config, args.screenshot)

    return execute(operation, skill="fill-form")


if __name__ == "__main__":
    raise SystemExit(main())
