"""Screenshot Capture - Save a page or a single element as PNG."""

from typing import Optional

import structlog

from browser.context import PageContext
from browser.manager import BrowserManager
from core.cli import SkillArgumentParser, add_browser_arguments, execute
from core.config import ChromeConfig, ConfigLoader
from core.errors import BrowserError
from core.files import ensure_parent

logger = structlog.get_logger()


async def take_screenshot(
    url: str,
    output: str,
    config: ChromeConfig,
    full_page: bool = False,
    selector: Optional[str] = None,
) -> str:
    ensure_parent(output)

    async with BrowserManager(config) as browser:
        ctx = PageContext(await browser.get_page(), default_timeout=config.timeout)
        navigation = await ctx.navigate(url, wait_until="networkidle")
        if not navigation.success:
            raise BrowserError(navigation.error or "Navigation failed", url=url)

        result = await ctx.screenshot(output, full_page=full_page, selector=selector)
        if not result.success:
            raise BrowserError(result.error or "Screenshot failed", selector=selector, url=url)

    logger.info("screenshot_saved", path=output, bytes=result.data["size"], selector=selector)
    return output


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(prog="screenshot", description="Capture screenshots of web pages")
    parser.add_argument("url", help="Page URL")
    parser.add_argument("output", help="Output PNG file")
    parser.add_argument("--full-page", action="store_true", help="Capture the full scrollable page")
    parser.add_argument("--selector", help="Capture only this element")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_chrome_config(headless=args.headless, timeout=args.timeout)
        return take_screenshot(args.url, args.output, config, args.full_page, args.selector)

    return execute(operation, skill="screenshot")


if __name__ == "__main__":
    raise SystemExit(main())
