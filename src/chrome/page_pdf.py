"""Page PDF - Print a rendered page to PDF (Chromium only)."""

from typing import Optional

import structlog

from browser.context import PageContext
from browser.manager import BrowserManager
from core.cli import SkillArgumentParser, add_browser_arguments, execute
from core.config import ChromeConfig, ConfigLoader
from core.errors import BrowserError
from core.files import ensure_parent

logger = structlog.get_logger()

PAGE_MARGIN = "20px"
PAPER_FORMATS = ("Letter", "Legal", "Tabloid", "Ledger", "A0", "A1", "A2", "A3", "A4", "A5", "A6")


async def generate_pdf(
    url: str,
    output: str,
    config: ChromeConfig,
    paper_format: str = "A4",
    landscape: bool = False,
) -> str:
    ensure_parent(output)

    async with BrowserManager(config) as browser:
        page = await browser.get_page()
        navigation = await PageContext(page, config.timeout).navigate(url, wait_until="networkidle")
        if not navigation.success:
            raise BrowserError(navigation.error or "Navigation failed", url=url)

        await page.pdf(
            path=output,
            format=paper_format,
            landscape=landscape,
            print_background=True,
            margin={side: PAGE_MARGIN for side in ("top", "right", "bottom", "left")},
        )

    logger.info("pdf_saved", path=output, format=paper_format, landscape=landscape)
    return output


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(prog="page-pdf", description="Convert web pages to PDF")
    parser.add_argument("url", help="Page URL")
    parser.add_argument("output", help="Output PDF file")
    parser.add_argument("--landscape", action="store_true", help="Landscape orientation")
    parser.add_argument("--format", dest="paper_format", default="A4", choices=PAPER_FORMATS, help="Paper format")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_chrome_config(headless=args.headless, timeout=args.timeout)
        return generate_pdf(args.url, args.output, config, args.paper_format, args.landscape)

    return execute(operation, skill="page-pdf")


if __name__ == "__main__":
    raise SystemExit(main())
