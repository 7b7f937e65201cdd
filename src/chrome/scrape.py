"""
Web Scraper - Structured extraction driven by a selector map.

The selector map is a JSON object whose values are either a CSS selector
(text of the first match) or an item definition `{selector, fields, multiple}`.
Field selectors of the form `sel@attr` read an attribute instead of text.
"""

from typing import Any, Optional, Union

import structlog
from pydantic import RootModel

from browser.context import PageContext
from browser.manager import BrowserManager
from core.cli import SkillArgumentParser, add_browser_arguments, execute
from core.config import CamelModel, ChromeConfig, ConfigLoader
from core.errors import ArgumentError, BrowserError
from core.files import write_json

logger = structlog.get_logger()

MAX_PAGES_LIMIT = 5

SCRAPE_SCRIPT = """
(config) => {
    const extractValue = (root, field) => {
        const el = field.selector ? root.querySelector(field.selector) : root;
        if (!el) return null;
        if (field.attribute) return el.getAttribute(field.attribute);
        return (el.textContent || '').trim();
    };

    const readFields = (root, fields) => {
        const data = {};
        for (const [key, field] of Object.entries(fields)) {
            data[key] = extractValue(root, field);
        }
        return data;
    };

    const result = {};
    for (const [key, entry] of Object.entries(config)) {
        if (entry.field) {
            result[key] = extractValue(document, entry.field);
        } else if (entry.multiple) {
            result[key] = Array.from(document.querySelectorAll(entry.selector))
                .map((item) => readFields(item, entry.fields));
        } else {
            const element = document.querySelector(entry.selector);
            if (element) {
                result[key] = readFields(element, entry.fields);
            }
        }
    }
    return result;
}
"""


class ItemSelector(CamelModel):
    """Selector for one element (or, with multiple, every element) and its fields."""
    selector: str
    fields: dict[str, str] = {}
    multiple: bool = False


class SelectorMap(RootModel[dict[str, Union[str, ItemSelector]]]):
    """Top-level scraper configuration."""


def parse_field_selector(field: str) -> dict[str, Optional[str]]:
    """
    Split `sel@attr` into selector and attribute.

    An empty selector part targets the item element itself.
    """
    if "@" in field:
        selector, attribute = field.split("@", 1)
        return {"selector": selector or None, "attribute": attribute}
    return {"selector": field, "attribute": None}


def compile_selector_map(selector_map: SelectorMap) -> dict[str, dict[str, Any]]:
    """Normalize the selector map into the structure SCRAPE_SCRIPT consumes."""
    compiled = {}
    for key, entry in selector_map.root.items():
        if isinstance(entry, str):
            compiled[key] = {"field": parse_field_selector(entry)}
        else:
            compiled[key] = {
                "selector": entry.selector,
                "multiple": entry.multiple,
                "fields": {name: parse_field_selector(sel) for name, sel in entry.fields.items()},
            }
    return compiled


def merge_page_results(
    accumulated: dict[str, Any],
    page_data: dict[str, Any],
    selector_map: SelectorMap,
) -> dict[str, Any]:
    """Concatenate `multiple` lists; keep first-seen values for everything else."""
    for key, value in page_data.items():
        entry = selector_map.root.get(key)
        if isinstance(entry, ItemSelector) and entry.multiple:
            accumulated.setdefault(key, []).extend(value or [])
        elif accumulated.get(key) is None:
            accumulated[key] = value
    return accumulated


async def scrape_pages(
    ctx: PageContext,
    selector_map: SelectorMap,
    max_pages: int = 1,
    next_selector: Optional[str] = None,
) -> dict[str, Any]:
    """Extract from the current page, then follow `next_selector` up to `max_pages` pages."""
    compiled = compile_selector_map(selector_map)
    page = ctx.page
    data: dict[str, Any] = {}

    for page_number in range(1, max_pages + 1):
        page_data = await page.evaluate(SCRAPE_SCRIPT, compiled)
        merge_page_results(data, page_data, selector_map)
        logger.info("page_scraped", page=page_number, fields=len(page_data))

        if not next_selector or page_number == max_pages:
            break

        next_button = await page.query_selector(next_selector)
        if not next_button:
            logger.info("pagination_finished", pages=page_number)
            break

        async with page.expect_navigation(wait_until="networkidle", timeout=ctx.default_timeout):
            await next_button.click()

    return data


async def scrape_data(
    url: str,
    selector_map: SelectorMap,
    output: str,
    config: ChromeConfig,
    max_pages: int = 1,
    next_selector: Optional[str] = None,
) -> dict[str, Any]:
    async with BrowserManager(config) as browser:
        ctx = PageContext(await browser.get_page(), default_timeout=config.timeout)
        navigation = await ctx.navigate(url, wait_until="networkidle")
        if not navigation.success:
            raise BrowserError(navigation.error or "Navigation failed", url=url)

        data = await scrape_pages(ctx, selector_map, max_pages, next_selector)

    write_json(output, data)
    logger.info("scrape_saved", output=output, fields=len(data))
    return data


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="scrape-data",
        description="Extract structured data from a web page using a selector map",
    )
    parser.add_argument("url", help="Page URL")
    parser.add_argument("selectors", help="Selector map file (JSON or YAML)")
    parser.add_argument("output", help="Output JSON file")
    parser.add_argument("--max-pages", type=int, default=1, help=f"Pages to follow (max {MAX_PAGES_LIMIT})")
    parser.add_argument("--next-selector", help="CSS selector of the next-page link")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        if not 1 <= args.max_pages <= MAX_PAGES_LIMIT:
            raise ArgumentError(
                f"--max-pages must be between 1 and {MAX_PAGES_LIMIT}",
                argument="--max-pages",
            )
        loader = ConfigLoader()
        selector_map = loader.load_model(args.selectors, SelectorMap)
        config = loader.load_chrome_config(headless=args.headless, timeout=args.timeout)
        return scrape_data(
            args.url,
            selector_map,
            args.output,
            config,
            max_pages=args.max_pages,
            next_selector=args.next_selector,
        )

    return execute(operation, skill="scrape-data")


if __name__ == "__main__":
    raise SystemExit(main())
