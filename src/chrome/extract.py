"""
Data Extractor - Pull elements or tables out of a page by CSS selector.

Tables come back as grids of cell text, anything else as element records.
Output is JSON (with metadata), CSV or plain text.
"""

import csv
import io
import json
from typing import Any, Optional

import structlog

from browser.context import PageContext
from browser.manager import BrowserManager
from core.clock import utc_timestamp
from core.cli import SkillArgumentParser, add_browser_arguments, execute
from core.config import ChromeConfig, ConfigLoader
from core.errors import BrowserError
from core.files import write_json, write_text

logger = structlog.get_logger()

FORMATS = ("json", "csv", "text")
SETTLE_MS = 2000

IS_TABLE_SCRIPT = """
(selector) => {
    const element = document.querySelector(selector);
    return !!element && element.tagName === 'TABLE';
}
"""

TABLES_SCRIPT = """
(tables) => tables.map((table) =>
    Array.from(table.querySelectorAll('tr')).map((row) =>
        Array.from(row.querySelectorAll('td, th')).map((cell) => (cell.textContent || '').trim())
    )
)
"""

ELEMENTS_SCRIPT = """
(elements) => elements.map((el) => ({
    text: (el.textContent || '').trim(),
    html: el.innerHTML,
    tag: el.tagName,
    attributes: Array.from(el.attributes).reduce((acc, attr) => {
        acc[attr.name] = attr.value;
        return acc;
    }, {}),
}))
"""


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def to_csv(data: list[Any]) -> str:
    """
    Render extracted items as CSV.

    Records use the first record's keys as header; grids are written row by
    row; anything else one value per line.
    """
    if not data:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    if isinstance(data[0], dict):
        headers = list(data[0].keys())
        writer.writerow(headers)
        for item in data:
            writer.writerow([_cell(item.get(header)) for header in headers])
    elif isinstance(data[0], list):
        for row in data:
            writer.writerow([_cell(cell) for cell in row])
    else:
        return "\n".join(_cell(item) for item in data)

    return buffer.getvalue().rstrip("\n")


def to_text(data: Any) -> str:
    """One line per item: plain strings as-is, records by their text."""
    if not isinstance(data, list):
        return json.dumps(data, ensure_ascii=False)

    lines = []
    for item in data:
        if isinstance(item, str):
            lines.append(item)
        elif isinstance(item, dict) and item.get("text"):
            lines.append(item["text"])
        else:
            lines.append(json.dumps(item, ensure_ascii=False))
    return "\n".join(lines)


def item_count(data: Any) -> int:
    return len(data) if isinstance(data, list) else 1


async def extract_items(ctx: PageContext, selector: str) -> Any:
    """Grid(s) when the selector hits a table, element records otherwise."""
    page = ctx.page
    if await page.evaluate(IS_TABLE_SCRIPT, selector):
        tables = await page.eval_on_selector_all(selector, TABLES_SCRIPT)
        return tables[0] if len(tables) == 1 else tables
    return await page.eval_on_selector_all(selector, ELEMENTS_SCRIPT)


def write_output(path: str, fmt: str, url: str, selector: str, data: Any) -> None:
    if fmt == "csv":
        write_text(path, to_csv(data if isinstance(data, list) else [data]))
    elif fmt == "text":
        write_text(path, to_text(data))
    else:
        write_json(path, {
            "timestamp": utc_timestamp(),
            "url": url,
            "selector": selector,
            "itemCount": item_count(data),
            "data": data,
        })


async def extract_data(url: str, selector: str, output: str, fmt: str, config: ChromeConfig) -> Any:
    async with BrowserManager(config) as browser:
        ctx = PageContext(await browser.get_page(), default_timeout=config.timeout)
        navigation = await ctx.navigate(url, wait_until="networkidle", settle_ms=SETTLE_MS)
        if not navigation.success:
            raise BrowserError(navigation.error or "Navigation failed", url=url)

        data = await extract_items(ctx, selector)

    logger.info("data_extracted", selector=selector, items=item_count(data))
    write_output(output, fmt, url, selector, data)
    logger.info("data_saved", output=output, format=fmt)
    return data


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="extract-data",
        description="Extract data from web pages using CSS selectors",
    )
    parser.add_argument("--url", required=True, help="Page URL to extract from")
    parser.add_argument("--selector", required=True, help="CSS selector for elements to extract")
    parser.add_argument("--output", default="extracted_data.json", help="Output file")
    parser.add_argument("--format", choices=FORMATS, default="json", help="Output format")
    add_browser_arguments(parser)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_chrome_config(headless=args.headless, timeout=args.timeout)
        return extract_data(args.url, args.selector, args.output, args.format, config)

    return execute(operation, skill="extract-data")


if __name__ == "__main__":
    raise SystemExit(main())
