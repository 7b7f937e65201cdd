"""
Advanced Word Automation - documents from JSON content, report and letter templates.

    docx-advanced --action from-json --input content.json --output doc.docx
    docx-advanced --action report --title "Q3 Analysis" --author "Jane Doe"
    docx-advanced --action letter --author "Jane Doe" --output letter.docx
"""

from typing import Any, Optional

import structlog

from core.clock import short_date
from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from core.errors import ArgumentError, DocumentError
from documents.elements import (
    TOC_INSTRUCTION,
    add_field,
    add_heading,
    add_paragraph,
    add_table,
    header_footer,
    new_document,
    save_document,
)

logger = structlog.get_logger()

ACTIONS = ("from-json", "report", "letter")
DEFAULT_AUTHOR = "Cowork Assistant"
BULLET_STYLES = ("List Bullet", "List Bullet 2", "List Bullet 3")

REPORT_METRICS = [
    ["Metric", "Value", "Change"],
    ["Revenue", "$1.2M", "+15%"],
    ["Customers", "5,420", "+8%"],
    ["Retention", "92%", "+3%"],
]
RECOMMENDATIONS = ["Recommendation 1", "Recommendation 2", "Recommendation 3"]


class ContentItem(CamelModel):
    type: str
    text: str = ""
    level: Optional[int] = None
    align: Optional[str] = None
    rows: Optional[list[list[Any]]] = None


class DocumentContent(CamelModel):
    title: Optional[str] = None
    author: Optional[str] = None
    content: list[ContentItem] = []


def bullet_style(level: int) -> str:
    return BULLET_STYLES[min(max(level, 0), len(BULLET_STYLES) - 1)]


def add_content_item(doc, item: ContentItem) -> bool:
    if item.type == "heading":
        add_heading(doc, item.text, level=min(max(item.level or 1, 1), 9))
    elif item.type == "paragraph":
        add_paragraph(doc, item.text, align=item.align)
    elif item.type == "bullet":
        add_paragraph(doc, item.text, style=bullet_style(item.level or 0))
    elif item.type == "table" and item.rows:
        add_table(doc, item.rows)
    else:
        logger.warning("content_item_skipped", type=item.type)
        return False
    return True


def create_from_json(content: DocumentContent, output: str, title: Optional[str] = None, author: Optional[str] = None):
    doc = new_document(
        author=content.author or author or DEFAULT_AUTHOR,
        title=content.title or title or "Document",
    )
    added = sum(1 for item in content.content if add_content_item(doc, item))
    save_document(doc, output)
    logger.info("document_created", output=output, items=added)
    return doc


def create_report(output: str, title: Optional[str] = None, author: Optional[str] = None):
    title = title or "Report"
    doc = new_document(author=author or DEFAULT_AUTHOR, title=title)
    header_footer(doc, header_text=title, header_align="center", page_total=True)

    add_paragraph(doc, title, style="Title", align="center", before=2880, after=400)
    add_paragraph(doc, f"Author: {author or 'Unknown'}", align="center", after=200)
    add_paragraph(doc, f"Date: {short_date()}", align="center", after=400)

    add_heading(doc, "Table of Contents", level=1, page_break_before=True)
    toc = doc.add_paragraph()
    add_field(toc, TOC_INSTRUCTION, "[Table of Contents will be generated when document is opened in Word]")

    add_heading(doc, "Executive Summary", level=1, page_break_before=True)
    add_paragraph(
        doc,
        "This section provides a high-level overview of the report findings and recommendations.",
        after=200,
    )
    add_paragraph(doc).add_run("Key findings:").bold = True

    add_heading(doc, "Introduction", level=1, before=400)
    add_paragraph(doc, "This report provides a comprehensive analysis of...", after=200)

    add_heading(doc, "Methodology", level=1, before=400)
    add_paragraph(doc, "The following approach was used to conduct this analysis:", after=200)
    add_heading(doc, "Data Collection", level=2)
    add_paragraph(doc, "Data was collected from various sources...", after=200)
    add_heading(doc, "Analysis", level=2)
    add_paragraph(doc, "The analysis was performed using...", after=200)

    add_heading(doc, "Results", level=1, before=400)
    add_paragraph(doc, "The analysis revealed the following results...", after=400)
    add_table(doc, REPORT_METRICS[1:], headers=REPORT_METRICS[0], shade_header=False)
    add_paragraph(doc, after=400)

    add_heading(doc, "Conclusions", level=1, before=400)
    add_paragraph(doc, "Based on the analysis, we conclude that...", after=200)

    add_heading(doc, "Recommendations", level=1, before=400)
    add_paragraph(doc, "We recommend the following actions:", after=200)
    for text in RECOMMENDATIONS:
        add_paragraph(doc, text, style="List Bullet")

    save_document(doc, output)
    logger.info("report_created", title=title, author=author or "Unknown", output=output)
    return doc


def create_letter(output: str, author: Optional[str] = None):
    doc = new_document(author=author or DEFAULT_AUTHOR, title="Letter")

    blocks = [
        ([author or "Sender Name", "Company Name", "123 Business St.", "City, State ZIP"], 100, 400),
        ([short_date()], 400, 400),
        (["Recipient Name", "Company Name", "456 Client Ave.", "City, State ZIP"], 100, 400),
        (["Dear Recipient,"], 400, 400),
        (["I am writing to...", "This letter serves to..."], 200, 200),
        (["Please feel free to contact me if you have any questions."], 400, 400),
        (["Sincerely,"], 800, 800),
        ([author or "Sender Name"], 0, 0),
    ]
    for lines, spacing, last_spacing in blocks:
        for index, line in enumerate(lines):
            add_paragraph(doc, line, after=last_spacing if index == len(lines) - 1 else spacing)

    save_document(doc, output)
    logger.info("letter_created", author=author or "Sender Name", output=output)
    return doc


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="docx-advanced",
        description="Generate Word documents from JSON content or built-in templates",
    )
    parser.add_argument("--action", required=True, choices=ACTIONS, help="Operation to run")
    parser.add_argument("--input", help="Input JSON/YAML file (from-json)")
    parser.add_argument("--output", default="document.docx", help="Output Word file")
    parser.add_argument("--title", help="Document title")
    parser.add_argument("--author", help="Document author")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        if args.action == "from-json":
            if not args.input:
                raise ArgumentError("--input parameter required for from-json action", argument="--input")
            content = ConfigLoader().load_model(args.input, DocumentContent)
            return create_from_json(content, args.output, args.title, args.author)
        if args.action == "report":
            return create_report(args.output, args.title, args.author)
        if args.action == "letter":
            return create_letter(args.output, args.author)
        raise DocumentError(f"Unknown action: {args.action}")

    return execute(operation, skill="docx-advanced")


if __name__ == "__main__":
    raise SystemExit(main())
