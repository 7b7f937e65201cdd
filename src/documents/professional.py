"""
Professional Document - Word report from a JSON/YAML outline.

Title page, table of contents, numbered sections and references, with a
header and a "Page N" footer on every page.

    create-professional-doc config.json report.docx
"""

from typing import Any, Optional

import structlog
from pydantic import Field

from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from documents.elements import (
    TOC_INSTRUCTION,
    add_field,
    add_heading,
    add_paragraph,
    add_table,
    header_footer,
    new_document,
    save_document,
    set_margins,
)

logger = structlog.get_logger()


class TableSpec(CamelModel):
    headers: list[str] = []
    rows: list[list[Any]] = []


class Subsection(CamelModel):
    title: str
    paragraphs: list[str] = []
    bullets: list[str] = []
    numbered: list[str] = []


class Section(CamelModel):
    title: str
    paragraphs: list[str] = []
    subsections: list[Subsection] = []
    tables: list[TableSpec] = []


class ProfessionalDocConfig(CamelModel):
    title: str = "Professional Document"
    subtitle: Optional[str] = None
    author: Optional[str] = None
    date: Optional[str] = None
    description: str = ""
    header_text: Optional[str] = None
    include_title: bool = True
    include_toc: bool = Field(default=False, alias="includeTOC")
    sections: list[Section] = []
    references: list[str] = []


def add_title_page(doc, config: ProfessionalDocConfig) -> None:
    add_paragraph(doc, config.title or "Document Title", style="Title", align="center", before=2880, after=1440)
    if config.subtitle:
        add_paragraph(doc, config.subtitle, align="center", after=720)
    if config.author:
        add_paragraph(doc, f"By: {config.author}", align="center", after=720)
    if config.date:
        add_paragraph(doc, config.date, align="center", after=2880)


def add_table_of_contents(doc) -> None:
    add_heading(doc, "Table of Contents", level=1, before=480, after=240)
    toc = doc.add_paragraph()
    add_field(toc, TOC_INSTRUCTION, "Right-click to update the table of contents.")
    add_paragraph(doc, "", page_break_before=True)


def add_section(doc, section: Section) -> None:
    add_heading(doc, section.title, level=1, before=480, after=240)
    for text in section.paragraphs:
        add_paragraph(doc, text, align="justified", after=200)

    for subsection in section.subsections:
        add_heading(doc, subsection.title, level=2, before=360, after=180)
        for text in subsection.paragraphs:
            add_paragraph(doc, text, align="justified", after=200)
        for text in subsection.bullets:
            add_paragraph(doc, text, style="List Bullet", after=100)
        for text in subsection.numbered:
            add_paragraph(doc, text, style="List Number", after=100)

    for table in section.tables:
        add_table(doc, table.rows, headers=table.headers or None)
        add_paragraph(doc, "", after=240)


def add_references(doc, references: list[str]) -> None:
    add_heading(doc, "References", level=1, before=480, after=240, page_break_before=True)
    for number, reference in enumerate(references, start=1):
        add_paragraph(doc, f"[{number}] {reference}", after=120)


def create_professional_doc(config: ProfessionalDocConfig, output: str):
    doc = new_document(
        author=config.author or "Cowork Assistant",
        title=config.title,
        description=config.description,
    )
    set_margins(doc, 1.0)
    header_footer(doc, header_text=config.header_text or config.title or "")

    if config.include_title:
        add_title_page(doc, config)
    if config.include_toc:
        add_table_of_contents(doc)
    for section in config.sections:
        add_section(doc, section)
    if config.references:
        add_references(doc, config.references)

    save_document(doc, output)
    logger.info(
        "professional_document_created",
        output=output,
        sections=len(config.sections),
        references=len(config.references),
    )
    return doc


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="create-professional-doc",
        description="Create a professional Word document from a JSON/YAML outline",
    )
    parser.add_argument("config", help="Document outline (JSON or YAML)")
    parser.add_argument("output", help="Output .docx file")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_model(args.config, ProfessionalDocConfig)
        return create_professional_doc(config, args.output)

    return execute(operation, skill="create-professional-doc")


if __name__ == "__main__":
    raise SystemExit(main())
