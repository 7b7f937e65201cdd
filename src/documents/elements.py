"""python-docx building blocks: fields, shading, tables and spaced paragraphs."""

from pathlib import Path
from typing import Any, Optional, Sequence

import structlog
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Twips

from core.files import ensure_parent

logger = structlog.get_logger()

HEADER_SHADING = "D9D9D9"
TOC_INSTRUCTION = 'TOC \\o "1-3" \\h \\z \\u'

ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justified": WD_ALIGN_PARAGRAPH.JUSTIFY,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
    "both": WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def new_document(author: Optional[str] = None, title: Optional[str] = None, description: Optional[str] = None):
    doc = Document()
    props = doc.core_properties
    if author:
        props.author = author
    if title:
        props.title = title
    if description:
        props.comments = description
    return doc


def save_document(doc, path: str) -> Path:
    path = ensure_parent(path)
    doc.save(path)
    logger.info("document_saved", path=str(path), paragraphs=len(doc.paragraphs), tables=len(doc.tables))
    return path


def set_margins(doc, inches: float = 1.0) -> None:
    for section in doc.sections:
        section.top_margin = Inches(inches)
        section.right_margin = Inches(inches)
        section.bottom_margin = Inches(inches)
        section.left_margin = Inches(inches)


def spaced(paragraph, before: int = 0, after: int = 0):
    """Set spacing in twips (1440 per inch)."""
    fmt = paragraph.paragraph_format
    if before:
        fmt.space_before = Twips(before)
    if after:
        fmt.space_after = Twips(after)
    return paragraph


def add_paragraph(
    doc,
    text: str = "",
    style: Optional[str] = None,
    align: Optional[str] = None,
    before: int = 0,
    after: int = 0,
    page_break_before: bool = False,
):
    paragraph = doc.add_paragraph(text, style=style)
    if align:
        paragraph.alignment = ALIGNMENTS.get(align.lower())
    if page_break_before:
        paragraph.paragraph_format.page_break_before = True
    return spaced(paragraph, before, after)


def add_heading(doc, text: str, level: int = 1, before: int = 0, after: int = 0, page_break_before: bool = False):
    heading = doc.add_heading(text, level=level)
    if page_break_before:
        heading.paragraph_format.page_break_before = True
    return spaced(heading, before, after)


def add_field(paragraph, instruction: str, placeholder: str = "") -> None:
    """Insert a complex field (PAGE, NUMPAGES, TOC ...) that Word evaluates on open."""
    run = paragraph.add_run()
    begin = OxmlElement("w:fldChar")
    begin.set(qn("w:fldCharType"), "begin")
    run._r.append(begin)

    instr = OxmlElement("w:instrText")
    instr.set(qn("xml:space"), "preserve")
    instr.text = instruction
    run._r.append(instr)

    separate = OxmlElement("w:fldChar")
    separate.set(qn("w:fldCharType"), "separate")
    run._r.append(separate)

    result = paragraph.add_run(placeholder)

    end = OxmlElement("w:fldChar")
    end.set(qn("w:fldCharType"), "end")
    result._r.append(end)


def shade_cell(cell, fill: str = HEADER_SHADING) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    tc_pr.append(shd)


def add_table(
    doc,
    rows: Sequence[Sequence[Any]],
    headers: Optional[Sequence[str]] = None,
    shade_header: bool = True,
):
    """Bordered full-width table; the header row is bold and shaded."""
    n_cols = max([len(headers or [])] + [len(row) for row in rows])
    if n_cols == 0:
        return None

    table = doc.add_table(rows=0, cols=n_cols)
    table.style = "Table Grid"

    if headers:
        cells = table.add_row().cells
        for cell, header in zip(cells, headers):
            cell.paragraphs[0].add_run(str(header)).bold = True
            if shade_header:
                shade_cell(cell)

    for row in rows:
        cells = table.add_row().cells
        for cell, value in zip(cells, row):
            cell.text = "" if value is None else str(value)

    return table


def header_footer(doc, header_text: str = "", header_align: str = "right", page_total: bool = False) -> None:
    """Header text plus a centred "Page N" (or "Page N of M") footer."""
    section = doc.sections[0]

    if header_text:
        header = section.header.paragraphs[0]
        header.text = header_text
        header.alignment = ALIGNMENTS[header_align]
        spaced(header, after=200)

    footer = section.footer.paragraphs[0]
    footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
    footer.add_run("Page ")
    add_field(footer, "PAGE", "1")
    if page_total:
        footer.add_run(" of ")
        add_field(footer, "NUMPAGES", "1")
