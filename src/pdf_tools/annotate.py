"""
PDF Annotator - Stamp text, highlights, boxes and watermarks onto an existing PDF.

    annotate-pdf input.pdf annotations.json output.pdf

annotations.json is a list of objects, each with a `type` and 1-based `page`:

    [{"type": "text", "page": 1, "x": 50, "y": 50, "text": "Note", "bold": true},
     {"type": "highlight", "page": 1, "x": 100, "y": 200, "width": 200, "height": 20},
     {"type": "watermark", "page": 1, "text": "CONFIDENTIAL", "opacity": 0.2}]
"""

from typing import Callable, Optional

import structlog
from pydantic import RootModel
from pypdf import PdfWriter

from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from pdf_tools.overlay import BOLD_FONT, FONT, PageOverlays, open_pdf, parse_color, save_pdf, top_to_bottom

logger = structlog.get_logger()


class Annotation(CamelModel):
    type: str
    page: int = 1
    x: float = 50
    y: float = 50
    text: str = ""
    font_size: Optional[float] = None
    bold: bool = False
    color: Optional[str] = None
    width: float = 100
    height: Optional[float] = None
    opacity: Optional[float] = None
    border_color: str = "FF0000"
    border_width: float = 2


class AnnotationList(RootModel[list[Annotation]]):
    pass


def draw_text(overlays: PageOverlays, note: Annotation) -> None:
    _, height = overlays.size(note.page)
    c = overlays.canvas(note.page)
    c.setFont(BOLD_FONT if note.bold else FONT, note.font_size or 12)
    c.setFillColor(parse_color(note.color or "000000"))
    c.drawString(note.x, top_to_bottom(height, note.y), note.text)


def draw_highlight(overlays: PageOverlays, note: Annotation) -> None:
    _, height = overlays.size(note.page)
    box_height = note.height or 20
    c = overlays.canvas(note.page)
    c.setFillColor(parse_color(note.color or "FFFF00"), alpha=note.opacity if note.opacity is not None else 0.3)
    c.rect(note.x, top_to_bottom(height, note.y, box_height), note.width, box_height, stroke=0, fill=1)


def draw_rectangle(overlays: PageOverlays, note: Annotation) -> None:
    _, height = overlays.size(note.page)
    box_height = note.height or 100
    c = overlays.canvas(note.page)
    c.setStrokeColor(parse_color(note.border_color), alpha=note.opacity if note.opacity is not None else 1)
    c.setLineWidth(note.border_width)
    c.rect(note.x, top_to_bottom(height, note.y, box_height), note.width, box_height, stroke=1, fill=0)


def draw_watermark(overlays: PageOverlays, note: Annotation) -> None:
    """Large diagonal text centred roughly on the page, rotated -45 degrees."""
    width, height = overlays.size(note.page)
    size = note.font_size or 60
    c = overlays.canvas(note.page)
    c.saveState()
    c.setFont(BOLD_FONT, size)
    c.setFillColor(parse_color(note.color or "FF0000"), alpha=note.opacity if note.opacity is not None else 0.2)
    c.translate(width / 2 - len(note.text) * size / 4, height / 2)
    c.rotate(-45)
    c.drawString(0, 0, note.text)
    c.restoreState()


ANNOTATION_HANDLERS: dict[str, Callable[[PageOverlays, Annotation], None]] = {
    "text": draw_text,
    "highlight": draw_highlight,
    "rectangle": draw_rectangle,
    "watermark": draw_watermark,
}


def apply_annotations(writer: PdfWriter, annotations: list[Annotation]) -> int:
    """Draw every applicable annotation; returns how many were applied."""
    overlays = PageOverlays(writer)
    applied = 0

    for note in annotations:
        if not overlays.has_page(note.page):
            logger.warning("annotation_page_missing", page=note.page, pages=overlays.page_count)
            continue
        handler = ANNOTATION_HANDLERS.get(note.type)
        if handler is None:
            logger.warning("unknown_annotation_type", type=note.type)
            continue
        handler(overlays, note)
        applied += 1

    overlays.apply()
    return applied


def annotate_pdf(input_path: str, annotations: list[Annotation], output: str) -> int:
    writer = PdfWriter(clone_from=open_pdf(input_path))
    applied = apply_annotations(writer, annotations)
    save_pdf(writer, output)
    logger.info("pdf_annotated", output=output, annotations=len(annotations), applied=applied)
    return applied


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="annotate-pdf",
        description="Add text, highlights, rectangles and watermarks to a PDF",
    )
    parser.add_argument("input", help="Input PDF")
    parser.add_argument("annotations", help="Annotations list (JSON or YAML)")
    parser.add_argument("output", help="Output PDF")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        annotations = ConfigLoader().load_model(args.annotations, AnnotationList).root
        annotate_pdf(args.input, annotations, args.output)

    return execute(operation, skill="annotate-pdf")


if __name__ == "__main__":
    raise SystemExit(main())
