"""
Page overlays: draw on a reportlab canvas sized to a page, then stamp it onto
that page with pypdf.

Coordinates given to the skills are measured from the top-left corner of the
page; reportlab measures from the bottom-left, so `top_to_bottom()` converts.
"""

import io
from pathlib import Path
from typing import Union

import structlog
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.colors import Color, HexColor
from reportlab.pdfgen import canvas

from core.errors import DocumentError
from core.files import ensure_parent

logger = structlog.get_logger()

FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"


def parse_color(value: str) -> Color:
    """`FF0000` or `#FF0000` to a reportlab colour."""
    value = value.strip()
    try:
        return HexColor(value if value.startswith("#") else f"#{value}")
    except ValueError as e:
        raise DocumentError(f"Invalid color: {value}") from e


def open_pdf(path: Union[str, Path]) -> PdfReader:
    path = Path(path)
    if not path.exists():
        raise DocumentError(f"PDF not found: {path}", path=str(path))
    try:
        return PdfReader(path)
    except PdfReadError as e:
        raise DocumentError(f"Cannot read PDF: {e}", path=str(path)) from e


def save_pdf(writer: PdfWriter, path: Union[str, Path]) -> Path:
    path = ensure_parent(path)
    with open(path, "wb") as f:
        writer.write(f)
    logger.info("pdf_saved", path=str(path), pages=len(writer.pages))
    return path


def page_size(page) -> tuple[float, float]:
    return float(page.mediabox.width), float(page.mediabox.height)


def top_to_bottom(height: float, y: float, box_height: float = 0) -> float:
    return height - y - box_height


class PageOverlays:
    """
    One lazily created canvas per page; `apply()` merges them into the writer.

    Page numbers are 1-based.
    """

    def __init__(self, writer: PdfWriter):
        self.writer = writer
        self._canvases: dict[int, tuple[io.BytesIO, canvas.Canvas]] = {}

    @property
    def page_count(self) -> int:
        return len(self.writer.pages)

    def has_page(self, number: int) -> bool:
        return 1 <= number <= self.page_count

    def size(self, number: int) -> tuple[float, float]:
        return page_size(self.writer.pages[number - 1])

    def canvas(self, number: int) -> canvas.Canvas:
        if number not in self._canvases:
            buffer = io.BytesIO()
            self._canvases[number] = (buffer, canvas.Canvas(buffer, pagesize=self.size(number)))
        return self._canvases[number][1]

    def apply(self) -> int:
        """Stamp every drawn overlay onto its page; returns the pages touched."""
        for number, (buffer, drawing) in sorted(self._canvases.items()):
            drawing.save()
            buffer.seek(0)
            overlay = PdfReader(buffer).pages[0]
            self.writer.pages[number - 1].merge_page(overlay)
        touched = len(self._canvases)
        self._canvases.clear()
        return touched
