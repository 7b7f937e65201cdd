"""
PDF Template Filler - Write variable-substituted text and images onto a template.

    fill-pdf-template template.pdf data.json output.pdf

data.json:

    {"variables": {"companyName": "Acme Corp"},
     "fields": [{"page": 1, "x": 100, "y": 100, "value": "Company: {{companyName}}", "bold": true}],
     "images": [{"page": 1, "x": 400, "y": 50, "path": "logo.png", "scale": 0.5}],
     "formFields": {"customer": "{{companyName}}"},
     "metadata": {"title": "Invoice", "author": "Accounting"}}
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog
from pypdf import PdfWriter
from reportlab.lib.utils import ImageReader

from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from core.errors import DocumentError
from pdf_tools.overlay import BOLD_FONT, FONT, PageOverlays, open_pdf, parse_color, save_pdf, top_to_bottom

logger = structlog.get_logger()

VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")


class TextField(CamelModel):
    page: int = 1
    x: float = 50
    y: float = 50
    value: str = ""
    font_size: float = 12
    bold: bool = False
    color: Optional[str] = None


class ImageField(CamelModel):
    path: str
    page: int = 1
    x: float = 50
    y: float = 50
    scale: float = 1.0


class PdfMetadata(CamelModel):
    title: str = ""
    author: str = ""
    subject: str = ""
    keywords: list[str] = []


class TemplateData(CamelModel):
    variables: dict[str, Any] = {}
    fields: list[TextField] = []
    images: list[ImageField] = []
    form_fields: dict[str, str] = {}
    metadata: Optional[PdfMetadata] = None


def render_template(text: str, variables: dict[str, Any]) -> str:
    """Replace `{{name}}` with its variable; unknown names are left as written."""

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return VARIABLE_PATTERN.sub(substitute, text)


def draw_fields(overlays: PageOverlays, fields: list[TextField], variables: dict[str, Any]) -> int:
    drawn = 0
    for field in fields:
        if not overlays.has_page(field.page):
            logger.warning("field_page_missing", page=field.page, pages=overlays.page_count)
            continue
        _, height = overlays.size(field.page)
        c = overlays.canvas(field.page)
        c.setFont(BOLD_FONT if field.bold else FONT, field.font_size)
        c.setFillColor(parse_color(field.color or "000000"))
        c.drawString(field.x, top_to_bottom(height, field.y), render_template(field.value, variables))
        drawn += 1
    return drawn


def draw_images(overlays: PageOverlays, images: list[ImageField]) -> int:
    drawn = 0
    for image in images:
        if not overlays.has_page(image.page):
            logger.warning("image_page_missing", page=image.page, pages=overlays.page_count)
            continue
        path = Path(image.path)
        if path.suffix.lower() not in IMAGE_SUFFIXES:
            logger.warning("unsupported_image_format", path=image.path)
            continue
        if not path.exists():
            raise DocumentError(f"Image not found: {path}", path=str(path))

        reader = ImageReader(str(path))
        img_width, img_height = reader.getSize()
        width, height = img_width * image.scale, img_height * image.scale
        _, page_height = overlays.size(image.page)
        overlays.canvas(image.page).drawImage(
            reader, image.x, top_to_bottom(page_height, image.y, height), width=width, height=height, mask="auto"
        )
        drawn += 1
    return drawn


def fill_form_fields(writer: PdfWriter, values: dict[str, str]) -> None:
    if not values:
        return
    if "/AcroForm" not in writer.root_object:
        raise DocumentError("Template has no form fields to fill")
    for page in writer.pages:
        if "/Annots" in page:
            writer.update_page_form_field_values(page, values, auto_regenerate=False)
    writer.set_need_appearances_writer(True)


def pdf_date(moment: datetime) -> str:
    return moment.strftime("D:%Y%m%d%H%M%SZ")


def apply_metadata(writer: PdfWriter, metadata: PdfMetadata) -> None:
    writer.add_metadata({
        "/Title": metadata.title,
        "/Author": metadata.author,
        "/Subject": metadata.subject,
        "/Keywords": ", ".join(metadata.keywords),
        "/CreationDate": pdf_date(datetime.now(timezone.utc)),
    })


def fill_pdf_template(template: str, data: TemplateData, output: str) -> dict[str, int]:
    writer = PdfWriter(clone_from=open_pdf(template))
    overlays = PageOverlays(writer)

    counts = {
        "fields": draw_fields(overlays, data.fields, data.variables),
        "images": draw_images(overlays, data.images),
    }
    overlays.apply()

    fill_form_fields(writer, {name: render_template(value, data.variables) for name, value in data.form_fields.items()})
    if data.metadata:
        apply_metadata(writer, data.metadata)

    save_pdf(writer, output)
    logger.info("pdf_template_filled", output=output, form_fields=len(data.form_fields), **counts)
    return counts


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="fill-pdf-template",
        description="Fill a PDF template with variable text, images and metadata",
    )
    parser.add_argument("template", help="Template PDF")
    parser.add_argument("data", help="Fill data (JSON or YAML)")
    parser.add_argument("output", help="Output PDF")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        data = ConfigLoader().load_model(args.data, TemplateData)
        return fill_pdf_template(args.template, data, args.output)

    return execute(operation, skill="fill-pdf-template")


if __name__ == "__main__":
    raise SystemExit(main())
