"""
Professional Presentation Generator - Build a deck from a JSON/YAML config.

    create-presentation config.json output.pptx
"""

from typing import Any, Optional

import structlog
from pydantic import Field

from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from slides.shapes import (
    add_blank_slide,
    add_chart,
    add_image,
    add_table,
    add_text,
    new_presentation,
    save_presentation,
    set_background,
    set_notes,
)

logger = structlog.get_logger()

CONTENT_Y = 1.5
COLUMN_X = (0.5, 5.25)
COLUMN_WIDTH = 4.25


class TitleSlideStyle(CamelModel):
    background_color: str = "4472C4"
    title_color: str = "FFFFFF"
    subtitle_color: str = "E0E0E0"
    author_color: str = "FFFFFF"
    notes: Optional[str] = None


class Branding(CamelModel):
    """Background and footer applied to every content slide."""
    background_color: str = "FFFFFF"
    footer_text: str = ""
    footer_color: str = "666666"


class ColumnContent(CamelModel):
    text: Optional[str] = None
    bullets: Optional[list[str]] = None


class ChartSeriesData(CamelModel):
    labels: list[str] = []
    values: list[float] = []


class ChartContent(CamelModel):
    type: str = "bar"
    title: Optional[str] = None
    series_name: str = "Series 1"
    data: Optional[ChartSeriesData] = None


class TableContent(CamelModel):
    rows: list[list[Any]] = []
    column_widths: Optional[list[float]] = None


class ImageContent(CamelModel):
    path: str
    x: float = 2.0
    y: float = 2.0
    w: float = 5.0
    h: float = 3.0


class SlideContent(CamelModel):
    title: Optional[str] = None
    title_color: str = "2C3E50"
    title_align: str = "left"
    background_color: Optional[str] = None
    content: Optional[str] = None
    bullets: Optional[list[str]] = None
    columns: Optional[list[ColumnContent]] = None
    chart: Optional[ChartContent] = None
    table: Optional[TableContent] = None
    image: Optional[ImageContent] = None
    notes: Optional[str] = None


class PresentationConfig(CamelModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    subject: str = ""
    include_title: bool = True
    title_slide: TitleSlideStyle = Field(default_factory=TitleSlideStyle)
    branding: Optional[Branding] = None
    slides: list[SlideContent] = []


def add_title_slide(prs, config: PresentationConfig) -> None:
    style = config.title_slide
    slide = add_blank_slide(prs)
    set_background(slide, style.background_color)

    add_text(
        prs, slide, config.title or "Presentation Title",
        x=0.5, y=2.5, w="90%", h=1.5,
        font_size=44, bold=True, color=style.title_color, align="center", valign="middle",
    )
    if config.subtitle:
        add_text(
            prs, slide, config.subtitle,
            x=0.5, y=4.0, w="90%", h=0.8,
            font_size=24, color=style.subtitle_color, align="center",
        )
    if config.author:
        add_text(
            prs, slide, f"Presented by: {config.author}",
            x=0.5, y=6.5, w="90%", h=0.5,
            font_size=14, color=style.author_color, align="center",
        )
    if style.notes:
        set_notes(slide, style.notes)


def apply_branding(prs, slide, branding: Branding) -> None:
    set_background(slide, branding.background_color)
    if branding.footer_text:
        add_text(
            prs, slide, branding.footer_text,
            x=0.5, y=7.0, w=9, h=0.3,
            font_size=10, color=branding.footer_color, align="center",
        )


def _add_column(prs, slide, column: ColumnContent, x: float) -> None:
    if column.bullets:
        add_text(prs, slide, column.bullets, x=x, y=CONTENT_Y, w=COLUMN_WIDTH, h=4.5, font_size=16, bullets=True)
    elif column.text:
        add_text(prs, slide, column.text, x=x, y=CONTENT_Y, w=COLUMN_WIDTH, h=4.5, font_size=16)


def add_content_slide(prs, content: SlideContent, branding: Optional[Branding] = None):
    slide = add_blank_slide(prs)

    if branding:
        apply_branding(prs, slide, branding)
    if content.background_color:
        set_background(slide, content.background_color)

    if content.title:
        add_text(
            prs, slide, content.title,
            x=0.5, y=0.5, w="90%", h=0.8,
            font_size=32, bold=True, color=content.title_color, align=content.title_align,
        )

    if content.content:
        add_text(prs, slide, content.content, x=0.5, y=CONTENT_Y, w="90%", h=4.5, font_size=18, color="333333")

    if content.bullets:
        add_text(
            prs, slide, content.bullets,
            x=1.0, y=CONTENT_Y, w=8.0, h=4.5, font_size=18, color="333333", bullets=True,
        )

    if content.columns:
        for column, x in zip(content.columns, COLUMN_X):
            _add_column(prs, slide, column, x)

    if content.chart and content.chart.data:
        chart = content.chart
        add_chart(
            prs, slide, chart.type,
            [{"name": chart.series_name, "labels": chart.data.labels, "values": chart.data.values}],
            x=1.0, y=2.0, w=8.0, h=4.0, title=chart.title,
        )

    if content.table and content.table.rows:
        add_table(
            prs, slide, content.table.rows,
            x=0.5, y=CONTENT_Y, w=9.0,
            column_widths=content.table.column_widths, font_size=14, fill_color="F7F7F7",
        )

    if content.image:
        image = content.image
        add_image(prs, slide, image.path, image.x, image.y, image.w, image.h)

    if content.notes:
        set_notes(slide, content.notes)

    return slide


def create_presentation(config: PresentationConfig, output_path: str):
    prs = new_presentation(
        author=config.author or "Cowork Assistant",
        title=config.title or "Presentation",
        subject=config.subject,
    )

    if config.include_title:
        add_title_slide(prs, config)

    for content in config.slides:
        add_content_slide(prs, content, config.branding)

    save_presentation(prs, output_path)
    logger.info("presentation_created", output=output_path, slides=len(prs.slides))
    return prs


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="create-presentation",
        description="Create PowerPoint presentations from a configuration file",
    )
    parser.add_argument("config", help="Presentation configuration (JSON or YAML)")
    parser.add_argument("output", help="Output .pptx file")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        config = ConfigLoader().load_model(args.config, PresentationConfig)
        return create_presentation(config, args.output)

    return execute(operation, skill="create-presentation")


if __name__ == "__main__":
    raise SystemExit(main())
