"""
Advanced PowerPoint Automation - themed decks and single-slide templates.

    pptx-advanced --action from-json --input slides.json --output deck.pptx
    pptx-advanced --action title-slide --title "Q3 Review" --subtitle "Results" --theme green
"""

from typing import Any, Optional, Union

import structlog

from core.clock import short_date
from core.cli import SkillArgumentParser, execute
from core.config import CamelModel, ConfigLoader
from core.errors import ArgumentError, DocumentError
from slides.shapes import (
    add_blank_slide,
    add_chart,
    add_image,
    add_table,
    add_text,
    new_presentation,
    save_presentation,
    set_background,
)

logger = structlog.get_logger()

ACTIONS = ("from-json", "title-slide", "agenda", "comparison")

THEMES = {
    "blue": {"primary": "4472C4", "secondary": "5B9BD5", "accent": "70AD47", "background": "FFFFFF", "text": "363636"},
    "green": {"primary": "70AD47", "secondary": "9DC3E6", "accent": "FFC000", "background": "FFFFFF", "text": "363636"},
    "red": {"primary": "C5504B", "secondary": "ED7D31", "accent": "4472C4", "background": "FFFFFF", "text": "363636"},
    "purple": {"primary": "7030A0", "secondary": "BF8FCC", "accent": "4472C4", "background": "FFFFFF", "text": "363636"},
}

DEFAULT_AGENDA = ["Introduction", "Current Situation", "Proposed Solution", "Implementation Plan", "Q&A"]
DEFAULT_BEFORE = ["Old process", "Manual work", "Time consuming"]
DEFAULT_AFTER = ["New process", "Automated", "Efficient"]

Length = Union[float, str]


class SlideElement(CamelModel):
    """One positioned element on a from-json slide."""
    type: str
    text: Optional[str] = None
    items: list[str] = []
    x: Optional[Length] = None
    y: Optional[Length] = None
    w: Optional[Length] = None
    h: Optional[Length] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    bold: bool = False
    align: str = "left"
    path: Optional[str] = None
    chart_type: str = "bar"
    title: Optional[str] = None
    data: Optional[list[dict[str, Any]]] = None
    rows: Optional[list[list[Any]]] = None


class DeckSlide(CamelModel):
    background: Optional[str] = None
    elements: list[SlideElement] = []


class Deck(CamelModel):
    author: Optional[str] = None
    title: Optional[str] = None
    subject: Optional[str] = None
    theme: str = "blue"
    slides: list[DeckSlide] = []


def get_theme(name: Optional[str]) -> dict[str, str]:
    theme_name = name or "blue"
    if theme_name not in THEMES:
        raise ArgumentError(f"Unknown theme: {theme_name}", argument="--theme")
    return THEMES[theme_name]


def _pick(value: Optional[Length], default: Length) -> Length:
    return default if value is None else value


def add_element(prs, slide, element: SlideElement, theme: dict[str, str]) -> bool:
    """Draw one element; returns False for unknown or incomplete elements."""
    kind = element.type

    if kind == "text" and element.text is not None:
        add_text(
            prs, slide, element.text,
            x=_pick(element.x, 0.5), y=_pick(element.y, 0.5),
            w=_pick(element.w, "90%"), h=_pick(element.h, 1),
            font_size=element.font_size or 18, color=element.color or theme["text"],
            bold=element.bold, align=element.align,
        )
    elif kind == "title" and element.text is not None:
        add_text(
            prs, slide, element.text,
            x=0.5, y=0.5, w="90%", h=1.2,
            font_size=element.font_size or 44, color=theme["primary"], bold=True, align="center",
        )
    elif kind == "bullet" and element.items:
        add_text(
            prs, slide, element.items,
            x=_pick(element.x, 0.5), y=_pick(element.y, 1.5),
            w=_pick(element.w, "90%"), h=_pick(element.h, 4),
            font_size=element.font_size or 18, color=element.color or theme["text"], bullets=True,
        )
    elif kind == "image" and element.path:
        add_image(
            prs, slide, element.path,
            _pick(element.x, 0.5), _pick(element.y, 1.5), _pick(element.w, 4), _pick(element.h, 3),
        )
    elif kind == "chart" and element.data:
        add_chart(
            prs, slide, element.chart_type, element.data,
            x=_pick(element.x, 0.5), y=_pick(element.y, 1.5),
            w=_pick(element.w, 6), h=_pick(element.h, 4), title=element.title,
        )
    elif kind == "table" and element.rows:
        add_table(
            prs, slide, element.rows,
            x=_pick(element.x, 0.5), y=_pick(element.y, 1.5),
            w=_pick(element.w, "90%"), h=_pick(element.h, 3),
        )
    else:
        logger.warning("element_skipped", type=kind)
        return False
    return True


def create_from_json(deck: Deck, output: str):
    theme = get_theme(deck.theme)
    prs = new_presentation(author=deck.author, title=deck.title, subject=deck.subject)

    for slide_config in deck.slides:
        slide = add_blank_slide(prs)
        if slide_config.background:
            set_background(slide, slide_config.background)
        for element in slide_config.elements:
            add_element(prs, slide, element, theme)

    save_presentation(prs, output)
    logger.info("presentation_created", slides=len(deck.slides), output=output)
    return prs


def create_title_slide(
    output: str,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    author: Optional[str] = None,
    theme_name: Optional[str] = None,
):
    theme = get_theme(theme_name)
    prs = new_presentation(author=author or "Cowork Assistant", title=title or "Presentation")
    slide = add_blank_slide(prs)
    set_background(slide, theme["background"])

    add_text(
        prs, slide, title or "Presentation Title",
        x=0.5, y=2.5, w="90%", h=1.0,
        font_size=44, bold=True, color=theme["primary"], align="center",
    )
    if subtitle:
        add_text(prs, slide, subtitle, x=0.5, y=3.5, w="90%", h=0.8, font_size=24, color=theme["secondary"], align="center")

    add_text(
        prs, slide, f"{author or 'Author'} | {short_date()}",
        x=0.5, y=6.5, w="90%", h=0.5, font_size=12, color="666666", align="center",
    )

    save_presentation(prs, output)
    logger.info("title_slide_created", title=title or "Presentation Title", output=output)
    return prs


def create_agenda_slide(output: str, items: Optional[list[str]] = None, theme_name: Optional[str] = None):
    theme = get_theme(theme_name)
    prs = new_presentation()
    slide = add_blank_slide(prs)

    add_text(prs, slide, "Agenda", x=0.5, y=0.5, w="90%", h=1.0, font_size=36, bold=True, color=theme["primary"])
    add_text(
        prs, slide, items or DEFAULT_AGENDA,
        x=1, y=1.5, w="80%", h=5.0, font_size=24, color=theme["text"], bullets=True,
    )

    save_presentation(prs, output)
    logger.info("agenda_slide_created", output=output)
    return prs


def create_comparison_slide(
    output: str,
    title: Optional[str] = None,
    before: Optional[list[str]] = None,
    after: Optional[list[str]] = None,
    theme_name: Optional[str] = None,
):
    theme = get_theme(theme_name)
    prs = new_presentation()
    slide = add_blank_slide(prs)

    add_text(prs, slide, title or "Comparison", x=0.5, y=0.5, w="90%", h=0.9, font_size=32, bold=True, color=theme["primary"])

    columns = (
        ("Before", before or DEFAULT_BEFORE, 0.5, theme["secondary"]),
        ("After", after or DEFAULT_AFTER, 5.5, theme["accent"]),
    )
    for heading, points, x, color in columns:
        add_text(prs, slide, heading, x=x, y=1.5, w=4, h=0.7, font_size=24, bold=True, color=color, align="center")
        add_text(prs, slide, points, x=x, y=2.3, w=4, h=3.5, font_size=18, bullets=True)

    save_presentation(prs, output)
    logger.info("comparison_slide_created", output=output)
    return prs


def _items(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="pptx-advanced",
        description="Generate presentations with charts, images and themed layouts",
    )
    parser.add_argument("--action", required=True, choices=ACTIONS, help="Operation to run")
    parser.add_argument("--input", help="Input JSON/YAML file (from-json)")
    parser.add_argument("--output", default="presentation.pptx", help="Output PowerPoint file")
    parser.add_argument("--title", help="Slide title")
    parser.add_argument("--subtitle", help="Subtitle text")
    parser.add_argument("--theme", choices=sorted(THEMES), help="Color theme")
    parser.add_argument("--author", help="Presentation author")
    parser.add_argument("--items", type=_items, help="Agenda items (comma-separated)")
    parser.add_argument("--before", type=_items, help="Left column points for comparison (comma-separated)")
    parser.add_argument("--after", type=_items, help="Right column points for comparison (comma-separated)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        if args.action == "from-json":
            if not args.input:
                raise ArgumentError("--input parameter required for from-json action", argument="--input")
            deck = ConfigLoader().load_model(args.input, Deck)
            if args.theme:
                deck.theme = args.theme
            return create_from_json(deck, args.output)
        if args.action == "title-slide":
            return create_title_slide(args.output, args.title, args.subtitle, args.author, args.theme)
        if args.action == "agenda":
            return create_agenda_slide(args.output, args.items, args.theme)
        if args.action == "comparison":
            return create_comparison_slide(args.output, args.title, args.before, args.after, args.theme)
        raise DocumentError(f"Unknown action: {args.action}")

    return execute(operation, skill="pptx-advanced")


if __name__ == "__main__":
    raise SystemExit(main())
