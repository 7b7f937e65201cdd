"""
python-pptx drawing helpers shared by the slide skills.

Positions are in inches on the default 10 x 7.5 in slide; widths may also be
given as a percentage string of the slide width (e.g. "90%").
"""

from pathlib import Path
from typing import Any, Optional, Sequence, Union

import structlog
from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Emu, Inches, Pt

from core.errors import DocumentError
from core.files import ensure_parent

logger = structlog.get_logger()

Length = Union[int, float, str]

BLANK_LAYOUT = 6
BULLET = "• "

ALIGNMENTS = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}
VERTICAL_ANCHORS = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}
CHART_TYPES = {
    "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "bar_horizontal": XL_CHART_TYPE.BAR_CLUSTERED,
    "line": XL_CHART_TYPE.LINE_MARKERS,
    "pie": XL_CHART_TYPE.PIE,
    "doughnut": XL_CHART_TYPE.DOUGHNUT,
    "area": XL_CHART_TYPE.AREA,
    "radar": XL_CHART_TYPE.RADAR,
}


def new_presentation(author: Optional[str] = None, title: Optional[str] = None, subject: Optional[str] = None):
    prs = Presentation()
    props = prs.core_properties
    if author:
        props.author = author
    if title:
        props.title = title
    if subject:
        props.subject = subject
    return prs


def save_presentation(prs, path: str) -> Path:
    path = ensure_parent(path)
    prs.save(path)
    logger.info("presentation_saved", path=str(path), slides=len(prs.slides))
    return path


def add_blank_slide(prs):
    return prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])


def length(value: Length, total: int) -> Emu:
    """Inches, or a percentage of `total` (EMU) when given as "NN%"."""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("%"):
            return Emu(int(total * float(text[:-1]) / 100))
        value = float(text)
    return Inches(value)


def rgb(color: str) -> RGBColor:
    try:
        return RGBColor.from_string(color.lstrip("#").upper())
    except ValueError:
        raise DocumentError(f"Invalid color: {color!r}")


def set_background(slide, color: str) -> None:
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = rgb(color)


def _style_run(run, font_size: Optional[float], color: Optional[str], bold: bool) -> None:
    if font_size:
        run.font.size = Pt(font_size)
    if color:
        run.font.color.rgb = rgb(color)
    run.font.bold = bold


def add_text(
    prs,
    slide,
    text: Union[str, Sequence[str]],
    x: Length = 0.5,
    y: Length = 0.5,
    w: Length = "90%",
    h: Length = 1.0,
    font_size: Optional[float] = 18,
    color: Optional[str] = None,
    bold: bool = False,
    align: str = "left",
    valign: str = "top",
    bullets: bool = False,
):
    """
    Add a text box. A sequence of strings becomes one paragraph per item,
    prefixed with a bullet glyph when `bullets` is set.
    """
    box = slide.shapes.add_textbox(
        length(x, prs.slide_width),
        length(y, prs.slide_height),
        length(w, prs.slide_width),
        length(h, prs.slide_height),
    )
    frame = box.text_frame
    frame.word_wrap = True
    frame.vertical_anchor = VERTICAL_ANCHORS.get(valign, MSO_ANCHOR.TOP)

    lines = [text] if isinstance(text, str) else list(text)
    for index, line in enumerate(lines):
        paragraph = frame.paragraphs[0] if index == 0 else frame.add_paragraph()
        paragraph.alignment = ALIGNMENTS.get(align, PP_ALIGN.LEFT)
        run = paragraph.add_run()
        run.text = f"{BULLET}{line}" if bullets else str(line)
        _style_run(run, font_size, color, bold)
    return box


def add_chart(
    prs,
    slide,
    chart_type: str,
    series: Sequence[dict[str, Any]],
    x: Length = 1.0,
    y: Length = 2.0,
    w: Length = 8.0,
    h: Length = 4.0,
    title: Optional[str] = None,
    show_legend: bool = True,
):
    """
    Add a native chart. `series` items are {name, labels, values}; the
    first series supplies the category labels.
    """
    if chart_type not in CHART_TYPES:
        logger.warning("unknown_chart_type", chart_type=chart_type, fallback="bar")
    xl_type = CHART_TYPES.get(chart_type, CHART_TYPES["bar"])

    chart_data = CategoryChartData()
    chart_data.categories = list(series[0].get("labels", [])) if series else []
    for index, item in enumerate(series):
        chart_data.add_series(item.get("name") or f"Series {index + 1}", list(item.get("values", [])))

    frame = slide.shapes.add_chart(
        xl_type,
        length(x, prs.slide_width),
        length(y, prs.slide_height),
        length(w, prs.slide_width),
        length(h, prs.slide_height),
        chart_data,
    )
    chart = frame.chart
    chart.has_title = bool(title)
    if title:
        chart.chart_title.text_frame.text = title
    chart.has_legend = show_legend
    if show_legend:
        chart.legend.position = XL_LEGEND_POSITION.RIGHT
        chart.legend.include_in_layout = False
    return chart


def add_table(
    prs,
    slide,
    rows: Sequence[Sequence[Any]],
    x: Length = 0.5,
    y: Length = 1.5,
    w: Length = 9.0,
    h: Optional[Length] = None,
    column_widths: Optional[Sequence[float]] = None,
    font_size: float = 14,
    fill_color: Optional[str] = None,
):
    if not rows:
        return None

    n_rows = len(rows)
    n_cols = max(len(row) for row in rows)
    height = length(h, prs.slide_height) if h is not None else Inches(0.4 * n_rows)
    shape = slide.shapes.add_table(
        n_rows,
        n_cols,
        length(x, prs.slide_width),
        length(y, prs.slide_height),
        length(w, prs.slide_width),
        height,
    )
    table = shape.table

    if column_widths:
        for index, width in enumerate(column_widths[:n_cols]):
            table.columns[index].width = Inches(width)

    for r, row in enumerate(rows):
        for c in range(n_cols):
            cell = table.cell(r, c)
            cell.text = "" if c >= len(row) or row[c] is None else str(row[c])
            for paragraph in cell.text_frame.paragraphs:
                for run in paragraph.runs:
                    run.font.size = Pt(font_size)
            if fill_color and r > 0:
                cell.fill.solid()
                cell.fill.fore_color.rgb = rgb(fill_color)
    return table


def add_image(prs, slide, path: str, x: Length, y: Length, w: Length, h: Length):
    if not Path(path).exists():
        raise DocumentError(f"Image not found: {path}", path=path)
    return slide.shapes.add_picture(
        path,
        length(x, prs.slide_width),
        length(y, prs.slide_height),
        length(w, prs.slide_width),
        length(h, prs.slide_height),
    )


def set_notes(slide, notes: str) -> None:
    slide.notes_slide.notes_text_frame.text = notes
