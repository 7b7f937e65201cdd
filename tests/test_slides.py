"""Tests for presentation skills."""

import os
import sys
import tempfile

import pytest
from pptx import Presentation
from pptx.util import Inches

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.errors import ArgumentError, DocumentError
from slides.advanced import (
    Deck,
    add_element,
    create_agenda_slide,
    create_comparison_slide,
    create_from_json,
    create_title_slide,
    get_theme,
)
from slides.presentation import PresentationConfig, create_presentation
from slides.shapes import add_blank_slide, length, new_presentation, rgb


def slide_texts(slide):
    return [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame]


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


class TestShapes:
    """Low-level helpers."""

    def test_length_percent_and_inches(self):
        assert length("50%", Inches(10)) == Inches(5)
        assert length(2, Inches(10)) == Inches(2)

    def test_rgb(self):
        assert str(rgb("#4472C4")) == "4472C4"
        with pytest.raises(DocumentError):
            rgb("blue")


class TestPresentation:
    """Deck from a configuration."""

    def test_full_deck(self, workdir):
        config = PresentationConfig.model_validate({
            "title": "Quarterly Review",
            "subtitle": "Q3",
            "author": "Finance",
            "branding": {"backgroundColor": "FAFAFA", "footerText": "Confidential"},
            "slides": [
                {"title": "Highlights", "bullets": ["Revenue up", "Costs down"], "notes": "Keep it short"},
                {"title": "Split", "columns": [{"text": "Left"}, {"bullets": ["a", "b"]}]},
                {"title": "Trend", "chart": {"type": "line", "title": "Revenue",
                                             "data": {"labels": ["Q1", "Q2"], "values": [10, 12]}}},
                {"title": "Table", "table": {"rows": [["Metric", "Value"], ["Users", 1200]]}},
            ],
        })
        output = os.path.join(workdir, "deck.pptx")

        create_presentation(config, output)

        prs = Presentation(output)
        slides = list(prs.slides)
        assert len(slides) == 5
        assert "Quarterly Review" in slide_texts(slides[0])
        assert "Presented by: Finance" in slide_texts(slides[0])

        highlights = slide_texts(slides[1])
        assert "Confidential" in highlights
        assert any("Revenue up" in text for text in highlights)
        assert slides[1].notes_slide.notes_text_frame.text == "Keep it short"

        assert any(shape.has_chart for shape in slides[3].shapes)
        assert any(shape.has_table for shape in slides[4].shapes)
        assert prs.core_properties.author == "Finance"

    def test_numeric_chart_labels(self, workdir):
        config = PresentationConfig.model_validate({
            "includeTitle": False,
            "slides": [{"chart": {"data": {"labels": [2021, 2022], "values": [1, 2]}}}],
        })
        output = os.path.join(workdir, "years.pptx")

        create_presentation(config, output)

        chart = next(s.chart for s in Presentation(output).slides[0].shapes if s.has_chart)
        assert list(chart.plots[0].categories) == ["2021", "2022"]

    def test_without_title_slide(self, workdir):
        config = PresentationConfig.model_validate({"includeTitle": False, "slides": [{"title": "Only"}]})
        output = os.path.join(workdir, "short.pptx")

        create_presentation(config, output)

        assert len(Presentation(output).slides) == 1

    def test_missing_image(self, workdir):
        config = PresentationConfig.model_validate({
            "includeTitle": False,
            "slides": [{"image": {"path": os.path.join(workdir, "missing.png")}}],
        })

        with pytest.raises(DocumentError):
            create_presentation(config, os.path.join(workdir, "img.pptx"))


class TestAdvancedSlides:
    """Themed single-slide templates and from-json decks."""

    def test_unknown_theme(self):
        with pytest.raises(ArgumentError):
            get_theme("orange")

    def test_title_slide(self, workdir):
        output = os.path.join(workdir, "title.pptx")

        create_title_slide(output, title="Launch", subtitle="2025", author="Ada", theme_name="green")

        texts = slide_texts(Presentation(output).slides[0])
        assert "Launch" in texts
        assert "2025" in texts
        assert any(text.startswith("Ada | ") for text in texts)

    def test_agenda_defaults(self, workdir):
        output = os.path.join(workdir, "agenda.pptx")

        create_agenda_slide(output)

        texts = slide_texts(Presentation(output).slides[0])
        assert "Agenda" in texts
        assert any("Implementation Plan" in text for text in texts)

    def test_comparison(self, workdir):
        output = os.path.join(workdir, "compare.pptx")

        create_comparison_slide(output, title="Then vs Now", before=["Slow"], after=["Fast"], theme_name="purple")

        texts = slide_texts(Presentation(output).slides[0])
        assert "Then vs Now" in texts
        assert "Before" in texts and "After" in texts

    def test_from_json_skips_unknown_elements(self, workdir):
        deck = Deck.model_validate({
            "title": "Deck",
            "theme": "red",
            "slides": [
                {"background": "FFFFFF", "elements": [
                    {"type": "title", "text": "Hello"},
                    {"type": "bullet", "items": ["one", "two"]},
                    {"type": "chart", "chartType": "doughnut", "data": [{"name": "S", "labels": ["a", "b"], "values": [1, 2]}]},
                    {"type": "table", "rows": [["h1", "h2"], ["1", "2"]]},
                    {"type": "video", "path": "clip.mp4"},
                ]},
            ],
        })
        output = os.path.join(workdir, "json.pptx")

        create_from_json(deck, output)

        slide = Presentation(output).slides[0]
        assert "Hello" in slide_texts(slide)
        assert any(shape.has_chart for shape in slide.shapes)
        assert any(shape.has_table for shape in slide.shapes)

    def test_add_element_reports_skips(self):
        prs = new_presentation()
        slide = add_blank_slide(prs)
        deck = Deck.model_validate({"slides": [{"elements": [{"type": "text"}, {"type": "text", "text": "ok"}]}]})
        elements = deck.slides[0].elements

        assert add_element(prs, slide, elements[0], get_theme("blue")) is False
        assert add_element(prs, slide, elements[1], get_theme("blue")) is True
