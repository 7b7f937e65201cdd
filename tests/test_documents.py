"""Tests for Word document skills."""

import os
import sys
import tempfile

import pytest
from docx import Document

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from documents.advanced import DocumentContent, bullet_style, create_from_json, create_letter, create_report
from documents.advanced import main as docx_main
from documents.elements import add_table, new_document
from documents.professional import ProfessionalDocConfig, create_professional_doc


def texts(doc):
    return [p.text for p in doc.paragraphs]


def has_field(doc, instruction):
    return any(instruction in node.text for node in doc.element.body.iter() if node.tag.endswith("}instrText"))


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


class TestElements:
    """python-docx helpers."""

    def test_table_header_is_shaded_and_bold(self):
        doc = new_document()

        table = add_table(doc, [["Users", 10]], headers=["Metric", "Value"])

        header = table.rows[0].cells[0]
        assert header.text == "Metric"
        assert header.paragraphs[0].runs[0].bold
        assert 'w:fill="D9D9D9"' in header._tc.xml
        assert table.rows[1].cells[1].text == "10"
        assert table.style.name == "Table Grid"

    def test_empty_table_skipped(self):
        assert add_table(new_document(), []) is None

    def test_bullet_style_levels(self):
        assert bullet_style(0) == "List Bullet"
        assert bullet_style(1) == "List Bullet 2"
        assert bullet_style(7) == "List Bullet 3"


class TestProfessionalDocument:
    """Outline-driven document."""

    @pytest.fixture
    def config(self):
        return ProfessionalDocConfig.model_validate({
            "title": "Annual Report",
            "subtitle": "Fiscal 2024",
            "author": "Strategy Team",
            "date": "January 2025",
            "headerText": "ACME Corp",
            "includeTOC": True,
            "sections": [
                {
                    "title": "Overview",
                    "paragraphs": ["The year in review."],
                    "subsections": [
                        {"title": "Growth", "bullets": ["New markets"], "numbered": ["Hire", "Expand"]},
                    ],
                    "tables": [{"headers": ["Region", "Revenue"], "rows": [["EU", 100]]}],
                },
            ],
            "references": ["Internal sales data", "Market survey"],
        })

    def test_structure(self, config, workdir):
        output = os.path.join(workdir, "report.docx")

        create_professional_doc(config, output)

        doc = Document(output)
        lines = texts(doc)
        assert lines[0] == "Annual Report"
        assert doc.paragraphs[0].style.name == "Title"
        assert "By: Strategy Team" in lines
        assert "January 2025" in lines
        assert "Table of Contents" in lines
        assert has_field(doc, "TOC")

        overview = doc.paragraphs[lines.index("Overview")]
        assert overview.style.name == "Heading 1"
        assert doc.paragraphs[lines.index("Growth")].style.name == "Heading 2"
        assert doc.paragraphs[lines.index("New markets")].style.name == "List Bullet"
        assert doc.paragraphs[lines.index("Expand")].style.name == "List Number"

        references = doc.paragraphs[lines.index("References")]
        assert references.paragraph_format.page_break_before
        assert "[2] Market survey" in lines

        assert len(doc.tables) == 1
        assert doc.tables[0].rows[0].cells[0].text == "Region"

    def test_header_footer_and_properties(self, config, workdir):
        output = os.path.join(workdir, "report.docx")

        create_professional_doc(config, output)

        doc = Document(output)
        section = doc.sections[0]
        assert section.header.paragraphs[0].text == "ACME Corp"
        assert section.footer.paragraphs[0].text == "Page 1"
        assert section.left_margin == section.top_margin == 914400
        assert doc.core_properties.author == "Strategy Team"
        assert doc.core_properties.title == "Annual Report"

    def test_minimal_outline(self, workdir):
        output = os.path.join(workdir, "plain.docx")

        create_professional_doc(ProfessionalDocConfig.model_validate({"includeTitle": False}), output)

        doc = Document(output)
        assert doc.core_properties.author == "Cowork Assistant"
        assert "References" not in texts(doc)
        assert not has_field(doc, "TOC")


class TestAdvancedDocuments:
    """from-json content and built-in templates."""

    def test_from_json(self, workdir):
        content = DocumentContent.model_validate({
            "title": "Notes",
            "content": [
                {"type": "heading", "text": "Intro", "level": 2},
                {"type": "paragraph", "text": "Centered", "align": "center"},
                {"type": "bullet", "text": "Nested", "level": 1},
                {"type": "table", "rows": [["a", "b"], ["c", "d"]]},
                {"type": "quote", "text": "ignored"},
            ],
        })
        output = os.path.join(workdir, "notes.docx")

        create_from_json(content, output, author="Ada")

        doc = Document(output)
        lines = texts(doc)
        assert doc.paragraphs[lines.index("Intro")].style.name == "Heading 2"
        assert doc.paragraphs[lines.index("Nested")].style.name == "List Bullet 2"
        assert "ignored" not in lines
        assert doc.tables[0].rows[1].cells[1].text == "d"
        assert doc.core_properties.author == "Ada"
        assert doc.core_properties.title == "Notes"

    def test_report(self, workdir):
        output = os.path.join(workdir, "q3.docx")

        create_report(output, title="Q3 Analysis", author="Jane Doe")

        doc = Document(output)
        lines = texts(doc)
        assert "Author: Jane Doe" in lines
        assert any(line.startswith("Date: ") for line in lines)
        for heading in ("Executive Summary", "Methodology", "Results", "Recommendations"):
            assert heading in lines
        assert doc.sections[0].footer.paragraphs[0].text == "Page 1 of 1"
        assert doc.tables[0].rows[1].cells[0].text == "Revenue"

    def test_letter(self, workdir):
        output = os.path.join(workdir, "letter.docx")

        create_letter(output, author="Jane Doe")

        lines = texts(Document(output))
        assert lines[0] == "Jane Doe"
        assert "Dear Recipient," in lines
        assert lines[-1] == "Jane Doe"

    def test_from_json_requires_input(self, workdir):
        assert docx_main(["--action", "from-json", "--output", os.path.join(workdir, "x.docx")]) == 1
