"""
Tests for document extraction and header-based section segmentation.
"""

import io

import pytest

from briefeval.errors import UnsupportedDocumentError, ValidationError
from briefeval.extract.document import extract_document
from briefeval.features.sections import match_header, normalize_heading, segment_text
from briefeval.rubrics.registry import SECTIONS


BRIEF = """Experiment brief v2 (draft)

Outcome:
Grow checkout revenue
• Trunk Problem
Checkout completion is low
ROOT CAUSE STATEMENT.
Users drop at the payment step
Appendix notes
   still about the root cause
- Hypothesis:
We believe a one-page checkout helps
"""


@pytest.mark.parametrize("line, expected", [
    ("Outcome:", "outcome"),
    ("  • Trunk Problem  ", "trunk problem"),
    ("- Hypothesis Statement.", "hypothesis statement"),
    ("* Why", "why"),
    ("Success Criteria::", "success criteria:"),
])
def test_normalize_heading(line, expected):
    assert normalize_heading(line) == expected


def test_match_header_variants():
    assert match_header("Root Cause Problem Statement") == "rootCause"
    assert match_header("WHY:") == "supportingData"
    assert match_header("Test Learning Objective") == "learningObjective"
    assert match_header("Outcome: grow revenue") is None


def test_segment_brief():
    brief = segment_text(BRIEF)

    assert set(brief.sections) == set(SECTIONS)
    assert brief.sections["outcome"] == "Grow checkout revenue"
    assert brief.sections["trunkProblem"] == "Checkout completion is low"
    assert brief.sections["rootCause"] == (
        "Users drop at the payment step\nAppendix notes\nstill about the root cause"
    )
    assert brief.sections["hypothesis"] == "We believe a one-page checkout helps"
    assert brief.sections["prediction"] == ""
    assert brief.ignored_preamble == 1
    assert brief.header_lines["outcome"] == [3]
    assert brief.present["outcome"] and not brief.present["prediction"]


def test_repeated_header_appends():
    brief = segment_text("Audience\nMobile users\nDuration\n2 weeks\nAudience\nUS only")
    assert brief.sections["audience"] == "Mobile users\nUS only"


def test_extract_txt():
    doc = extract_document("brief.TXT", b"\xef\xbb\xbfOutcome\r\nGrow revenue")
    assert doc.source == "txt"
    assert doc.lines == ["Outcome", "Grow revenue"]
    assert doc.meta["filename"] == "brief.TXT"


def test_extract_docx():
    from docx import Document

    d = Document()
    d.add_paragraph("Outcome")
    d.add_paragraph("Grow revenue")
    table = d.add_table(rows=1, cols=1)
    table.cell(0, 0).text = "Audience"
    buf = io.BytesIO()
    d.save(buf)

    doc = extract_document("brief.docx", buf.getvalue())
    assert doc.source == "docx"
    assert "Grow revenue" in doc.lines
    assert "Audience" in doc.lines
    assert segment_text(doc.text).sections["outcome"] == "Grow revenue"


def test_extract_pdf():
    import fitz

    pdf = fitz.open()
    page = pdf.new_page()
    page.insert_text((72, 72), "Outcome")
    page.insert_text((72, 100), "Grow revenue")
    data = pdf.tobytes()
    pdf.close()

    doc = extract_document("brief.pdf", data)
    assert doc.source == "pdf"
    assert doc.meta["total_pages"] == 1
    assert "Grow revenue" in doc.text


def test_unreadable_docx():
    with pytest.raises(ValidationError, match="Error reading DOCX"):
        extract_document("brief.docx", b"not a zip file")


def test_unsupported_extension():
    with pytest.raises(UnsupportedDocumentError) as exc:
        extract_document("brief.odt", b"data")
    assert exc.value.status_code == 415
    assert str(exc.value) == "Please upload a .txt, .docx or .pdf file"


def test_empty_upload():
    with pytest.raises(ValidationError, match="Empty file"):
        extract_document("brief.txt", b"")
