# briefeval/extract/document.py

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, List

from briefeval.errors import UnsupportedDocumentError, ValidationError


@dataclass
class ExtractedDoc:
    """
    Standard container for extracted brief text + minimal metadata.
    Keeping this consistent makes downstream segmentation simpler.
    """
    text: str
    lines: List[str]
    source: str  # "txt", "docx" or "pdf"
    meta: Dict[str, Any]


def _split_lines(text: str) -> List[str]:
    # Keep raw lines (including blanks); segmentation decides what to skip
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def extract_txt(data: bytes) -> ExtractedDoc:
    text = data.decode("utf-8-sig", errors="replace")
    return ExtractedDoc(text=text, lines=_split_lines(text), source="txt", meta={"bytes": len(data)})


def extract_docx(data: bytes) -> ExtractedDoc:
    """
    Raw paragraph text from a .docx using python-docx.

    Table cells are appended after body paragraphs, row by row.
    """
    from docx import Document

    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        raise ValidationError(f"Error reading DOCX file: {e}") from e

    paragraphs = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                paragraphs.extend(p.text for p in cell.paragraphs)

    text = "\n".join(paragraphs)
    return ExtractedDoc(
        text=text,
        lines=_split_lines(text),
        source="docx",
        meta={"paragraphs": len(doc.paragraphs), "tables": len(doc.tables)},
    )


def extract_pdf(data: bytes, *, join_pages_with: str = "\n") -> ExtractedDoc:
    """
    Extract text from a PDF brief using PyMuPDF.

    Notes:
    - Scanned (image-only) PDFs yield almost no text; no OCR fallback is attempted.
    """
    import fitz  # PyMuPDF

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ValidationError(f"Error reading PDF file: {e}") from e

    with doc:
        page_texts = [page.get_text("text") or "" for page in doc]
        total_pages = doc.page_count

    text = join_pages_with.join(page_texts).strip()
    return ExtractedDoc(
        text=text,
        lines=_split_lines(text),
        source="pdf",
        meta={"total_pages": total_pages, "engine": "pymupdf"},
    )


_EXTRACTORS = {
    ".txt": extract_txt,
    ".docx": extract_docx,
    ".pdf": extract_pdf,
}

SUPPORTED_SUFFIXES = tuple(_EXTRACTORS)


def _suffix_list() -> str:
    return ", ".join(SUPPORTED_SUFFIXES[:-1]) + " or " + SUPPORTED_SUFFIXES[-1]


def extract_document(filename: str, data: bytes) -> ExtractedDoc:
    """
    Extract text from an uploaded brief, dispatching on file extension.

    Raises:
        UnsupportedDocumentError: extension is not .txt, .docx or .pdf
        ValidationError: empty upload or unreadable file
    """
    suffix = PurePath(filename or "").suffix.lower()
    extractor = _EXTRACTORS.get(suffix)
    if extractor is None:
        raise UnsupportedDocumentError(f"Please upload a {_suffix_list()} file")
    if not data:
        raise ValidationError("Empty file")

    doc = extractor(data)
    doc.meta["filename"] = filename
    return doc
