"""Tests for PDF text extraction."""

import io

import pytest
from PyPDF2 import PdfWriter

from flashdeck.core.errors import DocumentError
from flashdeck.modules.documents import extract_pdf_text


def blank_pdf(pages: int) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestExtractPdfText:
    """Test suite for extract_pdf_text."""

    def test_counts_pages(self) -> None:
        doc = extract_pdf_text(blank_pdf(3))
        assert doc.page_count == 3

    def test_pages_joined_with_blank_lines(self) -> None:
        doc = extract_pdf_text(blank_pdf(2))
        assert doc.text == "\n\n"

    def test_rejects_non_pdf_bytes(self) -> None:
        with pytest.raises(DocumentError) as exc_info:
            extract_pdf_text(b"PK\x03\x04 definitely a zip file")
        assert exc_info.value.message == "Invalid file type. Please upload a PDF."

    def test_rejects_empty_upload(self) -> None:
        with pytest.raises(DocumentError):
            extract_pdf_text(b"")

    def test_corrupt_pdf(self) -> None:
        with pytest.raises(DocumentError) as exc_info:
            extract_pdf_text(b"%PDF-1.4\nthis is not really a pdf")
        assert exc_info.value.message.startswith("Failed to parse PDF")
