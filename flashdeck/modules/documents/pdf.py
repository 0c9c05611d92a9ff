"""PDF text extraction with PyPDF2."""

from __future__ import annotations

import io

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError
from pydantic import BaseModel

from flashdeck.core.errors import DocumentError
from flashdeck.core.logging import get_logger

logger = get_logger(__name__)

PAGE_SEPARATOR = "\n\n"
PDF_MAGIC = b"%PDF-"


class ExtractedDocument(BaseModel):
    text: str
    page_count: int


def extract_pdf_text(data: bytes) -> ExtractedDocument:
    """Concatenate per-page text with blank lines between pages."""
    if not data or not data.lstrip().startswith(PDF_MAGIC):
        raise DocumentError("Invalid file type. Please upload a PDF.")

    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except (PdfReadError, ValueError, KeyError) as e:
        logger.error(f"Error parsing PDF: {e}")
        raise DocumentError(f"Failed to parse PDF: {e}") from e

    logger.info("Extracted text from %d pages", len(pages))
    return ExtractedDocument(text=PAGE_SEPARATOR.join(pages), page_count=len(pages))
