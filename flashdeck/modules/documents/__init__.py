from .pdf import ExtractedDocument, extract_pdf_text

__all__ = ["ExtractedDocument", "extract_pdf_text"]
