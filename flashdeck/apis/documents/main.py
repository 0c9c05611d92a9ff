from __future__ import annotations

from fastapi import APIRouter, UploadFile

from flashdeck.apis.deps import CurrentUser
from flashdeck.core.config import settings
from flashdeck.core.errors import DocumentError
from flashdeck.modules.documents import ExtractedDocument, extract_pdf_text
from starlette.concurrency import run_in_threadpool


router = APIRouter()

MAX_UPLOAD_BYTES = 20 * 1024 * 1024


@router.post(
    f"/{settings.app.version}/documents/extract",
    response_model=ExtractedDocument,
    tags=["documents"],
)
async def extract_document(file: UploadFile, user: CurrentUser) -> ExtractedDocument:
    """Extract plain text from an uploaded PDF for card generation."""
    if file.content_type != "application/pdf":
        raise DocumentError("Invalid file type. Please upload a PDF.")
    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise DocumentError("File too large.")
    return await run_in_threadpool(extract_pdf_text, data)
