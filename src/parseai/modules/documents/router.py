"""
Parse AI Documents - Router.

API endpoints for document parsing. Nothing is stored: the caller persists
the returned ParsedDocument.
"""

import logging
import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from parseai.deps import get_analysis_engine, require_documents
from parseai.modules.analysis.engine import AnalysisEngine
from parseai.modules.documents.parser import parse_document
from parseai.modules.documents.schemas import (
    DocumentAnalyzeRequest,
    DocumentAnalyzeResponse,
    ParsedDocument,
)
from parseai.schemas import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/documents",
    tags=["documents"],
    dependencies=[require_documents],
    responses={503: {"model": ErrorResponse}},
)


def _parse_upload(file: UploadFile) -> ParsedDocument:
    """Spool the upload to disk under its original extension and parse it."""
    suffix = Path(file.filename or "").suffix.lower()
    with tempfile.TemporaryDirectory(prefix="parseai-") as tmp_dir:
        path = Path(tmp_dir) / f"upload{suffix}"
        with path.open("wb") as out:
            shutil.copyfileobj(file.file, out)
        return parse_document(path, file.content_type)


@router.post("/parse", response_model=ParsedDocument)
async def parse_upload(
    file: UploadFile = File(..., description="File to parse"),
):
    """
    Convert an uploaded file into normalized text and metadata.

    Never fails because of file contents: unparsable files come back with
    placeholder or raw content.
    """
    logger.info(f"[DOCS] Parse request: {file.filename} ({file.content_type})")
    return await run_in_threadpool(_parse_upload, file)


@router.post("/analyze", response_model=DocumentAnalyzeResponse)
async def analyze_document(
    request: DocumentAnalyzeRequest,
    engine: AnalysisEngine = Depends(get_analysis_engine),
):
    """Short upload-time analysis of parsed document content."""
    analysis = await engine.analyze_document(request.content, request.name)
    return DocumentAnalyzeResponse(analysis=analysis)
