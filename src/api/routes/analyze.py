"""FastAPI route for document analysis.

Endpoints:
    POST /analyze — upload documents, run the analysis assistant, return
                    the reply and the extracted terminal table
    GET  /analyze — 405 with a usage hint
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from src.api.dependencies import get_orchestrator
from src.api.schemas import AnalyzeResponse, FileSummary
from src.errors import ClientInputError
from src.services.assistant_client import RawFile
from src.services.conversation_orchestrator import ConversationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analyze"])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_documents(
    files: list[UploadFile] | None = File(default=None),
    thread_id: str | None = Form(default=None, alias="threadId"),
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> AnalyzeResponse:
    """Analyze uploaded documents on a new or existing thread.

    Args:
        files: Documents (repeated ``files`` form parts).
        thread_id: Thread to continue, from a previous response.
        orchestrator: Injected conversation orchestrator.

    Returns:
        AnalyzeResponse with reply, table (or null) and file summaries.

    Raises:
        ClientInputError: 400 for no files, too many files, or oversized files.
        ConfigurationError: 500 when the analysis assistant is not configured.
        RemoteFailure: 500 on upload, run, or connectivity failure.
    """
    uploads = [f for f in files or [] if f.filename]
    if len(uploads) > orchestrator.max_files:
        raise ClientInputError("E-1002", count=len(uploads), limit=orchestrator.max_files)
    raw_files = [
        RawFile(
            name=f.filename,
            content=await f.read(),
            mime_type=f.content_type or "",
        )
        for f in uploads
    ]
    logger.info("Analyze request: %s", [f"{f.name} ({f.size})" for f in raw_files])

    result = await orchestrator.analyze(raw_files, thread_id=thread_id)

    return AnalyzeResponse(
        received=len(raw_files),
        files=[
            FileSummary(name=f.name, size=f.size, type=f.mime_type)
            for f in raw_files
        ],
        threadId=result.thread_id,
        reply=result.reply,
        table=result.table,
        note=result.note,
    )


@router.get("/analyze", status_code=405)
async def analyze_get_not_supported() -> JSONResponse:
    """Reject GET with a hint to use POST."""
    return JSONResponse(
        status_code=405,
        content={"error": "GET not supported. Use POST /api/analyze."},
    )
