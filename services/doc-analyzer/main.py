"""FastAPI document analyzer: bank statements and payslips via Gemini.

Handles upload checks, session gating and error mapping. Extraction itself
lives in extraction.py.
GDPR: No document logging, no disk writes. Uploads are processed in-memory only.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Form, Header, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from config import settings
from errors import ErrorKind, ExtractionError
from extraction import extract
from gemini_client import GeminiClient
from models import AnalysisResult, DocumentKind, ErrorResponse
from session import ExtractionInProgress, SessionRegistry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_gemini_client: GeminiClient | None = None
_sessions = SessionRegistry()

STATUS_BY_ERROR: dict[ErrorKind, int] = {
    ErrorKind.MISSING_CREDENTIAL: 503,
    ErrorKind.SAFETY_REJECTED: 422,
    ErrorKind.MALFORMED_RESPONSE: 502,
    ErrorKind.TRANSPORT_OR_SERVICE: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the Gemini client on startup if a key is configured."""
    global _gemini_client

    if not settings.GEMINI_API_KEY:
        logger.info("GEMINI_API_KEY is empty, document analysis disabled")
    else:
        logger.info("Using Gemini model %s", settings.GEMINI_MODEL)
        _gemini_client = GeminiClient()

        # Non-blocking probe at startup (log only)
        health = _gemini_client.health()
        if health.get("status") == "ok":
            logger.info("Gemini model is reachable: %s", health)
        else:
            logger.warning("Gemini health probe failed: %s", health)

    yield

    if _gemini_client is not None:
        _gemini_client.close()
        _gemini_client = None


app = FastAPI(title="Document Analyzer", version="1.0.0", lifespan=lifespan)


def _is_supported_mime(mime_type: str | None) -> bool:
    if not mime_type:
        return False
    return mime_type.startswith("image/") or mime_type == "application/pdf"


def _error_response(error: ExtractionError) -> JSONResponse:
    body = ErrorResponse(
        error=error.kind.value,
        message=error.message,
        document_kind=error.document_kind.value if error.document_kind else None,
        retryable=error.retryable,
    )
    return JSONResponse(status_code=STATUS_BY_ERROR[error.kind], content=body.model_dump())


@app.post(
    "/api/v1/analyze",
    response_model=AnalysisResult,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse},
               422: {"model": ErrorResponse}, 502: {"model": ErrorResponse},
               503: {"model": ErrorResponse}},
)
async def analyze(
    request: Request,
    file: UploadFile = File(...),
    document_kind: DocumentKind = Form(...),
    x_session_id: str | None = Header(default=None),
):
    """Extract a structured summary from a bank statement or payslip.

    Only one analysis may run per session at a time. Send ``X-Session-ID``
    to identify the session; without it the client address is used, so
    every user behind the same proxy or NAT shares one session.
    """
    if not _is_supported_mime(file.content_type):
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error="unsupported_file",
                message="Upload an image or a PDF document.",
                document_kind=document_kind.value,
            ).model_dump(),
        )

    file_bytes = await file.read()
    if not file_bytes:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error="empty_file",
                message="Empty file uploaded",
                document_kind=document_kind.value,
            ).model_dump(),
        )

    # GDPR: log byte count only, never document content
    logger.info(
        "Processing analysis: kind=%s mime=%s size=%d bytes",
        document_kind.value, file.content_type, len(file_bytes),
    )

    session_id = x_session_id or (request.client.host if request.client else "anonymous")

    try:
        return await run_in_threadpool(
            _sessions.run, session_id, extract, document_kind, file_bytes, file.content_type, _gemini_client,
        )
    except ExtractionInProgress as e:
        return JSONResponse(
            status_code=409,
            content=ErrorResponse(
                error="in_progress",
                message=str(e),
                document_kind=document_kind.value,
                retryable=True,
            ).model_dump(),
        )
    except ExtractionError as e:
        return _error_response(e)


@app.get("/health")
async def health():
    """Return service status and Gemini availability."""
    base = {
        "status": "healthy",
        "credential_configured": bool(settings.GEMINI_API_KEY),
        "model": settings.GEMINI_MODEL,
    }

    if _gemini_client is not None:
        base["gemini_health"] = await run_in_threadpool(_gemini_client.health)

    return base


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
