"""FastAPI application for the Wiring Analyst API.

Provides the main application instance with routers, middleware and
exception handlers configured. Every error leaves the process as the
``{error, error_code}`` JSON envelope.
"""

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import version as _pkg_version

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

# Configure logging to stdout for uvicorn to capture
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
# Ensure our application loggers are captured
logging.getLogger("src").setLevel(logging.INFO)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import get_config
from src.api.routes import analyze, chat, export
from src.errors import AppError, error_envelope
from src.utils.redaction import sanitize_error_message

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def _app_version() -> str:
    try:
        return _pkg_version("wiring-analyst")
    except Exception:
        return "unknown"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the assistant service client on shutdown."""
    yield

    service = getattr(app.state, "assistant_service", None)
    close = getattr(service, "close", None)
    if close is not None:
        try:
            await close()
        except Exception as e:
            logger.warning("Error closing assistant service: %s", e)


app = FastAPI(
    title="Wiring Analyst API",
    description="Terminal assignment analysis of engineering documents via an AI assistant",
    version=_app_version(),
    lifespan=lifespan,
)

# CORS allowlist is config-driven. If empty, CORS is disabled (same-origin only).
allowed_origins = get_config().server.allowed_origins
if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle AppError exceptions with the JSON error envelope.

    Server-side messages are sanitized; client input messages are safe to
    surface verbatim.
    """
    body = error_envelope(exc)
    if exc.http_status >= 500:
        body["error"] = sanitize_error_message(body["error"])
        logger.error("%s %s failed: %s", request.method, request.url.path, body["error"])
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=body)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 with the error envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    details = first.get("msg", "malformed request")
    if location:
        details = f"{location}: {details}"
    error = AppError.from_code("E-1005", details=details)
    return JSONResponse(status_code=400, content=error_envelope(error))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so no failure escapes without an envelope."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = AppError.from_code("E-4001", details=sanitize_error_message(str(exc)) or "")
    return JSONResponse(status_code=500, content=error_envelope(error))


# Include routers
app.include_router(analyze.router, prefix=API_PREFIX)
app.include_router(chat.router, prefix=API_PREFIX)
app.include_router(export.router, prefix=API_PREFIX)


@app.get("/health")
def health_check() -> dict:
    """Liveness check.

    Returns:
        Dictionary with status and package version.
    """
    return {"status": "healthy", "version": _app_version()}


@app.get("/api")
def api_root() -> dict:
    """API root with links to docs."""
    return {
        "name": "Wiring Analyst API",
        "version": _app_version(),
        "docs": "/docs",
        "endpoints": ["/api/analyze", "/api/chat", "/api/export"],
    }
