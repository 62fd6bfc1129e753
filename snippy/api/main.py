"""
snippy.api.main — FastAPI application entry point
==================================================

Run with::

    uvicorn snippy.api.main:app --reload --port 3000

or ``python -m snippy``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from snippy import __version__  # noqa: E402
from snippy.api.deps import get_engine  # noqa: E402
from snippy.api.routes.announcements import router as announcements_router  # noqa: E402
from snippy.api.routes.donors import router as donors_router  # noqa: E402
from snippy.api.routes.feedback import router as feedback_router  # noqa: E402
from snippy.api.routes.insults import router as insults_router  # noqa: E402
from snippy.database.engine import init_db  # noqa: E402
from snippy.errors import SnippyError, StoreError  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """CORS_ALLOW_ORIGINS (comma-separated), defaulting to ``*``.

    The extension calls from ``chrome-extension://`` origins that differ
    per install, so the default stays open.
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — migrate the schema to head."""
    engine = app.dependency_overrides.get(get_engine, get_engine)()
    init_db(engine)
    logger.info("Snippy API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("Snippy API shutting down")


app = FastAPI(
    title="Snippy Backend",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["GET", "POST", "OPTIONS", "DELETE"],
    allow_headers=["Content-Type", "auth"],
)


# ---------------------------------------------------------------------------
# Error translation — every failure body is {"error": "<message>"}
# ---------------------------------------------------------------------------
@app.exception_handler(SnippyError)
async def snippy_error_handler(request: Request, exc: SnippyError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s raised an unhandled error", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Mount routers
app.include_router(donors_router, prefix="/api")
app.include_router(insults_router, prefix="/api")
app.include_router(announcements_router, prefix="/api")
app.include_router(feedback_router, prefix="/api")


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Snippy Server is running!"


@app.get("/api/health")
def health():
    return {"status": "ok"}
