"""FastAPI application exposing the plugin message channel over HTTP.

The lifespan builds a single PluginSession from Settings:
- the document tree is loaded from FIGMA_DOCUMENT_PATH when set
- FIGMA_FILE_KEY and FIGMA_TOKEN seed the session
- plugin-ready is queued immediately, so the first drain returns it

Usage:
    uvicorn comment_dashboard.api.app:app --reload
"""

import json
import traceback
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comment_dashboard.api.models import ErrorDetail, ErrorEnvelope
from comment_dashboard.api.responses import INTERNAL_ERROR, NOT_FOUND, VALIDATION_ERROR
from comment_dashboard.api.routes import messages
from comment_dashboard.config import Settings, load_settings
from comment_dashboard.document import DocumentTree
from comment_dashboard.figma_client import FigmaClient
from comment_dashboard.session import PluginSession
from comment_dashboard.utils.errors import DocumentLookupError
from comment_dashboard.utils.logging_config import get_logger, setup_logging


def load_document(path: Optional[str]) -> DocumentTree:
    """Load the document tree from a file JSON export, or start empty.

    An unreadable or malformed file is logged and yields an empty document so
    the bridge still starts (navigation then reports missing pages).
    """
    logger = get_logger(__name__)
    if not path:
        return DocumentTree()

    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
        document = DocumentTree.from_file_json(data)
    except (OSError, ValueError, DocumentLookupError) as e:
        logger.error("document_load_failed", path=path, error=str(e), error_type=type(e).__name__)
        return DocumentTree()

    logger.info("document_loaded", path=path, nodes=len(document), pages=len(document.pages))
    return document


def build_session(settings: Settings) -> PluginSession:
    client = FigmaClient(api_base=settings.api_base, timeout=settings.request_timeout)
    return PluginSession(
        load_document(settings.document_path),
        client=client,
        file_key=settings.file_key,
        token=settings.token,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the bridge application (settings default to load_settings())."""
    settings = settings or load_settings()
    setup_logging(log_dir=settings.log_dir, log_filename=settings.log_filename, level=settings.log_level)
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session = build_session(settings)
        session.start()
        app.state.session = session
        logger.info("session_attached", file_key=settings.file_key)
        try:
            yield
        finally:
            app.state.session = None
            logger.info("session_detached", file_key=settings.file_key)

    app = FastAPI(
        title="Comment Dashboard Bridge",
        description="Message channel between the comment dashboard UI and its plugin session",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(messages.router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Render pydantic validation failures (422) as ErrorEnvelope."""
        logger.warning("validation_error", path=request.url.path, errors=exc.errors())
        envelope = ErrorEnvelope(
            error=ErrorDetail(
                code=VALIDATION_ERROR,
                message=f"Request validation failed: {exc.errors()[0]['msg']}",
            )
        )
        return JSONResponse(status_code=422, content=envelope.model_dump())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Render HTTPException (including raise_api_error) as ErrorEnvelope."""
        logger.warning("http_exception", path=request.url.path, status=exc.status_code)

        if isinstance(exc.detail, dict) and "code" in exc.detail:
            code = exc.detail["code"]
            message = exc.detail["message"]
        else:
            code = {404: NOT_FOUND, 422: VALIDATION_ERROR}.get(exc.status_code, INTERNAL_ERROR)
            message = str(exc.detail) if exc.detail else "An error occurred"

        envelope = ErrorEnvelope(error=ErrorDetail(code=code, message=message))
        return JSONResponse(status_code=exc.status_code, content=envelope.model_dump())

    @app.exception_handler(404)
    async def not_found_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.warning("not_found", path=request.url.path)
        envelope = ErrorEnvelope(
            error=ErrorDetail(code=NOT_FOUND, message=f"Resource not found: {request.url.path}")
        )
        return JSONResponse(status_code=404, content=envelope.model_dump())

    @app.exception_handler(500)
    async def internal_server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "internal_server_error",
            path=request.url.path,
            error=str(exc),
            traceback=traceback.format_exc(),
        )
        envelope = ErrorEnvelope(
            error=ErrorDetail(code=INTERNAL_ERROR, message="An internal server error occurred")
        )
        return JSONResponse(status_code=500, content=envelope.model_dump())

    @app.get("/")
    async def root() -> Dict[str, str]:
        return {"status": "ok", "message": "Comment Dashboard Bridge"}

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "healthy"}

    logger.info("fastapi_app_initialized", cors_origins=settings.cors_origins)
    return app


app = create_app()
