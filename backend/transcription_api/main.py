"""ASGI entry-point for the FastAPI application.

This module
1. instantiates the :class:`fastapi.FastAPI` application;
2. wires the database handle, store, downloader and pipeline onto
   ``app.state``;
3. registers global exception handlers that render the
   ``{"success": ..., "data": ..., "error": ...}`` envelope; and
4. opens the database on start-up and disposes it on shutdown.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from transcription_api import __version__
from transcription_api.api import api_router
from transcription_api.config import settings
from transcription_api.db.database import Database
from transcription_api.errors import AppBaseException
from transcription_api.logging_config import setup_logging
from transcription_api.services.downloader import MockDownloader
from transcription_api.services.pipeline import TranscriptionPipeline
from transcription_api.services.store import TranscriptionStore


# ---------------------------------------------------------------------------
# Logging must be configured as soon as possible so that any errors during
# import/start-up are captured.
# ---------------------------------------------------------------------------
setup_logging()
logger = logging.getLogger(__name__)

SERVICE_NAME = "Audio Transcription API"


def _error_body(message: str) -> dict:
    return {"success": False, "error": message}


def create_app(
    database: Optional[Database] = None,
    downloader: Optional[MockDownloader] = None,
) -> FastAPI:
    """Wire and return the FastAPI application instance."""

    app = FastAPI(
        title=SERVICE_NAME,
        version=__version__,
        docs_url="/docs",
    )

    database = database or Database(settings.DATABASE_URL, echo=settings.DB_ECHO)
    store = TranscriptionStore(database)
    app.state.database = database
    app.state.store = store
    app.state.pipeline = TranscriptionPipeline(
        downloader=downloader or MockDownloader.from_settings(),
        store=store,
    )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @app.on_event("startup")
    async def _open_database() -> None:
        logger.info("Connecting to database …")
        database.connect()
        logger.info("%s ready", SERVICE_NAME)

    @app.on_event("shutdown")
    async def _close_database() -> None:
        logger.info("Shutting down, closing database connection …")
        database.dispose()

    # ------------------------------------------------------------------
    # Exception handlers
    # ------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.error("Request validation error: %s", exc.errors())
        return JSONResponse(status_code=400, content=_error_body("Invalid request body"))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(
        _request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        logger.error("HTTP exception %s: %s", exc.status_code, exc.detail)
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=_error_body(message))

    @app.exception_handler(AppBaseException)
    async def _app_error_handler(
        _request: Request,
        exc: AppBaseException,
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Application exception: %s", exc.detail, exc_info=exc)
        else:
            logger.warning("Request rejected (%s): %s", exc.status_code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))

    @app.exception_handler(Exception)
    async def _generic_error_handler(
        _request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content=_error_body("Internal server error"))

    # ------------------------------------------------------------------
    # Middleware
    # ------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/health")
    async def _health() -> dict[str, str]:
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
        }

    return app


# Instantiate at import time so `uvicorn transcription_api.main:app` works.
app: FastAPI = create_app()


def run() -> None:
    """Console entry-point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run("transcription_api.main:app", host=settings.HOST, port=settings.PORT)
