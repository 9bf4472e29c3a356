"""
FastAPI application entry point for the progress tracker.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tracker.config import get_settings
from tracker.errors import TrackerError
from tracker.routes import router
from tracker.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(message=message).model_dump()
    )


async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    return _error_response(400, "Malformed request body")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Progress Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TrackerError, tracker_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    if settings.static_dir:
        # Mounted last so API routes take precedence.
        app.mount(
            "/", StaticFiles(directory=settings.static_dir, html=True), name="static"
        )
    return app


app = create_app()
