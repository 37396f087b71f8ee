from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import Settings, configure_logging, get_settings
from ..summarization import (
    CompletionServiceError,
    InvalidInputError,
    SummaryService,
    create_summary_service,
)
from .routes import router as api_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[SummaryService] = None,
) -> FastAPI:
    """Build the HTTP application.

    Args:
        settings: Settings instance, uses cached settings if not provided
        service: Pre-built summary service; created from settings at startup
            when omitted
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan_context(app: FastAPI):
        # Startup
        configure_logging(settings)
        if app.state.summary_service is None:
            try:
                app.state.summary_service = create_summary_service(settings)
                logger.info("Summary service initialized")
            except ValueError as e:
                logger.error(
                    "Failed to initialize summary service; summary endpoints unavailable",
                    extra={"error": str(e)},
                )
        yield
        # Shutdown
        logger.info("Shutting down")

    app = FastAPI(title=settings.service_name, lifespan=lifespan_context)
    app.state.settings = settings
    app.state.summary_service = service

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        logger.info(
            "Rejected request",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(CompletionServiceError)
    async def completion_error_handler(request: Request, exc: CompletionServiceError):
        logger.error(
            "Completion service failed",
            extra={
                "path": request.url.path,
                "provider": exc.provider,
                "status_code": exc.status_code,
                "error": str(exc),
            },
        )
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "provider": exc.provider},
        )

    app.include_router(api_router)
    return app


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
