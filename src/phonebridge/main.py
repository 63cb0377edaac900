"""
FastAPI application entry point.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from phonebridge import __version__
from phonebridge.config import get_settings
from phonebridge.shared.exceptions import AppError
from phonebridge.shared.logging import get_logger, setup_logging
from phonebridge.telephony.factory import get_telephony_provider
from phonebridge.telephony.webhooks.router import get_notification_dispatcher
from phonebridge.telephony.webhooks.router import router as webhooks_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    settings = get_settings()

    logger.info(
        "Application starting",
        extra={"env": settings.app_env, "signature_check": settings.is_production},
    )

    # Resolve provider and dispatcher once so misconfiguration shows up at boot
    get_telephony_provider()
    dispatcher = get_notification_dispatcher()

    yield

    logger.info("Shutting down application")
    await dispatcher.aclose()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="phonebridge",
        description="Twilio call routing with voicemail fallback and push notifications",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    @app.exception_handler(AppError)
    async def _app_error(_: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "code": exc.code},
        )

    # Request validation (FastAPI/Pydantic) -> consistent 422 payload
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append(
                {
                    "field": field,
                    "message": error["msg"],
                    "type": error["type"],
                }
            )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "Request validation failed",
                "code": "VALIDATION_ERROR",
                "errors": errors,
            },
        )

    app.include_router(webhooks_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
        }

    return app


app = create_app()
