"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from plantnamer import __version__
from plantnamer.api.routes import api_router
from plantnamer.config import Settings, get_settings
from plantnamer.middleware.logging import LoggingMiddleware, configure_logging
from plantnamer.middleware.request_id import RequestIdMiddleware
from plantnamer.rate_limit import ClientRateLimiter
from plantnamer.utils.errors import (
    DEFAULT_USER_MESSAGE,
    ErrorCode,
    ErrorResponse,
    PlantNamerError,
    UpstreamFailure,
    log_error,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup and report the effective settings."""
    settings: Settings = app.state.settings

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
    )

    logger.info(
        "Starting plantnamer",
        extra={
            "version": __version__,
            "host": settings.server.host,
            "port": settings.server.port,
            "log_level": settings.logging.level,
        },
    )

    # The credential is checked per request; a missing key must not stop boot
    if not settings.has_api_key:
        logger.warning("OPENAI_API_KEY is not set; /api/name will answer 500 until it is")

    yield

    logger.info("Shutting down plantnamer")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="plantnamer",
        description="Punny houseplant names from a short description, powered by OpenAI",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.rate_limiter = ClientRateLimiter(settings.rate_limit)

    # Last added runs first: CORS, then request ID, then access logging.
    # Unhandled errors are rendered inside the request-ID layer so the 500
    # still carries X-Request-ID.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware, error_handler=generic_error_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.server.cors.allowed_methods,
        allow_headers=settings.server.cors.allowed_headers,
    )

    app.add_exception_handler(PlantNamerError, plantnamer_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    app.include_router(api_router)

    return app


async def plantnamer_error_handler(request: Request, exc: PlantNamerError) -> JSONResponse:
    """Render a PlantNamerError as ``{"error": message}`` with its status."""
    request_id = getattr(request.state, "request_id", None)

    if isinstance(exc, UpstreamFailure):
        log_error(
            exc.original_error,
            code=exc.upstream_code,
            request_id=request_id,
            path=request.url.path,
        )
    elif exc.status_code >= 500:
        log_error(exc, code=exc.code, request_id=request_id, path=request.url.path)
    else:
        logger.info(
            f"Rejected request: {exc.code.value}",
            extra={"request_id": request_id, "error_code": exc.code.value},
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors without leaking detail."""
    request_id = getattr(request.state, "request_id", None)

    log_error(
        exc,
        code=ErrorCode.INTERNAL_ERROR,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=DEFAULT_USER_MESSAGE).model_dump(),
    )


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "plantnamer.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
    )


# Create the default app instance
app = create_app()
