"""
FastAPI Application Setup.

Main application factory for the Prompt Registry REST API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from prompt_registry.api.middleware.cors import add_cors_middleware
from prompt_registry.api.middleware.logging import RequestLoggingMiddleware
from prompt_registry.api.routes import health, metrics, prompts
from prompt_registry.api.schemas.exceptions import (
    APIException,
    ValidationError,
    from_registry_error,
)
from prompt_registry.api.schemas.responses import ServiceInfoResponse
from prompt_registry.config import RegistrySettings
from prompt_registry.core.exceptions import PromptRegistryError
from prompt_registry.monitoring.metrics import MetricsCollector, get_metrics_collector
from prompt_registry.registry.storage import PromptStore
from prompt_registry.version import __version__

logger = logging.getLogger(__name__)


def _error_response(exc: APIException) -> JSONResponse:
    if isinstance(exc, ValidationError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "type": exc.error_type,
                    "message": exc.message,
                    "fields": exc.fields,
                }
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "type": exc.error_type,
                "message": exc.message,
                "detail": exc.detail,
            }
        },
    )


def create_app(
    settings: RegistrySettings | None = None,
    store: PromptStore | None = None,
    metrics_collector: MetricsCollector | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Runtime settings (default: read from environment)
        store: Already-open store; when omitted one is opened on startup
            and closed on shutdown
        metrics_collector: Counter sink (default: global collector)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or RegistrySettings.from_env()
    owns_store = store is None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the store on startup and release it on shutdown."""
        logger.info("Prompt Registry API starting up...")
        logger.info(f"Version: {__version__}")

        if app.state.store is None:
            app.state.store = PromptStore(
                settings.database_path, busy_timeout=settings.busy_timeout
            )

        yield

        logger.info("Prompt Registry API shutting down...")
        if owns_store and app.state.store is not None:
            app.state.store.close()
            app.state.store = None

    app = FastAPI(
        title="Prompt Registry API",
        description="Versioned prompt storage with an append-only version ledger",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.metrics = metrics_collector or get_metrics_collector()

    app.add_middleware(RequestLoggingMiddleware, metrics=app.state.metrics)
    add_cors_middleware(app, allow_origins=settings.cors_origins)

    app.include_router(prompts.router, prefix="/api/prompts", tags=["Prompts"])
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
        """Handle API exceptions with proper error responses."""
        return _error_response(exc)

    @app.exception_handler(PromptRegistryError)
    async def registry_exception_handler(
        request: Request, exc: PromptRegistryError
    ) -> JSONResponse:
        """Map store errors to 400/404/409/500."""
        api_exc = from_registry_error(exc)
        if api_exc.status_code >= 500:
            logger.error(f"Registry failure on {request.url.path}: {exc}")
        return _error_response(api_exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Render malformed bodies and parameters as 400 with field messages."""
        fields = {
            ".".join(str(part) for part in error["loc"]): error["msg"]
            for error in exc.errors()
        }
        return _error_response(ValidationError(fields=fields))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "type": "internal_error",
                    "message": "An unexpected error occurred",
                    "detail": str(exc) if logger.isEnabledFor(logging.DEBUG) else None,
                }
            },
        )

    @app.get("/", tags=["Root"], response_model=ServiceInfoResponse)
    async def root() -> ServiceInfoResponse:
        """Root endpoint with API information."""
        return ServiceInfoResponse(
            name="Prompt Registry API",
            version=__version__,
            status="operational",
            docs="/docs",
            health="/health",
            metrics="/metrics",
        )

    return app
