"""
FastAPI dependencies shared by the route modules.
"""

from fastapi import Request

from prompt_registry.api.schemas.exceptions import APIException
from prompt_registry.monitoring.metrics import MetricsCollector, get_metrics_collector
from prompt_registry.registry.storage import PromptStore


class StoreUnavailableError(APIException):
    """Raised when a request arrives before the store is open."""

    status_code = 503
    error_type = "service_unavailable"
    message = "Prompt store is not available"


def get_store(request: Request) -> PromptStore:
    """Return the store opened for this application."""
    store: PromptStore | None = getattr(request.app.state, "store", None)
    if store is None or store.closed:
        raise StoreUnavailableError()
    return store


def get_metrics(request: Request) -> MetricsCollector:
    """Return the application's metrics collector."""
    return getattr(request.app.state, "metrics", None) or get_metrics_collector()
