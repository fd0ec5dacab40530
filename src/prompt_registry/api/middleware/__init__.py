"""
API middleware components.

Provides request logging with counters and CORS configuration.
"""

from prompt_registry.api.middleware.cors import add_cors_middleware
from prompt_registry.api.middleware.logging import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "add_cors_middleware",
]
