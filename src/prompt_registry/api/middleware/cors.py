"""
CORS (Cross-Origin Resource Sharing) middleware configuration.

The registry API is read and written from browsers, so it answers
preflight requests for GET, POST and OPTIONS with a Content-Type header.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

DEFAULT_ALLOW_METHODS: list[str] = ["GET", "POST", "OPTIONS"]

DEFAULT_ALLOW_HEADERS: list[str] = ["content-type", "x-request-id"]


def add_cors_middleware(
    app: FastAPI,
    *,
    allow_origins: list[str] | None = None,
    allow_methods: list[str] | None = None,
    allow_headers: list[str] | None = None,
    max_age: int = 600,
) -> None:
    """
    Add CORS middleware to the FastAPI application.

    Args:
        app: FastAPI application instance
        allow_origins: Allowed origins; ["*"] for any (default)
        allow_methods: List of allowed HTTP methods
        allow_headers: List of allowed headers
        max_age: Cache time for preflight requests (seconds)
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins or ["*"],
        allow_credentials=False,
        allow_methods=allow_methods or DEFAULT_ALLOW_METHODS,
        allow_headers=allow_headers or DEFAULT_ALLOW_HEADERS,
        expose_headers=["X-Request-ID", "X-Process-Time"],
        max_age=max_age,
    )
