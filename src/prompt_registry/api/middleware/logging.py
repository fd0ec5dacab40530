"""
Request logging middleware.

Logs all incoming HTTP requests with timing information and feeds the
HTTP request/error counters.
"""

import logging
import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from prompt_registry.monitoring.metrics import MetricsCollector, get_metrics_collector

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests with timing information.

    Logs:
    - Request method and path
    - Client IP address
    - Request ID if present
    - Response status code
    - Request processing time

    Every request increments ``http_requests``; responses with status
    >= 400 and unhandled exceptions increment ``http_errors``.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        metrics: MetricsCollector | None = None,
        logger_instance: logging.Logger | None = None,
        skip_paths: set[str] | None = None,
    ) -> None:
        """
        Initialize the logging middleware.

        Args:
            app: ASGI application
            metrics: Counter sink (default: global collector)
            logger_instance: Custom logger instance
            skip_paths: Paths to skip logging for (still counted)
        """
        super().__init__(app)
        self._metrics = metrics or get_metrics_collector()
        self._logger = logger_instance or logger
        self._skip_paths = skip_paths or set()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """
        Process request and log details.

        Args:
            request: Incoming request
            call_next: Next middleware/route handler

        Returns:
            Response from downstream handlers
        """
        self._metrics.increment_http_requests()
        log_request = request.url.path not in self._skip_paths

        start_time = time.time()
        method = request.method
        path = request.url.path
        client_ip = self._get_client_ip(request)
        request_id = request.headers.get("x-request-id", "unknown")

        if log_request:
            self._logger.info(
                "Request started",
                extra={
                    "event": "request_started",
                    "method": method,
                    "path": path,
                    "client_ip": client_ip,
                    "request_id": request_id,
                },
            )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._metrics.increment_http_errors()
            self._logger.error(
                "Request failed",
                extra={
                    "event": "request_failed",
                    "method": method,
                    "path": path,
                    "client_ip": client_ip,
                    "request_id": request_id,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        if response.status_code >= 400:
            self._metrics.increment_http_errors()

        if log_request:
            self._logger.info(
                "Request completed",
                extra={
                    "event": "request_completed",
                    "method": method,
                    "path": path,
                    "client_ip": client_ip,
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )

        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"
        response.headers["X-Request-ID"] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """
        Extract client IP address from request.

        Checks forwarded headers for proxied requests.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"
