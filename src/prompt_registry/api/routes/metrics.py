"""
Metrics endpoints.

Provides the registry counters in Prometheus and JSON formats.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from prompt_registry.api.dependencies import get_metrics
from prompt_registry.monitoring.metrics import MetricsCollector

router = APIRouter()

PROMETHEUS_MEDIA_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@router.get("", response_class=PlainTextResponse)
def get_prometheus_metrics(
    metrics: MetricsCollector = Depends(get_metrics),
) -> PlainTextResponse:
    """
    Get counters in Prometheus text format.

    Metrics include:
    - prompts_created_total
    - prompt_versions_created_total
    - http_requests_total
    - http_errors_total
    """
    return PlainTextResponse(content=metrics.to_prometheus(), media_type=PROMETHEUS_MEDIA_TYPE)


@router.get("/json")
def get_metrics_json(metrics: MetricsCollector = Depends(get_metrics)) -> dict[str, Any]:
    """Get counters as JSON."""
    return metrics.snapshot()
