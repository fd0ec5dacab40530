"""
Metrics collection for Prompt Registry.

Provides:
- Process-wide counters for created prompts and versions
- HTTP request and error counters
- Prometheus-style export

Counters are independent of store transactions; they are bumped by the
API layer after an operation has returned.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class MetricType(str, Enum):
    """Types of metrics."""

    COUNTER = "counter"


@dataclass
class RegistryCounters:
    """Raw counter values."""

    prompts_created: int = 0
    prompt_versions_created: int = 0
    http_requests: int = 0
    http_errors: int = 0
    start_time: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "prompts_created": self.prompts_created,
            "prompt_versions_created": self.prompt_versions_created,
            "http_requests": self.http_requests,
            "http_errors": self.http_errors,
            "start_time": self.start_time,
        }


# name, help text, counter attribute
_PROMETHEUS_COUNTERS: tuple[tuple[str, str, str], ...] = (
    ("prompts_created_total", "Total number of prompts created", "prompts_created"),
    (
        "prompt_versions_created_total",
        "Total number of prompt versions created",
        "prompt_versions_created",
    ),
    ("http_requests_total", "Total number of HTTP requests", "http_requests"),
    ("http_errors_total", "Total number of HTTP errors", "http_errors"),
)


class MetricsCollector:
    """Thread-safe counters for the registry service."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters = RegistryCounters()

    def increment_prompts_created(self, amount: int = 1) -> None:
        with self._lock:
            self._counters.prompts_created += amount

    def increment_prompt_versions_created(self, amount: int = 1) -> None:
        with self._lock:
            self._counters.prompt_versions_created += amount

    def increment_http_requests(self, amount: int = 1) -> None:
        with self._lock:
            self._counters.http_requests += amount

    def increment_http_errors(self, amount: int = 1) -> None:
        with self._lock:
            self._counters.http_errors += amount

    def snapshot(self) -> dict[str, Any]:
        """Get all counters as a single dictionary."""
        with self._lock:
            return self._counters.to_dict()

    def to_prometheus(self) -> str:
        """
        Export metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string
        """
        with self._lock:
            blocks = [
                format_prometheus_metric(
                    name,
                    getattr(self._counters, attr),
                    MetricType.COUNTER,
                    help_text,
                )
                for name, help_text, attr in _PROMETHEUS_COUNTERS
            ]
        return "\n\n".join(blocks) + "\n"

    def reset(self) -> None:
        """Reset all counters."""
        with self._lock:
            self._counters = RegistryCounters()


# Global metrics collector instance
_global_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """
    Get the global metrics collector instance.

    Returns:
        MetricsCollector instance
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = MetricsCollector()

    return _global_collector


def format_prometheus_metric(
    name: str,
    value: float | int,
    metric_type: MetricType = MetricType.COUNTER,
    help_text: str = "",
) -> str:
    """
    Format a single metric in Prometheus format.

    Args:
        name: Metric name
        value: Metric value
        metric_type: Type of metric
        help_text: Help text for the metric

    Returns:
        Prometheus-formatted metric string
    """
    lines = []

    if help_text:
        lines.append(f"# HELP {name} {help_text}")
    lines.append(f"# TYPE {name} {metric_type.value}")
    lines.append(f"{name} {value}")

    return "\n".join(lines)
