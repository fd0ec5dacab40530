"""
Prompt Registry Monitoring - health checks and metrics collection.

This module provides:
- A database health check built on store statistics
- Process-wide counters with Prometheus export
"""

from prompt_registry.monitoring.health import (
    HealthCheckResult,
    HealthStatus,
    check_database,
)
from prompt_registry.monitoring.metrics import (
    MetricsCollector,
    get_metrics_collector,
)

__all__ = [
    # Health checks
    "HealthCheckResult",
    "HealthStatus",
    "check_database",
    # Metrics
    "MetricsCollector",
    "get_metrics_collector",
]
