"""
Health checks for Prompt Registry.

The database check calls ``get_stats`` on the store, which proves the
backing store is reachable and the schema is readable.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from prompt_registry.core.exceptions import PromptRegistryError
from prompt_registry.registry.storage import PromptStore

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health status levels."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    name: str
    status: HealthStatus
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    duration_ms: float | None = None

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
            "duration_ms": self.duration_ms,
        }


def check_database(store: PromptStore) -> HealthCheckResult:
    """
    Check that the registry database answers queries.

    Args:
        store: Store to probe

    Returns:
        HealthCheckResult with the current stats on success
    """
    start_time = time.time()

    try:
        stats = store.get_stats()
    except PromptRegistryError as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(f"Database health check failed: {e}")
        return HealthCheckResult(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message=e.message,
            details=e.details,
            duration_ms=round(duration_ms, 2),
        )

    duration_ms = (time.time() - start_time) * 1000
    return HealthCheckResult(
        name="database",
        status=HealthStatus.HEALTHY,
        message="connected",
        details=stats.to_dict(),
        duration_ms=round(duration_ms, 2),
    )
