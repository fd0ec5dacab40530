"""
Health check endpoints.

Verifies the store answers a stats query.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from prompt_registry.api.schemas.responses import HealthResponse
from prompt_registry.core.models import RegistryStats
from prompt_registry.monitoring.health import HealthCheckResult, HealthStatus, check_database
from prompt_registry.version import __version__

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse | JSONResponse:
    """
    Report service health.

    Returns 200 with the current stats when the database answers,
    500 with ``database: error`` otherwise.
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        result = HealthCheckResult(
            name="database", status=HealthStatus.UNHEALTHY, message="Prompt store is not open"
        )
    else:
        result = check_database(store)
    timestamp = datetime.now(timezone.utc).isoformat()

    if not result.healthy:
        body = HealthResponse(
            status="unhealthy",
            database="error",
            version=__version__,
            timestamp=timestamp,
            error=result.message,
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    return HealthResponse(
        status="healthy",
        database="connected",
        version=__version__,
        timestamp=timestamp,
        stats=RegistryStats(**result.details),
    )


@router.get("/live")
def liveness() -> dict[str, str]:
    """
    Liveness check for container orchestration.

    Always succeeds while the process is serving requests.
    """
    return {
        "alive": "true",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
