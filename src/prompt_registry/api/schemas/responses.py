"""
Pydantic response schemas for API endpoints.

Prompt payloads reuse the core models directly; the schemas here cover
the service endpoints.
"""

from pydantic import BaseModel, Field

from prompt_registry.core.models import RegistryStats


class HealthResponse(BaseModel):
    """Response from the health endpoint."""

    status: str = Field(..., description="healthy or unhealthy")
    database: str = Field(..., description="connected or error")
    version: str
    timestamp: str
    stats: RegistryStats | None = None
    error: str | None = None


class ServiceInfoResponse(BaseModel):
    """Response from the root endpoint."""

    name: str
    version: str
    status: str
    docs: str
    health: str
    metrics: str
