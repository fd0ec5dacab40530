"""
API request/response schemas and exception types.
"""

from prompt_registry.api.schemas.exceptions import (
    APIException,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
    from_registry_error,
)
from prompt_registry.api.schemas.requests import CreatePromptRequest, CreateVersionRequest
from prompt_registry.api.schemas.responses import HealthResponse, ServiceInfoResponse

__all__ = [
    "APIException",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "ValidationError",
    "from_registry_error",
    "CreatePromptRequest",
    "CreateVersionRequest",
    "HealthResponse",
    "ServiceInfoResponse",
]
