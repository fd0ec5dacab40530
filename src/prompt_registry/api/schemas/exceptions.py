"""
Exception classes for API error handling.
"""

from prompt_registry.core import exceptions as core


class APIException(Exception):
    """
    Base exception for API errors.

    All API exceptions should inherit from this class to ensure
    consistent error response formatting.
    """

    status_code: int = 500
    error_type: str = "api_error"
    message: str = "An error occurred"
    detail: str | None = None

    def __init__(
        self,
        message: str | None = None,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message or self.message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(APIException):
    """Exception raised when request validation fails."""

    status_code = 400
    error_type = "validation_error"
    message = "Request validation failed"

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = fields
        super().__init__(message=f"Validation failed for {len(fields)} field(s)")


class NotFoundError(APIException):
    """Exception raised when a requested resource is not found."""

    status_code = 404
    error_type = "not_found"
    message = "Resource not found"


class ConflictError(APIException):
    """Exception raised when a request conflicts with existing state."""

    status_code = 409
    error_type = "conflict"
    message = "Resource already exists or state conflict"


class InternalError(APIException):
    """Exception raised for internal server errors."""

    status_code = 500
    error_type = "internal_error"
    message = "Internal server error"


def from_registry_error(error: core.PromptRegistryError) -> APIException:
    """
    Map a registry error onto the API exception for its HTTP status.

    ValidationError -> 400, ConflictError -> 409, NotFoundError -> 404,
    anything else -> 500.
    """
    if isinstance(error, core.ValidationError):
        return ValidationError(fields={error.field or "request": error.message})
    if isinstance(error, core.ConflictError):
        return ConflictError(message=error.message)
    if isinstance(error, core.NotFoundError):
        return NotFoundError(message=error.message)
    return InternalError(detail=error.message)
