"""
Prompt Registry Exception Hierarchy.

Defines the typed failures raised by the registry store and the
configuration layer. Callers map these onto their own transport.
"""

from typing import Any


class PromptRegistryError(Exception):
    """
    Base exception for all Prompt Registry errors.

    All custom exceptions inherit from this class, allowing
    generic catch blocks and consistent error handling.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize a PromptRegistryError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class RegistryError(PromptRegistryError):
    """
    Errors in registry store operations.

    Carries the prompt slug, version number and store operation
    involved so that log lines and API responses can name them.
    """

    def __init__(
        self,
        message: str,
        *,
        slug: str | None = None,
        version_number: int | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a RegistryError.

        Args:
            message: Human-readable error message
            slug: Slug of the prompt involved
            version_number: Version number involved
            operation: Store operation being performed
            details: Optional structured data for debugging
        """
        details = details or {}
        if slug is not None:
            details["slug"] = slug
        if version_number is not None:
            details["version_number"] = version_number
        if operation:
            details["operation"] = operation

        super().__init__(message, details=details)
        self.slug = slug
        self.version_number = version_number
        self.operation = operation


class ValidationError(RegistryError):
    """Raised when a required field is missing or blank."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        operation: str | None = None,
    ):
        details = {"field": field} if field else None
        super().__init__(message, operation=operation, details=details)
        self.field = field


class ConflictError(RegistryError):
    """Raised when a slug is already taken by another prompt."""

    def __init__(
        self,
        message: str = "Prompt already exists",
        *,
        slug: str | None = None,
        operation: str | None = "create_prompt",
    ):
        super().__init__(message, slug=slug, operation=operation)


class NotFoundError(RegistryError):
    """Raised when a slug, or a version of a known slug, does not exist."""

    def __init__(
        self,
        message: str = "Prompt not found",
        *,
        slug: str | None = None,
        version_number: int | None = None,
        operation: str | None = None,
    ):
        super().__init__(
            message,
            slug=slug,
            version_number=version_number,
            operation=operation,
        )


class InternalError(RegistryError):
    """
    Backing-store failure unrelated to caller input.

    Raised for connection loss, commit failures, schema mismatches
    and ledger inconsistencies. The originating exception is chained
    as ``__cause__``.
    """


class ConfigurationError(PromptRegistryError):
    """
    Errors in configuration loading or validation.

    Raised when an environment variable holds a value that
    cannot be parsed or is outside the accepted set.
    """

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        value: str | None = None,
    ):
        details: dict[str, Any] = {}
        if env_var:
            details["env_var"] = env_var
        if value is not None:
            details["value"] = value

        super().__init__(message, details=details)
        self.env_var = env_var
        self.value = value


def format_exception(error: Exception) -> str:
    """
    Format an exception for user-friendly display.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, PromptRegistryError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"
