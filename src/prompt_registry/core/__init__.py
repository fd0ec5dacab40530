"""
Prompt Registry Core Module.

Provides the data models, slug rules and error taxonomy shared by the
store, the API and the CLI.
"""

__all__ = [
    "Prompt",
    "PromptSummary",
    "PromptVersion",
    "PromptWithCurrentVersion",
    "RegistryStats",
    "generate_slug",
    # Exceptions
    "PromptRegistryError",
    "RegistryError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "InternalError",
    "ConfigurationError",
]

from prompt_registry.core.exceptions import (
    ConfigurationError,
    ConflictError,
    InternalError,
    NotFoundError,
    PromptRegistryError,
    RegistryError,
    ValidationError,
)
from prompt_registry.core.models import (
    Prompt,
    PromptSummary,
    PromptVersion,
    PromptWithCurrentVersion,
    RegistryStats,
)
from prompt_registry.core.slug import generate_slug
