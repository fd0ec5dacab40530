"""
API route handlers.

This package contains all route definitions for the Prompt Registry API.
"""

from prompt_registry.api.routes import health, metrics, prompts

__all__ = [
    "health",
    "metrics",
    "prompts",
]
