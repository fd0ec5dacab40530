"""Package version."""

from prompt_registry import __version__

__all__ = ["__version__"]
