"""
Prompt Registry - versioned storage for named prompt texts.

Each prompt lives under a unique slug and accumulates an append-only
ledger of immutable versions.
"""

__version__ = "0.1.0"

# API module is available but not exported by default
# Import explicitly: from prompt_registry.api import create_app

__all__ = ["__version__"]
