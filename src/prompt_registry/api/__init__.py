"""
Prompt Registry API Module.

REST API over the prompt store.
"""

from prompt_registry.api.app import create_app

__all__ = ["create_app"]
