"""
Prompt Registry Storage Module.

Provides the transactional store for prompts and their version ledgers.
"""

__all__ = [
    "PromptStore",
    "SCHEMA",
]

from prompt_registry.registry.storage import SCHEMA, PromptStore
