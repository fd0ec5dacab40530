"""
Slug derivation for prompt titles.

Derived slugs are not unique: "Test!" and "Test?" both become "test".
Collisions surface as ConflictError from the store.
"""

_ALLOWED = frozenset("abcdefghijklmnopqrstuvwxyz0123456789-")


def generate_slug(title: str) -> str:
    """
    Derive a URL-safe slug from a title.

    Lowercases the title, turns spaces into hyphens, then drops every
    character that is not a lowercase ASCII letter, digit or hyphen.
    Accented letters and punctuation are removed, not transliterated.

    Args:
        title: Prompt title

    Returns:
        Derived slug (may be empty if nothing survives)
    """
    lowered = title.lower().replace(" ", "-")
    return "".join(ch for ch in lowered if ch in _ALLOWED)


def is_blank(value: str | None) -> bool:
    """True when value is None or only whitespace."""
    return value is None or not value.strip()
