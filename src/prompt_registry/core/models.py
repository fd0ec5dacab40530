"""
Core data models for Prompt Registry.

A Prompt is the logical container addressed by its slug; each Prompt owns
an append-only ledger of PromptVersion entries numbered densely from 1.
Timestamps are UTC ISO-8601 strings.
"""

from typing import Any

from pydantic import BaseModel, Field


class Prompt(BaseModel):
    """Logical prompt container."""

    id: int
    slug: str
    title: str
    description: str | None = None
    current_version: int = Field(default=0, ge=0)
    created_at: str
    updated_at: str


class PromptVersion(BaseModel):
    """Immutable ledger entry belonging to one prompt."""

    model_config = {"frozen": True}

    id: int
    prompt_id: int
    version_number: int = Field(ge=1)
    content: str
    created_at: str


class PromptSummary(BaseModel):
    """A prompt as shown in list views, without version content."""

    slug: str
    title: str
    description: str | None = None
    current_version: int
    created_at: str
    updated_at: str


class PromptWithCurrentVersion(BaseModel):
    """A prompt merged with the version its current_version points at."""

    id: int
    slug: str
    title: str
    description: str | None = None
    created_at: str
    updated_at: str
    current_version: PromptVersion

    @classmethod
    def from_parts(cls, prompt: Prompt, version: PromptVersion) -> "PromptWithCurrentVersion":
        """Merge a prompt row with its current version row."""
        return cls(
            id=prompt.id,
            slug=prompt.slug,
            title=prompt.title,
            description=prompt.description,
            created_at=prompt.created_at,
            updated_at=prompt.updated_at,
            current_version=version,
        )

    @property
    def version_number(self) -> int:
        return self.current_version.version_number

    @property
    def content(self) -> str:
        return self.current_version.content


class RegistryStats(BaseModel):
    """Aggregate counts across both tables."""

    total_prompts: int = 0
    total_prompt_versions: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()
