"""
Pydantic request schemas for API endpoints.

Required fields only need to be present here; blank-after-trim checks
belong to the store so every caller gets the same rules.
"""

from pydantic import BaseModel, Field


class CreatePromptRequest(BaseModel):
    """Request to create a prompt and its first version."""

    slug: str | None = Field(
        None,
        description="URL-safe identifier; derived from the title when omitted",
        examples=["my-test-prompt"],
    )
    title: str = Field(..., description="Prompt title", examples=["My Test Prompt"])
    description: str | None = Field(None, description="Optional description")
    content: str = Field(..., description="Content of version 1")


class CreateVersionRequest(BaseModel):
    """Request to append a version to an existing prompt."""

    content: str = Field(..., description="Content of the new version")
