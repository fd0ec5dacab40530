"""
Prompt endpoints.

Thin HTTP surface over the registry store. Store errors propagate to the
application's exception handlers, which map them to status codes.
"""

from fastapi import APIRouter, Depends, Path, Query, status

from prompt_registry.api.dependencies import get_metrics, get_store
from prompt_registry.api.schemas.requests import CreatePromptRequest, CreateVersionRequest
from prompt_registry.core.models import PromptSummary, PromptVersion, PromptWithCurrentVersion
from prompt_registry.monitoring.metrics import MetricsCollector
from prompt_registry.registry.storage import SQLITE_MAX_INTEGER, PromptStore

router = APIRouter()


@router.post(
    "",
    response_model=PromptWithCurrentVersion,
    status_code=status.HTTP_201_CREATED,
)
def create_prompt(
    request: CreatePromptRequest,
    store: PromptStore = Depends(get_store),
    metrics: MetricsCollector = Depends(get_metrics),
) -> PromptWithCurrentVersion:
    """
    Create a prompt with its first version.

    Raises:
        ValidationError: Blank title or content (400)
        ConflictError: Slug already taken (409)
    """
    result = store.create_prompt(
        title=request.title,
        content=request.content,
        slug=request.slug,
        description=request.description,
    )
    metrics.increment_prompts_created()
    metrics.increment_prompt_versions_created()
    return result


@router.get("", response_model=list[PromptSummary])
def list_prompts(
    limit: int = Query(100, ge=1, le=1000, description="Maximum results"),
    offset: int = Query(0, ge=0, le=SQLITE_MAX_INTEGER, description="Results to skip"),
    store: PromptStore = Depends(get_store),
) -> list[PromptSummary]:
    """List prompts, most recently created first."""
    return store.list_prompts(limit=limit, offset=offset)


@router.get("/{slug}", response_model=PromptWithCurrentVersion)
def get_prompt(slug: str, store: PromptStore = Depends(get_store)) -> PromptWithCurrentVersion:
    """Get a prompt with its current version."""
    return store.get_prompt(slug)


@router.get("/{slug}/versions", response_model=list[PromptVersion])
def list_versions(slug: str, store: PromptStore = Depends(get_store)) -> list[PromptVersion]:
    """List all versions of a prompt, oldest first."""
    return store.list_versions(slug)


@router.post(
    "/{slug}/versions",
    response_model=PromptWithCurrentVersion,
    status_code=status.HTTP_201_CREATED,
)
def create_version(
    slug: str,
    request: CreateVersionRequest,
    store: PromptStore = Depends(get_store),
    metrics: MetricsCollector = Depends(get_metrics),
) -> PromptWithCurrentVersion:
    """
    Append a new version to a prompt.

    Raises:
        ValidationError: Blank content (400)
        NotFoundError: Unknown slug (404)
    """
    result = store.create_version(slug, request.content)
    metrics.increment_prompt_versions_created()
    return result


@router.get("/{slug}/versions/{version}", response_model=PromptVersion)
def get_version(
    slug: str,
    version: int = Path(..., description="Version number"),
    store: PromptStore = Depends(get_store),
) -> PromptVersion:
    """Get one specific version of a prompt."""
    return store.get_version(slug, version)
