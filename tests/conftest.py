"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from prompt_registry.api.app import create_app
from prompt_registry.config import RegistrySettings
from prompt_registry.monitoring.metrics import MetricsCollector
from prompt_registry.registry.storage import PromptStore

# Keep test runs away from ./data/prompts.db
os.environ.setdefault("PR_DATABASE_PATH", ":memory:")
os.environ.setdefault("PR_LOG_LEVEL", "warning")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Path of a fresh registry database file."""
    return temp_dir / "prompts.db"


@pytest.fixture
def store(db_path: Path) -> Generator[PromptStore, None, None]:
    """Open a file-backed store and close it after the test."""
    prompt_store = PromptStore(db_path)
    yield prompt_store
    prompt_store.close()


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh counters, isolated from the global collector."""
    return MetricsCollector()


@pytest.fixture
def client(
    store: PromptStore, metrics: MetricsCollector
) -> Generator[TestClient, None, None]:
    """Create a test client bound to the temporary store."""
    app = create_app(settings=RegistrySettings(), store=store, metrics_collector=metrics)
    with TestClient(app) as test_client:
        yield test_client
