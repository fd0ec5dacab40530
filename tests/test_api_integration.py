"""API integration tests for the Prompt Registry FastAPI application.

These tests use FastAPI TestClient against a temporary SQLite store.
"""

from typing import Any

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from prompt_registry.api.app import create_app
from prompt_registry.config import RegistrySettings
from prompt_registry.monitoring.metrics import MetricsCollector
from prompt_registry.registry.storage import PromptStore


def _create(client: TestClient, **body: Any) -> Any:
    payload = {"title": "My Test Prompt", "content": "Hello {name}"}
    payload.update(body)
    return client.post("/api/prompts", json=payload)


# =============================================================================
# Root and documentation
# =============================================================================


class TestRootEndpoint:
    """Tests for the root endpoint."""

    def test_root_returns_service_info(self, client: TestClient) -> None:
        """Root endpoint names the service and its links."""
        response = client.get("/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "Prompt Registry API"
        assert data["status"] == "operational"
        assert data["health"] == "/health"

    def test_openapi_schema_available(self, client: TestClient) -> None:
        """OpenAPI schema lists the prompt routes."""
        response = client.get("/openapi.json")

        assert response.status_code == status.HTTP_200_OK
        assert "/api/prompts/{slug}/versions" in response.json()["paths"]


# =============================================================================
# Prompts
# =============================================================================


class TestCreatePrompt:
    """Tests for POST /api/prompts."""

    def test_create_returns_201_with_version_one(self, client: TestClient) -> None:
        """Creating a prompt returns it merged with version 1."""
        response = _create(client)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["slug"] == "my-test-prompt"
        assert data["current_version"]["version_number"] == 1
        assert data["current_version"]["content"] == "Hello {name}"
        assert data["description"] is None

    def test_explicit_slug_and_description(self, client: TestClient) -> None:
        """Explicit slug and description are stored."""
        response = _create(client, slug="custom", description="about")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["slug"] == "custom"
        assert response.json()["description"] == "about"

    def test_duplicate_slug_returns_409(self, client: TestClient) -> None:
        """Second create with the same slug conflicts."""
        _create(client, title="Test Prompt 1", slug="duplicate-slug")
        response = _create(client, title="Test Prompt 2", slug="duplicate-slug")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["type"] == "conflict"

    @pytest.mark.parametrize(
        "body",
        [
            {"title": "   ", "content": "text"},
            {"title": "Title", "content": ""},
            {"title": "!!!", "content": "text"},
        ],
    )
    def test_blank_fields_return_400(self, client: TestClient, body: dict[str, str]) -> None:
        """Blank title or content fails with 400."""
        response = client.post("/api/prompts", json=body)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["type"] == "validation_error"

    def test_missing_field_returns_400(self, client: TestClient) -> None:
        """A body without content fails request validation with 400."""
        response = client.post("/api/prompts", json={"title": "No content"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        fields = response.json()["error"]["fields"]
        assert any(key.endswith("content") for key in fields)

    def test_unknown_fields_are_ignored(self, client: TestClient) -> None:
        """Extra JSON fields do not fail the request."""
        response = _create(client, tags=["greeting"])

        assert response.status_code == status.HTTP_201_CREATED
        assert "tags" not in response.json()

    def test_malformed_json_returns_400(self, client: TestClient) -> None:
        """Unparseable bodies fail with 400."""
        response = client.post(
            "/api/prompts",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestGetPrompt:
    """Tests for GET /api/prompts/{slug}."""

    def test_get_returns_current_version(self, client: TestClient) -> None:
        """The latest version is embedded."""
        _create(client)
        client.post("/api/prompts/my-test-prompt/versions", json={"content": "v2"})

        response = client.get("/api/prompts/my-test-prompt")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["current_version"]["version_number"] == 2
        assert response.json()["current_version"]["content"] == "v2"

    def test_unknown_slug_returns_404(self, client: TestClient) -> None:
        """Unknown slugs return 404."""
        response = client.get("/api/prompts/nonexistent")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["type"] == "not_found"


class TestListPrompts:
    """Tests for GET /api/prompts."""

    def test_empty_list(self, client: TestClient) -> None:
        """An empty registry lists nothing."""
        response = client.get("/api/prompts")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_pagination(self, client: TestClient) -> None:
        """limit/offset page from newest to oldest."""
        for i in range(1, 6):
            _create(client, title=f"Prompt {i}")

        first = client.get("/api/prompts", params={"limit": 2, "offset": 0}).json()
        second = client.get("/api/prompts", params={"limit": 2, "offset": 2}).json()

        assert [p["slug"] for p in first] == ["prompt-5", "prompt-4"]
        assert [p["slug"] for p in second] == ["prompt-3", "prompt-2"]

    @pytest.mark.parametrize(
        "params", [{"limit": 0}, {"limit": 1001}, {"offset": -1}, {"offset": 2**70}]
    )
    def test_out_of_range_parameters_return_400(
        self, client: TestClient, params: dict[str, int]
    ) -> None:
        """Query parameters are bounds checked."""
        response = client.get("/api/prompts", params=params)
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestVersions:
    """Tests for the version endpoints."""

    def test_create_version_returns_201(self, client: TestClient) -> None:
        """Appending returns the prompt at the new version."""
        _create(client)

        response = client.post("/api/prompts/my-test-prompt/versions", json={"content": "v2"})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["current_version"]["version_number"] == 2

    def test_create_version_unknown_slug_returns_404(self, client: TestClient) -> None:
        """Appending to an unknown prompt returns 404."""
        response = client.post("/api/prompts/missing/versions", json={"content": "v2"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_create_version_blank_content_returns_400(self, client: TestClient) -> None:
        """Blank content returns 400."""
        _create(client)
        response = client.post("/api/prompts/my-test-prompt/versions", json={"content": "  "})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["fields"] == {"content": "content cannot be empty"}

    def test_list_versions_ascending(self, client: TestClient) -> None:
        """Versions are listed oldest first."""
        _create(client)
        for content in ("v2", "v3"):
            client.post("/api/prompts/my-test-prompt/versions", json={"content": content})

        response = client.get("/api/prompts/my-test-prompt/versions")

        assert response.status_code == status.HTTP_200_OK
        assert [v["version_number"] for v in response.json()] == [1, 2, 3]

    def test_list_versions_unknown_slug_returns_404(self, client: TestClient) -> None:
        """Listing versions of an unknown prompt returns 404."""
        response = client.get("/api/prompts/missing/versions")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_get_specific_version(self, client: TestClient) -> None:
        """Earlier versions keep their content."""
        _create(client)
        client.post("/api/prompts/my-test-prompt/versions", json={"content": "v2"})

        response = client.get("/api/prompts/my-test-prompt/versions/1")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["content"] == "Hello {name}"

    def test_get_missing_version_returns_404(self, client: TestClient) -> None:
        """Versions beyond the current one return 404."""
        _create(client)
        response = client.get("/api/prompts/my-test-prompt/versions/7")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_oversized_version_returns_404(self, client: TestClient) -> None:
        """A version number beyond the 64-bit range is not found."""
        _create(client)
        response = client.get(f"/api/prompts/my-test-prompt/versions/{2**70}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_non_integer_version_returns_400(self, client: TestClient) -> None:
        """A non-numeric version segment is a validation failure."""
        _create(client)
        response = client.get("/api/prompts/my-test-prompt/versions/latest")
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Health and metrics
# =============================================================================


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_reports_stats(self, client: TestClient) -> None:
        """Healthy response includes the current counts."""
        _create(client)

        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["stats"] == {"total_prompts": 1, "total_prompt_versions": 1}

    def test_health_fails_when_store_closed(
        self, store: PromptStore, metrics: MetricsCollector
    ) -> None:
        """A closed store makes the health check return 500."""
        app = create_app(settings=RegistrySettings(), store=store, metrics_collector=metrics)
        with TestClient(app) as test_client:
            store.close()
            response = test_client.get("/health")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "error"

    def test_liveness(self, client: TestClient) -> None:
        """Liveness always answers."""
        response = client.get("/health/live")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["alive"] == "true"

    def test_closed_store_makes_prompt_routes_unavailable(
        self, store: PromptStore, metrics: MetricsCollector
    ) -> None:
        """Prompt routes return 503 once the store is closed."""
        app = create_app(settings=RegistrySettings(), store=store, metrics_collector=metrics)
        with TestClient(app) as test_client:
            store.close()
            response = test_client.get("/api/prompts")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


class TestMetricsEndpoints:
    """Tests for metrics endpoints."""

    def test_counters_follow_requests(self, client: TestClient, metrics: MetricsCollector) -> None:
        """Creates, versions and errors are counted."""
        _create(client)
        client.post("/api/prompts/my-test-prompt/versions", json={"content": "v2"})
        client.get("/api/prompts/missing")

        snapshot = metrics.snapshot()
        assert snapshot["prompts_created"] == 1
        assert snapshot["prompt_versions_created"] == 2
        assert snapshot["http_requests"] == 3
        assert snapshot["http_errors"] == 1

    def test_failed_create_is_not_counted(
        self, client: TestClient, metrics: MetricsCollector
    ) -> None:
        """Conflicts do not bump the creation counters."""
        _create(client, slug="dup")
        _create(client, slug="dup")

        assert metrics.snapshot()["prompts_created"] == 1

    def test_prometheus_format(self, client: TestClient) -> None:
        """Prometheus export carries TYPE lines and counter values."""
        _create(client)

        response = client.get("/metrics")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/plain")
        assert "# TYPE prompts_created_total counter" in response.text
        assert "prompts_created_total 1" in response.text

    def test_json_metrics(self, client: TestClient) -> None:
        """JSON export returns the counter snapshot."""
        response = client.get("/metrics/json")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["prompts_created"] == 0


class TestMiddleware:
    """Tests for request logging middleware headers."""

    def test_process_time_header(self, client: TestClient) -> None:
        """Responses carry processing time."""
        response = client.get("/health/live")
        assert "X-Process-Time" in response.headers

    def test_request_id_echoed(self, client: TestClient) -> None:
        """A supplied request id is echoed back."""
        response = client.get("/health/live", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"
