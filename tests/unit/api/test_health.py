"""Unit tests for health check and metrics endpoints."""

from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from attune import __version__
from attune.api.dependencies import get_reconciliation_store
from attune.reconciliation.exceptions import StoreConnectionError


class TestHealth:
    """Tests for GET /health."""

    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert data["components"][0]["name"] == "reconciliation_store"

    def test_unhealthy_store(self, app: FastAPI) -> None:
        store = MagicMock()
        store.get_refinement_attempts = AsyncMock(
            side_effect=StoreConnectionError("connection refused")
        )
        app.dependency_overrides[get_reconciliation_store] = lambda: store

        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["components"][0]["message"] == "connection refused"


class TestMetrics:
    """Tests for GET /metrics."""

    def test_metrics_exposed(self, client: TestClient) -> None:
        client.get("/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "attune_request_count_total" in response.text
