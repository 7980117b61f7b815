"""
Tests for shared/api/health.py

Covers 2 endpoints: read_root, database_health.
"""

import pytest
from unittest.mock import MagicMock, patch
from fastapi import FastAPI
from fastapi.testclient import TestClient

from shared.api.health import router


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(router)
    return TestClient(app)


class TestReadRoot:

    def test_health_check(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "LinkMe Learning Path Backend"
        assert data["version"] == "1.0.0"


class TestDatabaseHealth:

    @patch("shared.api.health.get_db_manager")
    def test_healthy(self, mock_get_manager, client):
        mock_get_manager.return_value = MagicMock(health_check=MagicMock(return_value=True))
        assert client.get("/health/db").json() == {"status": "ok", "database": "connected"}

    @patch("shared.api.health.get_db_manager")
    def test_unhealthy(self, mock_get_manager, client):
        mock_get_manager.return_value = MagicMock(health_check=MagicMock(return_value=False))
        assert client.get("/health/db").json() == {"status": "error", "database": "connection_failed"}

    @patch("shared.api.health.get_db_manager")
    def test_exception(self, mock_get_manager, client):
        mock_get_manager.side_effect = RuntimeError("no engine")
        data = client.get("/health/db").json()
        assert data["status"] == "error"
        assert "no engine" in data["database"]
