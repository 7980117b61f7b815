"""
Tests for pathfinder/api/learning_paths.py

Runs against the in-memory SQLite db_session with the signed-in user
overridden to u1.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from database import get_db
from pathfinder.api.learning_paths import router
from shared.api.auth import AuthenticatedUser, get_current_user


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app(db_session):
    app = FastAPI()
    app.include_router(router)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: AuthenticatedUser(id="u1")
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def saved(client, sample_learning_path):
    resp = client.post("/learning-paths", json={"learning_path": sample_learning_path.model_dump()})
    assert resp.status_code == 200
    return resp.json()


# ===========================================================================
# Save and list
# ===========================================================================

class TestSaveLearningPath:

    def test_save(self, saved):
        assert saved["id"]
        assert saved["topic"] == "python"
        assert saved["total_videos"] == 4
        assert saved["watched_count"] == 0
        assert saved["percent"] == 0
        assert len(saved["stages"]) == 2

    def test_save_again_replaces(self, client, saved, sample_learning_path):
        resp = client.post("/learning-paths", json={"learning_path": sample_learning_path.model_dump()})

        assert resp.json()["id"] == saved["id"]
        assert len(client.get("/learning-paths").json()) == 1

    def test_empty_path_rejected(self, client):
        empty = {"topic": "python", "user_level": "beginner", "user_goal": "quick", "total_videos": 0}
        resp = client.post("/learning-paths", json={"learning_path": empty})
        assert resp.status_code == 400

    def test_claimed_total_is_ignored(self, client, sample_learning_path):
        body = sample_learning_path.model_dump()
        body["total_videos"] = 99

        resp = client.post("/learning-paths", json={"learning_path": body})

        assert resp.status_code == 200
        assert resp.json()["total_videos"] == 4

    def test_duplicate_video_ids_rejected(self, client, sample_learning_path):
        body = sample_learning_path.model_dump()
        body["stages"][1]["videos"][0]["video_id"] = "v1"

        resp = client.post("/learning-paths", json={"learning_path": body})

        assert resp.status_code == 422

    def test_requires_sign_in(self, app, client, sample_learning_path):
        del app.dependency_overrides[get_current_user]
        resp = client.post("/learning-paths", json={"learning_path": sample_learning_path.model_dump(mode="json")})
        assert resp.status_code == 401


class TestListLearningPaths:

    def test_includes_progress(self, client, saved):
        client.post(f"/learning-paths/{saved['id']}/progress", json={"video_id": "v1"})

        paths = client.get("/learning-paths").json()

        assert len(paths) == 1
        assert paths[0]["watched_count"] == 1
        assert paths[0]["percent"] == 25

    def test_other_users_paths_hidden(self, app, client, saved):
        app.dependency_overrides[get_current_user] = lambda: AuthenticatedUser(id="u2")
        assert client.get("/learning-paths").json() == []


# ===========================================================================
# Progress
# ===========================================================================

class TestProgress:

    def test_mark_watched(self, client, saved):
        resp = client.post(f"/learning-paths/{saved['id']}/progress", json={"video_id": "v2"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["per_video"]["v2"] is True
        assert data["percent"] == 25

    def test_mark_twice_is_idempotent(self, client, saved):
        url = f"/learning-paths/{saved['id']}/progress"
        client.post(url, json={"video_id": "v2"})
        resp = client.post(url, json={"video_id": "v2"})
        assert resp.json()["watched_count"] == 1

    def test_unmark(self, client, saved):
        url = f"/learning-paths/{saved['id']}/progress"
        client.post(url, json={"video_id": "v2"})
        resp = client.post(url, json={"video_id": "v2", "watched": False})
        assert resp.json()["percent"] == 0

    def test_video_not_in_path(self, client, saved):
        resp = client.post(f"/learning-paths/{saved['id']}/progress", json={"video_id": "nope"})
        assert resp.status_code == 400

    def test_unknown_path(self, client):
        resp = client.post("/learning-paths/missing/progress", json={"video_id": "v1"})
        assert resp.status_code == 404

    def test_other_owner_gets_404(self, app, client, saved):
        app.dependency_overrides[get_current_user] = lambda: AuthenticatedUser(id="u2")
        resp = client.get(f"/learning-paths/{saved['id']}/progress")
        assert resp.status_code == 404

    def test_get_progress(self, client, saved):
        resp = client.get(f"/learning-paths/{saved['id']}/progress")

        assert resp.status_code == 200
        assert resp.json()["total_videos"] == 4
        assert resp.json()["per_video"] == {"v1": False, "v2": False, "v3": False, "v4": False}
