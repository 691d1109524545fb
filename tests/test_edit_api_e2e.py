"""
E2E tests for the edit_code API.

Tests the full flow: HTTP request -> pydantic validation -> EditEngine ->
in-memory toolchain -> file on disk -> tool response.
"""

import pytest
from fastapi.testclient import TestClient

from codescalpel.api import server
from codescalpel.api.routes.edit import get_engine
from codescalpel.api.server import app
from codescalpel.core.editing.engine import EditEngine


@pytest.fixture
def client(fake_validator, monkeypatch):
    # Keep the request log out of the user's home directory.
    monkeypatch.setattr(server, "_get_live_log", lambda: None)
    engine = EditEngine(validator=fake_validator)
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestEditCode:
    def test_single_match(self, client, tmp_path):
        path = tmp_path / "main.go"
        path.write_text("package main\n\nfunc old() {}\n")

        resp = client.post(
            "/api/tools/edit_code",
            json={
                "file_path": str(path),
                "search_context": "func old() {}",
                "new_content": "func new() {}",
            },
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "is_error": False,
            "message": "Success: File updated. (Strategy: single_match)",
        }
        assert path.read_text() == "package main\n\nfunc new() {}\n"

    def test_engine_failure_is_tool_error(self, client, tmp_path):
        path = tmp_path / "main.go"
        path.write_text("package main\n")

        resp = client.post(
            "/api/tools/edit_code",
            json={"file_path": str(path), "search_context": "func missing() {}", "new_content": "x"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["is_error"] is True
        assert data["message"].startswith("NoMatch:")
        assert path.read_text() == "package main\n"

    def test_overwrite_creates_file(self, client, tmp_path):
        path = tmp_path / "cmd" / "main.go"
        resp = client.post(
            "/api/tools/edit_code",
            json={"file_path": str(path), "strategy": "overwrite_file", "new_content": "package main"},
        )
        assert resp.json()["message"] == "Success: File created. (Strategy: overwrite_file)"
        assert path.read_text() == "package main\n"

    def test_missing_search_context_is_tool_error(self, client, tmp_path):
        path = tmp_path / "main.go"
        path.write_text("package main\n")
        resp = client.post("/api/tools/edit_code", json={"file_path": str(path), "new_content": "x"})
        assert resp.status_code == 200
        assert resp.json()["message"].startswith("InvalidRequest:")


class TestRequestValidation:
    def test_threshold_above_one(self, client):
        resp = client.post(
            "/api/tools/edit_code",
            json={"file_path": "a.go", "search_context": "a", "new_content": "b", "threshold": 1.5},
        )
        assert resp.status_code == 422

    def test_unknown_strategy(self, client):
        resp = client.post(
            "/api/tools/edit_code",
            json={"file_path": "a.go", "strategy": "patch", "new_content": "b"},
        )
        assert resp.status_code == 422

    def test_empty_file_path(self, client):
        resp = client.post("/api/tools/edit_code", json={"file_path": "", "new_content": "b"})
        assert resp.status_code == 422


class TestSchemaAndHealth:
    def test_schema(self, client):
        resp = client.get("/api/tools/edit_code/schema")
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "edit_code"
        assert data["strategies"] == ["single_match", "replace_all", "overwrite_file"]
        assert "file_path" in data["input_schema"]["properties"]
        assert "single_match" in data["description"]

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.json()["status"] == "ok"
