"""HTTP-level tests for the notes routes."""

import json

from fastapi.testclient import TestClient

NOTES = "/api/v1/notes"


def _create(client, title="A", content="hello"):
    response = client.post(f"{NOTES}/", json={"title": title, "content": content})
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestNotesApi:

    def test_list_empty(self, client):
        response = client.get(f"{NOTES}/")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == []

    def test_create(self, client):
        note = _create(client)
        assert note["id"]
        assert note["title"] == "A"
        assert note["content"] == "hello"
        assert note["created_at"] == note["updated_at"]

    def test_get(self, client):
        note = _create(client)
        response = client.get(f"{NOTES}/{note['id']}")
        assert response.status_code == 200
        assert response.json()["data"] == note

    def test_get_missing(self, client):
        response = client.get(f"{NOTES}/ghost")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Note not found"
        assert body["code"] == "NOT_FOUND"

    def test_update(self, client):
        note = _create(client)
        response = client.put(f"{NOTES}/{note['id']}", json={"title": "B", "content": "world"})
        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["title"] == "B"
        assert updated["content"] == "world"
        assert updated["created_at"] == note["created_at"]

    def test_update_missing(self, client):
        response = client.put(f"{NOTES}/ghost", json={"title": "B", "content": "world"})
        assert response.status_code == 404

    def test_delete(self, client):
        note = _create(client)
        response = client.delete(f"{NOTES}/{note['id']}")
        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"{NOTES}/{note['id']}").status_code == 404

    def test_delete_twice(self, client):
        note = _create(client)
        assert client.delete(f"{NOTES}/{note['id']}").status_code == 204
        assert client.delete(f"{NOTES}/{note['id']}").status_code == 404

    def test_update_after_delete(self, client):
        note = _create(client)
        client.delete(f"{NOTES}/{note['id']}")
        response = client.put(f"{NOTES}/{note['id']}", json={"title": "B", "content": "world"})
        assert response.status_code == 404
        assert client.get(f"{NOTES}/").json()["data"] == []

    def test_stats(self, client):
        _create(client)
        stats = client.get(f"{NOTES}/stats").json()["data"]
        assert stats == {"total": 1, "medium": "file", "persistence_healthy": True}

    def test_request_id_header(self, client):
        response = client.get(f"{NOTES}/")
        assert len(response.headers["X-Request-ID"]) == 8


class TestBadInput:

    def test_create_empty_title(self, client):
        response = client.post(f"{NOTES}/", json={"title": "", "content": "x"})
        assert response.status_code == 400
        assert response.json()["error"] == "Title and content are required"
        assert client.get(f"{NOTES}/").json()["data"] == []

    def test_create_missing_content(self, client):
        response = client.post(f"{NOTES}/", json={"title": "A"})
        assert response.status_code == 400
        assert response.json()["error"] == "Title and content are required"

    def test_update_blank_content(self, client):
        note = _create(client)
        response = client.put(f"{NOTES}/{note['id']}", json={"title": "B", "content": "  "})
        assert response.status_code == 400

    def test_unparsable_body(self, client):
        response = client.post(
            f"{NOTES}/",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "MALFORMED_REQUEST"

    def test_wrong_field_type(self, client):
        response = client.post(f"{NOTES}/", json={"title": ["A"], "content": "x"})
        assert response.status_code == 400
        assert response.json()["code"] == "MALFORMED_REQUEST"


class TestPersistenceAcrossRestarts:

    def test_notes_survive_app_restart(self, registry, tmp_path):
        from app.main import app

        with TestClient(app) as first:
            note = _create(first)

        stored = json.loads((tmp_path / "notes.json").read_text(encoding="utf-8"))
        assert [r["id"] for r in stored] == [note["id"]]

        # shutdown dropped the store instance, so this lifespan reloads from disk
        with TestClient(app) as restarted:
            response = restarted.get(f"{NOTES}/{note['id']}")
            assert response.status_code == 200
            assert response.json()["data"]["title"] == "A"


class TestHealth:

    def test_health(self, client):
        _create(client)
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["notes"] == 1
        assert body["persistence"] == "file"


class TestInternalErrors:

    def test_unexpected_failure_maps_to_500(self, registry):
        from app.main import app

        class BrokenService:
            def list_notes(self):
                raise RuntimeError("boom")

        with TestClient(app, raise_server_exceptions=False) as client:
            registry.set("note_service", BrokenService())
            response = client.get(f"{NOTES}/")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
        }
