"""Integration tests for the browser API."""

import pytest
from fastapi.testclient import TestClient

from conftest import ENTITIES, write_metadata


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Create test client with a fresh database and the test metadata."""
    write_metadata(tmp_path, ENTITIES)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("BROWSERFORGE_BASE_PATH", str(tmp_path))
    monkeypatch.setenv("BROWSERFORGE_DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("BROWSERFORGE_ADMIN_PATH", "/cms")
    monkeypatch.setenv("BROWSERFORGE_MEDIA_URL", "https://img.test")

    from browserforge.api.app import app

    with TestClient(app) as client:
        yield client


def create_record(client, entity, data, browsers=None):
    """Helper to create a record and return its ID."""
    body = {"data": data}
    if browsers is not None:
        body["browsers"] = browsers
    response = client.post(f"/api/entities/{entity}", json=body)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestBrowserMetadata:
    def test_lists_resolved_browsers(self, client):
        response = client.get("/api/metadata/Publication/browsers")
        assert response.status_code == 200

        data = response.json()
        assert data["entity"] == "Publication"
        assert [b["browserName"] for b in data["browsers"]] == ["books", "tags", "editor"]
        assert data["browsers"][0] == {
            "browserName": "books",
            "relation": "books",
            "routePrefix": None,
            "titleKey": "title",
            "moduleName": "books",
            "model": "Book",
            "positionAttribute": "position",
        }
        assert data["relatedBrowsers"] == ["featured"]

    def test_unknown_entity(self, client):
        assert client.get("/api/metadata/Magazine/browsers").status_code == 404


class TestSaveAndLoad:
    def test_create_then_load_form(self, client):
        b1 = create_record(client, "Book", {"title": "Dune", "cover": "dune.jpg"})
        b2 = create_record(client, "Book", {"title": "Emma", "cover": "emma.jpg"})
        author = create_record(client, "Author", {"name": "Ada"})

        pub = create_record(
            client,
            "Publication",
            {"title": "Spring"},
            browsers={"books": [{"id": b2}, {"id": b1}], "editor": [{"id": author}]},
        )

        response = client.get(f"/api/entities/Publication/{pub}/form")
        assert response.status_code == 200
        form = response.json()

        assert form["data"]["title"] == "Spring"
        assert form["data"]["editorId"] == author
        assert form["browsers"]["books"] == [
            {
                "id": b2,
                "name": "Emma",
                "edit": f"/cms/books/{b2}/edit",
                "endpointType": "Book",
                "thumbnail": "https://img.test/emma.jpg?w=100&h=100&fit=crop",
            },
            {
                "id": b1,
                "name": "Dune",
                "edit": f"/cms/books/{b1}/edit",
                "endpointType": "Book",
                "thumbnail": "https://img.test/dune.jpg?w=100&h=100&fit=crop",
            },
        ]
        assert form["browsers"]["editor"][0]["edit"] == f"/cms/people/authors/{author}/edit"

    def test_update_reorders_and_round_trips(self, client):
        b1 = create_record(client, "Book", {"title": "Dune"})
        b2 = create_record(client, "Book", {"title": "Emma"})
        b3 = create_record(client, "Book", {"title": "Ulysses"})
        pub = create_record(client, "Publication", {"title": "P"}, browsers={"books": [{"id": b1}, {"id": b2}]})

        response = client.put(
            f"/api/entities/Publication/{pub}",
            json={"browsers": {"books": [{"id": b3}, {"id": b1}]}},
        )
        assert response.status_code == 200

        form = client.get(f"/api/entities/Publication/{pub}/form").json()
        assert [i["id"] for i in form["browsers"]["books"]] == [b3, b1]

        # Re-submitting what the form loaded changes nothing
        client.put(f"/api/entities/Publication/{pub}", json={"browsers": form["browsers"]})
        again = client.get(f"/api/entities/Publication/{pub}/form").json()
        assert again["browsers"] == form["browsers"]

    def test_related_browser(self, client):
        book = create_record(client, "Book", {"title": "Dune"})
        pub = create_record(
            client,
            "Publication",
            {"title": "P"},
            browsers={"featured": [{"id": book, "endpointType": "Book"}]},
        )

        form = client.get(f"/api/entities/Publication/{pub}/form").json()

        assert form["browsers"]["featured"][0]["edit"] == f"/cms/collections/books/{book}/edit"

    def test_empty_browsers_clear_relations(self, client):
        book = create_record(client, "Book", {"title": "Dune"})
        pub = create_record(client, "Publication", {"title": "P"}, browsers={"books": [{"id": book}]})

        client.put(f"/api/entities/Publication/{pub}", json={"browsers": {"books": []}})

        form = client.get(f"/api/entities/Publication/{pub}/form").json()
        assert form["browsers"] == {}


class TestErrors:
    def test_create_unknown_entity(self, client):
        response = client.post("/api/entities/Magazine", json={"data": {}})
        assert response.status_code == 404

    def test_update_missing_record(self, client):
        response = client.put("/api/entities/Publication/PUB-99999", json={"data": {"title": "x"}})
        assert response.status_code == 404

    def test_form_missing_record(self, client):
        assert client.get("/api/entities/Publication/PUB-99999/form").status_code == 404

    def test_item_without_id_is_hook_abort(self, client):
        response = client.post(
            "/api/entities/Publication",
            json={"data": {"title": "P"}, "browsers": {"books": [{"title": "no id"}]}},
        )
        assert response.status_code == 422
        assert response.json()["errors"][0]["code"] == "HOOK_ABORT"
        # Nothing from the rejected save was kept
        assert client.get("/api/entities/Publication/PUB-00001/form").status_code == 404
