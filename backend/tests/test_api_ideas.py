"""Tests for the idea endpoints."""

import pytest

from conftest import register


def create_idea(client, headers, **overrides) -> dict:
    payload = {"title": "Budget app", "description": "Track spending", "tags": ["money", "app"]}
    payload.update(overrides)
    response = client.post("/api/v1/ideas/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestIdeaCrud:
    def test_create_defaults(self, client, auth_headers):
        idea = create_idea(client, auth_headers, tags=None)

        assert idea["status"] == "draft"
        assert idea["tags"] == []
        assert idea["created_at"] is not None

    def test_tags_keep_order_and_duplicates(self, client, auth_headers):
        idea = create_idea(client, auth_headers, tags=["b", "a", "b"])

        assert idea["tags"] == ["b", "a", "b"]

    @pytest.mark.parametrize("payload", [{"title": ""}, {"title": "   "}, {"description": "no title"}, {"title": "x", "status": "done"}])
    def test_create_rejects_invalid(self, client, auth_headers, payload):
        assert client.post("/api/v1/ideas/", json=payload, headers=auth_headers).status_code == 422

    def test_update_and_delete(self, client, auth_headers):
        idea = create_idea(client, auth_headers)
        url = f"/api/v1/ideas/{idea['id']}"

        response = client.patch(url, json={"status": "completed", "category": "Finance"}, headers=auth_headers)
        assert response.status_code == 200
        updated = response.json()
        assert updated["status"] == "completed"
        assert updated["category"] == "Finance"
        assert updated["title"] == "Budget app"
        assert updated["tags"] == ["money", "app"]

        assert client.delete(url, headers=auth_headers).status_code == 200
        assert client.delete(url, headers=auth_headers).status_code == 404

    def test_update_rejects_blank_title(self, client, auth_headers):
        idea = create_idea(client, auth_headers)

        response = client.patch(f"/api/v1/ideas/{idea['id']}", json={"title": " "}, headers=auth_headers)

        assert response.status_code == 422

    def test_other_users_idea_is_not_found(self, client, auth_headers):
        idea = create_idea(client, auth_headers)
        other = register(client, email="other@example.com")
        other_headers = {"Authorization": f"Bearer {other['access_token']}"}

        assert client.get(f"/api/v1/ideas/{idea['id']}", headers=other_headers).status_code == 404
        assert client.get("/api/v1/ideas/", headers=other_headers).json() == []


class TestIdeaList:
    def test_search_and_status(self, client, auth_headers):
        create_idea(client, auth_headers, title="Budget app", status="active")
        create_idea(client, auth_headers, title="Garden", description="budget tomatoes", status="draft")
        create_idea(client, auth_headers, title="Bike trip", description=None, status="active")

        found = client.get("/api/v1/ideas/", params={"search": "BUDGET", "sort": "title"}, headers=auth_headers).json()
        active = client.get("/api/v1/ideas/", params={"status": "active", "sort": "title"}, headers=auth_headers).json()

        assert [i["title"] for i in found] == ["Budget app", "Garden"]
        assert [i["title"] for i in active] == ["Bike trip", "Budget app"]

    def test_all_filters_keep_length(self, client, auth_headers):
        for title in ("a", "b", "c"):
            create_idea(client, auth_headers, title=title)

        ideas = client.get("/api/v1/ideas/", params={"search": "", "status": "all"}, headers=auth_headers).json()

        assert len(ideas) == 3
