"""
API CRUD tests for /api/categories endpoints.

Key Concepts Demonstrated:
- Status code and response body validation
- Cascade behaviour observed through the API
- Test isolation via per-test storage
"""

import json

import pytest

pytestmark = pytest.mark.integration


class TestListCategories:
    """Tests for GET /api/categories."""

    def test_returns_empty_list_for_new_user(self, client, api_headers):
        # Act
        response = client.get("/api/categories", headers=api_headers)

        # Assert
        assert response.status_code == 200
        assert json.loads(response.data) == []

    def test_returns_only_own_categories_in_id_order(
        self, client, api_headers, second_user, category_factory
    ):
        # Arrange
        first = category_factory(name="First")
        category_factory(name="Theirs", user_id=second_user.id)
        second = category_factory(name="Second")

        # Act
        response = client.get("/api/categories", headers=api_headers)

        # Assert
        data = json.loads(response.data)
        assert [category["id"] for category in data] == [first.id, second.id]

    def test_requires_authentication(self, client):
        response = client.get("/api/categories")

        assert response.status_code == 401


class TestCreateCategory:
    """Tests for POST /api/categories."""

    def test_create_with_defaults(self, client, api_headers, user):
        # Act
        response = client.post("/api/categories", headers=api_headers, json={"name": "Work"})

        # Assert
        assert response.status_code == 201
        data = json.loads(response.data)
        assert data["name"] == "Work"
        assert data["color"] == "blue"
        assert data["description"] == ""
        assert data["userId"] == user.id

    def test_create_rejects_invalid_color(self, client, api_headers):
        response = client.post(
            "/api/categories", headers=api_headers, json={"name": "Work", "color": "pink"}
        )

        assert response.status_code == 400
        assert json.loads(response.data)["errors"][0]["field"] == "color"

    def test_create_rejects_missing_name(self, client, api_headers):
        response = client.post("/api/categories", headers=api_headers, json={"color": "red"})

        assert response.status_code == 400


class TestUpdateCategory:
    """Tests for PUT /api/categories/<id>."""

    def test_partial_update(self, client, api_headers, sample_category):
        # Act
        response = client.put(
            f"/api/categories/{sample_category.id}",
            headers=api_headers,
            json={"color": "green", "description": "Office things"},
        )

        # Assert
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["name"] == "Work"
        assert data["color"] == "green"
        assert data["description"] == "Office things"

    def test_update_missing_category_returns_404(self, client, api_headers):
        response = client.put("/api/categories/9999", headers=api_headers, json={"name": "X"})

        assert response.status_code == 404
        assert json.loads(response.data)["message"] == "Category not found"

    def test_update_oversized_category_id_returns_404(self, client, api_headers):
        response = client.put(
            "/api/categories/99999999999999999999", headers=api_headers, json={"name": "X"}
        )

        assert response.status_code == 404
        assert json.loads(response.data)["message"] == "Category not found"


class TestDeleteCategory:
    """Tests for DELETE /api/categories/<id>."""

    def test_delete_removes_category_and_its_tasks(
        self, client, api_headers, multiple_tasks
    ):
        # Arrange
        work = multiple_tasks["work"]

        # Act
        response = client.delete(f"/api/categories/{work.id}", headers=api_headers)

        # Assert
        assert response.status_code == 200
        assert json.loads(response.data)["message"] == "Category deleted successfully"
        categories = json.loads(client.get("/api/categories", headers=api_headers).data)
        assert [category["name"] for category in categories] == ["Home"]
        tasks = json.loads(client.get("/api/tasks", headers=api_headers).data)
        assert [task["title"] for task in tasks] == ["Fix the sink"]

    def test_delete_missing_category_returns_404(self, client, api_headers):
        response = client.delete("/api/categories/9999", headers=api_headers)

        assert response.status_code == 404

    def test_delete_oversized_category_id_returns_404(self, client, api_headers):
        response = client.delete("/api/categories/99999999999999999999", headers=api_headers)

        assert response.status_code == 404
