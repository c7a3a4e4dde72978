"""
Unit tests for request payload validation.

These run without an application: the validators only look at the decoded
JSON body and either return clean data or raise ``ValidationError``.
"""

from datetime import date

import pytest

from taskboard.errors import ValidationError
from taskboard.schemas import (
    validate_import,
    validate_insert_category,
    validate_insert_task,
    validate_login,
    validate_register,
    validate_update_category,
    validate_update_task,
)

pytestmark = pytest.mark.unit


def _fields(exc_info) -> list[str]:
    return [issue["field"] for issue in exc_info.value.errors]


class TestCategoryValidation:

    def test_insert_applies_defaults(self):
        data = validate_insert_category({"name": "Work"})

        assert data == {"name": "Work", "color": "blue", "description": ""}

    def test_insert_keeps_supplied_values(self):
        data = validate_insert_category(
            {"name": "Home", "color": "amber", "description": "Chores"}
        )

        assert data == {"name": "Home", "color": "amber", "description": "Chores"}

    @pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "   "}])
    def test_insert_requires_name(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_category(payload)

        assert _fields(exc_info) == ["name"]

    def test_insert_rejects_name_over_100_characters(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_category({"name": "x" * 101})

        assert "100 characters" in exc_info.value.errors[0]["message"]

    def test_insert_rejects_color_outside_palette(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_category({"name": "Work", "color": "pink"})

        assert _fields(exc_info) == ["color"]
        assert "Invalid color" in exc_info.value.errors[0]["message"]

    def test_insert_rejects_unknown_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_category({"name": "Work", "userId": 7})

        assert exc_info.value.errors == [
            {"field": "userId", "message": "Unknown field 'userId'"}
        ]

    def test_insert_rejects_non_object_body(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_category(["Work"])

        assert exc_info.value.message == "Request body must be a JSON object"

    def test_update_returns_only_supplied_fields(self):
        assert validate_update_category({"color": "red"}) == {"color": "red"}
        assert validate_update_category({}) == {}

    def test_update_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            validate_update_category({"name": ""})


class TestTaskValidation:

    def test_insert_applies_defaults(self):
        data = validate_insert_task({"title": "Report", "categoryId": 1})

        assert data == {
            "title": "Report",
            "description": "",
            "category_id": 1,
            "priority": "medium",
            "due_date": None,
        }

    def test_insert_parses_due_date(self):
        data = validate_insert_task(
            {"title": "Report", "categoryId": 1, "dueDate": "2030-01-15"}
        )

        assert data["due_date"] == date(2030, 1, 15)

    @pytest.mark.parametrize("due_date", [None, ""])
    def test_insert_treats_empty_due_date_as_none(self, due_date):
        data = validate_insert_task(
            {"title": "Report", "categoryId": 1, "dueDate": due_date}
        )

        assert data["due_date"] is None

    @pytest.mark.parametrize("due_date", ["15/01/2030", "2030-13-01", "2030-02-30", 20300115])
    def test_insert_rejects_bad_due_date(self, due_date):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_task({"title": "Report", "categoryId": 1, "dueDate": due_date})

        assert exc_info.value.errors == [
            {"field": "dueDate", "message": "Invalid dueDate format. Use YYYY-MM-DD"}
        ]

    def test_insert_reports_every_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_task({})

        assert _fields(exc_info) == ["title", "categoryId"]
        assert exc_info.value.message == "Invalid data"

    def test_insert_rejects_title_over_200_characters(self):
        with pytest.raises(ValidationError):
            validate_insert_task({"title": "x" * 201, "categoryId": 1})

    @pytest.mark.parametrize("category_id", [0, -3, "1", True, 1.5, 2**63])
    def test_insert_rejects_invalid_category_id(self, category_id):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_task({"title": "Report", "categoryId": category_id})

        assert _fields(exc_info) == ["categoryId"]

    def test_insert_rejects_unknown_priority(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_task({"title": "Report", "categoryId": 1, "priority": "urgent"})

        assert exc_info.value.errors[0]["message"].startswith("Invalid priority")

    def test_insert_rejects_completed_flag(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_task({"title": "Report", "categoryId": 1, "completed": True})

        assert _fields(exc_info) == ["completed"]

    def test_update_maps_camel_case_to_storage_fields(self):
        data = validate_update_task(
            {"categoryId": 4, "dueDate": "2031-05-01", "completed": True}
        )

        assert data == {
            "category_id": 4,
            "due_date": date(2031, 5, 1),
            "completed": True,
        }

    def test_update_can_clear_due_date(self):
        assert validate_update_task({"dueDate": None}) == {"due_date": None}

    def test_update_rejects_non_boolean_completed(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_task({"completed": "yes"})

        assert _fields(exc_info) == ["completed"]

    def test_update_rejects_category_id_past_integer_range(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_task({"categoryId": 99999999999999999999})

        assert _fields(exc_info) == ["categoryId"]

    def test_update_rejects_server_assigned_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_task({"id": 9, "createdAt": "2020-01-01", "userId": 2})

        assert sorted(_fields(exc_info)) == ["createdAt", "id", "userId"]


class TestAuthValidation:

    def test_register_strips_whitespace(self):
        registration = validate_register(
            {
                "email": "  ada@example.com ",
                "username": " ada ",
                "fullname": " Ada Lovelace ",
                "password": "secret",
            }
        )

        assert registration.email == "ada@example.com"
        assert registration.username == "ada"
        assert registration.fullname == "Ada Lovelace"
        assert registration.password == "secret"

    def test_register_reports_all_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_register({})

        assert _fields(exc_info) == ["email", "username", "fullname", "password"]

    def test_register_rejects_malformed_email(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_register(
                {"email": "not-an-email", "username": "a", "fullname": "A", "password": "p"}
            )

        assert exc_info.value.errors == [{"field": "email", "message": "Invalid email address"}]

    def test_login_requires_password(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_login({"email": "ada@example.com"})

        assert _fields(exc_info) == ["password"]


class TestImportValidation:

    def test_accepts_export_document(self):
        payload = validate_import(
            {
                "categories": [
                    {"id": 3, "name": "Work", "color": "green", "description": "", "userId": 1}
                ],
                "tasks": [
                    {
                        "id": 8,
                        "title": "Report",
                        "description": "Numbers",
                        "categoryId": 3,
                        "completed": True,
                        "priority": "high",
                        "dueDate": "2030-01-01",
                        "createdAt": "2024-01-01T00:00:00+00:00",
                        "userId": 1,
                    }
                ],
                "exportDate": "2024-01-02T00:00:00+00:00",
            }
        )

        assert payload.categories[0].source_id == 3
        assert payload.categories[0].color == "green"
        task = payload.tasks[0]
        assert task.category_id == 3
        assert task.completed is True
        assert task.due_date == date(2030, 1, 1)

    def test_fills_defaults_for_missing_and_null_values(self):
        payload = validate_import(
            {
                "categories": [{"name": "Home", "color": None}],
                "tasks": [{"title": "Sink", "categoryId": 1, "priority": None, "completed": None}],
            }
        )

        assert payload.categories[0].source_id is None
        assert payload.categories[0].color == "blue"
        assert payload.tasks[0].priority == "medium"
        assert payload.tasks[0].completed is False

    def test_missing_lists_import_nothing(self):
        payload = validate_import({})

        assert payload.categories == []
        assert payload.tasks == []

    def test_addresses_errors_by_position(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_import(
                {
                    "categories": [{"name": "Ok"}, {"name": ""}],
                    "tasks": [{"title": "Ok", "categoryId": 1}, {"categoryId": 1}],
                }
            )

        assert _fields(exc_info) == ["categories[1].name", "tasks[1].title"]

    def test_rejects_non_list_sections(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_import({"categories": "Work"})

        assert _fields(exc_info) == ["categories"]

    def test_rejects_ids_past_integer_range(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_import(
                {
                    "categories": [{"id": 2**63, "name": "Work"}],
                    "tasks": [{"title": "Report", "categoryId": 2**64}],
                }
            )

        assert _fields(exc_info) == ["categories[0].id", "tasks[0].categoryId"]

    def test_accepts_largest_id(self):
        payload = validate_import({"tasks": [{"title": "Report", "categoryId": 2**63 - 1}]})

        assert payload.tasks[0].category_id == 2**63 - 1
