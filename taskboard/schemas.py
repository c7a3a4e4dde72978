"""
Input validation for API payloads.

Each ``validate_*`` function takes the decoded JSON body of a request and
either returns clean, typed data or raises :class:`~taskboard.errors.ValidationError`
listing every problem found.  Nothing here touches storage, so handlers can
call these before any mutation happens.

Category and task payloads use the client's camelCase keys on the wire
(``categoryId``, ``dueDate``); the dictionaries returned here use the
snake_case field names the storage layer understands.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .entities import MAX_ID, CategoryColor, TaskPriority
from .errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

CATEGORY_NAME_MAX_LENGTH = 100
TASK_TITLE_MAX_LENGTH = 200

CATEGORY_FIELDS = {"name", "color", "description"}
TASK_FIELDS = {"title", "description", "categoryId", "priority", "dueDate"}
TASK_UPDATE_FIELDS = TASK_FIELDS | {"completed"}

_MISSING = object()


@dataclass
class Registration:
    email: str
    username: str
    fullname: str
    password: str


@dataclass
class Credentials:
    email: str
    password: str


@dataclass
class ImportedCategory:
    """A category read from an export file; ``source_id`` is its id in that file."""

    source_id: int | None
    name: str
    color: str
    description: str


@dataclass
class ImportedTask:
    title: str
    description: str
    category_id: int
    priority: str
    due_date: date | None
    completed: bool


@dataclass
class ImportPayload:
    categories: list[ImportedCategory] = field(default_factory=list)
    tasks: list[ImportedTask] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Field parsers
# -----------------------------------------------------------------------------

def _issue(issues: list[dict[str, str]], name: str, message: str) -> None:
    issues.append({"field": name, "message": message})


def _require_object(data: Any, name: str = "body") -> dict[str, Any]:
    if not isinstance(data, dict):
        message = "Request body must be a JSON object" if name == "body" else f"'{name}' must be an object"
        raise ValidationError([{"field": name, "message": message}], message)
    return data


def _reject_unknown(
    payload: dict[str, Any], allowed: set[str], issues: list[dict[str, str]]
) -> None:
    for key in sorted(set(payload) - allowed):
        _issue(issues, key, f"Unknown field '{key}'")


def _parse_text(
    payload: dict[str, Any],
    key: str,
    issues: list[dict[str, str]],
    *,
    label: str | None = None,
    required: bool = False,
    non_blank: bool = False,
    max_length: int | None = None,
    null_as_empty: bool = False,
) -> Any:
    """Parse a string field, returning ``_MISSING`` when absent or invalid."""
    label = label or key
    if key not in payload:
        if required:
            _issue(issues, label, f"'{label}' is required")
        return _MISSING

    value = payload[key]
    if value is None and null_as_empty:
        return ""
    if not isinstance(value, str):
        _issue(issues, label, f"'{label}' must be a string")
        return _MISSING
    if non_blank and not value.strip():
        _issue(issues, label, f"'{label}' is required")
        return _MISSING
    if max_length is not None and len(value) > max_length:
        _issue(issues, label, f"'{label}' must be {max_length} characters or less")
        return _MISSING
    return value


def _parse_choice(
    payload: dict[str, Any],
    key: str,
    choices: type[CategoryColor] | type[TaskPriority],
    issues: list[dict[str, str]],
    *,
    label: str | None = None,
    default_on_null: str | None = None,
) -> Any:
    label = label or key
    if key not in payload:
        return _MISSING
    value = payload[key]
    if value is None and default_on_null is not None:
        return default_on_null
    valid = [choice.value for choice in choices]
    if value not in valid:
        _issue(issues, label, f"Invalid {key}. Must be one of: {valid}")
        return _MISSING
    return value


def _parse_id(
    payload: dict[str, Any],
    key: str,
    issues: list[dict[str, str]],
    *,
    label: str | None = None,
    required: bool = False,
) -> Any:
    label = label or key
    if key not in payload:
        if required:
            _issue(issues, label, f"'{label}' is required")
        return _MISSING
    value = payload[key]
    # bool is a subclass of int; true/false are never identifiers
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= MAX_ID:
        _issue(issues, label, f"'{label}' must be a positive integer")
        return _MISSING
    return value


def _parse_due_date(
    payload: dict[str, Any],
    key: str,
    issues: list[dict[str, str]],
    *,
    label: str | None = None,
) -> Any:
    label = label or key
    if key not in payload:
        return _MISSING
    value = payload[key]
    if value is None or value == "":
        return None
    if isinstance(value, str) and DATE_PATTERN.match(value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    _issue(issues, label, f"Invalid {key} format. Use YYYY-MM-DD")
    return _MISSING


def _parse_flag(
    payload: dict[str, Any],
    key: str,
    issues: list[dict[str, str]],
    *,
    label: str | None = None,
    default_on_null: bool | None = None,
) -> Any:
    label = label or key
    if key not in payload:
        return _MISSING
    value = payload[key]
    if value is None and default_on_null is not None:
        return default_on_null
    if not isinstance(value, bool):
        _issue(issues, label, f"'{label}' must be a boolean")
        return _MISSING
    return value


def _present(values: dict[str, Any]) -> dict[str, Any]:
    """Drop entries that were absent from the payload."""
    return {name: value for name, value in values.items() if value is not _MISSING}


# -----------------------------------------------------------------------------
# Categories and tasks
# -----------------------------------------------------------------------------

def _category_fields(payload: dict[str, Any], issues: list[dict[str, str]], *, partial: bool) -> dict[str, Any]:
    return {
        "name": _parse_text(
            payload, "name", issues,
            required=not partial, non_blank=True, max_length=CATEGORY_NAME_MAX_LENGTH,
        ),
        "color": _parse_choice(payload, "color", CategoryColor, issues),
        "description": _parse_text(payload, "description", issues, null_as_empty=True),
    }


def validate_insert_category(data: Any) -> dict[str, Any]:
    """
    Validate a new category.

    Args:
        data: Decoded JSON body.

    Returns:
        ``name``, ``color`` and ``description`` with defaults applied.

    Raises:
        ValidationError: If the body is not an object, ``name`` is missing or
            blank, ``color`` is outside the palette, or unknown fields appear.
    """
    payload = _require_object(data)
    issues: list[dict[str, str]] = []
    _reject_unknown(payload, CATEGORY_FIELDS, issues)
    values = _category_fields(payload, issues, partial=False)
    if issues:
        raise ValidationError(issues)

    clean = _present(values)
    clean.setdefault("color", CategoryColor.BLUE.value)
    clean.setdefault("description", "")
    return clean


def validate_update_category(data: Any) -> dict[str, Any]:
    """Validate a partial category update; only supplied fields are returned."""
    payload = _require_object(data)
    issues: list[dict[str, str]] = []
    _reject_unknown(payload, CATEGORY_FIELDS, issues)
    values = _category_fields(payload, issues, partial=True)
    if issues:
        raise ValidationError(issues)
    return _present(values)


def _task_fields(payload: dict[str, Any], issues: list[dict[str, str]], *, partial: bool) -> dict[str, Any]:
    return {
        "title": _parse_text(
            payload, "title", issues,
            required=not partial, non_blank=True, max_length=TASK_TITLE_MAX_LENGTH,
        ),
        "description": _parse_text(payload, "description", issues, null_as_empty=True),
        "category_id": _parse_id(payload, "categoryId", issues, required=not partial),
        "priority": _parse_choice(payload, "priority", TaskPriority, issues),
        "due_date": _parse_due_date(payload, "dueDate", issues),
    }


def validate_insert_task(data: Any) -> dict[str, Any]:
    """
    Validate a new task.

    ``title`` and ``categoryId`` are required.  ``description`` defaults to
    an empty string, ``priority`` to ``medium`` and ``dueDate`` to none.

    Returns:
        Snake_case field dictionary ready for ``Storage.create_task`` (minus
        the owning ``user_id``, which comes from the token).
    """
    payload = _require_object(data)
    issues: list[dict[str, str]] = []
    _reject_unknown(payload, TASK_FIELDS, issues)
    values = _task_fields(payload, issues, partial=False)
    if issues:
        raise ValidationError(issues)

    clean = _present(values)
    clean.setdefault("description", "")
    clean.setdefault("priority", TaskPriority.MEDIUM.value)
    clean.setdefault("due_date", None)
    return clean


def validate_update_task(data: Any) -> dict[str, Any]:
    """Validate a partial task update, which may also toggle ``completed``."""
    payload = _require_object(data)
    issues: list[dict[str, str]] = []
    _reject_unknown(payload, TASK_UPDATE_FIELDS, issues)
    values = _task_fields(payload, issues, partial=True)
    values["completed"] = _parse_flag(payload, "completed", issues)
    if issues:
        raise ValidationError(issues)
    return _present(values)


# -----------------------------------------------------------------------------
# Authentication
# -----------------------------------------------------------------------------

def _parse_email(payload: dict[str, Any], issues: list[dict[str, str]]) -> Any:
    email = _parse_text(payload, "email", issues, required=True, non_blank=True)
    if email is _MISSING:
        return _MISSING
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        _issue(issues, "email", "Invalid email address")
        return _MISSING
    return email


def validate_register(data: Any) -> Registration:
    """Validate a registration request."""
    payload = _require_object(data)
    issues: list[dict[str, str]] = []
    email = _parse_email(payload, issues)
    username = _parse_text(payload, "username", issues, required=True, non_blank=True)
    fullname = _parse_text(payload, "fullname", issues, required=True, non_blank=True)
    password = _parse_text(payload, "password", issues, required=True, non_blank=True)
    if issues:
        raise ValidationError(issues)
    return Registration(
        email=email,
        username=username.strip(),
        fullname=fullname.strip(),
        password=password,
    )


def validate_login(data: Any) -> Credentials:
    """Validate a login request."""
    payload = _require_object(data)
    issues: list[dict[str, str]] = []
    email = _parse_email(payload, issues)
    password = _parse_text(payload, "password", issues, required=True, non_blank=True)
    if issues:
        raise ValidationError(issues)
    return Credentials(email=email, password=password)


# -----------------------------------------------------------------------------
# Import payloads
# -----------------------------------------------------------------------------

def _imported_category(item: Any, index: int, issues: list[dict[str, str]]) -> ImportedCategory | None:
    prefix = f"categories[{index}]"
    if not isinstance(item, dict):
        _issue(issues, prefix, f"'{prefix}' must be an object")
        return None

    before = len(issues)
    source_id: Any = None
    if item.get("id") is not None:
        source_id = _parse_id(item, "id", issues, label=f"{prefix}.id")
    name = _parse_text(
        item, "name", issues,
        label=f"{prefix}.name", required=True, non_blank=True, max_length=CATEGORY_NAME_MAX_LENGTH,
    )
    color = _parse_choice(
        item, "color", CategoryColor, issues,
        label=f"{prefix}.color", default_on_null=CategoryColor.BLUE.value,
    )
    description = _parse_text(item, "description", issues, label=f"{prefix}.description", null_as_empty=True)
    if len(issues) > before:
        return None

    return ImportedCategory(
        source_id=source_id,
        name=name,
        color=CategoryColor.BLUE.value if color is _MISSING else color,
        description="" if description is _MISSING else description,
    )


def _imported_task(item: Any, index: int, issues: list[dict[str, str]]) -> ImportedTask | None:
    prefix = f"tasks[{index}]"
    if not isinstance(item, dict):
        _issue(issues, prefix, f"'{prefix}' must be an object")
        return None

    before = len(issues)
    title = _parse_text(
        item, "title", issues,
        label=f"{prefix}.title", required=True, non_blank=True, max_length=TASK_TITLE_MAX_LENGTH,
    )
    description = _parse_text(item, "description", issues, label=f"{prefix}.description", null_as_empty=True)
    category_id = _parse_id(item, "categoryId", issues, label=f"{prefix}.categoryId", required=True)
    priority = _parse_choice(
        item, "priority", TaskPriority, issues,
        label=f"{prefix}.priority", default_on_null=TaskPriority.MEDIUM.value,
    )
    due_date = _parse_due_date(item, "dueDate", issues, label=f"{prefix}.dueDate")
    completed = _parse_flag(item, "completed", issues, label=f"{prefix}.completed", default_on_null=False)
    if len(issues) > before:
        return None

    return ImportedTask(
        title=title,
        description="" if description is _MISSING else description,
        category_id=category_id,
        priority=TaskPriority.MEDIUM.value if priority is _MISSING else priority,
        due_date=None if due_date is _MISSING else due_date,
        completed=False if completed is _MISSING else completed,
    )


def _import_list(payload: dict[str, Any], key: str, issues: list[dict[str, str]]) -> list[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        _issue(issues, key, f"'{key}' must be a list")
        return []
    return value


def validate_import(data: Any) -> ImportPayload:
    """
    Validate an import document such as the one produced by the export route.

    Keys that only make sense in the source account (``userId``,
    ``createdAt``, ``exportDate``) are ignored.  A category's ``id`` is kept
    as ``source_id`` so tasks can be re-pointed at the new category.

    Raises:
        ValidationError: With one entry per invalid item field, addressed as
            ``categories[i].name`` / ``tasks[i].title`` and so on.
    """
    payload = _require_object(data)
    issues: list[dict[str, str]] = []

    categories = [
        _imported_category(item, index, issues)
        for index, item in enumerate(_import_list(payload, "categories", issues))
    ]
    tasks = [
        _imported_task(item, index, issues)
        for index, item in enumerate(_import_list(payload, "tasks", issues))
    ]
    if issues:
        raise ValidationError(issues)

    return ImportPayload(categories=categories, tasks=tasks)
