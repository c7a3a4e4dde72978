"""
Domain entities shared by both storage implementations.

Storage backends hand these plain dataclasses to the rest of the
application, so route handlers never see ORM instances or mutable internal
state.  ``to_dict`` produces the camelCase JSON shape the web client
consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


# Ids are stored in 64-bit signed INTEGER columns
MAX_ID = 2**63 - 1


class CategoryColor(str, Enum):
    """Colour tags a category can carry in the UI."""

    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    RED = "red"
    AMBER = "amber"


class TaskPriority(str, Enum):
    """Enumeration of possible task priorities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def to_utc_iso(value: datetime) -> str:
    """
    Convert datetime to an ISO-8601 UTC string.

    SQLite commonly returns naive datetime values even when timezone-aware
    columns are declared. For API contracts, always normalize to UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


@dataclass
class User:
    """
    A registered account.

    Attributes:
        id: Unique identifier assigned by the store.
        username: Unique login handle.
        email: Unique email address, used to log in.
        fullname: Display name.
        password_hash: Salted one-way hash; never serialised.
    """

    id: int
    username: str
    email: str
    fullname: str
    password_hash: str

    def to_public_dict(self) -> dict[str, Any]:
        """Return the user projection that is safe to send to clients."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "fullname": self.fullname,
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.username}>"


@dataclass
class Category:
    """A user-owned grouping of tasks."""

    id: int
    name: str
    color: str
    description: str
    user_id: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "description": self.description,
            "userId": self.user_id,
        }


@dataclass
class Task:
    """
    A single to-do item.

    Attributes:
        id: Unique identifier assigned by the store.
        title: Short summary.
        description: Free text, empty by default.
        category_id: Category the task is filed under.
        completed: Completion flag.
        priority: One of ``TaskPriority``.
        due_date: Optional calendar date.
        created_at: UTC creation timestamp, immutable.
        user_id: Owning user.
    """

    id: int
    title: str
    description: str
    category_id: int
    completed: bool
    priority: str
    due_date: date | None
    created_at: datetime
    user_id: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "categoryId": self.category_id,
            "completed": self.completed,
            "priority": self.priority,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "createdAt": to_utc_iso(self.created_at),
            "userId": self.user_id,
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
