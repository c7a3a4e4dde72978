"""
In-memory storage backend.

Keeps every record in dictionaries for the lifetime of the process.  Used
when no database is configured and by the test-suite.  A re-entrant lock
serialises access so the threaded development server cannot interleave two
writes, and the category cascade runs under a single acquisition.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from ..entities import Category, Task, User
from ..errors import ConflictError
from .base import (
    CATEGORY_MUTABLE_FIELDS,
    TASK_MUTABLE_FIELDS,
    Storage,
    task_matches,
    task_sort_key,
)

logger = logging.getLogger(__name__)


class MemoryStorage(Storage):
    """Dictionary-backed :class:`Storage`; records are copied in and out."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._categories: dict[int, Category] = {}
        self._tasks: dict[int, Task] = {}
        self._user_ids = itertools.count(1)
        self._category_ids = itertools.count(1)
        self._task_ids = itertools.count(1)

    # -- users ---------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return replace(user)
        return None

    def get_user_by_email(self, email: str) -> User | None:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
        return None

    def create_user(self, data: dict[str, Any]) -> User:
        with self._lock:
            if self.get_user_by_username(data["username"]):
                raise ConflictError("Username already exists")
            if self.get_user_by_email(data["email"]):
                raise ConflictError("Email already exists")

            user = User(
                id=next(self._user_ids),
                username=data["username"],
                email=data["email"],
                fullname=data["fullname"],
                password_hash=data["password_hash"],
            )
            self._users[user.id] = user
            logger.info("Created user %s", user.id)
            return replace(user)

    # -- categories ----------------------------------------------------------

    def list_categories(self, user_id: int) -> list[Category]:
        with self._lock:
            return [
                replace(category)
                for _, category in sorted(self._categories.items())
                if category.user_id == user_id
            ]

    def get_category(self, category_id: int) -> Category | None:
        with self._lock:
            category = self._categories.get(category_id)
            return replace(category) if category else None

    def create_category(self, data: dict[str, Any]) -> Category:
        with self._lock:
            category = Category(
                id=next(self._category_ids),
                name=data["name"],
                color=data["color"],
                description=data.get("description") or "",
                user_id=data["user_id"],
            )
            self._categories[category.id] = category
            return replace(category)

    def update_category(self, category_id: int, changes: dict[str, Any]) -> Category | None:
        with self._lock:
            category = self._categories.get(category_id)
            if category is None:
                return None
            updated = replace(category, **_pick(changes, CATEGORY_MUTABLE_FIELDS))
            self._categories[category_id] = updated
            return replace(updated)

    def delete_category(self, category_id: int) -> bool:
        with self._lock:
            if self._categories.pop(category_id, None) is None:
                return False
            orphaned = [
                task_id for task_id, task in self._tasks.items()
                if task.category_id == category_id
            ]
            for task_id in orphaned:
                del self._tasks[task_id]
            logger.info("Deleted category %s and %d task(s)", category_id, len(orphaned))
            return True

    # -- tasks ---------------------------------------------------------------

    def _sorted_tasks(self, predicate: Callable[[Task], bool]) -> list[Task]:
        with self._lock:
            matches = [replace(task) for task in self._tasks.values() if predicate(task)]
        return sorted(matches, key=task_sort_key, reverse=True)

    def list_tasks(self, user_id: int) -> list[Task]:
        return self._sorted_tasks(lambda task: task.user_id == user_id)

    def list_tasks_by_category(self, category_id: int, user_id: int) -> list[Task]:
        return self._sorted_tasks(
            lambda task: task.user_id == user_id and task.category_id == category_id
        )

    def get_task(self, task_id: int) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return replace(task) if task else None

    def create_task(self, data: dict[str, Any]) -> Task:
        with self._lock:
            task = Task(
                id=next(self._task_ids),
                title=data["title"],
                description=data.get("description") or "",
                category_id=data["category_id"],
                completed=False,
                priority=data["priority"],
                due_date=data.get("due_date"),
                created_at=datetime.now(timezone.utc),
                user_id=data["user_id"],
            )
            self._tasks[task.id] = task
            return replace(task)

    def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            updated = replace(task, **_pick(changes, TASK_MUTABLE_FIELDS))
            self._tasks[task_id] = updated
            return replace(updated)

    def delete_task(self, task_id: int) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def search_tasks(self, user_id: int, query: str) -> list[Task]:
        return self._sorted_tasks(
            lambda task: task.user_id == user_id and task_matches(task, query)
        )


def _pick(changes: dict[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    return {name: value for name, value in changes.items() if name in allowed}
