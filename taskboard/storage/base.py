"""
Storage interface shared by the in-memory and relational backends.

Both implementations must behave identically: the same ordering, the same
cascade on category deletion and the same search semantics.  Read methods
report "not found" with ``None`` (or an empty list) and never raise for it;
write methods raise :class:`~taskboard.errors.StorageError` when the
datastore fails and :class:`~taskboard.errors.ConflictError` when a unique
user field is already taken.

Write methods take plain dictionaries keyed by entity field name
(``category_id``, ``due_date`` ...), which is what the validators in
:mod:`taskboard.schemas` produce.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..entities import Category, Task, User

CATEGORY_MUTABLE_FIELDS = frozenset({"name", "color", "description"})
TASK_MUTABLE_FIELDS = frozenset(
    {"title", "description", "category_id", "completed", "priority", "due_date"}
)


def task_sort_key(task: Task) -> tuple:
    """Newest first; ties on the timestamp fall back to the newer id."""
    return (task.created_at, task.id)


def task_matches(task: Task, query: str) -> bool:
    """
    Case-insensitive substring match on title or description.

    Uses ``str.casefold`` so non-ASCII text ("Résumé" / "RÉSUMÉ") folds
    the same way in every backend.
    """
    needle = query.casefold()
    return needle in task.title.casefold() or needle in task.description.casefold()


class Storage(ABC):
    """Persistence contract for users, categories and tasks."""

    # -- users ---------------------------------------------------------------

    @abstractmethod
    def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    def create_user(self, data: dict[str, Any]) -> User:
        """
        Persist a user from ``username``, ``email``, ``fullname`` and
        ``password_hash``.

        Raises:
            ConflictError: If the username or email is already registered.
        """

    # -- categories ----------------------------------------------------------

    @abstractmethod
    def list_categories(self, user_id: int) -> list[Category]:
        """Return the user's categories ordered by id."""

    @abstractmethod
    def get_category(self, category_id: int) -> Category | None: ...

    @abstractmethod
    def create_category(self, data: dict[str, Any]) -> Category: ...

    @abstractmethod
    def update_category(self, category_id: int, changes: dict[str, Any]) -> Category | None:
        """Apply *changes*; returns ``None`` when the category does not exist."""

    @abstractmethod
    def delete_category(self, category_id: int) -> bool:
        """
        Delete a category together with every task filed under it.

        Both deletions happen as one unit: no reader observes the category
        gone while its tasks remain, or the reverse.

        Returns:
            ``False`` if the category did not exist.
        """

    # -- tasks ---------------------------------------------------------------

    @abstractmethod
    def list_tasks(self, user_id: int) -> list[Task]:
        """Return the user's tasks, newest first."""

    @abstractmethod
    def list_tasks_by_category(self, category_id: int, user_id: int) -> list[Task]: ...

    @abstractmethod
    def get_task(self, task_id: int) -> Task | None: ...

    @abstractmethod
    def create_task(self, data: dict[str, Any]) -> Task:
        """Persist a task; ``completed`` starts false and ``created_at`` is now."""

    @abstractmethod
    def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None: ...

    @abstractmethod
    def delete_task(self, task_id: int) -> bool: ...

    @abstractmethod
    def search_tasks(self, user_id: int, query: str) -> list[Task]:
        """Case-insensitive substring match on title or description, newest first."""
