"""
Relational storage backend built on Flask-SQLAlchemy.

Every public method runs inside the current Flask application context and
uses the request-scoped ``db.session``.  Writes commit immediately; on
failure the session is rolled back and the error is re-raised as a
:class:`~taskboard.errors.StorageError` (or ``ConflictError`` for a unique
constraint on users), so callers never see SQLAlchemy exceptions.

Search filters the owner's rows in Python with the same case folding as
the in-memory store; SQL ``LOWER``/``ILIKE`` only fold ASCII on SQLite.

Key Concepts Demonstrated:
- SQLAlchemy 2.0 ``select`` / ``delete`` statements
- Single-transaction cascade delete
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..entities import MAX_ID, Category, Task, User
from ..errors import ConflictError, StorageError
from ..models import CategoryModel, TaskModel, UserModel
from .base import (
    CATEGORY_MUTABLE_FIELDS,
    TASK_MUTABLE_FIELDS,
    Storage,
    task_matches,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def id_in_range(value: int) -> bool:
    """True when *value* fits the INTEGER primary key columns."""
    return 1 <= value <= MAX_ID


class DatabaseStorage(Storage):
    """
    :class:`Storage` backed by a relational database.

    Args:
        database: The Flask-SQLAlchemy extension bound to the application.
    """

    def __init__(self, database: SQLAlchemy) -> None:
        self.db = database

    @property
    def session(self):
        return self.db.session

    def create_schema(self) -> None:
        """Create any missing tables (requires an application context)."""
        self.db.create_all()

    # -- helpers -------------------------------------------------------------

    def _read(self, action: str, query: Callable[[], T]) -> T:
        try:
            return query()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Failed to %s", action)
            raise StorageError(f"Failed to {action}") from exc

    def _commit(
        self,
        action: str,
        work: Callable[[], Any] | None = None,
        conflict_message: str | None = None,
    ) -> Any:
        """
        Run *work* (if any) and commit, as a single transaction.

        An ``IntegrityError`` becomes a :class:`ConflictError` carrying
        *conflict_message* when one is given, otherwise a ``StorageError``.
        """
        try:
            result = work() if work is not None else None
            self.session.commit()
            return result
        except IntegrityError as exc:
            self.session.rollback()
            if conflict_message is None:
                logger.exception("Failed to %s", action)
                raise StorageError(f"Failed to {action}") from exc
            logger.warning("Integrity error while trying to %s: %s", action, exc.orig)
            raise ConflictError(conflict_message) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Failed to %s", action)
            raise StorageError(f"Failed to {action}") from exc

    def _get(self, action: str, model: type[T], row_id: int) -> T | None:
        # Ids past the INTEGER range cannot exist and cannot be bound either
        if not id_in_range(row_id):
            return None
        return self._read(action, lambda: self.session.get(model, row_id))

    def _task_query(self, user_id: int):
        # Newest first, newer id wins on equal timestamps
        return (
            select(TaskModel)
            .where(TaskModel.user_id == user_id)
            .order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
        )

    def _tasks(self, action: str, stmt) -> list[Task]:
        return self._read(
            action, lambda: [row.to_entity() for row in self.session.scalars(stmt).all()]
        )

    # -- users ---------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        row = self._get("fetch user", UserModel, user_id)
        return row.to_entity() if row else None

    def get_user_by_username(self, username: str) -> User | None:
        row = self._read(
            "fetch user",
            lambda: self.session.scalar(select(UserModel).where(UserModel.username == username)),
        )
        return row.to_entity() if row else None

    def get_user_by_email(self, email: str) -> User | None:
        row = self._read(
            "fetch user",
            lambda: self.session.scalar(select(UserModel).where(UserModel.email == email)),
        )
        return row.to_entity() if row else None

    def create_user(self, data: dict[str, Any]) -> User:
        row = UserModel(
            username=data["username"],
            email=data["email"],
            fullname=data["fullname"],
            password_hash=data["password_hash"],
        )
        self.session.add(row)
        self._commit("create user", conflict_message="Username or email already exists")
        logger.info("Created user %s", row.id)
        return row.to_entity()

    # -- categories ----------------------------------------------------------

    def list_categories(self, user_id: int) -> list[Category]:
        stmt = (
            select(CategoryModel)
            .where(CategoryModel.user_id == user_id)
            .order_by(CategoryModel.id)
        )
        return self._read(
            "fetch categories",
            lambda: [row.to_entity() for row in self.session.scalars(stmt).all()],
        )

    def get_category(self, category_id: int) -> Category | None:
        row = self._get("fetch category", CategoryModel, category_id)
        return row.to_entity() if row else None

    def create_category(self, data: dict[str, Any]) -> Category:
        row = CategoryModel(
            name=data["name"],
            color=data["color"],
            description=data.get("description") or "",
            user_id=data["user_id"],
        )
        self.session.add(row)
        self._commit("create category")
        return row.to_entity()

    def update_category(self, category_id: int, changes: dict[str, Any]) -> Category | None:
        row = self._get("fetch category", CategoryModel, category_id)
        if row is None:
            return None
        for name, value in changes.items():
            if name in CATEGORY_MUTABLE_FIELDS:
                setattr(row, name, value)
        self._commit("update category")
        return row.to_entity()

    def delete_category(self, category_id: int) -> bool:
        row = self._get("fetch category", CategoryModel, category_id)
        if row is None:
            return False

        def cascade() -> int:
            result = self.session.execute(
                delete(TaskModel).where(TaskModel.category_id == category_id)
            )
            self.session.delete(row)
            return result.rowcount

        # Tasks and category go in the same transaction
        removed = self._commit("delete category", cascade)
        logger.info("Deleted category %s and %d task(s)", category_id, removed)
        return True

    # -- tasks ---------------------------------------------------------------

    def list_tasks(self, user_id: int) -> list[Task]:
        return self._tasks("fetch tasks", self._task_query(user_id))

    def list_tasks_by_category(self, category_id: int, user_id: int) -> list[Task]:
        if not id_in_range(category_id):
            return []
        stmt = self._task_query(user_id).where(TaskModel.category_id == category_id)
        return self._tasks("fetch tasks", stmt)

    def get_task(self, task_id: int) -> Task | None:
        row = self._get("fetch task", TaskModel, task_id)
        return row.to_entity() if row else None

    def create_task(self, data: dict[str, Any]) -> Task:
        row = TaskModel(
            title=data["title"],
            description=data.get("description") or "",
            category_id=data["category_id"],
            completed=False,
            priority=data["priority"],
            due_date=data.get("due_date"),
            user_id=data["user_id"],
        )
        self.session.add(row)
        self._commit("create task")
        return row.to_entity()

    def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        row = self._get("fetch task", TaskModel, task_id)
        if row is None:
            return None
        for name, value in changes.items():
            if name in TASK_MUTABLE_FIELDS:
                setattr(row, name, value)
        self._commit("update task")
        return row.to_entity()

    def delete_task(self, task_id: int) -> bool:
        row = self._get("fetch task", TaskModel, task_id)
        if row is None:
            return False
        self.session.delete(row)
        self._commit("delete task")
        return True

    def search_tasks(self, user_id: int, query: str) -> list[Task]:
        tasks = self._tasks("search tasks", self._task_query(user_id))
        return [task for task in tasks if task_matches(task, query)]
