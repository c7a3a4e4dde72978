"""
Database models for the relational storage backend.

This module defines SQLAlchemy models representing the data structure
of the application. Each model maps to a database table and converts
itself into the plain entity used by the rest of the application.

``tasks.category_id`` is not a foreign key, matching the in-memory store,
which accepts any category id.  Cascade deletion is carried out by the
storage layer.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from . import db
from .entities import Category, CategoryColor, Task, TaskPriority, User


class UserModel(db.Model):
    """
    Registered account row.

    Attributes:
        id: Unique identifier for the user.
        username: Unique login handle, indexed for lookups.
        email: Unique email address, indexed because login looks users up by email.
        fullname: Display name.
        password_hash: Werkzeug-generated salted hash.
    """

    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    username: str = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    fullname: str = db.Column(db.String(120), nullable=False)
    password_hash: str = db.Column(db.String(256), nullable=False)

    def to_entity(self) -> User:
        return User(
            id=self.id,
            username=self.username,
            email=self.email,
            fullname=self.fullname,
            password_hash=self.password_hash,
        )

    def __repr__(self) -> str:
        return f"<UserModel {self.id}: {self.username}>"


class CategoryModel(db.Model):
    """Category row owned by one user."""

    __tablename__ = "categories"

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(100), nullable=False)
    color: str = db.Column(
        db.String(20),
        nullable=False,
        default=CategoryColor.BLUE.value
    )
    description: str = db.Column(db.Text, nullable=False, default="")
    user_id: int = db.Column(db.Integer, nullable=False, index=True)

    def to_entity(self) -> Category:
        return Category(
            id=self.id,
            name=self.name,
            color=self.color,
            description=self.description or "",
            user_id=self.user_id,
        )

    def __repr__(self) -> str:
        return f"<CategoryModel {self.id}: {self.name}>"


class TaskModel(db.Model):
    """
    Task row.

    Attributes:
        id: Unique identifier for the task.
        title: Short title describing the task.
        description: Detailed description of the task.
        category_id: Category the task belongs to; indexed for cascade deletes.
        completed: Completion flag.
        priority: Task priority level (low, medium, high).
        due_date: Optional calendar date.
        created_at: Timestamp when the task was created.
        user_id: Owning user; every listing query filters on it.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    title: str = db.Column(db.String(200), nullable=False)
    description: str = db.Column(db.Text, nullable=False, default="")
    category_id: int = db.Column(db.Integer, nullable=False, index=True)
    completed: bool = db.Column(db.Boolean, nullable=False, default=False)
    priority: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskPriority.MEDIUM.value
    )
    due_date: date | None = db.Column(db.Date, nullable=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    user_id: int = db.Column(db.Integer, nullable=False, index=True)

    def to_entity(self) -> Task:
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Task(
            id=self.id,
            title=self.title,
            description=self.description or "",
            category_id=self.category_id,
            completed=bool(self.completed),
            priority=self.priority,
            due_date=self.due_date,
            created_at=created_at,
            user_id=self.user_id,
        )

    def __repr__(self) -> str:
        return f"<TaskModel {self.id}: {self.title}>"
