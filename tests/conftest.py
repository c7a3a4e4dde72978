"""
Shared pytest fixtures for the Taskboard test suite.

Every application-level fixture is parametrised over both storage
backends, so each test that touches the app runs once against the
in-memory store and once against the SQLite-backed store.  That is how the
suite checks that the two backends behave identically.

Key Concepts Demonstrated:
- Parametrised fixtures (one test, two backends)
- Fixture dependencies
- Test data factories
- Database setup/teardown
"""

from __future__ import annotations

import itertools
import os
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from taskboard import create_app, db
from taskboard.auth import create_token, hash_password
from taskboard.entities import Category, CategoryColor, Task, TaskPriority, User
from taskboard.storage import EXTENSION_KEY, MemoryStorage, Storage

from tests.helpers import auth_headers

# Initialize Faker for generating test data
fake = Faker()

_user_counter = itertools.count(1)


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(params=["memory", "database"])
def app(request):
    """
    Create an application for one test, once per storage backend.

    The database variant drops every table afterwards so the next test
    starts from an empty schema.
    """
    if request.param == "memory":
        yield create_app("testing", storage=MemoryStorage())
        return

    application = create_app("testing")
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    """Provide a Flask test client for making HTTP requests."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def storage(app) -> Storage:
    """Provide the app's storage with an application context pushed."""
    with app.app_context():
        yield app.extensions[EXTENSION_KEY]


# -----------------------------------------------------------------------------
# Users and tokens
# -----------------------------------------------------------------------------

@pytest.fixture
def user_factory(storage) -> Callable[..., User]:
    """
    Factory fixture that persists users with unique usernames and emails.

    Example:
        def test_something(user_factory):
            user = user_factory(password="secret")
    """

    def _create_user(
        username: str | None = None,
        email: str | None = None,
        fullname: str | None = None,
        password: str = "StrongPass123!",
    ) -> User:
        number = next(_user_counter)
        return storage.create_user(
            {
                "username": username or f"user_{number}",
                "email": email or f"user_{number}@example.com",
                "fullname": fullname or fake.name(),
                "password_hash": hash_password(password),
            }
        )

    return _create_user


@pytest.fixture
def token_for(app) -> Callable[[User], str]:
    """Return a function that signs a token for a user with the app's secret."""

    def _token(user: User) -> str:
        return create_token(user.id, app.config["JWT_SECRET_KEY"], 1)

    return _token


@pytest.fixture
def user(user_factory) -> User:
    return user_factory()


@pytest.fixture
def second_user(user_factory) -> User:
    return user_factory()


@pytest.fixture
def api_headers(user, token_for) -> dict[str, str]:
    """Authorization and JSON headers for ``user``."""
    return auth_headers(token_for(user))


@pytest.fixture
def second_user_headers(second_user, token_for) -> dict[str, str]:
    """Authorization and JSON headers for ``second_user``."""
    return auth_headers(token_for(second_user))


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def category_factory(storage, user) -> Callable[..., Category]:
    """Factory fixture for categories; owned by ``user`` unless told otherwise."""

    def _create_category(
        *,
        user_id: int | None = None,
        name: str | None = None,
        color: str = CategoryColor.BLUE.value,
        description: str = "",
    ) -> Category:
        return storage.create_category(
            {
                "name": name or fake.word().capitalize(),
                "color": color,
                "description": description,
                "user_id": user_id or user.id,
            }
        )

    return _create_category


@pytest.fixture
def task_factory(storage, user) -> Callable[..., Task]:
    """Factory fixture for tasks; owned by ``user`` unless told otherwise."""

    def _create_task(
        *,
        category_id: int,
        user_id: int | None = None,
        title: str | None = None,
        description: str | None = None,
        priority: str = TaskPriority.MEDIUM.value,
        due_date: date | None = None,
    ) -> Task:
        return storage.create_task(
            {
                "title": title or fake.sentence(nb_words=4),
                "description": fake.paragraph() if description is None else description,
                "category_id": category_id,
                "priority": priority,
                "due_date": due_date,
                "user_id": user_id or user.id,
            }
        )

    return _create_task


@pytest.fixture
def sample_category(category_factory) -> Category:
    return category_factory(name="Work", color=CategoryColor.BLUE.value)


@pytest.fixture
def sample_task(task_factory, sample_category) -> Task:
    return task_factory(
        category_id=sample_category.id,
        title="Report",
        description="Quarterly numbers for the board",
        priority=TaskPriority.HIGH.value,
    )


@pytest.fixture
def multiple_tasks(task_factory, category_factory) -> dict[str, Any]:
    """
    Two categories with tasks of varied priority and due dates.

    Returns:
        Dict with ``work`` and ``home`` categories and the ``tasks`` list in
        creation order.
    """
    work = category_factory(name="Work")
    home = category_factory(name="Home", color=CategoryColor.GREEN.value)
    tasks = [
        task_factory(
            category_id=work.id,
            title="Write quarterly report",
            description="Numbers for the board",
            priority=TaskPriority.HIGH.value,
            due_date=date.today() + timedelta(days=1),
        ),
        task_factory(
            category_id=work.id,
            title="Book flights",
            description="Conference in Lisbon",
        ),
        task_factory(
            category_id=home.id,
            title="Fix the sink",
            description="Buy a new washer first",
            priority=TaskPriority.LOW.value,
        ),
    ]
    return {"work": work, "home": home, "tasks": tasks}


@pytest.fixture
def valid_task_data(sample_category) -> dict[str, Any]:
    """Provide a fully populated task payload for POST requests."""
    return {
        "title": "Test Task",
        "description": "This is a test task description",
        "categoryId": sample_category.id,
        "priority": TaskPriority.HIGH.value,
        "dueDate": (date.today() + timedelta(days=7)).isoformat(),
    }
