"""
Storage package.

Two interchangeable backends implement :class:`Storage`:

- ``memory``   -- :class:`MemoryStorage`, process-lifetime dictionaries
- ``database`` -- :class:`DatabaseStorage`, Flask-SQLAlchemy tables

The application factory picks one at startup (or receives one already
built) and stores it on the app; handlers reach it through
:func:`get_storage`.
"""

from __future__ import annotations

from flask import current_app
from flask_sqlalchemy import SQLAlchemy

from .base import Storage
from .database import DatabaseStorage
from .memory import MemoryStorage

EXTENSION_KEY = "taskboard.storage"

BACKENDS = ("memory", "database")


def create_storage(backend: str, database: SQLAlchemy) -> Storage:
    """
    Build the storage implementation named by *backend*.

    Args:
        backend: ``"memory"`` or ``"database"``.
        database: Flask-SQLAlchemy extension used by the database backend.

    Raises:
        ValueError: For an unknown backend name.
    """
    if backend == "memory":
        return MemoryStorage()
    if backend == "database":
        return DatabaseStorage(database)
    raise ValueError(f"Unknown storage backend '{backend}'. Must be one of: {list(BACKENDS)}")


def get_storage() -> Storage:
    """Return the storage attached to the current application."""
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "BACKENDS",
    "DatabaseStorage",
    "EXTENSION_KEY",
    "MemoryStorage",
    "Storage",
    "create_storage",
    "get_storage",
]
