"""
Application configuration module.

This module defines configuration classes for different environments
(development, testing, production). Configuration values are loaded
from environment variables with sensible defaults.

The storage backend follows the presence of a database connection
string: when ``DATABASE_URL`` is set the relational store is used,
otherwise tasks live in process memory until the server stops.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

DEFAULT_JWT_SECRET_KEY = "dev-jwt-secret-change-in-production"


def _env_flag(name: str, default: str = "false") -> bool:
    """Interpret an environment variable as a boolean switch."""
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _default_storage_backend() -> str:
    """Pick ``database`` when a connection string is configured, else ``memory``."""
    return "database" if os.environ.get("DATABASE_URL") else "memory"


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Default database location
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'taskboard.db'}"
    )

    # "memory" or "database"
    STORAGE_BACKEND: str = os.environ.get("STORAGE_BACKEND", _default_storage_backend())

    # Bearer tokens are HS256-signed with this secret
    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET_KEY", DEFAULT_JWT_SECRET_KEY)
    # Hours until a token expires; 0 issues tokens without an exp claim
    JWT_EXPIRY_HOURS: int = int(os.environ.get("JWT_EXPIRY_HOURS", "24"))
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    # Reject tasks pointing at a category the caller does not own
    ENFORCE_CATEGORY_OWNERSHIP: bool = _env_flag("ENFORCE_CATEGORY_OWNERSHIP")

    EXPORT_FILENAME: str = os.environ.get("EXPORT_FILENAME", "tasks-export.json")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    # Separate test database; check_same_thread=False lets the Flask test
    # client share the connection across threads.
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'test_taskboard.db'}?check_same_thread=False"
    )

    SQLALCHEMY_ENGINE_OPTIONS: dict = {
        "pool_pre_ping": True,
    }

    STORAGE_BACKEND: str = os.environ.get("TEST_STORAGE_BACKEND", "database")

    JWT_SECRET_KEY: str = os.environ.get(
        "TEST_JWT_SECRET_KEY", "test-jwt-secret-key-for-local-tests-123456"
    )
    JWT_EXPIRY_HOURS: int = int(os.environ.get("TEST_JWT_EXPIRY_HOURS", "1"))


class ProductionConfig(Config):
    """
    Production environment configuration.

    ``JWT_SECRET_KEY`` must come from the environment; the application
    factory refuses to start with the development default.
    """

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
