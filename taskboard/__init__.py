"""
Flask application factory module.

This module creates and configures the Taskboard application using the
factory pattern, allowing for different configurations (development,
testing, production) and for the storage backend to be injected by the
caller instead of living in a module-level global.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from config import DEFAULT_JWT_SECRET_KEY, get_config

# Initialize SQLAlchemy without binding to app
db = SQLAlchemy()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix):].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def create_app(config_name: str | None = None, storage=None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.
        storage: A ready-made :class:`~taskboard.storage.Storage`.  When
                 None, one is built from the ``STORAGE_BACKEND`` setting.

    Returns:
        Configured Flask application instance.

    Raises:
        RuntimeError: If a production app would sign tokens with the
            development JWT secret.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    if (
        not app.config.get("DEBUG")
        and not app.config.get("TESTING")
        and app.config["JWT_SECRET_KEY"] == DEFAULT_JWT_SECRET_KEY
    ):
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")

    logger.info("Creating app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    # Initialize extensions
    db.init_app(app)

    # Imported here because the models need ``db`` to exist first
    from .auth import EXTENSION_KEY as AUTH_KEY, build_authenticator
    from .errors import register_error_handlers
    from .storage import EXTENSION_KEY as STORAGE_KEY, DatabaseStorage, create_storage

    if storage is None:
        storage = create_storage(app.config["STORAGE_BACKEND"], db)
    else:
        app.config["STORAGE_BACKEND"] = (
            "database" if isinstance(storage, DatabaseStorage) else "memory"
        )
    app.extensions[STORAGE_KEY] = storage
    app.extensions[AUTH_KEY] = build_authenticator(app.config, storage)

    register_error_handlers(app)

    # Register blueprints
    from .routes.api import api_bp
    from .routes.auth import auth_bp
    from .routes.transfer import transfer_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(transfer_bp, url_prefix="/api")

    if isinstance(storage, DatabaseStorage):
        with app.app_context():
            storage.create_schema()
            logger.info("Database tables created")

    logger.info("Using %s storage", type(storage).__name__)
    return app
