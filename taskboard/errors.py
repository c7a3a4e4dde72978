"""
Error taxonomy and JSON error rendering.

Every failure the API reports to a client is a subclass of
:class:`TaskboardError`.  Each subclass carries the HTTP status code it maps
to, so route handlers and the storage layer can simply ``raise`` and let the
handlers registered by :func:`register_error_handlers` shape the response.

Response bodies always have a human-readable ``message`` field.  Validation
failures add an ``errors`` list with one ``{"field", "message"}`` entry per
offending field.  Stack traces and internal identifiers never leave the
process.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class TaskboardError(Exception):
    """Base class for errors that translate into an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body for this error."""
        return {"message": self.message}


class ValidationError(TaskboardError):
    """
    Malformed or missing input.

    Attributes:
        errors: Field-level issues, each a ``{"field", "message"}`` dict.
    """

    status_code = 400
    default_message = "Invalid data"

    def __init__(self, errors: list[dict[str, str]], message: str | None = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class AuthError(TaskboardError):
    """Missing, invalid or expired token, or bad credentials."""

    status_code = 401
    default_message = "Authentication required"


class ConflictError(TaskboardError):
    """A unique field (username, email) is already taken."""

    status_code = 400
    default_message = "Resource already exists"


class NotFoundError(TaskboardError):
    """The referenced record does not exist for the caller."""

    status_code = 404
    default_message = "Resource not found"


class StorageError(TaskboardError):
    """The underlying datastore failed."""

    status_code = 500
    default_message = "Storage failure"


def _json_error(body: dict[str, Any], status_code: int) -> tuple[Response, int]:
    return jsonify(body), status_code


def register_error_handlers(app: Flask) -> None:
    """
    Attach JSON error handlers to *app*.

    Args:
        app: The Flask application being assembled by ``create_app``.
    """

    @app.errorhandler(TaskboardError)
    def handle_taskboard_error(error: TaskboardError) -> tuple[Response, int]:
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
        else:
            logger.warning("%s: %s", type(error).__name__, error.message)
        return _json_error(error.to_dict(), error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException) -> tuple[Response, int]:
        # Malformed JSON bodies surface here as 400 from request.get_json()
        return _json_error({"message": error.description or error.name}, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> tuple[Response, int]:
        logger.exception("Unhandled error: %s", error)
        return _json_error({"message": "Internal server error"}, 500)
