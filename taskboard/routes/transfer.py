"""
Export and import endpoints.

Endpoints:
    GET  /api/export  - Download the user's categories and tasks as JSON
    POST /api/import  - Load categories and tasks from an export document
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, g, jsonify, request

from ..auth import require_auth
from ..errors import StorageError, ValidationError
from ..schemas import validate_import
from ..storage import get_storage
from ..transfer import export_data, foreign_category_references, import_data

logger = logging.getLogger(__name__)

transfer_bp = Blueprint("transfer", __name__)


@transfer_bp.route("/export", methods=["GET"])
@require_auth
def export_tasks() -> Response:
    """
    Return the user's data as a file download.

    The body is ``{"categories": [...], "tasks": [...], "exportDate": ...}``
    and the ``Content-Disposition`` header names ``EXPORT_FILENAME``.
    """
    logger.info("GET /api/export - Exporting data for user %s", g.user_id)

    response = jsonify(export_data(get_storage(), g.user_id))
    filename = current_app.config.get("EXPORT_FILENAME", "tasks-export.json")
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@transfer_bp.route("/import", methods=["POST"])
@require_auth
def import_tasks() -> tuple[Response, int]:
    """
    Import categories and tasks into the user's account.

    The whole document is validated before anything is written; with
    ``ENFORCE_CATEGORY_OWNERSHIP`` that includes rejecting tasks filed under
    another user's category.  A storage failure during the insert loop
    returns 500; rows inserted before the failure are kept.
    """
    logger.info("POST /api/import - Importing data for user %s", g.user_id)

    payload = validate_import(request.get_json(silent=True))
    storage = get_storage()

    foreign = foreign_category_references(storage, g.user_id, payload)
    if foreign:
        if current_app.config.get("ENFORCE_CATEGORY_OWNERSHIP"):
            raise ValidationError(foreign)
        logger.warning(
            "User %s imported %d task(s) under categories they do not own",
            g.user_id, len(foreign),
        )

    try:
        summary = import_data(storage, g.user_id, payload)
    except StorageError as exc:
        raise StorageError("Failed to import data") from exc

    return jsonify({
        "message": "Data imported successfully",
        "categories": summary.categories,
        "tasks": summary.tasks,
    }), 200
