"""
REST API endpoints for categories and tasks.

This module provides CRUD operations for categories and tasks via HTTP
methods. All endpoints except the health check require a bearer token and
are scoped to the authenticated user: another user's record is reported
as not found, exactly like a missing one.

Endpoints:
    GET    /api/health              - Health check
    GET    /api/categories          - List the user's categories
    POST   /api/categories          - Create a category
    PUT    /api/categories/<id>     - Partially update a category
    DELETE /api/categories/<id>     - Delete a category and its tasks
    GET    /api/tasks               - List tasks (search / category filter)
    POST   /api/tasks               - Create a task
    PUT    /api/tasks/<id>          - Partially update a task
    DELETE /api/tasks/<id>          - Delete a task
"""

from __future__ import annotations

import logging
import os

from flask import Blueprint, Response, current_app, g, jsonify, request

from ..auth import require_auth
from ..entities import MAX_ID, Category, Task
from ..errors import NotFoundError, ValidationError
from ..schemas import (
    validate_insert_category,
    validate_insert_task,
    validate_update_category,
    validate_update_task,
)
from ..storage import get_storage

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def _owned_category(category_id: int) -> Category:
    """Fetch a category belonging to the current user or raise 404."""
    category = get_storage().get_category(category_id)
    if category is None or category.user_id != g.user_id:
        raise NotFoundError("Category not found")
    return category


def _owned_task(task_id: int) -> Task:
    """Fetch a task belonging to the current user or raise 404."""
    task = get_storage().get_task(task_id)
    if task is None or task.user_id != g.user_id:
        raise NotFoundError("Task not found")
    return task


def _check_category_reference(category_id: int) -> None:
    """
    Check that a task may be filed under *category_id*.

    Tasks have always been accepted against any category id.  With
    ``ENFORCE_CATEGORY_OWNERSHIP`` enabled a category the caller does not
    own is rejected; otherwise the mismatch is only logged.
    """
    category = get_storage().get_category(category_id)
    if category is not None and category.user_id == g.user_id:
        return

    if current_app.config.get("ENFORCE_CATEGORY_OWNERSHIP"):
        raise ValidationError(
            [{"field": "categoryId", "message": "Category not found"}]
        )
    logger.warning(
        "User %s filed a task under category %s which they do not own",
        g.user_id, category_id,
    )


def _parse_category_filter(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if not 1 <= value <= MAX_ID:
        raise ValidationError(
            [{"field": "categoryId", "message": "'categoryId' must be a positive integer"}]
        )
    return value


# -----------------------------------------------------------------------------
# API Endpoints
# -----------------------------------------------------------------------------

@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for deployment verification."""
    return jsonify({
        "status": "healthy",
        "storage": current_app.config.get("STORAGE_BACKEND", "unknown"),
        "environment": os.getenv("ENVIRONMENT", "unknown"),
    }), 200


@api_bp.route("/categories", methods=["GET"])
@require_auth
def get_categories() -> tuple[Response, int]:
    """List the authenticated user's categories ordered by id."""
    categories = get_storage().list_categories(g.user_id)
    return jsonify([category.to_dict() for category in categories]), 200


@api_bp.route("/categories", methods=["POST"])
@require_auth
def create_category() -> tuple[Response, int]:
    """
    Create a new category.

    Request Body (JSON):
        name: Category name (required)
        color: One of blue, green, purple, red, amber (optional, default: blue)
        description: Free text (optional, default: "")

    Returns:
        JSON response with created category and 201 status code,
        or error message and 400 if validation fails.
    """
    logger.info("POST /api/categories - Creating category for user %s", g.user_id)

    data = validate_insert_category(request.get_json(silent=True))
    category = get_storage().create_category({**data, "user_id": g.user_id})

    logger.info("Created category with ID: %s", category.id)
    return jsonify(category.to_dict()), 201


@api_bp.route("/categories/<int:category_id>", methods=["PUT"])
@require_auth
def update_category(category_id: int) -> tuple[Response, int]:
    """Apply a partial update to one of the user's categories."""
    logger.info("PUT /api/categories/%s - Updating category", category_id)

    _owned_category(category_id)
    changes = validate_update_category(request.get_json(silent=True))

    category = get_storage().update_category(category_id, changes)
    if category is None:
        raise NotFoundError("Category not found")
    return jsonify(category.to_dict()), 200


@api_bp.route("/categories/<int:category_id>", methods=["DELETE"])
@require_auth
def delete_category(category_id: int) -> tuple[Response, int]:
    """Delete a category; every task filed under it is deleted too."""
    logger.info("DELETE /api/categories/%s - Deleting category", category_id)

    _owned_category(category_id)
    if not get_storage().delete_category(category_id):
        raise NotFoundError("Category not found")
    return jsonify({"message": "Category deleted successfully"}), 200


@api_bp.route("/tasks", methods=["GET"])
@require_auth
def get_tasks() -> tuple[Response, int]:
    """
    List the authenticated user's tasks, newest first.

    Query Parameters:
        search: Case-insensitive substring of title or description. Takes
            precedence over ``categoryId``.
        categoryId: Only tasks filed under this category.

    Returns:
        JSON array of tasks and 200 status code.
    """
    storage = get_storage()
    search = request.args.get("search", "")
    category_id = request.args.get("categoryId", "")

    if search:
        tasks = storage.search_tasks(g.user_id, search)
    elif category_id:
        tasks = storage.list_tasks_by_category(_parse_category_filter(category_id), g.user_id)
    else:
        tasks = storage.list_tasks(g.user_id)

    logger.info("Found %d tasks for user %s", len(tasks), g.user_id)
    return jsonify([task.to_dict() for task in tasks]), 200


@api_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task() -> tuple[Response, int]:
    """
    Create a new task.

    Request Body (JSON):
        title: Task title (required)
        categoryId: Category id (required)
        description: Task description (optional)
        priority: low, medium or high (optional, default: medium)
        dueDate: YYYY-MM-DD (optional)

    Returns:
        JSON response with created task and 201 status code,
        or error message and 400 if validation fails.
    """
    logger.info("POST /api/tasks - Creating task for user %s", g.user_id)

    data = validate_insert_task(request.get_json(silent=True))
    _check_category_reference(data["category_id"])
    task = get_storage().create_task({**data, "user_id": g.user_id})

    logger.info("Created task with ID: %s", task.id)
    return jsonify(task.to_dict()), 201


@api_bp.route("/tasks/<int:task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: int) -> tuple[Response, int]:
    """
    Apply a partial update to one of the user's tasks.

    Any of ``title``, ``description``, ``categoryId``, ``priority``,
    ``dueDate`` and ``completed`` may be sent.  Moving a task to another
    category is a ``categoryId`` update.
    """
    logger.info("PUT /api/tasks/%s - Updating task", task_id)

    _owned_task(task_id)
    changes = validate_update_task(request.get_json(silent=True))
    if "category_id" in changes:
        _check_category_reference(changes["category_id"])

    task = get_storage().update_task(task_id, changes)
    if task is None:
        raise NotFoundError("Task not found")
    return jsonify(task.to_dict()), 200


@api_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: int) -> tuple[Response, int]:
    """Delete one of the user's tasks."""
    logger.info("DELETE /api/tasks/%s - Deleting task", task_id)

    _owned_task(task_id)
    if not get_storage().delete_task(task_id):
        raise NotFoundError("Task not found")
    return jsonify({"message": "Task deleted successfully"}), 200
