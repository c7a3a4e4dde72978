"""
Bulk export and import of a user's categories and tasks.

The export document is the same shape the import accepts, so a file saved
from one account can be loaded into another.  Import is not transactional:
rows are inserted one at a time and a storage failure part-way through
leaves the earlier rows in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .schemas import ImportPayload
from .storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    categories: int = 0
    tasks: int = 0


def export_data(storage: Storage, user_id: int) -> dict[str, Any]:
    """Return every category and task owned by *user_id* plus an export timestamp."""
    categories = storage.list_categories(user_id)
    tasks = storage.list_tasks(user_id)
    return {
        "categories": [category.to_dict() for category in categories],
        "tasks": [task.to_dict() for task in tasks],
        "exportDate": datetime.now(timezone.utc).isoformat(),
    }


def foreign_category_references(
    storage: Storage, user_id: int, payload: ImportPayload
) -> list[dict[str, str]]:
    """
    Find tasks in *payload* that would be filed under someone else's category.

    A task pointing at a category defined in the document is always fine,
    since that category is created for *user_id*.  Any other id must name
    one of the user's existing categories.

    Returns:
        One ``{"field", "message"}`` issue per offending task, addressed as
        ``tasks[i].categoryId``.
    """
    defined = {
        imported.source_id
        for imported in payload.categories
        if imported.source_id is not None
    }
    issues = []
    for index, imported in enumerate(payload.tasks):
        if imported.category_id in defined:
            continue
        category = storage.get_category(imported.category_id)
        if category is None or category.user_id != user_id:
            issues.append(
                {"field": f"tasks[{index}].categoryId", "message": "Category not found"}
            )
    return issues


def import_data(storage: Storage, user_id: int, payload: ImportPayload) -> ImportSummary:
    """
    Insert *payload* into *user_id*'s account.

    Categories are created first and their ids in the source document are
    mapped to the newly assigned ids.  Each task's ``category_id`` is then
    translated through that map; an id the document never defined is kept
    as-is.  Every record belongs to *user_id* whatever the source said.

    Raises:
        StorageError: On the first failed insert; earlier inserts stay.
    """
    summary = ImportSummary()
    category_map: dict[int, int] = {}

    for imported in payload.categories:
        category = storage.create_category(
            {
                "name": imported.name,
                "color": imported.color,
                "description": imported.description,
                "user_id": user_id,
            }
        )
        if imported.source_id is not None:
            category_map[imported.source_id] = category.id
        summary.categories += 1

    for imported in payload.tasks:
        task = storage.create_task(
            {
                "title": imported.title,
                "description": imported.description,
                "category_id": category_map.get(imported.category_id, imported.category_id),
                "priority": imported.priority,
                "due_date": imported.due_date,
                "user_id": user_id,
            }
        )
        if imported.completed:
            storage.update_task(task.id, {"completed": True})
        summary.tasks += 1

    logger.info(
        "Imported %d categories and %d tasks for user %s",
        summary.categories, summary.tasks, user_id,
    )
    return summary
