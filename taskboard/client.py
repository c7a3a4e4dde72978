"""
HTTP client for the Taskboard API.

Wraps every endpoint the web UI calls, so scripts and other services can
drive an account the same way the browser does: log in once, then list,
create, move, complete and delete tasks, or move a whole account between
servers with :meth:`TaskboardClient.export_to_file` and
:meth:`TaskboardClient.import_from_file`.

Key Concepts Demonstrated:
- Centralised request helper adding the bearer header and timeout
- Converting non-2xx replies into a typed exception
- Category reassignment expressed as a partial task update
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    """
    A request the server answered with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the server.
        message: The ``message`` field of the error body, when present.
        errors: Field-level validation issues, when present.
    """

    def __init__(self, status_code: int, message: str, errors: list[dict[str, str]] | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class TaskboardClient:
    """
    Client for one Taskboard server.

    Args:
        base_url: Server root, e.g. ``"http://localhost:5000"``.
        token: Bearer token from an earlier login, if any.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, base_url: str, token: str | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            ApiError: If the server answers with a non-2xx status.
            requests.RequestException: For network-level failures.
        """
        response = requests.request(
            method=method,
            url=self._url(path),
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs,
        )
        try:
            body = response.json()
        except ValueError:
            body = None

        if not 200 <= response.status_code < 300:
            message = body.get("message", "Request failed") if isinstance(body, dict) else "Request failed"
            errors = body.get("errors") if isinstance(body, dict) else None
            logger.warning("%s %s failed with %s: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message, errors)
        return body

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def register(self, email: str, username: str, fullname: str, password: str) -> dict[str, Any]:
        """Create an account; the returned token is kept for later calls."""
        body = self._request(
            "POST",
            "/api/auth/register",
            json={"email": email, "username": username, "fullname": fullname, "password": password},
        )
        self.token = body["token"]
        return body["user"]

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in; the returned token is kept for later calls."""
        body = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = body["token"]
        return body["user"]

    def logout(self) -> None:
        # Tokens are stateless; forgetting it is all there is to do
        self.token = None

    def me(self) -> dict[str, Any]:
        return self._request("GET", "/api/auth/me")["user"]

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def list_categories(self) -> list[dict[str, Any]]:
        return self._request("GET", "/api/categories")

    def create_category(self, name: str, color: str | None = None, description: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name}
        if color is not None:
            payload["color"] = color
        if description is not None:
            payload["description"] = description
        return self._request("POST", "/api/categories", json=payload)

    def update_category(self, category_id: int, **changes: Any) -> dict[str, Any]:
        return self._request("PUT", f"/api/categories/{category_id}", json=changes)

    def delete_category(self, category_id: int) -> str:
        """Delete a category and, on the server, every task in it."""
        return self._request("DELETE", f"/api/categories/{category_id}")["message"]

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def list_tasks(self, category_id: int | None = None, search: str | None = None) -> list[dict[str, Any]]:
        """
        List tasks, newest first.

        Args:
            category_id: Only tasks in this category.
            search: Case-insensitive text to look for in title or
                description; the server ignores ``category_id`` when set.
        """
        params: dict[str, Any] = {}
        if category_id is not None:
            params["categoryId"] = category_id
        if search:
            params["search"] = search
        return self._request("GET", "/api/tasks", params=params)

    def create_task(
        self,
        title: str,
        category_id: int,
        description: str | None = None,
        priority: str | None = None,
        due_date: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": title, "categoryId": category_id}
        if description is not None:
            payload["description"] = description
        if priority is not None:
            payload["priority"] = priority
        if due_date is not None:
            payload["dueDate"] = due_date
        return self._request("POST", "/api/tasks", json=payload)

    def update_task(self, task_id: int, **changes: Any) -> dict[str, Any]:
        """Send a partial update using the API's camelCase field names."""
        return self._request("PUT", f"/api/tasks/{task_id}", json=changes)

    def toggle_task(self, task: dict[str, Any]) -> dict[str, Any]:
        """Flip the completion flag of a task as last seen by the caller."""
        return self.update_task(task["id"], completed=not task["completed"])

    def move_task(self, task_id: int, category_id: int) -> dict[str, Any]:
        """Refile a task under another category (the UI's drag-and-drop)."""
        return self.update_task(task_id, categoryId=category_id)

    def delete_task(self, task_id: int) -> str:
        return self._request("DELETE", f"/api/tasks/{task_id}")["message"]

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def export_data(self) -> dict[str, Any]:
        return self._request("GET", "/api/export")

    def export_to_file(self, path: str | Path) -> Path:
        """Download the account's data and write it to *path* as JSON."""
        target = Path(path)
        target.write_text(json.dumps(self.export_data(), indent=2), encoding="utf-8")
        logger.info("Exported data to %s", target)
        return target

    def import_data(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "POST",
            "/api/import",
            json={"categories": payload.get("categories", []), "tasks": payload.get("tasks", [])},
        )

    def import_from_file(self, path: str | Path) -> dict[str, Any]:
        """Load a file written by :meth:`export_to_file` into this account."""
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return self.import_data(payload)
