"""
Smoke-test fixtures.

Provides the ``smoke_base_url`` session-scoped fixture.  When
``TEST_BASE_URL`` is set the suite runs against that deployment; otherwise
a throwaway server backed by in-memory storage is started on a free local
port for the duration of the session.

Key Concepts Demonstrated:
- Session-scoped URL fixtures to share a single live server across tests
- Reusing an existing deployment when one is configured
"""

from __future__ import annotations

import os
import threading
from collections.abc import Generator

import pytest
import requests
from werkzeug.serving import make_server

from taskboard import create_app
from taskboard.storage import MemoryStorage


def _wait_until_healthy(base_url: str) -> None:
    response = requests.get(f"{base_url}/api/health", timeout=5)
    response.raise_for_status()


@pytest.fixture(scope="session")
def smoke_base_url() -> Generator[str, None, None]:
    """Yield the base URL of a running Taskboard server."""
    configured = os.getenv("TEST_BASE_URL")
    if configured:
        base_url = configured.rstrip("/")
        try:
            _wait_until_healthy(base_url)
        except requests.RequestException as exc:
            pytest.skip(f"Taskboard at {base_url} is not reachable: {exc}")
        yield base_url
        return

    app = create_app("testing", storage=MemoryStorage())
    server = make_server("127.0.0.1", 0, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    base_url = f"http://127.0.0.1:{server.port}"
    try:
        _wait_until_healthy(base_url)
        yield base_url
    finally:
        server.shutdown()
        thread.join(timeout=5)
