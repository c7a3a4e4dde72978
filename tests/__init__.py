"""
Test suite for the Taskboard application.

This package contains:
- unit/: validation, storage, authentication and transfer logic
- integration/: HTTP endpoints and the API client via the Flask test client
- security/: token handling, mass assignment and per-user isolation
- smoke/: critical-path checks against a running server
- performance/: Locust load profile (run with the ``locust`` CLI)
"""
