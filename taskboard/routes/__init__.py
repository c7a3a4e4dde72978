"""
Routes package for the Taskboard application.

This package contains route blueprints:
- auth: registration, login and current-user endpoints
- api: health check plus category and task CRUD
- transfer: JSON export and import of a user's data
"""
