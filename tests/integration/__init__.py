"""
API test package for Taskboard.

Tests use the Flask test client and run once per storage backend.
"""
