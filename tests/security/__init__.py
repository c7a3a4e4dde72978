"""Security tests for Taskboard."""
