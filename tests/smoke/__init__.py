"""Smoke tests for Taskboard."""
