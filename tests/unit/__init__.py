"""Unit tests for Taskboard."""
