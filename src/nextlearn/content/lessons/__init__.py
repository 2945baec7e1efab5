"""Lesson JSON files grouped by chapter directory."""
