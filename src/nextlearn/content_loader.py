"""Load lesson content from bundled JSON resources.

Content is laid out as ``<order>-<chapter>/<order>-<lesson>.json``. The numeric
prefixes give chapter and lesson order; every file holds one lesson record.
"""

from __future__ import annotations

import json
import logging
import re
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from .models import Chapter, Lesson, McqStep
from .validation import LessonValidationError, validate_lesson

CONTENT_PACKAGE = "nextlearn.content.lessons"

logger = logging.getLogger(__name__)

_ORDERED_NAME = re.compile(r"^(\d+)-(.+)$")


class DuplicateLessonError(ValueError):
    """Raised when two lessons or chapters in one content set share an identifier."""


def load_chapters() -> list[Chapter]:
    """Load bundled chapters."""
    return _load_tree(resources.files(CONTENT_PACKAGE))


def load_chapters_from_dir(path: Path) -> list[Chapter]:
    """Load chapters from directory for tests/tools."""
    if not path.is_dir():
        raise ValueError(f"Content directory '{path}' does not exist.")
    return _load_tree(path)


def check_chapters(path: Path | None = None) -> tuple[list[Chapter], list[ValueError]]:
    """Validate every lesson file, collecting problems instead of stopping at the first.

    Returns the chapters that loaded cleanly and every error found. Used by
    authoring tools; normal loading stays fail-closed.
    """
    if path is None:
        root: Traversable = resources.files(CONTENT_PACKAGE)
    elif not path.is_dir():
        return [], [ValueError(f"Content directory '{path}' does not exist.")]
    else:
        root = path
    errors: list[ValueError] = []
    try:
        chapters = _load_tree(root, errors)
    except ValueError as exc:
        errors.append(exc)
        chapters = []
    return chapters, errors


def lesson_to_dict(lesson: Lesson) -> dict[str, Any]:
    """Serialize a lesson back to the JSON interchange format."""
    steps: list[dict[str, Any]] = []
    for step in lesson.steps:
        raw: dict[str, Any] = {"id": step.id, "type": step.type, "points": step.points}
        if isinstance(step, McqStep):
            raw["answers"] = list(step.answers)
            raw["correctAnswer"] = step.correct_answer
        raw["text"] = step.text
        steps.append(raw)
    return {"name": lesson.name, "intro": lesson.intro, "steps": steps}


def _load_tree(root: Traversable, errors: list[ValueError] | None = None) -> list[Chapter]:
    """Build ordered chapters from a content root.

    Without ``errors`` the first problem is raised. With it, problems are
    appended and the offending chapter or lesson is skipped.
    """
    chapters: list[Chapter] = []
    chapter_sources: dict[str, str] = {}
    lesson_sources: dict[str, str] = {}

    for order, slug, entry in _ordered_entries(root, directories=True):
        previous_chapter = chapter_sources.get(slug)
        if previous_chapter is not None:
            duplicate = DuplicateLessonError(f"Duplicate chapter id: {slug} (in {previous_chapter} and {entry.name})")
            if errors is None:
                raise duplicate
            errors.append(duplicate)
            continue
        chapter_sources[slug] = entry.name

        try:
            lesson_entries = _ordered_entries(entry, directories=False)
        except ValueError as exc:
            if errors is None:
                raise
            errors.append(exc)
            continue

        lessons: list[Lesson] = []
        for _, _, lesson_entry in lesson_entries:
            source = f"{entry.name}/{lesson_entry.name}"
            try:
                lesson = _load_lesson(lesson_entry, source)
            except ValueError as exc:
                if errors is None:
                    raise
                errors.append(exc)
                continue
            previous = lesson_sources.get(lesson.name)
            if previous is not None:
                duplicate = DuplicateLessonError(f"Duplicate lesson name: {lesson.name} (in {previous} and {source})")
                if errors is None:
                    raise duplicate
                errors.append(duplicate)
                continue
            lesson_sources[lesson.name] = source
            lessons.append(lesson)
            logger.debug("Loaded lesson '%s' from %s (%d steps).", lesson.name, source, len(lesson.steps))

        chapters.append(Chapter(id=slug, title=_title_from_slug(slug), order=order, lessons=tuple(lessons)))

    logger.info("Loaded %d lessons in %d chapters.", len(lesson_sources), len(chapters))
    return chapters


def _load_lesson(entry: Traversable, source: str) -> Lesson:
    """Read and validate one lesson file."""
    try:
        raw = json.loads(entry.read_text(encoding="utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise ValueError(f"Lesson file '{source}' is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Lesson file '{source}' is not valid JSON: {exc}") from exc
    try:
        return validate_lesson(raw)
    except LessonValidationError as exc:
        logger.error("Rejected lesson file %s:\n%s", source, exc)
        raise


def _ordered_entries(parent: Traversable, *, directories: bool) -> list[tuple[int, str, Traversable]]:
    """Return (order, slug, entry) for chapter directories or lesson files, sorted by order."""
    entries: list[tuple[int, str, Traversable]] = []
    for entry in parent.iterdir():
        name = entry.name
        if name.startswith((".", "_")):
            continue
        if directories:
            if not entry.is_dir():
                continue
            stem = name
        else:
            if not entry.is_file() or not name.endswith(".json"):
                continue
            stem = name[: -len(".json")]
        match = _ORDERED_NAME.match(stem)
        if match is None:
            kind = "Chapter directory" if directories else "Lesson file"
            raise ValueError(f"{kind} '{name}' must start with a numeric '<order>-' prefix.")
        entries.append((int(match.group(1)), match.group(2), entry))
    entries.sort(key=lambda item: (item[0], item[1]))
    return entries


def _title_from_slug(slug: str) -> str:
    return slug.replace("-", " ").title()
