"""nextlearn: Next.js lesson content with schema validation and quiz scoring."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from .models import Chapter, Lesson, McqStep, ScoreReport, Step, StepScore, TextStep
from .scoring import UnknownLessonError, score
from .service import CourseService
from .validation import LessonValidationError, Violation, validate_lesson

__all__ = [
    "Chapter",
    "CourseService",
    "Lesson",
    "LessonValidationError",
    "McqStep",
    "ScoreReport",
    "Step",
    "StepScore",
    "TextStep",
    "UnknownLessonError",
    "Violation",
    "__version__",
    "score",
    "validate_lesson",
]


def _source_version() -> str | None:
    """Version declared by a source checkout's pyproject.toml, if there is one."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        with pyproject.open("rb") as handle:
            declared = tomllib.load(handle).get("project", {}).get("version")
    except (OSError, tomllib.TOMLDecodeError):
        return None
    return declared if isinstance(declared, str) else None


def _installed_version() -> str:
    try:
        return version("nextlearn")
    except PackageNotFoundError:
        return "0+unknown"


__version__ = _source_version() or _installed_version()
