"""Application service exposing the immutable course content set."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from . import scoring
from .content_loader import DuplicateLessonError, load_chapters, load_chapters_from_dir
from .models import Chapter, Lesson, McqStep, ScoreReport, Step
from .scoring import UnknownLessonError


@dataclass(frozen=True)
class LessonReference:
    """Lesson metadata for listings."""

    chapter_id: str
    position: int
    name: str
    step_count: int
    mcq_count: int
    max_score: int


class CourseService:
    """Read-only access to chapters and lessons in authored order."""

    def __init__(self, chapters: Iterable[Chapter]) -> None:
        """Initialize service with already loaded chapters."""
        self.chapters: tuple[Chapter, ...] = tuple(chapters)
        self.lessons: tuple[Lesson, ...] = tuple(lesson for chapter in self.chapters for lesson in chapter.lessons)
        self._by_name: dict[str, Lesson] = {}
        self._chapter_by_name: dict[str, Chapter] = {}
        for chapter in self.chapters:
            for lesson in chapter.lessons:
                if lesson.name in self._by_name:
                    raise DuplicateLessonError(f"Duplicate lesson name: {lesson.name}")
                self._by_name[lesson.name] = lesson
                self._chapter_by_name[lesson.name] = chapter

    @classmethod
    def from_bundled(cls) -> CourseService:
        """Create service over the bundled lessons."""
        return cls(load_chapters())

    @classmethod
    def from_dir(cls, path: Path | str) -> CourseService:
        """Create service over lessons in a content directory."""
        return cls(load_chapters_from_dir(Path(path)))

    @property
    def max_score(self) -> int:
        """Maximum achievable score over the whole course."""
        return sum(lesson.max_score for lesson in self.lessons)

    def get_lesson(self, name: str) -> Lesson | None:
        """Get lesson by name."""
        return self._by_name.get(name)

    def chapter_of(self, name: str) -> Chapter | None:
        """Get the chapter a lesson belongs to."""
        return self._chapter_by_name.get(name)

    def list_lesson_references(self) -> list[LessonReference]:
        """Return lesson metadata in authored order."""
        references: list[LessonReference] = []
        for chapter in self.chapters:
            for position, lesson in enumerate(chapter.lessons, start=1):
                references.append(
                    LessonReference(
                        chapter_id=chapter.id,
                        position=position,
                        name=lesson.name,
                        step_count=len(lesson.steps),
                        mcq_count=len([step for step in lesson.steps if isinstance(step, McqStep)]),
                        max_score=lesson.max_score,
                    )
                )
        return references

    def next_step(self, lesson_name: str, step_id: str) -> Step | None:
        """Return the step after `step_id`, or None at the end of the lesson."""
        lesson = self._require(lesson_name)
        index = lesson.index_of(step_id)
        return lesson.steps[index + 1] if index + 1 < len(lesson.steps) else None

    def previous_step(self, lesson_name: str, step_id: str) -> Step | None:
        """Return the step before `step_id`, or None at the start of the lesson."""
        lesson = self._require(lesson_name)
        index = lesson.index_of(step_id)
        return lesson.steps[index - 1] if index > 0 else None

    def score(self, lesson: Lesson | str, responses: Mapping[str, object] | None) -> ScoreReport:
        """Score responses for a registered lesson, given by value or name."""
        if isinstance(lesson, str):
            return scoring.score(self._require(lesson), responses)
        if not isinstance(lesson, Lesson) or self._by_name.get(lesson.name) != lesson:
            raise UnknownLessonError(f"Lesson is not part of this course: {getattr(lesson, 'name', lesson)!r}")
        return scoring.score(lesson, responses)

    def _require(self, name: str) -> Lesson:
        lesson = self._by_name.get(name)
        if lesson is None:
            raise UnknownLessonError(name)
        return lesson
