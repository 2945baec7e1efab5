"""Validate raw lesson records into typed lessons.

Raw records use the JSON interchange format::

    {"name": str, "intro": str, "steps": [{"id", "type", "points", "text", "answers"?, "correctAnswer"?}]}

`validate_lesson` checks every field of every step and collects all problems
before raising, so one run reports everything wrong with a lesson file.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .models import STEP_TYPES, Lesson, McqStep, Step, TextStep

SCHEMA_VIOLATION = "schema_violation"
DUPLICATE_STEP_ID = "duplicate_step_id"
INVALID_CORRECT_ANSWER = "invalid_correct_answer"

UNNAMED_LESSON = "<unnamed>"
MIN_ANSWERS = 2


@dataclass(frozen=True)
class Violation:
    """One broken rule in a raw lesson record."""

    kind: str
    lesson: str
    field: str
    rule: str
    step_id: str | None = None
    step_indices: tuple[int, ...] = ()

    @property
    def step_index(self) -> int | None:
        """Index of the offending step (the later one for duplicates)."""
        return self.step_indices[-1] if self.step_indices else None

    def describe(self) -> str:
        """Render a one-line diagnostic."""
        location = f"lesson '{self.lesson}'"
        if self.step_indices:
            label = "steps" if len(self.step_indices) > 1 else "step"
            location += f", {label} " + ", ".join(str(index) for index in self.step_indices)
        if self.step_id is not None:
            location += f" (id '{self.step_id}')"
        return f"{location}: {self.field} {self.rule} [{self.kind}]"


class LessonValidationError(ValueError):
    """Raised when a raw lesson record does not match the schema."""

    def __init__(self, lesson: str, violations: Sequence[Violation]) -> None:
        self.lesson = lesson
        self.violations = tuple(violations)
        lines = [f"Lesson '{lesson}' failed validation with {len(self.violations)} problem(s):"]
        lines.extend(f"- {violation.describe()}" for violation in self.violations)
        super().__init__("\n".join(lines))

    @property
    def kinds(self) -> set[str]:
        return {violation.kind for violation in self.violations}


class _Collector:
    """Accumulate violations for one lesson."""

    def __init__(self, lesson: str) -> None:
        self.lesson = lesson
        self.violations: list[Violation] = []

    def add(
        self,
        field: str,
        rule: str,
        *,
        kind: str = SCHEMA_VIOLATION,
        step_id: str | None = None,
        indices: tuple[int, ...] = (),
    ) -> None:
        self.violations.append(
            Violation(kind=kind, lesson=self.lesson, field=field, rule=rule, step_id=step_id, step_indices=indices)
        )


def validate_lesson(raw: object) -> Lesson:
    """Validate one raw lesson record and return the typed lesson.

    Raises `LessonValidationError` listing every violation found.
    """
    if not isinstance(raw, Mapping):
        errors = _Collector(UNNAMED_LESSON)
        errors.add("<root>", f"must be an object, got {type(raw).__name__}")
        raise LessonValidationError(UNNAMED_LESSON, errors.violations)

    name = raw.get("name")
    errors = _Collector(name if _is_non_empty_str(name) else UNNAMED_LESSON)

    if "name" not in raw:
        errors.add("name", "is required")
    elif not _is_non_empty_str(name):
        errors.add("name", "must be a non-empty string")

    intro = raw.get("intro")
    if "intro" not in raw:
        errors.add("intro", "is required")
    elif not isinstance(intro, str):
        errors.add("intro", "must be a string")

    raw_steps = raw.get("steps")
    steps: list[Step] = []
    if "steps" not in raw:
        errors.add("steps", "is required")
    elif not _is_sequence(raw_steps):
        errors.add("steps", "must be a list")
    elif len(raw_steps) < 1:
        errors.add("steps", "must contain at least one step")
    else:
        seen: dict[str, int] = {}
        for index, raw_step in enumerate(raw_steps):
            step = _validate_step(index, raw_step, seen, errors)
            if step is not None:
                steps.append(step)

    if errors.violations:
        raise LessonValidationError(errors.lesson, errors.violations)
    return Lesson(name=name, intro=intro, steps=tuple(steps))


def _validate_step(index: int, raw: object, seen: dict[str, int], errors: _Collector) -> Step | None:
    """Validate one step, returning None when it reported any violation."""
    at = (index,)
    if not isinstance(raw, Mapping):
        errors.add("step", f"must be an object, got {type(raw).__name__}", indices=at)
        return None

    reported_before = len(errors.violations)
    step_id = raw.get("id")
    reported_id = step_id if isinstance(step_id, str) else None

    if "id" not in raw:
        errors.add("id", "is required", indices=at)
    elif not _is_non_empty_str(step_id):
        errors.add("id", "must be a non-empty string", step_id=reported_id, indices=at)
    elif step_id in seen:
        errors.add(
            "id",
            f"duplicates the id of step {seen[step_id]}",
            kind=DUPLICATE_STEP_ID,
            step_id=step_id,
            indices=(seen[step_id], index),
        )
    else:
        seen[step_id] = index

    step_type = raw.get("type")
    if step_type not in STEP_TYPES:
        errors.add("type", "must be one of: " + ", ".join(STEP_TYPES), step_id=reported_id, indices=at)

    points = raw.get("points")
    if not isinstance(points, int) or isinstance(points, bool) or points < 0:
        errors.add("points", "must be a non-negative integer", step_id=reported_id, indices=at)

    text = raw.get("text")
    if not _is_non_empty_str(text):
        errors.add("text", "must be a non-empty string", step_id=reported_id, indices=at)

    if step_type == "mcq":
        _validate_choices(raw, reported_id, at, errors)

    if len(errors.violations) > reported_before:
        return None
    if step_type == "text":
        return TextStep(id=step_id, points=points, text=text)
    return McqStep(
        id=step_id,
        points=points,
        text=text,
        answers=tuple(raw["answers"]),
        correct_answer=raw["correctAnswer"],
    )


def _validate_choices(raw: Mapping[str, object], step_id: str | None, at: tuple[int, ...], errors: _Collector) -> None:
    """Check `answers` and `correctAnswer` of a multiple-choice step."""
    answers = raw.get("answers")
    comparable = False
    if not _is_sequence(answers) or not all(isinstance(answer, str) for answer in answers):
        errors.add("answers", "must be a list of strings", step_id=step_id, indices=at)
    elif len(answers) < MIN_ANSWERS:
        errors.add("answers", f"must contain at least {MIN_ANSWERS} choices", step_id=step_id, indices=at)
    else:
        comparable = True
        if len(set(answers)) != len(answers):
            errors.add("answers", "must not contain duplicate choices", step_id=step_id, indices=at)

    correct_answer = raw.get("correctAnswer")
    if not isinstance(correct_answer, str):
        errors.add("correctAnswer", "must be a string", step_id=step_id, indices=at)
    elif comparable:
        matches = sum(1 for answer in answers if answer == correct_answer)
        if matches != 1:
            errors.add(
                "correctAnswer",
                f"must match exactly one entry of answers (matched {matches})",
                kind=INVALID_CORRECT_ANSWER,
                step_id=step_id,
                indices=at,
            )


def _is_non_empty_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
