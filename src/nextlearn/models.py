"""Core domain models for lessons, quiz steps, and scores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

STEP_TYPES = ("text", "mcq")


@dataclass(frozen=True)
class TextStep:
    """Informational step, complete once viewed."""

    type: ClassVar[str] = "text"

    id: str
    points: int
    text: str


@dataclass(frozen=True)
class McqStep:
    """Multiple-choice question with exactly one correct answer."""

    type: ClassVar[str] = "mcq"

    id: str
    points: int
    text: str
    answers: tuple[str, ...]
    correct_answer: str


Step = TextStep | McqStep


@dataclass(frozen=True)
class Lesson:
    """One tutorial chapter: title, markdown intro, and ordered steps."""

    name: str
    intro: str
    steps: tuple[Step, ...]

    @property
    def max_score(self) -> int:
        """Sum of every step's points."""
        return sum(step.points for step in self.steps)

    @property
    def step_ids(self) -> tuple[str, ...]:
        return tuple(step.id for step in self.steps)

    def index_of(self, step_id: str) -> int:
        """Return the position of a step, raising KeyError when absent."""
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        raise KeyError(step_id)

    def get_step(self, step_id: str) -> Step | None:
        """Get step by id."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None


@dataclass(frozen=True)
class Chapter:
    """Ordered group of lessons taken from the content directory layout."""

    id: str
    title: str
    order: int
    lessons: tuple[Lesson, ...]


@dataclass(frozen=True)
class StepScore:
    """Earned and possible points for one step."""

    earned: int
    possible: int


@dataclass(frozen=True)
class ScoreReport:
    """Graded result of one set of learner responses against a lesson."""

    total: int
    max: int
    per_step: dict[str, StepScore]
