"""Grade learner responses against a validated lesson."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .models import Lesson, McqStep, ScoreReport, Step, StepScore

logger = logging.getLogger(__name__)


class UnknownLessonError(KeyError):
    """Raised when scoring a lesson that was never validated or registered."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


def score(lesson: Lesson, responses: Mapping[str, object] | None) -> ScoreReport:
    """Score responses keyed by step id.

    Text steps earn their points when their id is present at all. Multiple-choice
    steps earn their points only for an exact match with the correct answer.
    Responses for unknown step ids are ignored and missing ones earn nothing.
    """
    if not isinstance(lesson, Lesson):
        raise UnknownLessonError(f"Expected a validated lesson, got {type(lesson).__name__}.")

    if responses is None:
        responses = {}
    elif not isinstance(responses, Mapping):
        logger.warning(
            "Ignoring responses of type %s for lesson '%s'; scoring as unanswered.",
            type(responses).__name__,
            lesson.name,
        )
        responses = {}

    per_step: dict[str, StepScore] = {}
    for step in lesson.steps:
        per_step[step.id] = StepScore(earned=_earned(step, responses), possible=step.points)

    return ScoreReport(
        total=sum(item.earned for item in per_step.values()),
        max=lesson.max_score,
        per_step=per_step,
    )


def _earned(step: Step, responses: Mapping[str, object]) -> int:
    """Return points earned for one step."""
    if step.id not in responses:
        return 0
    if isinstance(step, McqStep):
        return step.points if responses[step.id] == step.correct_answer else 0
    return step.points
