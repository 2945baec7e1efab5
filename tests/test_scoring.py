import logging
from typing import Any

import pytest

from nextlearn.models import StepScore
from nextlearn.scoring import UnknownLessonError, score
from nextlearn.validation import validate_lesson


def test_all_steps_earned(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    report = score(lesson, {"a": "seen", "b": "y"})
    assert report.total == 25
    assert report.max == 25
    assert report.per_step == {"a": StepScore(earned=5, possible=5), "b": StepScore(earned=20, possible=20)}


def test_missing_text_and_wrong_answer_earn_nothing(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    report = score(lesson, {"b": "x"})
    assert (report.total, report.max) == (0, 25)
    assert report.per_step["a"].earned == 0
    assert report.per_step["b"].earned == 0


def test_answer_matching_is_exact(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    for near_miss in ["Y", " y", "y ", "y\n"]:
        assert score(lesson, {"b": near_miss}).per_step["b"].earned == 0
    assert score(lesson, {"b": "y"}).per_step["b"].earned == 20


def test_non_string_answer_never_matches() -> None:
    lesson = validate_lesson(
        {
            "name": "Numbers",
            "intro": "",
            "steps": [
                {"id": "q", "type": "mcq", "points": 3, "text": "2+2?", "answers": ["3", "4"], "correctAnswer": "4"}
            ],
        }
    )
    assert score(lesson, {"q": 4}).total == 0


def test_text_step_counts_on_presence_regardless_of_value(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    assert score(lesson, {"a": None}).per_step["a"].earned == 5
    assert score(lesson, {"a": ""}).per_step["a"].earned == 5


def test_unknown_step_ids_are_ignored(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    responses = {"a": "seen", "b": "x"}
    with_extra = dict(responses, **{"nonexistent-step-id": "x"})
    assert score(lesson, with_extra) == score(lesson, responses)


def test_scoring_is_idempotent_and_bounded(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    cases: list[dict[str, object]] = [{}, {"a": "seen"}, {"b": "y"}, {"a": 1, "b": "z"}, {"a": "seen", "b": "y"}]
    for responses in cases:
        first = score(lesson, responses)
        second = score(lesson, responses)
        assert first == second
        assert 0 <= first.total <= first.max
        assert first.max == sum(step.points for step in lesson.steps)


def test_per_step_follows_lesson_order(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    assert list(score(lesson, {"b": "y", "a": "seen"}).per_step) == ["a", "b"]


def test_none_responses_score_zero(lesson_payload: dict[str, Any]) -> None:
    lesson = validate_lesson(lesson_payload)
    report = score(lesson, None)
    assert (report.total, report.max) == (0, 25)


def test_non_mapping_responses_logged_and_scored_zero(lesson_payload: dict[str, Any], caplog) -> None:
    lesson = validate_lesson(lesson_payload)
    with caplog.at_level(logging.WARNING, logger="nextlearn.scoring"):
        report = score(lesson, ["a", "b"])  # type: ignore[arg-type]
    assert report.total == 0
    assert "scoring as unanswered" in caplog.text


def test_unvalidated_lesson_raises(lesson_payload: dict[str, Any]) -> None:
    with pytest.raises(UnknownLessonError):
        score(lesson_payload, {"a": "seen"})  # type: ignore[arg-type]


def test_unknown_lesson_error_message_is_unquoted() -> None:
    with pytest.raises(UnknownLessonError) as exc_info:
        score({"name": "raw"}, {})  # type: ignore[arg-type]
    assert str(exc_info.value) == "Expected a validated lesson, got dict."
    assert isinstance(exc_info.value, KeyError)
