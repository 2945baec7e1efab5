"""CLI entrypoint for browsing, validating, and playing lessons."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable
from pathlib import Path

from .models import Lesson, McqStep, ScoreReport, Step
from .content_loader import check_chapters
from .service import CourseService
from .validation import LessonValidationError

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
MENU_QUIT_COMMANDS = {"q"}
FLOW_EXIT_COMMANDS = {":quit", ":exit", ":q", ":b", ":back"}
VIEWED_RESPONSE = "seen"


class QuitApp(Exception):
    """Signal immediate app exit from nested menu flows."""


def _service(content_dir: str | None) -> CourseService:
    """Create app service over bundled or directory content."""
    if content_dir:
        return CourseService.from_dir(content_dir)
    return CourseService.from_bundled()


def run(argv: list[str] | None = None, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="nextlearn", description="Next.js lessons with graded quizzes")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--content-dir", default=None, help="load lessons from this directory instead of the bundle")
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("play", help="play through a lesson interactively (default)")
    commands.add_parser("list", help="list chapters and lessons")
    commands.add_parser("validate", help="validate every lesson")
    show_parser = commands.add_parser("show", help="print one lesson")
    show_parser.add_argument("lesson", help="lesson name")
    score_parser = commands.add_parser("score", help="grade responses from a JSON file")
    score_parser.add_argument("lesson", help="lesson name")
    score_parser.add_argument("responses", help="JSON file with an object of step id -> answer")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    command = args.command or "play"
    if command == "validate":
        return _validate_flow(args.content_dir, print_fn)

    try:
        service = _service(args.content_dir)
    except (ValueError, OSError) as exc:
        _print_content_error(exc, print_fn)
        return 1

    if command == "list":
        _list_flow(service, print_fn)
        return 0
    if command == "show":
        return _show_flow(service, args.lesson, print_fn)
    if command == "score":
        return _score_flow(service, args.lesson, args.responses, print_fn)
    return play_shell(service, input_fn, print_fn)


def _print_content_error(exc: Exception, print_fn: PrintFn) -> None:
    if isinstance(exc, LessonValidationError):
        print_fn(f"Invalid lesson '{exc.lesson}':")
        for violation in exc.violations:
            print_fn(f"- {violation.describe()}")
        return
    print_fn(f"Content error: {exc}")


def _validate_flow(content_dir: str | None, print_fn: PrintFn) -> int:
    """Check every lesson file and report all problems at once."""
    try:
        chapters, errors = check_chapters(Path(content_dir) if content_dir else None)
    except OSError as exc:
        _print_content_error(exc, print_fn)
        return 1
    if errors:
        for error in errors:
            _print_content_error(error, print_fn)
        print_fn(f"\n{len(errors)} problem(s) found.")
        return 1
    service = CourseService(chapters)
    print_fn(
        f"OK: {len(service.lessons)} lessons in {len(service.chapters)} chapters, "
        f"max score {service.max_score}."
    )
    return 0


def play_shell(service: CourseService, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run menu-driven lesson selection and play-through."""
    try:
        while True:
            lesson = _select_lesson(service, input_fn, print_fn)
            if lesson is None:
                return 0
            _run_lesson(service, lesson, input_fn, print_fn)
    except QuitApp:
        return 0


def _select_lesson(service: CourseService, input_fn: InputFn, print_fn: PrintFn) -> Lesson | None:
    """Pick a lesson from the authored order."""
    while True:
        print_fn("\n=== Lessons ===")
        index = 0
        for chapter in service.chapters:
            print_fn(f"\n{chapter.title}")
            for lesson in chapter.lessons:
                index += 1
                print_fn(f"{index:>2}) {lesson.name} ({lesson.max_score} points)")
        print_fn("q) Quit")
        choice = input_fn("Choose lesson: ").strip().lower()
        if choice in MENU_QUIT_COMMANDS:
            return None
        if choice.isdigit():
            position = int(choice) - 1
            if 0 <= position < len(service.lessons):
                return service.lessons[position]
        print_fn("Invalid choice.")


def _run_lesson(service: CourseService, lesson: Lesson, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Walk through every step of a lesson, then print the score."""
    print_fn(f"\n=== {lesson.name} ===")
    print_fn(lesson.intro.strip())
    print_fn("Type :b or :q to leave the lesson, q to quit.")

    responses: dict[str, str] = {}
    for position, step in enumerate(lesson.steps, start=1):
        print_fn(f"\n--- Step {position}/{len(lesson.steps)}: {step.id} ({step.points} points) ---")
        print_fn(step.text.strip())
        answer = _ask_step(step, input_fn, print_fn)
        if answer is None:
            print_fn("Leaving lesson.")
            break
        responses[step.id] = answer

    _print_report(lesson, service.score(lesson, responses), print_fn)


def _ask_step(step: Step, input_fn: InputFn, print_fn: PrintFn) -> str | None:
    """Collect one response; None means the learner left the lesson."""
    if not isinstance(step, McqStep):
        choice = input_fn("Press Enter to continue: ").strip().lower()
        if choice in FLOW_EXIT_COMMANDS:
            return None
        if choice in MENU_QUIT_COMMANDS:
            raise QuitApp()
        return VIEWED_RESPONSE

    for idx, answer in enumerate(step.answers, start=1):
        print_fn(f"{idx}) {answer}")
    while True:
        choice = input_fn("Your answer: ").strip().lower()
        if choice in FLOW_EXIT_COMMANDS:
            return None
        if choice in MENU_QUIT_COMMANDS:
            raise QuitApp()
        if choice.isdigit() and 1 <= int(choice) <= len(step.answers):
            selected = step.answers[int(choice) - 1]
            if selected == step.correct_answer:
                print_fn("Correct.")
            else:
                print_fn(f"Not quite. The answer was: {step.correct_answer}")
            return selected
        print_fn("Invalid choice.")


def _list_flow(service: CourseService, print_fn: PrintFn) -> None:
    """Print chapters and lessons with step counts and scores."""
    references = service.list_lesson_references()
    if not references:
        print_fn("No lessons available.")
        return
    chapter_width = max(len("Chapter"), max(len(item.chapter_id) for item in references))
    steps_width = len("Steps")
    mcq_width = len("Quiz")
    score_width = len("Points")
    header = (
        f"{'Chapter':<{chapter_width}} "
        f"{'#':>2} "
        f"{'Steps':>{steps_width}} "
        f"{'Quiz':>{mcq_width}} "
        f"{'Points':>{score_width}} "
        "Lesson"
    )
    print_fn(header)
    print_fn("-" * len(header))
    for item in references:
        print_fn(
            f"{item.chapter_id:<{chapter_width}} "
            f"{item.position:>2} "
            f"{item.step_count:>{steps_width}} "
            f"{item.mcq_count:>{mcq_width}} "
            f"{item.max_score:>{score_width}} "
            f"{item.name}"
        )
    print_fn(f"\nTotal: {len(references)} lessons, {service.max_score} points")


def _show_flow(service: CourseService, name: str, print_fn: PrintFn) -> int:
    """Print one lesson verbatim."""
    lesson = service.get_lesson(name)
    if lesson is None:
        print_fn(f"Unknown lesson: {name}")
        return 1
    chapter = service.chapter_of(name)
    print_fn(f"# {lesson.name}")
    if chapter is not None:
        print_fn(f"Chapter: {chapter.title}")
    print_fn(lesson.intro.strip())
    for position, step in enumerate(lesson.steps, start=1):
        print_fn(f"\n--- Step {position}: {step.id} [{step.type}, {step.points} points] ---")
        print_fn(step.text.strip())
        if isinstance(step, McqStep):
            for answer in step.answers:
                marker = "*" if answer == step.correct_answer else "-"
                print_fn(f"{marker} {answer}")
    return 0


def _score_flow(service: CourseService, name: str, responses_path: str, print_fn: PrintFn) -> int:
    """Grade a responses JSON file against one lesson."""
    lesson = service.get_lesson(name)
    if lesson is None:
        print_fn(f"Unknown lesson: {name}")
        return 1
    try:
        responses = json.loads(Path(responses_path).read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as exc:
        print_fn(f"Could not read responses: {exc}")
        return 1
    _print_report(lesson, service.score(lesson, responses), print_fn)
    return 0


def _print_report(lesson: Lesson, report: ScoreReport, print_fn: PrintFn) -> None:
    """Print per-step earned points and the total."""
    print_fn(f"\nScore for {lesson.name}:")
    id_width = max(len("Step"), max(len(step_id) for step_id in report.per_step))
    header = f"{'Step':<{id_width}} {'Earned':>6} {'Possible':>8}"
    print_fn(header)
    print_fn("-" * len(header))
    for step_id, item in report.per_step.items():
        print_fn(f"{step_id:<{id_width}} {item.earned:>6} {item.possible:>8}")
    percent = 100.0 if report.max == 0 else (100.0 * report.total / report.max)
    print_fn(f"Total: {report.total}/{report.max} ({percent:.1f}%)")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
