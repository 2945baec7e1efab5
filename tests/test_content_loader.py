import json
from pathlib import Path

from nextlearn.content_loader import lesson_to_dict, load_chapters, load_chapters_from_dir
from nextlearn.models import McqStep
from nextlearn.validation import validate_lesson


def test_load_chapters_contains_bundled_course() -> None:
    chapters = load_chapters()
    assert [chapter.id for chapter in chapters] == ["basics", "excel"]
    assert [chapter.title for chapter in chapters] == ["Basics", "Excel"]
    assert [chapter.order for chapter in chapters] == [1, 2]
    assert len(chapters[0].lessons) == 9
    assert len(chapters[1].lessons) == 3
    first = chapters[0].lessons[0]
    assert first.name == "Getting Started"
    assert first.step_ids == ("setup", "404-page", "first-page", "errors", "finally")
    setup = first.steps[0]
    assert isinstance(setup, McqStep)
    assert setup.correct_answer == "404 - This page could not be found"
    assert first.max_score == 55


def test_load_chapters_from_dir(write_content, lesson_payload) -> None:
    second = dict(lesson_payload, name="Second")
    root = write_content(
        {
            "1-intro/1-first.json": lesson_payload,
            "1-intro/2-second.json": second,
            "2-more-topics/1-third.json": dict(lesson_payload, name="Third"),
        }
    )

    chapters = load_chapters_from_dir(root)
    assert [chapter.id for chapter in chapters] == ["intro", "more-topics"]
    assert chapters[1].title == "More Topics"
    assert [lesson.name for lesson in chapters[0].lessons] == ["Sample", "Second"]
    assert chapters[0].lessons[0].steps[1].points == 20


def test_numeric_prefix_orders_numerically(write_content, lesson_payload) -> None:
    root = write_content(
        {
            "1-c/10-tenth.json": dict(lesson_payload, name="Tenth"),
            "1-c/9-ninth.json": dict(lesson_payload, name="Ninth"),
            "1-c/2-second.json": dict(lesson_payload, name="Second"),
        }
    )
    chapters = load_chapters_from_dir(root)
    assert [lesson.name for lesson in chapters[0].lessons] == ["Second", "Ninth", "Tenth"]


def test_non_json_and_private_entries_are_skipped(write_content, lesson_payload) -> None:
    root = write_content(
        {
            "1-c/1-only.json": lesson_payload,
            "1-c/README.md": "notes",
            "1-c/_draft.json": "{}",
            "_drafts/1-x.json": "{}",
        }
    )
    (root / "__init__.py").write_text("", encoding="utf-8")
    chapters = load_chapters_from_dir(root)
    assert len(chapters) == 1
    assert [lesson.name for lesson in chapters[0].lessons] == ["Sample"]


def test_bom_encoded_lesson_file_loads(tmp_path: Path, lesson_payload) -> None:
    chapter = tmp_path / "bom" / "1-c"
    chapter.mkdir(parents=True)
    (chapter / "1-l.json").write_text(json.dumps(lesson_payload), encoding="utf-8-sig")
    chapters = load_chapters_from_dir(tmp_path / "bom")
    assert chapters[0].lessons[0].name == "Sample"


def test_lesson_to_dict_round_trips_bundled_content() -> None:
    for chapter in load_chapters():
        for lesson in chapter.lessons:
            raw = lesson_to_dict(lesson)
            assert json.loads(json.dumps(raw)) == raw
            assert validate_lesson(raw) == lesson
