from __future__ import annotations

import json
import shutil
import sys
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

TMP_BASE = ROOT / ".tmp_pytest"


@pytest.fixture(name="tmp_path")
def workspace_tmp_path() -> Iterator[Path]:
    """Per-test scratch directory under ``.tmp_pytest/`` in the project, removed afterwards."""
    TMP_BASE.mkdir(exist_ok=True)
    path = Path(tempfile.mkdtemp(dir=TMP_BASE))
    yield path
    shutil.rmtree(path, ignore_errors=True)
    if not any(TMP_BASE.iterdir()):
        TMP_BASE.rmdir()


def sample_lesson(name: str = "Sample") -> dict[str, Any]:
    """Two-step lesson: a 5 point text step and a 20 point quiz."""
    return {
        "name": name,
        "intro": "Welcome to **the sample**.",
        "steps": [
            {"id": "a", "type": "text", "points": 5, "text": "Read this."},
            {
                "id": "b",
                "type": "mcq",
                "points": 20,
                "text": "Pick one.",
                "answers": ["x", "y", "z"],
                "correctAnswer": "y",
            },
        ],
    }


@pytest.fixture
def lesson_payload() -> dict[str, Any]:
    return sample_lesson()


@pytest.fixture
def write_content(tmp_path: Path) -> Callable[[dict[str, dict[str, Any]]], Path]:
    """Write ``{"1-chapter/1-lesson.json": payload}`` files under a fresh content root."""

    def write(files: dict[str, Any]) -> Path:
        root = tmp_path / "content"
        for relative, payload in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            text = payload if isinstance(payload, str) else json.dumps(payload)
            target.write_text(text, encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)
        return root

    return write
