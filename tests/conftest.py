"""Shared fixtures for taskline tests.

File handling in tests:
- Use tmp_path for any file creation so tests are isolated and cleaned up.
- Use taskline.io_utils read_text/write_text for consistent UTF-8 I/O.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from taskline.io_utils import write_text
from taskline.tasks.model import Status, Task
from taskline.tasks.recurrence import Recurrence


def _make_task(
    description: str = "Task",
    status: Status = Status.TODO,
    path: str = "notes.md",
    due_date: date | None = None,
    done_date: date | None = None,
    recurrence: str | None = None,
    preceding_header: str | None = None,
) -> Task:
    rule = Recurrence.from_text(recurrence) if recurrence else None
    if recurrence:
        assert rule is not None, f"bad recurrence in test: {recurrence}"
    return Task(
        status=status,
        description=description,
        path=path,
        original_status_character="x" if status == Status.DONE else " ",
        due_date=due_date,
        done_date=done_date,
        recurrence_rule=rule,
        preceding_header=preceding_header,
    )


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances."""
    return _make_task


@pytest.fixture
def today() -> date:
    return date(2021, 9, 13)


@pytest.fixture
def write_note(tmp_path: Path):
    """Write a Markdown file under tmp_path and return its path."""

    def _write(text: str, name: str = "notes.md") -> Path:
        path = tmp_path / name
        write_text(path, text)
        return path

    return _write
