"""Task data model: status, serialization and the toggle state machine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from taskline import log
from taskline.tasks.recurrence import Recurrence, next_due_date

RECURRENCE_SYMBOL = "🔁"
DUE_DATE_SYMBOL = "📅"
DONE_DATE_SYMBOL = "✅"


class Status(str, Enum):
    TODO = "todo"
    DONE = "done"

    @classmethod
    def from_character(cls, char: str) -> Status:
        """A space is open; any other marker counts as checked."""
        return cls.TODO if char == " " else cls.DONE


@dataclass(frozen=True)
class Task:
    """One checklist item, e.g. ``- [ ] Buy milk 🔁 every week 📅 2021-09-12``.

    Tasks are values: :meth:`toggle` returns new instances and never
    changes the receiver.
    """

    status: Status
    description: str
    path: str
    indentation: str = ""
    list_marker: str = "- "
    original_status_character: str = " "
    due_date: date | None = None
    done_date: date | None = None
    recurrence_rule: Recurrence | None = None
    block_link: str = ""  # " ^block-id", leading space included

    # Position in the containing document; unused by toggling and editing.
    section_start: int = 0
    section_index: int = 0
    preceding_header: str | None = None

    @property
    def is_done(self) -> bool:
        return self.status == Status.DONE

    # ── toggling ─────────────────────────────────────────────────

    def toggle(self, today: date) -> list[Task]:
        """Flip completion and return the task(s) that replace this one.

        Completing a recurring task with a due date also returns the next
        occurrence, always after the completed task. The next due date is
        counted from the stored due date, not from *today*.
        """
        if self.status == Status.DONE:
            return [
                replace(
                    self,
                    status=Status.TODO,
                    done_date=None,
                    original_status_character=" ",
                )
            ]

        completed = replace(
            self,
            status=Status.DONE,
            done_date=today,
            original_status_character="x",
        )
        if self.recurrence_rule is None or self.due_date is None:
            return [completed]

        try:
            next_due = next_due_date(self.recurrence_rule, self.due_date)
        except (ValueError, OverflowError):
            log.warn(
                f"No date follows {self.due_date.isoformat()} for "
                f"'{self.recurrence_rule.to_text()}'; completed without a next occurrence"
            )
            return [completed]

        following = replace(
            self,
            status=Status.TODO,
            due_date=next_due,
            done_date=None,
            original_status_character=" ",
            block_link="",
        )
        return [completed, following]

    # ── serialization ────────────────────────────────────────────

    def to_string(self) -> str:
        """Description followed by the annotations, in canonical order."""
        parts = [self.description]
        if self.recurrence_rule is not None:
            parts.append(f" {RECURRENCE_SYMBOL} {self.recurrence_rule.to_text()}")
        if self.due_date is not None:
            parts.append(f" {DUE_DATE_SYMBOL} {self.due_date.isoformat()}")
        if self.done_date is not None:
            parts.append(f" {DONE_DATE_SYMBOL} {self.done_date.isoformat()}")
        if self.block_link:
            parts.append(self.block_link)
        return "".join(parts)

    def to_file_line_string(self) -> str:
        return (
            f"{self.indentation}{self.list_marker}"
            f"[{self.original_status_character}] {self.to_string()}"
        )


def default_task(path: str) -> Task:
    """Minimal placeholder used when a line cannot be turned into a task."""
    return Task(status=Status.TODO, description="", path=path)
