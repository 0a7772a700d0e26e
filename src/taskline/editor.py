"""Editor-facing operations on a single line of a document.

These are what a host editor binds to its commands: the host supplies the
line text, the document path and today's date, and writes back whatever
string comes out.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from taskline import log
from taskline.tasks.grammar import (
    LineContext,
    Malformed,
    ParsedTask,
    parse_task_line,
    scan_checklist,
    scan_editable,
)
from taskline.tasks.model import Status, Task, default_task


def serialize_tasks(tasks: Iterable[Task]) -> str:
    """Newline-joined file lines, in the order given."""
    return "\n".join(task.to_file_line_string() for task in tasks)


def toggle_checklist_line(line: str) -> str | None:
    """Flip the marker of a plain checklist line in place.

    ``[ ]`` becomes ``[x]``; any other marker becomes ``[ ]``. Every other
    character of the line is kept. Returns ``None`` for non-checklist lines.
    """
    checklist = scan_checklist(line)
    if checklist is None:
        return None
    toggled = "x" if checklist.status_character == " " else " "
    i = checklist.status_index
    return line[:i] + toggled + line[i + 1:]


def toggle_line(line: str, path: str, today: date, global_filter: str = "") -> str:
    """Toggle the task or checklist item on *line*.

    The result may span two lines when a recurring task is completed.
    Lines that are not checklist items come back unchanged.
    """
    result = parse_task_line(line, LineContext(path=path), global_filter)

    if isinstance(result, ParsedTask):
        return serialize_tasks(result.task.toggle(today))

    if isinstance(result, Malformed):
        log.warn(f"Cannot read task fields ({result.reason}), toggling checkbox only: {line}")

    toggled = toggle_checklist_line(line)
    if toggled is None:
        log.debug(f"Not a checklist line, nothing to toggle: {line!r}")
        return line
    return toggled


def task_for_editing(line: str, path: str, global_filter: str = "") -> Task:
    """Return a task to pre-fill an edit dialog for *line*.

    Any line can be edited into a task: when the line is not a task (for
    example, a checklist item without the global filter, or plain text) the
    task is built from whatever indentation, marker and text it has.
    """
    result = parse_task_line(line, LineContext(path=path), global_filter)

    if isinstance(result, ParsedTask):
        return result.task

    if isinstance(result, Malformed):
        log.error(f"Cannot create task on line ({result.reason}): {line}")
        return default_task(path)

    editable = scan_editable(line)
    return Task(
        status=Status.from_character(editable.status_character),
        description=editable.description,
        path=path,
        indentation=editable.indentation,
        original_status_character=editable.status_character,
    )
