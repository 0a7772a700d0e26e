"""Line grammar for checklist items and task lines.

Three grammars, from strict to permissive:

* :func:`parse_task_line` -- a full task, with annotations peeled off the
  end of the description (``🔁 rule``, ``📅 due``, ``✅ done``, ``^block``).
* :func:`scan_checklist` -- any ``- [c] ...`` line, task or not.
* :func:`scan_editable` -- any line at all; every part is optional.

Parsing never raises. The task parser returns a tagged result so callers
can tell a task from a plain checklist line from a task-shaped line whose
fields could not be read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from taskline.tasks.model import (
    DONE_DATE_SYMBOL,
    DUE_DATE_SYMBOL,
    RECURRENCE_SYMBOL,
    Status,
    Task,
)
from taskline.tasks.recurrence import RULE_TEXT_PATTERN, Recurrence

LIST_MARKERS = "-*"
INDENT_CHARS = " \t"

_DATE = r"(\d{4}-\d{2}-\d{2})"

_BLOCK_LINK_RE = re.compile(r" \^[a-zA-Z0-9-]+$")
_DONE_DATE_RE = re.compile(rf" {DONE_DATE_SYMBOL} {_DATE}$")
_DUE_DATE_RE = re.compile(rf" {DUE_DATE_SYMBOL} {_DATE}$")
_RECURRENCE_RE = re.compile(rf" {RECURRENCE_SYMBOL} ({RULE_TEXT_PATTERN})$")


@dataclass(frozen=True)
class LineContext:
    """Where a line lives; copied onto the parsed task."""

    path: str
    section_start: int = 0
    section_index: int = 0
    preceding_header: str | None = None


@dataclass(frozen=True)
class ChecklistLine:
    indentation: str
    list_marker: str  # marker plus the spaces before "["
    status_character: str
    status_index: int  # offset of status_character in the line
    rest: str  # everything after "]"


@dataclass(frozen=True)
class EditableLine:
    indentation: str
    status_character: str
    description: str


@dataclass(frozen=True)
class ParsedTask:
    task: Task


@dataclass(frozen=True)
class NotATask:
    # Set when the line is still a generic checklist item.
    checklist: ChecklistLine | None = None


@dataclass(frozen=True)
class Malformed:
    reason: str
    checklist: ChecklistLine


ParseResult = ParsedTask | NotATask | Malformed


def _skip(line: str, pos: int, chars: str) -> int:
    while pos < len(line) and line[pos] in chars:
        pos += 1
    return pos


def scan_checklist(line: str) -> ChecklistLine | None:
    """Match ``<indent><-|*><spaces>[<c>]<rest>``; ``None`` for anything else."""
    pos = _skip(line, 0, INDENT_CHARS)
    indentation = line[:pos]

    if pos >= len(line) or line[pos] not in LIST_MARKERS:
        return None
    marker_start = pos
    pos = _skip(line, pos + 1, " ")
    if pos == marker_start + 1:
        return None
    list_marker = line[marker_start:pos]

    if line[pos:pos + 1] != "[" or line[pos + 2:pos + 3] != "]":
        return None

    return ChecklistLine(
        indentation=indentation,
        list_marker=list_marker,
        status_character=line[pos + 1],
        status_index=pos + 1,
        rest=line[pos + 3:],
    )


def scan_editable(line: str) -> EditableLine:
    """Decompose any line as ``<indent>[<marker>][ ][<c>][ ]<description>``."""
    pos = _skip(line, 0, INDENT_CHARS)
    indentation = line[:pos]

    if pos < len(line) and line[pos] in LIST_MARKERS:
        pos += 1
    pos = _skip(line, pos, " ")

    status_character = " "
    if line[pos:pos + 1] == "[" and line[pos + 2:pos + 3] == "]":
        status_character = line[pos + 1]
        pos += 3
    pos = _skip(line, pos, " ")

    return EditableLine(
        indentation=indentation,
        status_character=status_character,
        description=line[pos:],
    )


def _peel(pattern: re.Pattern[str], body: str) -> tuple[str, str | None]:
    """Strip a trailing annotation matching *pattern* from *body*."""
    m = pattern.search(body)
    if m is None:
        return body, None
    return body[:m.start()], m.group(m.lastindex or 0)


def parse_task_line(
    line: str,
    context: LineContext,
    global_filter: str = "",
) -> ParseResult:
    """Parse *line* into a task.

    Annotations are only recognised at the end of the line and in the
    order they are written back (rule, due, done, block link); anything
    else stays in the description, which keeps parsing lossless.
    """
    checklist = scan_checklist(line)
    if checklist is None:
        return NotATask()

    rest = checklist.rest
    if not rest.startswith(" "):
        return NotATask(checklist)
    body = rest[1:]

    body, block_link = _peel(_BLOCK_LINK_RE, body)
    body, done_text = _peel(_DONE_DATE_RE, body)
    body, due_text = _peel(_DUE_DATE_RE, body)

    recurrence_rule = None
    m = _RECURRENCE_RE.search(body)
    if m is not None:
        recurrence_rule = Recurrence.from_text(m.group(1))
        if recurrence_rule is not None:
            body = body[:m.start()]

    description = body
    if global_filter and global_filter not in description:
        return NotATask(checklist)

    try:
        due_date = date.fromisoformat(due_text) if due_text else None
        done_date = date.fromisoformat(done_text) if done_text else None
    except ValueError as exc:
        return Malformed(reason=f"invalid date: {exc}", checklist=checklist)

    task = Task(
        status=Status.from_character(checklist.status_character),
        description=description,
        path=context.path,
        indentation=checklist.indentation,
        list_marker=checklist.list_marker,
        original_status_character=checklist.status_character,
        due_date=due_date,
        done_date=done_date,
        recurrence_rule=recurrence_rule,
        block_link=block_link or "",
        section_start=context.section_start,
        section_index=context.section_index,
        preceding_header=context.preceding_header,
    )
    return ParsedTask(task)


def parse_task(line: str, context: LineContext, global_filter: str = "") -> Task | None:
    """Shortcut for callers that only care about well-formed tasks."""
    result = parse_task_line(line, context, global_filter)
    if isinstance(result, ParsedTask):
        return result.task
    return None
