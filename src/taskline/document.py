"""Collect the tasks of one Markdown document, with their position metadata."""

from __future__ import annotations

import re

from taskline import log
from taskline.tasks.grammar import LineContext, Malformed, ParsedTask, parse_task_line
from taskline.tasks.model import Task

_HEADING_RE = re.compile(r"^#{1,6}[ \t]+(.*?)(?:[ \t]+#+)?[ \t]*$")
_FENCE_RE = re.compile(r"^[ \t]*(```|~~~)")


def parse_document(text: str, path: str, global_filter: str = "") -> list[Task]:
    """Return the tasks found in *text*, in document order.

    A section is a run of non-blank lines; headings and blank lines end it.
    ``section_start`` is the 0-based line number where the task's section
    begins and ``section_index`` counts tasks within that section.
    Lines inside fenced code blocks are ignored.
    """
    tasks: list[Task] = []
    header: str | None = None
    section_start = 0
    section_index = 0
    in_section = False
    fence: str | None = None

    for number, line in enumerate(text.splitlines()):
        fence_match = _FENCE_RE.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1) == fence:
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            in_section = False
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            header = heading.group(1)
            in_section = False
            continue
        if not line.strip():
            in_section = False
            continue

        if not in_section:
            section_start = number
            section_index = 0
            in_section = True

        context = LineContext(
            path=path,
            section_start=section_start,
            section_index=section_index,
            preceding_header=header,
        )
        result = parse_task_line(line, context, global_filter)
        if isinstance(result, ParsedTask):
            tasks.append(result.task)
            section_index += 1
        elif isinstance(result, Malformed):
            log.warn(f"{path}:{number + 1}: skipping malformed task ({result.reason})")

    log.debug(f"{path}: {len(tasks)} task(s)")
    return tasks
