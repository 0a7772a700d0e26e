"""A small line-based query language over tasks.

One instruction per line, case-insensitive; blank lines and lines starting
with ``#`` are ignored::

    not done
    due before 2021-10-01
    path includes projects/
    group by heading
    limit to 20 tasks
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import date

from taskline import log
from taskline.query.groups import GROUPERS, Grouper, TaskGroups
from taskline.query.result import QueryResult
from taskline.tasks.model import Task

Filter = Callable[[Task], bool]


class QueryError(ValueError):
    """Raised when query text cannot be understood."""


_DONE_RE = re.compile(r"^(not )?done$")
_DUE_RE = re.compile(r"^due (before|after|on) (\S+)$")
_HAS_DUE_RE = re.compile(r"^(has|no) due date$")
_RECURRING_RE = re.compile(r"^is (not )?recurring$")
_TEXT_RE = re.compile(r"^(description|path|heading) (includes|does not include) (.+)$")
_GROUP_RE = re.compile(r"^group by (\w+)$")
_LIMIT_RE = re.compile(r"^limit (?:to )?(\d+)(?: tasks?)?$")


@dataclass
class Query:
    source: str = ""
    filters: list[Filter] = field(default_factory=list)
    groupers: list[Grouper] = field(default_factory=list)
    limit: int | None = None

    def evaluate(self, tasks: Iterable[Task]) -> QueryResult:
        """Filter, sort, limit and group *tasks*.

        The pre-limit count on the result is the number of tasks that
        passed the filters.
        """
        matched = [task for task in tasks if all(f(task) for f in self.filters)]
        matched.sort(key=_default_sort_key)
        limited = matched if self.limit is None else matched[: self.limit]
        return QueryResult(TaskGroups.from_tasks(limited, self.groupers), len(matched))


def _default_sort_key(task: Task) -> tuple[bool, bool, date, str]:
    # Open before done, then by due date with undated tasks last, then path.
    return (task.is_done, task.due_date is None, task.due_date or date.max, task.path)


def _parse_date(text: str, line: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise QueryError(f"invalid date in query: {line}") from None


def _due_filter(relation: str, when: date) -> Filter:
    def matches(task: Task) -> bool:
        if task.due_date is None:
            return False
        if relation == "before":
            return task.due_date < when
        if relation == "after":
            return task.due_date > when
        return task.due_date == when

    return matches


def _text_filter(field_name: str, negate: bool, needle: str) -> Filter:
    needle = needle.lower()

    def matches(task: Task) -> bool:
        if field_name == "description":
            haystack = task.description
        elif field_name == "path":
            haystack = task.path
        else:
            haystack = task.preceding_header or ""
        found = needle in haystack.lower()
        return not found if negate else found

    return matches


def _parse_line(query: Query, raw: str) -> None:
    line = " ".join(raw.split()).lower()

    if m := _DONE_RE.match(line):
        wanted = m.group(1) is None
        query.filters.append(lambda task: task.is_done == wanted)
    elif m := _DUE_RE.match(line):
        query.filters.append(_due_filter(m.group(1), _parse_date(m.group(2), raw)))
    elif m := _HAS_DUE_RE.match(line):
        has = m.group(1) == "has"
        query.filters.append(lambda task: (task.due_date is not None) == has)
    elif m := _RECURRING_RE.match(line):
        recurring = m.group(1) is None
        query.filters.append(lambda task: (task.recurrence_rule is not None) == recurring)
    elif m := _TEXT_RE.match(line):
        query.filters.append(_text_filter(m.group(1), m.group(2) != "includes", m.group(3)))
    elif m := _GROUP_RE.match(line):
        grouper = GROUPERS.get(m.group(1))
        if grouper is None:
            allowed = ", ".join(GROUPERS)
            raise QueryError(f"do not understand grouping: {raw.strip()} (valid: {allowed})")
        query.groupers.append(grouper)
    elif m := _LIMIT_RE.match(line):
        query.limit = int(m.group(1))
    else:
        raise QueryError(f"do not understand query: {raw.strip()}")


def parse_query(source: str) -> Query:
    """Parse *source* into a :class:`Query`; raises :class:`QueryError`."""
    query = Query(source=source)
    for raw in source.splitlines():
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue
        _parse_line(query, stripped)
    return query


def run_query(source: str, tasks: Iterable[Task], default_limit: int = 0) -> QueryResult:
    """Parse and evaluate *source*; failures come back as an error result."""
    try:
        query = parse_query(source)
    except QueryError as exc:
        log.debug(f"Query failed: {exc}")
        return QueryResult.from_error(str(exc))

    if query.limit is None and default_limit > 0:
        query = replace(query, limit=default_limit)
    return query.evaluate(tasks)
