"""Task groups: tasks bucketed under group keys, with counts."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath

from taskline.tasks.model import Task

GroupKey = tuple[str, ...]
Grouper = Callable[[Task], str]


@dataclass(frozen=True)
class TaskGroup:
    """Tasks sharing one group key, in the order they were added.

    A key holds one name per grouping level, so ``("Work", "2021-09-12")``
    is the due-date bucket nested under the ``Work`` heading.
    """

    group_key: GroupKey
    tasks: tuple[Task, ...] = ()

    @property
    def count(self) -> int:
        return len(self.tasks)

    @property
    def display_name(self) -> str:
        return " > ".join(self.group_key)


class TaskGroups(Mapping[GroupKey, TaskGroup]):
    """Ordered mapping of group key to :class:`TaskGroup`.

    Groups keep first-seen order. Groups passed in with the same key are
    merged, so the result does not depend on how the input was split up.
    """

    def __init__(self, groups: Iterable[TaskGroup] = ()) -> None:
        merged: dict[GroupKey, list[Task]] = {}
        for group in groups:
            merged.setdefault(group.group_key, []).extend(group.tasks)
        self._groups: dict[GroupKey, TaskGroup] = {
            key: TaskGroup(key, tuple(tasks)) for key, tasks in merged.items()
        }

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task], groupers: Sequence[Grouper] = ()) -> TaskGroups:
        """Bucket *tasks* by the names the *groupers* give them.

        With no groupers, all tasks land in a single group keyed ``()``.
        """
        buckets: dict[GroupKey, list[Task]] = {}
        for task in tasks:
            key = tuple(grouper(task) for grouper in groupers)
            buckets.setdefault(key, []).append(task)
        return cls(TaskGroup(key, tuple(members)) for key, members in buckets.items())

    def __getitem__(self, key: GroupKey) -> TaskGroup:
        return self._groups[key]

    def __iter__(self) -> Iterator[GroupKey]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"TaskGroups({list(self._groups.values())!r})"

    @property
    def groups(self) -> list[TaskGroup]:
        return list(self._groups.values())

    def total_tasks_count(self) -> int:
        return sum(group.count for group in self._groups.values())

    def merge(self, other: TaskGroups) -> TaskGroups:
        """Combine two aggregations; tasks under a shared key are concatenated."""
        return TaskGroups([*self._groups.values(), *other.groups])


# ── groupers ─────────────────────────────────────────────────────────


def group_by_path(task: Task) -> str:
    return task.path


def group_by_filename(task: Task) -> str:
    return PurePosixPath(task.path).stem


def group_by_heading(task: Task) -> str:
    return task.preceding_header or "(No heading)"


def group_by_status(task: Task) -> str:
    return "Done" if task.is_done else "Todo"


def group_by_due(task: Task) -> str:
    if task.due_date is None:
        return "No due date"
    return task.due_date.isoformat()


def group_by_recurring(task: Task) -> str:
    return "Recurring" if task.recurrence_rule is not None else "Not Recurring"


GROUPERS: dict[str, Grouper] = {
    "path": group_by_path,
    "filename": group_by_filename,
    "heading": group_by_heading,
    "status": group_by_status,
    "due": group_by_due,
    "recurring": group_by_recurring,
}
