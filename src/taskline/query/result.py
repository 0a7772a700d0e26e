"""Query results: grouped tasks plus the counts a display layer needs."""

from __future__ import annotations

from dataclasses import dataclass, field

from taskline.query.groups import TaskGroup, TaskGroups


def _pluralise(count: int) -> str:
    return "task" if count == 1 else "tasks"


@dataclass(frozen=True)
class QueryResult:
    """Outcome of evaluating one query.

    ``total_tasks_count_before_limit`` is the number of matches before the
    result-size limit was applied. A result with ``search_error_message``
    set never carries tasks; build those with :meth:`from_error`.
    Callers check ``search_error_message`` before reading ``groups``.
    """

    task_groups: TaskGroups = field(default_factory=TaskGroups)
    total_tasks_count_before_limit: int = 0
    search_error_message: str | None = None

    def __post_init__(self) -> None:
        if self.search_error_message is not None:
            if len(self.task_groups) or self.total_tasks_count_before_limit:
                raise ValueError("an error result cannot carry tasks")
        if self.total_tasks_count > self.total_tasks_count_before_limit:
            raise ValueError(
                f"{self.total_tasks_count} tasks returned but only "
                f"{self.total_tasks_count_before_limit} matched before the limit"
            )

    @classmethod
    def from_error(cls, message: str) -> QueryResult:
        return cls(TaskGroups(), 0, search_error_message=message)

    @property
    def groups(self) -> list[TaskGroup]:
        return self.task_groups.groups

    @property
    def total_tasks_count(self) -> int:
        return self.task_groups.total_tasks_count()

    def total_tasks_count_display_text(self) -> str:
        count = self.total_tasks_count
        before_limit = self.total_tasks_count_before_limit
        if count == before_limit:
            return f"{count} {_pluralise(count)}"
        return f"{count} of {before_limit} {_pluralise(before_limit)}"
