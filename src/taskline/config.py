"""Configuration defaults, env vars, and runtime options for taskline."""

from __future__ import annotations

import os
from dataclasses import dataclass

ENV_GLOBAL_FILTER = "TASKLINE_GLOBAL_FILTER"
ENV_DEFAULT_LIMIT = "TASKLINE_DEFAULT_LIMIT"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Config:
    """Runtime configuration shared by the CLI commands."""

    # Only lines whose description contains this string are tasks.
    # Empty means every checklist line is a task.
    global_filter: str | None = None

    # Limit applied to queries that do not set their own (0 = unlimited).
    default_limit: int | None = None

    verbose: bool = False

    def __post_init__(self) -> None:
        if self.global_filter is None:
            self.global_filter = os.environ.get(ENV_GLOBAL_FILTER, "")
        if self.default_limit is None:
            self.default_limit = _env_int(ENV_DEFAULT_LIMIT, 0)
        if self.default_limit < 0:
            self.default_limit = 0
