"""Console output for taskline.

Results (toggled lines, query listings, field tables) go to stdout through
``console``. Warnings, errors and debug output go to stderr, so the output
of ``taskline query ... > open.md`` holds nothing but tasks.

Message text is never read as Rich markup: task lines carry ``[ ]`` and
``[x]`` checkboxes, and file paths may contain brackets too.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
_err_console = Console(highlight=False, stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def _tagged(target: Console, tag: str, style: str, msg: str) -> None:
    target.print(f"[{style}]\\[{tag}][/{style}] {escape(msg)}")


def info(msg: str) -> None:
    _tagged(console, "INFO", "blue", msg)


def success(msg: str) -> None:
    _tagged(console, "OK", "green", msg)


def warn(msg: str) -> None:
    _tagged(_err_console, "WARN", "yellow", msg)


def error(msg: str) -> None:
    _tagged(_err_console, "ERROR", "red", msg)


def debug(msg: str) -> None:
    if _verbose:
        _err_console.print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")


def task_line(text: str) -> None:
    """Print a Markdown line to stdout exactly as it reads in the file."""
    console.print(text, markup=False, emoji=False, soft_wrap=True)
