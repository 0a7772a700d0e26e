"""taskline CLI: toggle, inspect and query checklist tasks in Markdown files.

Installed as ``taskline`` console_script via pip.
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from taskline import __version__
from taskline.config import Config
from taskline.io_utils import join_lines, read_lines, read_text, write_text


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _parse_date_option(ctx: click.Context, param: click.Parameter, value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {value!r}.") from None


def _config(ctx: click.Context) -> Config:
    return ctx.find_object(Config) or Config()


def _load_line(path: Path, line_number: int) -> tuple[list[str], bool, str]:
    """Read *path* and return its lines, trailing-newline flag and line *line_number* (1-based)."""
    from taskline import log

    try:
        lines, trailing = read_lines(path)
    except (OSError, UnicodeDecodeError) as exc:
        log.error(f"Cannot read {path}: {exc}")
        sys.exit(1)
    if not 1 <= line_number <= len(lines):
        log.error(f"{path} has {len(lines)} line(s); line {line_number} is out of range")
        sys.exit(1)
    return lines, trailing, lines[line_number - 1]


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--global-filter",
    default=None,
    help="Only treat checklist lines containing this text as tasks "
    "(default: $TASKLINE_GLOBAL_FILTER)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="taskline")
@click.pass_context
def main(ctx: click.Context, global_filter: str | None, verbose: bool) -> None:
    """taskline: checklist tasks in plain Markdown.

    \b
    EXAMPLES:
      taskline toggle notes.md 12                   # complete / reopen line 12
      taskline toggle notes.md 12 --date 2021-09-13 # complete as of a date
      taskline show notes.md 12                     # inspect a task line
      taskline query notes.md -q "not done"         # list open tasks
    """
    from taskline import log

    log.set_verbose(verbose)
    ctx.obj = Config(global_filter=global_filter, verbose=verbose)


# ── Subcommand: toggle ───────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("line", type=int)
@click.option("--date", "today", callback=_parse_date_option, help="Completion date (default: today)")
@click.pass_context
def toggle(ctx: click.Context, file: Path, line: int, today: date | None) -> None:
    """Toggle the task or checklist item on LINE (1-based) of FILE.

    Completing a recurring task inserts its next occurrence below it.
    """
    from taskline import log
    from taskline.editor import toggle_line

    cfg = _config(ctx)
    lines, trailing, original = _load_line(file, line)

    replacement = toggle_line(original, str(file), today or date.today(), cfg.global_filter)
    if replacement == original:
        log.warn(f"Line {line} is not a checklist item; nothing changed")
        return

    lines[line - 1] = replacement
    write_text(file, join_lines(lines, trailing))
    log.success(f"Updated {file}:{line}")
    for new_line in replacement.split("\n"):
        log.task_line(new_line)


# ── Subcommand: show ─────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("line", type=int)
@click.pass_context
def show(ctx: click.Context, file: Path, line: int) -> None:
    """Show the fields parsed from LINE (1-based) of FILE."""
    from taskline import log
    from taskline.tasks.grammar import LineContext, Malformed, ParsedTask, parse_task_line

    cfg = _config(ctx)
    _, _, text = _load_line(file, line)

    result = parse_task_line(text, LineContext(path=str(file)), cfg.global_filter)
    if isinstance(result, Malformed):
        log.error(f"Line {line} looks like a task but cannot be read: {result.reason}")
        sys.exit(1)
    if not isinstance(result, ParsedTask):
        kind = "a plain checklist item" if result.checklist else "not a checklist item"
        log.info(f"Line {line} is {kind}, not a task")
        return

    task = result.task
    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("status", f"{task.status.value} ({escape(repr(task.original_status_character))})")
    table.add_row("description", escape(task.description))
    table.add_row("due", task.due_date.isoformat() if task.due_date else "-")
    table.add_row("done", task.done_date.isoformat() if task.done_date else "-")
    table.add_row("recurrence", escape(task.recurrence_rule.to_text()) if task.recurrence_rule else "-")
    if task.block_link:
        table.add_row("block link", escape(task.block_link.strip()))
    log.console.print(table)


# ── Subcommand: query ────────────────────────────────────────────────


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option("-q", "--query", "query_text", default="", help="Query text; separate instructions with ';' or newlines")
@click.option("--query-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Read the query from a file")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Limit used when the query sets none (default: $TASKLINE_DEFAULT_LIMIT)")
@click.pass_context
def query(
    ctx: click.Context,
    files: tuple[Path, ...],
    query_text: str,
    query_file: Path | None,
    limit: int | None,
) -> None:
    """Run a query over the tasks in FILES and print them grouped.

    \b
    EXAMPLES:
      taskline query todo.md -q "not done; group by heading"
      taskline query *.md --query-file weekly.query --limit 20
    """
    from taskline import log
    from taskline.document import parse_document
    from taskline.query.parser import run_query

    if query_text and query_file:
        raise click.UsageError("Use either --query or --query-file, not both.")

    cfg = _config(ctx)
    if limit is not None:
        cfg.default_limit = limit

    source = read_text(query_file) if query_file else query_text.replace(";", "\n")

    tasks = []
    for file in files:
        try:
            text = read_text(file)
        except (OSError, UnicodeDecodeError) as exc:
            log.error(f"Cannot read {file}: {exc}")
            sys.exit(1)
        tasks.extend(parse_document(text, str(file), cfg.global_filter))

    result = run_query(source, tasks, cfg.default_limit)
    if result.search_error_message is not None:
        log.error(f"Tasks query: {result.search_error_message}")
        sys.exit(1)

    for group in result.groups:
        if group.group_key:
            log.console.print(f"[bold]{escape(group.display_name)}[/bold]")
        for task in group.tasks:
            log.task_line(task.to_file_line_string().strip())
        log.console.print()
    log.console.print(f"[dim]{result.total_tasks_count_display_text()}[/dim]")
