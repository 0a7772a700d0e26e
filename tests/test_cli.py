"""CLI tests: every command runs through click's CliRunner against tmp files."""

from __future__ import annotations

import pytest

from taskline.cli import main
from taskline.io_utils import read_text, write_text


@pytest.fixture
def cli_runner():
    """Click CliRunner for invoking the CLI in-process."""
    from click.testing import CliRunner
    return CliRunner()


NOTE = """\
# Home
- [ ] Water 🔁 every week 📅 2021-09-12
- [x] Milk ✅ 2021-09-10
plain line

# Work
- [ ] Report 📅 2021-09-20
"""


# ── Main entry and help ────────────────────────────────────────────────


class TestCliHelpAndVersion:
    def test_help_long(self, cli_runner):
        r = cli_runner.invoke(main, ["--help"])
        assert r.exit_code == 0
        assert "taskline" in r.output

    def test_help_short(self, cli_runner):
        r = cli_runner.invoke(main, ["-h"])
        assert r.exit_code == 0

    def test_version(self, cli_runner):
        r = cli_runner.invoke(main, ["--version"])
        assert r.exit_code == 0
        assert "taskline" in r.output.lower()

    @pytest.mark.parametrize("command", ["toggle", "show", "query"])
    def test_subcommand_help(self, cli_runner, command):
        r = cli_runner.invoke(main, [command, "--help"])
        assert r.exit_code == 0


# ── toggle ───────────────────────────────────────────────────────────────


class TestCliToggle:
    def test_completes_recurring_task(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["toggle", str(path), "2", "--date", "2021-09-13"])
        assert r.exit_code == 0, r.output
        lines = read_text(path).splitlines()
        assert lines[1] == "- [x] Water 🔁 every week 📅 2021-09-12 ✅ 2021-09-13"
        assert lines[2] == "- [ ] Water 🔁 every week 📅 2021-09-19"
        assert lines[3] == "- [x] Milk ✅ 2021-09-10"

    def test_reopens_done_task(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["toggle", str(path), "3"])
        assert r.exit_code == 0, r.output
        assert read_text(path).splitlines()[2] == "- [ ] Milk"

    def test_keeps_trailing_newline(self, cli_runner, write_note):
        path = write_note("- [ ] One\n")
        cli_runner.invoke(main, ["toggle", str(path), "1", "--date", "2021-09-13"])
        assert read_text(path) == "- [x] One ✅ 2021-09-13\n"

    def test_global_filter_falls_back_to_checkbox(self, cli_runner, write_note):
        path = write_note("- [ ] plain item\n")
        r = cli_runner.invoke(main, ["--global-filter", "#task", "toggle", str(path), "1"])
        assert r.exit_code == 0, r.output
        assert read_text(path) == "- [x] plain item\n"

    def test_global_filter_from_env(self, cli_runner, write_note, monkeypatch):
        monkeypatch.setenv("TASKLINE_GLOBAL_FILTER", "#task")
        path = write_note("- [ ] plain item\n")
        cli_runner.invoke(main, ["toggle", str(path), "1"])
        assert read_text(path) == "- [x] plain item\n"

    def test_recurrence_past_date_limit_completes_only(self, cli_runner, write_note):
        path = write_note("- [ ] x 🔁 every week 📅 9999-12-31\n")
        r = cli_runner.invoke(main, ["toggle", str(path), "1", "--date", "2021-09-13"])
        assert r.exit_code == 0, r.output
        assert read_text(path) == "- [x] x 🔁 every week 📅 9999-12-31 ✅ 2021-09-13\n"

    def test_non_checklist_line_unchanged(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["toggle", str(path), "4"])
        assert r.exit_code == 0
        assert read_text(path) == NOTE

    def test_line_out_of_range(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["toggle", str(path), "99"])
        assert r.exit_code == 1

    def test_missing_file(self, cli_runner, tmp_path):
        r = cli_runner.invoke(main, ["toggle", str(tmp_path / "nope.md"), "1"])
        assert r.exit_code == 1

    def test_bad_date(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["toggle", str(path), "2", "--date", "13/09/2021"])
        assert r.exit_code == 2
        assert read_text(path) == NOTE


# ── show ─────────────────────────────────────────────────────────────────


class TestCliShow:
    def test_shows_fields(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["show", str(path), "2"])
        assert r.exit_code == 0, r.output
        assert "Water" in r.output
        assert "2021-09-12" in r.output
        assert "every week" in r.output

    def test_not_a_task(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["show", str(path), "4"])
        assert r.exit_code == 0
        assert "not a task" in r.output

    def test_malformed(self, cli_runner, write_note):
        path = write_note("- [ ] Bad 📅 2021-02-30\n")
        r = cli_runner.invoke(main, ["show", str(path), "1"])
        assert r.exit_code == 1


# ── query ────────────────────────────────────────────────────────────────


class TestCliQuery:
    def test_all_tasks(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["query", str(path)])
        assert r.exit_code == 0, r.output
        assert "3 tasks" in r.output

    def test_grouped_and_limited(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["query", str(path), "-q", "not done; group by heading; limit 1"])
        assert r.exit_code == 0, r.output
        assert "Home" in r.output
        assert "1 of 2 tasks" in r.output

    def test_limit_option(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["query", str(path), "--limit", "2"])
        assert r.exit_code == 0, r.output
        assert "2 of 3 tasks" in r.output

    def test_query_file(self, cli_runner, write_note, tmp_path):
        path = write_note(NOTE)
        query_path = tmp_path / "open.query"
        write_text(query_path, "done\n")
        r = cli_runner.invoke(main, ["query", str(path), "--query-file", str(query_path)])
        assert r.exit_code == 0, r.output
        assert "1 task" in r.output

    def test_several_files(self, cli_runner, write_note):
        first = write_note(NOTE, "a.md")
        second = write_note("- [ ] Extra\n", "b.md")
        r = cli_runner.invoke(main, ["query", str(first), str(second), "-q", "group by filename"])
        assert r.exit_code == 0, r.output
        assert "4 tasks" in r.output

    def test_bad_query(self, cli_runner, write_note):
        path = write_note(NOTE)
        r = cli_runner.invoke(main, ["query", str(path), "-q", "frobnicate"])
        assert r.exit_code == 1

    def test_query_and_query_file_conflict(self, cli_runner, write_note, tmp_path):
        path = write_note(NOTE)
        query_path = tmp_path / "q.query"
        write_text(query_path, "done\n")
        r = cli_runner.invoke(main, ["query", str(path), "-q", "done", "--query-file", str(query_path)])
        assert r.exit_code == 2

    def test_requires_files(self, cli_runner):
        r = cli_runner.invoke(main, ["query"])
        assert r.exit_code == 2
