"""Tests for the command-line interface."""

import json
from datetime import datetime, timedelta

import pytest
from click.testing import CliRunner

from gtdtxt.cli import main
from gtdtxt.config import Config
from gtdtxt.core.datetimes import format_datetime


@pytest.fixture(autouse=True)
def no_user_config(monkeypatch):
    monkeypatch.setattr("gtdtxt.cli.load_config", lambda: Config())


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def journal_file(tmp_path):
    recently = format_datetime(datetime.now() - timedelta(hours=1))
    path = tmp_path / "todo.txt"
    path.write_text(
        "task: Pay rent\ndue: January 1, 2000\n\n"
        "task: Write report\npriority: 5\nproject: work/q3\ntags: writing\n\n"
        "task: Call mom\ncontext: phone\nflag: yes\n\n"
        "task: Someday trip\nstatus: someday\ndefer: forever\n\n"
        f"task: Shipped\nstatus: done\ndone: {recently}\n"
    )
    return path


class TestValidate:
    def test_ok(self, runner, journal_file):
        result = runner.invoke(main, ["validate", str(journal_file)])
        assert result.exit_code == 0
        assert "OK: 5 tasks in 1 file(s)" in result.output

    def test_parse_error_exits_nonzero(self, runner, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("task: a\nbogus line\n")
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Error: Error parsing starting at line 2" in result.output

    def test_validation_error_shows_partial_task(self, runner, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("task: a\ndone: June 1, 2024\n")
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "status: done" in result.output
        assert "title: a" in result.output

    def test_no_file(self, runner):
        result = runner.invoke(main, ["validate"])
        assert result.exit_code == 1
        assert "No journal file given" in result.output


class TestTasks:
    def test_default_categories(self, runner, journal_file):
        result = runner.invoke(main, ["tasks", str(journal_file)])
        assert result.exit_code == 0
        assert "Overdue (1):" in result.output
        assert "Inbox (2):" in result.output
        assert result.output.index("Write report") < result.output.index("Call mom")
        assert "Someday trip" not in result.output
        assert "Shipped" not in result.output

    def test_show_done_and_deferred(self, runner, journal_file):
        result = runner.invoke(main, ["tasks", str(journal_file), "--show-done", "--show-deferred"])
        assert "Deferred (1):" in result.output
        assert "Done (1):" in result.output

    def test_json(self, runner, journal_file):
        result = runner.invoke(main, ["tasks", str(journal_file), "--json", "--tag", "writing"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [t["title"] for t in data] == ["Write report"]
        assert data[0]["project"] == "work/q3"
        assert data[0]["category"] == "inbox"
        assert data[0]["lines"] == [4, 7]

    def test_only_flagged(self, runner, journal_file):
        result = runner.invoke(main, ["tasks", str(journal_file), "--only-flagged", "--json"])
        assert [t["title"] for t in json.loads(result.output)] == ["Call mom"]

    def test_bad_priority_filter(self, runner, journal_file):
        result = runner.invoke(main, ["tasks", str(journal_file), "--show-priority", ">="])
        assert result.exit_code == 1
        assert "Invalid priority filter" in result.output


class TestPulse:
    def test_counts(self, runner, journal_file):
        result = runner.invoke(main, ["pulse", str(journal_file)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert len(lines) == 8
        assert lines[0].strip() == "today: 1"
        assert lines[1].strip() == "yesterday: 0"
