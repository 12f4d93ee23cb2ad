"""Tests for the parse-state machine."""

from datetime import datetime
from pathlib import Path

import pytest

from gtdtxt.core.assembler import FileAssembler, ParseState, assemble
from gtdtxt.core.errors import DirectiveViolation, IncludeError, TaskValidationError
from gtdtxt.core.journal import Category, Journal
from gtdtxt.core.lines import tokenize

SOURCE = Path("/journal/todo.txt")


@pytest.fixture
def journal():
    return Journal(Path("/journal"), as_of=datetime(2024, 6, 10, 12, 0))


def run(journal: Journal, text: str, on_include=None) -> int:
    return assemble(tokenize(text, SOURCE), journal, SOURCE, on_include)


class TestAssemble:
    def test_consecutive_fields_form_one_task(self, journal):
        added = run(journal, "task: a\npriority: 2\ntags: x, y\n")
        assert added == 1
        task = journal.tasks[1]
        assert (task.title, task.priority, task.tags) == ("a", 2, ("x", "y"))
        assert (task.start_line, task.end_line) == (1, 3)

    def test_blank_line_separator_and_comment_split_tasks(self, journal):
        text = "task: a\n\ntask: b\n-----\ntask: c\n// comment\ntask: d"
        assert run(journal, text) == 4
        assert [t.title for t in journal.tasks.values()] == ["a", "b", "c", "d"]
        assert [t.start_line for t in journal.tasks.values()] == [1, 3, 5, 7]

    def test_note_continuation_lines_extend_range(self, journal):
        run(journal, "task: a\nnote: one\n  two\n\n  three\nflag: yes\n")
        task = journal.tasks[1]
        assert task.note == "one\ntwo\n\nthree"
        assert task.flag
        assert (task.start_line, task.end_line) == (1, 6)

    def test_missing_title_reports_range(self, journal):
        with pytest.raises(TaskValidationError) as exc:
            run(journal, "task: a\n\npriority: 3\ntags: x\n")
        assert exc.value.line_range == (3, 4)
        assert exc.value.rule == "missing-title"

    def test_status_done_without_done_time(self, journal):
        run(journal, "task: a\nstatus: done\n")
        assert journal.tasks[1].is_done

    def test_done_time_without_status_is_fatal(self, journal):
        with pytest.raises(TaskValidationError):
            run(journal, "task: a\ndone: June 1, 2024\n")

    def test_incubate_status_lands_in_inbox(self, journal):
        run(journal, "task: a\nstatus: incubate\n")
        assert journal.classify(journal.tasks[1]) is Category.INBOX
        assert list(journal.inbox) == [1]

    def test_incubate_with_defer_forever_is_deferred(self, journal):
        run(journal, "task: a\nstatus: incubate\ndefer: forever\n")
        assert list(journal.deferred) == [1]


class TestDirectives:
    def test_switches_apply_to_following_tasks(self, journal):
        text = "task: done early\nstatus: done\n\nfile_no_done_tasks: yes\ntask: later\nstatus: done\n"
        with pytest.raises(DirectiveViolation) as exc:
            run(journal, text)
        assert exc.value.line_range == (5, 6)
        assert len(journal.tasks) == 1

    def test_switch_can_be_turned_off(self, journal):
        text = "no_done_tasks: yes\nno_done_tasks: no\ntask: a\nstatus: done\n"
        assert run(journal, text) == 1

    def test_project_prefix_cleared(self, journal):
        text = "project_prefix: work\nproject_prefix: /\ntask: a\nproject: home\n"
        assert run(journal, text) == 1

    def test_include_flushes_open_task_first(self, journal):
        seen = []

        def on_include(include):
            seen.append((include.path, len(journal.tasks)))

        run(journal, "task: a\ninclude: other.txt\ntask: b\n", on_include)
        assert seen == [("other.txt", 1)]
        assert len(journal.tasks) == 2

    def test_include_without_handler(self, journal):
        with pytest.raises(IncludeError) as exc:
            run(journal, "include: other.txt\n")
        assert exc.value.target == "other.txt"
        assert exc.value.parent == SOURCE
        assert str(exc.value).startswith(f"In file: {SOURCE}\n")


class TestFileAssembler:
    def test_state_transitions(self, journal):
        assembler = FileAssembler(journal, SOURCE)
        assert assembler.state is ParseState.START
        tokens = list(tokenize("task: a\n\n----\nno_done_tasks: yes\n", SOURCE))

        assembler.feed(*tokens[0])
        assert assembler.state is ParseState.TASK
        assembler.feed(*tokens[1])
        assert assembler.state is ParseState.PRE_BLOCK
        assert len(journal.tasks) == 1
        assembler.feed(*tokens[2])
        assert assembler.state is ParseState.TASK_SEPARATOR
        assembler.feed(*tokens[3])
        assert assembler.state is ParseState.DIRECTIVE
        assert assembler.switches.no_done_tasks

    def test_finish_flushes_last_task(self, journal):
        assembler = FileAssembler(journal, SOURCE)
        for token in tokenize("task: a", SOURCE):
            assembler.feed(*token)
        assert journal.tasks == {}
        assert assembler.finish() == 1
        assert journal.tasks[1].title == "a"
