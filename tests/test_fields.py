"""Tests for task-field grammars."""

from datetime import datetime

import pytest

from gtdtxt.core.fields import (
    ChainField,
    ContextsField,
    CreatedField,
    CurrentField,
    DeferField,
    DeferForever,
    DeferUntil,
    DoneField,
    DueField,
    FlagField,
    NoteField,
    PriorityField,
    ProjectField,
    RefField,
    Status,
    StatusField,
    TagsField,
    TimeSpentField,
    TitleField,
    parse_field,
)
from gtdtxt.core.scanner import Scanner


def parse(text: str):
    return parse_field(Scanner(text))


class TestTitleAndRef:
    @pytest.mark.parametrize("keyword", ["task", "todo", "action", "item", "TASK", "Todo"])
    def test_title_keywords(self, keyword):
        assert parse(f"{keyword}: Write report  \n") == TitleField("Write report")

    def test_empty_title_is_not_a_field(self):
        s = Scanner("task:   \n")
        assert parse_field(s) is None
        assert s.pos == 0

    def test_colon_must_follow_keyword(self):
        assert parse("task : x\n") is None

    def test_ref(self):
        assert parse("id: ABC-12\n") == RefField("ABC-12")


class TestNote:
    def test_single_line(self):
        assert parse("note: hello\n") == NoteField("hello")

    def test_continuation_lines_and_paragraph_breaks(self):
        s = Scanner("notes: first\n  second\n\n\tthird\ntask: next\n")
        assert parse_field(s) == NoteField("first\nsecond\n\nthird")
        assert s.rest_of_line() == "task: next"

    def test_trailing_blank_lines_left_for_next_token(self):
        s = Scanner("desc: only\n\n\n")
        assert parse_field(s) == NoteField("only")
        assert s.text[s.pos:] == "\n\n"

    def test_description_alias(self):
        assert parse("description: x") == NoteField("x")


class TestScalars:
    @pytest.mark.parametrize("text,expected", [("priority: 3", 3), ("priority: -2", -2), ("priority:+7", 7)])
    def test_priority(self, text, expected):
        assert parse(text) == PriorityField(expected)

    def test_priority_rejects_trailing_text(self):
        assert parse("priority: 3 high\n") is None

    @pytest.mark.parametrize("word,expected", [("yes", True), ("TRUE", True), ("no", False), ("false", False)])
    def test_flag(self, word, expected):
        assert parse(f"flag: {word}\n") == FlagField(expected)

    def test_flag_rejects_other_words(self):
        assert parse("flag: maybe\n") is None

    def test_time_accepts_compound_duration(self):
        assert parse("time: 1 hour and 30 minutes\n") == TimeSpentField(5400)

    @pytest.mark.parametrize(
        "word,expected",
        [
            ("done", Status.DONE),
            ("fin", Status.DONE),
            ("finished", Status.DONE),
            ("someday", Status.INCUBATE),
            ("hidden", Status.INCUBATE),
            ("not active", Status.INCUBATE),
            ("in-progress", Status.NOT_DONE),
            ("not done", Status.NOT_DONE),
            ("Pending", Status.NOT_DONE),
        ],
    )
    def test_status_aliases(self, word, expected):
        assert parse(f"status: {word}\n") == StatusField(expected)

    def test_unknown_status_fails(self):
        assert parse("status: blocked\n") is None


class TestLists:
    def test_project_path(self):
        assert parse("project: work / reports/q3\n") == ProjectField(("work", "reports", "q3"))

    def test_tags_drop_empty_segments(self):
        assert parse("tags: a, , b,\n") == TagsField(("a", "b"))

    def test_contexts(self):
        assert parse("context: home, phone\n") == ContextsField(("home", "phone"))

    def test_only_delimiters_is_absent(self):
        assert parse("tag: , ,\n") == TagsField(None)


class TestTimestamps:
    def test_created_aliases(self):
        expected = CreatedField(datetime(2024, 6, 1, 0, 0))
        assert parse("created: June 1, 2024\n") == expected
        assert parse("added at: June 1, 2024\n") == expected
        assert parse("date: June 1, 2024\n") == expected

    def test_done_with_time(self):
        assert parse("done at: June 1, 2024 5pm\n") == DoneField(datetime(2024, 6, 1, 17, 0))

    def test_due_defaults_to_end_of_day(self):
        assert parse("due: June 1, 2024\n") == DueField(datetime(2024, 6, 1, 23, 59))

    def test_chain(self):
        assert parse("chain: June 2, 2024\n") == ChainField(datetime(2024, 6, 2))

    def test_invalid_date_fails(self):
        assert parse("due: June 31, 2024\n") is None


class TestDefer:
    def test_forever(self):
        assert parse("defer: forever\n") == DeferField(DeferForever())

    @pytest.mark.parametrize("keyword", ["defer until", "defer till", "hide until", "hide", "hidden"])
    def test_until(self, keyword):
        assert parse(f"{keyword}: June 5, 2024\n") == DeferField(DeferUntil(datetime(2024, 6, 5)))


class TestCurrent:
    @pytest.mark.parametrize("text", ["current\n", "current:\n", "Current :  \n", "current"])
    def test_bare_marker(self, text):
        assert parse(text) == CurrentField()

    def test_current_with_value_fails(self):
        assert parse("current: yes\n") is None
