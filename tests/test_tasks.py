"""Tests for task assembly and validation."""

from datetime import datetime
from pathlib import Path

import pytest

from gtdtxt.core.errors import TaskValidationError
from gtdtxt.core.fields import (
    ChainField,
    DoneField,
    ProjectField,
    Status,
    StatusField,
    TagsField,
    TimeSpentField,
    TitleField,
)
from gtdtxt.core.tasks import Task, TaskBuilder, line_range_text


@pytest.fixture
def builder():
    return TaskBuilder(Path("/journal/todo.txt"), start_line=3)


class TestTaskBuilder:
    def test_build_minimal(self, builder):
        builder.apply(TitleField("Write report"), 3)
        task = builder.build()
        assert isinstance(task, Task)
        assert task.title == "Write report"
        assert (task.start_line, task.end_line) == (3, 3)
        assert task.priority == 0
        assert task.status is None

    def test_end_line_tracks_last_field(self, builder):
        builder.apply(TitleField("a"), 3)
        builder.apply(TagsField(("x",)), 7)
        assert builder.build().end_line == 7

    def test_last_value_wins(self, builder):
        builder.apply(TitleField("first"))
        builder.apply(TitleField("second"))
        assert builder.build().title == "second"

    def test_time_accumulates(self, builder):
        builder.apply(TitleField("a"))
        builder.apply(TimeSpentField(3600))
        builder.apply(TimeSpentField(1800))
        assert builder.build().time_spent == 5400

    def test_chains_sorted_and_unique(self, builder):
        builder.apply(TitleField("habit"))
        for day in (5, 1, 3, 5):
            builder.apply(ChainField(datetime(2024, 6, day)))
        task = builder.build()
        assert task.chains == (datetime(2024, 6, 1), datetime(2024, 6, 3), datetime(2024, 6, 5))
        assert task.latest_chain == datetime(2024, 6, 5)

    def test_tags_deduplicated_in_order(self, builder):
        builder.apply(TitleField("a"))
        builder.apply(TagsField(("b", "a", "b")))
        assert builder.build().tags == ("b", "a")

    def test_empty_list_resets_field(self, builder):
        builder.apply(TitleField("a"))
        builder.apply(ProjectField(("work",)))
        builder.apply(ProjectField(None))
        assert builder.build().project is None

    def test_built_task_is_immutable(self, builder):
        builder.apply(TitleField("a"))
        task = builder.build()
        with pytest.raises(AttributeError):
            task.title = "b"


class TestValidation:
    def test_missing_title(self, builder):
        builder.apply(StatusField(Status.DONE), 4)
        with pytest.raises(TaskValidationError) as exc:
            builder.build()
        assert exc.value.rule == "missing-title"
        assert exc.value.line_range == (3, 4)
        assert "between lines 3 and 4" in str(exc.value)
        assert str(exc.value).startswith("In file: /journal/todo.txt")

    def test_done_status_without_done_time_is_fine(self, builder):
        builder.apply(TitleField("a"))
        builder.apply(StatusField(Status.DONE))
        task = builder.build()
        assert task.is_done
        assert task.done_at is None

    def test_done_time_without_status_fails(self, builder):
        builder.apply(TitleField("a"))
        builder.apply(DoneField(datetime(2024, 6, 1)))
        with pytest.raises(TaskValidationError) as exc:
            builder.build()
        assert exc.value.rule == "done-without-status"
        assert "status: done" in str(exc.value)

    def test_done_time_with_other_status_fails(self, builder):
        builder.apply(TitleField("a"))
        builder.apply(StatusField(Status.INCUBATE))
        builder.apply(DoneField(datetime(2024, 6, 1)))
        with pytest.raises(TaskValidationError):
            builder.build()


class TestLineRangeText:
    def test_single_line(self):
        assert line_range_text(4, 4) == "on line 4"

    def test_range(self):
        assert line_range_text(4, 9) == "between lines 4 and 9"
