"""Task records and the builder that assembles them - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .errors import TaskValidationError
from .fields import (
    ChainField,
    ContextsField,
    CreatedField,
    CurrentField,
    Defer,
    DeferField,
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
    TaskField,
    TimeSpentField,
    TitleField,
)


def line_range_text(start: int, end: int) -> str:
    if start == end:
        return f"on line {start}"
    return f"between lines {start} and {end}"


@dataclass(frozen=True)
class Task:
    """A validated task block. Immutable once stored in a Journal."""

    source_file: Path
    start_line: int
    end_line: int
    title: str
    ref: str | None = None
    note: str | None = None
    created_at: datetime | None = None
    done_at: datetime | None = None
    due_at: datetime | None = None
    defer: Defer | None = None
    status: Status | None = None
    project: tuple[str, ...] | None = None
    tags: tuple[str, ...] | None = None
    contexts: tuple[str, ...] | None = None
    priority: int = 0
    time_spent: int = 0
    flag: bool = False
    current: bool = False
    # chronological, no duplicates
    chains: tuple[datetime, ...] = ()

    @property
    def is_done(self) -> bool:
        return self.status is Status.DONE

    @property
    def latest_chain(self) -> datetime | None:
        """Most recent chain timestamp; the only one ever surfaced."""
        return self.chains[-1] if self.chains else None

    @property
    def project_path(self) -> str | None:
        return "/".join(self.project) if self.project else None

    def line_range_text(self) -> str:
        return line_range_text(self.start_line, self.end_line)


@dataclass
class TaskBuilder:
    """
    Mutable, in-progress task block.

    Fields may arrive in any order across many lines, so validation waits
    until `build()` at flush time.
    """

    source_file: Path
    start_line: int
    end_line: int = 0
    title: str | None = None
    ref: str | None = None
    note: str | None = None
    created_at: datetime | None = None
    done_at: datetime | None = None
    due_at: datetime | None = None
    defer: Defer | None = None
    status: Status | None = None
    project: tuple[str, ...] | None = None
    tags: tuple[str, ...] | None = None
    contexts: tuple[str, ...] | None = None
    priority: int = 0
    time_spent: int = 0
    flag: bool = False
    current: bool = False
    chains: set[datetime] = field(default_factory=set)

    def __post_init__(self):
        self.end_line = max(self.end_line, self.start_line)

    def apply(self, task_field: TaskField, line: int | None = None) -> None:
        """Apply one field token; `line` is the last line the token covered."""
        if line is not None:
            self.end_line = max(self.end_line, line)

        match task_field:
            case TitleField(text=text):
                self.title = text
            case RefField(text=text):
                self.ref = text
            case NoteField(text=text):
                self.note = text or None
            case PriorityField(value=value):
                self.priority = value
            case ProjectField(path=path):
                self.project = path
            case TagsField(items=items):
                self.tags = _unique(items)
            case ContextsField(items=items):
                self.contexts = _unique(items)
            case FlagField(value=value):
                self.flag = value
            case CreatedField(at=at):
                self.created_at = at
            case DoneField(at=at):
                self.done_at = at
            case ChainField(at=at):
                self.chains.add(at)
            case DueField(at=at):
                self.due_at = at
            case DeferField(defer=defer):
                self.defer = defer
            case StatusField(status=status):
                self.status = status
            case TimeSpentField(seconds=seconds):
                self.time_spent += seconds
            case CurrentField():
                self.current = True
            case _:
                raise TypeError(f"Unknown task field: {task_field!r}")

    def line_range_text(self) -> str:
        return line_range_text(self.start_line, self.end_line)

    def build(self) -> Task:
        """Finalize into an immutable Task, enforcing per-task invariants."""
        if self.title is None:
            raise TaskValidationError(
                "Missing task title (i.e. `task: <title>`) in task block found "
                f"{self.line_range_text()}",
                rule="missing-title",
                path=self.source_file,
                line_range=(self.start_line, self.end_line),
                task=self,
            )

        if self.done_at is not None and self.status is not Status.DONE:
            raise TaskValidationError(
                "Task is incorrectly given a `done` datetime found "
                f"{self.line_range_text()}\nMayhaps you forgot to add: 'status: done'",
                rule="done-without-status",
                path=self.source_file,
                line_range=(self.start_line, self.end_line),
                task=self,
            )

        return Task(
            source_file=self.source_file,
            start_line=self.start_line,
            end_line=self.end_line,
            title=self.title,
            ref=self.ref,
            note=self.note,
            created_at=self.created_at,
            done_at=self.done_at,
            due_at=self.due_at,
            defer=self.defer,
            status=self.status,
            project=self.project,
            tags=self.tags,
            contexts=self.contexts,
            priority=self.priority,
            time_spent=self.time_spent,
            flag=self.flag,
            current=self.current,
            chains=tuple(sorted(self.chains)),
        )


def _unique(items: tuple[str, ...] | None) -> tuple[str, ...] | None:
    if items is None:
        return None
    return tuple(dict.fromkeys(items))
