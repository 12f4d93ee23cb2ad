"""Task-field tokens and the grammars that produce them - no I/O dependencies.

A field line is `<keyword>: <value>`, the keyword matched case-insensitively
from a fixed alias table. Notes may continue on following indented lines.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .datetimes import parse_datetime, parse_duration
from .scanner import Scanner


class Status(Enum):
    """Task status as written in a `status:` field."""

    DONE = "done"
    INCUBATE = "incubate"
    NOT_DONE = "not_done"


STATUS_ALIASES = {
    "done": Status.DONE,
    "complete": Status.DONE,
    "completed": Status.DONE,
    "finished": Status.DONE,
    "finish": Status.DONE,
    "fin": Status.DONE,
    "hide": Status.INCUBATE,
    "hidden": Status.INCUBATE,
    "incubate": Status.INCUBATE,
    "later": Status.INCUBATE,
    "someday": Status.INCUBATE,
    "inactive": Status.INCUBATE,
    "not active": Status.INCUBATE,
    "active": Status.NOT_DONE,
    "not done": Status.NOT_DONE,
    "progress": Status.NOT_DONE,
    "in progress": Status.NOT_DONE,
    "in-progress": Status.NOT_DONE,
    "pending": Status.NOT_DONE,
    "is active": Status.NOT_DONE,
}

BOOLEAN_WORDS = {"yes": True, "true": True, "no": False, "false": False}


@dataclass(frozen=True)
class DeferForever:
    """Hide the task until it is manually reactivated."""


@dataclass(frozen=True)
class DeferUntil:
    """Hide the task until `at` has passed."""

    at: datetime


Defer = DeferForever | DeferUntil


# ============== Field tokens ==============


@dataclass(frozen=True)
class TitleField:
    text: str

    def __post_init__(self):
        if not self.text:
            raise ValueError("task title cannot be empty")


@dataclass(frozen=True)
class RefField:
    """Free-form `id:` label."""

    text: str


@dataclass(frozen=True)
class NoteField:
    text: str


@dataclass(frozen=True)
class PriorityField:
    value: int


@dataclass(frozen=True)
class ProjectField:
    # None when the written list had no non-empty segments
    path: tuple[str, ...] | None


@dataclass(frozen=True)
class TagsField:
    items: tuple[str, ...] | None


@dataclass(frozen=True)
class ContextsField:
    items: tuple[str, ...] | None


@dataclass(frozen=True)
class FlagField:
    value: bool


@dataclass(frozen=True)
class CreatedField:
    at: datetime


@dataclass(frozen=True)
class DoneField:
    at: datetime


@dataclass(frozen=True)
class ChainField:
    at: datetime


@dataclass(frozen=True)
class DueField:
    at: datetime


@dataclass(frozen=True)
class DeferField:
    defer: Defer


@dataclass(frozen=True)
class StatusField:
    status: Status


@dataclass(frozen=True)
class TimeSpentField:
    seconds: int

    def __post_init__(self):
        if self.seconds < 0:
            raise ValueError("time spent cannot be negative")


@dataclass(frozen=True)
class CurrentField:
    """Bare `current` marker."""


TaskField = (
    TitleField
    | RefField
    | NoteField
    | PriorityField
    | ProjectField
    | TagsField
    | ContextsField
    | FlagField
    | CreatedField
    | DoneField
    | ChainField
    | DueField
    | DeferField
    | StatusField
    | TimeSpentField
    | CurrentField
)


# ============== Shared value grammars ==============


def parse_bool(s: Scanner) -> bool | None:
    word = s.one_of(BOOLEAN_WORDS)
    return BOOLEAN_WORDS[word.lower()] if word else None


def parse_string_list(s: Scanner, delim: str) -> tuple[str, ...] | None:
    """
    Split the rest of the line on `delim`, trimming segments and dropping empty ones.

    Fails on a blank line. A line of only delimiters yields an empty tuple.
    """
    start = s.pos
    line = s.line()
    if not line.strip():
        s.pos = start
        return None
    return tuple(item.strip() for item in line.split(delim) if item.strip())


def _value_then_eol(s: Scanner, parse: Callable[[Scanner], object]):
    """Optional spaces, a value, then only spaces/tabs to the end of the line."""
    start = s.pos
    s.space_or_tab()
    value = parse(s)
    if value is None or not s.finish_line():
        s.pos = start
        return None
    return value


# ============== Field value grammars ==============


def _title(s: Scanner) -> TitleField | None:
    line = s.non_empty_line()
    return TitleField(line.strip()) if line is not None else None


def _ref(s: Scanner) -> RefField | None:
    line = s.non_empty_line()
    return RefField(line.strip()) if line is not None else None


def _note(s: Scanner) -> NoteField:
    """
    First line plus indented continuation lines.

    Blank lines between continuation lines are kept as paragraph breaks;
    trailing blank lines are left for the next token.
    """
    s.space_or_tab()
    first = s.line().strip()
    lines = [first] if first else []

    while True:
        mark = s.pos
        blanks = 0
        while True:
            blank_start = s.pos
            s.space_or_tab()
            if s.end_of_line():
                blanks += 1
                continue
            s.pos = blank_start
            break

        if s.space_or_tab1():
            continuation = s.non_empty_line()
            if continuation is not None:
                lines.extend([""] * blanks)
                lines.append(continuation.strip())
                continue

        s.pos = mark
        break

    return NoteField("\n".join(lines).strip())


def _priority(s: Scanner) -> PriorityField | None:
    value = _value_then_eol(s, lambda s: s.signed_decimal())
    return PriorityField(value) if value is not None else None


def _project(s: Scanner) -> ProjectField | None:
    items = parse_string_list(s, "/")
    if items is None:
        return None
    return ProjectField(items or None)


def _tags(s: Scanner) -> TagsField | None:
    items = parse_string_list(s, ",")
    if items is None:
        return None
    return TagsField(items or None)


def _contexts(s: Scanner) -> ContextsField | None:
    items = parse_string_list(s, ",")
    if items is None:
        return None
    return ContextsField(items or None)


def _flag(s: Scanner) -> FlagField | None:
    value = _value_then_eol(s, parse_bool)
    return FlagField(value) if value is not None else None


def _timestamp(field_type, end_of_day: bool = False):
    def parse(s: Scanner):
        at = _value_then_eol(s, lambda s: parse_datetime(s, end_of_day))
        return field_type(at) if at is not None else None

    return parse


def _defer_value(s: Scanner) -> Defer | None:
    if s.literal("forever"):
        return DeferForever()
    at = parse_datetime(s)
    return DeferUntil(at) if at is not None else None


def _defer(s: Scanner) -> DeferField | None:
    defer = _value_then_eol(s, _defer_value)
    return DeferField(defer) if defer is not None else None


def _status(s: Scanner) -> StatusField | None:
    def status_word(s: Scanner) -> Status | None:
        word = s.one_of(STATUS_ALIASES)
        return STATUS_ALIASES[word.lower()] if word else None

    status = _value_then_eol(s, status_word)
    return StatusField(status) if status is not None else None


def _time_spent(s: Scanner) -> TimeSpentField | None:
    seconds = _value_then_eol(s, parse_duration)
    return TimeSpentField(seconds) if seconds is not None else None


FIELD_KEYWORDS: dict[str, Callable[[Scanner], TaskField | None]] = {
    "task": _title,
    "todo": _title,
    "action": _title,
    "item": _title,
    "id": _ref,
    "notes": _note,
    "note": _note,
    "description": _note,
    "desc": _note,
    "priority": _priority,
    "project": _project,
    "flag": _flag,
    "created at": _timestamp(CreatedField),
    "created": _timestamp(CreatedField),
    "date": _timestamp(CreatedField),
    "added at": _timestamp(CreatedField),
    "added": _timestamp(CreatedField),
    "done at": _timestamp(DoneField),
    "done": _timestamp(DoneField),
    "completed": _timestamp(DoneField),
    "complete": _timestamp(DoneField),
    "chain": _timestamp(ChainField),
    "status": _status,
    "due": _timestamp(DueField, end_of_day=True),
    "defer till": _defer,
    "defer until": _defer,
    "defer": _defer,
    "hide until": _defer,
    "hide till": _defer,
    "hidden": _defer,
    "hide": _defer,
    "contexts": _contexts,
    "context": _contexts,
    "tags": _tags,
    "tag": _tags,
    "time": _time_spent,
}


def _current(s: Scanner) -> CurrentField | None:
    start = s.pos
    if s.literal("current"):
        s.space_or_tab()
        s.literal(":")
        if s.finish_line():
            return CurrentField()
    s.pos = start
    return None


def parse_field(s: Scanner) -> TaskField | None:
    """Parse one task-field line (continuations included for notes)."""
    current = _current(s)
    if current is not None:
        return current

    start = s.pos
    keyword = s.one_of(FIELD_KEYWORDS)
    if keyword is None or not s.literal(":"):
        s.pos = start
        return None

    field = FIELD_KEYWORDS[keyword.lower()](s)
    if field is None:
        s.pos = start
    return field
