"""Line classifier - turns journal text into a stream of line tokens.

A line that starts with non-whitespace is tried as a task separator, a task
field, then a directive. Anything else (blank lines, comments, block
comments) is swallowed as a pre-block.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .errors import JournalParseError
from .fields import TaskField, parse_bool, parse_field, parse_string_list
from .scanner import Scanner, count_line_terminators

SEPARATOR_CHARS = "-=_#/:~*"
ONE_LINE_COMMENTS = ("//", "#", ";")


# ============== Directives ==============


@dataclass(frozen=True)
class Include:
    path: str

    def __post_init__(self):
        if not self.path:
            raise ValueError("include path cannot be empty")


@dataclass(frozen=True)
class NoDoneTasks:
    enabled: bool


@dataclass(frozen=True)
class RequiredProjectPrefix:
    # None clears the requirement
    prefix: tuple[str, ...] | None


Directive = Include | NoDoneTasks | RequiredProjectPrefix

NO_DONE_TASKS_KEYWORDS = ("file_no_done_tasks", "file_no_completed_tasks", "no_done_tasks")
PROJECT_PREFIX_KEYWORDS = ("required_project_prefix", "project_prefix")


# ============== Line tokens ==============


@dataclass(frozen=True)
class FieldLine:
    field: TaskField


@dataclass(frozen=True)
class DirectiveLine:
    directive: Directive


@dataclass(frozen=True)
class PreBlock:
    """Blank lines and comments."""


@dataclass(frozen=True)
class TaskSeparator:
    """A run of four or more separator characters."""


LineToken = FieldLine | DirectiveLine | PreBlock | TaskSeparator


# ============== Grammars ==============


def _task_separator(s: Scanner) -> TaskSeparator | None:
    start = s.pos
    for char in SEPARATOR_CHARS:
        if s.literal(char * 4):
            while s.literal(char):
                pass
            if s.finish_line():
                return TaskSeparator()
            s.pos = start
            return None
    return None


def _keyword(s: Scanner, keywords) -> bool:
    start = s.pos
    if s.one_of(keywords) is not None and s.literal(":"):
        return True
    s.pos = start
    return False


def _directive(s: Scanner) -> DirectiveLine | None:
    start = s.pos

    if _keyword(s, ("include",)):
        s.space_or_tab()
        line = s.non_empty_line()
        if line is not None:
            return DirectiveLine(Include(line.strip()))
    elif _keyword(s, NO_DONE_TASKS_KEYWORDS):
        s.space_or_tab()
        enabled = parse_bool(s)
        if enabled is not None and s.finish_line():
            return DirectiveLine(NoDoneTasks(enabled))
    elif _keyword(s, PROJECT_PREFIX_KEYWORDS):
        prefix = parse_string_list(s, "/")
        if prefix is not None:
            return DirectiveLine(RequiredProjectPrefix(prefix or None))

    s.pos = start
    return None


def _one_line_comment(s: Scanner) -> bool:
    if s.one_of(ONE_LINE_COMMENTS, ignore_case=False) is None:
        return False
    s.line()
    return True


def _block_comment(s: Scanner) -> bool:
    if s.peek(2) != "/*":
        return False
    end = s.text.find("*/", s.pos + 2)
    if end == -1:
        return False
    s.pos = end + 2
    return True


def _pre_block(s: Scanner) -> PreBlock | None:
    """Whitespace and block comments up to a one-line comment or a line end."""
    start = s.pos
    while True:
        if _one_line_comment(s) or s.terminating():
            return PreBlock()
        if s.whitespace() or _block_comment(s):
            continue
        s.pos = start
        return None


def next_token(s: Scanner) -> LineToken | None:
    """Classify the line at the cursor, or None if nothing matches."""
    if not s.peek().isspace():
        separator = _task_separator(s)
        if separator is not None:
            return separator
        field = parse_field(s)
        if field is not None:
            return FieldLine(field)
        directive = _directive(s)
        if directive is not None:
            return directive
    return _pre_block(s)


def tokenize(text: str, path: Path | str | None = None) -> Iterator[tuple[LineToken, int, int]]:
    """
    Yield (token, first_line, last_line) for each token in `text`.

    Line numbers are 1-based. A token that consumes no line terminator (the
    last line of a file without a trailing newline) still counts as one line.
    """
    s = Scanner(text)
    lines_parsed = 0

    while not s.at_end:
        start = s.pos
        token = next_token(s)
        if token is None or s.pos == start:
            raise JournalParseError(path, lines_parsed + 1)

        consumed = count_line_terminators(text, start, s.pos) or 1
        first_line = lines_parsed + 1
        lines_parsed += consumed
        yield token, first_line, lines_parsed
