"""Parse-state machine that turns a line token stream into journal tasks."""

import logging
from collections.abc import Callable, Iterable
from enum import Enum, auto
from pathlib import Path

from .errors import IncludeError
from .journal import DirectiveSwitches, Journal
from .lines import (
    DirectiveLine,
    FieldLine,
    Include,
    LineToken,
    NoDoneTasks,
    PreBlock,
    RequiredProjectPrefix,
    TaskSeparator,
)
from .tasks import TaskBuilder

logger = logging.getLogger(__name__)

IncludeHandler = Callable[[Include], None]


class ParseState(Enum):
    START = auto()
    PRE_BLOCK = auto()
    TASK = auto()
    DIRECTIVE = auto()
    TASK_SEPARATOR = auto()


class FileAssembler:
    """
    Per-file state machine.

    Consecutive field lines build up one task; any other token flushes it to
    the journal. Include directives are handed to `on_include` after the
    open task has been flushed, so tasks keep their appearance order.
    """

    def __init__(self, journal: Journal, source_file: Path, on_include: IncludeHandler | None = None):
        self.journal = journal
        self.source_file = source_file
        self.on_include = on_include
        self.switches = DirectiveSwitches()
        self.state = ParseState.START
        self.builder: TaskBuilder | None = None
        self.tasks_added = 0

    def feed(self, token: LineToken, first_line: int, last_line: int) -> None:
        match token:
            case FieldLine(field=task_field):
                if self.builder is None:
                    self.builder = TaskBuilder(self.source_file, first_line)
                self.builder.apply(task_field, last_line)
                self.state = ParseState.TASK
            case DirectiveLine(directive=directive):
                self.flush()
                self._apply_directive(directive)
                self.state = ParseState.DIRECTIVE
            case PreBlock():
                self.flush()
                self.state = ParseState.PRE_BLOCK
            case TaskSeparator():
                self.flush()
                self.state = ParseState.TASK_SEPARATOR

    def flush(self) -> None:
        if self.builder is None:
            return
        task = self.builder.build()
        self.builder = None
        self.journal.add_task(task, self.switches)
        self.tasks_added += 1

    def finish(self) -> int:
        """Flush the last open task. Returns the number of tasks this file added."""
        self.flush()
        return self.tasks_added

    def _apply_directive(self, directive) -> None:
        match directive:
            case Include():
                if self.on_include is None:
                    raise IncludeError(
                        f"Include of {directive.path} found but no include handler was given",
                        target=directive.path,
                        parent=self.source_file,
                    )
                self.on_include(directive)
            case NoDoneTasks(enabled=enabled):
                self.switches.no_done_tasks = enabled
            case RequiredProjectPrefix(prefix=prefix):
                self.switches.required_project_prefix = prefix
        logger.debug(f"{self.source_file}: directive {directive}")


def assemble(
    tokens: Iterable[tuple[LineToken, int, int]],
    journal: Journal,
    source_file: Path,
    on_include: IncludeHandler | None = None,
) -> int:
    """Run one file's token stream through a fresh state machine."""
    assembler = FileAssembler(journal, source_file, on_include)
    for token, first_line, last_line in tokens:
        assembler.feed(token, first_line, last_line)
    return assembler.finish()
