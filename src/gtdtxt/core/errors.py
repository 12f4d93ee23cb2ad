"""Fatal error taxonomy. Every one of these aborts the whole run."""

from pathlib import Path


class GtdtxtError(Exception):
    """Base class for all fatal journal errors."""

    pass


class JournalParseError(GtdtxtError):
    """Raised when a line matches no field, directive, separator or comment shape."""

    def __init__(self, path: Path | str | None, line: int):
        self.path = path
        self.line = line
        super().__init__(f"Error parsing starting at line {line} in file: {path}")


class TaskValidationError(GtdtxtError):
    """Raised when a finished task block breaks a journal invariant."""

    def __init__(
        self,
        message: str,
        *,
        rule: str,
        path: Path | str | None = None,
        line_range: tuple[int, int] | None = None,
        task_id: int | None = None,
        task=None,
    ):
        self.rule = rule
        self.path = path
        self.line_range = line_range
        self.task_id = task_id
        # best-effort snapshot of the offending task (Task or TaskBuilder)
        self.task = task
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path is not None:
            msg = f"In file: {self.path}\n{msg}"
        return msg


class DirectiveViolation(TaskValidationError):
    """Raised when a task breaks a per-file directive such as file_no_done_tasks."""

    pass


class IncludeError(GtdtxtError):
    """Raised when an included file is missing, unreadable or cyclically included."""

    def __init__(self, message: str, *, target: Path | str, parent: Path | str | None = None):
        self.target = target
        self.parent = parent
        if parent is not None:
            message = f"In file: {parent}\n{message}"
        super().__init__(message)


class FilterExpressionError(GtdtxtError):
    """Raised when a user-supplied filter or duration option cannot be parsed."""

    pass
