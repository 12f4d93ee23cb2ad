"""Journal classification and bucketing engine - no I/O dependencies."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path

from .datetimes import SECONDS_PER_DAY
from .errors import DirectiveViolation, TaskValidationError
from .fields import DeferForever, DeferUntil
from .filters import TaskFilters
from .tasks import Task

logger = logging.getLogger(__name__)

PULSE_DAYS = 7


class Category(Enum):
    """The single display bucket a task belongs to."""

    OVERDUE = "overdue"
    INBOX = "inbox"
    DEFERRED = "deferred"
    DONE = "done"


class TaskBucket:
    """
    Ordered map from an integer key to task ids.

    Groups iterate by key (highest first when `descending`); ids within a
    group keep their order of appearance.
    """

    def __init__(self, descending: bool = False):
        self.descending = descending
        self._groups: dict[int, list[int]] = {}

    def add(self, key: int, task_id: int) -> None:
        self._groups.setdefault(key, []).append(task_id)

    def groups(self) -> list[tuple[int, list[int]]]:
        return sorted(self._groups.items(), reverse=self.descending)

    def task_ids(self) -> list[int]:
        return [task_id for _, ids in self.groups() for task_id in ids]

    def __iter__(self) -> Iterator[int]:
        return iter(self.task_ids())

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._groups.values())


@dataclass
class DirectiveSwitches:
    """Per-file directive state. Reset for every file parsed."""

    no_done_tasks: bool = False
    required_project_prefix: tuple[str, ...] | None = None


@dataclass
class FileStats:
    """Task ids per category plus the tags, contexts and projects seen in one file."""

    path: Path
    categories: dict[Category, list[int]] = field(
        default_factory=lambda: {category: [] for category in Category}
    )
    tags: set[str] = field(default_factory=set)
    contexts: set[str] = field(default_factory=set)
    projects: set[str] = field(default_factory=set)

    def record(self, task_id: int, category: Category, task: Task) -> None:
        self.categories[category].append(task_id)
        self.tags.update(task.tags or ())
        self.contexts.update(task.contexts or ())
        if task.project_path:
            self.projects.add(task.project_path)

    def ids(self, category: Category) -> list[int]:
        return self.categories[category]

    @property
    def total(self) -> int:
        return sum(len(ids) for ids in self.categories.values())


class Journal:
    """
    All tasks from one run, classified into display buckets.

    Mutated while files are parsed; read-only afterwards.
    """

    def __init__(
        self,
        base_root: Path | str | None = None,
        filters: TaskFilters | None = None,
        *,
        as_of: datetime | None = None,
        due_within: int = 0,
        reveal_deferred: bool = False,
        sort_overdue_by_priority: bool = False,
    ):
        self.base_root = Path(base_root) if base_root is not None else None
        self.filters = filters or TaskFilters()
        self.as_of = as_of or datetime.now()
        self.due_within = due_within
        self.reveal_deferred = reveal_deferred
        self.sort_overdue_by_priority = sort_overdue_by_priority

        self.tasks: dict[int, Task] = {}
        self.file_stats: dict[Path, FileStats] = {}
        # days ago -> ids of tasks completed that day
        self.pulse: dict[int, list[int]] = {}
        self.current_task_id: int | None = None

        self.overdue = TaskBucket(descending=sort_overdue_by_priority)
        self.inbox = TaskBucket(descending=True)
        self.deferred = TaskBucket(descending=True)
        self.done = TaskBucket(descending=True)

    # ---- files ----

    def open_file(self, path: Path) -> FileStats:
        """Register a source file; a file reached twice through a diamond keeps one entry."""
        return self.file_stats.setdefault(path, FileStats(path))

    def relative_path(self, path: Path) -> str:
        """Render `path` relative to the invocation directory when it lies below it."""
        if self.base_root is not None:
            try:
                return str(path.relative_to(self.base_root))
            except ValueError:
                pass
        return str(path)

    # ---- classification ----

    def is_overdue(self, task: Task) -> bool:
        if task.due_at is None:
            return False
        return task.due_at <= self.as_of + timedelta(seconds=self.due_within)

    def seconds_until_due(self, task: Task) -> int:
        """Negative once the due time has passed."""
        return int((task.due_at - self.as_of).total_seconds())

    def should_defer(self, task: Task) -> bool:
        if self.reveal_deferred:
            return False
        match task.defer:
            case DeferForever():
                return True
            case DeferUntil(at=at):
                return at > self.as_of
        return False

    def classify(self, task: Task) -> Category:
        if task.is_done:
            return Category.DONE
        if self.is_overdue(task):
            return Category.OVERDUE
        if self.should_defer(task):
            return Category.DEFERRED
        return Category.INBOX

    def bucket(self, category: Category) -> TaskBucket:
        return {
            Category.OVERDUE: self.overdue,
            Category.INBOX: self.inbox,
            Category.DEFERRED: self.deferred,
            Category.DONE: self.done,
        }[category]

    # ---- insertion ----

    def next_task_id(self) -> int:
        return len(self.tasks) + 1

    def check_directives(self, task: Task, switches: DirectiveSwitches) -> None:
        if switches.no_done_tasks and task.is_done:
            raise DirectiveViolation(
                "Found a completed task that is not supposed to be in this file "
                f"(file_no_done_tasks), {task.line_range_text()}",
                rule="file_no_done_tasks",
                path=task.source_file,
                line_range=(task.start_line, task.end_line),
                task=task,
            )

        prefix = switches.required_project_prefix
        if prefix and task.project and task.project[: len(prefix)] != prefix:
            raise DirectiveViolation(
                f"Task project '{task.project_path}' does not start with the required "
                f"prefix '{'/'.join(prefix)}', {task.line_range_text()}",
                rule="required_project_prefix",
                path=task.source_file,
                line_range=(task.start_line, task.end_line),
                task=task,
            )

    def add_task(self, task: Task, switches: DirectiveSwitches | None = None) -> int:
        """Validate, store and bucket a finished task. Returns its id."""
        if switches is not None:
            self.check_directives(task, switches)

        task_id = self.next_task_id()

        if task.current:
            if self.current_task_id is not None:
                first = self.tasks[self.current_task_id]
                raise TaskValidationError(
                    f"More than one task is marked as current: task {task.line_range_text()} "
                    f"and task {first.line_range_text()} in {first.source_file}",
                    rule="duplicate-current",
                    path=task.source_file,
                    line_range=(task.start_line, task.end_line),
                    task_id=task_id,
                    task=task,
                )
            self.current_task_id = task_id

        if task.done_at is not None:
            self._add_to_pulse(task.done_at, task_id)

        category = self.classify(task)
        self.open_file(task.source_file).record(task_id, category, task)

        self.tasks[task_id] = task

        if self.filters.hides(task):
            logger.debug(f"Task {task_id} hidden by filters: {task.title}")
            return task_id

        self._add_to_bucket(category, task, task_id)
        logger.debug(f"Task {task_id} -> {category.value}: {task.title}")
        return task_id

    def _add_to_bucket(self, category: Category, task: Task, task_id: int) -> None:
        if category is Category.OVERDUE and not self.sort_overdue_by_priority:
            # most overdue first
            self.overdue.add(self.seconds_until_due(task), task_id)
        else:
            self.bucket(category).add(task.priority, task_id)

    # ---- pulse ----

    def _add_to_pulse(self, done_at: datetime, task_id: int) -> None:
        elapsed = (self.as_of - done_at).total_seconds()
        if not 0 <= elapsed <= PULSE_DAYS * SECONDS_PER_DAY:
            return
        days_ago = int(elapsed // SECONDS_PER_DAY)
        self.pulse.setdefault(days_ago, []).append(task_id)

    def pulse_counts(self) -> list[int]:
        """Completed-task counts for 0 through PULSE_DAYS days ago."""
        return [len(self.pulse.get(days_ago, [])) for days_ago in range(PULSE_DAYS + 1)]

    # ---- views ----

    def tasks_in(self, category: Category) -> list[Task]:
        return [self.tasks[task_id] for task_id in self.bucket(category)]

    @property
    def current_task(self) -> Task | None:
        if self.current_task_id is None:
            return None
        return self.tasks[self.current_task_id]
