"""Visibility filters applied to classified tasks - no I/O dependencies."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .datetimes import parse_duration, parse_whole
from .errors import FilterExpressionError
from .priority import PriorityFilterTree, parse_priority_filter
from .projects import ProjectPathTree
from .tasks import Task


def split_option_list(value: str, delim: str) -> list[str]:
    """Split a CLI/config list option, trimming items and dropping empty ones."""
    return [item.strip() for item in value.split(delim) if item.strip()]


def parse_duration_option(value: str) -> int:
    """Parse a duration option such as "2 days" or "1 hour and 30 minutes" to seconds."""
    seconds = parse_whole(parse_duration, value)
    if seconds is None:
        raise FilterExpressionError(f"Invalid duration: {value!r}")
    return seconds


@dataclass
class TaskFilters:
    """
    Allow-lists and toggles deciding whether a task is displayed at all.

    A hidden task is still stored in the journal lookup table and counted
    in file stats; it just never lands in a display bucket.
    """

    tags: frozenset[str] = frozenset()
    contexts: frozenset[str] = frozenset()
    projects: ProjectPathTree = field(default_factory=ProjectPathTree)
    priority: PriorityFilterTree | None = None
    show_only_flagged: bool = False
    hide_flagged: bool = False
    hide_nonproject_tasks: bool = False
    hide_incomplete: bool = False

    @classmethod
    def from_options(
        cls,
        tags: Iterable[str] = (),
        contexts: Iterable[str] = (),
        projects: Iterable[str] = (),
        priority: str | None = None,
        **toggles: bool,
    ) -> "TaskFilters":
        """
        Build filters from raw option strings.

        Each tag/context option may itself be a comma list and each project
        option a `/` path. Raises FilterExpressionError on malformed input.
        """
        project_paths = []
        for project in projects:
            path = split_option_list(project, "/")
            if not path:
                raise FilterExpressionError(f"Invalid project path: {project!r}")
            project_paths.append(path)

        return cls(
            tags=frozenset(t for raw in tags for t in split_option_list(raw, ",")),
            contexts=frozenset(c for raw in contexts for c in split_option_list(raw, ",")),
            projects=ProjectPathTree(project_paths),
            priority=parse_priority_filter(priority) if priority else None,
            **toggles,
        )

    def hides(self, task: Task) -> bool:
        if self.tags and not self.tags.intersection(task.tags or ()):
            return True

        if self.contexts and not self.contexts.intersection(task.contexts or ()):
            return True

        if self.projects and not self.projects.matches(task.project):
            return True

        if self.hide_nonproject_tasks and not task.project:
            return True

        if self.priority is not None and not self.priority.matches(task.priority):
            return True

        if self.hide_incomplete and not task.is_done:
            return True

        if self.show_only_flagged:
            return not task.flag

        if self.hide_flagged:
            return task.flag

        return False
