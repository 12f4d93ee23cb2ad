"""Shared workflow layer between the CLI and library callers.

Reads a journal file graph through a FileSource, runs every file through the
grammar and state machine, and returns the populated Journal.
"""

import logging
from datetime import datetime
from pathlib import Path

from .adapters.local_files import LocalFileSource
from .config import Config
from .core.assembler import assemble
from .core.errors import IncludeError
from .core.filters import TaskFilters, parse_duration_option
from .core.journal import Journal
from .core.lines import Include, tokenize
from .core.scanner import decode
from .ports.file_source import FileSource

logger = logging.getLogger(__name__)


class JournalLoader:
    """
    Depth-first, pre-order loader for a graph of included journal files.

    The ancestor set and base directory are passed down each recursive call
    instead of living in process state, so a loader can be reused and never
    touches the working directory.
    """

    def __init__(self, journal: Journal, source: FileSource | None = None):
        self.journal = journal
        self.source = source or LocalFileSource(journal.base_root)

    def load(self, path: str | Path) -> Journal:
        root = self.source.resolve(path, self.journal.base_root)
        self._parse_file(root, parent=None, ancestors=frozenset(), base_dir=root.parent)
        logger.info(
            f"Loaded {len(self.journal.tasks)} tasks from {len(self.journal.file_stats)} file(s)"
        )
        return self.journal

    def _open(self, path: Path, parent: Path | None, ancestors: frozenset[Path]) -> str:
        if path in ancestors:
            raise IncludeError(
                f"Cyclic include detected: {path} is already being parsed",
                target=path,
                parent=parent,
            )
        if not self.source.is_file(path):
            raise IncludeError(f"File does not exist: {path}", target=path, parent=parent)
        try:
            data = self.source.read_bytes(path)
        except OSError as e:
            raise IncludeError(f"Unable to read file: {path} ({e})", target=path, parent=parent) from e
        return decode(data)

    def _parse_file(
        self,
        path: Path,
        parent: Path | None,
        ancestors: frozenset[Path],
        base_dir: Path,
    ) -> None:
        text = self._open(path, parent, ancestors)

        if path in self.journal.file_stats:
            logger.warning(f"{path} is included more than once")
        self.journal.open_file(path)
        logger.debug(f"Parsing {path}")

        nested = ancestors | {path}

        def on_include(include: Include) -> None:
            target = self.source.resolve(include.path, base_dir)
            logger.debug(f"{path} includes {target}")
            self._parse_file(target, parent=path, ancestors=nested, base_dir=target.parent)

        added = assemble(tokenize(text, path), self.journal, path, on_include)
        logger.info(f"Parsed {added} tasks from {self.journal.relative_path(path)}")


def build_filters(config: Config) -> TaskFilters:
    """Build visibility filters from config options."""
    return TaskFilters.from_options(
        tags=config.tags,
        contexts=config.contexts,
        projects=config.projects,
        priority=config.show_priority or None,
        show_only_flagged=config.show_only_flagged,
        hide_flagged=config.hide_flagged,
        hide_nonproject_tasks=config.hide_nonproject_tasks,
        hide_incomplete=config.hide_incomplete,
    )


def load_journal(
    path: str | Path,
    config: Config | None = None,
    *,
    source: FileSource | None = None,
    base_root: Path | None = None,
    as_of: datetime | None = None,
) -> Journal:
    """Parse `path` and everything it includes into a new Journal."""
    config = config or Config()
    journal = Journal(
        base_root or Path.cwd().resolve(),
        build_filters(config),
        as_of=as_of,
        due_within=parse_duration_option(config.due_within) if config.due_within else 0,
        reveal_deferred=config.reveal_deferred,
        sort_overdue_by_priority=config.sort_overdue_by_priority,
    )
    return JournalLoader(journal, source).load(path)
