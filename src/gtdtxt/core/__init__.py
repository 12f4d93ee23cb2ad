"""Functional core - journal grammar and classification with no I/O."""

from .errors import (
    GtdtxtError,
    JournalParseError,
    TaskValidationError,
    DirectiveViolation,
    IncludeError,
    FilterExpressionError,
)
from .scanner import Scanner, decode
from .datetimes import parse_datetime, parse_duration, format_datetime, format_duration
from .fields import Status, DeferForever, DeferUntil
from .lines import Include, tokenize
from .tasks import Task, TaskBuilder
from .projects import ProjectPathTree
from .priority import PriorityFilterTree, parse_priority_filter
from .filters import TaskFilters
from .journal import Category, TaskBucket, FileStats, Journal
from .assembler import ParseState, FileAssembler, assemble

__all__ = [
    # Errors
    "GtdtxtError",
    "JournalParseError",
    "TaskValidationError",
    "DirectiveViolation",
    "IncludeError",
    "FilterExpressionError",
    # Grammar
    "Scanner",
    "decode",
    "parse_datetime",
    "parse_duration",
    "format_datetime",
    "format_duration",
    "Include",
    "tokenize",
    # Tasks
    "Status",
    "DeferForever",
    "DeferUntil",
    "Task",
    "TaskBuilder",
    # Filters
    "ProjectPathTree",
    "PriorityFilterTree",
    "parse_priority_filter",
    "TaskFilters",
    # Journal
    "Category",
    "TaskBucket",
    "FileStats",
    "Journal",
    "ParseState",
    "FileAssembler",
    "assemble",
]
