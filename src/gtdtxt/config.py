"""Configuration management for gtdtxt."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

GTDTXT_HOME = Path(os.environ.get("GTDTXT_HOME", Path.home() / ".gtdtxt"))
CONFIG_FILE = GTDTXT_HOME / "gtdtxt.conf"

TRUE_VALUES = ("1", "yes", "true", "on")
FALSE_VALUES = ("0", "no", "false", "off")


@dataclass
class Config:
    """gtdtxt configuration. Command-line flags override these defaults."""

    default_file: str = ""
    # Display toggles
    show_done: bool = False
    show_deferred: bool = False
    hide_overdue: bool = False
    # Classification
    reveal_deferred: bool = False
    sort_overdue_by_priority: bool = False
    due_within: str = ""
    # Filters
    hide_incomplete: bool = False
    hide_nonproject_tasks: bool = False
    show_only_flagged: bool = False
    hide_flagged: bool = False
    show_priority: str = ""
    tags: list[str] = field(default_factory=list)
    contexts: list[str] = field(default_factory=list)
    projects: list[str] = field(default_factory=list)


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    logger.warning(f"Ignoring {key}: expected yes/no, got {value!r}")
    return default


def _parse_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _unquote(value: str) -> str:
    """Handle quoted values with inline comments: "value" # comment"""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from gtdtxt.conf (or `path`)."""
    config = Config()
    config_file = path or CONFIG_FILE

    if not config_file.exists():
        logger.debug(f"No config file at {config_file}, using defaults")
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "default_file" | "file":
                config.default_file = value
            case "show_done":
                config.show_done = _parse_bool(key, value, config.show_done)
            case "show_deferred":
                config.show_deferred = _parse_bool(key, value, config.show_deferred)
            case "hide_overdue":
                config.hide_overdue = _parse_bool(key, value, config.hide_overdue)
            case "reveal_deferred":
                config.reveal_deferred = _parse_bool(key, value, config.reveal_deferred)
            case "sort_overdue_by_priority":
                config.sort_overdue_by_priority = _parse_bool(
                    key, value, config.sort_overdue_by_priority
                )
            case "due_within":
                config.due_within = value
            case "hide_incomplete":
                config.hide_incomplete = _parse_bool(key, value, config.hide_incomplete)
            case "hide_nonproject_tasks":
                config.hide_nonproject_tasks = _parse_bool(key, value, config.hide_nonproject_tasks)
            case "show_only_flagged":
                config.show_only_flagged = _parse_bool(key, value, config.show_only_flagged)
            case "hide_flagged":
                config.hide_flagged = _parse_bool(key, value, config.hide_flagged)
            case "show_priority":
                config.show_priority = value
            case "tags" | "filter_by_tags":
                config.tags = _parse_list(value)
            case "contexts" | "filter_by_contexts":
                config.contexts = _parse_list(value)
            case "projects" | "filter_by_projects":
                config.projects = _parse_list(value)
            case _:
                logger.warning(f"Unknown config key: {key}")

    return config
