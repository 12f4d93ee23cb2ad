"""gtdtxt CLI - plain-text task journal."""

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from .config import Config, load_config
from .core.datetimes import format_datetime, format_duration
from .core.errors import GtdtxtError, TaskValidationError
from .core.journal import Category, Journal
from .core.tasks import Task
from .pipeline import load_journal


@click.group()
@click.version_option()
def main():
    """gtdtxt - plain-text task journal CLI."""
    pass


def _enable_debug(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


def _journal_path(file: str | None, config: Config) -> Path:
    if file:
        return Path(file)
    if config.default_file:
        return Path(config.default_file).expanduser()
    click.echo("Error: No journal file given and no default_file in gtdtxt.conf", err=True)
    sys.exit(1)


def _report(e: GtdtxtError) -> None:
    """Print a fatal error, with whatever was captured of the offending task."""
    click.echo(f"Error: {e}", err=True)
    if isinstance(e, TaskValidationError) and e.task is not None:
        task = e.task
        click.echo("Task:", err=True)
        for name in ("title", "project", "status", "due_at", "done_at"):
            value = getattr(task, name, None)
            if value is not None:
                click.echo(f"  {name}: {value}", err=True)
    sys.exit(1)


def _load(file: str | None, config: Config) -> Journal:
    path = _journal_path(file, config)
    try:
        return load_journal(path, config)
    except GtdtxtError as e:
        _report(e)


@main.command()
@click.argument("file", required=False)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def validate(file: str | None, debug: bool):
    """Parse a journal and everything it includes."""
    _enable_debug(debug)
    journal = _load(file, load_config())
    click.echo(f"OK: {len(journal.tasks)} tasks in {len(journal.file_stats)} file(s)")


def _format_task(task: Task) -> str:
    priority_marker = f"{task.priority:>3}" if task.priority else "   "
    details = []
    if task.due_at:
        details.append(f"due {format_datetime(task.due_at)}")
    if task.project_path:
        details.append(f"project: {task.project_path}")
    if task.time_spent:
        details.append(f"spent {format_duration(task.time_spent)}")
    suffix = f" ({', '.join(details)})" if details else ""
    flag = "* " if task.flag else ""
    return f"[{priority_marker}] {flag}{task.title}{suffix}"


def _serialize_task(journal: Journal, task_id: int, category: Category) -> dict:
    task = journal.tasks[task_id]
    return {
        "id": task_id,
        "category": category.value,
        "title": task.title,
        "ref": task.ref,
        "priority": task.priority,
        "status": task.status.value if task.status else None,
        "project": task.project_path,
        "tags": list(task.tags or ()),
        "contexts": list(task.contexts or ()),
        "due_at": task.due_at.isoformat() if task.due_at else None,
        "done_at": task.done_at.isoformat() if task.done_at else None,
        "time_spent": task.time_spent,
        "flag": task.flag,
        "current": task.current,
        "file": journal.relative_path(task.source_file),
        "lines": [task.start_line, task.end_line],
    }


@main.command()
@click.argument("file", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--show-done", is_flag=True, help="Include completed tasks")
@click.option("--show-deferred", is_flag=True, help="Include deferred tasks")
@click.option("--hide-overdue", is_flag=True, help="Omit overdue tasks")
@click.option("--reveal-deferred", is_flag=True, help="Treat deferred tasks as active")
@click.option("--hide-incomplete", is_flag=True, help="Only show completed tasks")
@click.option("--hide-nonproject-tasks", is_flag=True, help="Only show tasks with a project")
@click.option("--only-flagged", "show_only_flagged", is_flag=True, help="Only show flagged tasks")
@click.option("--hide-flagged", is_flag=True, help="Omit flagged tasks")
@click.option("--sort-overdue-by-priority", is_flag=True, help="Order overdue tasks by priority")
@click.option("--due-within", default=None, help='Count tasks due within this window as overdue, e.g. "2 days"')
@click.option("--show-priority", default=None, help='Priority filter, e.g. ">= 5 and < 10"')
@click.option("--tag", "-t", "tags", multiple=True, help="Only show tasks with one of these tags")
@click.option("--context", "-c", "contexts", multiple=True, help="Only show tasks with one of these contexts")
@click.option("--project", "-p", "projects", multiple=True, help="Only show tasks under this project path")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def tasks(file: str | None, as_json: bool, debug: bool, **options):
    """List tasks by category."""
    _enable_debug(debug)
    config = load_config()
    # Flags and non-empty options override config defaults
    overrides = {key: value for key, value in options.items() if value}
    config = replace(config, **{k: list(v) if isinstance(v, tuple) else v for k, v in overrides.items()})

    journal = _load(file, config)

    categories = []
    if not config.hide_overdue:
        categories.append(Category.OVERDUE)
    categories.append(Category.INBOX)
    if config.show_deferred:
        categories.append(Category.DEFERRED)
    if config.show_done:
        categories.append(Category.DONE)

    if as_json:
        click.echo(
            json.dumps(
                [
                    _serialize_task(journal, task_id, category)
                    for category in categories
                    for task_id in journal.bucket(category)
                ],
                indent=2,
            )
        )
        return

    current = journal.current_task
    if current is not None:
        click.echo(f"Current: {current.title}\n")

    shown = 0
    for category in categories:
        bucket = journal.bucket(category)
        if not bucket:
            continue
        click.echo(f"{category.value.capitalize()} ({len(bucket)}):")
        for task_id in bucket:
            click.echo(f"  {_format_task(journal.tasks[task_id])}")
        click.echo()
        shown += len(bucket)

    if not shown:
        click.echo("No tasks to show.")


@main.command()
@click.argument("file", required=False)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def pulse(file: str | None, debug: bool):
    """Show completed-task counts for the past week."""
    _enable_debug(debug)
    journal = _load(file, load_config())

    for days_ago, count in enumerate(journal.pulse_counts()):
        match days_ago:
            case 0:
                label = "today"
            case 1:
                label = "yesterday"
            case _:
                label = f"{days_ago} days ago"
        click.echo(f"{label:>12}: {count}")
