"""orgtracker CLI - task tree, urgency and capacity planning."""

import json
import logging
import sys
import webbrowser
from datetime import date, timedelta

import click

from .config import load_config
from .core.capacity import ImportanceFilter, ReportWindow
from .core.calendar_link import calendar_event_url
from .core.enrichment import (
    EnrichedTask,
    by_deadline_proximity,
    by_importance_then_urgency,
    by_urgency_then_importance,
    collect_tasks_due_today,
    enrich_tasks,
)
from .core.importance import get_effective_importance, get_effective_urgency
from .core.nodes import Node
from .core.recurrence import RecurrenceRule, RecurrenceType, calculate_next_deadline, describe_recurrence
from .errors import NodeValidationError, OrgTrackerError
from .workflows import capacity_report, complete_task, get_store, list_open_tasks, load_forest

SORT_KEYS = {
    "deadline": by_deadline_proximity,
    "urgency": by_urgency_then_importance,
    "importance": by_importance_then_urgency,
}


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _task_json(t: EnrichedTask) -> dict:
    return {
        "id": t.task.id,
        "name": t.task.name,
        "importance": t.importance,
        "urgency": t.urgency_level,
        "deadline": t.task.deadline.isoformat() if t.task.deadline else None,
        "days_until_deadline": t.days_until_deadline,
        "overdue": t.is_overdue,
    }


def _format_due(days: int) -> str:
    if days < 0:
        return f"OVERDUE by {-days}d"
    if days == 0:
        return "due TODAY"
    return f"due in {days}d"


def _show_tasks(tasks: list[EnrichedTask], as_json: bool, empty_msg: str) -> None:
    """Shared task list display logic."""
    if as_json:
        click.echo(json.dumps([_task_json(t) for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    for t in tasks:
        click.echo(
            f"[U{t.urgency_level:>2} I{t.importance:>2}] {t.task.name} "
            f"({_format_due(t.days_until_deadline)}) #{t.task.id}"
        )


@click.group()
@click.version_option(package_name="orgtracker")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """orgtracker - deadline-driven task tree tracker."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice(sorted(SORT_KEYS)),
    default="deadline",
    help="Sort order",
)
def tasks(as_json: bool, sort_by: str):
    """List open tasks with deadlines."""
    try:
        store = get_store(load_config())
        open_tasks = list_open_tasks(store)
    except OrgTrackerError as e:
        _fail(e)

    _show_tasks(sorted(open_tasks, key=SORT_KEYS[sort_by]), as_json, "No open tasks with deadlines.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def today(as_json: bool):
    """List tasks due today or overdue, most urgent first."""
    try:
        store = get_store(load_config())
        roots = list(load_forest(store).values())
    except OrgTrackerError as e:
        _fail(e)

    due = enrich_tasks(collect_tasks_due_today(roots))
    _show_tasks(sorted(due, key=by_urgency_then_importance), as_json, "No tasks due today!")


@main.command()
@click.option("--days", type=int, default=None, help="Window length in days (default from config)")
@click.option("--until", "until", type=click.DateTime(formats=["%Y-%m-%d"]), help="Window end date")
@click.option(
    "--importance",
    type=click.Choice([f.value for f in ImportanceFilter]),
    default=ImportanceFilter.ALL.value,
    help="Importance bracket",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def report(days: int | None, until, importance: str, as_json: bool):
    """Show required vs available hours over a window."""
    config = load_config()
    if until:
        window = ReportWindow.until(until.date())
    else:
        window = ReportWindow.next_days(days if days is not None else config.report_window_days)

    try:
        store = get_store(config)
        result = capacity_report(store, config, window, ImportanceFilter.parse(importance))
    except OrgTrackerError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "window": {"start": window.start.isoformat(), "end": window.end.isoformat()},
                    "total_required_time": round(result.total_required_time, 2),
                    "total_available_time": round(result.total_available_time, 2),
                    "task_count": result.task_count,
                    "ratio": round(result.ratio, 4),
                    "tasks": [
                        {
                            "id": r.task.id,
                            "name": r.task.name,
                            "days_until_deadline": r.days_until_deadline,
                            "overdue": r.is_overdue,
                            "partial": r.is_partial_time,
                            "effective_required_time": round(r.effective_required_time, 2),
                        }
                        for r in result.tasks
                    ],
                },
                indent=2,
            )
        )
        return

    click.echo(f"Window: {window.start} to {window.end} ({window.length_days} days)")
    click.echo(
        f"Required: {result.total_required_time:.1f}h / Available: {result.total_available_time:.1f}h "
        f"({result.ratio:.0%}, {result.status})"
    )
    if not result.tasks:
        click.echo("No tasks in window.")
        return

    click.echo()
    for r in result.tasks:
        hours = f"{r.effective_required_time:.1f}h"
        if r.is_partial_time:
            hours += f" of {r.total_time:.1f}h"
        click.echo(f"  {hours:>14}  {r.task.name} ({_format_due(r.days_until_deadline)})")


@main.command()
@click.argument("node_id", type=int)
@click.option("--comment", default=None, help="Completion comment")
@click.option("--undo", is_flag=True, help="Mark as not completed")
def complete(node_id: int, comment: str | None, undo: bool):
    """Mark a task completed (spawning its next occurrence if recurring)."""
    config = load_config()
    try:
        store = get_store(config)
        result = complete_task(
            store,
            node_id,
            completed=not undo,
            comment=comment,
            duplicate_window=timedelta(seconds=config.duplicate_window_seconds),
        )
    except OrgTrackerError as e:
        _fail(e)

    state = "not completed" if undo else "completed"
    click.echo(f"Marked '{result.task.name}' {state}.")
    if result.new_instance:
        click.echo(
            f"Next occurrence #{result.new_instance.id} due {result.new_instance.deadline}."
        )
    if result.recurrence_error:
        click.echo(f"Warning: next occurrence not created: {result.recurrence_error}", err=True)


def _echo_tree(node: Node, as_of: date, depth: int = 0) -> None:
    if node.is_task:
        mark = "x" if node.is_completed else " "
        label = f"[{mark}] {node.name}"
    else:
        label = f"{node.name}/"
    urgency = get_effective_urgency(node, as_of)
    importance = get_effective_importance(node)
    click.echo(f"{'  ' * depth}{label}  (U{urgency} I{importance})")
    for child in node.children:
        _echo_tree(child, as_of, depth + 1)


@main.command()
@click.option("--category", default=None, help="Only show this root category")
def tree(category: str | None):
    """Show the task tree with effective urgency and importance."""
    try:
        store = get_store(load_config())
        forest = load_forest(store)
    except OrgTrackerError as e:
        _fail(e)

    if category:
        forest = {k: v for k, v in forest.items() if k.lower() == category.lower()}
    if not forest:
        click.echo("No trees found.")
        return

    as_of = date.today()
    try:
        for root in forest.values():
            _echo_tree(root, as_of)
    except OrgTrackerError as e:
        _fail(e)


@main.command("next")
@click.argument("previous", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option(
    "--type",
    "rec_type",
    type=click.Choice([t.value for t in RecurrenceType if t != RecurrenceType.NONE]),
    required=True,
)
@click.option("--interval", type=int, default=1, show_default=True)
@click.option("--day-of-week", type=click.IntRange(0, 6), default=None, help="0=Sunday")
@click.option("--day-of-month", type=click.IntRange(1, 31), default=None)
def next_deadline(previous, rec_type: str, interval: int, day_of_week: int | None, day_of_month: int | None):
    """Preview the deadline after PREVIOUS for a recurrence rule."""
    rule = RecurrenceRule(
        type=RecurrenceType(rec_type),
        interval=interval,
        day_of_week=day_of_week,
        day_of_month=day_of_month,
    )
    try:
        deadline = calculate_next_deadline(previous.date(), rule)
    except OrgTrackerError as e:
        _fail(e)

    click.echo(f"{describe_recurrence(rule)}: next deadline {deadline}")


@main.command()
@click.argument("node_id", type=int)
@click.option("--open", "open_browser", is_flag=True, help="Open the link in a browser")
def calendar(node_id: int, open_browser: bool):
    """Print a prefilled calendar event link for a task."""
    try:
        node = get_store(load_config()).get(node_id)
    except OrgTrackerError as e:
        _fail(e)

    if not node.is_task:
        _fail(NodeValidationError(f"Node {node_id} is a {node.type.value}, not a task"))

    url = calendar_event_url(node)
    click.echo(url)
    if open_browser:
        webbrowser.open(url)


if __name__ == "__main__":
    main()
