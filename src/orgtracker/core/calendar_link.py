"""Prefilled calendar event links for tasks."""

from datetime import date
from urllib.parse import urlencode

from .nodes import Node
from .urgency import calculate_urgency_level

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"


def event_description(task: Node, as_of: date | None = None) -> str:
    """
    Event description carrying the task's importance, urgency, details and estimate.

    Urgency is included only when it can be computed (deadline, completion
    time and unique days all present).
    """
    lines: list[str] = []
    if task.importance:
        lines.append(f"Importance: {task.importance}/10")
    if (
        task.deadline is not None
        and task.completion_time is not None
        and task.unique_days_required is not None
    ):
        level = calculate_urgency_level(
            task.deadline, task.completion_time, task.unique_days_required, as_of
        )
        lines.append(f"Urgency: {level}/10")
    if task.details:
        lines += ["", "DETAILS:", task.details]
    if task.completion_time:
        lines += ["", f"Estimated time: {task.completion_time:g} hours"]
    return "\n".join(lines)


def calendar_event_url(task: Node, as_of: date | None = None) -> str:
    """Google Calendar 'create event' URL prefilled with the task. Date and time are left to the user."""
    params = {
        "action": "TEMPLATE",
        "text": task.name,
        "details": event_description(task, as_of),
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"
