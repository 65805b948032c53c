"""Pure urgency scoring - deadline pressure on a 1-10 scale."""

from datetime import date
from enum import Enum

from .nodes import Node

MIN_LEVEL = 1
MAX_LEVEL = 10

# Hours of focused work assumed per working day
WORK_HOURS_PER_DAY = 4

# (max slack days, level), checked in order. Slack is the number of days left
# before the deadline once the required working days are set aside.
SLACK_THRESHOLDS: list[tuple[float, int]] = [
    (0, 10),
    (1, 9),
    (2, 8),
    (4, 7),
    (7, 6),
    (10, 5),
    (14, 4),
    (21, 3),
    (30, 2),
]


class UrgencyTier(Enum):
    """Display tier for an urgency level."""

    NONE = "none"  # 1
    LOW = "low"  # 2-3
    MEDIUM = "medium"  # 4-6
    HIGH = "high"  # 7-8
    CRITICAL = "critical"  # 9-10


class ImportanceTier(Enum):
    """Display tier for an importance value."""

    NONE = "none"  # 1
    LOW = "low"  # 2-3
    MODERATE = "moderate"  # 4-5
    ELEVATED = "elevated"  # 6-7
    HIGH = "high"  # 8-9
    MAX = "max"  # 10


def days_until_deadline(deadline: date, as_of: date | None = None) -> int:
    """Days until deadline (negative if overdue)."""
    as_of = as_of or date.today()
    return (deadline - as_of).days


def required_days(completion_time: float, unique_days_required: float) -> float:
    """Working days a task needs: the larger of its day count and hours spread over work days."""
    return max(unique_days_required, completion_time / WORK_HOURS_PER_DAY)


def calculate_urgency_level(
    deadline: date | None,
    completion_time: float | None,
    unique_days_required: float | None,
    as_of: date | None = None,
) -> int:
    """
    Urgency level from 1 (none) to 10 (overdue / no slack left).

    Pure function - no I/O. Missing inputs mean the task is unscheduled and
    never urgent.
    """
    if deadline is None or completion_time is None or unique_days_required is None:
        return MIN_LEVEL

    days = days_until_deadline(deadline, as_of)
    if days < 0:
        return MAX_LEVEL

    slack = days - required_days(completion_time, unique_days_required)
    for max_slack, level in SLACK_THRESHOLDS:
        if slack <= max_slack:
            return level
    return MIN_LEVEL


def task_urgency(task: Node, as_of: date | None = None) -> int:
    """Urgency level for a task node."""
    return calculate_urgency_level(
        task.deadline, task.completion_time, task.unique_days_required, as_of
    )


def should_show_indicator(level: int) -> bool:
    """Whether an urgency level warrants any visual indicator."""
    return level > MIN_LEVEL


def is_critical(level: int) -> bool:
    return level == MAX_LEVEL


def urgency_tier(level: int) -> UrgencyTier:
    if level <= 1:
        return UrgencyTier.NONE
    if level <= 3:
        return UrgencyTier.LOW
    if level <= 6:
        return UrgencyTier.MEDIUM
    if level <= 8:
        return UrgencyTier.HIGH
    return UrgencyTier.CRITICAL


def importance_tier(importance: int | None) -> ImportanceTier:
    if not importance or importance <= 1:
        return ImportanceTier.NONE
    if importance <= 3:
        return ImportanceTier.LOW
    if importance <= 5:
        return ImportanceTier.MODERATE
    if importance <= 7:
        return ImportanceTier.ELEVATED
    if importance <= 9:
        return ImportanceTier.HIGH
    return ImportanceTier.MAX


def count_critical(tasks: list[Node], as_of: date | None = None) -> int:
    """Count incomplete tasks at the maximum urgency level."""
    as_of = as_of or date.today()
    return sum(1 for t in tasks if not t.is_completed and is_critical(task_urgency(t, as_of)))
