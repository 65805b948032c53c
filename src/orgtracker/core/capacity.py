"""Pure capacity planning - required vs available hours over a date window."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from .nodes import Node
from .urgency import days_until_deadline

# Baseline hours available for task work per 7-day week
HOURS_PER_WEEK = 25.0
DEFAULT_WINDOW_DAYS = 28


class ImportanceFilter(Enum):
    """Importance bracket a report is restricted to."""

    ONE = "1"
    LOW = "2-4"
    MEDIUM = "5-6"
    HIGH = "7-9"
    MAX = "10"
    ALL = "all"

    @classmethod
    def parse(cls, value: "str | ImportanceFilter") -> "ImportanceFilter":
        if isinstance(value, cls):
            return value
        text = value.strip().lower()
        if text in ("all", "all levels"):
            return cls.ALL
        return cls(text)


_BRACKETS: dict[ImportanceFilter, tuple[int, int]] = {
    ImportanceFilter.ONE: (1, 1),
    ImportanceFilter.LOW: (2, 4),
    ImportanceFilter.MEDIUM: (5, 6),
    ImportanceFilter.HIGH: (7, 9),
    ImportanceFilter.MAX: (10, 10),
}


def matches_importance_filter(importance: int | None, importance_filter: ImportanceFilter) -> bool:
    """Missing importance counts as 1."""
    if importance_filter == ImportanceFilter.ALL:
        return True
    low, high = _BRACKETS[importance_filter]
    return low <= (importance or 1) <= high


@dataclass(frozen=True)
class ReportWindow:
    """Inclusive date window a report covers."""

    start: date
    end: date

    @property
    def length_days(self) -> int:
        return max((self.end - self.start).days, 0)

    @classmethod
    def next_days(cls, days: int = DEFAULT_WINDOW_DAYS, as_of: date | None = None) -> "ReportWindow":
        as_of = as_of or date.today()
        return cls(as_of, as_of + timedelta(days=days))

    @classmethod
    def until(cls, end: date, as_of: date | None = None) -> "ReportWindow":
        return cls(as_of or date.today(), end)


@dataclass
class ReportTask:
    """A task considered by a capacity report."""

    task: Node
    days_until_deadline: int
    is_overdue: bool
    is_partial_time: bool = False
    partial_required_time: float | None = None
    total_time: float | None = None

    @property
    def effective_required_time(self) -> float:
        """Hours this task contributes to the report."""
        if self.is_partial_time:
            return self.partial_required_time
        return self.task.completion_time or 0


@dataclass
class CapacityReport:
    """Required vs available hours over a window."""

    total_required_time: float
    total_available_time: float
    task_count: int
    ratio: float
    tasks: list[ReportTask] = field(default_factory=list)

    @property
    def status(self) -> str:
        return ratio_status(self.ratio)


def calculate_available_time(window: ReportWindow, hours_per_week: float = HOURS_PER_WEEK) -> float:
    return window.length_days / 7 * hours_per_week


def ratio_status(ratio: float) -> str:
    """Load label for a required/available ratio."""
    if ratio <= 0.5:
        return "Light load"
    if ratio <= 0.8:
        return "Moderate load"
    if ratio <= 1.0:
        return "Heavy load"
    return "Overloaded"


def build_report(
    tasks: list[Node],
    window: ReportWindow,
    importance_filter: ImportanceFilter = ImportanceFilter.ALL,
    as_of: date | None = None,
    hours_per_week: float = HOURS_PER_WEEK,
) -> CapacityReport:
    """
    Build a capacity report for tasks over window.

    Pure function - no I/O. Tasks without both a deadline and a completion
    time are left out. Tasks due after the window contribute only the share
    of their hours that falls inside it.
    """
    as_of = as_of or date.today()
    window_days = window.length_days
    total_required = 0.0
    considered: list[ReportTask] = []

    for task in tasks:
        if not matches_importance_filter(task.importance, importance_filter):
            continue
        if task.deadline is None or not task.completion_time:
            continue

        days = days_until_deadline(task.deadline, as_of)
        row = ReportTask(task=task, days_until_deadline=days, is_overdue=days < 0)

        if task.deadline <= window.end or days <= 0:
            total_required += task.completion_time
        else:
            # Prorate by the share of remaining days inside the window
            partial = task.completion_time / days * window_days
            total_required += partial
            row.is_partial_time = True
            row.partial_required_time = partial
            row.total_time = task.completion_time

        considered.append(row)

    available = calculate_available_time(window, hours_per_week)
    ratio = total_required / available if available > 0 else 0

    return CapacityReport(
        total_required_time=total_required,
        total_available_time=available,
        task_count=len(considered),
        ratio=ratio,
        tasks=sorted(considered, key=lambda r: r.days_until_deadline),
    )
