"""Pure task enrichment and list ordering - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date

from .nodes import Node
from .tree import traverse
from .urgency import days_until_deadline, task_urgency


@dataclass
class EnrichedTask:
    """A task with its derived urgency and deadline info."""

    task: Node
    urgency_level: int
    days_until_deadline: int
    is_overdue: bool

    @property
    def importance(self) -> int:
        return self.task.importance or 1

    @classmethod
    def from_node(cls, task: Node, as_of: date | None = None) -> "EnrichedTask":
        as_of = as_of or date.today()
        days = days_until_deadline(task.deadline, as_of) if task.deadline else 0
        return cls(
            task=task,
            urgency_level=task_urgency(task, as_of),
            days_until_deadline=days,
            is_overdue=task.deadline is not None and days < 0,
        )


def enrich_tasks(tasks: list[Node], as_of: date | None = None) -> list[EnrichedTask]:
    as_of = as_of or date.today()
    return [EnrichedTask.from_node(t, as_of) for t in tasks]


def by_urgency_then_importance(t: EnrichedTask) -> tuple[int, int]:
    """Sort key: most urgent first, then most important."""
    return (-t.urgency_level, -t.importance)


def by_importance_then_urgency(t: EnrichedTask) -> tuple[int, int]:
    """Sort key: most important first, then most urgent."""
    return (-t.importance, -t.urgency_level)


def by_deadline_proximity(t: EnrichedTask) -> tuple[int, int]:
    """
    Sort key: overdue tasks first (most overdue leading), then soonest deadline.

    Ascending days already puts the most negative first, so the overdue flag
    only matters for tasks without a deadline (days == 0).
    """
    return (0 if t.is_overdue else 1, t.days_until_deadline)


def open_tasks_with_deadlines(nodes: list[Node]) -> list[Node]:
    """Incomplete task nodes that have a deadline."""
    return [n for n in nodes if n.is_task and n.deadline is not None and not n.is_completed]


def collect_tasks_due_today(roots: list[Node], as_of: date | None = None) -> list[Node]:
    """Incomplete tasks due today or overdue, across every tree in roots."""
    as_of = as_of or date.today()
    return [
        node
        for root in roots
        for node in open_tasks_with_deadlines(list(traverse(root)))
        if node.deadline <= as_of
    ]
