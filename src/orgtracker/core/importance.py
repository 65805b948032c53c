"""Effective importance/urgency - propagate task values up the tree."""

from collections.abc import Callable
from datetime import date

from orgtracker.errors import TreeStructureError

from .nodes import Node
from .urgency import task_urgency


def _max_over_tasks(node: Node, value: Callable[[Node], int]) -> int:
    """
    Post-order max of value() over task nodes, 1 when there are none.

    Raises TreeStructureError if a node appears twice on one path.
    """
    on_path: set[int] = set()

    def walk(current: Node) -> int:
        key = current.id
        if key in on_path:
            raise TreeStructureError(f"Cycle detected at node {current.id} ({current.name})")
        if current.is_task:
            return value(current)
        if not current.children:
            return 1

        on_path.add(key)
        try:
            return max(walk(child) for child in current.children)
        finally:
            on_path.discard(key)

    return walk(node)


def get_effective_importance(node: Node) -> int:
    """
    Importance of a node.

    Tasks: their own importance (default 1).
    Categories: the highest importance among descendant tasks.
    """
    return _max_over_tasks(node, lambda t: t.importance or 1)


def get_effective_urgency(node: Node, as_of: date | None = None) -> int:
    """
    Urgency of a node.

    Tasks: their computed urgency level.
    Categories: the highest urgency among descendant tasks.
    """
    as_of = as_of or date.today()
    return _max_over_tasks(node, lambda t: task_urgency(t, as_of))
