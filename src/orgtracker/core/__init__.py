"""Functional core - pure business logic with no I/O."""

from .nodes import Node, NodeType, apply_completion, build_tree
from .recurrence import (
    RecurrenceRule,
    RecurrenceType,
    calculate_next_deadline,
    describe_recurrence,
    should_create_next_instance,
)
from .urgency import calculate_urgency_level, days_until_deadline, urgency_tier, importance_tier
from .importance import get_effective_importance, get_effective_urgency
from .enrichment import EnrichedTask, enrich_tasks, collect_tasks_due_today
from .capacity import CapacityReport, ImportanceFilter, ReportWindow, build_report
from .calendar_link import calendar_event_url
from . import tree

__all__ = [
    # Nodes
    "Node",
    "NodeType",
    "apply_completion",
    "build_tree",
    # Recurrence
    "RecurrenceRule",
    "RecurrenceType",
    "calculate_next_deadline",
    "describe_recurrence",
    "should_create_next_instance",
    # Urgency / importance
    "calculate_urgency_level",
    "days_until_deadline",
    "urgency_tier",
    "importance_tier",
    "get_effective_importance",
    "get_effective_urgency",
    # Enrichment
    "EnrichedTask",
    "enrich_tasks",
    "collect_tasks_due_today",
    # Capacity
    "CapacityReport",
    "ImportanceFilter",
    "ReportWindow",
    "build_report",
    # Calendar
    "calendar_event_url",
    # Tree operations
    "tree",
]
