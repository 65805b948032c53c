"""Shared workflow layer between the CLI and host applications.

These functions perform store I/O around the pure core: completing tasks,
spawning recurring instances, and loading data for reports.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .adapters.file_store import JsonFileStore
from .adapters.rest_store import RestNodeStore
from .config import Config
from .core.capacity import CapacityReport, ImportanceFilter, ReportWindow, build_report
from .core.enrichment import EnrichedTask, by_deadline_proximity, enrich_tasks
from .core.nodes import Node, NodeType, apply_completion, build_tree
from .core.recurrence import RecurrenceType, calculate_next_deadline, should_create_next_instance
from .errors import StoreError
from .ports.node_store import NodeStore

logger = logging.getLogger(__name__)

DUPLICATE_WINDOW = timedelta(seconds=60)

# Fields copied verbatim from a completed task onto its next instance
INSTANCE_FIELDS = (
    "name",
    "details",
    "importance",
    "completion_time",
    "unique_days_required",
    "parent_id",
    "category_id",
    "root_category",
    "tab_name",
    "user_id",
    "recurrence_type",
    "recurrence_interval",
    "recurrence_day_of_week",
    "recurrence_day_of_month",
    "recurrence_end_date",
)


def get_store(config: Config) -> NodeStore:
    """Resolve the node store backend from config."""
    if config.store_backend == "rest":
        return RestNodeStore(config)
    return JsonFileStore(config.data_path)


# ============== Recurrence ==============


def create_recurring_instance(
    completed_task: Node,
    store: NodeStore,
    now: datetime | None = None,
    duplicate_window: timedelta = DUPLICATE_WINDOW,
) -> Node | None:
    """
    Create the next occurrence of a completed recurring task.

    Returns None when no instance is needed (not recurring, not completed,
    a duplicate was created moments ago, or the recurrence has ended).

    Raises:
        StoreError: if the duplicate check or the insert fails.
    """
    now = now or datetime.now()

    if not completed_task.is_recurring:
        return None

    if completed_task.recurrence_type == RecurrenceType.NONE:
        logger.debug(f"Task {completed_task.id} has no recurrence rule")
        return None

    if not completed_task.is_completed:
        logger.debug(f"Task {completed_task.id} is not completed, skipping recurrence")
        return None

    template_id = completed_task.lineage_id
    recent = store.find_recent_instances(
        name=completed_task.name,
        template_id=template_id,
        parent_id=completed_task.parent_id,
        since=now - duplicate_window,
    )
    if any(n.id != completed_task.id for n in recent):
        logger.info(f"Recent instance of '{completed_task.name}' already exists, skipping")
        return None

    next_deadline = calculate_next_deadline(
        completed_task.deadline or now.date(),
        completed_task.recurrence_rule(),
    )

    if not should_create_next_instance(next_deadline, completed_task.recurrence_end_date):
        logger.info(f"Recurrence of '{completed_task.name}' ended, not creating next instance")
        return None

    fields = {name: getattr(completed_task, name) for name in INSTANCE_FIELDS}
    fields.update(
        type=NodeType.TASK,
        deadline=next_deadline,
        is_recurring_template=False,
        recurring_template_id=template_id,
        is_completed=False,
    )

    logger.info(
        f"Creating next instance of '{completed_task.name}' "
        f"({completed_task.recurrence_type.value}) due {next_deadline}"
    )
    new_task = store.insert(fields)
    logger.info(f"Created recurring instance {new_task.id}")
    return new_task


@dataclass
class CompletionResult:
    """Outcome of a completion toggle."""

    task: Node
    new_instance: Node | None = None
    recurrence_error: StoreError | None = None


def complete_task(
    store: NodeStore,
    node_id: int,
    completed: bool = True,
    comment: str | None = None,
    now: datetime | None = None,
    duplicate_window: timedelta = DUPLICATE_WINDOW,
) -> CompletionResult:
    """
    Set a task's completion state and spawn its next occurrence if due.

    The next instance is attempted only on a false->true transition, after
    the completion is saved. A store failure while spawning it is logged and
    reported on the result; the saved completion stands.
    """
    now = now or datetime.now()
    current = store.get(node_id)
    updated = apply_completion(current, completed, comment, now)

    saved = store.update(
        node_id,
        {
            "is_completed": updated.is_completed,
            "completed_at": updated.completed_at,
            "completion_comment": updated.completion_comment,
        },
    )
    result = CompletionResult(task=saved)

    if completed and not current.is_completed:
        try:
            result.new_instance = create_recurring_instance(
                saved, store, now=now, duplicate_window=duplicate_window
            )
        except StoreError as e:
            logger.error(f"Failed to create recurring instance for task {node_id}: {e}")
            result.recurrence_error = e

    return result


# ============== Reports ==============


def load_forest(store: NodeStore) -> dict[str, Node]:
    """Fetch every node and assemble the trees, keyed by root category."""
    return build_tree([n.to_row() for n in store.fetch_nodes()])


def list_open_tasks(store: NodeStore, as_of: date | None = None) -> list[EnrichedTask]:
    """Incomplete tasks with deadlines, overdue first then by proximity."""
    as_of = as_of or date.today()
    tasks = store.fetch_nodes(node_type=NodeType.TASK, with_deadline=True, completed=False)
    return sorted(enrich_tasks(tasks, as_of), key=by_deadline_proximity)


def capacity_report(
    store: NodeStore,
    config: Config,
    window: ReportWindow | None = None,
    importance_filter: ImportanceFilter = ImportanceFilter.ALL,
    as_of: date | None = None,
) -> CapacityReport:
    """Fetch open tasks and build a capacity report over window."""
    as_of = as_of or date.today()
    window = window or ReportWindow.next_days(config.report_window_days, as_of)
    tasks = store.fetch_nodes(node_type=NodeType.TASK, with_deadline=True, completed=False)
    return build_report(tasks, window, importance_filter, as_of, config.hours_per_week)
