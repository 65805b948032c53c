"""Node data model - categories and tasks arranged in a tree."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from orgtracker.errors import NodeValidationError

from .recurrence import RecurrenceRule, RecurrenceType

# Fields that only make sense on a task
TASK_ONLY_FIELDS = ("deadline", "completion_time", "unique_days_required")


class NodeType(Enum):
    """Kind of node in the tree."""

    TOP_CATEGORY = "top_category"  # Synthetic root
    CATEGORY = "category"
    TASK = "task"


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO date (or the date part of an ISO timestamp)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.split("T")[0])


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse an ISO timestamp, accepting a trailing Z."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class Node:
    """A category or task in an org tree."""

    id: int
    name: str
    type: NodeType
    parent_id: int | None = None
    details: str | None = None
    importance: int | None = None
    deadline: date | None = None
    completion_time: float | None = None
    unique_days_required: float | None = None
    is_completed: bool = False
    completed_at: datetime | None = None
    completion_comment: str | None = None
    recurrence_type: RecurrenceType = RecurrenceType.NONE
    recurrence_interval: int = 1
    recurrence_day_of_week: int | None = None
    recurrence_day_of_month: int | None = None
    recurrence_end_date: date | None = None
    is_recurring_template: bool = False
    recurring_template_id: int | None = None
    category_id: str | None = None
    root_category: str | None = None
    tab_name: str | None = None
    user_id: str | None = None
    created_at: datetime | None = None
    last_touched_at: datetime | None = None
    children: list["Node"] = field(default_factory=list)

    @property
    def is_task(self) -> bool:
        return self.type == NodeType.TASK

    @property
    def is_recurring(self) -> bool:
        """Part of a recurring lineage (a template or an instance of one)."""
        return self.is_recurring_template or self.recurring_template_id is not None

    @property
    def lineage_id(self) -> int | None:
        """Id of the template this node's lineage descends from."""
        if self.is_recurring_template:
            return self.id
        return self.recurring_template_id

    def recurrence_rule(self) -> RecurrenceRule:
        return RecurrenceRule(
            type=self.recurrence_type,
            interval=self.recurrence_interval,
            day_of_week=self.recurrence_day_of_week,
            day_of_month=self.recurrence_day_of_month,
            end_date=self.recurrence_end_date,
        )

    def validate(self) -> "Node":
        """Raise NodeValidationError if the node breaks a field invariant."""
        if not self.name or not self.name.strip():
            raise NodeValidationError("Node name must not be empty")

        if not self.is_task:
            present = [f for f in TASK_ONLY_FIELDS if getattr(self, f) is not None]
            if present:
                raise NodeValidationError(
                    f"{self.type.value} node {self.id} has task-only fields: {', '.join(present)}"
                )
            if self.recurrence_type != RecurrenceType.NONE:
                raise NodeValidationError(f"{self.type.value} node {self.id} cannot recur")
            return self

        if self.importance is not None and not 1 <= self.importance <= 10:
            raise NodeValidationError(f"Importance must be 1-10, got {self.importance}")
        for name in ("completion_time", "unique_days_required"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise NodeValidationError(f"{name} must be non-negative, got {value}")
        if self.is_recurring_template and self.recurring_template_id is not None:
            raise NodeValidationError(f"Template {self.id} must not reference another template")
        if self.completed_at is not None and not self.is_completed:
            raise NodeValidationError(f"Task {self.id} has completed_at but is not completed")

        try:
            self.recurrence_rule().validate()
        except ValueError as e:
            raise NodeValidationError(str(e)) from e
        return self

    @classmethod
    def from_row(cls, row: dict) -> "Node":
        """Create a Node from a flat store row."""
        try:
            node_type = NodeType(row["type"])
        except ValueError:
            raise NodeValidationError(f"Unknown node type: {row['type']}") from None

        importance = row.get("importance")
        if importance is None and node_type == NodeType.TASK:
            importance = 1

        return cls(
            id=row["id"],
            name=row["name"],
            type=node_type,
            parent_id=row.get("parent_id"),
            details=row.get("details"),
            importance=importance,
            deadline=parse_date(row.get("deadline")),
            completion_time=row.get("completion_time"),
            unique_days_required=row.get("unique_days_required"),
            is_completed=bool(row.get("is_completed")),
            completed_at=parse_datetime(row.get("completed_at")),
            completion_comment=row.get("completion_comment"),
            recurrence_type=RecurrenceType.parse(row.get("recurrence_type")),
            recurrence_interval=row.get("recurrence_interval") or 1,
            recurrence_day_of_week=row.get("recurrence_day_of_week"),
            recurrence_day_of_month=row.get("recurrence_day_of_month"),
            recurrence_end_date=parse_date(row.get("recurrence_end_date")),
            is_recurring_template=bool(row.get("is_recurring_template")),
            recurring_template_id=row.get("recurring_template_id"),
            category_id=row.get("category_id"),
            root_category=row.get("root_category"),
            tab_name=row.get("tab_name"),
            user_id=row.get("user_id"),
            created_at=parse_datetime(row.get("created_at")),
            last_touched_at=parse_datetime(row.get("last_touched_at")),
        )

    def to_row(self) -> dict:
        """Flatten to a store row (children are not included)."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "parent_id": self.parent_id,
            "details": self.details,
            "importance": self.importance,
            "deadline": _iso(self.deadline),
            "completion_time": self.completion_time,
            "unique_days_required": self.unique_days_required,
            "is_completed": self.is_completed,
            "completed_at": _iso(self.completed_at),
            "completion_comment": self.completion_comment,
            "recurrence_type": self.recurrence_type.value,
            "recurrence_interval": self.recurrence_interval,
            "recurrence_day_of_week": self.recurrence_day_of_week,
            "recurrence_day_of_month": self.recurrence_day_of_month,
            "recurrence_end_date": _iso(self.recurrence_end_date),
            "is_recurring_template": self.is_recurring_template,
            "recurring_template_id": self.recurring_template_id,
            "category_id": self.category_id,
            "root_category": self.root_category,
            "tab_name": self.tab_name,
            "user_id": self.user_id,
            "created_at": _iso(self.created_at),
            "last_touched_at": _iso(self.last_touched_at),
        }


def build_tree(rows: list[dict]) -> dict[str, Node]:
    """
    Assemble flat store rows into a forest keyed by root category.

    Children keep row order. Rows whose parent is missing are dropped.

    Every parentless node sharing a key ends up in that key's tree. The
    root is the first top_category, else the first category, else the lone
    node. Several parentless tasks with no category get a synthetic
    top_category root (id 0) named after the key.
    """
    nodes = {row["id"]: Node.from_row(row) for row in rows}
    top_level: dict[str, list[Node]] = {}
    for row in rows:
        if not row.get("parent_id"):
            top_level.setdefault(row.get("root_category") or "default", []).append(nodes[row["id"]])

    roots: dict[str, Node] = {}
    for key, candidates in top_level.items():
        root = _pick_root(candidates)
        if root is None:
            root = Node(id=0, name=key, type=NodeType.TOP_CATEGORY, root_category=key)
        roots[key] = root

    for row in rows:
        node = nodes[row["id"]]
        parent_id = row.get("parent_id")
        if parent_id:
            parent = nodes.get(parent_id)
            if parent is not None:
                parent.children.append(node)
            continue

        root = roots[row.get("root_category") or "default"]
        if node is not root:
            root.children.append(node)

    return roots


def _pick_root(candidates: list[Node]) -> Node | None:
    if len(candidates) == 1:
        return candidates[0]
    for node_type in (NodeType.TOP_CATEGORY, NodeType.CATEGORY):
        for node in candidates:
            if node.type == node_type:
                return node
    return None


def apply_completion(
    node: Node,
    completed: bool,
    comment: str | None = None,
    now: datetime | None = None,
) -> Node:
    """
    Return a copy of node with its completion state set.

    completed_at is stamped on a false->true transition and cleared on
    true->false. Re-completing keeps the original timestamp.
    """
    now = now or datetime.now()
    completed_at = node.completed_at
    if completed and not node.is_completed:
        completed_at = now
    elif not completed:
        completed_at = None

    return replace(
        node,
        is_completed=completed,
        completed_at=completed_at,
        completion_comment=comment if comment is not None else node.completion_comment,
    )
