"""JSON file node store adapter."""

import json
import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path

from orgtracker.core.nodes import Node, NodeType
from orgtracker.errors import NodeNotFoundError, StoreError

logger = logging.getLogger(__name__)


def serialize_fields(fields: dict) -> dict:
    """Convert dates and enums in a field dict to their stored form."""
    out = {}
    for key, value in fields.items():
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        out[key] = value
    return out


class JsonFileStore:
    """
    Node store backed by a single JSON file.

    Implements NodeStore protocol. Ids are assigned incrementally and
    created_at is stamped on insert.
    """

    def __init__(self, path: Path | str, clock: Callable[[], datetime] = datetime.now):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def _load(self) -> dict:
        if not self.path.exists():
            return {"next_id": 1, "nodes": []}
        try:
            return json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt node file {self.path}: {e}") from e

    def _save(self, data: dict) -> None:
        self.path.write_text(json.dumps(data, indent=2))

    def _rows(self) -> list[dict]:
        return self._load()["nodes"]

    def fetch_nodes(
        self,
        category_id: str | None = None,
        node_type: NodeType | None = None,
        with_deadline: bool | None = None,
        completed: bool | None = None,
    ) -> list[Node]:
        """Fetch flat node records matching every given filter."""
        nodes = [Node.from_row(row) for row in self._rows()]
        if category_id is not None:
            nodes = [n for n in nodes if n.category_id == category_id]
        if node_type is not None:
            nodes = [n for n in nodes if n.type == node_type]
        if with_deadline is not None:
            nodes = [n for n in nodes if (n.deadline is not None) == with_deadline]
        if completed is not None:
            nodes = [n for n in nodes if n.is_completed == completed]
        return nodes

    def get(self, node_id: int) -> Node:
        for row in self._rows():
            if row["id"] == node_id:
                return Node.from_row(row)
        raise NodeNotFoundError(node_id)

    def insert(self, fields: dict) -> Node:
        data = self._load()
        row = serialize_fields(fields)
        row["id"] = data["next_id"]
        row["created_at"] = self._clock().isoformat()

        node = Node.from_row(row).validate()
        data["nodes"].append(node.to_row())
        data["next_id"] += 1
        self._save(data)
        logger.debug(f"Inserted node {node.id} ({node.name})")
        return node

    def update(self, node_id: int, fields: dict) -> Node:
        data = self._load()
        for i, row in enumerate(data["nodes"]):
            if row["id"] == node_id:
                merged = {**row, **serialize_fields(fields), "id": node_id}
                node = Node.from_row(merged).validate()
                data["nodes"][i] = node.to_row()
                self._save(data)
                return node
        raise NodeNotFoundError(node_id)

    def delete(self, node_id: int) -> None:
        """Delete a record and its descendants."""
        data = self._load()
        if not any(row["id"] == node_id for row in data["nodes"]):
            raise NodeNotFoundError(node_id)

        doomed = {node_id}
        # Sweep until no row's parent is doomed
        changed = True
        while changed:
            changed = False
            for row in data["nodes"]:
                if row["id"] not in doomed and row.get("parent_id") in doomed:
                    doomed.add(row["id"])
                    changed = True

        data["nodes"] = [row for row in data["nodes"] if row["id"] not in doomed]
        self._save(data)
        logger.debug(f"Deleted nodes {sorted(doomed)}")

    def find_recent_instances(
        self,
        name: str,
        template_id: int,
        parent_id: int | None,
        since: datetime,
    ) -> list[Node]:
        """
        Instances of a recurring lineage created at or after since.

        Naive timestamps are taken as local time, so naive and aware values
        compare.
        """
        since = _as_utc(since)
        return [
            n
            for n in self.fetch_nodes(node_type=NodeType.TASK)
            if n.name == name
            and n.recurring_template_id == template_id
            and n.parent_id == parent_id
            and n.created_at is not None
            and _as_utc(n.created_at) >= since
        ]


def _as_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)
