"""Node record store interface."""

from datetime import datetime
from typing import Protocol

from orgtracker.core.nodes import Node, NodeType


class NodeStore(Protocol):
    """Interface for reading and writing node records in any backend."""

    def fetch_nodes(
        self,
        category_id: str | None = None,
        node_type: NodeType | None = None,
        with_deadline: bool | None = None,
        completed: bool | None = None,
    ) -> list[Node]:
        """Fetch flat node records matching every given filter."""
        ...

    def get(self, node_id: int) -> Node:
        """Fetch one record. Raises NodeNotFoundError if absent."""
        ...

    def insert(self, fields: dict) -> Node:
        """Insert a record and return it with its assigned id."""
        ...

    def update(self, node_id: int, fields: dict) -> Node:
        """Update the given fields of a record and return the result."""
        ...

    def delete(self, node_id: int) -> None:
        """Delete a record and its descendants."""
        ...

    def find_recent_instances(
        self,
        name: str,
        template_id: int,
        parent_id: int | None,
        since: datetime,
    ) -> list[Node]:
        """Instances of a recurring lineage created at or after since."""
        ...
