"""Exception types shared across orgtracker."""


class OrgTrackerError(Exception):
    """Base class for orgtracker errors."""

    pass


class NodeValidationError(OrgTrackerError, ValueError):
    """Raised when a node violates a field invariant."""

    pass


class TreeStructureError(OrgTrackerError, ValueError):
    """Raised when a tree is not a tree (e.g. contains a cycle)."""

    pass


class RecurrenceError(OrgTrackerError, ValueError):
    """Raised for an unsupported or malformed recurrence rule."""

    pass


class StoreError(OrgTrackerError):
    """Raised when the record store fails to read or write."""

    pass


class NodeNotFoundError(StoreError):
    """Raised when a record id does not exist in the store."""

    def __init__(self, node_id: int):
        super().__init__(f"Node {node_id} not found")
        self.node_id = node_id
