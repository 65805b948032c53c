"""Ports - interfaces/protocols for external dependencies."""

from .node_store import NodeStore

__all__ = [
    "NodeStore",
]
