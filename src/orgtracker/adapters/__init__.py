"""Adapters - I/O implementations of ports."""

from .file_store import JsonFileStore
from .rest_store import RestNodeStore

__all__ = [
    "JsonFileStore",
    "RestNodeStore",
]
