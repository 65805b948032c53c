"""Shared fixtures."""

import itertools
from datetime import date

import pytest

from orgtracker.core.nodes import Node, NodeType


@pytest.fixture
def today():
    return date(2025, 1, 15)


@pytest.fixture
def make_task():
    """Factory for task nodes with sequential ids."""
    ids = itertools.count(1000)

    def factory(**fields) -> Node:
        fields.setdefault("id", next(ids))
        fields.setdefault("name", f"Task {fields['id']}")
        fields.setdefault("importance", 1)
        return Node(type=NodeType.TASK, **fields)

    return factory


@pytest.fixture
def make_category():
    """Factory for category nodes with sequential ids."""
    ids = itertools.count(1)

    def factory(*children: Node, **fields) -> Node:
        fields.setdefault("id", next(ids))
        fields.setdefault("name", f"Category {fields['id']}")
        return Node(type=NodeType.CATEGORY, children=list(children), **fields)

    return factory
