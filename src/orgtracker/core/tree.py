"""Immutable tree operations over Node trees.

Every operation returns new structures and never mutates its input.
Subtrees that an operation does not touch are shared by reference.
"""

from collections.abc import Callable, Iterator
from dataclasses import replace

from .nodes import Node


def traverse(tree: Node) -> Iterator[Node]:
    """Depth-first, pre-order walk of every node."""
    yield tree
    for child in tree.children:
        yield from traverse(child)


def find_by_id(tree: Node, target_id: int) -> Node | None:
    return next((n for n in traverse(tree) if n.id == target_id), None)


def _replace_children(tree: Node, children: list[Node]) -> Node:
    if len(children) == len(tree.children) and all(
        new is old for new, old in zip(children, tree.children)
    ):
        return tree
    return replace(tree, children=children)


def update_node(tree: Node, target_id: int, **updates) -> Node:
    """Return a tree where the target node has the given fields replaced."""
    if tree.id == target_id:
        return replace(tree, **updates)
    if not tree.children:
        return tree
    return _replace_children(tree, [update_node(c, target_id, **updates) for c in tree.children])


def add_child(tree: Node, parent_id: int | None, child: Node) -> Node:
    """
    Append child under parent_id.

    With no parent_id the child is appended to the root. An unknown
    parent_id leaves the tree unchanged.
    """
    if parent_id is None or tree.id == parent_id:
        return replace(tree, children=[*tree.children, child])
    if not tree.children:
        return tree
    return _replace_children(tree, [add_child(c, parent_id, child) for c in tree.children])


def remove_node(tree: Node, target_id: int) -> Node | None:
    """Remove a node and its subtree. Returns None if the root itself is removed."""
    if tree.id == target_id:
        return None
    if not tree.children:
        return tree
    kept = [c for c in (remove_node(child, target_id) for child in tree.children) if c is not None]
    return _replace_children(tree, kept)


def filter_nodes(tree: Node, predicate: Callable[[Node], bool]) -> list[Node]:
    """All nodes matching predicate, in pre-order."""
    return [n for n in traverse(tree) if predicate(n)]


def map_nodes(tree: Node, fn: Callable[[Node], Node]) -> Node:
    """Apply fn to every node, top-down, keeping the tree shape."""
    transformed = fn(tree)
    if not transformed.children:
        return transformed
    return replace(transformed, children=[map_nodes(c, fn) for c in transformed.children])


def get_descendants(node: Node) -> list[Node]:
    """The node itself followed by all its descendants."""
    return list(traverse(node))


def count_nodes(tree: Node) -> int:
    return sum(1 for _ in traverse(tree))


def get_max_depth(tree: Node) -> int:
    """Depth of the deepest leaf, counting the root as 1."""
    if not tree.children:
        return 1
    return 1 + max(get_max_depth(c) for c in tree.children)


def get_node_path(tree: Node, target_id: int) -> list[Node]:
    """Nodes from root to target inclusive, or [] if not found."""
    if tree.id == target_id:
        return [tree]
    for child in tree.children:
        path = get_node_path(child, target_id)
        if path:
            return [tree, *path]
    return []
