"""Data models for TUI Syntree."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Iterable

NodeId = str
Slice = tuple[int, int]


def generate_id() -> NodeId:
    """Return a new random node ID (12 hex characters)."""
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Node:
    """A single labeled node. Immutable, use dataclasses.replace() to edit.

    A node is terminal (anchored to a ``slice`` of the sentence), internal
    (has a non-empty ``children`` tuple) or stranded (has neither).
    """

    id: NodeId
    label: str = ""
    slice: Slice | None = None
    children: tuple[NodeId, ...] | None = None
    triangle: bool = False
    offset_x: float = 0
    offset_y: float = 0

    @property
    def is_terminal(self) -> bool:
        return self.slice is not None

    @property
    def is_internal(self) -> bool:
        return bool(self.children)

    @property
    def is_stranded(self) -> bool:
        return self.slice is None and not self.children


NodeTree = dict[NodeId, Node]


@dataclass(frozen=True)
class PositionedNode:
    """A node plus its computed coordinates."""

    node: Node
    x: float
    y: float
    natural_x: float
    natural_y: float
    slice_x_span: tuple[float, float] | None = None

    @property
    def id(self) -> NodeId:
        return self.node.id

    @property
    def label(self) -> str:
        return self.node.label


def nodes_with_parents(nodes: NodeTree) -> set[NodeId]:
    """Return the IDs of all nodes referenced by some children list."""
    result: set[NodeId] = set()
    for node in nodes.values():
        result.update(node.children or ())
    return result


def root_ids(nodes: NodeTree) -> list[NodeId]:
    """Return the IDs of nodes that have no parent, in tree order."""
    parented = nodes_with_parents(nodes)
    return [node_id for node_id in nodes if node_id not in parented]


def is_descendant(nodes: NodeTree, ancestor_id: NodeId, descendant_id: NodeId) -> bool:
    """Return True if descendant_id sits anywhere below ancestor_id."""
    visited: set[NodeId] = set()
    stack = list(_children_of(nodes, ancestor_id))
    while stack:
        current = stack.pop()
        if current == descendant_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(_children_of(nodes, current))
    return False


def ancestors(nodes: NodeTree, descendant_id: NodeId) -> set[NodeId]:
    """Return the IDs of every node that has descendant_id below it."""
    return {
        node_id for node_id in nodes
        if is_descendant(nodes, node_id, descendant_id)
    }


def _children_of(nodes: NodeTree, node_id: NodeId) -> Iterable[NodeId]:
    node = nodes.get(node_id)
    if node is None or not node.children:
        return ()
    return node.children


@dataclass
class EditorConfig:
    """Editor configuration stored in .tui-syntree/config.toml."""

    level_height: float = 40
    char_width: float = 8
    coalesce_window_ms: int = 400
    sentence: str = ""
