"""Position layout: derive canvas coordinates from tree shape and text metrics.

The tree is built bottom-up, so Y=0 is the sentence baseline and the tree
grows towards negative Y:

- A terminal node sits one level above the baseline (``-LEVEL_HEIGHT``) and
  is centered horizontally on its slice of the sentence.
- An internal node sits one level above its highest child (manual offsets
  included) and is centered on the mean of its children's X positions
  (manual offsets included).
- A stranded node has nothing to derive a position from. It keeps the last
  position computed for it in the cache; a node with no cached position
  (stranded from the start, or laid out with a fresh cache) sits at X=0,
  one level above the baseline.

Every node's position depends on its descendants, so each natural position
is memoized in a ``PositionCache`` keyed by node ID. Each call to
``compute_positions`` first invalidates every node that has a slice or
children (their inputs may have moved) and evicts deleted nodes; stranded
nodes keep their entries. Within one call each position is evaluated at
most once.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tui_syntree.metrics import MeasureText
from tui_syntree.models import Node, NodeId, NodeTree, PositionedNode

LABEL_WIDTH = 28
LABEL_HEIGHT = 22
LEVEL_HEIGHT = 40


@dataclass
class PositionCache:
    """Per-tree memo of natural positions and slice spans."""

    x: dict[NodeId, float] = field(default_factory=dict)
    y: dict[NodeId, float] = field(default_factory=dict)
    spans: dict[NodeId, tuple[float, float]] = field(default_factory=dict)
    evaluations: int = 0  # positions/spans actually computed, across calls

    def invalidate(self, nodes: NodeTree) -> None:
        """Drop entries for deleted nodes and for every non-stranded node."""
        for cache in (self.x, self.y, self.spans):
            for node_id in list(cache):
                node = nodes.get(node_id)
                if node is None or not node.is_stranded:
                    del cache[node_id]


class _LayoutPass:
    """One layout computation over a fixed tree and sentence."""

    def __init__(
        self,
        nodes: NodeTree,
        sentence: str,
        measure: MeasureText,
        cache: PositionCache,
        level_height: float,
    ) -> None:
        self.nodes = nodes
        self.sentence = sentence
        self.measure = measure
        self.cache = cache
        self.level_height = level_height

    def _children(self, node: Node) -> list[Node]:
        return [self.nodes[c] for c in node.children or () if c in self.nodes]

    def node_x(self, node: Node) -> float:
        cached = self.cache.x.get(node.id)
        if cached is not None:
            return cached
        self.cache.evaluations += 1
        children = self._children(node)
        if node.slice is not None:
            start, end = node.slice
            x = (
                self.measure(self.sentence[:start])
                + self.measure(self.sentence[start:end]) / 2
            )
        elif children:
            x = sum(self.node_x(c) + c.offset_x for c in children) / len(children)
        else:
            x = 0.0
        self.cache.x[node.id] = x
        return x

    def node_y(self, node: Node) -> float:
        cached = self.cache.y.get(node.id)
        if cached is not None:
            return cached
        self.cache.evaluations += 1
        children = self._children(node)
        if node.slice is None and children:
            y = min(self.node_y(c) + c.offset_y for c in children) - self.level_height
        else:
            y = -self.level_height
        self.cache.y[node.id] = y
        return y

    def slice_span(self, node: Node) -> tuple[float, float] | None:
        if node.slice is None:
            return None
        cached = self.cache.spans.get(node.id)
        if cached is not None:
            return cached
        self.cache.evaluations += 1
        start, end = node.slice
        span = (
            self.measure(self.sentence[:start]),
            self.measure(self.sentence[:end]),
        )
        self.cache.spans[node.id] = span
        return span

    def position(self, node: Node) -> PositionedNode:
        natural_x = self.node_x(node)
        natural_y = self.node_y(node)
        return PositionedNode(
            node=node,
            x=natural_x + node.offset_x,
            y=natural_y + node.offset_y,
            natural_x=natural_x,
            natural_y=natural_y,
            slice_x_span=self.slice_span(node),
        )


def compute_positions(
    nodes: NodeTree,
    sentence: str,
    measure: MeasureText,
    cache: PositionCache | None = None,
    level_height: float = LEVEL_HEIGHT,
) -> dict[NodeId, PositionedNode]:
    """Return every node of the tree with its computed coordinates.

    Pass the same ``cache`` on successive calls for one tree to keep the
    positions of stranded nodes between calls; a fresh cache is used
    otherwise.
    """
    if cache is None:
        cache = PositionCache()
    cache.invalidate(nodes)
    layout = _LayoutPass(nodes, sentence, measure, cache, level_height)
    return {node_id: layout.position(node) for node_id, node in nodes.items()}


def tree_width(sentence: str, measure: MeasureText) -> float:
    """Return the width needed to hold the tree: that of the sentence."""
    return measure(sentence)


def tree_height(positioned: dict[NodeId, PositionedNode]) -> float:
    """Return the height needed above the baseline (0 for an empty tree)."""
    if not positioned:
        return 0
    return -min(p.y for p in positioned.values())
