"""Derive the definition of a new or re-parented node from the selection.

Used for a few conveniences: a bare cursor stands for the whole word under
it, and whitespace at either end of a selected range is trimmed away.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from tui_syntree.models import Node, NodeId, Slice


@dataclass(frozen=True)
class NodeDefinition:
    """Structural attributes derived for a node.

    Applying a definition always overwrites both ``slice`` and ``children``;
    ``triangle`` is only overwritten when the definition carries one.
    """

    children: tuple[NodeId, ...] | None = None
    slice: Slice | None = None
    triangle: bool | None = None

    @property
    def is_empty(self) -> bool:
        return not self.children and self.slice is None

    def apply_to(self, node: Node) -> Node:
        triangle = node.triangle if self.triangle is None else self.triangle
        return replace(
            node,
            children=self.children or None,
            slice=self.slice,
            triangle=triangle,
        )


def normalize_range(sentence: str, selected_range: Slice) -> Slice:
    """Order the range bounds and clamp them to the sentence."""
    start, end = sorted(selected_range)
    length = len(sentence)
    return max(0, min(start, length)), max(0, min(end, length))


def word_at(sentence: str, position: int) -> Slice:
    """Return the space-delimited word enclosing a cursor position."""
    start = sentence.rfind(" ", 0, position) + 1
    end = sentence.find(" ", position)
    if end == -1:
        end = len(sentence)
    return start, end


def trim_range(sentence: str, selected_range: Slice) -> Slice:
    """Shrink a range inward past leading and trailing whitespace."""
    start, end = selected_range
    text = sentence[start:end]
    lead = len(text) - len(text.lstrip())
    if lead == len(text):
        return start, start
    trail = len(text) - len(text.rstrip())
    return start + lead, end - trail


def derive_definition(
    sentence: str,
    selected_nodes: Sequence[NodeId] | None,
    selected_range: Slice | None,
) -> NodeDefinition:
    """Return what a node built from the current selection should look like.

    Selected nodes win over a text range and become the children, in the
    order they were selected. A zero-width range snaps to the enclosing
    word; any other range is trimmed of surrounding whitespace. An empty
    definition is returned when nothing usable is selected.
    """
    if selected_nodes:
        return NodeDefinition(children=tuple(selected_nodes))
    if selected_range is None:
        return NodeDefinition()
    start, end = normalize_range(sentence, selected_range)
    if start == end:
        start, end = word_at(sentence, start)
    else:
        start, end = trim_range(sentence, (start, end))
    if start >= end:
        return NodeDefinition()
    return NodeDefinition(
        slice=(start, end),
        triangle=" " in sentence[start:end],
    )
