"""Editor state aggregate."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from tui_syntree.history import COALESCE_WINDOW, History
from tui_syntree.models import NodeId, NodeTree, Slice, generate_id


class ModeKind(Enum):
    """Interaction mode of the editor."""

    NORMAL = "normal"
    EDITING = "editing"
    ADOPTING = "adopting"
    DISOWNING = "disowning"


@dataclass(frozen=True)
class Mode:
    kind: ModeKind = ModeKind.NORMAL
    node_id: NodeId | None = None

    @classmethod
    def editing(cls, node_id: NodeId) -> Mode:
        return cls(ModeKind.EDITING, node_id)

    @classmethod
    def adopting(cls, node_id: NodeId) -> Mode:
        return cls(ModeKind.ADOPTING, node_id)

    @classmethod
    def disowning(cls, node_id: NodeId) -> Mode:
        return cls(ModeKind.DISOWNING, node_id)


NORMAL = Mode()


@dataclass(frozen=True)
class EditorContext:
    """External collaborators used by state transitions."""

    generate_id: Callable[[], NodeId] = generate_id
    now: Callable[[], float] = time.monotonic
    coalesce_window: float = COALESCE_WINDOW


@dataclass(frozen=True)
class EditorState:
    """Everything the editor knows. Immutable; transitions build new states.

    At most one of ``selected_range`` and ``selected_nodes`` is set.
    ``selected_nodes`` keeps the order in which nodes were selected.
    """

    nodes: NodeTree = field(default_factory=dict)
    sentence: str = ""
    selected_range: Slice | None = None
    selected_nodes: tuple[NodeId, ...] | None = None
    unselectable_nodes: frozenset[NodeId] | None = None
    mode: Mode = NORMAL
    history: History = field(default_factory=History)

    def _mode_node(self, kind: ModeKind) -> NodeId | None:
        return self.mode.node_id if self.mode.kind is kind else None

    @property
    def editing_node(self) -> NodeId | None:
        return self._mode_node(ModeKind.EDITING)

    @property
    def adopting_node(self) -> NodeId | None:
        return self._mode_node(ModeKind.ADOPTING)

    @property
    def disowning_node(self) -> NodeId | None:
        return self._mode_node(ModeKind.DISOWNING)

    @property
    def last_selected(self) -> NodeId | None:
        """The effective node for single-node operations."""
        return self.selected_nodes[-1] if self.selected_nodes else None

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo()

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo()
