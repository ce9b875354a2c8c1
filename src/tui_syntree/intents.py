"""High-level editing intents fed to the editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tui_syntree.models import NodeId


@dataclass(frozen=True)
class SetSentence:
    sentence: str


@dataclass(frozen=True)
class SelectText:
    start: int
    end: int


@dataclass(frozen=True)
class SelectNodes:
    node_ids: tuple[NodeId, ...]
    multi: bool = False


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class AddNode:
    pass


@dataclass(frozen=True)
class ToggleEditMode:
    pass


@dataclass(frozen=True)
class ToggleAdoptMode:
    pass


@dataclass(frozen=True)
class ToggleDisownMode:
    pass


@dataclass(frozen=True)
class DeleteNodes:
    pass


@dataclass(frozen=True)
class ToggleTriangle:
    value: bool


@dataclass(frozen=True)
class SetLabel:
    label: str


@dataclass(frozen=True)
class MoveNodes:
    dx: float
    dy: float


@dataclass(frozen=True)
class ResetNodePositions:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Redo:
    pass


Intent = Union[
    SetSentence, SelectText, SelectNodes, ClearSelection, AddNode,
    ToggleEditMode, ToggleAdoptMode, ToggleDisownMode, DeleteNodes,
    ToggleTriangle, SetLabel, MoveNodes, ResetNodePositions, Undo, Redo,
]
