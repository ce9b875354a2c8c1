"""The editor state machine: apply one intent to a state."""

from __future__ import annotations

import logging
from typing import Callable

from tui_syntree import intents as i
from tui_syntree import mutations as m
from tui_syntree.models import Node, NodeTree
from tui_syntree.state import EditorContext, EditorState

logger = logging.getLogger(__name__)

_DEFAULT_CONTEXT = EditorContext()

_Handler = Callable[[EditorState, EditorContext, "i.Intent"], EditorState]

_HANDLERS: dict[type, _Handler] = {
    i.SetSentence: lambda s, c, a: m.set_sentence(s, c, a.sentence),
    i.SelectText: lambda s, c, a: m.select_text(s, c, a.start, a.end),
    i.SelectNodes: lambda s, c, a: m.select_nodes(s, c, a.node_ids, a.multi),
    i.ClearSelection: lambda s, c, a: m.clear_selection(s, c),
    i.AddNode: lambda s, c, a: m.add_node(s, c),
    i.ToggleEditMode: lambda s, c, a: m.toggle_edit_mode(s, c),
    i.ToggleAdoptMode: lambda s, c, a: m.toggle_adopt_mode(s, c),
    i.ToggleDisownMode: lambda s, c, a: m.toggle_disown_mode(s, c),
    i.DeleteNodes: lambda s, c, a: m.delete_nodes(s, c),
    i.ToggleTriangle: lambda s, c, a: m.toggle_triangle(s, c, a.value),
    i.SetLabel: lambda s, c, a: m.set_label(s, c, a.label),
    i.MoveNodes: lambda s, c, a: m.move_nodes(s, c, a.dx, a.dy),
    i.ResetNodePositions: lambda s, c, a: m.reset_node_positions(s, c),
    i.Undo: lambda s, c, a: m.undo(s, c),
    i.Redo: lambda s, c, a: m.redo(s, c),
}


def initial_state(sentence: str = "", nodes: NodeTree | None = None) -> EditorState:
    """Return a fresh editor state with an empty history."""
    return EditorState(nodes=dict(nodes or {}), sentence=sentence)


def apply(
    state: EditorState, intent: i.Intent, context: EditorContext | None = None
) -> EditorState:
    """Return the state that results from applying intent to state.

    Unknown intents, and intents whose preconditions are not met, leave the
    state unchanged.
    """
    handler = _HANDLERS.get(type(intent))
    if handler is None:
        logger.warning("Ignoring unknown intent %r", intent)
        return state
    logger.debug("intent %r", intent)
    new_state = handler(state, context or _DEFAULT_CONTEXT, intent)
    if new_state is state:
        logger.debug("intent %s changed nothing", type(intent).__name__)
    return new_state


def selected(state: EditorState) -> list[Node]:
    """Return the selected nodes, in selection order."""
    return [state.nodes[n] for n in state.selected_nodes or () if n in state.nodes]
