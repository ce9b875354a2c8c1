"""State transitions for every editing operation.

Each function takes the current ``EditorState`` (and the ``EditorContext``
supplying IDs and timestamps) and returns a new state. Operations whose
preconditions are not met return the state unchanged. Every change to
nodes or to the sentence is registered in the undo history.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Sequence

from tui_syntree.history import Change, EntryKind, History, HistoryEntry, NodeChange
from tui_syntree.models import (
    Node,
    NodeId,
    NodeTree,
    Slice,
    ancestors,
    nodes_with_parents,
)
from tui_syntree.node_def import derive_definition, normalize_range
from tui_syntree.state import NORMAL, EditorContext, EditorState, Mode


# ── Helpers ──

def _register(
    state: EditorState,
    ctx: EditorContext,
    nodes: dict[NodeId, NodeChange] | None = None,
    sentence: Change[str] | None = None,
) -> History:
    entry = HistoryEntry(nodes=nodes or {}, sentence=sentence, timestamp=ctx.now())
    return state.history.register(entry, ctx.coalesce_window)


def _update_selected(
    state: EditorState, ctx: EditorContext, update: Callable[[Node], Node]
) -> EditorState:
    """Apply update to every selected node and record what changed."""
    if not state.selected_nodes:
        return state
    nodes = dict(state.nodes)
    changes: dict[NodeId, NodeChange] = {}
    for node_id in state.selected_nodes:
        node = nodes.get(node_id)
        if node is None:
            continue
        new_node = update(node)
        if new_node != node:
            nodes[node_id] = new_node
            changes[node_id] = Change(node, new_node)
    if not changes:
        return state
    return replace(state, nodes=nodes, history=_register(state, ctx, changes))


def _replace_node(
    state: EditorState, ctx: EditorContext, node: Node, new_node: Node
) -> tuple[NodeTree, History]:
    if new_node == node:
        return state.nodes, state.history
    nodes = {**state.nodes, node.id: new_node}
    return nodes, _register(state, ctx, {node.id: Change(node, new_node)})


def _unlink(
    nodes: NodeTree, orphans: set[NodeId], changes: dict[NodeId, NodeChange]
) -> NodeTree:
    """Return nodes with orphans removed from every children list.

    Each changed parent is recorded in changes. A parent left without
    children becomes stranded.
    """
    unlinked: NodeTree = {}
    for node_id, node in nodes.items():
        if node.children and not orphans.isdisjoint(node.children):
            remaining = tuple(c for c in node.children if c not in orphans)
            new_node = replace(node, children=remaining or None)
            changes[node_id] = Change(node, new_node)
            node = new_node
        unlinked[node_id] = node
    return unlinked


def shift_slice(node: Node, count: int, position: int) -> Node:
    """Shift a node's slice for ``count`` characters inserted at ``position``.

    A negative count is a deletion. A slice that collapses loses its slice.
    """
    if node.slice is None:
        return node
    start, end = node.slice
    if start > position:
        start += count
    if end >= position:
        end += count
    if end <= start:
        return replace(node, slice=None)
    return replace(node, slice=(start, end))


# ── Node edits ──

def add_node(state: EditorState, ctx: EditorContext) -> EditorState:
    """Create a node from the current selection and start editing its label."""
    if state.selected_range is None and not state.selected_nodes:
        return state
    definition = derive_definition(
        state.sentence, state.selected_nodes, state.selected_range
    )
    if definition.is_empty:
        return state
    node_id = ctx.generate_id()
    node = definition.apply_to(Node(id=node_id))
    changes: dict[NodeId, NodeChange] = {}
    # A node has at most one parent: chosen children leave their old parents.
    nodes = _unlink(state.nodes, set(definition.children or ()), changes)
    nodes[node_id] = node
    changes[node_id] = Change(None, node)
    return replace(
        state,
        nodes=nodes,
        selected_range=None,
        selected_nodes=(node_id,),
        mode=Mode.editing(node_id),
        history=_register(state, ctx, changes),
    )


def set_label(state: EditorState, ctx: EditorContext, value: str) -> EditorState:
    node = state.nodes.get(state.editing_node) if state.editing_node else None
    if node is None or node.label == value:
        return state
    nodes, history = _replace_node(state, ctx, node, replace(node, label=value))
    return replace(state, nodes=nodes, history=history)


def toggle_triangle(state: EditorState, ctx: EditorContext, value: bool) -> EditorState:
    return _update_selected(state, ctx, lambda node: replace(node, triangle=value))


def move_nodes(state: EditorState, ctx: EditorContext, dx: float, dy: float) -> EditorState:
    return _update_selected(
        state,
        ctx,
        lambda node: replace(
            node, offset_x=node.offset_x + dx, offset_y=node.offset_y + dy
        ),
    )


def reset_node_positions(state: EditorState, ctx: EditorContext) -> EditorState:
    return _update_selected(
        state, ctx, lambda node: replace(node, offset_x=0, offset_y=0)
    )


def delete_nodes(state: EditorState, ctx: EditorContext) -> EditorState:
    """Remove the selected nodes and unlink them from their parents.

    A parent left without children becomes stranded; it is not deleted.
    """
    if not state.selected_nodes:
        return state
    doomed = {node_id for node_id in state.selected_nodes if node_id in state.nodes}
    if not doomed:
        return replace(state, selected_nodes=None)
    changes: dict[NodeId, NodeChange] = {
        node_id: Change(state.nodes[node_id], None) for node_id in doomed
    }
    survivors = {n: node for n, node in state.nodes.items() if n not in doomed}
    nodes = _unlink(survivors, doomed, changes)
    mode_lost = state.mode.node_id in doomed
    return replace(
        state,
        nodes=nodes,
        selected_nodes=None,
        mode=NORMAL if mode_lost else state.mode,
        unselectable_nodes=None if mode_lost else state.unselectable_nodes,
        history=_register(state, ctx, changes),
    )


# ── Modes ──

def toggle_edit_mode(state: EditorState, ctx: EditorContext) -> EditorState:
    target = state.last_selected
    if target is None:
        return state
    if state.editing_node == target:
        return replace(state, mode=NORMAL)
    return replace(state, mode=Mode.editing(target))


def _adoption_blocked(nodes: NodeTree, adopter: NodeId) -> set[NodeId]:
    return nodes_with_parents(nodes) | ancestors(nodes, adopter) | {adopter}


def start_adoption(state: EditorState, ctx: EditorContext) -> EditorState:
    """Enter adopting mode for the last selected node.

    Nodes that already have a parent, and ancestors of the adopting node,
    cannot be adopted.
    """
    adopter = state.last_selected
    if adopter is None or adopter not in state.nodes:
        return state
    unselectable = _adoption_blocked(state.nodes, adopter)
    return replace(
        state,
        selected_nodes=None,
        selected_range=None,
        unselectable_nodes=frozenset(unselectable),
        mode=Mode.adopting(adopter),
    )


def stop_adoption(state: EditorState, ctx: EditorContext) -> EditorState:
    return replace(state, unselectable_nodes=None, mode=NORMAL)


def complete_adoption(
    state: EditorState,
    ctx: EditorContext,
    node_ids: Sequence[NodeId] | None,
    selected_range: Slice | None,
) -> EditorState:
    """Attach the chosen nodes (or text range) to the adopting node.

    Chosen nodes are appended to the existing children. A text range
    replaces the node's structure with that slice.
    """
    finished = replace(
        state, selected_nodes=None, unselectable_nodes=None, mode=NORMAL
    )
    adopter = state.nodes.get(state.adopting_node) if state.adopting_node else None
    if adopter is None:
        return finished
    if node_ids is not None:
        # The tree may have changed (undo/redo) since adoption started.
        blocked = _adoption_blocked(state.nodes, adopter.id)
        node_ids = [n for n in node_ids if n in state.nodes and n not in blocked]
    definition = derive_definition(state.sentence, node_ids, selected_range)
    if definition.is_empty:
        return finished
    if definition.children and adopter.children:
        definition = replace(definition, children=adopter.children + definition.children)
    nodes, history = _replace_node(state, ctx, adopter, definition.apply_to(adopter))
    return replace(finished, nodes=nodes, history=history)


def start_disowning(state: EditorState, ctx: EditorContext) -> EditorState:
    """Enter disowning mode; only children of the node remain selectable."""
    parent = state.nodes.get(state.last_selected) if state.last_selected else None
    if parent is None or not parent.children:
        return state
    unselectable = set(state.nodes) - set(parent.children)
    return replace(
        state,
        selected_nodes=None,
        selected_range=None,
        unselectable_nodes=frozenset(unselectable),
        mode=Mode.disowning(parent.id),
    )


def stop_disowning(state: EditorState, ctx: EditorContext) -> EditorState:
    return replace(state, unselectable_nodes=None, mode=NORMAL)


def complete_disowning(
    state: EditorState, ctx: EditorContext, node_ids: Sequence[NodeId] | None
) -> EditorState:
    """Detach the chosen children, or all children when none are given."""
    finished = replace(
        state, selected_nodes=None, unselectable_nodes=None, mode=NORMAL
    )
    parent = state.nodes.get(state.disowning_node) if state.disowning_node else None
    if parent is None:
        return finished
    if node_ids is None:
        remaining: tuple[NodeId, ...] = ()
    else:
        remaining = tuple(c for c in parent.children or () if c not in node_ids)
    definition = derive_definition(state.sentence, remaining, None)
    nodes, history = _replace_node(state, ctx, parent, definition.apply_to(parent))
    return replace(finished, nodes=nodes, history=history)


def toggle_adopt_mode(state: EditorState, ctx: EditorContext) -> EditorState:
    if state.adopting_node:
        return stop_adoption(state, ctx)
    return start_adoption(state, ctx)


def toggle_disown_mode(state: EditorState, ctx: EditorContext) -> EditorState:
    if state.disowning_node:
        return stop_disowning(state, ctx)
    return start_disowning(state, ctx)


# ── Selection ──

def clear_selection(state: EditorState, ctx: EditorContext) -> EditorState:
    """Drop the node selection and leave label editing."""
    mode = NORMAL if state.editing_node else state.mode
    return replace(state, selected_nodes=None, mode=mode)


def select_text(state: EditorState, ctx: EditorContext, start: int, end: int) -> EditorState:
    if state.adopting_node:
        return complete_adoption(state, ctx, None, (start, end))
    if state.disowning_node:
        return complete_disowning(state, ctx, None)
    selected_range = normalize_range(state.sentence, (start, end)) if state.sentence else None
    return replace(
        state, selected_range=selected_range, selected_nodes=None, mode=NORMAL
    )


def select_nodes(
    state: EditorState, ctx: EditorContext, node_ids: Sequence[NodeId], multi: bool
) -> EditorState:
    """Select nodes, or finish adopting/disowning with them.

    With ``multi`` each given node is toggled in the existing selection.
    """
    blocked = set(state.unselectable_nodes or ())
    if state.adopting_node or state.disowning_node:
        blocked.add(state.mode.node_id)
    selectable: list[NodeId] = []
    for node_id in node_ids:
        if node_id in state.nodes and node_id not in blocked and node_id not in selectable:
            selectable.append(node_id)
    if not selectable:
        return state
    if state.adopting_node:
        return complete_adoption(state, ctx, selectable, None)
    if state.disowning_node:
        return complete_disowning(state, ctx, selectable)
    if multi and state.selected_nodes:
        selection = list(state.selected_nodes)
        for node_id in selectable:
            if node_id in selection:
                selection.remove(node_id)
            else:
                selection.append(node_id)
    else:
        selection = selectable
    return replace(
        state,
        selected_range=None,
        selected_nodes=tuple(selection) or None,
        mode=NORMAL,
    )


# ── Sentence ──

def set_sentence(state: EditorState, ctx: EditorContext, sentence: str) -> EditorState:
    """Replace the sentence.

    With a bare cursor active the edit is taken to happen at the cursor and
    terminal slices are shifted to follow their text. Range selections do
    not shift slices.
    """
    if sentence == state.sentence:
        return state
    nodes = state.nodes
    changes: dict[NodeId, NodeChange] = {}
    cursor = state.selected_range
    if cursor is not None and cursor[0] == cursor[1]:
        count = len(sentence) - len(state.sentence)
        nodes = {}
        for node_id, node in state.nodes.items():
            shifted = shift_slice(node, count, cursor[0])
            if shifted != node:
                changes[node_id] = Change(node, shifted)
            nodes[node_id] = shifted
    selected_range = normalize_range(sentence, cursor) if cursor is not None else None
    return replace(
        state,
        nodes=nodes,
        sentence=sentence,
        selected_range=selected_range,
        history=_register(state, ctx, changes, Change(state.sentence, sentence)),
    )


# ── Undo / redo ──

def _restore(state: EditorState, entry: HistoryEntry, forward: bool) -> EditorState:
    """Put back the before (or after) values recorded in an entry."""
    nodes = state.nodes
    sentence = state.sentence
    removed = False
    if entry.kind in (EntryKind.NODES, EntryKind.BOTH):
        nodes = dict(state.nodes)
        for node_id, change in entry.nodes.items():
            value = change.after if forward else change.before
            if value is None:
                removed |= nodes.pop(node_id, None) is not None
            else:
                nodes[node_id] = value
    if entry.kind in (EntryKind.SENTENCE, EntryKind.BOTH):
        sentence = entry.sentence.after if forward else entry.sentence.before

    selected_nodes = None if removed else state.selected_nodes
    if selected_nodes:
        selected_nodes = tuple(n for n in selected_nodes if n in nodes) or None
    mode_lost = state.mode.node_id is not None and state.mode.node_id not in nodes
    selected_range = state.selected_range
    if selected_range is not None:
        selected_range = normalize_range(sentence, selected_range)
    return replace(
        state,
        nodes=nodes,
        sentence=sentence,
        selected_range=selected_range,
        selected_nodes=selected_nodes,
        mode=NORMAL if mode_lost else state.mode,
        unselectable_nodes=None if mode_lost else state.unselectable_nodes,
    )


def undo(state: EditorState, ctx: EditorContext) -> EditorState:
    entry = state.history.present
    if entry is None:
        return state
    restored = _restore(state, entry, forward=False)
    return replace(restored, history=state.history.undo())


def redo(state: EditorState, ctx: EditorContext) -> EditorState:
    if not state.history.future:
        return state
    restored = _restore(state, state.history.future[0], forward=True)
    return replace(restored, history=state.history.redo())
