"""Tests for editor state transitions."""

from dataclasses import replace

import pytest

from tui_syntree import mutations
from tui_syntree.editor import initial_state
from tui_syntree.models import Node
from tui_syntree.state import NORMAL, ModeKind

SENTENCE = "know the way"


@pytest.fixture
def terminals():
    return initial_state(SENTENCE, {
        "jkl": Node(id="jkl", label="Det", slice=(5, 8)),
        "mno": Node(id="mno", label="N", slice=(9, 12)),
    })


@pytest.fixture
def tree(vp_tree):
    nodes = dict(vp_tree)
    nodes["p"] = Node(id="p", label="XP")
    return initial_state(SENTENCE, nodes)


def _select(state, *node_ids):
    return replace(state, selected_nodes=node_ids)


class TestAddNode:
    def test_parent_of_one_node(self, terminals, ctx):
        state = mutations.add_node(_select(terminals, "jkl"), ctx)
        assert state.nodes["n1"] == Node(id="n1", children=("jkl",))

    def test_parent_of_two_nodes(self, terminals, ctx):
        state = mutations.add_node(_select(terminals, "jkl", "mno"), ctx)
        assert state.nodes["n1"].children == ("jkl", "mno")

    def test_from_cursor(self, terminals, ctx):
        state = mutations.add_node(replace(terminals, selected_range=(2, 2)), ctx)
        node = state.nodes["n1"]
        assert node.slice == (0, 4)
        assert node.triangle is False

    def test_from_range(self, terminals, ctx):
        state = mutations.add_node(replace(terminals, selected_range=(6, 11)), ctx)
        node = state.nodes["n1"]
        assert node.slice == (6, 11)
        assert node.triangle is True

    def test_selects_and_edits_new_node(self, terminals, ctx):
        state = mutations.add_node(replace(terminals, selected_range=(2, 2)), ctx)
        assert state.selected_nodes == ("n1",)
        assert state.selected_range is None
        assert state.editing_node == "n1"
        assert state.history.present.nodes["n1"].before is None

    def test_nothing_selected(self, terminals, ctx):
        assert mutations.add_node(terminals, ctx) is terminals

    def test_whitespace_range(self, ctx):
        state = replace(initial_state("a   b"), selected_range=(1, 4))
        assert mutations.add_node(state, ctx) is state

    def test_child_leaves_previous_parent(self, tree, ctx):
        state = mutations.add_node(_select(tree, "jkl"), ctx)
        parents = [n.id for n in state.nodes.values() if "jkl" in (n.children or ())]
        assert parents == ["n1"]
        assert state.nodes["ghi"].children == ("mno",)

    def test_previous_parent_left_empty_is_stranded(self, tree, ctx):
        state = mutations.add_node(_select(tree, "jkl", "mno"), ctx)
        assert state.nodes["ghi"].is_stranded
        assert state.nodes["n1"].children == ("jkl", "mno")

    def test_node_with_its_ancestor(self, tree, ctx):
        state = mutations.add_node(_select(tree, "ghi", "abc"), ctx)
        assert state.nodes["n1"].children == ("ghi", "abc")
        assert state.nodes["abc"].children == ("def",)

    def test_undo_restores_previous_parent(self, tree, ctx):
        state = mutations.add_node(_select(tree, "jkl"), ctx)
        state = mutations.undo(state, ctx)
        assert state.nodes == tree.nodes


class TestNodeEdits:
    def test_set_label(self, terminals, ctx):
        state = replace(terminals, selected_nodes=("jkl",))
        state = mutations.toggle_edit_mode(state, ctx)
        state = mutations.set_label(state, ctx, "D")
        assert state.nodes["jkl"].label == "D"
        assert state.can_undo

    def test_set_label_outside_edit_mode(self, terminals, ctx):
        state = _select(terminals, "jkl")
        assert mutations.set_label(state, ctx, "D") is state

    def test_toggle_edit_mode(self, terminals, ctx):
        state = mutations.toggle_edit_mode(_select(terminals, "jkl"), ctx)
        assert state.mode.kind is ModeKind.EDITING
        assert mutations.toggle_edit_mode(state, ctx).mode == NORMAL

    def test_edit_mode_needs_selection(self, terminals, ctx):
        assert mutations.toggle_edit_mode(terminals, ctx) is terminals

    def test_toggle_triangle(self, terminals, ctx):
        state = mutations.toggle_triangle(_select(terminals, "jkl", "mno"), ctx, True)
        assert state.nodes["jkl"].triangle and state.nodes["mno"].triangle
        assert set(state.history.present.nodes) == {"jkl", "mno"}

    def test_toggle_triangle_without_change(self, terminals, ctx):
        state = _select(terminals, "jkl")
        assert mutations.toggle_triangle(state, ctx, False) is state

    def test_move_and_reset(self, terminals, ctx):
        state = mutations.move_nodes(_select(terminals, "jkl"), ctx, 8, -10)
        state = mutations.move_nodes(state, ctx, 8, 0)
        node = state.nodes["jkl"]
        assert (node.offset_x, node.offset_y) == (16, -10)
        state = mutations.reset_node_positions(state, ctx)
        assert (state.nodes["jkl"].offset_x, state.nodes["jkl"].offset_y) == (0, 0)


class TestDeleteNodes:
    def test_unlinks_from_parent(self, tree, ctx):
        state = mutations.delete_nodes(_select(tree, "ghi"), ctx)
        assert "ghi" not in state.nodes
        assert state.nodes["abc"].children == ("def",)
        assert state.selected_nodes is None
        # Children of a deleted node survive as roots
        assert "jkl" in state.nodes

    def test_parent_without_children_is_stranded(self, tree, ctx):
        state = mutations.delete_nodes(_select(tree, "jkl", "mno"), ctx)
        assert state.nodes["ghi"].is_stranded

    def test_no_dangling_references(self, tree, ctx):
        state = mutations.delete_nodes(_select(tree, "def", "jkl"), ctx)
        for node in state.nodes.values():
            assert all(c in state.nodes for c in node.children or ())

    def test_deleting_edited_node_leaves_edit_mode(self, tree, ctx):
        state = mutations.toggle_edit_mode(_select(tree, "p"), ctx)
        state = mutations.delete_nodes(state, ctx)
        assert state.mode == NORMAL

    def test_nothing_selected(self, tree, ctx):
        assert mutations.delete_nodes(tree, ctx) is tree


class TestAdoption:
    def test_unselectable_nodes(self, tree, ctx):
        state = mutations.start_adoption(_select(tree, "ghi"), ctx)
        assert state.adopting_node == "ghi"
        assert {"abc", "ghi", "def", "jkl", "mno"} <= state.unselectable_nodes
        assert "p" not in state.unselectable_nodes
        assert state.selected_nodes is None

    def test_adopt_nodes(self, tree, ctx):
        state = mutations.start_adoption(_select(tree, "p"), ctx)
        state = mutations.select_nodes(state, ctx, ("abc",), False)
        assert state.nodes["p"].children == ("abc",)
        assert state.mode == NORMAL
        assert state.unselectable_nodes is None

    def test_adopted_nodes_are_appended(self, tree, ctx):
        state = replace(tree, nodes={**tree.nodes, "q": Node(id="q", slice=(0, 4))})
        state = mutations.start_adoption(_select(state, "ghi"), ctx)
        state = mutations.select_nodes(state, ctx, ("q",), False)
        assert state.nodes["ghi"].children == ("jkl", "mno", "q")

    def test_adopt_text(self, tree, ctx):
        state = mutations.start_adoption(_select(tree, "p"), ctx)
        state = mutations.select_text(state, ctx, 0, 4)
        assert state.nodes["p"].slice == (0, 4)
        assert state.nodes["p"].children is None
        assert state.mode == NORMAL

    def test_unselectable_nodes_are_ignored(self, tree, ctx):
        state = mutations.start_adoption(_select(tree, "p"), ctx)
        assert mutations.select_nodes(state, ctx, ("jkl",), False) is state

    def test_toggle_stops_adoption(self, tree, ctx):
        state = mutations.toggle_adopt_mode(_select(tree, "p"), ctx)
        state = mutations.toggle_adopt_mode(state, ctx)
        assert state.mode == NORMAL
        assert state.unselectable_nodes is None

    def test_needs_selection(self, tree, ctx):
        assert mutations.start_adoption(tree, ctx) is tree

    def test_node_reparented_by_undo_is_not_adopted(self, tree, ctx):
        state = mutations.start_disowning(_select(tree, "ghi"), ctx)
        state = mutations.select_nodes(state, ctx, ("jkl",), False)
        state = mutations.start_adoption(_select(state, "p"), ctx)
        assert "jkl" not in state.unselectable_nodes
        state = mutations.undo(state, ctx)
        assert state.nodes["ghi"].children == ("jkl", "mno")
        state = mutations.select_nodes(state, ctx, ("jkl",), False)
        assert state.nodes["p"].children is None
        assert state.mode == NORMAL


class TestDisowning:
    def test_only_children_selectable(self, tree, ctx):
        state = mutations.start_disowning(_select(tree, "ghi"), ctx)
        assert state.disowning_node == "ghi"
        assert state.unselectable_nodes == frozenset({"abc", "def", "ghi", "p"})

    def test_disown_child(self, tree, ctx):
        state = mutations.start_disowning(_select(tree, "ghi"), ctx)
        state = mutations.select_nodes(state, ctx, ("jkl",), False)
        assert state.nodes["ghi"].children == ("mno",)
        assert state.mode == NORMAL

    def test_text_disowns_all_children(self, tree, ctx):
        state = mutations.start_disowning(_select(tree, "ghi"), ctx)
        state = mutations.select_text(state, ctx, 0, 0)
        assert state.nodes["ghi"].is_stranded
        assert "jkl" in state.nodes

    def test_terminal_cannot_disown(self, tree, ctx):
        state = _select(tree, "jkl")
        assert mutations.start_disowning(state, ctx) is state


class TestSelection:
    def test_select_nodes(self, tree, ctx):
        state = mutations.select_nodes(tree, ctx, ("jkl", "mno", "jkl", "zzz"), False)
        assert state.selected_nodes == ("jkl", "mno")
        assert state.selected_range is None

    def test_multi_select_toggles(self, tree, ctx):
        state = mutations.select_nodes(tree, ctx, ("jkl",), False)
        state = mutations.select_nodes(state, ctx, ("mno",), True)
        assert state.selected_nodes == ("jkl", "mno")
        state = mutations.select_nodes(state, ctx, ("jkl",), True)
        assert state.selected_nodes == ("mno",)
        state = mutations.select_nodes(state, ctx, ("mno",), True)
        assert state.selected_nodes is None

    def test_select_text_clears_nodes(self, tree, ctx):
        state = mutations.select_nodes(tree, ctx, ("jkl",), False)
        state = mutations.select_text(state, ctx, 8, 3)
        assert state.selected_range == (3, 8)
        assert state.selected_nodes is None

    def test_select_text_leaves_edit_mode(self, tree, ctx):
        state = mutations.toggle_edit_mode(_select(tree, "p"), ctx)
        assert mutations.select_text(state, ctx, 0, 0).mode == NORMAL

    def test_clear_selection_keeps_range(self, tree, ctx):
        state = mutations.clear_selection(replace(tree, selected_range=(1, 2)), ctx)
        assert state.selected_range == (1, 2)
        assert state.selected_nodes is None


class TestSetSentence:
    def test_sets_sentence(self, tree, ctx):
        state = mutations.set_sentence(tree, ctx, "know their way")
        assert state.sentence == "know their way"

    def test_shifts_slices_at_cursor(self, tree, ctx):
        state = replace(tree, selected_range=(8, 8))
        state = mutations.set_sentence(state, ctx, "know their way")
        assert state.nodes["def"].slice == (0, 4)
        assert state.nodes["jkl"].slice == (5, 10)
        assert state.nodes["mno"].slice == (11, 14)

    def test_range_selection_does_not_shift(self, tree, ctx):
        state = replace(tree, selected_range=(5, 8))
        state = mutations.set_sentence(state, ctx, "know a way")
        assert state.nodes["mno"].slice == (9, 12)
        assert state.selected_range == (5, 8)

    def test_collapsed_slice_is_dropped(self, ctx):
        state = initial_state("a b", {"x": Node(id="x", slice=(2, 3))})
        state = replace(state, selected_range=(2, 2))
        state = mutations.set_sentence(state, ctx, "a ")
        assert state.nodes["x"].slice is None

    def test_selected_range_is_clamped(self, tree, ctx):
        state = replace(tree, selected_range=(10, 12))
        state = mutations.set_sentence(state, ctx, "know")
        assert state.selected_range == (4, 4)

    def test_same_sentence(self, tree, ctx):
        assert mutations.set_sentence(tree, ctx, SENTENCE) is tree


class TestUndoRedo:
    def test_undo_sentence_restores_slices(self, tree, ctx):
        state = replace(tree, selected_range=(8, 8))
        state = mutations.set_sentence(state, ctx, "know their way")
        state = mutations.undo(state, ctx)
        assert state.sentence == SENTENCE
        assert state.nodes["jkl"].slice == (5, 8)
        state = mutations.redo(state, ctx)
        assert state.nodes["jkl"].slice == (5, 10)

    def test_undo_add_node(self, terminals, ctx):
        state = mutations.add_node(_select(terminals, "jkl"), ctx)
        state = mutations.undo(state, ctx)
        assert "n1" not in state.nodes
        assert state.selected_nodes is None
        assert state.mode == NORMAL

    def test_undo_delete(self, tree, ctx):
        state = mutations.delete_nodes(_select(tree, "ghi"), ctx)
        state = mutations.undo(state, ctx)
        assert state.nodes == tree.nodes

    def test_nothing_to_undo(self, tree, ctx):
        assert mutations.undo(tree, ctx) is tree
        assert mutations.redo(tree, ctx) is tree

    def test_rapid_edits_undo_together(self, terminals, ctx, clock):
        clock.step = 0.05
        state = mutations.toggle_edit_mode(_select(terminals, "jkl"), ctx)
        for label in ("D", "De", "Det2"):
            state = mutations.set_label(state, ctx, label)
        state = mutations.undo(state, ctx)
        assert state.nodes["jkl"].label == "Det"
        assert not state.can_undo
