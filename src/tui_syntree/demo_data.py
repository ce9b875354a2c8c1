"""Example sentence and tree for --demo mode.

Provides:
- DEMO_SENTENCE           → the classic "Colorless green ideas" sentence
- get_demo_tree()         → a complete S/NP/VP analysis of it
- get_demo_state()        → an editor state holding both
"""

from __future__ import annotations

from tui_syntree.editor import initial_state
from tui_syntree.models import Node, NodeTree
from tui_syntree.state import EditorState

DEMO_SENTENCE = "Colorless green ideas sleep furiously."

_TERMINALS = [
    # (id, label, slice)
    ("adj1", "Adj", (0, 9)),
    ("adj2", "Adj", (10, 15)),
    ("n", "N", (16, 21)),
    ("v", "V", (22, 27)),
    ("adv", "Adv", (28, 37)),
]

_PHRASES = [
    # (id, label, children)
    ("np2", "NP", ("adj2", "n")),
    ("np1", "NP", ("adj1", "np2")),
    ("vp", "VP", ("v", "adv")),
    ("s", "S", ("np1", "vp")),
]


def get_demo_tree() -> NodeTree:
    """Return the demo tree, keyed by node ID."""
    nodes: NodeTree = {}
    for node_id, label, span in _TERMINALS:
        nodes[node_id] = Node(id=node_id, label=label, slice=span)
    for node_id, label, children in _PHRASES:
        nodes[node_id] = Node(id=node_id, label=label, children=children)
    return nodes


def get_demo_state() -> EditorState:
    return initial_state(DEMO_SENTENCE, get_demo_tree())
