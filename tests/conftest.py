"""Shared fixtures: a deterministic editor context."""

from __future__ import annotations

import itertools

import pytest

from tui_syntree.models import Node
from tui_syntree.state import EditorContext


class FakeClock:
    """Returns a time that advances by ``step`` seconds on every call."""

    def __init__(self, start: float = 1000.0, step: float = 1.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ctx(clock):
    ids = (f"n{i}" for i in itertools.count(1))
    return EditorContext(generate_id=lambda: next(ids), now=clock)


@pytest.fixture
def vp_tree():
    """'know the way' as VP -> V NP, NP -> Det N."""
    return {
        "abc": Node(id="abc", label="VP", children=("def", "ghi")),
        "def": Node(id="def", label="V", slice=(0, 4)),
        "ghi": Node(id="ghi", label="NP", children=("jkl", "mno")),
        "jkl": Node(id="jkl", label="Det", slice=(5, 8)),
        "mno": Node(id="mno", label="N", slice=(9, 12)),
    }
