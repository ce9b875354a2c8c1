"""Undo/redo history with coalescing of rapid edits.

Entries are immutable. ``present`` is the most recent undoable entry,
``past`` holds older ones (most recent first) and ``future`` holds undone
entries that can be redone (next to redo first).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

from tui_syntree.models import Node, NodeId

T = TypeVar("T")

COALESCE_WINDOW = 0.4  # seconds


@dataclass(frozen=True)
class Change(Generic[T]):
    """A before/after pair."""

    before: T
    after: T


NodeChange = Change[Optional[Node]]
SentenceChange = Change[str]


class EntryKind(Enum):
    """What an entry changes."""

    NODES = "nodes"
    SENTENCE = "sentence"
    BOTH = "both"


@dataclass(frozen=True)
class HistoryEntry:
    """One undoable unit of change.

    ``nodes`` maps node IDs to their before/after values; a ``None`` before
    means the node was created, a ``None`` after means it was deleted.
    """

    nodes: dict[NodeId, NodeChange] = field(default_factory=dict)
    sentence: SentenceChange | None = None
    timestamp: float = 0.0

    @property
    def kind(self) -> EntryKind:
        if self.nodes and self.sentence is not None:
            return EntryKind.BOTH
        if self.sentence is not None:
            return EntryKind.SENTENCE
        return EntryKind.NODES

    def overlaps(self, other: HistoryEntry) -> bool:
        """Return True if both entries touch nodes, or both touch the sentence."""
        return bool(
            (self.nodes and other.nodes)
            or (self.sentence is not None and other.sentence is not None)
        )

    def merge(self, later: HistoryEntry) -> HistoryEntry:
        """Combine with a later entry: earliest befores, latest afters."""
        nodes = dict(self.nodes)
        for node_id, change in later.nodes.items():
            earlier = nodes.get(node_id)
            before = earlier.before if earlier is not None else change.before
            nodes[node_id] = Change(before, change.after)
        if self.sentence is not None and later.sentence is not None:
            sentence = Change(self.sentence.before, later.sentence.after)
        else:
            sentence = self.sentence or later.sentence
        return HistoryEntry(nodes=nodes, sentence=sentence, timestamp=later.timestamp)


@dataclass(frozen=True)
class History:
    """Immutable undo/redo state."""

    past: tuple[HistoryEntry, ...] = ()
    present: HistoryEntry | None = None
    future: tuple[HistoryEntry, ...] = ()

    def can_undo(self) -> bool:
        return self.present is not None or bool(self.past)

    def can_redo(self) -> bool:
        return bool(self.future)

    def register(self, entry: HistoryEntry, window: float = COALESCE_WINDOW) -> History:
        """Record a new entry.

        If the present entry changes the same kind of thing and was recorded
        less than ``window`` seconds earlier, the two are merged into one
        undoable step and ``future`` is kept. Otherwise the old present is
        pushed onto ``past``, the entry becomes the new present and
        ``future`` is discarded.
        """
        present = self.present
        if (
            present is not None
            and present.overlaps(entry)
            and entry.timestamp - present.timestamp < window
        ):
            return History(self.past, present.merge(entry), self.future)
        past = (present, *self.past) if present is not None else self.past
        return History(past, entry)

    def undo(self) -> History:
        if not self.can_undo():
            return self
        future = (self.present, *self.future) if self.present is not None else self.future
        return History(
            self.past[1:],
            self.past[0] if self.past else None,
            future,
        )

    def redo(self) -> History:
        if not self.can_redo():
            return self
        past = (self.present, *self.past) if self.present is not None else self.past
        return History(past, self.future[0], self.future[1:])
