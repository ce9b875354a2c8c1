"""Tree canvas widget."""

from __future__ import annotations

from textual.binding import Binding
from textual.widgets import Static

from tui_syntree.canvas import render_canvas
from tui_syntree.metrics import CellMetrics
from tui_syntree.models import NodeId, PositionedNode
from tui_syntree.state import EditorState


class TreeCanvas(Static, can_focus=True):
    """Focusable view of the positioned tree and its sentence."""

    # Arrow keys move the highlight instead of scrolling.
    BINDINGS = [
        Binding("left", "app.highlight(-1)", "Previous node", show=False),
        Binding("right", "app.highlight(1)", "Next node", show=False),
    ]

    DEFAULT_CSS = """
    TreeCanvas {
        width: auto;
        height: auto;
        min-width: 100%;
        padding: 1 2;
    }
    TreeCanvas:focus {
        background: $boost;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self.highlighted: NodeId | None = None
        self._order: list[NodeId] = []

    def show(
        self,
        state: EditorState,
        positioned: dict[NodeId, PositionedNode],
        metrics: CellMetrics,
        level_height: float,
        styles: dict[str, str],
    ) -> None:
        """Redraw for a new state."""
        self._order = sorted(positioned, key=lambda n: (positioned[n].x, positioned[n].y))
        if self.highlighted not in positioned:
            self.highlighted = None
        self.update(
            render_canvas(
                state, positioned, metrics, level_height, styles, self.highlighted
            )
        )

    def step_highlight(self, delta: int) -> NodeId | None:
        """Move the highlight left (-1) or right (+1) through the nodes."""
        if not self._order:
            self.highlighted = None
        elif self.highlighted is None:
            self.highlighted = self._order[0 if delta > 0 else -1]
        else:
            index = self._order.index(self.highlighted) + delta
            self.highlighted = self._order[index % len(self._order)]
        return self.highlighted
