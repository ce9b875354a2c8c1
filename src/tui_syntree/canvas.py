"""Render a positioned tree as styled terminal text."""

from __future__ import annotations

from rich.cells import cell_len
from rich.text import Text

from tui_syntree.metrics import CellMetrics
from tui_syntree.models import NodeId, PositionedNode
from tui_syntree.positioning import LEVEL_HEIGHT, tree_height
from tui_syntree.state import EditorState

ROWS_PER_LEVEL = 2
EMPTY_LABEL = "…"

# (up, down, left, right) → box drawing character
_BRANCH_CHARS: dict[tuple[bool, bool, bool, bool], str] = {
    (False, True, False, True): "┌",
    (False, True, True, False): "┐",
    (False, True, True, True): "┬",
    (True, False, True, True): "┴",
    (True, False, False, True): "└",
    (True, False, True, False): "┘",
    (True, True, True, True): "┼",
    (True, True, False, True): "├",
    (True, True, True, False): "┤",
    (True, True, False, False): "│",
    (False, False, True, True): "─",
    (False, True, False, False): "╷",
    (True, False, False, False): "╵",
}


class _Grid:
    """Fixed-size character grid with a style per cell."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.chars = [[" "] * width for _ in range(height)]
        self.styles = [[""] * width for _ in range(height)]

    def put(self, row: int, col: int, text: str, style: str = "") -> None:
        if not 0 <= row < self.height:
            return
        for ch in text:
            size = cell_len(ch)
            if 0 <= col and col + size <= self.width:
                self.chars[row][col] = ch
                self.styles[row][col] = style
                if size == 2:
                    self.chars[row][col + 1] = ""
            col += size

    def to_text(self) -> Text:
        text = Text()
        for index, (chars, styles) in enumerate(zip(self.chars, self.styles)):
            end = len(chars)
            while end and chars[end - 1] == " " and not styles[end - 1]:
                end -= 1
            for ch, style in zip(chars[:end], styles[:end]):
                if ch:
                    text.append(ch, style=style or None)
            if index < self.height - 1:
                text.append("\n")
        return text


def _node_style(
    state: EditorState, node_id: NodeId, styles: dict[str, str], highlighted: NodeId | None
) -> str:
    if node_id == state.editing_node:
        style = styles.get("editing", "")
    elif node_id == state.adopting_node:
        style = styles.get("adopting", "")
    elif node_id == state.disowning_node:
        style = styles.get("disowning", "")
    elif state.selected_nodes and node_id in state.selected_nodes:
        style = styles.get("selected", "")
    elif state.unselectable_nodes and node_id in state.unselectable_nodes:
        style = styles.get("unselectable", "")
    else:
        style = styles.get("label", "")
    if node_id == highlighted:
        style = f"{style} {styles.get('highlight', '')}".strip()
    return style


def render_canvas(
    state: EditorState,
    positioned: dict[NodeId, PositionedNode],
    metrics: CellMetrics,
    level_height: float = LEVEL_HEIGHT,
    styles: dict[str, str] | None = None,
    highlighted: NodeId | None = None,
) -> Text:
    """Draw labels, branches and the sentence into a Text block.

    Pixel X maps to cell columns through the metrics' cell width; each tree
    level takes two rows (label and branch). The sentence is the last row.
    """
    styles = styles or {}
    height_px = max(tree_height(positioned), 0)
    baseline = int(round(height_px / level_height * ROWS_PER_LEVEL))

    def row_of(y: float) -> int:
        row = int(round((height_px + y) / level_height * ROWS_PER_LEVEL))
        return max(0, min(row, baseline - 1))

    placed = {
        node_id: (row_of(p.y), metrics.to_cells(p.x))
        for node_id, p in positioned.items()
    }
    width = cell_len(state.sentence)
    for node_id, (_, col) in placed.items():
        label = positioned[node_id].label or EMPTY_LABEL
        width = max(width, col + cell_len(label))
    grid = _Grid(width + 1, baseline + 1)
    branch = styles.get("branch", "")

    for node_id, p in positioned.items():
        row, col = placed[node_id]
        children = [c for c in p.node.children or () if c in placed]
        if children:
            _draw_branches(grid, row, col, [placed[c] for c in children], branch)
        elif p.slice_x_span is not None:
            start, end = (metrics.to_cells(x) for x in p.slice_x_span)
            if p.node.triangle and end - start > 1:
                grid.put(row + 1, start, "/", branch)
                grid.put(row + 1, end - 1, "\\", branch)
            else:
                for r in range(row + 1, baseline):
                    grid.put(r, col, "│", branch)

    grid.put(baseline, 0, state.sentence, styles.get("sentence", ""))
    if state.selected_range is not None:
        start, end = state.selected_range
        selected_text = state.sentence[start:end]
        grid.put(baseline, cell_len(state.sentence[:start]), selected_text,
                 styles.get("selected", ""))

    for node_id, p in positioned.items():
        row, col = placed[node_id]
        label = p.label or EMPTY_LABEL
        grid.put(row, col - cell_len(label) // 2, label,
                 _node_style(state, node_id, styles, highlighted))
    return grid.to_text()


def _draw_branches(
    grid: _Grid, row: int, col: int, children: list[tuple[int, int]], style: str
) -> None:
    """Connect a parent at (row, col) to its children's label cells."""
    bar_row = row + 1
    child_cols = {c for _, c in children}
    lo = min(child_cols | {col})
    hi = max(child_cols | {col})
    for c in range(lo, hi + 1):
        key = (c == col, c in child_cols, c > lo, c < hi)
        ch = _BRANCH_CHARS.get(key)
        if ch:
            grid.put(bar_row, c, ch, style)
    for child_row, child_col in children:
        for r in range(bar_row + 1, child_row):
            grid.put(r, child_col, "│", style)
