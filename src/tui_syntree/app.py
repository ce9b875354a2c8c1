"""Main Textual App for TUI Syntree."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Footer, Header, Input, Static

from tui_syntree import intents
from tui_syntree.commands import SyntreeCommandProvider
from tui_syntree.config import load_config, load_settings
from tui_syntree.editor import apply, initial_state, selected
from tui_syntree.metrics import CellMetrics
from tui_syntree.positioning import PositionCache, compute_positions
from tui_syntree.screens.help_screen import HelpScreen
from tui_syntree.state import EditorContext, EditorState, ModeKind
from tui_syntree.widgets.tree_canvas import TreeCanvas

logger = logging.getLogger(__name__)

_MODE_HINTS = {
    ModeKind.EDITING: "Editing label (Enter to finish)",
    ModeKind.ADOPTING: "Adopting: pick nodes or text to attach (Esc to cancel)",
    ModeKind.DISOWNING: "Disowning: pick children to detach (Esc to cancel)",
}


class SyntreeApp(App):
    """TUI Syntree Application."""

    TITLE = "TUI Syntree"
    CSS = """
    #sentence {
        margin: 0 1;
    }
    #canvas-area {
        height: 1fr;
        border: round $surface-lighten-2;
    }
    #canvas-area:focus-within {
        border: round $accent;
    }
    #label {
        margin: 0 1;
        display: none;
    }
    #status-bar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    """

    COMMANDS = App.COMMANDS | {SyntreeCommandProvider}

    BINDINGS = [
        Binding("ctrl+n", "add_node", "New node", priority=True),
        Binding("ctrl+z", "undo", "Undo", priority=True),
        Binding("ctrl+y", "redo", "Redo", priority=True),
        Binding("question_mark", "help", "Help"),
        Binding("escape", "clear_selection", "Clear", show=False),
        Binding("s", "focus_sentence", "Sentence", show=False),
        # Node selection
        Binding("space", "select_highlighted", "Select", show=False),
        Binding("x", "toggle_highlighted", "Multi-select", show=False),
        # Node edits
        Binding("e", "toggle_edit", "Edit label"),
        Binding("delete", "delete_nodes", "Delete"),
        Binding("a", "toggle_adopt", "Adopt"),
        Binding("d", "toggle_disown", "Disown"),
        Binding("t", "toggle_triangle", "Triangle", show=False),
        Binding("r", "reset_positions", "Reset position", show=False),
        Binding("shift+left", "move(-1, 0)", show=False),
        Binding("shift+right", "move(1, 0)", show=False),
        Binding("shift+up", "move(0, -1)", show=False),
        Binding("shift+down", "move(0, 1)", show=False),
    ]

    def __init__(
        self,
        project_dir: Path,
        sentence: str | None = None,
        demo_mode: bool = False,
        no_color: bool = False,
        context: EditorContext | None = None,
    ) -> None:
        if no_color:
            os.environ["NO_COLOR"] = "1"
        super().__init__()
        self.project_dir = project_dir
        self.demo_mode = demo_mode
        self.config = load_config(project_dir)
        self.settings = load_settings(project_dir)
        if demo_mode:
            from tui_syntree.demo_data import get_demo_state

            self.state: EditorState = get_demo_state()
        else:
            self.state = initial_state(
                sentence if sentence is not None else self.config.sentence
            )
        self.metrics = CellMetrics(self.config.char_width)
        self._editor_context = context or EditorContext(
            coalesce_window=self.config.coalesce_window_ms / 1000
        )
        self._cache = PositionCache()

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(
            value=self.state.sentence,
            placeholder="Type a sentence...",
            id="sentence",
        )
        with ScrollableContainer(id="canvas-area"):
            yield TreeCanvas(id="canvas")
        yield Input(placeholder="Label", id="label")
        yield Static("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        logger.debug("Editor opened in %s (demo=%s)", self.project_dir, self.demo_mode)
        self._refresh_ui()
        self.query_one(TreeCanvas).focus()

    # ── State ──

    def send_intent(self, intent: intents.Intent) -> EditorState:
        """Apply an intent to the editor state and redraw if it changed."""
        previous = self.state
        self.state = apply(self.state, intent, self._editor_context)
        if self.state is not previous:
            self._refresh_ui()
        return self.state

    def _refresh_ui(self) -> None:
        state = self.state
        positioned = compute_positions(
            state.nodes, state.sentence, self.metrics, self._cache,
            self.config.level_height,
        )
        self.query_one(TreeCanvas).show(
            state, positioned, self.metrics, self.config.level_height,
            self.settings.get("styles", {}),
        )

        sentence_input = self.query_one("#sentence", Input)
        if sentence_input.value != state.sentence:
            sentence_input.value = state.sentence

        label_input = self.query_one("#label", Input)
        editing = state.nodes.get(state.editing_node) if state.editing_node else None
        if editing is not None:
            if label_input.value != editing.label:
                label_input.value = editing.label
            if not label_input.display:
                label_input.display = True
                label_input.focus()
        elif label_input.display:
            was_focused = label_input.has_focus
            label_input.display = False
            if was_focused:
                self.query_one(TreeCanvas).focus()

        self._update_status_bar()
        self._update_title()

    def _update_status_bar(self) -> None:
        state = self.state
        parts: list[str] = []
        if self.demo_mode:
            parts.append("[bold]DEMO[/bold]")
        hint = _MODE_HINTS.get(state.mode.kind)
        if hint:
            parts.append(hint)
        if state.selected_nodes:
            parts.append(f"{len(state.selected_nodes)} selected")
        elif state.selected_range is not None:
            start, end = state.selected_range
            parts.append(f"Text {start}-{end}")
        parts.append(f"{len(state.nodes)} nodes")
        self.query_one("#status-bar", Static).update(" | ".join(parts))

    def _update_title(self) -> None:
        demo = " [DEMO]" if self.demo_mode else ""
        self.title = f"TUI Syntree - {self.project_dir.name}{demo}"

    # ── Input events ──

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "sentence":
            if event.value == self.state.sentence:
                return
            if not (self.state.adopting_node or self.state.disowning_node):
                # Cursor before the edit, so slices follow the typed text.
                diff = len(event.value) - len(self.state.sentence)
                position = max(0, event.input.cursor_position - diff)
                self.send_intent(intents.SelectText(position, position))
            self.send_intent(intents.SetSentence(event.value))
        elif event.input.id == "label" and self.state.editing_node:
            self.send_intent(intents.SetLabel(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "label" and self.state.editing_node:
            self.send_intent(intents.ToggleEditMode())
        self.query_one(TreeCanvas).focus()

    # ── Actions ──

    def action_add_node(self) -> None:
        sentence_input = self.query_one("#sentence", Input)
        if sentence_input.has_focus:
            start, end = sorted(sentence_input.selection)
            self.send_intent(intents.SelectText(start, end))
        self.send_intent(intents.AddNode())

    def action_toggle_edit(self) -> None:
        self.send_intent(intents.ToggleEditMode())

    def action_delete_nodes(self) -> None:
        self.send_intent(intents.DeleteNodes())

    def action_toggle_adopt(self) -> None:
        self.send_intent(intents.ToggleAdoptMode())

    def action_toggle_disown(self) -> None:
        self.send_intent(intents.ToggleDisownMode())

    def action_toggle_triangle(self) -> None:
        nodes = selected(self.state)
        if nodes:
            value = not all(node.triangle for node in nodes)
            self.send_intent(intents.ToggleTriangle(value))

    def action_reset_positions(self) -> None:
        self.send_intent(intents.ResetNodePositions())

    def action_move(self, dx: int, dy: int) -> None:
        step = self.settings.get("move_step", {})
        self.send_intent(
            intents.MoveNodes(dx * step.get("x", 8), dy * step.get("y", 10))
        )

    def action_undo(self) -> None:
        if not self.state.can_undo:
            self.notify("Nothing to undo", severity="warning")
            return
        self.send_intent(intents.Undo())

    def action_redo(self) -> None:
        if not self.state.can_redo:
            self.notify("Nothing to redo", severity="warning")
            return
        self.send_intent(intents.Redo())

    def action_clear_selection(self) -> None:
        if self.state.adopting_node:
            self.send_intent(intents.ToggleAdoptMode())
        elif self.state.disowning_node:
            self.send_intent(intents.ToggleDisownMode())
        else:
            self.send_intent(intents.ClearSelection())

    def action_highlight(self, delta: int) -> None:
        canvas = self.query_one(TreeCanvas)
        canvas.step_highlight(delta)
        self._refresh_ui()

    def _select_highlighted(self, multi: bool) -> None:
        node_id = self.query_one(TreeCanvas).highlighted
        if node_id is not None:
            self.send_intent(intents.SelectNodes((node_id,), multi))

    def action_select_highlighted(self) -> None:
        self._select_highlighted(multi=False)

    def action_toggle_highlighted(self) -> None:
        self._select_highlighted(multi=True)

    def action_focus_sentence(self) -> None:
        self.query_one("#sentence", Input).focus()

    def action_focus_tree(self) -> None:
        self.query_one(TreeCanvas).focus()

    def action_help(self) -> None:
        self.push_screen(HelpScreen(), callback=self._on_help_action)

    def _on_help_action(self, action: str | None) -> None:
        if action:
            self.call_later(self.run_action, action)
