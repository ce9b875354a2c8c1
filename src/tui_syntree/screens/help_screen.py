"""Keybinding reference shown as a modal."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, OptionList
from textual.widgets.option_list import Option

# Sections of (keys, what they do, action to run on Enter or "").
HELP_SECTIONS: dict[str, list[tuple[str, str, str]]] = {
    "Sentence": [
        ("s", "Edit the sentence", "focus_sentence"),
        ("Tab", "Switch between sentence and tree", ""),
        ("Ctrl+N", "New node from cursor, text range or selected nodes", "add_node"),
    ],
    "Tree": [
        ("← / →", "Highlight previous / next node", ""),
        ("Space", "Select the highlighted node", ""),
        ("x", "Add or remove the highlighted node", ""),
        ("e", "Edit label (Enter to finish)", "toggle_edit"),
        ("Del", "Delete selected nodes", "delete_nodes"),
        ("a", "Adopt: pick nodes or text to attach", "toggle_adopt"),
        ("d", "Disown: pick children to detach", "toggle_disown"),
        ("t", "Toggle triangle notation", "toggle_triangle"),
        ("Shift+Arrows", "Move selected nodes", ""),
        ("r", "Reset position of selected nodes", "reset_positions"),
        ("Esc", "Clear selection / leave mode", "clear_selection"),
    ],
    "History": [
        ("Ctrl+Z", "Undo", "undo"),
        ("Ctrl+Y", "Redo", "redo"),
    ],
}

HELP_ITEMS: list[tuple[str, str, str]] = [
    item for items in HELP_SECTIONS.values() for item in items
]


def _row(keys: str, description: str) -> Text:
    return Text.assemble((f"{keys:>14}", "bold"), "  ", description)


class HelpScreen(ModalScreen[str]):
    """Lists the keybindings; Enter on a row runs its action."""

    BINDINGS = [
        ("escape", "dismiss('')", "Close"),
        ("question_mark", "dismiss('')", "Close"),
    ]

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }
    HelpScreen > Vertical {
        width: 76;
        height: auto;
        max-height: 85%;
        border: round $accent;
        background: $panel;
        padding: 0 1;
    }
    HelpScreen Label {
        width: 100%;
        content-align: center middle;
        color: $text-muted;
    }
    HelpScreen OptionList {
        height: auto;
        border: none;
    }
    """

    def compose(self) -> ComposeResult:
        options: list[Option] = []
        for section, items in HELP_SECTIONS.items():
            options.append(Option(Text(section, style="bold underline"), disabled=True))
            for keys, description, action in items:
                options.append(Option(_row(keys, description), id=action or None))
        with Vertical():
            yield Label("Keybindings - Enter runs the highlighted command")
            yield OptionList(*options)

    def on_mount(self) -> None:
        self.query_one(OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id or "")
