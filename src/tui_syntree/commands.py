"""Command Palette provider for TUI Syntree."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial

from textual.command import DiscoveryHit, Hit, Hits, Provider


@dataclass(frozen=True)
class CommandDef:
    """A palette entry bound to an app action."""

    display: str
    action: str
    help: str = ""
    category: str = ""
    keywords: tuple[str, ...] = ()

    @property
    def search_text(self) -> str:
        return " ".join((self.display, self.category, *self.keywords))


COMMANDS: list[CommandDef] = [
    # -- Tree --
    CommandDef("New Node", "add_node", "Create a node from the selection (Ctrl+N)",
               "Tree", ("add", "create", "parent")),
    CommandDef("Edit Label", "toggle_edit", "Edit the selected node's label (e)",
               "Tree", ("rename", "category")),
    CommandDef("Delete Nodes", "delete_nodes", "Delete the selected nodes (Del)",
               "Tree", ("remove",)),
    CommandDef("Adopt", "toggle_adopt", "Attach nodes or text to the selected node (a)",
               "Tree", ("attach", "children")),
    CommandDef("Disown", "toggle_disown", "Detach children from the selected node (d)",
               "Tree", ("detach", "children")),
    CommandDef("Toggle Triangle", "toggle_triangle",
               "Draw selected terminals as triangles (t)", "Tree", ("roof",)),
    CommandDef("Reset Position", "reset_positions",
               "Undo manual moves of selected nodes (r)", "Tree", ("offset",)),
    # -- History --
    CommandDef("Undo", "undo", "Undo last change (Ctrl+Z)", "History", ("revert",)),
    CommandDef("Redo", "redo", "Redo last change (Ctrl+Y)", "History"),
    # -- Selection --
    CommandDef("Clear Selection", "clear_selection",
               "Clear selection / leave mode (Esc)", "Selection", ("cancel",)),
    CommandDef("Focus Sentence", "focus_sentence", "Edit the sentence (s)",
               "Selection", ("text", "type")),
    CommandDef("Focus Tree", "focus_tree", "Navigate the tree", "Selection"),
    # -- App --
    CommandDef("Help", "help", "Show keybindings (?)", "App", ("keys",)),
    CommandDef("Quit", "quit", "Quit application (Ctrl+Q)", "App", ("exit",)),
]

# Matches on category or keywords rank below matches on the name.
_SECONDARY_WEIGHT = 0.6


class SyntreeCommandProvider(Provider):
    """Offers the editor's actions in the command palette."""

    async def discover(self) -> Hits:
        for cmd in COMMANDS:
            yield DiscoveryHit(
                cmd.display,
                partial(self.app.run_action, cmd.action),
                help=cmd.help,
            )

    async def search(self, query: str) -> Hits:
        matcher = self.matcher(query)
        for cmd in COMMANDS:
            score = max(
                matcher.match(cmd.display),
                matcher.match(cmd.search_text) * _SECONDARY_WEIGHT,
            )
            if score > 0:
                yield Hit(
                    score,
                    matcher.highlight(cmd.display),
                    partial(self.app.run_action, cmd.action),
                    text=cmd.display,
                    help=cmd.help,
                )
