"""Command-line session: one tree, its history, and the REPL commands."""

from __future__ import annotations

import logging
import sys
from typing import IO, Any, Callable, Optional

from rich.console import Console
from rich.text import Text

import json_io
import tree_ops
from clipboard import Clipboard, copy_subtree
from cmd_parser import ParsedCommand, parse
from errors import DecisionTreeError, TerminalUnavailable
from line_reader import DEFAULT_HISTORY_SIZE, LineReader
from node_models import NODE_TYPE_NAMES, NodeType, Tree
from rawterm import stream_fd
from renderers import RENDERERS, render_preview
from tree_history import (
    AddNodeCommand,
    Command,
    ConnectCommand,
    DisconnectCommand,
    EditLabelCommand,
    EditTypeCommand,
    History,
    PasteSubtreeCommand,
    RemoveNodeCommand,
    SetRootCommand,
)
from tree_templates import TEMPLATES, describe_templates, find_template

logger = logging.getLogger(__name__)

BANNER = "Decision Tree CLI (type 'help' for commands)"
PROMPT = "> "

HELP_ROWS = [
    ("add <type> <label>", f"Add a node (types: {NODE_TYPE_NAMES})"),
    ("connect <from> <to> [label]", "Connect two nodes with an optional edge label"),
    ("disconnect <from> <to>", "Remove edge between two nodes"),
    ("remove <node-id>", "Remove a node and its edges"),
    ("edit <id> label <text>", "Edit a node's label"),
    ("edit <id> type <type>", "Edit a node's type"),
    ("set-root <node-id>", "Set the root node"),
    ("list", "List all nodes"),
    ("preview", "Show ASCII tree preview"),
    ("browse", "Interactive tree browser"),
    ("render <dot|mermaid>", "Render as DOT or Mermaid diagram"),
    ("copy <node-id>", "Copy a subtree to clipboard"),
    ("paste", "Paste clipboard contents"),
    ("save <filename>", "Save tree to JSON file"),
    ("load <filename>", "Load tree from JSON file"),
    ("init [template]", "Start an empty tree from a template"),
    ("undo", "Undo last action"),
    ("redo", "Redo last undone action"),
    ("help", "Show this help"),
    ("quit", "Exit the program"),
]


class Session:
    """Owns the tree, undo history and clipboard for one editing session."""

    def __init__(
        self,
        out: Optional[IO[str]] = None,
        in_stream: Optional[IO] = None,
    ) -> None:
        self.tree = Tree("untitled")
        self.history = History()
        self.clipboard: Optional[Clipboard] = None
        self.in_stream = in_stream
        self.out = out if out is not None else sys.stdout
        self.console = Console(
            file=self.out,
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )
        self._handlers: dict[str, Callable[[list[str]], None]] = {
            "add": self.cmd_add,
            "connect": self.cmd_connect,
            "disconnect": self.cmd_disconnect,
            "remove": self.cmd_remove,
            "edit": self.cmd_edit,
            "set-root": self.cmd_set_root,
            "list": self.cmd_list,
            "preview": self.cmd_preview,
            "render": self.cmd_render,
            "copy": self.cmd_copy,
            "paste": self.cmd_paste,
            "save": self.cmd_save,
            "load": self.cmd_load,
            "init": self.cmd_init,
            "browse": self.cmd_browse,
            "undo": self.cmd_undo,
            "redo": self.cmd_redo,
            "help": self.cmd_help,
        }

    # ==================== Shared helpers ====================

    def run(self, command: Command) -> Any:
        return self.history.execute(self.tree, command)

    def replace_tree(self, tree: Tree) -> None:
        self.tree = tree
        self.history = History()
        self.clipboard = None

    def say(self, message: str) -> None:
        self.console.print(message)

    def ok(self, message: str) -> None:
        self.console.print(Text(message, style="green"))

    def error(self, message: str) -> None:
        self.console.print(Text.assemble(("Error: ", "bold red"), message))

    def usage(self, *lines: str) -> None:
        for line in lines:
            self.console.print(Text(line, style="yellow"))

    def execute(self, command: ParsedCommand) -> bool:
        """Dispatch one parsed command; returns False when the session should end."""
        if not command.name:
            return True
        if command.name in ("quit", "exit"):
            return False
        handler = self._handlers.get(command.name)
        if handler is None:
            self.say(f"Unknown command: {command.name} (type 'help' for commands)")
            return True
        try:
            handler(command.args)
        except DecisionTreeError as exc:
            logger.debug("%s failed: %s", command.name, exc)
            self.error(exc.message)
        return True

    # ==================== Commands ====================

    def cmd_add(self, args: list[str]) -> None:
        if len(args) < 2:
            self.usage("Usage: add <type> <label>", f"Types: {NODE_TYPE_NAMES}")
            return
        node_type = NodeType.parse(args[0])
        node_id = self.run(AddNodeCommand(node_type, " ".join(args[1:])))
        self.ok(f"Added node {node_id}")

    def cmd_connect(self, args: list[str]) -> None:
        if len(args) < 2:
            self.usage("Usage: connect <from> <to> [label]")
            return
        self.run(ConnectCommand(args[0], args[1], " ".join(args[2:])))
        self.ok(f"Connected {args[0]} -> {args[1]}")

    def cmd_disconnect(self, args: list[str]) -> None:
        if len(args) < 2:
            self.usage("Usage: disconnect <from> <to>")
            return
        self.run(DisconnectCommand(args[0], args[1]))
        self.ok(f"Disconnected {args[0]} -> {args[1]}")

    def cmd_remove(self, args: list[str]) -> None:
        if not args:
            self.usage("Usage: remove <node-id>")
            return
        self.run(RemoveNodeCommand(args[0]))
        self.ok(f"Removed node {args[0]}")

    def cmd_edit(self, args: list[str]) -> None:
        if len(args) < 3:
            self.usage("Usage: edit <node-id> label <new-label>", "       edit <node-id> type <new-type>")
            return
        node_id, field, value = args[0], args[1].lower(), " ".join(args[2:])
        if field == "label":
            self.run(EditLabelCommand(node_id, value))
            self.ok(f"Updated {node_id} label")
        elif field == "type":
            self.run(EditTypeCommand(node_id, NodeType.parse(value)))
            self.ok(f"Updated {node_id} type")
        else:
            self.say(f"Unknown field {field!r} (use 'label' or 'type')")

    def cmd_set_root(self, args: list[str]) -> None:
        if not args:
            self.usage("Usage: set-root <node-id>")
            return
        self.run(SetRootCommand(args[0]))
        self.ok(f"Root set to {args[0]}")

    def cmd_list(self, args: list[str]) -> None:
        lines = tree_ops.list_nodes(self.tree)
        if not lines:
            self.say("(no nodes)")
            return
        for line in lines:
            self.say(line)

    def cmd_preview(self, args: list[str]) -> None:
        self.say(render_preview(self.tree))

    def cmd_render(self, args: list[str]) -> None:
        if not args:
            self.usage("Usage: render <dot|mermaid>")
            return
        renderer = RENDERERS.get(args[0].lower())
        if renderer is None:
            self.say(f"Unknown format: {args[0]} (use 'dot' or 'mermaid')")
            return
        self.console.print(renderer(self.tree), end="")

    def cmd_copy(self, args: list[str]) -> None:
        if not args:
            self.usage("Usage: copy <node-id>")
            return
        self.clipboard = copy_subtree(self.tree, args[0])
        self.ok(f"Copied subtree from {args[0]} ({len(self.clipboard.nodes)} nodes)")

    def cmd_paste(self, args: list[str]) -> None:
        if self.clipboard is None:
            self.say("Clipboard is empty")
            return
        id_map = self.run(PasteSubtreeCommand(self.clipboard))
        root = self.clipboard.root
        self.ok(f"Pasted {len(id_map)} nodes (root: {root} -> {id_map[root]})")

    def cmd_save(self, args: list[str]) -> None:
        if not args:
            self.usage("Usage: save <filename>")
            return
        try:
            json_io.save(self.tree, args[0])
        except OSError as exc:
            self.error(f"write: {exc}")
            return
        self.ok(f"Saved to {args[0]}")

    def cmd_load(self, args: list[str]) -> None:
        if not args:
            self.usage("Usage: load <filename>")
            return
        try:
            loaded = json_io.load(args[0])
        except (OSError, ValueError) as exc:
            self.error(str(exc))
            return
        self.replace_tree(loaded)
        self.ok(f"Loaded {loaded.name!r} ({len(loaded.nodes)} nodes)")

    def cmd_init(self, args: list[str]) -> None:
        if not args:
            self.say("Templates:")
            for line in describe_templates():
                self.say(f"  {line}")
            return
        if self.tree.nodes:
            self.error("init only works on an empty tree")
            return
        template = find_template(args[0])
        if template is None:
            names = ", ".join(item.name for item in TEMPLATES)
            self.error(f"unknown template {args[0]!r} (available: {names})")
            return
        self.replace_tree(template.build())
        self.ok(f"Initialized from {template.name!r} ({len(self.tree.nodes)} nodes)")

    def cmd_browse(self, args: list[str]) -> None:
        # Imported here to keep the browser out of pipe-only sessions.
        from browser import Browser

        if self.in_stream is None:
            self.error("browse requires an interactive terminal")
            return
        try:
            Browser(self, self.out, fd=stream_fd(self.in_stream)).run()
        except TerminalUnavailable as exc:
            self.error(f"browse requires a terminal: {exc.reason}")

    def cmd_undo(self, args: list[str]) -> None:
        command = self.history.undo(self.tree)
        self.ok(f"Undone ({command.description})")

    def cmd_redo(self, args: list[str]) -> None:
        command = self.history.redo(self.tree)
        self.ok(f"Redone ({command.description})")

    def cmd_help(self, args: list[str]) -> None:
        self.say("Commands:")
        width = max(len(usage) for usage, _ in HELP_ROWS) + 2
        for usage, description in HELP_ROWS:
            self.say(f"  {usage.ljust(width)}{description}")


def run_repl(
    in_stream: Optional[IO] = None,
    out_stream: Optional[IO[str]] = None,
    *,
    session: Optional[Session] = None,
    history_size: int = DEFAULT_HISTORY_SIZE,
) -> Session:
    """Read commands until quit or end of input."""
    in_stream = in_stream if in_stream is not None else sys.stdin
    out_stream = out_stream if out_stream is not None else sys.stdout
    session = session or Session(out_stream, in_stream)
    reader = LineReader(in_stream, out_stream, history_size=history_size)
    session.say(BANNER)
    while True:
        try:
            line = reader.read_line(PROMPT)
        except EOFError:
            session.say("")
            break
        except DecisionTreeError as exc:
            logger.warning("input failed: %s", exc)
            session.error(exc.message)
            break
        if not session.execute(parse(line)):
            session.say("Goodbye!")
            break
    return session
