"""Full-screen tree navigator running in raw mode on the alternate screen."""

from __future__ import annotations

import io
import logging
from typing import IO, Callable, Dict, List, Optional

from rich.console import Console
from rich.text import Text

from clipboard import copy_subtree
from errors import DecisionTreeError
from keys import ByteSource, read_key
from line_reader import EditStatus, LineEditor
from node_models import NODE_TYPE_NAMES, NodeType
from rawterm import FdByteSource, raw_mode, term_size, write_raw
from renderers import Row, flatten
from tree_history import (
    AddNodeCommand,
    ConnectCommand,
    DisconnectCommand,
    EditLabelCommand,
    EditTypeCommand,
    PasteSubtreeCommand,
    RemoveNodeCommand,
    SetRootCommand,
)
from tree_templates import TEMPLATES, describe_templates

logger = logging.getLogger(__name__)

ALT_SCREEN_ON = "\x1b[?1049h"
ALT_SCREEN_OFF = "\x1b[?1049l"
HOME = "\x1b[H"
CLEAR_EOL = "\x1b[K"

STATUS_BROWSE = (
    " ↑↓/jk Navigate  e Edit  t Type  r Root  d Delete  a Add  y Copy  p Paste"
    "  c Connect  D Detach  i Init  u Undo  ^R Redo  q Quit"
)
EMPTY_HINT = "(empty tree: press 'a' to add root, 'i' to init from a template)"


class Browser:
    """Cursor and viewport over the flattened rows of the session's tree.

    All edits go through ``session.history`` so they can be undone from the
    browser or later from the REPL.
    """

    def __init__(
        self,
        session,
        out: Optional[IO[str]] = None,
        source: Optional[ByteSource] = None,
        fd: Optional[int] = None,
    ) -> None:
        self.session = session
        self.out = out if out is not None else session.out
        self.fd = fd
        if source is None and fd is not None:
            source = FdByteSource(fd)
        self.source = source

        self.rows: List[Row] = []
        self.cursor = 0
        self.offset = 0
        self.height = 1
        self.width = 80
        self.message = ""
        self.connect_from = ""

        self._console = Console(
            file=io.StringIO(),
            force_terminal=True,
            color_system="standard",
            markup=False,
            highlight=False,
            emoji=False,
        )
        self._actions: Dict[str, Callable[[], None]] = {
            "k": self.move_up,
            "up": self.move_up,
            "j": self.move_down,
            "down": self.move_down,
            "e": self.op_edit_label,
            "t": self.op_cycle_type,
            "r": self.op_set_root,
            "d": self.op_delete,
            "a": self.op_add_child,
            "y": self.op_copy,
            "p": self.op_paste,
            "c": self.op_connect,
            "D": self.op_disconnect,
            "i": self.op_init,
            "u": self.op_undo,
            "ctrl+r": self.op_redo,
        }

    @property
    def tree(self):
        return self.session.tree

    # ==================== Main loop ====================

    def run(self) -> None:
        """Take over the terminal until the user quits; always restores it."""
        with raw_mode(self.fd):
            write_raw(self.out, ALT_SCREEN_ON)
            try:
                self.loop()
            finally:
                write_raw(self.out, ALT_SCREEN_OFF)

    def loop(self) -> None:
        self.refresh()
        self.render()
        while True:
            try:
                key = read_key(self.source)
            except EOFError:
                return
            if not self.handle_key(key):
                return
            self.render()

    def handle_key(self, key: str) -> bool:
        """Apply one key; returns False when the browser should exit."""
        if self.connect_from:
            if key in ("k", "up"):
                self.move_up()
            elif key in ("j", "down"):
                self.move_down()
            elif key == "enter":
                self.finish_connect()
            elif key in ("escape", "q"):
                self.connect_from = ""
                self.message = "Connect cancelled"
            return True

        if key in ("q", "escape"):
            return False
        action = self._actions.get(key)
        if action is not None:
            action()
        return True

    # ==================== Viewport ====================

    def refresh(self) -> None:
        self.rows = flatten(self.tree)
        if self.cursor >= len(self.rows):
            self.cursor = len(self.rows) - 1
        if self.cursor < 0:
            self.cursor = 0
        self.update_size()
        self.scroll_to_cursor()

    def update_size(self) -> None:
        rows, cols = term_size(self.fd)
        self.width = cols
        # Two lines are reserved for the message line and the status bar.
        self.height = max(rows - 2, 1)

    def scroll_to_cursor(self) -> None:
        if self.cursor < self.offset:
            self.offset = self.cursor
        if self.cursor >= self.offset + self.height:
            self.offset = self.cursor - self.height + 1

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
            self.scroll_to_cursor()

    def move_down(self) -> None:
        if self.cursor < len(self.rows) - 1:
            self.cursor += 1
            self.scroll_to_cursor()

    def selected_id(self) -> str:
        if 0 <= self.cursor < len(self.rows):
            return self.rows[self.cursor].node_id
        return ""

    # ==================== Drawing ====================

    def _ansi(self, text: Text) -> str:
        with self._console.capture() as capture:
            self._console.print(text, end="", soft_wrap=True)
        return capture.get()

    def _line(self, text: Text) -> str:
        return self._ansi(text) + CLEAR_EOL + "\r\n"

    def status_text(self) -> Text:
        if self.connect_from:
            status = f" Connect {self.connect_from} → ? | ↑↓ Navigate  Enter Confirm  Esc Cancel"
        else:
            status = STATUS_BROWSE
        text = Text(status, style="reverse")
        text.truncate(self.width, overflow="crop", pad=True)
        return text

    def render(self) -> None:
        self.update_size()
        self.scroll_to_cursor()
        parts = [HOME]
        if not self.rows:
            parts.append(self._line(Text(EMPTY_HINT)))
        else:
            end = min(self.offset + self.height, len(self.rows))
            for index in range(self.offset, end):
                row = self.rows[index]
                is_source = bool(self.connect_from) and row.node_id == self.connect_from
                marker = "+ " if is_source else ("> " if index == self.cursor else "  ")
                style = ""
                if index == self.cursor:
                    style = "reverse"
                elif is_source:
                    style = "yellow"
                parts.append(self._line(Text(marker + row.text, style=style)))
            for _ in range(end - self.offset, self.height):
                parts.append(self._line(Text("~")))

        if self.message:
            for line in self.message.split("\n"):
                parts.append(self._line(Text(line, style="yellow")))
            self.message = ""
        else:
            parts.append(CLEAR_EOL + "\r\n")
        parts.append(self._ansi(self.status_text()))
        write_raw(self.out, "".join(parts))

    def prompt(self, label: str) -> Optional[str]:
        """Edit a line on the message row; None when cancelled with Escape."""
        editor = LineEditor()
        while True:
            write_raw(self.out, f"\x1b[{self.height + 1};1H{CLEAR_EOL}{label}{editor.text}")
            try:
                key = read_key(self.source)
            except EOFError:
                return None
            if key == "escape":
                return None
            status = editor.feed(key)
            if status is EditStatus.SUBMIT:
                return editor.text
            if status is EditStatus.EOF:
                return None

    def _fail(self, exc: DecisionTreeError, prefix: str = "Error: ") -> None:
        logger.debug("browser operation failed: %s", exc)
        self.message = prefix + exc.message

    def _prompt_type(self, label: str) -> Optional[NodeType]:
        token = self.prompt(label)
        if not token:
            self.message = "Add cancelled"
            return None
        try:
            return NodeType.parse(token.strip())
        except DecisionTreeError as exc:
            self._fail(exc)
            return None

    # ==================== Operations ====================

    def op_edit_label(self) -> None:
        node = self.tree.get_node(self.selected_id())
        if node is None:
            return
        text = self.prompt(f"New label for {node.id} [{node.label}]: ")
        if not text:
            self.message = "Edit cancelled"
            return
        try:
            self.session.run(EditLabelCommand(node.id, text))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = f"Updated {node.id} label"
        self.refresh()

    def op_cycle_type(self) -> None:
        node = self.tree.get_node(self.selected_id())
        if node is None:
            return
        new_type = node.type.cycled()
        try:
            self.session.run(EditTypeCommand(node.id, new_type))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = f"{node.id} type → {new_type}"
        self.refresh()

    def op_set_root(self) -> None:
        node_id = self.selected_id()
        if not node_id:
            return
        try:
            self.session.run(SetRootCommand(node_id))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = f"Root set to {node_id}"
        self.refresh()

    def op_delete(self) -> None:
        node_id = self.selected_id()
        if not node_id:
            return
        try:
            self.session.run(RemoveNodeCommand(node_id))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = f"Deleted {node_id}"
        self.refresh()

    def op_add_child(self) -> None:
        if not self.rows:
            self.add_root()
            return
        parent_id = self.selected_id()
        if not parent_id:
            return
        node_type = self._prompt_type(f"Child type ({NODE_TYPE_NAMES.replace(', ', '/')}): ")
        if node_type is None:
            return
        label = self.prompt("Child label: ")
        if not label:
            self.message = "Add cancelled"
            return
        try:
            child_id = self.session.run(AddNodeCommand(node_type, label))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        edge_label = self.prompt("Edge label (Enter for none): ") or ""
        try:
            self.session.run(ConnectCommand(parent_id, child_id, edge_label))
        except DecisionTreeError as exc:
            self._fail(exc, "Error connecting: ")
            return
        self.message = f"Added {child_id} as child of {parent_id}"
        self.refresh()

    def add_root(self) -> None:
        node_type = self._prompt_type(f"Root type ({NODE_TYPE_NAMES.replace(', ', '/')}): ")
        if node_type is None:
            return
        label = self.prompt("Root label: ")
        if not label:
            self.message = "Add cancelled"
            return
        try:
            new_id = self.session.run(AddNodeCommand(node_type, label))
            self.session.run(SetRootCommand(new_id))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = f"Created root node {new_id}"
        self.refresh()

    def op_copy(self) -> None:
        node_id = self.selected_id()
        if not node_id:
            return
        try:
            clipboard = copy_subtree(self.tree, node_id)
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.session.clipboard = clipboard
        self.message = f"Copied subtree from {node_id} ({len(clipboard.nodes)} nodes)"

    def op_paste(self) -> None:
        parent_id = self.selected_id()
        if not parent_id:
            return
        clipboard = self.session.clipboard
        if clipboard is None:
            self.message = "Clipboard is empty"
            return
        try:
            id_map = self.session.run(PasteSubtreeCommand(clipboard))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        try:
            self.session.run(ConnectCommand(parent_id, id_map[clipboard.root]))
        except DecisionTreeError as exc:
            self._fail(exc, "Pasted but could not connect: ")
            self.refresh()
            return
        self.message = f"Pasted {len(id_map)} nodes under {parent_id}"
        self.refresh()

    def op_connect(self) -> None:
        node_id = self.selected_id()
        if node_id:
            self.connect_from = node_id

    def finish_connect(self) -> None:
        to_id = self.selected_id()
        from_id = self.connect_from
        self.connect_from = ""
        if not to_id:
            self.message = "Connect cancelled"
            return
        if from_id == to_id:
            self.message = "Cannot connect node to itself"
            return
        edge_label = self.prompt("Edge label (Enter for none): ") or ""
        try:
            self.session.run(ConnectCommand(from_id, to_id, edge_label))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = f"Connected {from_id} → {to_id}"
        self.refresh()

    def op_disconnect(self) -> None:
        node_id = self.selected_id()
        if not node_id:
            return
        parent = self.tree.parent(node_id)
        if parent is None:
            self.message = f"{node_id} has no parent edge"
            return
        try:
            self.session.run(DisconnectCommand(parent.from_id, node_id))
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = f"Disconnected {node_id} from {parent.from_id}"
        self.refresh()

    def op_init(self) -> None:
        if self.tree.nodes:
            self.message = "Init only works on an empty tree"
            return
        self.message = "\n".join(["Templates:"] + [f"  {line}" for line in describe_templates()])
        self.render()

        choice = self.prompt(f"Pick template (1-{len(TEMPLATES)}): ")
        if not choice:
            self.message = "Init cancelled"
            return
        try:
            index = int(choice.strip())
        except ValueError:
            index = 0
        if not 1 <= index <= len(TEMPLATES):
            self.message = "Invalid choice"
            return
        template = TEMPLATES[index - 1]
        self.session.replace_tree(template.build())
        self.message = f"Initialized from {template.name!r} ({len(self.tree.nodes)} nodes)"
        self.refresh()

    def op_undo(self) -> None:
        try:
            self.session.history.undo(self.tree)
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = "Undone"
        self.refresh()

    def op_redo(self) -> None:
        try:
            self.session.history.redo(self.tree)
        except DecisionTreeError as exc:
            self._fail(exc)
            return
        self.message = "Redone"
        self.refresh()
