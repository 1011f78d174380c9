"""Undo/redo history for tree edits.

Each edit is a ``Command`` holding only the by-value state it needs to
reverse itself. ``History`` owns the two stacks; the tree is passed in on
every call and never retained.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

import tree_ops
from clipboard import Clipboard, paste_subtree
from errors import EmptyHistory, NodeNotFound
from node_models import Edge, Node, NodeType, Tree

logger = logging.getLogger(__name__)


class Command:
    """A reversible tree edit."""

    description = "edit"

    def execute(self, tree: Tree) -> Any:
        raise NotImplementedError

    def undo(self, tree: Tree) -> None:
        raise NotImplementedError


class AddNodeCommand(Command):
    def __init__(self, node_type: NodeType, label: str) -> None:
        self.node_type = node_type
        self.label = label
        self.node_id: Optional[str] = None
        self.description = f"add {label!r}"

    def execute(self, tree: Tree) -> str:
        if self.node_id is None:
            self.node_id = tree_ops.add_node(tree, self.node_type, self.label)
        else:
            tree.nodes[self.node_id] = Node(self.node_id, self.node_type, self.label)
        return self.node_id

    def undo(self, tree: Tree) -> None:
        tree_ops.remove_node(tree, self.node_id)


class RemoveNodeCommand(Command):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        self.removed_node: Optional[Node] = None
        self.removed_edges: List[Edge] = []
        self._positions: List[int] = []
        self.was_root = False
        self.description = f"remove {node_id}"

    def execute(self, tree: Tree) -> None:
        node = tree.get_node(self.node_id)
        if node is None:
            raise NodeNotFound(self.node_id)
        self.removed_node = replace(node)
        self.was_root = tree.root_id == self.node_id
        # Remember positions so undo puts every edge back where it was.
        touching = [
            (index, edge)
            for index, edge in enumerate(tree.edges)
            if self.node_id in (edge.from_id, edge.to_id)
        ]
        self._positions = [index for index, _ in touching]
        self.removed_edges = [edge for _, edge in touching]
        tree_ops.remove_node(tree, self.node_id)

    def undo(self, tree: Tree) -> None:
        tree.nodes[self.node_id] = replace(self.removed_node)
        for index, edge in zip(self._positions, self.removed_edges):
            tree.edges.insert(index, edge)
        if self.was_root:
            tree.root_id = self.node_id


class ConnectCommand(Command):
    def __init__(self, from_id: str, to_id: str, label: str = "") -> None:
        self.from_id = from_id
        self.to_id = to_id
        self.label = label
        self.description = f"connect {from_id} -> {to_id}"

    def execute(self, tree: Tree) -> None:
        tree_ops.connect_nodes(tree, self.from_id, self.to_id, self.label)

    def undo(self, tree: Tree) -> None:
        tree_ops.disconnect_nodes(tree, self.from_id, self.to_id)


class DisconnectCommand(Command):
    def __init__(self, from_id: str, to_id: str) -> None:
        self.from_id = from_id
        self.to_id = to_id
        self.removed: Optional[Edge] = None
        self.position = 0
        self.description = f"disconnect {from_id} -> {to_id}"

    def execute(self, tree: Tree) -> None:
        for index, edge in enumerate(tree.edges):
            if edge.from_id == self.from_id and edge.to_id == self.to_id:
                self.position = index
                break
        self.removed = tree_ops.disconnect_nodes(tree, self.from_id, self.to_id)

    def undo(self, tree: Tree) -> None:
        tree.edges.insert(self.position, self.removed)


class EditLabelCommand(Command):
    def __init__(self, node_id: str, label: str) -> None:
        self.node_id = node_id
        self.new_label = label
        self.old_label = ""
        self.description = f"relabel {node_id}"

    def execute(self, tree: Tree) -> None:
        node = tree.get_node(self.node_id)
        if node is None:
            raise NodeNotFound(self.node_id)
        self.old_label = node.label
        tree_ops.edit_node_label(tree, self.node_id, self.new_label)

    def undo(self, tree: Tree) -> None:
        tree_ops.edit_node_label(tree, self.node_id, self.old_label)


class EditTypeCommand(Command):
    def __init__(self, node_id: str, node_type: NodeType) -> None:
        self.node_id = node_id
        self.new_type = node_type
        self.old_type = node_type
        self.description = f"retype {node_id}"

    def execute(self, tree: Tree) -> None:
        node = tree.get_node(self.node_id)
        if node is None:
            raise NodeNotFound(self.node_id)
        self.old_type = node.type
        tree_ops.edit_node_type(tree, self.node_id, self.new_type)

    def undo(self, tree: Tree) -> None:
        tree_ops.edit_node_type(tree, self.node_id, self.old_type)


class SetRootCommand(Command):
    def __init__(self, node_id: str) -> None:
        self.new_root = node_id
        self.old_root = ""
        self.description = f"set root {node_id}"

    def execute(self, tree: Tree) -> None:
        previous = tree.root_id
        tree_ops.set_root(tree, self.new_root)
        self.old_root = previous

    def undo(self, tree: Tree) -> None:
        # The previous root is restored verbatim, including "no root".
        tree.root_id = self.old_root


class PasteSubtreeCommand(Command):
    def __init__(self, clipboard: Clipboard) -> None:
        self.clipboard = clipboard
        self.id_map: Dict[str, str] = {}
        self.description = f"paste {len(clipboard.nodes)} nodes"

    def execute(self, tree: Tree) -> Dict[str, str]:
        self.id_map = paste_subtree(tree, self.clipboard, self.id_map)
        return dict(self.id_map)

    def undo(self, tree: Tree) -> None:
        # remove_node cascades, so pasted edges go with their nodes.
        for new_id in self.id_map.values():
            if new_id in tree.nodes:
                tree_ops.remove_node(tree, new_id)


class History:
    """Linear undo/redo stacks."""

    def __init__(self) -> None:
        self._undo_stack: List[Command] = []
        self._redo_stack: List[Command] = []

    @property
    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    @property
    def undo_description(self) -> str:
        if self._undo_stack:
            return self._undo_stack[-1].description
        return ""

    @property
    def redo_description(self) -> str:
        if self._redo_stack:
            return self._redo_stack[-1].description
        return ""

    def execute(self, tree: Tree, command: Command) -> Any:
        """Run ``command`` and record it; errors leave both stacks untouched."""
        result = command.execute(tree)
        self._undo_stack.append(command)
        self._redo_stack.clear()
        logger.debug("executed %s", command.description)
        return result

    def undo(self, tree: Tree) -> Command:
        if not self._undo_stack:
            raise EmptyHistory("undo")
        command = self._undo_stack[-1]
        command.undo(tree)
        self._undo_stack.pop()
        self._redo_stack.append(command)
        logger.debug("undid %s", command.description)
        return command

    def redo(self, tree: Tree) -> Command:
        if not self._redo_stack:
            raise EmptyHistory("redo")
        command = self._redo_stack[-1]
        command.execute(tree)
        self._redo_stack.pop()
        self._undo_stack.append(command)
        logger.debug("redid %s", command.description)
        return command

    def clear(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()
