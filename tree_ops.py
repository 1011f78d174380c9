"""Structural edits on a ``Tree``.

Every function either fully applies its change or raises a
``DecisionTreeError`` subclass before touching the tree.
"""

import logging
from typing import List

from errors import CycleRejected, DuplicateEdge, NodeNotFound, NoSuchEdge, ParentConflict
from node_models import Edge, Node, NodeType, Tree

logger = logging.getLogger(__name__)


def _require_node(tree: Tree, node_id: str, role: str = "node") -> Node:
    node = tree.get_node(node_id)
    if node is None:
        raise NodeNotFound(node_id, role)
    return node


def add_node(tree: Tree, node_type: NodeType, label: str) -> str:
    node_id = tree.next_id()
    tree.nodes[node_id] = Node(id=node_id, type=node_type, label=label)
    logger.debug("added %s [%s] %r", node_id, node_type, label)
    return node_id


def remove_node(tree: Tree, node_id: str) -> None:
    _require_node(tree, node_id)
    tree.edges = [edge for edge in tree.edges if node_id not in (edge.from_id, edge.to_id)]
    del tree.nodes[node_id]
    if tree.root_id == node_id:
        tree.root_id = ""
    logger.debug("removed %s", node_id)


def would_create_cycle(tree: Tree, from_id: str, to_id: str) -> bool:
    return from_id == to_id or to_id in tree.ancestors(from_id)


def connect_nodes(tree: Tree, from_id: str, to_id: str, label: str = "") -> None:
    _require_node(tree, from_id, "source node")
    _require_node(tree, to_id, "target node")
    if tree.has_edge(from_id, to_id):
        raise DuplicateEdge(from_id, to_id)
    parent = tree.parent(to_id)
    if parent is not None:
        raise ParentConflict(to_id, parent.from_id)
    if would_create_cycle(tree, from_id, to_id):
        raise CycleRejected(from_id, to_id)
    tree.edges.append(Edge(from_id, to_id, label))
    logger.debug("connected %s -> %s %r", from_id, to_id, label)


def disconnect_nodes(tree: Tree, from_id: str, to_id: str) -> Edge:
    """Remove the exact edge and return it so callers can keep its label."""
    for index, edge in enumerate(tree.edges):
        if edge.from_id == from_id and edge.to_id == to_id:
            del tree.edges[index]
            logger.debug("disconnected %s -> %s", from_id, to_id)
            return edge
    raise NoSuchEdge(from_id, to_id)


def edit_node_label(tree: Tree, node_id: str, label: str) -> None:
    _require_node(tree, node_id).label = label


def edit_node_type(tree: Tree, node_id: str, node_type: NodeType) -> None:
    _require_node(tree, node_id).type = node_type


def set_root(tree: Tree, node_id: str) -> None:
    _require_node(tree, node_id)
    tree.root_id = node_id


def list_nodes(tree: Tree) -> List[str]:
    lines: List[str] = []
    for node_id in tree.node_ids():
        node = tree.nodes[node_id]
        marker = " (root)" if node_id == tree.root_id else ""
        lines.append(f'{node.id} [{node.type}] "{_quote(node.label)}"{marker}')
    return lines


def _quote(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
