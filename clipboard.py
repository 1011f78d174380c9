from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Set, Tuple

from errors import NodeNotFound
from node_models import Edge, Node, Tree


@dataclass(frozen=True)
class Clipboard:
    """Detached copy of a subtree, still carrying its original IDs."""
    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]
    root: str


def copy_subtree(tree: Tree, node_id: str) -> Clipboard:
    if tree.get_node(node_id) is None:
        raise NodeNotFound(node_id)

    nodes: List[Node] = []
    edges: List[Edge] = []
    visited: Set[str] = set()
    # (edge that led here, node id); children are pushed in reverse to keep DFS order.
    stack: List[Tuple[Optional[Edge], str]] = [(None, node_id)]
    while stack:
        via, current = stack.pop()
        if via is not None:
            edges.append(via)
        if current in visited:
            continue
        visited.add(current)
        node = tree.get_node(current)
        if node is None:
            continue
        nodes.append(replace(node))
        children = [edge for edge in tree.children(current) if tree.get_node(edge.to_id) is not None]
        for edge in reversed(children):
            stack.append((edge, edge.to_id))

    return Clipboard(nodes=tuple(nodes), edges=tuple(edges), root=node_id)


def paste_subtree(
    tree: Tree,
    clipboard: Clipboard,
    id_map: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """Insert a fresh copy of ``clipboard`` and return ``{old_id: new_id}``.

    Passing a previous ``id_map`` re-creates the same IDs instead of minting
    new ones, which is how a redone paste lands on identical state.
    """
    mapping: Dict[str, str] = dict(id_map) if id_map else {}
    for node in clipboard.nodes:
        new_id = mapping.get(node.id) or tree.next_id()
        mapping[node.id] = new_id
        tree.nodes[new_id] = Node(id=new_id, type=node.type, label=node.label)
    for edge in clipboard.edges:
        tree.edges.append(Edge(mapping[edge.from_id], mapping[edge.to_id], edge.label))
    return mapping
