"""Read-only views of a tree: indented rows, DOT, and Mermaid."""

from dataclasses import dataclass
import re
from typing import List, Set, Tuple

from node_models import Node, NodeType, Tree

_DOT_SHAPES = {
    NodeType.DECISION: "diamond",
    NodeType.ACTION: "box",
    NodeType.STARTEND: "ellipse",
    NodeType.IO: "parallelogram",
}
_DOT_ID_PATTERN = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class Row:
    node_id: str
    text: str


def decorate(node: Node) -> str:
    if node.type is NodeType.DECISION:
        return f"<{node.label}>"
    if node.type is NodeType.ACTION:
        return f"[{node.label}]"
    if node.type is NodeType.STARTEND:
        return f"([{node.label}])"
    if node.type is NodeType.IO:
        return f"//{node.label}//"
    return node.label


def flatten(tree: Tree) -> List[Row]:
    """DFS from the root into one row per node, box-drawing prefixes included."""
    if not tree.root_id or tree.get_node(tree.root_id) is None:
        return []
    rows: List[Row] = []
    visited: Set[str] = set()
    # (node id, incoming edge label, prefix, is last child, is root)
    stack: List[Tuple[str, str, str, bool, bool]] = [(tree.root_id, "", "", True, True)]
    while stack:
        node_id, edge_label, prefix, is_last, is_root = stack.pop()
        node = tree.get_node(node_id)
        if node is None or node_id in visited:
            continue
        visited.add(node_id)
        edge_part = f"[{edge_label}] " if edge_label else ""
        if is_root:
            text = edge_part + decorate(node)
            child_prefix = ""
        else:
            connector = "└── " if is_last else "├── "
            text = prefix + connector + edge_part + decorate(node)
            child_prefix = prefix + ("    " if is_last else "│   ")
        rows.append(Row(node_id, text))

        children = tree.children(node_id)
        for index in range(len(children) - 1, -1, -1):
            edge = children[index]
            stack.append((edge.to_id, edge.label, child_prefix, index == len(children) - 1, False))
    return rows


def render_preview(tree: Tree) -> str:
    if not tree.root_id:
        return "(no root set)"
    if tree.get_node(tree.root_id) is None:
        return "(root node not found)"
    return "\n".join(row.text for row in flatten(tree))


def _dot_label(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _dot_id(name: str) -> str:
    return _DOT_ID_PATTERN.sub("_", name) or "tree"


def render_dot(tree: Tree) -> str:
    lines = [f"digraph {_dot_id(tree.name)} {{", "  rankdir=TB;", ""]
    for node_id in tree.node_ids():
        node = tree.nodes[node_id]
        lines.append(f"  {node_id} [label={_dot_label(node.label)}, shape={_DOT_SHAPES[node.type]}];")
    if tree.edges:
        lines.append("")
    for edge in tree.edges:
        if edge.label:
            lines.append(f"  {edge.from_id} -> {edge.to_id} [label={_dot_label(edge.label)}];")
        else:
            lines.append(f"  {edge.from_id} -> {edge.to_id};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _mermaid_escape(text: str) -> str:
    return text.replace('"', "#quot;")


def _mermaid_shape(node: Node) -> str:
    label = _mermaid_escape(node.label)
    if node.type is NodeType.DECISION:
        return "{" + label + "}"
    if node.type is NodeType.STARTEND:
        return "([" + label + "])"
    if node.type is NodeType.IO:
        return "[/" + label + "/]"
    return "[" + label + "]"


def render_mermaid(tree: Tree) -> str:
    lines = ["flowchart TB"]
    for node_id in tree.node_ids():
        lines.append(f"  {node_id}{_mermaid_shape(tree.nodes[node_id])}")
    if tree.edges:
        lines.append("")
    for edge in tree.edges:
        if edge.label:
            lines.append(f"  {edge.from_id} -- {_mermaid_escape(edge.label)} --> {edge.to_id}")
        else:
            lines.append(f"  {edge.from_id} --> {edge.to_id}")
    return "\n".join(lines) + "\n"


RENDERERS = {
    "dot": render_dot,
    "mermaid": render_mermaid,
}
