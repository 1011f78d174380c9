import json
import logging
from pathlib import Path
import re
from typing import Any, Dict, Union

from node_models import Edge, Node, NodeType, Tree

logger = logging.getLogger(__name__)

_GENERATED_ID = re.compile(r"n(\d+)")


def to_document(tree: Tree) -> Dict[str, Any]:
    """Snapshot ``tree`` as plain JSON-ready data.

    Node types are stored by integer code; empty edge labels are omitted.
    """
    edges = []
    for edge in tree.edges:
        record = {"from": edge.from_id, "to": edge.to_id}
        if edge.label:
            record["label"] = edge.label
        edges.append(record)
    return {
        "name": tree.name,
        "root_id": tree.root_id,
        "nodes": {
            node_id: {"id": node.id, "type": int(node.type), "label": node.label}
            for node_id, node in tree.nodes.items()
        },
        "edges": edges,
        "counter": tree.counter,
    }


def from_document(document: Dict[str, Any]) -> Tree:
    if not isinstance(document, dict):
        raise ValueError("document must be a JSON object")
    try:
        tree = Tree(
            name=str(document.get("name", "untitled")),
            root_id=str(document.get("root_id") or ""),
            counter=int(document.get("counter", 0)),
        )
        for node_id, record in (document.get("nodes") or {}).items():
            tree.nodes[node_id] = Node(
                id=str(record.get("id", node_id)),
                type=NodeType(int(record.get("type", 0))),
                label=str(record.get("label", "")),
            )
        for record in document.get("edges") or []:
            tree.edges.append(Edge(str(record["from"]), str(record["to"]), str(record.get("label", ""))))
    except (AttributeError, KeyError, TypeError) as exc:
        raise ValueError(f"malformed document: {exc}") from exc
    tree.validate()
    # A stale or missing counter must never mint an ID that is already taken.
    tree.counter = max(tree.counter, _highest_generated_id(tree.nodes))
    return tree


def _highest_generated_id(node_ids) -> int:
    highest = 0
    for node_id in node_ids:
        match = _GENERATED_ID.fullmatch(node_id)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def save(tree: Tree, path: Union[str, Path]) -> Path:
    target = Path(path).expanduser()
    target.write_text(json.dumps(to_document(tree), indent=2) + "\n", encoding="utf-8")
    logger.info("saved %s (%d nodes) to %s", tree.name, len(tree.nodes), target)
    return target


def load(path: Union[str, Path]) -> Tree:
    target = Path(path).expanduser()
    try:
        document = json.loads(target.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc
    tree = from_document(document)
    logger.info("loaded %s (%d nodes) from %s", tree.name, len(tree.nodes), target)
    return tree
