from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import tree_ops
from node_models import NodeType, Tree


@dataclass(frozen=True)
class TreeTemplate:
    name: str
    description: str
    nodes: Tuple[Tuple[NodeType, str], ...]
    # (from index, to index, label), indices into ``nodes`` starting at 1.
    edges: Tuple[Tuple[int, int, str], ...]

    def build(self) -> Tree:
        tree = Tree(self.name)
        ids = [tree_ops.add_node(tree, node_type, label) for node_type, label in self.nodes]
        tree_ops.set_root(tree, ids[0])
        for from_index, to_index, label in self.edges:
            tree_ops.connect_nodes(tree, ids[from_index - 1], ids[to_index - 1], label)
        return tree


TEMPLATES: Sequence[TreeTemplate] = (
    TreeTemplate(
        name="auth-flow",
        description="Authentication flow",
        nodes=(
            (NodeType.STARTEND, "Start"),
            (NodeType.DECISION, "Authenticated?"),
            (NodeType.ACTION, "Grant access"),
            (NodeType.STARTEND, "End"),
            (NodeType.ACTION, "Show login form"),
        ),
        edges=((1, 2, ""), (2, 3, "yes"), (3, 4, ""), (2, 5, "no")),
    ),
    TreeTemplate(
        name="approval",
        description="Approval workflow",
        nodes=(
            (NodeType.STARTEND, "Start"),
            (NodeType.ACTION, "Submit request"),
            (NodeType.DECISION, "Approved?"),
            (NodeType.ACTION, "Process request"),
            (NodeType.STARTEND, "End"),
            (NodeType.ACTION, "Revise request"),
        ),
        edges=((1, 2, ""), (2, 3, ""), (3, 4, "yes"), (4, 5, ""), (3, 6, "no")),
    ),
    TreeTemplate(
        name="troubleshooting",
        description="Troubleshooting guide",
        nodes=(
            (NodeType.STARTEND, "Start"),
            (NodeType.DECISION, "Is it plugged in?"),
            (NodeType.ACTION, "Plug it in"),
            (NodeType.STARTEND, "Done"),
            (NodeType.ACTION, "Check settings"),
            (NodeType.DECISION, "Resolved?"),
            (NodeType.ACTION, "Escalate"),
        ),
        edges=((1, 2, ""), (2, 3, "no"), (3, 4, ""), (2, 5, "yes"), (5, 6, ""), (6, 7, "no")),
    ),
)


def find_template(name: str) -> Optional[TreeTemplate]:
    for template in TEMPLATES:
        if template.name == name:
            return template
    return None


def describe_templates() -> List[str]:
    return [f"{index}. {template.name} - {template.description}" for index, template in enumerate(TEMPLATES, start=1)]
