from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Set

from errors import InvalidNodeType


class NodeType(IntEnum):
    """Shape of a node; the integer value is the persisted code."""
    DECISION = 0  # diamond
    ACTION = 1  # rectangle
    STARTEND = 2  # oval
    IO = 3  # parallelogram

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, token: str) -> "NodeType":
        try:
            return cls[token.strip().upper()]
        except KeyError:
            raise InvalidNodeType(token) from None

    def cycled(self) -> "NodeType":
        members = list(NodeType)
        return members[(members.index(self) + 1) % len(members)]


NODE_TYPE_NAMES = ", ".join(str(node_type) for node_type in NodeType)


@dataclass
class Node:
    id: str
    type: NodeType
    label: str


@dataclass(frozen=True)
class Edge:
    from_id: str
    to_id: str
    label: str = ""


@dataclass
class Tree:
    """Single-parent decision tree: nodes keyed by ID plus ordered edges."""
    name: str
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)
    # Empty string means no root.
    root_id: str = ""
    counter: int = 0

    def next_id(self) -> str:
        self.counter += 1
        return f"n{self.counter}"

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def children(self, node_id: str) -> List[Edge]:
        return [edge for edge in self.edges if edge.from_id == node_id]

    def parent(self, node_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.to_id == node_id:
                return edge
        return None

    def has_edge(self, from_id: str, to_id: str) -> bool:
        return any(edge.from_id == from_id and edge.to_id == to_id for edge in self.edges)

    def ancestors(self, node_id: str) -> Set[str]:
        """Walk parent links upward, stopping if a corrupt chain loops."""
        seen: Set[str] = set()
        current = node_id
        while True:
            edge = self.parent(current)
            if edge is None or edge.from_id in seen:
                return seen
            seen.add(edge.from_id)
            current = edge.from_id

    def node_ids(self) -> List[str]:
        return sorted(self.nodes)

    def validate(self) -> None:
        if self.root_id and self.root_id not in self.nodes:
            raise ValueError(f"root node {self.root_id!r} not found")
        for edge in self.edges:
            if edge.from_id not in self.nodes:
                raise ValueError(f"edge references non-existent source node {edge.from_id!r}")
            if edge.to_id not in self.nodes:
                raise ValueError(f"edge references non-existent target node {edge.to_id!r}")
