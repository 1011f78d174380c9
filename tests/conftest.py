"""
Shared fixtures: sample trees, sessions, and scripted key input.
"""

import io

import pytest

import tree_ops
from node_models import NodeType, Tree
from session import Session


class ScriptedSource:
    """Byte source that replays a fixed byte string, then signals EOF."""

    def __init__(self, data: bytes) -> None:
        self.data = bytearray(data)

    def read_byte(self) -> int:
        if not self.data:
            raise EOFError
        return self.data.pop(0)

    def has_pending(self, timeout: float = 0.0) -> bool:
        return bool(self.data)

    def feed(self, data: bytes) -> None:
        self.data.extend(data)


@pytest.fixture
def scripted():
    """Factory for ScriptedSource instances."""
    return ScriptedSource


@pytest.fixture
def empty_tree():
    return Tree("test")


@pytest.fixture
def sample_tree():
    """Start -> Decision -> (yes) Action, Decision -> (no) IO; root is Start."""
    tree = Tree("sample")
    start = tree_ops.add_node(tree, NodeType.STARTEND, "Start")
    decision = tree_ops.add_node(tree, NodeType.DECISION, "Ready?")
    action = tree_ops.add_node(tree, NodeType.ACTION, "Go")
    io_node = tree_ops.add_node(tree, NodeType.IO, "Ask")
    tree_ops.set_root(tree, start)
    tree_ops.connect_nodes(tree, start, decision)
    tree_ops.connect_nodes(tree, decision, action, "yes")
    tree_ops.connect_nodes(tree, decision, io_node, "no")
    return tree


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def session(out):
    return Session(out)


@pytest.fixture
def deep_chain():
    """A single 1201-node path n1 -> n2 -> ... -> n1201 rooted at n1."""
    tree = Tree("deep")
    previous = tree_ops.add_node(tree, NodeType.STARTEND, "top")
    tree_ops.set_root(tree, previous)
    for depth in range(1200):
        current = tree_ops.add_node(tree, NodeType.ACTION, f"step {depth}")
        tree_ops.connect_nodes(tree, previous, current)
        previous = current
    return tree
