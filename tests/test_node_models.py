"""
Tests for the tree data model and node types.
"""

import pytest

from errors import ErrorKind, InvalidNodeType
from node_models import Edge, NodeType, Tree


class TestNodeType:
    def test_parse_is_case_insensitive(self):
        assert NodeType.parse("Decision") is NodeType.DECISION
        assert NodeType.parse("  io ") is NodeType.IO
        assert NodeType.parse("STARTEND") is NodeType.STARTEND

    def test_parse_rejects_unknown(self):
        with pytest.raises(InvalidNodeType) as excinfo:
            NodeType.parse("banana")
        assert excinfo.value.kind is ErrorKind.INVALID_NODE_TYPE
        assert "banana" in excinfo.value.message

    def test_str_is_lowercase_name(self):
        assert str(NodeType.ACTION) == "action"

    def test_cycle_rotation_wraps(self):
        assert NodeType.DECISION.cycled() is NodeType.ACTION
        assert NodeType.ACTION.cycled() is NodeType.STARTEND
        assert NodeType.STARTEND.cycled() is NodeType.IO
        assert NodeType.IO.cycled() is NodeType.DECISION


class TestTree:
    def test_ids_are_sequential(self):
        tree = Tree("t")
        assert tree.next_id() == "n1"
        assert tree.next_id() == "n2"
        assert tree.counter == 2

    def test_node_ids_sorted_lexicographically(self, sample_tree):
        sample_tree.next_id()
        sample_tree.nodes["n10"] = sample_tree.nodes["n1"]
        assert sample_tree.node_ids() == ["n1", "n10", "n2", "n3", "n4"]

    def test_children_keep_edge_order(self, sample_tree):
        assert [edge.to_id for edge in sample_tree.children("n2")] == ["n3", "n4"]

    def test_parent_and_ancestors(self, sample_tree):
        assert sample_tree.parent("n3") == Edge("n2", "n3", "yes")
        assert sample_tree.parent("n1") is None
        assert sample_tree.ancestors("n4") == {"n1", "n2"}
        assert sample_tree.ancestors("n1") == set()

    def test_ancestors_stop_on_corrupt_loop(self):
        tree = Tree("loop")
        tree.edges = [Edge("a", "b"), Edge("b", "a")]
        assert tree.ancestors("a") == {"a", "b"}

    def test_validate_rejects_dangling_edge(self, sample_tree):
        sample_tree.edges.append(Edge("n1", "missing"))
        with pytest.raises(ValueError):
            sample_tree.validate()

    def test_validate_rejects_missing_root(self, sample_tree):
        sample_tree.root_id = "n99"
        with pytest.raises(ValueError):
            sample_tree.validate()
