"""
Tests for the preview, DOT and Mermaid views.
"""

from node_models import Edge, NodeType, Tree
from renderers import flatten, render_dot, render_mermaid, render_preview
import tree_ops


def test_preview(sample_tree):
    tree_ops.add_node(sample_tree, NodeType.ACTION, "Retry")
    tree_ops.connect_nodes(sample_tree, "n3", "n5")
    assert render_preview(sample_tree) == "\n".join(
        [
            "([Start])",
            "└── <Ready?>",
            "    ├── [yes] [Go]",
            "    │   └── [Retry]",
            "    └── [no] //Ask//",
        ]
    )


def test_flatten_rows_carry_ids(sample_tree):
    assert [row.node_id for row in flatten(sample_tree)] == ["n1", "n2", "n3", "n4"]


def test_flatten_without_root():
    tree = Tree("t")
    assert flatten(tree) == []
    tree.root_id = "ghost"
    assert flatten(tree) == []


def test_preview_messages():
    tree = Tree("t")
    assert render_preview(tree) == "(no root set)"
    tree.root_id = "ghost"
    assert render_preview(tree) == "(root node not found)"


def test_flatten_survives_corrupt_loop(sample_tree):
    sample_tree.edges.append(Edge("n3", "n1"))
    assert len(flatten(sample_tree)) == 4


def test_dot(sample_tree):
    tree_ops.edit_node_label(sample_tree, "n3", 'Say "go"')
    sample_tree.name = "my tree"
    dot = render_dot(sample_tree)
    assert dot.startswith("digraph my_tree {\n  rankdir=TB;\n")
    assert '  n1 [label="Start", shape=ellipse];' in dot
    assert '  n2 [label="Ready?", shape=diamond];' in dot
    assert '  n3 [label="Say \\"go\\"", shape=box];' in dot
    assert '  n4 [label="Ask", shape=parallelogram];' in dot
    assert "  n1 -> n2;" in dot
    assert '  n2 -> n3 [label="yes"];' in dot
    assert dot.endswith("}\n")


def test_mermaid(sample_tree):
    tree_ops.edit_node_label(sample_tree, "n4", 'Ask "why"')
    lines = render_mermaid(sample_tree).splitlines()
    assert lines[0] == "flowchart TB"
    assert "  n1([Start])" in lines
    assert "  n2{Ready?}" in lines
    assert "  n3[Go]" in lines
    assert "  n4[/Ask #quot;why#quot;/]" in lines
    assert "  n1 --> n2" in lines
    assert "  n2 -- yes --> n3" in lines


def test_renderers_do_not_mutate(sample_tree):
    before = (dict(sample_tree.nodes), list(sample_tree.edges), sample_tree.root_id)
    render_dot(sample_tree)
    render_mermaid(sample_tree)
    render_preview(sample_tree)
    assert (dict(sample_tree.nodes), list(sample_tree.edges), sample_tree.root_id) == before


def test_flatten_very_deep_chain(deep_chain):
    rows = flatten(deep_chain)
    assert len(rows) == 1201
    assert rows[0].node_id == "n1"
    assert rows[-1].node_id == "n1201"
    assert render_preview(deep_chain).count("\n") == 1200
