"""
Tests for undo/redo commands and the History stacks.
"""

import copy

import pytest

import tree_ops
from clipboard import copy_subtree
from errors import EmptyHistory, ParentConflict
from node_models import NodeType
from tree_history import (
    AddNodeCommand,
    ConnectCommand,
    DisconnectCommand,
    EditLabelCommand,
    EditTypeCommand,
    History,
    PasteSubtreeCommand,
    RemoveNodeCommand,
    SetRootCommand,
)


def snapshot(tree):
    return copy.deepcopy((tree.nodes, tree.edges, tree.root_id))


def test_add_undo_redo_keeps_identity(empty_tree):
    history = History()
    node_id = history.execute(empty_tree, AddNodeCommand(NodeType.DECISION, "Q?"))
    assert node_id == "n1"

    history.undo(empty_tree)
    assert len(empty_tree.nodes) == 0

    history.redo(empty_tree)
    assert len(empty_tree.nodes) == 1
    node = empty_tree.nodes["n1"]
    assert (node.type, node.label) == (NodeType.DECISION, "Q?")


@pytest.mark.parametrize(
    "make_command",
    [
        lambda: RemoveNodeCommand("n2"),
        lambda: RemoveNodeCommand("n1"),
        lambda: ConnectCommand("n3", "n5", "x"),
        lambda: DisconnectCommand("n2", "n3"),
        lambda: EditLabelCommand("n3", "renamed"),
        lambda: EditTypeCommand("n3", NodeType.IO),
        lambda: SetRootCommand("n2"),
    ],
)
def test_round_trip(sample_tree, make_command):
    tree_ops.add_node(sample_tree, NodeType.ACTION, "loose")
    before = snapshot(sample_tree)
    history = History()
    history.execute(sample_tree, make_command())
    after = snapshot(sample_tree)
    assert after != before

    history.undo(sample_tree)
    assert snapshot(sample_tree) == before

    history.redo(sample_tree)
    assert snapshot(sample_tree) == after


def test_remove_undo_restores_edge_order(sample_tree):
    history = History()
    history.execute(sample_tree, RemoveNodeCommand("n3"))
    history.undo(sample_tree)
    assert [(e.from_id, e.to_id) for e in sample_tree.edges] == [("n1", "n2"), ("n2", "n3"), ("n2", "n4")]


def test_set_root_undo_restores_no_root(sample_tree):
    sample_tree.root_id = ""
    history = History()
    history.execute(sample_tree, SetRootCommand("n2"))
    history.undo(sample_tree)
    assert sample_tree.root_id == ""


def test_new_command_clears_redo(empty_tree):
    history = History()
    history.execute(empty_tree, AddNodeCommand(NodeType.ACTION, "one"))
    history.execute(empty_tree, AddNodeCommand(NodeType.ACTION, "two"))
    history.undo(empty_tree)
    assert history.can_redo

    history.execute(empty_tree, AddNodeCommand(NodeType.ACTION, "three"))
    assert not history.can_redo
    with pytest.raises(EmptyHistory):
        history.redo(empty_tree)


def test_failed_command_leaves_stacks_alone(sample_tree):
    history = History()
    history.execute(sample_tree, EditLabelCommand("n1", "Begin"))
    before = snapshot(sample_tree)
    with pytest.raises(ParentConflict):
        history.execute(sample_tree, ConnectCommand("n3", "n4"))
    assert snapshot(sample_tree) == before
    assert history.undo_description == "relabel n1"


def test_empty_history_errors(empty_tree):
    history = History()
    assert not history.can_undo
    with pytest.raises(EmptyHistory) as excinfo:
        history.undo(empty_tree)
    assert excinfo.value.message == "nothing to undo"


def test_paste_redo_reuses_ids(sample_tree):
    history = History()
    clipboard = copy_subtree(sample_tree, "n2")
    id_map = history.execute(sample_tree, PasteSubtreeCommand(clipboard))
    after = snapshot(sample_tree)
    assert id_map == {"n2": "n5", "n3": "n6", "n4": "n7"}

    history.undo(sample_tree)
    assert set(sample_tree.nodes) == {"n1", "n2", "n3", "n4"}
    history.redo(sample_tree)
    assert snapshot(sample_tree) == after


def test_clear(empty_tree):
    history = History()
    history.execute(empty_tree, AddNodeCommand(NodeType.ACTION, "a"))
    history.clear()
    assert not history.can_undo and not history.can_redo
