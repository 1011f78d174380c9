"""
Tests for JSON save/load.
"""

import json

import pytest

import json_io
from node_models import NodeType
import tree_ops


def test_save_and_load(sample_tree, tmp_path):
    path = json_io.save(sample_tree, tmp_path / "tree.json")
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["root_id"] == "n1"
    assert document["nodes"]["n2"] == {"id": "n2", "type": 0, "label": "Ready?"}
    assert document["edges"][0] == {"from": "n1", "to": "n2"}
    assert document["edges"][1] == {"from": "n2", "to": "n3", "label": "yes"}

    loaded = json_io.load(path)
    assert loaded.nodes == sample_tree.nodes
    assert loaded.edges == sample_tree.edges
    assert loaded.counter == 4
    assert loaded.nodes["n4"].type is NodeType.IO


def test_loaded_tree_keeps_counter(sample_tree, tmp_path):
    path = json_io.save(sample_tree, tmp_path / "tree.json")
    assert json_io.load(path).next_id() == "n5"


def test_missing_nodes_is_empty_tree():
    tree = json_io.from_document({"name": "bare"})
    assert tree.name == "bare"
    assert tree.nodes == {}


def test_dangling_edge_rejected():
    document = {"nodes": {"n1": {"id": "n1", "type": 1, "label": "a"}}, "edges": [{"from": "n1", "to": "n2"}]}
    with pytest.raises(ValueError):
        json_io.from_document(document)


def test_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        json_io.load(path)


def test_missing_file(tmp_path):
    with pytest.raises(OSError):
        json_io.load(tmp_path / "absent.json")


def test_missing_counter_never_reuses_ids():
    document = {"nodes": {"n1": {"id": "n1", "type": 1, "label": "Keep me"}}}
    tree = json_io.from_document(document)
    new_id = tree_ops.add_node(tree, NodeType.ACTION, "fresh")
    assert new_id == "n2"
    assert tree.nodes["n1"].label == "Keep me"


def test_stale_counter_is_raised_past_existing_ids():
    document = {
        "counter": 2,
        "nodes": {
            "n7": {"id": "n7", "type": 1, "label": "a"},
            "start": {"id": "start", "type": 3, "label": "b"},
        },
    }
    tree = json_io.from_document(document)
    assert tree.counter == 7
    assert tree.next_id() == "n8"
