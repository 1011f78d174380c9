"""
Tests for the template catalog.
"""

import pytest

from renderers import flatten
from tree_templates import TEMPLATES, describe_templates, find_template


@pytest.mark.parametrize("template", TEMPLATES, ids=lambda t: t.name)
def test_templates_build_valid_trees(template):
    tree = template.build()
    tree.validate()
    assert tree.root_id == "n1"
    assert len(tree.edges) == len(template.edges)
    # every node is reachable from the root
    assert len(flatten(tree)) == len(template.nodes)


def test_builds_are_independent():
    template = find_template("approval")
    first, second = template.build(), template.build()
    first.nodes["n1"].label = "changed"
    assert second.nodes["n1"].label == "Start"


def test_lookup_and_description():
    assert find_template("auth-flow").description == "Authentication flow"
    assert find_template("missing") is None
    assert describe_templates()[0] == "1. auth-flow - Authentication flow"
