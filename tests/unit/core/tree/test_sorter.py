from __future__ import annotations

"""
Unit tests for the Tree Sorter.

Verifies:
1. Depth 0 only reorders the immediate children.
2. Depth k reorders k additional levels; None reorders everything.
3. Ties keep their relative order.
"""

import pytest

from storage_analysis.core.tree.aggregator import calculate_total_size
from storage_analysis.core.tree.sorter import sort_children
from storage_analysis.domain.tree_models import Node


def _ids(node: Node) -> list:
    return [c.id for c in node]


@pytest.fixture
def tree(build_tree) -> Node:
    """
    r
    ├── small (1)  -> s1 (1), s2 (3)
    └── large (10) -> l1 (2), l2 (5) -> x (1), y (4)
    """
    root = build_tree(
        Node("r"),
        ["small", "small/s1", "small/s2", "large", "large/l1", "large/l2/x", "large/l2/y"],
        [1, 1, 3, 10, 2, 1, 4],
    )
    calculate_total_size(root)
    return root


def test_depth_zero_sorts_only_immediate_children(tree: Node) -> None:
    root = tree
    sort_children(root, 0)

    assert _ids(root) == ["large", "small"]
    assert _ids(root.get_child("small")) == ["s1", "s2"]
    assert _ids(root.get_child("large")) == ["l1", "l2"]


def test_depth_one_sorts_grandchildren(tree: Node) -> None:
    root = tree
    sort_children(root, 1)

    assert _ids(root) == ["large", "small"]
    assert _ids(root.get_child("small")) == ["s2", "s1"]
    assert _ids(root.get_child("large")) == ["l2", "l1"]
    assert _ids(root.get_child("large").get_child("l2")) == ["x", "y"]


def test_none_sorts_every_level(tree: Node) -> None:
    root = tree
    sort_children(root, None)

    assert _ids(root.get_child("large").get_child("l2")) == ["y", "x"]


def test_ties_are_stable(build_tree) -> None:
    root = build_tree(Node("r"), ["b", "a", "c"], [5, 5, 9])
    calculate_total_size(root)

    sort_children(root)

    assert _ids(root) == ["c", "b", "a"]


def test_negative_depth_rejected() -> None:
    with pytest.raises(ValueError):
        sort_children(Node("r"), -1)


def test_sorting_leaf_is_noop() -> None:
    leaf = Node("leaf")
    sort_children(leaf, None)
    assert len(leaf) == 0
