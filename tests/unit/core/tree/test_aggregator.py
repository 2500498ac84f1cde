from __future__ import annotations

"""
Unit tests for the Size Aggregator.

Verifies:
1. Total sizes are computed bottom-up for every node.
2. The root total equals the sum of all isolated sizes.
3. Very deep chains aggregate without recursion.
"""

import pytest

from storage_analysis.core.tree.aggregator import (
    calculate_total_size,
    get_ends,
    split_by_generation,
    sum_of_all_sizes,
    sum_of_children_totals,
)
from storage_analysis.domain.tree_models import (
    ROOT_ID,
    Node,
    get_node_from_path,
    iter_nodes,
)


@pytest.fixture
def simple_tree(build_tree) -> Node:
    """ROOT -> A -> {B=10, C=20}."""
    return build_tree(Node(ROOT_ID), ["A/B", "A/C"], [10, 20])


def test_totals_of_simple_tree(simple_tree: Node) -> None:
    root = simple_tree
    calculate_total_size(root)

    a = root.get_child("A")
    assert a.total_size == 30
    assert a.get_child("B").total_size == 10
    assert a.get_child("C").total_size == 20
    assert root.total_size == 30


def test_total_includes_own_isolated_size(build_tree) -> None:
    root = build_tree(Node(ROOT_ID), ["A", "A/B"], [5, 10])
    calculate_total_size(root)

    assert root.get_child("A").total_size == 15


def test_every_node_satisfies_total_invariant(build_tree) -> None:
    root = build_tree(
        Node(ROOT_ID),
        ["r", "r/a", "r/a/x", "r/a/y", "r/b", "r/b/z/w"],
        [1, 2, 3, 4, 5, 6],
    )
    calculate_total_size(root)

    for node in iter_nodes(root):
        assert node.total_size == node.isolated_size + sum_of_children_totals(node)
    assert root.total_size == sum_of_all_sizes(root) == 21


def test_ends_and_generations(simple_tree: Node) -> None:
    root = simple_tree

    assert [n.id for n in get_ends(root)] == ["B", "C"]

    generations = split_by_generation(root)
    assert [[n.id for n in g] for g in generations] == [[ROOT_ID], ["A"], ["B", "C"]]


def test_single_node_tree() -> None:
    root = Node("solo", isolated_size=12)
    calculate_total_size(root)
    assert root.total_size == 12


def test_ten_thousand_level_chain(build_tree) -> None:
    """Every ancestor of a 5-byte leaf at depth 10,000 totals 5."""
    deep = "/".join(f"n{i}" for i in range(10000))
    root = build_tree(Node(ROOT_ID), [deep], [5])

    calculate_total_size(root)

    assert all(node.total_size == 5 for node in iter_nodes(root))
    assert get_node_from_path(root, deep, sep="/").total_size == 5
