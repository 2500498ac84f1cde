from __future__ import annotations

"""
Size Aggregator.

Computes the total size of every node bottom-up without recursion:
1. Collect the ends of the tree (nodes without children).
2. Split the tree into generations by breadth-first layering from the root.
3. Walk the generations from the deepest to the root. An end takes its
   isolated size; any other node adds the totals of its children, which all
   live in a deeper generation that has already been processed.

Runs in O(N) time and memory regardless of the depth of the hierarchy.
"""

from typing import List, Set

from storage_analysis.domain.tree_models import Node, iter_nodes


def get_ends(root: Node) -> List[Node]:
    """Return every node of the subtree that has no children, in pre-order."""
    return [node for node in iter_nodes(root) if not node.has_children]


def split_by_generation(root: Node) -> List[List[Node]]:
    """
    Layer the subtree breadth-first.

    Returns:
        List[List[Node]]: Generation 0 holds the root, generation k+1 the
        children of generation k. The last generation is never empty.
    """
    generations: List[List[Node]] = []
    current = [root]
    while current:
        generations.append(current)
        current = [child for node in current for child in node.children_list()]
    return generations


def calculate_total_size(root: Node) -> None:
    """Fill in 'total_size' for every node of the subtree, root included."""
    ends: Set[Node] = set(get_ends(root))

    for generation in reversed(split_by_generation(root)):
        for node in generation:
            if node in ends:
                node.total_size = node.isolated_size
            else:
                node.total_size = node.isolated_size + sum_of_children_totals(node)


def sum_of_children_totals(node: Node) -> int:
    """Sum the (already computed) total sizes of the direct children."""
    return sum(child.total_size for child in node.children.values())


def sum_of_all_sizes(root: Node) -> int:
    """Sum the isolated sizes of the whole subtree; independent of aggregation."""
    return sum(node.isolated_size for node in iter_nodes(root))
