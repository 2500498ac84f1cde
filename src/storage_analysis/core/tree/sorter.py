from __future__ import annotations

"""
Tree Sorter.

Orders children by total size, largest first, down to a requested depth.
Deeper levels are sorted before their parents so that a renderer running
right after sees every requested level already ordered.
"""

from typing import List, Optional, Tuple

from storage_analysis.domain.tree_models import Node


def sort_children(node: Node, depth: Optional[int] = 0) -> None:
    """
    Sort the children of a node and of its descendants by total size, descending.

    Ties keep their current relative order.

    Args:
        node: Node whose children are reordered.
        depth: Number of additional levels to sort below 'node'. 0 sorts only
            the immediate children; None sorts the whole subtree.

    Raises:
        ValueError: If depth is negative.
    """
    if depth is not None and depth < 0:
        raise ValueError(f"Sort depth must be non-negative (received {depth}).")

    # Post-order walk: (node, remaining depth, children already scheduled)
    stack: List[Tuple[Node, Optional[int], bool]] = [(node, depth, False)]
    while stack:
        current, remaining, expanded = stack.pop()

        if expanded or remaining == 0:
            _sort_immediate_children(current)
            continue

        stack.append((current, remaining, True))
        next_depth = None if remaining is None else remaining - 1
        for child in current.children_list():
            stack.append((child, next_depth, False))


def _sort_immediate_children(node: Node) -> None:
    """Reorder the direct children of a node by total size, descending."""
    if len(node) < 2:
        return
    node.reorder_children(sorted(node.children_list(), key=lambda c: c.total_size, reverse=True))
