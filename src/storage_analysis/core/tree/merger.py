from __future__ import annotations

"""
Tree Merger ("safe add").

Folds independently built fragments into one tree without duplicating
shared path prefixes. When a candidate node collides with an existing
sibling of the same id, the existing node keeps its identity and the
candidate's children are merged into it; otherwise the candidate and its
whole subtree are attached as they are.

The candidate's isolated size is reconciled with the existing node so that
the result does not depend on the order in which fragments arrive.
"""

import logging
from typing import Iterable, List, Tuple

from storage_analysis.domain.errors import MergeConflictError
from storage_analysis.domain.tree_models import Node, path_from_node

logger = logging.getLogger(__name__)


def safe_add(parent: Node, child: Node) -> None:
    """
    Merge a candidate subtree into a target node.

    Args:
        parent: Node receiving the candidate.
        child: Candidate subtree; consumed by the merge.

    Raises:
        MergeConflictError: If both sides were probed with different sizes.
    """
    stack: List[Tuple[Node, Node]] = [(parent, child)]

    while stack:
        target, candidate = stack.pop()
        existing = target.children.get(candidate.id)

        if existing is None:
            target.add(candidate)
            continue

        _reconcile_sizes(existing, candidate)
        for grandchild in candidate.children_list():
            stack.append((existing, grandchild))


def merge_fragments(root: Node, fragments: Iterable[Node]) -> Node:
    """Safe-add every fragment below the root and return the root."""
    count = 0
    for fragment in fragments:
        safe_add(root, fragment)
        count += 1
    logger.debug(f"Merged {count} fragments into '{root.id}'")
    return root


def _reconcile_sizes(existing: Node, candidate: Node) -> None:
    """
    Carry a probed size over a placeholder.

    Intermediate nodes of a fragment are unprobed placeholders; a real
    observation always wins over them regardless of arrival order.
    """
    if not candidate.probed:
        return

    if not existing.probed:
        existing.isolated_size = candidate.isolated_size
        existing.probed = True
        return

    if existing.isolated_size != candidate.isolated_size:
        raise MergeConflictError(
            path_from_node(existing), existing.isolated_size, candidate.isolated_size
        )
