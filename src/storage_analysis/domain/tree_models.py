from __future__ import annotations

"""
Directory Tree Data Models.

Provides the node type used to represent the scanned hierarchy together
with the path-to-tree insertion and lookup helpers. Every traversal in this
module is iterative so that pathological directory depths never exhaust the
interpreter stack.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from storage_analysis.infra.fs import split_path_segments

# Identifier of the synthetic node that hosts every merged fragment
ROOT_ID = "ROOT"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class Node:
    """
    A directory in the scanned hierarchy.

    Nodes compare by identity. The parent link is a plain back-reference used
    for path reconstruction and re-parenting; ownership flows exclusively
    through 'children'.

    Attributes:
        id: Path segment, unique among siblings.
        isolated_size: Bytes of the files directly inside this directory.
        total_size: Isolated size plus the total size of all children.
            Only meaningful after aggregation.
        probed: True once a size observation was recorded for this exact path.
        children: Owned child nodes keyed by id, in display order.
        parent: Enclosing node, or None for a root.
    """
    id: str
    isolated_size: int = 0
    total_size: int = 0
    probed: bool = False
    children: Dict[str, "Node"] = field(default_factory=dict, repr=False)
    parent: Optional["Node"] = field(default=None, repr=False)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator["Node"]:
        return iter(list(self.children.values()))

    def has_child(self, node_id: str) -> bool:
        return node_id in self.children

    def get_child(self, node_id: str) -> "Node":
        return self.children[node_id]

    def children_list(self) -> List["Node"]:
        return list(self.children.values())

    def add(self, child: "Node") -> None:
        """
        Attach a node as a direct child, detaching it from any previous parent.

        Raises:
            ValueError: If a different child already uses the same id.
        """
        existing = self.children.get(child.id)
        if existing is not None and existing is not child:
            raise ValueError(f"Node '{self.id}' already has a child named '{child.id}'")

        if child.parent is not None and child.parent is not self:
            child.parent.children.pop(child.id, None)

        child.parent = self
        self.children[child.id] = child

    def detach(self) -> None:
        """Remove this node from its parent, making it a root."""
        if self.parent is not None:
            self.parent.children.pop(self.id, None)
        self.parent = None

    def reorder_children(self, ordered: Iterable["Node"]) -> None:
        """Replace the child ordering with the given sequence of existing children."""
        self.children = {child.id: child for child in ordered}


# -----------------------------------------------------------------------------
# PATH INSERTION
# -----------------------------------------------------------------------------

def populate_node_from_path(node: Node, path: str, size: int, sep: str = os.sep) -> Node:
    """
    Insert one (path, size) observation below the given node.

    Walks the path segments, creating missing children on the way, and sets
    the isolated size of the final node (the last writer wins).

    Args:
        node: Node acting as the root of the insertion.
        path: Directory path to insert.
        size: Isolated size observed for the path.
        sep: Path separator used to split the path.

    Returns:
        Node: The node representing the full path.
    """
    current = node
    for segment in split_path_segments(path, sep):
        if current.has_child(segment):
            current = current.get_child(segment)
        else:
            new_node = Node(segment)
            current.add(new_node)
            current = new_node

    current.isolated_size = size
    current.probed = True
    return current


def create_node_from_path(path: str, size: int, sep: str = os.sep) -> Node:
    """
    Build a detached single-branch fragment for one observation.

    The chain starts at the first path segment; only the last node carries
    the observed size, intermediate nodes are unprobed placeholders.

    Args:
        path: Directory path.
        size: Isolated size observed for the path.
        sep: Path separator used to split the path.

    Returns:
        Node: Top node of the fragment (the sentinel itself for an empty path).
    """
    sentinel = Node(ROOT_ID)
    populate_node_from_path(sentinel, path, size, sep)
    if not sentinel.has_children:
        return sentinel

    top = sentinel.children_list()[0]
    top.detach()
    return top

# -----------------------------------------------------------------------------
# LOOKUP AND NAVIGATION
# -----------------------------------------------------------------------------

def get_node_from_path(root: Node, path: str, sep: str = os.sep) -> Optional[Node]:
    """
    Resolve a path below the given root.

    Returns:
        Optional[Node]: The matching node, or None if a segment is missing.
    """
    current = root
    for segment in split_path_segments(path, sep):
        if not current.has_child(segment):
            return None
        current = current.get_child(segment)
    return current


def path_from_node(node: Node, sep: str = os.sep) -> str:
    """
    Rebuild the path of a node from its parent links.

    The topmost ancestor (normally the merge sentinel) is not part of the path.
    """
    segments: List[str] = [node.id]
    current = node
    while current.parent is not None and current.parent.parent is not None:
        current = current.parent
        segments.append(current.id)

    segments.reverse()
    if segments[0] == sep:
        return sep + sep.join(segments[1:])
    return sep.join(segments)


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node of the subtree in pre-order, children in display order."""
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children_list()))


def child_with_most_children(root: Node) -> Node:
    """Return the node of the subtree with the largest number of direct children."""
    best = root
    for node in iter_nodes(root):
        if len(node) > len(best):
            best = node
    return best
