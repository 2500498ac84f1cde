from __future__ import annotations

"""
Tree Renderer.

Converts an aggregated tree into colorized box-drawing lines:

     [ root ]---[ 1.2GB ]
     ├───[ child ]---[ 800MB ]
     │   └───[ grandchild ]---[ 10KB ]
     └───[ other ]---[ 400MB ]

Identifiers are yellow (orange for directories without subdirectories).
The root size is blue; every other size is colored by its share of the
parent's total, from green (small) to red (dominant).
"""

from typing import List, Optional, Tuple

from rich.console import Console
from rich.text import Text

from storage_analysis.domain.tree_models import Node

# -----------------------------------------------------------------------------
# CONSTANTS
# -----------------------------------------------------------------------------

_SIZE_SUFFIXES = ["B", "KB", "MB", "GB", "TB", "PB", "EB"]

ID_STYLE = "#FFFF00"
END_ID_STYLE = "#FFA500"
ROOT_SIZE_STYLE = "#0000FF"
NEUTRAL_SIZE_STYLE = "#FFFFFF"
OVERFLOW_SIZE_STYLE = "#808080"

# Upper percentage bound -> style
_SHARE_STYLES: List[Tuple[float, str]] = [
    (20, "#008000"),
    (40, "#9ACD32"),
    (60, "#FFFF00"),
    (80, "#FFA500"),
    (100, "#FF0000"),
]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def format_bytes(byte_count: int) -> str:
    """
    Format a byte count with base-1024 units and one decimal place.

    The sign is preserved and trailing '.0' is dropped: 0 -> '0B',
    1536 -> '1.5KB', -2048 -> '-2KB'.
    """
    if byte_count == 0:
        return f"0{_SIZE_SUFFIXES[0]}"

    magnitude = abs(byte_count)
    place = 0
    while place < len(_SIZE_SUFFIXES) - 1 and magnitude >= 1024 ** (place + 1):
        place += 1

    num = round(magnitude / 1024 ** place, 1)
    value = -num if byte_count < 0 else num
    return f"{value:g}{_SIZE_SUFFIXES[place]}"


def size_style(node: Node) -> str:
    """Pick the color of a node's size from its share of the parent's total."""
    if node.parent is None:
        return ROOT_SIZE_STYLE
    if node.parent.total_size == 0:
        return NEUTRAL_SIZE_STYLE

    percentage = node.total_size / node.parent.total_size * 100
    for bound, style in _SHARE_STYLES:
        if percentage <= bound:
            return style
    return OVERFLOW_SIZE_STYLE


def render_tree_lines(node: Node, depth: Optional[int] = None) -> List[Text]:
    """
    Render a subtree into styled lines, children in their current order.

    Args:
        node: Top node of the rendering.
        depth: Number of levels to show below 'node'; None shows everything.

    Returns:
        List[Text]: One styled line per rendered node.
    """
    lines: List[Text] = []

    # (node, indent, is_last, is_first, remaining depth)
    stack: List[Tuple[Node, str, bool, bool, Optional[int]]] = [(node, "", True, True, depth)]
    while stack:
        current, indent, last, first, remaining = stack.pop()

        if first:
            connector, child_indent = " ", indent + " "
        elif last:
            connector, child_indent = "└───", indent + "    "
        else:
            connector, child_indent = "├───", indent + "│   "

        lines.append(_format_line(current, indent + connector))

        if remaining is not None and remaining <= 0:
            continue

        next_depth = None if remaining is None else remaining - 1
        children = current.children_list()
        for i in range(len(children) - 1, -1, -1):
            stack.append((children[i], child_indent, i == len(children) - 1, False, next_depth))

    return lines


def print_tree(node: Node, depth: Optional[int] = None, console: Optional[Console] = None) -> int:
    """
    Print a subtree to the console.

    Returns:
        int: Number of printed lines.
    """
    console = console or Console()
    lines = render_tree_lines(node, depth)
    for line in lines:
        console.print(line, soft_wrap=True)
    return len(lines)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _format_line(node: Node, prefix: str) -> Text:
    """Assemble '<prefix>[ id ]---[ size ]' with node-dependent styles."""
    id_style = ID_STYLE if node.has_children else END_ID_STYLE
    return Text.assemble(
        prefix,
        "[ ",
        (node.id, id_style),
        " ]---[ ",
        (format_bytes(node.total_size), size_style(node)),
        " ]",
    )
