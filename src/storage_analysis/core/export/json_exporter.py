from __future__ import annotations

"""
JSON Tree Export.

Serializes an aggregated tree as nested objects:

    {"id": "...", "isolatedSize": 0, "totalSize": 0, "children": [...]}

The writer streams chunks from an explicit stack instead of building a
nested structure for json.dumps, so very deep trees export without hitting
the interpreter recursion limit. The loader parses exports back with an
explicit stack as well and rebuilds Node trees from them.
"""

import json
import logging
import os
import re
from json.decoder import scanstring
from typing import Any, Dict, Iterator, List, Optional, Tuple

from storage_analysis.domain.tree_models import Node
from storage_analysis.infra.fs import safe_mkdir

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_NUMBER = re.compile(r"(-?(?:0|[1-9]\d*))(\.\d+)?([eE][-+]?\d+)?")
_LITERALS = {"true": True, "false": False, "null": None}

# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def iter_json_chunks(node: Node, depth: Optional[int] = None) -> Iterator[str]:
    """
    Yield the JSON text of a subtree piece by piece.

    Args:
        node: Top node of the export.
        depth: Number of levels to include below 'node'; None includes all.
            Nodes at the cutoff are written with an empty children array.

    Yields:
        str: Consecutive fragments of the JSON document.
    """
    # Items are either literal text or a node with its remaining depth
    stack: List[Tuple[Optional[str], Optional[Node], Optional[int]]] = [(None, node, depth)]

    while stack:
        text, current, remaining = stack.pop()
        if text is not None:
            yield text
            continue

        yield (
            f'{{"id": {json.dumps(current.id, ensure_ascii=False)}, '
            f'"isolatedSize": {current.isolated_size}, '
            f'"totalSize": {current.total_size}, '
            f'"children": ['
        )

        if remaining is not None and remaining <= 0:
            children: List[Node] = []
        else:
            children = current.children_list()
        next_depth = None if remaining is None else remaining - 1

        stack.append(("]}", None, None))
        for i in range(len(children) - 1, -1, -1):
            stack.append((None, children[i], next_depth))
            if i > 0:
                stack.append((", ", None, None))


def to_json(node: Node, depth: Optional[int] = None) -> str:
    """Serialize a subtree into a JSON string."""
    return "".join(iter_json_chunks(node, depth))


def export_to_json(node: Node, path: str, depth: Optional[int] = None) -> bool:
    """
    Write a subtree export to disk.

    Args:
        node: Top node of the export.
        path: Destination file.
        depth: Number of levels to include below 'node'; None includes all.

    Returns:
        bool: True if the file was written.
    """
    ok, err = safe_mkdir(os.path.dirname(os.path.abspath(path)))
    if not ok:
        logger.error(f"Failed to export tree to '{path}': {err}")
        return False

    try:
        with open(path, "w", encoding="utf-8") as f:
            f.writelines(iter_json_chunks(node, depth))
    except OSError as e:
        logger.error(f"Failed to export tree to '{path}': {e}")
        return False

    logger.info(f"Tree exported to file: {path}")
    return True

# -----------------------------------------------------------------------------
# DESERIALIZATION
# -----------------------------------------------------------------------------

def tree_from_dict(data: Dict[str, Any]) -> Node:
    """
    Rebuild a Node tree from parsed export data.

    Rebuilt nodes are marked as probed since their sizes are observations.

    Raises:
        ValueError: If a required field is missing or has the wrong type.
    """
    root = _node_from_fields(data)
    stack: List[Tuple[Node, Dict[str, Any]]] = [(root, data)]

    while stack:
        parent, raw = stack.pop()
        children = raw.get("children", [])
        if not isinstance(children, list):
            raise ValueError(f"Invalid 'children' for node '{parent.id}': expected a list.")
        for raw_child in children:
            child = _node_from_fields(raw_child)
            parent.add(child)
            stack.append((child, raw_child))

    return root


def load_from_json(path: str) -> Node:
    """
    Read an export file and rebuild its tree.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the document does not describe a tree.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = parse_json_document(f.read())
    return tree_from_dict(data)


def parse_json_document(text: str) -> Any:
    """
    Decode a JSON document without recursing per nesting level.

    Open containers live on an explicit stack, so the nesting depth of an
    export is bounded by memory rather than by the interpreter recursion
    limit. Strings are decoded by the json module's own scanner.

    Args:
        text: Complete JSON document.

    Returns:
        Any: The decoded value.

    Raises:
        json.JSONDecodeError: On malformed input.
    """
    # Each frame is an open container plus the key awaiting its value
    stack: List[Tuple[Any, Optional[str]]] = []
    pos = _skip_ws(text, 0)

    while True:
        ch = text[pos:pos + 1]
        if ch == "{":
            pos = _skip_ws(text, pos + 1)
            if text.startswith("}", pos):
                value: Any = {}
                pos += 1
            else:
                key, pos = _read_key(text, pos)
                stack.append(({}, key))
                continue
        elif ch == "[":
            pos = _skip_ws(text, pos + 1)
            if text.startswith("]", pos):
                value = []
                pos += 1
            else:
                stack.append(([], None))
                continue
        else:
            value, pos = _read_scalar(text, pos)

        # Store the finished value, closing every container it completes
        while True:
            if not stack:
                end = _skip_ws(text, pos)
                if end != len(text):
                    raise json.JSONDecodeError("Extra data", text, end)
                return value

            container, key = stack[-1]
            if isinstance(container, dict):
                container[key] = value
            else:
                container.append(value)

            pos = _skip_ws(text, pos)
            ch = text[pos:pos + 1]
            if ch == ",":
                pos = _skip_ws(text, pos + 1)
                if isinstance(container, dict):
                    key, pos = _read_key(text, pos)
                    stack[-1] = (container, key)
                break

            closer = "}" if isinstance(container, dict) else "]"
            if ch != closer:
                raise json.JSONDecodeError(f"Expecting ',' or '{closer}'", text, pos)
            pos += 1
            stack.pop()
            value = container


def _skip_ws(text: str, pos: int) -> int:
    return _WHITESPACE.match(text, pos).end()


def _read_key(text: str, pos: int) -> Tuple[str, int]:
    """Read an object key and its colon, returning the position of the value."""
    if not text.startswith('"', pos):
        raise json.JSONDecodeError("Expecting property name enclosed in double quotes", text, pos)
    key, pos = scanstring(text, pos + 1)
    pos = _skip_ws(text, pos)
    if not text.startswith(":", pos):
        raise json.JSONDecodeError("Expecting ':' delimiter", text, pos)
    return key, _skip_ws(text, pos + 1)


def _read_scalar(text: str, pos: int) -> Tuple[Any, int]:
    if text.startswith('"', pos):
        return scanstring(text, pos + 1)

    for literal, value in _LITERALS.items():
        if text.startswith(literal, pos):
            return value, pos + len(literal)

    match = _NUMBER.match(text, pos)
    if match is None:
        raise json.JSONDecodeError("Expecting value", text, pos)
    integer, fraction, exponent = match.groups()
    if fraction or exponent:
        return float(integer + (fraction or "") + (exponent or "")), match.end()
    return int(integer), match.end()


def _node_from_fields(raw: Any) -> Node:
    """Validate one exported object and build a detached node from it."""
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid node: expected an object, received {type(raw).__name__}.")

    node_id = raw.get("id")
    isolated = raw.get("isolatedSize")
    total = raw.get("totalSize")
    if not isinstance(node_id, str):
        raise ValueError("Invalid node: 'id' must be a string.")
    if not isinstance(isolated, int) or not isinstance(total, int):
        raise ValueError(f"Invalid sizes for node '{node_id}': expected integers.")

    return Node(node_id, isolated_size=isolated, total_size=total, probed=True)
