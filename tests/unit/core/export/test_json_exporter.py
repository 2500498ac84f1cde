from __future__ import annotations

"""
Unit tests for the JSON Tree Export.

Verifies:
1. Output is valid JSON with the expected field names and child order.
2. The depth cutoff writes empty children arrays.
3. Exported files can be loaded back into an equivalent tree.
4. Deeply nested exports load back without recursion.
5. Malformed input is rejected.
"""

import json
from pathlib import Path

import pytest

from storage_analysis.core.export.json_exporter import (
    export_to_json,
    load_from_json,
    parse_json_document,
    to_json,
    tree_from_dict,
)
from storage_analysis.core.tree.aggregator import calculate_total_size
from storage_analysis.domain.tree_models import Node, get_node_from_path, iter_nodes


@pytest.fixture
def tree(build_tree) -> Node:
    root = build_tree(Node("scan"), ["b", "a", "a/x"], [1, 2, 3])
    calculate_total_size(root)
    return root


def test_to_json_structure(tree: Node) -> None:
    data = json.loads(to_json(tree))

    assert list(data.keys()) == ["id", "isolatedSize", "totalSize", "children"]
    assert data["id"] == "scan"
    assert data["totalSize"] == 6
    assert [c["id"] for c in data["children"]] == ["b", "a"]
    assert data["children"][1]["children"][0] == {
        "id": "x", "isolatedSize": 3, "totalSize": 3, "children": []
    }


def test_depth_cutoff(tree: Node) -> None:
    data = json.loads(to_json(tree, depth=1))

    a = data["children"][1]
    assert a["id"] == "a"
    assert a["totalSize"] == 5
    assert a["children"] == []


def test_depth_zero_exports_only_the_top_node(tree: Node) -> None:
    data = json.loads(to_json(tree, depth=0))
    assert data["children"] == []


def test_special_characters_in_ids_are_escaped() -> None:
    node = Node('we"ird\\name ✓')
    data = json.loads(to_json(node))
    assert data["id"] == 'we"ird\\name ✓'


def test_export_and_load(tmp_path: Path, tree: Node) -> None:
    target = tmp_path / "out" / "tree.json"
    original = tree

    assert export_to_json(original, str(target)) is True
    loaded = load_from_json(str(target))

    assert [(n.id, n.isolated_size, n.total_size) for n in iter_nodes(loaded)] == [
        (n.id, n.isolated_size, n.total_size) for n in iter_nodes(original)
    ]
    assert all(n.probed for n in iter_nodes(loaded))


def test_deep_chain_exports_without_recursion(build_tree) -> None:
    root = build_tree(Node("r"), ["/".join(["d"] * 3000)], [1])
    text = to_json(root)
    assert text.count('"id": "d"') == 3000


def test_deep_chain_round_trip(build_tree, tmp_path: Path) -> None:
    """A 10,000-level chain survives export and load at unlimited depth."""
    deep = "/".join(f"d{i}" for i in range(10000))
    root = build_tree(Node("r"), [deep], [5])
    calculate_total_size(root)
    target = tmp_path / "deep.json"

    assert export_to_json(root, str(target)) is True
    loaded = load_from_json(str(target))

    nodes = list(iter_nodes(loaded))
    assert len(nodes) == 10001
    assert all(n.total_size == 5 for n in nodes)
    leaf = get_node_from_path(loaded, deep, sep="/")
    assert leaf is not None
    assert leaf.isolated_size == 5
    assert not leaf.has_children


def test_parse_json_document_matches_json_module() -> None:
    text = (
        ' {"a": [1, -2.5, 3e2, true, false, null], "b": {}, "c": [],'
        ' "d": "esc\\"aped \\u00e9", "e": [{"f": [[]]}]} '
    )
    assert parse_json_document(text) == json.loads(text)


@pytest.mark.parametrize(
    "text",
    ["", "{", "[1, 2", '{"a" 1}', "[1,]", "{} {}", "[tru]", '{1: 2}', "[1 2]"],
)
def test_parse_json_document_rejects_malformed_input(text: str) -> None:
    with pytest.raises(json.JSONDecodeError):
        parse_json_document(text)


def test_tree_from_dict_rejects_bad_fields() -> None:
    with pytest.raises(ValueError):
        tree_from_dict({"id": 1, "isolatedSize": 0, "totalSize": 0})
    with pytest.raises(ValueError):
        tree_from_dict({"id": "a", "isolatedSize": "0", "totalSize": 0})
    with pytest.raises(ValueError):
        tree_from_dict({"id": "a", "isolatedSize": 0, "totalSize": 0, "children": {}})
