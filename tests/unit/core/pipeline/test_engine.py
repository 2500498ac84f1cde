from __future__ import annotations

"""
Unit tests for the core analysis pipeline.

Verifies:
1. Input validation produces error results instead of exceptions.
2. A full run aggregates, detaches and sorts the scanned directory.
3. Phase timings and new exclusions are reported.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from storage_analysis.core.pipeline.engine import run_analysis
from storage_analysis.core.services.exclusions import ExclusionSet
from storage_analysis.core.tree.aggregator import sum_of_all_sizes, sum_of_children_totals
from storage_analysis.domain.tree_models import iter_nodes


def test_invalid_directory_returns_error(tmp_path: Path) -> None:
    result = run_analysis(str(tmp_path / "missing"), 1)

    assert result.ok is False
    assert "Invalid directory path" in result.error
    assert result.root is None


def test_invalid_depth_returns_error(sample_tree: Path) -> None:
    result = run_analysis(str(sample_tree), 0)

    assert result.ok is False
    assert "Depth" in result.error


def test_full_run_totals_and_order(sample_tree: Path) -> None:
    result = run_analysis(str(sample_tree), 10, chunk_size=2, max_workers=4)

    assert result.ok, result.error
    root = result.root
    assert root is not None
    assert root.id == os.path.basename(str(sample_tree))
    assert root.parent is None

    assert result.total_size == 5 + 100 + 30 + 7 + 10
    assert result.directories_scanned == 6
    assert [c.id for c in root] == ["big", "small", "empty"]

    for node in iter_nodes(root):
        assert node.total_size == node.isolated_size + sum_of_children_totals(node)
    assert root.total_size == sum_of_all_sizes(root)


def test_depth_bound_truncates_tree(sample_tree: Path) -> None:
    result = run_analysis(str(sample_tree), 1, max_workers=2)

    assert result.ok
    assert result.total_size == 5 + 100 + 10
    assert all(len(child) == 0 for child in result.root)


def test_result_is_independent_of_chunking(sample_tree: Path) -> None:
    a = run_analysis(str(sample_tree), 10, chunk_size=1, max_workers=1)
    b = run_analysis(str(sample_tree), 10, chunk_size=1000, max_workers=8)

    def shape(result):
        return [(n.id, n.isolated_size, n.total_size) for n in iter_nodes(result.root)]

    assert shape(a) == shape(b)


def test_sort_depth_zero_leaves_grandchildren_unsorted(tmp_path: Path) -> None:
    root = tmp_path / "scan"
    (root / "parent" / "a_small").mkdir(parents=True)
    (root / "parent" / "b_large").mkdir()
    (root / "parent" / "a_small" / "f").write_bytes(b"x")
    (root / "parent" / "b_large" / "f").write_bytes(b"x" * 50)

    shallow = run_analysis(str(root), 5, sort_depth=0, max_workers=1)
    full = run_analysis(str(root), 5, sort_depth=None, max_workers=1)

    assert [c.id for c in shallow.root.get_child("parent")] == ["a_small", "b_large"]
    assert [c.id for c in full.root.get_child("parent")] == ["b_large", "a_small"]


def test_timings_recorded(sample_tree: Path) -> None:
    result = run_analysis(str(sample_tree), 2, max_workers=2)
    assert set(result.timings) == {"catalog", "combine", "aggregate", "sort"}


def test_new_exclusions_reported(sample_tree: Path) -> None:
    denied = str(sample_tree / "small")
    real_scandir = os.scandir

    def fake_scandir(path):
        if str(path) == denied:
            raise PermissionError("denied")
        return real_scandir(path)

    exclusions = ExclusionSet()
    with patch("storage_analysis.core.scanning.catalog.os.scandir", side_effect=fake_scandir):
        result = run_analysis(str(sample_tree), 10, exclusions=exclusions, max_workers=2)

    assert result.ok
    assert result.new_exclusions == [denied]
    assert not result.root.has_child("small")


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="Symlinks require POSIX")
def test_linked_directory_is_not_counted_twice(sample_tree: Path) -> None:
    os.symlink(sample_tree / "big", sample_tree / "alias", target_is_directory=True)

    result = run_analysis(str(sample_tree), 10, max_workers=2)

    assert result.ok, result.error
    alias = result.root.get_child("alias")
    assert alias.isolated_size == 0
    assert alias.total_size == 0
    assert len(alias) == 0
    assert result.total_size == 5 + 100 + 30 + 7 + 10


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="Symlinks require POSIX")
def test_linked_scan_root_is_analyzed_through_its_target(sample_tree: Path, tmp_path: Path) -> None:
    link = tmp_path / "scan_link"
    os.symlink(sample_tree, link, target_is_directory=True)

    result = run_analysis(str(link), 10, max_workers=2)

    assert result.ok, result.error
    assert result.root_path == os.path.realpath(str(sample_tree))
    assert result.total_size == 5 + 100 + 30 + 7 + 10
