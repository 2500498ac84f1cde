from __future__ import annotations

"""
Integration tests for the analysis pipeline.

Runs real scans over generated hierarchies and checks the produced tree
against independent measurements, then feeds it through export and
rendering.
"""

import os
from pathlib import Path

from storage_analysis.core.export.json_exporter import export_to_json, load_from_json
from storage_analysis.core.pipeline.engine import run_analysis
from storage_analysis.core.render.tree_renderer import render_tree_lines
from storage_analysis.core.services.exclusions import ExclusionSet, load_exclusions
from storage_analysis.domain.tree_models import iter_nodes


def _disk_usage(root: Path) -> int:
    """Reference measurement using os.walk."""
    total = 0
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            total += os.path.getsize(os.path.join(dirpath, name))
    return total


def _build_wide_tree(root: Path, fanout: int, levels: int) -> None:
    frontier = [root]
    for level in range(levels):
        next_frontier = []
        for folder in frontier:
            for i in range(fanout):
                child = folder / f"dir_{level}_{i}"
                child.mkdir(parents=True)
                (child / "data.bin").write_bytes(b"x" * (i + 1) * (level + 1))
                next_frontier.append(child)
        frontier = next_frontier


def test_matches_reference_measurement(tmp_path: Path) -> None:
    root = tmp_path / "wide"
    root.mkdir()
    _build_wide_tree(root, fanout=4, levels=3)

    result = run_analysis(str(root), 3, chunk_size=7, max_workers=4)

    assert result.ok, result.error
    assert result.total_size == _disk_usage(root)
    assert result.directories_scanned == 1 + 4 + 16 + 64


def test_exclusion_file_controls_the_scan(sample_tree: Path, tmp_path: Path) -> None:
    exclusion_file = tmp_path / "excluded.txt"
    exclusion_file.write_text(f"{sample_tree / 'big'}\n", encoding="utf-8")

    result = run_analysis(
        str(sample_tree), 10, exclusions=load_exclusions(str(exclusion_file)), max_workers=2
    )

    assert result.ok
    assert [c.id for c in result.root] == ["small", "empty"]
    assert result.total_size == 15


def test_export_round_trip_preserves_rendering(sample_tree: Path, tmp_path: Path) -> None:
    result = run_analysis(str(sample_tree), 10, exclusions=ExclusionSet(), max_workers=2)
    target = tmp_path / "tree.json"

    assert export_to_json(result.root, str(target))
    loaded = load_from_json(str(target))

    assert [line.plain for line in render_tree_lines(loaded)] == [
        line.plain for line in render_tree_lines(result.root)
    ]
    assert sum(1 for _ in iter_nodes(loaded)) == result.directories_scanned
