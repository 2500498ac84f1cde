from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for configuration dictionaries and sample directory trees.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from storage_analysis.domain.tree_models import Node, populate_node_from_path  # noqa: E402
from storage_analysis.infra.logging import shutdown_logging  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict(tmp_path: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'storage_analysis.domain.config'.

    Returns:
        Dict[str, Any]: A sample configuration dictionary.
    """
    return {
        # Scanning
        "chunk_size": 2,
        "max_workers": 4,
        "exclusion_file": str(tmp_path / "excluded.txt"),

        # Output
        "color": False,
        "export_path": "",
        "export_depth": 0,

        # Diagnostics
        "log_file": "",
    }


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    Create a small directory hierarchy with known file sizes.

    Structure (isolated sizes in bytes):
    /scan            5
      /big          100
        /deep        30
          /deeper     7
      /small         10
      /empty          0
    """
    root = tmp_path / "scan"
    (root / "big" / "deep" / "deeper").mkdir(parents=True)
    (root / "small").mkdir()
    (root / "empty").mkdir()

    (root / "top.txt").write_bytes(b"x" * 5)
    (root / "big" / "a.bin").write_bytes(b"x" * 60)
    (root / "big" / "b.bin").write_bytes(b"x" * 40)
    (root / "big" / "deep" / "c.bin").write_bytes(b"x" * 30)
    (root / "big" / "deep" / "deeper" / "d.bin").write_bytes(b"x" * 7)
    (root / "small" / "e.bin").write_bytes(b"x" * 10)

    return root


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Clean up root logger handlers before and after a test."""
    shutdown_logging()
    yield
    shutdown_logging()


@pytest.fixture
def build_tree() -> Callable[[Node, List[str], List[int]], Node]:
    """
    Return a helper that inserts '/'-separated (path, size) pairs below a node.

    Returns:
        Callable: build(node, paths, sizes) -> node
    """
    def _build(node: Node, paths: List[str], sizes: List[int]) -> Node:
        assert len(paths) == len(sizes), "Paths and sizes must have the same length"
        for path, size in zip(paths, sizes):
            populate_node_from_path(node, path, size, sep="/")
        return node

    return _build
