from __future__ import annotations

"""
Core analysis pipeline.

This module coordinates the whole storage analysis:
1. Validates the scan root and the depth bound.
2. Catalogues directories (parallel, one unit per top-level child).
3. Probes isolated sizes in fixed-size batches (parallel).
4. Merges the per-path fragments into one tree.
5. Aggregates total sizes bottom-up.
6. Detaches the scanned directory from the merge sentinel and sorts it.

The two parallel phases never overlap: each one ends with a wait-all barrier.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from storage_analysis.core.scanning.catalog import catalog_directories
from storage_analysis.core.scanning.chunked import compute_fragments
from storage_analysis.core.services.exclusions import ExclusionSet
from storage_analysis.core.tree.aggregator import calculate_total_size
from storage_analysis.core.tree.merger import merge_fragments
from storage_analysis.core.tree.sorter import sort_children
from storage_analysis.domain.analysis_models import (
    AnalysisResult,
    create_error_result,
    create_success_result,
)
from storage_analysis.domain.config import DEFAULT_CHUNK_SIZE, default_max_workers
from storage_analysis.domain.tree_models import ROOT_ID, Node, get_node_from_path
from storage_analysis.infra.fs import is_link_path, normalize_path

logger = logging.getLogger(__name__)


def run_analysis(
        root_path: str,
        depth: int,
        *,
        exclusions: Optional[ExclusionSet] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_workers: Optional[int] = None,
        sort_depth: Optional[int] = None,
) -> AnalysisResult:
    """
    Execute the full analysis of a directory.

    Args:
        root_path: Directory to analyze.
        depth: Number of levels below the root to enumerate (>= 1).
        exclusions: Registry of excluded prefixes; appended on access denial.
        chunk_size: Number of directories probed per worker task.
        max_workers: Upper bound of concurrent worker tasks per phase.
        sort_depth: Levels to sort below the root; None sorts the whole tree.

    Returns:
        AnalysisResult: Object containing status, tree and metrics.
    """
    base_path = normalize_path(root_path, os.getcwd())
    if exclusions is None:
        exclusions = ExclusionSet()
    if max_workers is None:
        max_workers = default_max_workers()

    if not os.path.isdir(base_path):
        msg = f"Invalid directory path: {base_path}"
        logger.error(msg)
        return create_error_result(msg, base_path, depth)
    if depth < 1:
        msg = f"Depth must be greater than 0 (received {depth})."
        logger.error(msg)
        return create_error_result(msg, base_path, depth)

    # Links are only measured through their target
    if is_link_path(base_path):
        base_path = os.path.realpath(base_path)
        logger.info(f"Scan root is a link, analyzing its target: {base_path}")

    logger.info(f"Analyzing {base_path} (depth {depth}, {max_workers} workers)")
    timings: Dict[str, float] = {}

    with _phase("catalog", timings, "All directories fetched."):
        dirs = catalog_directories(base_path, depth, exclusions, max_workers=max_workers)

    with _phase("combine", timings, "Directory data combined."):
        fragments = compute_fragments(dirs, chunk_size=chunk_size, max_workers=max_workers)
        tree = merge_fragments(Node(ROOT_ID), fragments)

    with _phase("aggregate", timings, "Calculated total size for each directory."):
        calculate_total_size(tree)

    scan_root = get_node_from_path(tree, base_path)
    if scan_root is None:
        msg = f"Scanned directory missing from the merged tree: {base_path}"
        logger.error(msg)
        return create_error_result(msg, base_path, depth)
    scan_root.detach()

    with _phase("sort", timings, "Sorted tree structure by total size."):
        sort_children(scan_root, sort_depth)

    new_exclusions = exclusions.added
    if new_exclusions:
        logger.info(f"{len(new_exclusions)} paths excluded during this run.")

    return create_success_result(
        root_path=base_path,
        depth=depth,
        root=scan_root,
        directories_scanned=len(dirs),
        new_exclusions=new_exclusions,
        timings=timings,
    )


@contextmanager
def _phase(name: str, timings: Dict[str, float], done_message: str) -> Iterator[None]:
    """Time a pipeline phase and log its completion."""
    start = time.perf_counter()
    yield
    elapsed = time.perf_counter() - start
    timings[name] = elapsed
    logger.info(f"{done_message} ({elapsed:.2f}s)")
