from __future__ import annotations

"""
Chunked Size Computation.

Splits the catalogued directories into fixed-size batches and probes each
batch on its own worker. Every probed path becomes a single-branch tree
fragment; the fragments are later folded into one tree by the merger.
"""

import logging
import os
from typing import Iterator, List, Sequence, TypeVar

from storage_analysis.core.scanning.pool import run_parallel
from storage_analysis.core.scanning.probe import probe_isolated_size
from storage_analysis.domain.config import DEFAULT_CHUNK_SIZE
from storage_analysis.domain.tree_models import Node, create_node_from_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk_by(items: Sequence[T], chunk_size: int) -> Iterator[List[T]]:
    """
    Yield consecutive slices of at most 'chunk_size' items.

    Raises:
        ValueError: If chunk_size is not positive.
    """
    if chunk_size < 1:
        raise ValueError(f"Chunk size must be positive (received {chunk_size}).")
    for start in range(0, len(items), chunk_size):
        yield list(items[start:start + chunk_size])


def compute_fragments(
        dirs: Sequence[str],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_workers: int,
        sep: str = os.sep,
) -> List[Node]:
    """
    Probe every directory and build one fragment per path.

    Batches run concurrently and the call returns only once all of them have
    completed. A batch that fails unexpectedly is logged and contributes no
    fragments.

    Args:
        dirs: Directory paths to measure.
        chunk_size: Number of paths handled by one worker task.
        max_workers: Upper bound of concurrently running batches.
        sep: Separator used to split paths into segments.

    Returns:
        List[Node]: Detached fragments, in the order of 'dirs'.
    """
    batches = list(chunk_by(dirs, chunk_size))
    logger.debug(f"Probing {len(dirs)} directories in {len(batches)} batches")

    results = run_parallel(
        lambda batch: _probe_batch(batch, sep),
        batches,
        max_workers=max_workers,
        thread_name_prefix="SizeWorker",
        describe=lambda batch: f"batch starting at {batch[0]}",
    )

    fragments: List[Node] = []
    for batch_fragments in results:
        if batch_fragments:
            fragments.extend(batch_fragments)
    return fragments


def _probe_batch(batch: List[str], sep: str) -> List[Node]:
    """Measure each path of a batch and wrap it in a fragment."""
    return [create_node_from_path(path, probe_isolated_size(path), sep) for path in batch]
