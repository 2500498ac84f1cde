from __future__ import annotations

"""
Directory Size Probe.

Measures the isolated size of a directory: the sum of the lengths of the
regular files stored directly inside it. Subdirectories are measured by
their own probes. Failures are lossy but never fatal: an unreadable
directory simply contributes zero bytes.
"""

import logging
import os

from storage_analysis.infra.fs import is_link_path

logger = logging.getLogger(__name__)


def probe_isolated_size(path: str) -> int:
    """
    Sum the byte lengths of the files directly inside a directory.

    Symbolic links to files are not followed. A directory that is itself a
    link (or a Windows junction) measures zero bytes, since its target is
    measured where it really lives. Entries that cannot be stat'ed are
    skipped individually. This function never touches the exclusion
    registry; traversal policy belongs to the catalog.

    Args:
        path: Directory to measure.

    Returns:
        int: Isolated size in bytes (0 for links, empty or unreadable directories).
    """
    if is_link_path(path):
        logger.debug(f"Link not measured: {path}")
        return 0

    total = 0
    try:
        with os.scandir(path) as it:
            for entry in it:
                try:
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    total += entry.stat(follow_symlinks=False).st_size
                except OSError as e:
                    logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
    except PermissionError:
        logger.warning(f"Unauthorized Access (Not included): {path}")
        return 0
    except FileNotFoundError:
        logger.warning(f"Could not find a part of the path (Not included): {path}")
        return 0
    except OSError as e:
        logger.error(f"Exception (Not included): {path} ({e})")
        return 0

    return total
