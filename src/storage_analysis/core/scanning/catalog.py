from __future__ import annotations

"""
Directory Catalog.

Enumerates every directory reachable below a scan root within a depth
bound. Each immediate child of the root is explored by its own worker
unit; units walk their subtree with an explicit stack so deep hierarchies
cannot exhaust the interpreter stack.

Traversal policy:
- Excluded paths (prefix match) are neither reported nor descended into.
- Links to directories are reported once and never descended into.
- Access denied: the path is skipped and recorded as excluded.
- Not found: the path is skipped silently (the tree changed mid-scan).
- Any other failure: the path is skipped and the error logged.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from storage_analysis.core.scanning.pool import run_parallel
from storage_analysis.core.services.exclusions import ExclusionSet
from storage_analysis.domain.errors import InvalidArgumentError
from storage_analysis.infra.fs import is_link_entry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    """A discovered directory and whether it is a link that must not be descended."""
    path: str
    is_link: bool = False


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def catalog_directories(
        root_path: str,
        depth: int,
        exclusions: ExclusionSet,
        *,
        max_workers: int,
) -> List[str]:
    """
    Collect the directories within 'depth' levels below the root.

    The root itself comes first so that its own files are measured. The
    remaining paths are grouped per top-level child, each group in
    pre-order with siblings sorted by name.

    Args:
        root_path: Absolute directory to scan.
        depth: Number of levels below the root to enumerate (>= 1).
        exclusions: Shared registry of excluded prefixes, appended on access denial.
        max_workers: Upper bound of concurrently explored subtrees.

    Returns:
        List[str]: Directory paths, root first.

    Raises:
        InvalidArgumentError: If depth is lower than 1.
    """
    if depth < 1:
        raise InvalidArgumentError(f"Depth must be greater than 0 (received {depth}).")

    top_level = list_subdirectories(root_path, exclusions) or []
    logger.debug(f"{len(top_level)} top-level directories under {root_path}")

    groups = run_parallel(
        lambda entry: explore_subtree(entry, depth - 1, exclusions),
        top_level,
        max_workers=max_workers,
        thread_name_prefix="CatalogWorker",
        describe=lambda entry: entry.path,
    )

    dirs: List[str] = [root_path]
    for group in groups:
        if group:
            dirs.extend(group)

    # Exclusions recorded by one unit may cover paths reported by another
    return [dirs[0]] + [d for d in dirs[1:] if not exclusions.is_excluded(d)]


def explore_subtree(start: DirectoryEntry, remaining: int, exclusions: ExclusionSet) -> List[str]:
    """
    Enumerate a directory and its descendants up to 'remaining' further levels.

    Args:
        start: Directory the unit is responsible for (always reported).
        remaining: Levels below 'start' that may still be enumerated.
        exclusions: Shared registry of excluded prefixes.

    Returns:
        List[str]: 'start' followed by its descendants in pre-order.
    """
    found: List[str] = []
    stack = [(start, remaining)]

    while stack:
        entry, levels_left = stack.pop()
        found.append(entry.path)

        if entry.is_link or levels_left <= 0:
            continue
        if exclusions.is_excluded(entry.path):
            continue

        children = list_subdirectories(entry.path, exclusions)
        if not children:
            continue
        stack.extend((child, levels_left - 1) for child in reversed(children))

    return found


def list_subdirectories(path: str, exclusions: ExclusionSet) -> Optional[List[DirectoryEntry]]:
    """
    List the immediate subdirectories of a path, sorted by name.

    Excluded children are filtered out. Failures follow the traversal policy
    described in the module docstring.

    Returns:
        Optional[List[DirectoryEntry]]: Children, or None if the path could not be read.
    """
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except PermissionError:
        logger.warning(f"Unauthorized Access (Not included): {path}")
        exclusions.add(path)
        return None
    except FileNotFoundError:
        logger.warning(f"Could not find a part of the path (Not included): {path}")
        return None
    except OSError as e:
        logger.error(f"Exception (Not included): {path} ({e})")
        return None

    children: List[DirectoryEntry] = []
    for entry in entries:
        try:
            if not entry.is_dir():
                continue
            is_link = is_link_entry(entry)
        except OSError as e:
            logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
            continue

        if exclusions.is_excluded(entry.path):
            logger.debug(f"Excluded: {entry.path}")
            continue
        children.append(DirectoryEntry(entry.path, is_link))

    return children
