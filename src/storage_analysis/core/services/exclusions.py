from __future__ import annotations

"""
Excluded Path Registry.

Keeps the set of paths skipped during traversal. The set is shared by all
discovery workers, so every access goes through a lock. Entries match by
string prefix: excluding 'C:\\Windows' also skips everything below it.
The registry is persisted as a newline-delimited text file between runs.
"""

import logging
import os
import threading
from typing import Iterable, List, Optional, Set

from storage_analysis.infra.fs import get_system_dir, safe_mkdir

logger = logging.getLogger(__name__)


class ExclusionSet:
    """
    Thread-safe, append-only collection of excluded path prefixes.

    Remembers which entries were added after loading so that the run summary
    can report newly excluded paths.
    """

    def __init__(self, paths: Optional[Iterable[str]] = None) -> None:
        self._lock = threading.Lock()
        self._paths: List[str] = []
        self._known: Set[str] = set()
        self._added: List[str] = []

        for p in paths or []:
            self._insert(p)

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._known

    def add(self, path: str) -> bool:
        """
        Record a new exclusion.

        Returns:
            bool: True if the path was not already excluded verbatim.
        """
        with self._lock:
            inserted = self._insert(path)
            if inserted:
                self._added.append(path)
            return inserted

    def is_excluded(self, path: str) -> bool:
        """Return True if any recorded entry is a prefix of the path."""
        with self._lock:
            return any(path.startswith(prefix) for prefix in self._paths)

    def snapshot(self) -> List[str]:
        """Return the entries in insertion order."""
        with self._lock:
            return list(self._paths)

    @property
    def added(self) -> List[str]:
        """Entries recorded through add() since construction."""
        with self._lock:
            return list(self._added)

    def _insert(self, path: str) -> bool:
        """Append an entry. Caller must hold the lock (or be the constructor)."""
        if not path or path in self._known:
            return False
        self._known.add(path)
        self._paths.append(path)
        return True


# -----------------------------------------------------------------------------
# PERSISTENCE
# -----------------------------------------------------------------------------

def default_exclusions() -> List[str]:
    """Entries used when no exclusion file exists yet."""
    return [get_system_dir()]


def load_exclusions(file_path: str) -> ExclusionSet:
    """
    Load the exclusion registry from a newline-delimited file.

    A missing file is created with the default entries. An unreadable file
    is reported and replaced in memory by the defaults.

    Args:
        file_path: Location of the exclusion file.

    Returns:
        ExclusionSet: The loaded registry.
    """
    if not os.path.exists(file_path):
        exclusions = ExclusionSet(default_exclusions())
        save_exclusions(file_path, exclusions)
        logger.debug(f"Exclusion list created at {file_path}")
        return exclusions

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            lines = [line.strip() for line in f]
    except OSError as e:
        logger.error(f"Failed to read exclusion list '{file_path}': {e}. Using defaults.")
        return ExclusionSet(default_exclusions())

    exclusions = ExclusionSet(line for line in lines if line)
    logger.debug(f"Loaded {len(exclusions)} excluded paths from {file_path}")
    return exclusions


def save_exclusions(file_path: str, exclusions: ExclusionSet) -> bool:
    """
    Write the registry back to disk, one path per line.

    Returns:
        bool: True if the file was written.
    """
    parent = os.path.dirname(os.path.abspath(file_path))
    ok, err = safe_mkdir(parent)
    if not ok:
        logger.error(f"Could not save excluded directory list. ({err})")
        return False

    try:
        with open(file_path, "w", encoding="utf-8") as f:
            for path in exclusions.snapshot():
                f.write(f"{path}\n")
    except OSError as e:
        logger.error(f"Could not save excluded directory list. ({e})")
        return False

    logger.debug(f"Saved {len(exclusions)} excluded paths to {file_path}")
    return True
