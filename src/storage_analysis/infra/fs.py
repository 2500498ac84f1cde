from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, link detection, and directory
utilities. Acts as an abstraction over the 'os' and 'stat' modules to ensure
uniform behavior across Windows and Unix-like systems.
"""

import os
import stat
from typing import List, Optional, Tuple

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "StorageAnalysis"
UNIX_APP_DIR_NAME = ".storage_analysis"

# Reparse points cover Windows symlinks and junctions
_REPARSE_POINT = getattr(stat, "FILE_ATTRIBUTE_REPARSE_POINT", 0x400)

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/StorageAnalysis
    - Linux/Mac: ~/.storage_analysis

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    # Windows specific resolution
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    # Idempotent directory creation
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def get_system_dir() -> str:
    """
    Return the operating system directory skipped by default during scans.

    Returns:
        str: '%SystemRoot%' on Windows, '/proc' on Unix-like systems.
    """
    if os.name == "nt":
        return os.environ.get("SystemRoot", r"C:\Windows")
    return "/proc"


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.
    Trailing separators are stripped so that the result can be split into
    segments consistently (drive and filesystem roots are preserved).

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def split_path_segments(path: str, sep: str = os.sep) -> List[str]:
    """
    Decompose a path into ordered tree segments.

    A leading separator becomes its own segment so that absolute POSIX paths
    keep a visible root ('/home/user' -> ['/', 'home', 'user']). Empty
    segments produced by doubled or trailing separators are dropped.

    Args:
        path: Path to decompose.
        sep: Separator to split on.

    Returns:
        List[str]: Segments from the outermost to the innermost.
    """
    segments = [part for part in path.split(sep) if part]
    if path.startswith(sep) and not path.startswith(sep * 2):
        segments.insert(0, sep)
    return segments

# -----------------------------------------------------------------------------
# FILESYSTEM INSPECTION API
# -----------------------------------------------------------------------------

def is_link_entry(entry: os.DirEntry) -> bool:
    """
    Detect directory entries that must not be descended into.

    Covers symbolic links and, on Windows, reparse points such as junctions.

    Args:
        entry: Entry produced by os.scandir.

    Returns:
        bool: True if the entry is a link-like directory.
    """
    if entry.is_symlink():
        return True
    try:
        st = entry.stat(follow_symlinks=False)
    except OSError:
        return False
    return bool(getattr(st, "st_file_attributes", 0) & _REPARSE_POINT)


def is_link_path(path: str) -> bool:
    """
    Path-based counterpart of is_link_entry.

    Returns:
        bool: True if the path itself is a symbolic link or reparse point.
    """
    try:
        st = os.lstat(path)
    except OSError:
        return False
    if stat.S_ISLNK(st.st_mode):
        return True
    return bool(getattr(st, "st_file_attributes", 0) & _REPARSE_POINT)


def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)
