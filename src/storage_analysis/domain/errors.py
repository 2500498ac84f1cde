from __future__ import annotations

"""
Domain Error Taxonomy.

Exceptions raised by the analysis engine and its command-line surface.
Recoverable filesystem failures (access denied, vanished paths) are handled
inside the scanning units and never surface as exceptions.
"""


class StorageAnalysisError(Exception):
    """Base class for all application errors."""


class InvalidArgumentError(StorageAnalysisError, ValueError):
    """Raised when run parameters are rejected before any scanning starts."""


class MergeConflictError(StorageAnalysisError):
    """
    Raised when two fragments report different isolated sizes for one path.

    Each catalogued path is probed exactly once, so a conflict indicates a
    programming error (or a concurrent re-scan) rather than a filesystem issue.
    """

    def __init__(self, path: str, existing: int, incoming: int) -> None:
        super().__init__(
            f"Conflicting isolated sizes for '{path}': {existing} != {incoming}"
        )
        self.path = path
        self.existing = existing
        self.incoming = incoming
