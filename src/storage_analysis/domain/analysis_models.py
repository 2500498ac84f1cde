from __future__ import annotations

"""
Analysis Domain Data Models.

Defines the result structure and factory functions used to communicate a
completed scan between the analysis engine and the interface layer.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from storage_analysis.domain.tree_models import Node

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisResult:
    """
    Unified result object of a complete analysis run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        root_path: Normalized directory that was scanned.
        depth: Discovery depth bound used for the scan.
        root: Aggregated and sorted tree rooted at the scanned directory.
        directories_scanned: Number of catalogued directories.
        total_size: Total size of the scanned directory.
        new_exclusions: Paths excluded during this run after access failures.
        timings: Duration in seconds of each phase, keyed by phase name.
    """
    ok: bool
    error: str

    root_path: str
    depth: int

    root: Optional[Node] = None
    directories_scanned: int = 0
    total_size: int = 0

    new_exclusions: List[str] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(error: str, root_path: str, depth: int) -> AnalysisResult:
    """Create a failed analysis result instance."""
    return AnalysisResult(ok=False, error=error, root_path=root_path, depth=depth)


def create_success_result(
        root_path: str,
        depth: int,
        root: Node,
        directories_scanned: int,
        new_exclusions: Optional[List[str]] = None,
        timings: Optional[Dict[str, float]] = None,
) -> AnalysisResult:
    """
    Create a successful analysis result instance.

    Args:
        root_path: Normalized directory that was scanned.
        depth: Discovery depth bound.
        root: Aggregated tree for the scanned directory.
        directories_scanned: Number of catalogued directories.
        new_exclusions: Paths excluded during the run.
        timings: Phase durations in seconds.

    Returns:
        AnalysisResult: An immutable success result object.
    """
    return AnalysisResult(
        ok=True,
        error="",
        root_path=root_path,
        depth=depth,
        root=root,
        directories_scanned=directories_scanned,
        total_size=root.total_size,
        new_exclusions=new_exclusions or [],
        timings=timings or {},
    )
