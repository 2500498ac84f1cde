from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into configuration overrides.
"""

import argparse
from typing import Any, Dict

USAGE_EXAMPLE = 'Example: storage-analysis "/home/user/Games" 2 0'

# -----------------------------------------------------------------------------
# ARGUMENT TYPES
# -----------------------------------------------------------------------------

def _positive_int(value: str) -> int:
    """Parse an integer >= 1."""
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'")
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be greater than 0")
    return parsed


def _non_negative_int(value: str) -> int:
    """Parse an integer >= 0."""
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'")
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be greater than or equal to 0")
    return parsed

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the storage-analysis CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="storage-analysis",
        description="Compute and display the recursive storage usage of a directory tree.",
        epilog=USAGE_EXAMPLE,
    )

    # --- Scan Target ---
    p.add_argument("root", help="Directory to analyze.")
    p.add_argument(
        "depth",
        type=_positive_int,
        help="Number of directory levels to enumerate below the root (>= 1).",
    )
    p.add_argument(
        "print_depth",
        type=_non_negative_int,
        help="Number of levels to display (0 = unlimited).",
    )

    # --- Scan Tuning ---
    p.add_argument(
        "--exclusions",
        dest="exclusion_file",
        default=None,
        help="Newline-delimited list of excluded paths (read and updated).",
    )
    p.add_argument(
        "--chunk-size",
        dest="chunk_size",
        type=_positive_int,
        default=None,
        help="Directories probed per worker task.",
    )
    p.add_argument(
        "--workers",
        dest="max_workers",
        type=_positive_int,
        default=None,
        help="Maximum number of concurrent worker threads.",
    )

    # --- Output ---
    p.add_argument(
        "--export",
        dest="export_path",
        default=None,
        help="Write the tree as JSON to this file.",
    )
    p.add_argument(
        "--export-depth",
        dest="export_depth",
        type=_non_negative_int,
        default=None,
        help="Levels included in the JSON export (0 = unlimited).",
    )
    p.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output.",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write diagnostics to this file (rotated).",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective options as the new defaults.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Options left at their default (None) are mapped to None so that the
    merge step keeps the configured value.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "exclusion_file": args.exclusion_file,
        "chunk_size": args.chunk_size,
        "max_workers": args.max_workers,
        "export_path": args.export_path,
        "export_depth": args.export_depth,
        "log_file": args.log_file,
    }

    if args.no_color:
        overrides["color"] = False

    return overrides
