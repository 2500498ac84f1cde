from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and
merging of configuration sources (defaults, persistent storage, and CLI
overrides), exclusion list handling, analysis execution, and rendering.
"""

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from storage_analysis.core.export.json_exporter import export_to_json
from storage_analysis.core.pipeline.engine import run_analysis
from storage_analysis.core.pipeline.validator import validate_config
from storage_analysis.core.render.tree_renderer import format_bytes, print_tree
from storage_analysis.core.services.exclusions import (
    ExclusionSet,
    load_exclusions,
    save_exclusions,
)
from storage_analysis.domain.analysis_models import AnalysisResult
from storage_analysis.domain.config import get_default_config, load_config, save_config
from storage_analysis.domain.tree_models import child_with_most_children, path_from_node
from storage_analysis.infra.fs import normalize_path
from storage_analysis.infra.logging import LoggingConfig, configure_logging, get_logger
from storage_analysis.interface.cli import args as cli_args

logger = get_logger(__name__)

SUMMARY_STYLE = "#32CD32"
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 invalid arguments,
             130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase (exits with status 2 on malformed input)
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Resolve configuration (Default vs Persistent state) and merge overrides
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    conf, warnings = validate_config(raw_conf, strict=False)

    # 3. Logging bootstrap (console stderr, optional rotating file)
    configure_logging(LoggingConfig.for_cli(args.debug, conf["log_file"]))

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    # 4. Pre-flight input verification
    root_path = normalize_path(args.root, os.getcwd())
    if not os.path.isdir(root_path):
        parser.print_usage(sys.stderr)
        print(f"ERROR: Invalid directory path: {root_path}", file=sys.stderr)
        return 2

    if args.save_config:
        save_config(conf)

    # 5. Analysis, rendering and export; exclusions are persisted on every exit path
    exclusions = load_exclusions(conf["exclusion_file"])
    console = Console(no_color=not conf["color"], highlight=False)
    try:
        return _run(args, conf, root_path, exclusions, console)
    except KeyboardInterrupt:
        logger.warning("Interrupted. Exiting...")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.critical(f"Analysis failed: {e}", exc_info=True)
        print(f"ERROR: Analysis failed: {e}", file=sys.stderr)
        return 1
    finally:
        save_exclusions(conf["exclusion_file"], exclusions)


def _run(
        args: argparse.Namespace,
        conf: Dict[str, Any],
        root_path: str,
        exclusions: ExclusionSet,
        console: Console,
) -> int:
    """Run the analysis and present its result."""
    print_depth = args.print_depth or None
    sort_depth = None if print_depth is None else print_depth - 1

    result = run_analysis(
        root_path,
        args.depth,
        exclusions=exclusions,
        chunk_size=conf["chunk_size"],
        max_workers=conf["max_workers"],
        sort_depth=sort_depth,
    )
    if not result.ok or result.root is None:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return 1

    print_tree(result.root, print_depth, console)
    _print_summary(result, console)

    if conf["export_path"]:
        if not export_to_json(result.root, conf["export_path"], conf["export_depth"] or None):
            return 1

    return 0

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys with a non-None value are merged.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    keys_to_merge = [
        "chunk_size", "max_workers", "exclusion_file",
        "color", "export_path", "export_depth", "log_file",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_summary(result: AnalysisResult, console: Console) -> None:
    """Print the closing scan statistics."""
    console.print()
    console.print(f"Total directories scanned: [{SUMMARY_STYLE}]{result.directories_scanned}[/]")
    console.print(f"Total Size: [{SUMMARY_STYLE}]{format_bytes(result.total_size)}[/]")

    busiest = child_with_most_children(result.root)
    if busiest.has_children:
        location = result.root_path
        if busiest is not result.root:
            location = os.path.join(result.root_path, path_from_node(busiest))
        console.print(
            f"Most subdirectories: [{SUMMARY_STYLE}]{escape(location)}[/] ({len(busiest)})"
        )
    if result.new_exclusions:
        console.print(f"Newly excluded paths: [{SUMMARY_STYLE}]{len(result.new_exclusions)}[/]")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
