from __future__ import annotations

"""
Logging Handler Factories.

Every handler created here is tagged so that reconfiguration and shutdown
only remove what this package installed, leaving handlers added by the
host (pytest's caplog, embedding applications) untouched.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

# Attribute marking handlers owned by this package
_HANDLER_TAG_ATTR: str = "_storage_analysis_handler"


def tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def is_tagged(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def build_console_handler(level: int, fmt: str) -> logging.Handler:
    """Create a tagged stderr handler."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return tag_handler(handler)


def build_file_handler(
        log_file: str,
        level: int,
        fmt: str,
        datefmt: str,
        max_bytes: int,
        backup_count: int,
) -> Optional[logging.Handler]:
    """
    Create a tagged size-rotated file handler.

    Args:
        log_file: Target path; missing parent directories are created.
        level: Numeric logging level.
        fmt: Record format.
        datefmt: Timestamp format.
        max_bytes: Rollover threshold in bytes.
        backup_count: Number of archived segments to keep.

    Returns:
        Optional[logging.Handler]: The handler, or None if the file cannot be opened.
    """
    try:
        parent = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(parent, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot write log file '{log_file}': {e}\n")
        return None

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return tag_handler(handler)
