from __future__ import annotations

"""
Logging Configuration Model.

Describes how diagnostics are emitted: severity threshold, stderr output
and an optional rotating log file. Scan failures are reported from worker
threads, so the debug formats carry the thread name.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

# Mapping of string identifiers to native logging constants
_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

CONSOLE_FMT = "%(levelname)s | %(message)s"
CONSOLE_DEBUG_FMT = "%(levelname)s | %(threadName)s | %(message)s"
FILE_FMT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem.

    Attributes:
        level: Minimum severity name ('DEBUG', 'INFO', ...). Unknown names map to INFO.
        console: Emit records on stderr.
        log_file: Optional path of a rotating diagnostics file.
        max_bytes: Size of one log segment before rollover.
        backup_count: Number of rolled-over segments kept.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

    @classmethod
    def for_cli(cls, debug: bool, log_file: Optional[str]) -> "LoggingConfig":
        """Build the configuration used by the command-line entry point."""
        return cls(level="DEBUG" if debug else "INFO", console=True, log_file=log_file or None)

    @property
    def level_int(self) -> int:
        return _LEVEL_MAP.get(str(self.level or "").strip().upper(), logging.INFO)

    @property
    def console_fmt(self) -> str:
        return CONSOLE_DEBUG_FMT if self.level_int <= logging.DEBUG else CONSOLE_FMT
