from __future__ import annotations

"""
Logging Lifecycle.

Installs a single QueueHandler on the root logger and drains it from a
QueueListener thread. Catalog and size workers log every skipped path; the
queue keeps those calls from contending on stderr or the log file while
the pool is running.

Configuration is idempotent: repeated calls are ignored unless forced.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from storage_analysis.infra.logging.config import DATE_FMT, FILE_FMT, LoggingConfig
from storage_analysis.infra.logging.handlers import (
    build_console_handler,
    build_file_handler,
    is_tagged,
    tag_handler,
)

# Root logger attributes tracking the installed pipeline
_CONFIGURED_FLAG_ATTR: str = "_storage_analysis_configured"
_QUEUE_LISTENER_ATTR: str = "_storage_analysis_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Route root logger records through a queue to the configured sinks.

    Args:
        cfg: Sinks and threshold to install.
        force: Replace an existing configuration instead of keeping it.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    shutdown_logging()
    root.setLevel(cfg.level_int)

    sinks = _build_sinks(cfg)
    if not sinks:
        return root

    try:
        _install_queue(root, sinks)
    except Exception as e:
        # Queue setup failed: log synchronously rather than not at all
        for sink in sinks:
            root.addHandler(sink)
        root.warning(f"Asynchronous logging unavailable ({e}); using direct handlers.")

    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    return root


def shutdown_logging() -> None:
    """
    Flush pending records and remove every handler this package installed.

    Safe to call repeatedly and when logging was never configured.
    """
    root = logging.getLogger()

    _stop_listener(getattr(root, _QUEUE_LISTENER_ATTR, None))
    setattr(root, _QUEUE_LISTENER_ATTR, None)

    for handler in list(root.handlers):
        if is_tagged(handler):
            root.removeHandler(handler)
            handler.close()

    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger (records propagate to the configured root)."""
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _build_sinks(cfg: LoggingConfig) -> List[logging.Handler]:
    sinks: List[logging.Handler] = []
    if cfg.console:
        sinks.append(build_console_handler(cfg.level_int, cfg.console_fmt))
    if cfg.log_file:
        fh = build_file_handler(
            cfg.log_file, cfg.level_int, FILE_FMT, DATE_FMT, cfg.max_bytes, cfg.backup_count
        )
        if fh is not None:
            sinks.append(fh)
    return sinks


def _install_queue(root: logging.Logger, sinks: List[logging.Handler]) -> None:
    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
    listener.start()

    root.addHandler(tag_handler(QueueHandler(log_queue)))
    setattr(root, _QUEUE_LISTENER_ATTR, listener)

    # Records still queued at interpreter exit are written before shutdown
    atexit.register(_stop_listener, listener)


def _stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a listener once; later calls (atexit, tests) are no-ops."""
    if listener is None or getattr(listener, "_thread", None) is None:
        return
    try:
        listener.stop()
    except Exception as e:
        sys.stderr.write(f"WARNING: Log listener did not stop cleanly: {e}\n")
    for sink in listener.handlers:
        sink.close()
