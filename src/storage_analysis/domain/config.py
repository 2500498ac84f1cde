from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of scan preferences using JSON in the user data
directory. Missing or corrupted files fall back to defaults.
"""

import json
import logging
import os
from typing import Any, Dict

from storage_analysis.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")
EXCLUSION_FILE_NAME = "excluded.txt"
CURRENT_CONFIG_VERSION = "1.0.0"

# Number of directories probed by one worker task
DEFAULT_CHUNK_SIZE = 2000


def default_max_workers() -> int:
    """Mirror the ThreadPoolExecutor default: min(32, cpu_count + 4)."""
    return min(32, (os.cpu_count() or 1) + 4)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Scanning
        "chunk_size": DEFAULT_CHUNK_SIZE,
        "max_workers": default_max_workers(),
        "exclusion_file": os.path.join(get_user_data_dir(), EXCLUSION_FILE_NAME),

        # Output
        "color": True,
        "export_path": "",
        "export_depth": 0,

        # Diagnostics
        "log_file": "",
    }


def get_default_app_state() -> Dict[str, Any]:
    """Generate the full JSON structure persisted in config.json."""
    return {
        "version": CURRENT_CONFIG_VERSION,
        "settings": get_default_config(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Read the persisted state, falling back to defaults.

    Unknown settings are dropped and missing ones take their default value,
    so files written by other versions load without migration.

    Returns:
        Dict[str, Any]: A complete state structure.
    """
    state = get_default_app_state()
    data = _read_json(CONFIG_FILE)
    if data is None:
        return state

    settings = data.get("settings") if isinstance(data, dict) else None
    if not isinstance(settings, dict):
        logger.warning(f"Ignoring malformed settings in {CONFIG_FILE}.")
        return state

    for key in state["settings"]:
        if key in settings:
            state["settings"][key] = settings[key]
    return state


def save_app_state(state: Dict[str, Any]) -> None:
    """
    Write the state to disk through a temporary file.

    Args:
        state: Structure to persist; its version is stamped before writing.
    """
    state["version"] = CURRENT_CONFIG_VERSION
    tmp_path = f"{CONFIG_FILE}.tmp"
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        os.replace(tmp_path, CONFIG_FILE)
    except OSError as e:
        logger.error(f"Could not save settings to {CONFIG_FILE}: {e}")
        return
    logger.debug(f"Settings saved to {CONFIG_FILE}")


def _read_json(path: str) -> Any:
    """Parse a JSON file; None when it is absent or unreadable."""
    if not os.path.exists(path):
        logger.debug(f"No saved settings at {path}.")
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read settings from {path}: {e}. Using defaults.")
        return None


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """Return the saved scan settings (complete, defaults filled in)."""
    return load_app_state()["settings"]


def save_config(config: Dict[str, Any]) -> None:
    """Persist the given settings as the new defaults."""
    save_app_state({"version": CURRENT_CONFIG_VERSION, "settings": dict(config)})
