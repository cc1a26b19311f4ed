from __future__ import annotations

"""
Configuration Domain Management.

Handles the build configuration: defaults, JSON persistence in the user
data directory (or an explicit file), and merging of stored values over the
defaults so that new keys always exist.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from navindex.core.analysis.filters import (
    default_exclude_patterns,
    default_extensions,
    default_include_patterns,
)
from navindex.core.services.merger import LAST_WINS
from navindex.infra.fs import DEFAULT_ARTIFACT_NAME, get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILENAME = "config.json"
CURRENT_CONFIG_VERSION = "1.0.0"


def get_config_path() -> str:
    """Default location of the persisted configuration."""
    return os.path.join(get_user_data_dir(), CONFIG_FILENAME)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default build configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Units: name -> source root directory
        "source_roots": {},

        # Output
        "output_path": os.path.join(os.getcwd(), DEFAULT_ARTIFACT_NAME),
        "legacy_export_dir": "",

        # Merging
        "merge_with": [],
        "merge_priority": LAST_WINS,

        # Scanning
        "extensions": default_extensions(),
        "include_patterns": default_include_patterns(),
        "exclude_patterns": default_exclude_patterns(),
        "respect_gitignore": True,
        "max_workers": 0,

        # Diagnostics
        "log_level": "INFO",
        "log_file": "",
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from disk merged over the defaults.

    A missing or corrupt file yields the defaults; the problem is logged.

    Args:
        path: Explicit configuration file; defaults to the user data dir.

    Returns:
        Dict[str, Any]: The configuration dictionary.
    """
    config = get_default_config()
    config_path = path or get_config_path()

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found at {config_path}. Using defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> bool:
    """
    Persist the configuration as JSON.

    Args:
        config: Configuration to save.
        path: Explicit destination; defaults to the user data dir.

    Returns:
        bool: True when the file was written.
    """
    config_path = path or get_config_path()
    payload = dict(config)
    payload["version"] = CURRENT_CONFIG_VERSION

    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False

    logger.debug(f"Configuration saved to {config_path}")
    return True
