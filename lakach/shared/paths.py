"""
Path helpers for Lakach data, config and log directories.
"""

import os
from pathlib import Path


def get_lakach_config_dir() -> Path:
    """Return the configuration directory (LAKACH_CONFIG_DIR or ~/.config/lakach)."""
    override = os.environ.get("LAKACH_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "lakach"


def get_lakach_data_dir() -> Path:
    """Return the data directory (LAKACH_DATA_DIR or ~/.local/share/lakach)."""
    override = os.environ.get("LAKACH_DATA_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".local" / "share" / "lakach"


def get_lakach_logs_dir() -> Path:
    """Return the directory log files are written to."""
    return get_lakach_data_dir() / "logs"
