#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration Handler

Persistent Lakach settings (rsync and ssh binaries, flags, timeouts, UI
tuning, remembered destination) stored as JSON in the config directory.
"""

import os
import json
import logging
from pathlib import Path
from typing import List, Optional

from packaging import version

from lakach.backend.exceptions import ConfigError

# Initialize logger
logger = logging.getLogger(__name__)

CONFIG_VERSION = "0.1.0"
DEFAULT_RSYNC_FLAGS = ["-vrtzhP", "--info=progress2"]


class ConfigHandler:
    """
    Process-wide settings store.
    Every ConfigHandler() call returns the same object, loaded once.
    """
    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigHandler, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        """Load settings from disk on first construction only"""
        if ConfigHandler._initialized:
            return
        ConfigHandler._initialized = True

        from lakach.shared.paths import get_lakach_config_dir
        self.config_dir = str(get_lakach_config_dir())
        self.config_file = os.path.join(self.config_dir, "config.json")
        self.settings = self.default_settings()

        self._load_config()
        self._migrate_config()

    @staticmethod
    def default_settings() -> dict:
        return {
            "version": CONFIG_VERSION,
            "rsync_path": "rsync",
            "rsync_flags": list(DEFAULT_RSYNC_FLAGS),
            "ssh_path": "ssh",
            "listing_timeout": 30,  # Seconds to wait for a remote directory listing
            "refresh_interval_ms": 100,  # UI input poll / redraw tick
            "page_size": 10,
            "default_local_dest": None,
            "last_local_dest": None,
        }

    @classmethod
    def reset_instance(cls):
        """Forget the shared instance so the next ConfigHandler() reloads from disk."""
        cls._instance = None
        cls._initialized = False

    def _load_config(self):
        """
        Overlay the saved file onto the defaults.
        A broken file is logged and ignored so Lakach still starts with defaults.
        """
        try:
            saved_config = self._read_saved_config()
        except ConfigError as e:
            logger.error(f"Ignoring unreadable config: {e}")
            return
        if saved_config is None:
            logger.debug(f"No config at {self.config_file}, running with defaults")
            return
        self.settings.update(saved_config)
        logger.debug(f"Loaded settings from {self.config_file}")

    def _read_saved_config(self) -> Optional[dict]:
        """Read the saved JSON file, raising ConfigError if it is unusable."""
        if not os.path.exists(self.config_file):
            return None
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                saved_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"{self.config_file}: {e}") from e
        if not isinstance(saved_config, dict):
            raise ConfigError(f"{self.config_file}: expected a JSON object")
        return saved_config

    def _migrate_config(self):
        """
        Bring settings written by an older Lakach up to CONFIG_VERSION
        and write them back.
        """
        current_version = str(self.settings.get("version") or "0.0.0")
        if current_version == CONFIG_VERSION:
            return

        try:
            is_older = version.parse(current_version) < version.parse(CONFIG_VERSION)
        except version.InvalidVersion:
            logger.warning(f"Unrecognised config version '{current_version}', treating as outdated")
            is_older = True

        if not is_older:
            logger.debug(f"Config version {current_version} is newer than {CONFIG_VERSION}, leaving as is")
            return

        logger.info(f"Migrating config from {current_version} to {CONFIG_VERSION}")

        # Pre-release configs stored the flags as a single string
        flags = self.settings.get("rsync_flags")
        if isinstance(flags, str):
            self.settings["rsync_flags"] = flags.split()

        self.settings["version"] = CONFIG_VERSION
        self.save_config()
        logger.info(f"Config is now at version {CONFIG_VERSION}")

    def reload_config(self):
        """Throw away in-memory changes and re-read the file"""
        self.settings = self.default_settings()
        self._load_config()

    def _create_config_dir(self):
        """mkdir -p the config directory"""
        try:
            os.makedirs(self.config_dir, exist_ok=True)
            logger.debug(f"Config directory ready: {self.config_dir}")
        except OSError as e:
            logger.error(f"Cannot create {self.config_dir}: {e}")

    def save_config(self):
        """Write the current settings as JSON. Returns False on I/O errors."""
        try:
            self._create_config_dir()
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=2)
            logger.debug(f"Wrote {self.config_file}")
            return True
        except OSError as e:
            logger.error(f"Could not write {self.config_file}: {e}")
            return False

    def get(self, key, default=None):
        """Get a configuration value by key."""
        return self.settings.get(key, default)

    def set(self, key, value):
        """Change one setting in memory; call save_config() to persist."""
        self.settings[key] = value
        return True

    def update(self, settings_dict):
        """Change several settings in memory."""
        self.settings.update(settings_dict)
        return True

    def get_rsync_command_prefix(self) -> List[str]:
        """rsync executable followed by its flags."""
        flags = self.settings.get("rsync_flags") or DEFAULT_RSYNC_FLAGS
        return [self.settings.get("rsync_path") or "rsync", *flags]

    def get_refresh_interval(self) -> float:
        """UI poll interval in seconds."""
        try:
            return max(int(self.settings.get("refresh_interval_ms", 100)), 10) / 1000.0
        except (TypeError, ValueError):
            return 0.1

    def get_local_dest(self) -> Optional[str]:
        """Destination to use when none is given on the command line."""
        return self.settings.get("last_local_dest") or self.settings.get("default_local_dest")

    def set_last_local_dest(self, path):
        """Remember the destination chosen in the UI"""
        self.settings["last_local_dest"] = str(Path(path).expanduser())
        logger.debug(f"Set last local destination to: {self.settings['last_local_dest']}")
        return self.save_config()
