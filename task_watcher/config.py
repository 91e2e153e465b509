"""
Configuration file management for task-watcher.

Configuration lives in a single JSON file; environment variables
provide the defaults for any setting the file leaves out.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from task_watcher.constants import DEFAULT_CONFIG_FILE
from task_watcher.models import WatcherConfig


logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the configuration file cannot be parsed."""


class ConfigManager:
    """
    Loads and saves the task-watcher configuration file.

    A missing file is not an error: the manager starts from defaults
    and only touches the disk on save_config().
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_file: Path to configuration file (uses default if None)
        """
        self.config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
        self.config = self.load_config()

    def load_config(self) -> WatcherConfig:
        """
        Load configuration from disk.

        Returns:
            Parsed configuration, or defaults if the file does not exist

        Raises:
            ConfigError: If the file is not valid JSON or fails validation
        """
        if not self.config_file.exists():
            logger.debug("No config file at %s, using defaults", self.config_file)
            return WatcherConfig()

        try:
            with open(self.config_file, "r") as f:
                data = json.load(f)
            return WatcherConfig.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid config file {self.config_file}: {e}") from e

    def save_config(self) -> None:
        """Write the current configuration to disk."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w") as f:
            json.dump(self.config.model_dump(mode="json"), f, indent=2)
            f.write("\n")

        logger.info("Saved configuration to %s", self.config_file)

    def set_watch_dir(self, path: str) -> str:
        """Set the watched directory (not saved until save_config())."""
        return self.config.set_watch_dir(path)
