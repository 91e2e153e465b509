"""
Data models for task-watcher configuration.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from task_watcher.constants import (
    TASK_FILE_SUFFIX,
    TASK_WATCHER_BACKEND,
    TASK_WATCHER_BUFFER_SIZE,
    TASK_WATCHER_DIR,
    TASK_WATCHER_POLL_INTERVAL,
    TASK_WATCHER_RETRY_INTERVAL,
)


class WatcherSettings(BaseModel):
    """Settings for the directory watcher backends."""

    # Defaults come from environment variables, so they are validated too
    model_config = ConfigDict(validate_default=True)

    watch_dir: Optional[str] = Field(
        default=TASK_WATCHER_DIR or None,
        description="Directory holding task definition files"
    )
    backend: Literal["polling", "native"] = Field(
        default=TASK_WATCHER_BACKEND,
        description="Watcher backend: portable polling or OS-native (watchdog)"
    )
    poll_interval: float = Field(
        default=TASK_WATCHER_POLL_INTERVAL,
        gt=0,
        description="Seconds between directory scans"
    )
    retry_interval: float = Field(
        default=TASK_WATCHER_RETRY_INTERVAL,
        gt=0,
        description="Seconds to back off after a directory access error"
    )
    buffer_size: int = Field(
        default=TASK_WATCHER_BUFFER_SIZE,
        ge=1,
        description="Capacity of the notification queue"
    )
    suffix: str = Field(
        default=TASK_FILE_SUFFIX,
        description="File name suffix that marks a task definition file"
    )

    @field_validator("suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Suffix must look like a file extension."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Suffix must start with '.' and name an extension: {v!r}")
        return v

    @field_validator("watch_dir")
    @classmethod
    def normalize_watch_dir(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ in the watch directory; the directory may not exist yet."""
        if v:
            return str(Path(v).expanduser())
        return None


class WatcherConfig(BaseModel):
    """Top-level task-watcher configuration file."""

    version: str = "1.0"
    settings: WatcherSettings = Field(default_factory=WatcherSettings)

    def set_watch_dir(self, path: str) -> str:
        """
        Set the watched directory.

        Args:
            path: Directory to watch

        Returns:
            The resolved absolute path

        Raises:
            ValueError: If the path does not exist or is not a directory
        """
        resolved = Path(path).expanduser().resolve()

        if not resolved.exists():
            raise ValueError(f"Path does not exist: {resolved}")

        if not resolved.is_dir():
            raise ValueError(f"Path is not a directory: {resolved}")

        self.settings.watch_dir = str(resolved)
        return self.settings.watch_dir
