"""
Task Watcher - detects new or modified task definition files.

Watches a single directory for *.json task definitions and delivers
each change as a TaskFile on a bounded stream. The portable backend
polls the directory; an OS-native backend (watchdog) can be registered
in its place at startup.
"""

__version__ = "1.0.0"

from task_watcher.models import WatcherSettings, WatcherConfig
from task_watcher.config import ConfigManager, ConfigError, DEFAULT_CONFIG_FILE
from task_watcher.task_file import TaskFile, DirTaskFile
from task_watcher.watcher import DirWatcher, TaskFileStream
from task_watcher.polling import PollingDirWatcher
from task_watcher.native import NativeDirWatcher
from task_watcher.selector import (
    WatcherAlreadyConfiguredError,
    dir_watcher,
    install_native_watcher,
    register_native_watcher,
    reset_dir_watcher,
)

__all__ = [
    # Models
    "WatcherSettings",
    "WatcherConfig",
    # Config
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_FILE",
    # Abstractions
    "TaskFile",
    "DirTaskFile",
    "DirWatcher",
    "TaskFileStream",
    # Backends
    "PollingDirWatcher",
    "NativeDirWatcher",
    # Selection
    "WatcherAlreadyConfiguredError",
    "dir_watcher",
    "install_native_watcher",
    "register_native_watcher",
    "reset_dir_watcher",
]
