"""
Environment variable names and default values for task-watcher.

All environment variables are optional and have sensible defaults.
"""

import os
from pathlib import Path

# Watcher Configuration
TASK_WATCHER_CONFIG = os.getenv("TASK_WATCHER_CONFIG", "")
TASK_WATCHER_DIR = os.getenv("TASK_WATCHER_DIR", "")
TASK_WATCHER_BACKEND = os.getenv("TASK_WATCHER_BACKEND", "polling").lower()

# Watcher Settings
TASK_WATCHER_POLL_INTERVAL = float(os.getenv("TASK_WATCHER_POLL_INTERVAL", "5"))
TASK_WATCHER_RETRY_INTERVAL = float(os.getenv("TASK_WATCHER_RETRY_INTERVAL", "15"))
TASK_WATCHER_BUFFER_SIZE = int(os.getenv("TASK_WATCHER_BUFFER_SIZE", "8"))

# Task definition files
TASK_FILE_SUFFIX = ".json"

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "task-watcher"
DEFAULT_CONFIG_FILE = Path(TASK_WATCHER_CONFIG) if TASK_WATCHER_CONFIG else DEFAULT_CONFIG_DIR / "config.json"
