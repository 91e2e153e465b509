"""
Process-wide DirWatcher selection.

A platform initializer may register an OS-native watcher before the
first call to dir_watcher(); otherwise the polling backend is used.
Either way, every caller gets the same instance.
"""

import logging
import threading
from typing import Optional

from task_watcher.models import WatcherSettings
from task_watcher.native import NativeDirWatcher
from task_watcher.polling import PollingDirWatcher
from task_watcher.watcher import DirWatcher


logger = logging.getLogger(__name__)


class WatcherAlreadyConfiguredError(RuntimeError):
    """Raised when the watcher slot is set twice or after first use."""


_lock = threading.Lock()
_native_watcher: Optional[DirWatcher] = None
_dir_watcher: Optional[DirWatcher] = None


def register_native_watcher(watcher: DirWatcher) -> None:
    """
    Register an OS-native watcher to use instead of polling.

    Must run before the first dir_watcher() call, at most once.

    Raises:
        WatcherAlreadyConfiguredError: If a watcher was already
            registered or dir_watcher() has already been used
    """
    global _native_watcher

    with _lock:
        if _dir_watcher is not None:
            raise WatcherAlreadyConfiguredError(
                "dir_watcher() already in use; register the native watcher at startup"
            )
        if _native_watcher is not None:
            raise WatcherAlreadyConfiguredError("A native watcher is already registered")
        _native_watcher = watcher

    logger.debug("Registered native watcher %s", type(watcher).__name__)


def install_native_watcher(settings: Optional[WatcherSettings] = None) -> NativeDirWatcher:
    """Build the watchdog-backed watcher from settings and register it."""
    watcher = NativeDirWatcher.from_settings(settings or WatcherSettings())
    register_native_watcher(watcher)
    return watcher


def dir_watcher(settings: Optional[WatcherSettings] = None) -> DirWatcher:
    """
    Get the process-wide DirWatcher.

    The first call decides: a registered native watcher wins, then
    settings.backend == "native", then the polling backend. Later calls
    return the same instance and ignore their settings.

    Args:
        settings: Watcher settings (defaults from the environment if None)

    Returns:
        The shared DirWatcher
    """
    global _dir_watcher, _native_watcher

    with _lock:
        if _dir_watcher is not None:
            return _dir_watcher

        settings = settings or WatcherSettings()

        if _native_watcher is None and settings.backend == "native":
            _native_watcher = NativeDirWatcher.from_settings(settings)

        if _native_watcher is not None:
            _dir_watcher = _native_watcher
        else:
            _dir_watcher = PollingDirWatcher.from_settings(settings)

        logger.info("Using %s", type(_dir_watcher).__name__)
        return _dir_watcher


def reset_dir_watcher() -> None:
    """Stop the shared watcher and clear the slot (shutdown and tests)."""
    global _dir_watcher, _native_watcher

    with _lock:
        watchers = {id(w): w for w in (_dir_watcher, _native_watcher) if w is not None}
        _dir_watcher = None
        _native_watcher = None

    for watcher in watchers.values():
        watcher.stop()
