"""
Portable polling implementation of DirWatcher.

Scans the watched directory every few seconds and reports task files
whose modification time differs from the last one seen. No OS file
notification facility is required.
"""

import logging
import os
import queue
import threading
from datetime import datetime
from typing import Dict, List, Optional

from task_watcher.constants import TASK_FILE_SUFFIX
from task_watcher.models import WatcherSettings
from task_watcher.task_file import DirTaskFile, TaskFile
from task_watcher.watcher import DirWatcher, TaskFileStream


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_RETRY_INTERVAL = 15.0
DEFAULT_BUFFER_SIZE = 8

# How often a producer blocked on a full queue checks for stop()
PUT_WAKEUP_INTERVAL = 0.5


def format_modtime(mtime_ns: int) -> str:
    """Render st_mtime_ns for logs; falls back to raw nanoseconds out of datetime's range."""
    try:
        return datetime.fromtimestamp(mtime_ns / 1e9).isoformat()
    except (ValueError, OverflowError, OSError):
        return f"{mtime_ns}ns"


class PollingDirWatcher(DirWatcher):
    """
    DirWatcher that polls a directory for new or modified task files.

    The background thread owns the last-seen table (logical name ->
    st_mtime_ns); nothing else reads or writes it, so it is not locked.
    A name is reported on first sighting and afterwards only when its
    modification time changes. Directory errors are logged and retried
    after a backoff; they never reach the consumer.
    """

    def __init__(
        self,
        watch_dir: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        suffix: str = TASK_FILE_SUFFIX
    ):
        """
        Initialize polling watcher. Nothing runs until updates() is called.

        Args:
            watch_dir: Directory to scan (non-recursive)
            poll_interval: Seconds between successful scans
            retry_interval: Seconds to back off after a directory error
            buffer_size: Capacity of the notification queue
            suffix: File name suffix of task definition files
        """
        self.watch_dir = str(watch_dir)
        self.poll_interval = poll_interval
        self.retry_interval = retry_interval
        self.buffer_size = buffer_size
        self.suffix = suffix

        self._last_seen: Dict[str, int] = {}
        self._queue: Optional["queue.Queue[TaskFile]"] = None
        self._stream: Optional[TaskFileStream] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()

    @classmethod
    def from_settings(cls, settings: WatcherSettings) -> "PollingDirWatcher":
        """Build a watcher from WatcherSettings (watch_dir must be set)."""
        if not settings.watch_dir:
            raise ValueError("No watch directory configured")

        return cls(
            watch_dir=settings.watch_dir,
            poll_interval=settings.poll_interval,
            retry_interval=settings.retry_interval,
            buffer_size=settings.buffer_size,
            suffix=settings.suffix
        )

    def updates(self) -> TaskFileStream:
        with self._lock:
            if self._stream is None:
                self._queue = queue.Queue(maxsize=self.buffer_size)
                self._stream = TaskFileStream(self._queue)
                self._thread = threading.Thread(
                    target=self._poll,
                    name=f"task-watcher-poll:{self.watch_dir}",
                    daemon=True
                )
                self._thread.start()
            return self._stream

    def _read_dir(self) -> List[os.DirEntry]:
        try:
            entries = os.scandir(self.watch_dir)
        except OSError as e:
            logger.warning("Error opening directory %r: %s", self.watch_dir, e)
            raise

        with entries:
            try:
                return list(entries)
            except OSError as e:
                logger.warning("Error reading directory %r: %s", self.watch_dir, e)
                raise

    def scan(self) -> List[TaskFile]:
        """
        Scan the directory once and update the last-seen table.

        Only the background thread calls this once updates() has been
        called; before that it may be used for a one-shot scan.

        Returns:
            Task files that are new or whose modification time changed,
            in directory listing order

        Raises:
            OSError: If the directory cannot be opened or listed
        """
        changed: List[TaskFile] = []
        seen: Dict[str, int] = {}

        for entry in self._read_dir():
            if not entry.name.endswith(self.suffix):
                continue

            try:
                if not entry.is_file():
                    continue
                mtime = entry.stat().st_mtime_ns
            except OSError as e:
                # Removed or replaced between listing and stat
                logger.debug("Skipping %r: %s", entry.name, e)
                continue

            task_file = DirTaskFile(self.watch_dir, entry.name, self.suffix)

            if self._last_seen.get(task_file.name) == mtime:
                continue

            logger.info("name = %r, modtime = %s", entry.name, format_modtime(mtime))
            seen[task_file.name] = mtime
            changed.append(task_file)

        # Only record what is handed back, so a failed scan loses nothing
        self._last_seen.update(seen)
        return changed

    def _poll(self) -> None:
        logger.info(
            "Polling %s every %.1fs (retry after %.1fs)",
            self.watch_dir, self.poll_interval, self.retry_interval
        )

        while not self._stop_event.is_set():
            try:
                changed = self.scan()
            except OSError:
                self._stop_event.wait(self.retry_interval)
                continue
            except Exception as e:
                logger.exception("Unexpected error scanning %r: %s", self.watch_dir, e)
                self._stop_event.wait(self.retry_interval)
                continue

            for task_file in changed:
                if not self._put(task_file):
                    break

            self._stop_event.wait(self.poll_interval)

        logger.info("Stopped polling %s", self.watch_dir)

    def _put(self, task_file: TaskFile) -> bool:
        """Block until the consumer makes room; False if stopped first."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(task_file, timeout=PUT_WAKEUP_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the scan loop and wait for the thread to exit."""
        self._stop_event.set()

        thread = self._thread
        if thread is not None and thread.is_alive():
            thread.join(timeout=timeout)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
