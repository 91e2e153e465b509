"""
OS-native DirWatcher backed by watchdog.

Uses inotify/FSEvents/ReadDirectoryChangesW through a watchdog Observer
instead of polling. Notifications follow the same rules as the polling
backend: first sighting of a name is reported, later events only when
the file's modification time changed.
"""

import logging
import os
import queue
import stat
import threading
from typing import Dict, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from task_watcher.constants import TASK_FILE_SUFFIX
from task_watcher.models import WatcherSettings
from task_watcher.polling import (
    DEFAULT_BUFFER_SIZE, DEFAULT_RETRY_INTERVAL, PUT_WAKEUP_INTERVAL, format_modtime
)
from task_watcher.task_file import DirTaskFile, TaskFile
from task_watcher.watcher import DirWatcher, TaskFileStream


logger = logging.getLogger(__name__)


class NativeDirWatcher(DirWatcher, FileSystemEventHandler):
    """
    Watches one directory (non-recursive) with a watchdog Observer.

    A supervisor thread owns the observer: it waits for the directory to
    exist, starts the observer, reports files already present with an
    initial scan, and restarts everything if the directory disappears or
    is replaced. Events arrive on the observer's emitter thread, so the
    last-seen table is shared with the supervisor and locked.
    """

    def __init__(
        self,
        watch_dir: str,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        suffix: str = TASK_FILE_SUFFIX,
        retry_interval: float = DEFAULT_RETRY_INTERVAL
    ):
        """
        Initialize native watcher. Nothing runs until updates() is called.

        Args:
            watch_dir: Directory to watch (non-recursive)
            buffer_size: Capacity of the notification queue
            suffix: File name suffix of task definition files
            retry_interval: Seconds between checks of the directory and observer
        """
        super().__init__()
        self.watch_dir = str(watch_dir)
        self.suffix = suffix
        self.retry_interval = retry_interval

        self._queue: "queue.Queue[TaskFile]" = queue.Queue(maxsize=buffer_size)
        self._stream = TaskFileStream(self._queue)
        self._last_seen: Dict[str, int] = {}
        self._seen_lock = threading.Lock()
        self._start_lock = threading.Lock()
        self._started = False
        self._stop_event = threading.Event()
        self._observer: Optional[Observer] = None
        self._watched_identity: Optional[Tuple[int, int]] = None
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_settings(cls, settings: WatcherSettings) -> "NativeDirWatcher":
        """Build a watcher from WatcherSettings (watch_dir must be set)."""
        if not settings.watch_dir:
            raise ValueError("No watch directory configured")

        return cls(
            watch_dir=settings.watch_dir,
            buffer_size=settings.buffer_size,
            suffix=settings.suffix,
            retry_interval=settings.retry_interval
        )

    def updates(self) -> TaskFileStream:
        with self._start_lock:
            if not self._started:
                self._started = True
                self.start()
        return self._stream

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle_file_event(event.src_path, "created")

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle_file_event(event.src_path, "modified")

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        # Editors often save by writing a temp file and renaming it into place
        self._handle_file_event(event.dest_path, "moved")

    def _handle_file_event(self, file_path, event_type: str) -> None:
        """
        Report a task file if its modification time is new.

        Args:
            file_path: Path from the watchdog event (str or bytes)
            event_type: Event kind, for logging
        """
        filename = os.path.basename(os.fsdecode(file_path))

        if not filename.endswith(self.suffix):
            return

        task_file = DirTaskFile(self.watch_dir, filename, self.suffix)

        try:
            if not os.path.isfile(task_file.path):
                return
            mtime = os.stat(task_file.path).st_mtime_ns
        except OSError as e:
            logger.debug("Skipping %r: %s", filename, e)
            return

        with self._seen_lock:
            if self._last_seen.get(task_file.name) == mtime:
                return
            self._last_seen[task_file.name] = mtime

        logger.info("%s: name = %r, modtime = %s", event_type, filename, format_modtime(mtime))

        while not self._stop_event.is_set():
            try:
                self._queue.put(task_file, timeout=PUT_WAKEUP_INTERVAL)
                return
            except queue.Full:
                continue

    def _initial_scan(self) -> None:
        try:
            with os.scandir(self.watch_dir) as entries:
                filenames = [entry.name for entry in entries]
        except OSError as e:
            logger.warning("Error reading directory %r: %s", self.watch_dir, e)
            return

        for filename in filenames:
            if self._stop_event.is_set():
                return
            self._handle_file_event(os.path.join(self.watch_dir, filename), "existing")

    def _dir_identity(self) -> Optional[Tuple[int, int]]:
        """(st_dev, st_ino) of the watched directory, or None if it is not there."""
        try:
            st = os.stat(self.watch_dir)
        except OSError:
            return None

        if not stat.S_ISDIR(st.st_mode):
            return None
        return (st.st_dev, st.st_ino)

    def _start_observer(self, identity: Tuple[int, int]) -> bool:
        try:
            observer = Observer()
            observer.schedule(self, self.watch_dir, recursive=False)
            observer.start()
        except OSError as e:
            logger.error("Failed to start watcher for %s: %s", self.watch_dir, e)
            return False

        self._observer = observer
        self._watched_identity = identity
        logger.info("Watching %s", self.watch_dir)
        return True

    def _stop_observer(self) -> None:
        observer, self._observer = self._observer, None
        self._watched_identity = None

        if observer is None:
            return

        try:
            observer.stop()
            observer.join(timeout=5.0)
            logger.info("Stopped watching %s", self.watch_dir)
        except Exception as e:
            logger.error("Error stopping watcher for %s: %s", self.watch_dir, e)

    def _watch_alive(self) -> bool:
        """Observer running with a live emitter (emitters exit when the directory is deleted)."""
        observer = self._observer
        if observer is None or not observer.is_alive():
            return False
        emitters = observer.emitters
        return bool(emitters) and all(emitter.is_alive() for emitter in emitters)

    def _supervise(self) -> None:
        missing_logged = False

        while not self._stop_event.is_set():
            identity = self._dir_identity()

            if identity is None:
                self._stop_observer()
                if not missing_logged:
                    logger.warning(
                        "Cannot watch %s: directory does not exist (retrying every %.1fs)",
                        self.watch_dir, self.retry_interval
                    )
                    missing_logged = True

            elif identity != self._watched_identity or not self._watch_alive():
                self._stop_observer()
                if self._start_observer(identity):
                    missing_logged = False
                    self._initial_scan()

            self._stop_event.wait(self.retry_interval)

    def start(self) -> None:
        """Start the supervisor thread that runs the observer."""
        if self._observer is not None and self._observer.is_alive():
            logger.warning("Watcher for %s already running", self.watch_dir)
            return

        if self._thread is not None and self._thread.is_alive():
            return

        self._thread = threading.Thread(
            target=self._supervise,
            name=f"task-watcher-native:{self.watch_dir}",
            daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the supervisor and the observer."""
        self._stop_event.set()
        self._stop_observer()

        thread = self._thread
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=5.0)
            # The supervisor may have started an observer while stopping
            self._stop_observer()

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()
