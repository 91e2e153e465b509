"""
DirWatcher abstraction.

A DirWatcher produces a stream of TaskFile change notifications for one
directory. How changes are discovered (polling, OS notification) is up
to the backend; consumers only see the stream.
"""

import queue
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from task_watcher.task_file import TaskFile


class TaskFileStream:
    """
    Read-only view of a watcher's bounded notification queue.

    Iterating blocks forever waiting for the next TaskFile; use get()
    with a timeout when the caller needs to wake up periodically.
    """

    def __init__(self, q: "queue.Queue[TaskFile]"):
        self._queue = q

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    def get(self, block: bool = True, timeout: Optional[float] = None) -> TaskFile:
        """
        Take the next TaskFile off the stream.

        Raises:
            queue.Empty: If no TaskFile arrived within timeout (or block is False)
        """
        return self._queue.get(block=block, timeout=timeout)

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    def __iter__(self) -> Iterator[TaskFile]:
        while True:
            yield self._queue.get()


class DirWatcher(ABC):
    """Produces a stream of TaskFile change notifications."""

    @abstractmethod
    def updates(self) -> TaskFileStream:
        """
        Return the stream of changed task files.

        The first call starts the backend; later calls return the same
        stream without starting anything new.
        """

    def stop(self) -> None:
        """Stop background activity. Backends without any may ignore this."""

    def is_running(self) -> bool:
        return False
