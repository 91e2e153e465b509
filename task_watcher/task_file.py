"""
Task definition file handles.

A TaskFile is what a watcher hands to its consumer: a logical name and
a way to read the file's current content.
"""

import os
from abc import ABC, abstractmethod
from typing import BinaryIO

from task_watcher.constants import TASK_FILE_SUFFIX


class TaskFile(ABC):
    """A task definition file reported by a DirWatcher."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The task's base name, without any directory prefix or suffix."""

    @abstractmethod
    def open(self) -> BinaryIO:
        """Open the task definition for reading."""


class DirTaskFile(TaskFile):
    """
    TaskFile backed by a file in the watched directory.

    This is a handle, not a snapshot: open() reads whatever is on disk
    when it is called, which may differ from the content that triggered
    the notification.
    """

    def __init__(self, directory: str, filename: str, suffix: str = TASK_FILE_SUFFIX):
        self.directory = directory
        self.filename = filename
        self.suffix = suffix

    @property
    def path(self) -> str:
        return os.path.join(self.directory, self.filename)

    @property
    def name(self) -> str:
        if self.suffix and self.filename.endswith(self.suffix):
            return self.filename[: -len(self.suffix)]
        return self.filename

    def open(self) -> BinaryIO:
        # OSError (missing file, permissions, ...) propagates to the caller
        return open(self.path, "rb")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirTaskFile):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"DirTaskFile(name={self.name!r}, path={self.path!r})"
