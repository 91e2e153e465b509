"""Test fixtures for task-watcher tests."""

import os
import json
import pytest
import tempfile
import shutil
from pathlib import Path

from task_watcher.models import WatcherSettings
from task_watcher.polling import PollingDirWatcher
from task_watcher.selector import reset_dir_watcher


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def watch_dir(temp_dir):
    """Create the watched task directory."""
    path = temp_dir / "tasks"
    path.mkdir()
    return path


@pytest.fixture
def write_task(watch_dir):
    """
    Write a task definition file into the watched directory.

    mtime_ns pins the modification time so scans see exactly the
    timestamps a test expects.
    """
    def _write(filename, data=None, mtime_ns=None, directory=None):
        path = Path(directory or watch_dir) / filename
        content = data if isinstance(data, str) else json.dumps(data or {"command": ["true"]})
        path.write_text(content)
        if mtime_ns is not None:
            os.utime(path, ns=(mtime_ns, mtime_ns))
        return path

    return _write


@pytest.fixture
def fast_settings(watch_dir):
    """WatcherSettings with millisecond intervals."""
    return WatcherSettings(
        watch_dir=str(watch_dir),
        backend="polling",
        poll_interval=0.02,
        retry_interval=0.02,
        buffer_size=8
    )


@pytest.fixture
def make_watcher():
    """Build PollingDirWatchers that are stopped after the test."""
    watchers = []

    def _make(watch_dir, **kwargs):
        kwargs.setdefault("poll_interval", 0.02)
        kwargs.setdefault("retry_interval", 0.02)
        watcher = PollingDirWatcher(str(watch_dir), **kwargs)
        watchers.append(watcher)
        return watcher

    yield _make

    for watcher in watchers:
        watcher.stop()


@pytest.fixture(autouse=True)
def clean_selector():
    """Each test starts and ends with an empty process-wide watcher slot."""
    reset_dir_watcher()
    yield
    reset_dir_watcher()
