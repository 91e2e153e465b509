"""Tests for process-wide watcher selection."""

import queue
import threading
import pytest

from task_watcher import selector
from task_watcher.models import WatcherSettings
from task_watcher.native import NativeDirWatcher
from task_watcher.polling import PollingDirWatcher
from task_watcher.selector import (
    WatcherAlreadyConfiguredError,
    dir_watcher,
    install_native_watcher,
    register_native_watcher,
    reset_dir_watcher,
)
from task_watcher.watcher import DirWatcher, TaskFileStream


class FakeNativeWatcher(DirWatcher):
    """Stand-in for a platform watcher."""

    def __init__(self):
        self.stream = TaskFileStream(queue.Queue(maxsize=8))
        self.stopped = False

    def updates(self):
        return self.stream

    def stop(self):
        self.stopped = True


@pytest.fixture
def settings(watch_dir):
    return WatcherSettings(watch_dir=str(watch_dir), backend="polling")


class TestDirWatcher:
    """Tests for dir_watcher()."""

    def test_default_is_polling(self, settings, watch_dir):
        """Test that the polling backend is used when nothing is registered."""
        watcher = dir_watcher(settings)

        assert isinstance(watcher, PollingDirWatcher)
        assert watcher.watch_dir == str(watch_dir)

    def test_memoized(self, settings, temp_dir):
        """Test that later calls return the first instance."""
        first = dir_watcher(settings)
        other = WatcherSettings(watch_dir=str(temp_dir / "elsewhere"))

        assert dir_watcher(other) is first
        assert dir_watcher() is first

    def test_not_started_by_selection(self, settings):
        """Test that selecting a watcher does not start scanning."""
        watcher = dir_watcher(settings)

        assert watcher.is_running() is False

    def test_concurrent_first_use_single_winner(self, settings):
        """Test that concurrent callers all observe one instance."""
        barrier = threading.Barrier(16)
        results = []

        def call():
            barrier.wait()
            results.append(dir_watcher(settings))

        threads = [threading.Thread(target=call) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 16
        assert len({id(w) for w in results}) == 1

    def test_requires_watch_dir(self):
        """Test that polling without a directory is a configuration error."""
        with pytest.raises(ValueError, match="No watch directory"):
            dir_watcher(WatcherSettings(watch_dir=None, backend="polling"))

        # Failed construction leaves the slot empty
        assert selector._dir_watcher is None

    def test_native_backend_setting(self, watch_dir):
        """Test that backend='native' selects the watchdog backend."""
        watcher = dir_watcher(WatcherSettings(watch_dir=str(watch_dir), backend="native"))

        assert isinstance(watcher, NativeDirWatcher)
        assert watcher.watch_dir == str(watch_dir)


class TestRegisterNativeWatcher:
    """Tests for the native watcher override slot."""

    def test_registered_watcher_wins(self, settings):
        """Test that a registered watcher replaces polling."""
        native = FakeNativeWatcher()
        register_native_watcher(native)

        assert dir_watcher(settings) is native
        assert dir_watcher(settings).updates() is native.stream

    def test_register_after_first_use_fails(self, settings):
        """Test that registration is rejected once dir_watcher() ran."""
        dir_watcher(settings)

        with pytest.raises(WatcherAlreadyConfiguredError, match="already in use"):
            register_native_watcher(FakeNativeWatcher())

    def test_register_twice_fails(self):
        """Test that the slot can be set only once."""
        register_native_watcher(FakeNativeWatcher())

        with pytest.raises(WatcherAlreadyConfiguredError, match="already registered"):
            register_native_watcher(FakeNativeWatcher())

    def test_install_native_watcher(self, settings, watch_dir):
        """Test the watchdog platform initializer."""
        watcher = install_native_watcher(settings)

        assert isinstance(watcher, NativeDirWatcher)
        assert dir_watcher() is watcher

    def test_reset_stops_and_clears(self, settings):
        """Test that reset stops the watcher and allows a new selection."""
        native = FakeNativeWatcher()
        register_native_watcher(native)
        dir_watcher(settings)

        reset_dir_watcher()

        assert native.stopped is True
        assert isinstance(dir_watcher(settings), PollingDirWatcher)
