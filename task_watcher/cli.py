"""
Command-line interface for task-watcher.

Runs a watcher over the task directory and prints each detected task
definition, or performs one-off scans and configuration changes.
"""

import sys
import json
import logging
import argparse
from pathlib import Path

from task_watcher.config import ConfigManager
from task_watcher.constants import DEFAULT_CONFIG_FILE
from task_watcher.models import WatcherSettings
from task_watcher.polling import PollingDirWatcher
from task_watcher.selector import dir_watcher, reset_dir_watcher
from task_watcher.task_file import TaskFile


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _load_settings(args) -> WatcherSettings:
    """Load settings from the config file and apply command-line overrides."""
    settings = ConfigManager(args.config).config.settings

    overrides = {}
    if getattr(args, "dir", None):
        overrides["watch_dir"] = args.dir
    if getattr(args, "backend", None):
        overrides["backend"] = args.backend

    if overrides:
        settings = WatcherSettings.model_validate({**settings.model_dump(), **overrides})

    return settings


def _show_task_file(task_file: TaskFile) -> None:
    """Print one detected task definition."""
    print(f"\n📄 {task_file.name}")

    try:
        with task_file.open() as f:
            data = json.load(f)
    except OSError as e:
        print(f"   ⚠️  Cannot open: {e}")
        return
    except ValueError as e:
        print(f"   ⚠️  Invalid JSON: {e}")
        return

    if isinstance(data, dict):
        print(f"   Keys: {', '.join(sorted(data)) or '(none)'}")
    else:
        print(f"   Type: {type(data).__name__}")


def cmd_watch(args):
    """Watch the task directory and print each change."""
    try:
        settings = _load_settings(args)
    except Exception as e:
        print(f"❌ Error loading configuration: {e}", file=sys.stderr)
        return 1

    if not settings.watch_dir:
        print("❌ No watch directory set", file=sys.stderr)
        print("Use 'task-watcher set-dir <path>' or pass --dir", file=sys.stderr)
        return 1

    print("=" * 60)
    print("👀 Task Watcher")
    print("=" * 60)
    print(f"Directory: {settings.watch_dir}")
    print(f"Backend: {settings.backend}")
    print(f"Interval: {settings.poll_interval}s (retry {settings.retry_interval}s)")

    received = 0

    try:
        stream = dir_watcher(settings).updates()

        for task_file in stream:
            received += 1
            _show_task_file(task_file)

            if args.count and received >= args.count:
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted")
    except Exception as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1
    finally:
        reset_dir_watcher()

    print(f"\n🛑 Stopped after {received} update(s)")
    return 0


def cmd_scan(args):
    """Scan the task directory once and list task files."""
    try:
        settings = _load_settings(args)
        watcher = PollingDirWatcher.from_settings(settings)
        task_files = watcher.scan()
    except OSError as e:
        print(f"❌ Cannot scan directory: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print(f"📂 {watcher.watch_dir}: {len(task_files)} task file(s)")
    for task_file in task_files:
        print(f"  - {task_file.name}")

    return 0


def cmd_status(args):
    """Show the configuration in effect."""
    try:
        settings = _load_settings(args)
    except Exception as e:
        print(f"❌ Error loading configuration: {e}", file=sys.stderr)
        return 1

    print("=" * 60)
    print("📊 Task Watcher Configuration")
    print("=" * 60)
    print(f"\nConfiguration: {args.config}")
    print(f"Watch Directory: {settings.watch_dir or 'Not set'}")

    if settings.watch_dir and not Path(settings.watch_dir).is_dir():
        print("   ⚠️  Directory does not exist (will retry while watching)")

    print(f"Backend: {settings.backend}")
    print(f"Poll Interval: {settings.poll_interval}s")
    print(f"Retry Interval: {settings.retry_interval}s")
    print(f"Buffer Size: {settings.buffer_size}")
    print(f"Suffix: {settings.suffix}")

    return 0


def cmd_set_dir(args):
    """Store the watch directory in the configuration file."""
    try:
        config_manager = ConfigManager(args.config)
        watch_dir = config_manager.set_watch_dir(args.path)
        config_manager.save_config()
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print(f"✅ Watch Directory: {watch_dir}")
    return 0


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Task Watcher CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Store the task directory
  task-watcher set-dir /etc/tasks

  # Watch for new or changed task files
  task-watcher watch

  # Watch with the OS-native backend
  task-watcher watch --backend native

  # List task files once
  task-watcher scan --dir /etc/tasks
        """
    )

    # Global arguments
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Watch the task directory")
    watch_parser.add_argument("--dir", help="Directory to watch (overrides config)")
    watch_parser.add_argument(
        "--backend",
        choices=["polling", "native"],
        help="Watcher backend (overrides config)"
    )
    watch_parser.add_argument(
        "--count",
        type=int,
        default=0,
        help="Stop after N updates (0 = run until interrupted)"
    )
    watch_parser.set_defaults(func=cmd_watch)

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="Scan the task directory once")
    scan_parser.add_argument("--dir", help="Directory to scan (overrides config)")
    scan_parser.set_defaults(func=cmd_scan)

    # Status command
    status_parser = subparsers.add_parser("status", help="Show configuration")
    status_parser.set_defaults(func=cmd_status)

    # Set-dir command
    set_dir_parser = subparsers.add_parser("set-dir", help="Set the watch directory")
    set_dir_parser.add_argument("path", help="Directory holding task definition files")
    set_dir_parser.set_defaults(func=cmd_set_dir)

    # Parse arguments
    args = parser.parse_args(argv)

    # Set default config file if not specified
    if not args.config:
        args.config = DEFAULT_CONFIG_FILE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT
    )

    # Execute command
    if hasattr(args, 'func'):
        return args.func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
