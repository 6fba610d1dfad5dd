#!/usr/bin/env python3
"""
Notes ↔ Reminders Action Sync CLI

Main command-line interface for the sync tool.
"""

import argparse
import sys

from .action_list import completed_items, open_items
from .errors import StoreUnavailable
from .logs import setup_logging
from .sync_engine import SyncEngine, default_notes_store, default_task_store
from . import config


def cmd_sync(args):
    """Run one reconciliation pass."""
    engine = SyncEngine()

    result = engine.run_once(dry_run=args.dry_run)

    if result.skipped:
        print("Another sync is running; skipped.")
        return 0

    print(result.summary())
    if args.dry_run:
        print("\n[DRY RUN] No changes were made.")

    return 0 if result.success else 1


def cmd_status(args):
    """Show sync status."""
    engine = SyncEngine()
    status = engine.get_status()

    print("\n=== Sync Status ===\n")
    print(f"Open actions: {status['open_actions']}")
    print(f"Completed actions: {status['completed_actions']}")
    print(f"Reminders in '{engine.settings.reminders_list}': {status['reminders']} "
          f"({status['completed_reminders']} completed)")
    print()
    print("Pass History:")
    for key, value in status["sync_state"].items():
        print(f"  {key}: {value}")

    if status["last_logs"]:
        print("\nRecent Passes:")
        for log in status["last_logs"]:
            print(f"  [{log['timestamp']}] {log['action']}")

    return 0


def cmd_actions(args):
    """Print the Action List."""
    engine = SyncEngine()
    lines = engine.read_action_list()

    print("\n=== Open ===\n")
    for item in open_items(lines):
        print(f"  ○ {item.display}")

    print("\n=== Completed ===\n")
    for item in completed_items(lines):
        print(f"  ✓ {item.display}")

    return 0


def cmd_test(args):
    """Test connections to both stores."""
    print("\n=== Connection Test ===\n")

    print("Testing notes store...")
    try:
        notes = default_notes_store()
        names = notes.list_documents(config.NOTES_FOLDER)
        print(f"  ✓ Connected. Found {len(names)} notes in '{config.NOTES_FOLDER}'.")
    except (StoreUnavailable, FileNotFoundError, ValueError) as e:
        print(f"  ✗ Error: {e}")

    print("\nTesting Apple Reminders...")
    try:
        reminders = default_task_store()
        tasks = reminders.list_tasks(config.REMINDERS_LIST)
        print(f"  ✓ Connected. Found {len(tasks)} reminders in '{config.REMINDERS_LIST}'.")
    except (StoreUnavailable, FileNotFoundError) as e:
        print(f"  ✗ Error: {e}")

    return 0


def cmd_config(args):
    """Show current configuration."""
    config.print_config()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Notes ↔ Reminders Action Sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview what sync would do
  python -m action_sync.main sync --dry-run

  # Run one pass
  python -m action_sync.main sync

  # Check sync status
  python -m action_sync.main status

  # Show the Action List
  python -m action_sync.main actions
"""
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # sync command
    sync_parser = subparsers.add_parser("sync", help="Run one sync pass")
    sync_parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Preview changes without making them"
    )

    subparsers.add_parser("status", help="Show sync status")
    subparsers.add_parser("actions", help="Show the Action List")
    subparsers.add_parser("test", help="Test connections to both stores")
    subparsers.add_parser("config", help="Show current configuration")

    return parser


COMMANDS = {
    "sync": cmd_sync,
    "status": cmd_status,
    "actions": cmd_actions,
    "test": cmd_test,
    "config": cmd_config,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(config.LOG_FILE, config.MAX_LOG_LINES, verbose=args.verbose)

    handler = COMMANDS.get(args.command)
    if handler:
        sys.exit(handler(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
