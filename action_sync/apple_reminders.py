"""
Apple Reminders Interface

Uses reminders-cli (Swift/EventKit) to read and add reminders.

Commands used:
- show <list> --format json --include-completed
- add <list> <title> --format json
- show-lists, new-list
"""

import json
import logging
import os
import subprocess
from typing import Optional

from .errors import StoreUnavailable
from .models import TargetTask
from .stores import TaskStore
from . import config

logger = logging.getLogger(__name__)


class AppleReminders(TaskStore):
    """Task store backed by Apple Reminders through reminders-cli."""

    def __init__(self, reminders_cli_path: Optional[str] = None):
        """
        Initialize the Apple Reminders interface.

        Args:
            reminders_cli_path: Path to reminders-cli binary (env: REMINDERS_CLI_PATH)
        """
        self.reminders_cli = reminders_cli_path or config.REMINDERS_CLI_PATH
        self._known_lists: set[str] = set()
        self._verify_reminders_cli()

    def _verify_reminders_cli(self):
        """Verify reminders-cli is available."""
        if not os.path.exists(self.reminders_cli):
            raise FileNotFoundError(
                f"reminders-cli not found at {self.reminders_cli}. "
                "Please install from https://github.com/keith/reminders-cli "
                "or set REMINDERS_CLI_PATH environment variable."
            )

    def _run_reminders_cli(self, *args: str) -> str:
        """Run reminders-cli and return output."""
        cmd = [self.reminders_cli] + list(args)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True
            )
        except subprocess.CalledProcessError as e:
            raise StoreUnavailable(
                f"reminders-cli {args[0]} failed: {(e.stderr or '').strip()}"
            ) from e
        except OSError as e:
            raise StoreUnavailable(f"Cannot run reminders-cli: {e}") from e
        return result.stdout

    def list_lists(self) -> list[str]:
        """Get all reminder list names."""
        output = self._run_reminders_cli("show-lists")
        return [line.strip() for line in output.strip().split("\n") if line.strip()]

    def ensure_list(self, list_name: str):
        """Create the list if it does not exist yet."""
        if list_name in self._known_lists:
            return
        if list_name not in self.list_lists():
            logger.info(f"Creating Reminders list '{list_name}'")
            self._run_reminders_cli("new-list", list_name)
        self._known_lists.add(list_name)

    def list_tasks(self, list_name: str) -> list[TargetTask]:
        """
        Get all reminders in a list, completed ones included.

        A list that does not exist yet holds no tasks.
        """
        if list_name not in self.list_lists():
            return []

        output = self._run_reminders_cli(
            "show", list_name, "--format", "json", "--include-completed"
        )
        try:
            reminders = json.loads(output) if output.strip() else []
        except json.JSONDecodeError as e:
            raise StoreUnavailable(f"Unreadable reminders-cli output: {e}") from e

        return [self._reminder_to_task(r) for r in reminders]

    @staticmethod
    def _reminder_to_task(reminder: dict) -> TargetTask:
        """Convert reminders-cli JSON to TargetTask."""
        return TargetTask(
            name=(reminder.get("title") or "").strip(),
            completed=bool(reminder.get("isCompleted", False)),
        )

    def create_task(self, list_name: str, name: str):
        """Add an open reminder to a list, creating the list if needed."""
        self.ensure_list(list_name)
        self._run_reminders_cli("add", list_name, name, "--format", "json")

    def test_connection(self) -> bool:
        """Test connection to Apple Reminders."""
        try:
            self.list_lists()
            return True
        except StoreUnavailable:
            return False
