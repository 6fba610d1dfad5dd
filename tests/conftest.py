"""
Shared pytest fixtures for action sync tests.

In-memory notes and reminders stores stand in for Notes.app and
Reminders so a full pass runs without macOS.
"""

from pathlib import Path

import pytest

from action_sync.config import SyncSettings
from action_sync.errors import SourceNotFound, StoreUnavailable
from action_sync.models import TargetTask
from action_sync.stores import DocumentStore, TaskStore
from action_sync.sync_engine import SyncEngine
from action_sync.sync_state import SyncState


class MemoryNotes(DocumentStore):
    """Notes kept as plaintext in a dict keyed by (folder, name)."""

    def __init__(self):
        self.docs: dict[tuple[str, str], str] = {}
        self.writes = 0
        self.fail = False

    def add(self, folder: str, name: str, *lines: str):
        self.docs[(folder, name)] = "\n".join(lines) + "\n"

    def lines(self, folder: str, name: str) -> list[str]:
        return self.docs[(folder, name)].splitlines()

    def _check(self):
        if self.fail:
            raise StoreUnavailable("notes offline")

    def list_documents(self, folder: str) -> list[str]:
        self._check()
        return [name for (f, name) in self.docs if f == folder]

    def read_text(self, folder: str, name: str) -> str:
        self._check()
        try:
            return self.docs[(folder, name)]
        except KeyError:
            raise SourceNotFound(folder, name) from None

    def read_raw(self, folder: str, name: str) -> str:
        return self.read_text(folder, name)

    def write_raw(self, folder: str, name: str, raw: str):
        self._check()
        if (folder, name) not in self.docs:
            raise SourceNotFound(folder, name)
        self.docs[(folder, name)] = raw
        self.writes += 1

    def create_document(self, folder: str, name: str, lines: list[str]):
        self._check()
        self.docs[(folder, name)] = self.format_lines(lines)


class MemoryReminders(TaskStore):
    """Reminders lists kept in a dict of TargetTask lists."""

    def __init__(self):
        self.lists: dict[str, list[TargetTask]] = {}
        self.created: list[str] = []
        self.fail = False

    def list_tasks(self, list_name: str) -> list[TargetTask]:
        if self.fail:
            raise StoreUnavailable("reminders offline")
        return [TargetTask(t.name, t.completed) for t in self.lists.get(list_name, [])]

    def create_task(self, list_name: str, name: str):
        if self.fail:
            raise StoreUnavailable("reminders offline")
        self.lists.setdefault(list_name, []).append(TargetTask(name))
        self.created.append(name)

    def complete(self, list_name: str, name: str):
        for task in self.lists[list_name]:
            if task.name == name:
                task.completed = True

    def delete(self, list_name: str, name: str):
        self.lists[list_name] = [t for t in self.lists[list_name] if t.name != name]

    def names(self, list_name: str, completed=None) -> list[str]:
        return [
            t.name for t in self.lists.get(list_name, [])
            if completed is None or t.completed == completed
        ]


@pytest.fixture
def settings(tmp_path: Path) -> SyncSettings:
    return SyncSettings(
        notes_folder="Actions",
        action_list_note="Action List",
        reminders_list="WORK",
        lock_file=tmp_path / "action_sync.lock",
        lock_timeout=30,
        state_db=tmp_path / "sync_state.db",
    )


@pytest.fixture
def notes() -> MemoryNotes:
    return MemoryNotes()


@pytest.fixture
def reminders() -> MemoryReminders:
    return MemoryReminders()


@pytest.fixture
def engine(notes, reminders, settings) -> SyncEngine:
    return SyncEngine(
        notes=notes,
        reminders=reminders,
        sync_state=SyncState(settings.state_db),
        settings=settings,
    )
