"""
Notes ↔ Reminders Action Sync

Collects #act lines from notes into a deduplicated Action List,
mirrors open actions as reminders, and carries completed reminders
back to the Action List and the notes they came from as #done.
"""

from .models import ActionItem, ActionState, TargetTask, SyncResult
from .config import SyncSettings
from .stores import DocumentStore, TaskStore
from .tags import TagParser
from .sync_state import SyncState
from .sync_engine import SyncEngine

__all__ = [
    "ActionItem",
    "ActionState",
    "TargetTask",
    "SyncResult",
    "SyncSettings",
    "DocumentStore",
    "TaskStore",
    "TagParser",
    "SyncState",
    "SyncEngine",
]

__version__ = "0.1.0"
