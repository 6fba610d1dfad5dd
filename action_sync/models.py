"""
Data Models for Notes-Reminders Action Sync

Defines the ActionItem model shared by notes and the action list,
the TargetTask read back from Reminders, and the per-pass SyncResult.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


def split_annotation(text: str) -> tuple[str, Optional[str]]:
    """
    Split a trailing " [Note Name]" provenance suffix off a line body.

    The suffix is the bracket group that closes at the end of the text,
    matched with nesting, so note names that themselves contain
    balanced brackets ("Project [Q3]") come back whole.

    Returns:
        (body without the suffix, note name or None)
    """
    stripped = text.strip()
    if not stripped.endswith("]"):
        return stripped, None
    depth = 0
    for i in range(len(stripped) - 1, -1, -1):
        if stripped[i] == "]":
            depth += 1
        elif stripped[i] == "[":
            depth -= 1
            if depth == 0:
                name = stripped[i + 1:-1].strip()
                if not name:
                    break
                return stripped[:i].strip(), name
    return stripped, None


def strip_annotation(text: str) -> str:
    """Remove a trailing provenance annotation, if any."""
    return split_annotation(text)[0]


def annotation_round_trips(text: str, source: str) -> bool:
    """True if "text [source]" reads back as exactly (text, source)."""
    return split_annotation(f"{text} [{source}]") == (text.strip(), source.strip())


def identity_key(text: str) -> str:
    """
    Key used to decide whether two lines describe the same action.

    Case-insensitive, whitespace-normalized, provenance annotation removed.
    """
    return " ".join(strip_annotation(text).split()).lower()


class ActionState(str, Enum):
    """The two tag states a line can carry."""
    OPEN = "open"
    COMPLETED = "completed"


@dataclass
class ActionItem:
    """
    A tagged line from a note or from the action list.

    `text` is the body without tag or annotation; `source` is the
    name of the note it came from (parsed from the annotation on
    action list lines, or the note itself for source lines).
    """
    text: str
    state: ActionState = ActionState.OPEN
    source: Optional[str] = None

    # Line as read from the store; cleared once the item is modified
    raw: Optional[str] = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> str:
        return identity_key(self.text)

    @property
    def is_open(self) -> bool:
        return self.state == ActionState.OPEN

    @property
    def is_completed(self) -> bool:
        return self.state == ActionState.COMPLETED

    @property
    def display(self) -> str:
        """Body as shown in the action list, with provenance."""
        if self.source:
            return f"{self.text} [{self.source}]"
        return self.text

    def complete(self):
        """Flip to completed. Completion is never undone."""
        if not self.is_completed:
            self.state = ActionState.COMPLETED
            self.raw = None

    def annotate(self, source: str):
        """Attach provenance unless already present."""
        if self.source:
            return
        self.source = source
        self.raw = None


@dataclass
class TargetTask:
    """A reminder in the target list."""
    name: str
    completed: bool = False

    @property
    def key(self) -> str:
        return identity_key(self.name)


@dataclass
class SyncResult:
    """Summary of one reconciliation pass."""
    started_at: datetime
    completed_at: Optional[datetime] = None
    dry_run: bool = False
    skipped: bool = False
    items_parsed: int = 0
    new_entries: int = 0
    annotated: int = 0
    tasks_created: int = 0
    completions: int = 0
    sources_updated: int = 0
    errors: list = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "dry_run": self.dry_run,
            "skipped": self.skipped,
            "items_parsed": self.items_parsed,
            "new_entries": self.new_entries,
            "annotated": self.annotated,
            "tasks_created": self.tasks_created,
            "completions": self.completions,
            "sources_updated": self.sources_updated,
            "errors": self.errors,
        }

    def summary(self) -> str:
        """Generate a human-readable summary."""
        if self.skipped:
            return "Sync skipped: another pass is running"
        lines = [
            f"Sync completed at {self.completed_at}",
            f"Notes → Action List: {self.items_parsed} parsed, "
            f"{self.new_entries} new, {self.annotated} annotated",
            f"Action List → Reminders: {self.tasks_created} created",
            f"Reminders → Notes: {self.completions} completed, "
            f"{self.sources_updated} source notes updated",
        ]
        if self.errors:
            lines.append(f"Errors: {len(self.errors)}")
        return "\n".join(lines)
