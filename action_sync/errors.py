"""
Sync Errors

Exceptions raised by the stores and the reconciliation pass.
Only StoreUnavailable aborts a pass; the others are handled where they occur.
"""

from typing import Optional


class SyncError(Exception):
    """Base class for all action sync errors."""


class StoreUnavailable(SyncError):
    """A read or write against the notes or reminders store failed."""


class SourceNotFound(SyncError):
    """A named document does not exist in the notes store."""

    def __init__(self, folder: str, name: str):
        super().__init__(f"Note '{name}' not found in folder '{folder}'")
        self.folder = folder
        self.name = name


class MatchAmbiguous(SyncError):
    """An action matches items from more than one source note."""

    def __init__(self, text: str, candidates: list[str]):
        super().__init__(
            f"'{text}' matches several notes: {', '.join(candidates)}"
        )
        self.text = text
        self.candidates = candidates


class LockContention(SyncError):
    """Another pass holds a fresh lock."""

    def __init__(self, age_seconds: Optional[float] = None):
        if age_seconds is None:
            message = "Another sync is running"
        else:
            message = f"Another sync is running (lock age: {age_seconds:.0f}s)"
        super().__init__(message)
        self.age_seconds = age_seconds
