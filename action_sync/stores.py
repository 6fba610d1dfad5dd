"""
Store Interfaces

The reconciliation pass only talks to these two contracts. Adapters
for Notes.app, Reminders and plain folders implement them.
"""

from abc import ABC, abstractmethod

from .models import TargetTask


class DocumentStore(ABC):
    """
    Named documents grouped in folders.

    Plaintext is what the tag parser reads. Raw content is the store's
    own representation (HTML for Notes.app) and is what gets written
    back, so formatting outside the rewritten tags survives.
    """

    @abstractmethod
    def list_documents(self, folder: str) -> list[str]:
        """Names of all documents in a folder (empty if it does not exist)."""

    @abstractmethod
    def read_text(self, folder: str, name: str) -> str:
        """Plaintext of a document. Raises SourceNotFound."""

    @abstractmethod
    def read_raw(self, folder: str, name: str) -> str:
        """Raw content of a document. Raises SourceNotFound."""

    @abstractmethod
    def write_raw(self, folder: str, name: str, raw: str):
        """Replace a document's raw content. Raises SourceNotFound."""

    @abstractmethod
    def create_document(self, folder: str, name: str, lines: list[str]):
        """Create a document holding the given lines."""

    def format_lines(self, lines: list[str]) -> str:
        """Render plain lines as raw content."""
        return "\n".join(lines) + "\n"

    def encode_text(self, text: str) -> str:
        """The form plain text takes inside raw content."""
        return text


class TaskStore(ABC):
    """Named task lists holding reminders."""

    @abstractmethod
    def list_tasks(self, list_name: str) -> list[TargetTask]:
        """All tasks in a list, open and completed."""

    @abstractmethod
    def create_task(self, list_name: str, name: str):
        """Add an open task to a list."""
