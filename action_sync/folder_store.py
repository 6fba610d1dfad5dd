"""
Folder Document Store

Notes as plain text files: <root>/<folder>/<name>.md
Raw content and plaintext are the same thing here.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .errors import SourceNotFound, StoreUnavailable
from .stores import DocumentStore
from . import config

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


class FolderDocumentStore(DocumentStore):
    """Document store backed by a directory tree."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root or config.NOTES_DIR)

    def _path(self, folder: str, name: str) -> Path:
        return self.root / folder / f"{name}{NOTE_SUFFIX}"

    def list_documents(self, folder: str) -> list[str]:
        directory = self.root / folder
        if not directory.is_dir():
            return []
        return sorted(p.stem for p in directory.glob(f"*{NOTE_SUFFIX}") if p.is_file())

    def read_text(self, folder: str, name: str) -> str:
        path = self._path(folder, name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise SourceNotFound(folder, name) from None
        except OSError as e:
            raise StoreUnavailable(f"Cannot read {path}: {e}") from e

    def read_raw(self, folder: str, name: str) -> str:
        return self.read_text(folder, name)

    def write_raw(self, folder: str, name: str, raw: str):
        path = self._path(folder, name)
        if not path.exists():
            raise SourceNotFound(folder, name)
        self._write(path, raw)

    def create_document(self, folder: str, name: str, lines: list[str]):
        path = self._path(folder, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Creating note {path}")
        self._write(path, self.format_lines(lines))

    @staticmethod
    def _write(path: Path, content: str):
        """Replace a file atomically so a reader never sees half a note."""
        try:
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp, path)
        except OSError as e:
            raise StoreUnavailable(f"Cannot write {path}: {e}") from e
