"""
Apple Notes Interface

Reads and writes notes in Notes.app through osascript.

Note names, folder names and bodies are passed as script arguments
(`on run argv`), never spliced into the script text. Plaintext is the
note's `plaintext` property; raw content is its HTML `body`.
"""

import html
import logging
import subprocess
from typing import Optional

from .errors import SourceNotFound, StoreUnavailable
from .stores import DocumentStore
from . import config

logger = logging.getLogger(__name__)

# Prefix marking a successful lookup; a missing note prints MISSING instead
FOUND = "FOUND:"
MISSING = "MISSING"

LIST_NOTES_SCRIPT = """
on run argv
    set folderName to item 1 of argv
    tell application "Notes"
        try
            set theFolder to folder folderName
        on error
            return ""
        end try
        set output to ""
        repeat with n in notes of theFolder
            set output to output & (name of n) & linefeed
        end repeat
        return output
    end tell
end run
"""

READ_NOTE_SCRIPT = """
on run argv
    set folderName to item 1 of argv
    set noteName to item 2 of argv
    set wantBody to (item 3 of argv) is "body"
    tell application "Notes"
        try
            set theNote to note noteName of folder folderName
        on error
            return "MISSING"
        end try
        if wantBody then
            return "FOUND:" & (body of theNote)
        end if
        return "FOUND:" & (plaintext of theNote)
    end tell
end run
"""

WRITE_NOTE_SCRIPT = """
on run argv
    set folderName to item 1 of argv
    set noteName to item 2 of argv
    set newBody to item 3 of argv
    tell application "Notes"
        try
            set theNote to note noteName of folder folderName
        on error
            return "MISSING"
        end try
        set body of theNote to newBody
        return "FOUND:"
    end tell
end run
"""

CREATE_NOTE_SCRIPT = """
on run argv
    set folderName to item 1 of argv
    set noteName to item 2 of argv
    set noteBody to item 3 of argv
    tell application "Notes"
        try
            set theFolder to folder folderName
        on error
            set theFolder to make new folder with properties {name:folderName}
        end try
        make new note at theFolder with properties {name:noteName, body:noteBody}
    end tell
end run
"""


class AppleNotes(DocumentStore):
    """Document store backed by Notes.app."""

    def __init__(self, osascript_path: Optional[str] = None):
        """
        Args:
            osascript_path: Path to osascript (env: OSASCRIPT_PATH)
        """
        self.osascript = osascript_path or config.OSASCRIPT_PATH

    def _run_script(self, script: str, *args: str) -> str:
        """Run an AppleScript with arguments and return its result."""
        cmd = [self.osascript, "-"] + list(args)
        try:
            result = subprocess.run(
                cmd,
                input=script,
                capture_output=True,
                text=True,
                check=True
            )
        except subprocess.CalledProcessError as e:
            raise StoreUnavailable(f"osascript failed: {(e.stderr or '').strip()}") from e
        except OSError as e:
            raise StoreUnavailable(f"Cannot run osascript: {e}") from e

        # osascript terminates its result with a newline
        output = result.stdout
        if output.endswith("\n"):
            output = output[:-1]
        return output

    def _read(self, folder: str, name: str, prop: str) -> str:
        output = self._run_script(READ_NOTE_SCRIPT, folder, name, prop)
        if not output.startswith(FOUND):
            raise SourceNotFound(folder, name)
        return output[len(FOUND):]

    def list_documents(self, folder: str) -> list[str]:
        output = self._run_script(LIST_NOTES_SCRIPT, folder)
        return [line for line in output.split("\n") if line.strip()]

    def read_text(self, folder: str, name: str) -> str:
        return self._read(folder, name, "plaintext")

    def read_raw(self, folder: str, name: str) -> str:
        return self._read(folder, name, "body")

    def write_raw(self, folder: str, name: str, raw: str):
        output = self._run_script(WRITE_NOTE_SCRIPT, folder, name, raw)
        if output == MISSING:
            raise SourceNotFound(folder, name)

    def create_document(self, folder: str, name: str, lines: list[str]):
        logger.info(f"Creating note '{name}' in folder '{folder}'")
        self._run_script(CREATE_NOTE_SCRIPT, folder, name, self.format_lines(lines))

    def format_lines(self, lines: list[str]) -> str:
        """One <div> per line, as Notes.app stores typed text."""
        parts = []
        for line in lines:
            if line.strip():
                parts.append(f"<div>{self.encode_text(line)}</div>")
            else:
                parts.append("<div><br></div>")
        return "".join(parts)

    def encode_text(self, text: str) -> str:
        return html.escape(text, quote=False)

    def test_connection(self) -> bool:
        """Test connection to Notes.app."""
        try:
            self._run_script('tell application "Notes" to count of folders')
            return True
        except StoreUnavailable:
            return False
