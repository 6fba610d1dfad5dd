"""
Tag Parser

Extracts tagged action lines from the plaintext of a note.

A tagged line is one whose trimmed content starts with the open
marker (default "#act") or the completed marker (default "#done"),
matched case-insensitively and followed by whitespace. Everything
else is left to the caller to preserve.
"""

import re
from typing import Optional, Union

from .models import ActionItem, ActionState, split_annotation

# An action list line is either a tagged item or untouched text
Line = Union[ActionItem, str]


def split_lines(text: str) -> list[str]:
    """Split note plaintext into logical lines (LF, CR or CRLF)."""
    if not text:
        return []
    lines = re.split(r"\r\n|\r|\n", text)
    # A final newline terminates the last line rather than opening a new one
    if lines[-1] == "":
        lines.pop()
    return lines


class TagParser:
    """Classifies lines by marker and renders items back to lines."""

    def __init__(self, open_tag: str = "#act", done_tag: str = "#done"):
        self.open_tag = open_tag
        self.done_tag = done_tag
        self._markers = [
            (re.compile(rf"^{re.escape(open_tag)}(?:\s+|$)", re.IGNORECASE), ActionState.OPEN),
            (re.compile(rf"^{re.escape(done_tag)}(?:\s+|$)", re.IGNORECASE), ActionState.COMPLETED),
        ]

    def classify(self, line: str, annotated: bool = False) -> Optional[ActionItem]:
        """
        Parse one line into an ActionItem, or None if it is not tagged.

        Args:
            line: A single line of note text
            annotated: Split a trailing "[Note]" suffix into `source`
                (action list lines); otherwise the suffix stays in `text`
        """
        stripped = line.strip()
        for pattern, state in self._markers:
            match = pattern.match(stripped)
            if not match:
                continue
            body = stripped[match.end():].strip()
            if not body:
                return None
            source = None
            if annotated:
                text, name = split_annotation(body)
                if name and text:
                    body, source = text, name
            return ActionItem(text=body, state=state, source=source, raw=line)
        return None

    def parse(self, text: str, source: Optional[str] = None) -> list[ActionItem]:
        """
        Extract all tagged items from a note's plaintext, in order.

        Args:
            text: Note plaintext
            source: Note name recorded on every returned item
        """
        items = []
        for line in split_lines(text):
            item = self.classify(line)
            if item is None:
                continue
            item.source = source
            items.append(item)
        return items

    def parse_lines(self, text: str) -> list[Line]:
        """Split action list plaintext into items and untagged lines."""
        lines: list[Line] = []
        for line in split_lines(text):
            item = self.classify(line, annotated=True)
            lines.append(item if item is not None else line)
        return lines

    def tag_for(self, state: ActionState) -> str:
        return self.open_tag if state == ActionState.OPEN else self.done_tag

    def format(self, item: ActionItem) -> str:
        """Render an item as an action list line."""
        if item.raw is not None:
            return item.raw
        return f"{self.tag_for(item.state)} {item.display}"

    def render(self, lines: list[Line]) -> list[str]:
        return [self.format(line) if isinstance(line, ActionItem) else line for line in lines]
