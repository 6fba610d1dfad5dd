"""
Action List

Maintains the merged note of record: every action found in the source
notes appears here exactly once, tagged open or completed, with the
name of the note it came from.

Three steps, each over the parsed lines of the note:
- build_action_list: append new actions, collapse duplicates
- ProvenanceAnnotator: append " [Note]" to lines that lack it
- organize: untagged text, open items, separator, completed items
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import MatchAmbiguous
from .models import ActionItem, ActionState, annotation_round_trips, identity_key
from .tags import Line

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Lines after merging plus what changed."""
    lines: list
    new_entries: int = 0
    collapsed: int = 0


def items_of(lines: Iterable[Line]) -> list[ActionItem]:
    return [line for line in lines if isinstance(line, ActionItem)]


def open_items(lines: Iterable[Line]) -> list[ActionItem]:
    return [item for item in items_of(lines) if item.is_open]


def completed_items(lines: Iterable[Line]) -> list[ActionItem]:
    return [item for item in items_of(lines) if item.is_completed]


def build_action_list(lines: list[Line], incoming: Iterable[ActionItem]) -> BuildResult:
    """
    Merge freshly parsed source items into the action list.

    Existing duplicates collapse onto a single line: a completed line
    wins over open ones for the same key, otherwise the first line is
    kept. Open source items whose key is not yet present are appended
    as new open entries. Completed source items are never imported,
    and no existing entry changes state here.

    Args:
        lines: Parsed action list (items and untagged text)
        incoming: Items parsed from all source notes

    Returns:
        BuildResult with the merged lines
    """
    completed_keys = {item.key for item in completed_items(lines)}

    merged: list[Line] = []
    seen: set[str] = set()
    collapsed = 0

    for line in lines:
        if isinstance(line, ActionItem):
            key = line.key
            if key in seen or (line.is_open and key in completed_keys):
                collapsed += 1
                logger.debug(f"  Collapsed duplicate: '{line.text}'")
                continue
            seen.add(key)
        merged.append(line)

    new_entries = 0
    for item in incoming:
        if not item.is_open or not item.key or item.key in seen:
            continue
        seen.add(item.key)
        merged.append(ActionItem(text=item.text, state=ActionState.OPEN))
        new_entries += 1
        logger.info(f"  New action: '{item.text}'")

    if collapsed:
        logger.info(f"  Collapsed {collapsed} duplicate action list lines")

    return BuildResult(lines=merged, new_entries=new_entries, collapsed=collapsed)


class ProvenanceAnnotator:
    """
    Attaches the originating note name to action list lines.

    Built fresh for every pass from the items currently in the source
    notes; nothing is persisted between passes.
    """

    def __init__(self, source_items: Iterable[ActionItem]):
        # (text, note) pairs, longest text first so a short action
        # never claims a line that a longer one matches
        pairs = []
        seen = set()
        for item in source_items:
            if not item.source or (item.text, item.source) in seen:
                continue
            seen.add((item.text, item.source))
            pairs.append((item.text, item.source))
        self._candidates = sorted(pairs, key=lambda pair: len(pair[0]), reverse=True)

    def find_source(self, text: str) -> Optional[str]:
        """
        Find the note an action came from.

        A candidate matches when its text equals the action, or equals
        it once the note title is appended (as a compiled list might
        render it). Among the longest matches all must come from the
        same note.

        Raises:
            MatchAmbiguous: the longest matches name different notes
        """
        key = identity_key(text)
        if not key:
            return None

        best_length = None
        sources: list[str] = []
        for candidate, source in self._candidates:
            if best_length is not None and len(candidate) < best_length:
                break
            if identity_key(candidate) == key or identity_key(f"{candidate} {source}") == key:
                best_length = len(candidate)
                if source not in sources:
                    sources.append(source)

        if not sources:
            return None
        if len(sources) > 1:
            raise MatchAmbiguous(text, sources)
        return sources[0]

    def annotate(self, lines: list[Line]) -> int:
        """
        Annotate every tagged line that has no provenance yet.

        Lines that already carry "[...]" are left untouched, so running
        this again changes nothing.

        Returns:
            Number of lines annotated
        """
        annotated = 0
        for item in items_of(lines):
            if item.source:
                continue
            try:
                source = self.find_source(item.text)
            except MatchAmbiguous as e:
                logger.info(f"  Left unannotated: {e}")
                continue
            if source is None:
                continue
            if not annotation_round_trips(item.text, source):
                logger.info(f"  Left unannotated: note name '{source}' would not read back from '{item.text}'")
                continue
            item.annotate(source)
            annotated += 1
            logger.info(f"  Annotated '{item.text}' with [{source}]")
        return annotated


def organize(lines: list[Line], separator: str) -> list[Line]:
    """
    Reorder the action list for display.

    Untagged text keeps its relative order at the top, followed by open
    items, then a single separator and the completed items (the
    separator only when something is completed). Separators left from
    earlier passes are dropped. Nothing else is added or changed.
    """
    other: list[Line] = []
    open_: list[Line] = []
    done: list[Line] = []
    for line in lines:
        if isinstance(line, ActionItem):
            (open_ if line.is_open else done).append(line)
        elif line.strip() == separator.strip():
            continue
        else:
            other.append(line)

    organized = other + open_
    if done:
        organized.append(separator)
        organized.extend(done)
    return organized
