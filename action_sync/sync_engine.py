"""
Sync Engine

One reconciliation pass between tagged lines in notes, the Action List
note and a Reminders list:

    notes → parse → Action List (dedupe, provenance, order) → Reminders
    completed reminders → Action List → originating notes

Every step is safe to repeat: a pass with no outside changes writes
nothing, and a pass that stopped halfway is finished by the next one.
"""

from datetime import datetime
from typing import Optional
import logging
import re
import sqlite3

from .action_list import (
    ProvenanceAnnotator,
    build_action_list,
    completed_items,
    open_items,
    organize,
)
from .config import SyncSettings
from .errors import LockContention, SourceNotFound, StoreUnavailable
from .lock import PassLock
from .models import ActionItem, SyncResult, TargetTask, identity_key
from .stores import DocumentStore, TaskStore
from .sync_state import SyncState
from .tags import Line, TagParser, split_lines
from . import config

logger = logging.getLogger(__name__)


def default_notes_store() -> DocumentStore:
    """Notes store selected by ACTION_SYNC_NOTES_BACKEND."""
    if config.NOTES_BACKEND == "folder":
        from .folder_store import FolderDocumentStore
        return FolderDocumentStore(config.NOTES_DIR)
    if config.NOTES_BACKEND == "apple":
        from .apple_notes import AppleNotes
        return AppleNotes()
    raise ValueError(f"Unknown notes backend: {config.NOTES_BACKEND}")


def default_task_store() -> TaskStore:
    from .apple_reminders import AppleReminders
    return AppleReminders()


class SyncEngine:
    """
    Notes ↔ Reminders action sync.

    Key features:
    - Identity by case-insensitive text, so retyped items never duplicate
    - Provenance kept on each Action List line for back-propagation
    - Completion only ever moves forward (open → completed)
    - Lock file keeps passes from overlapping
    - Dry-run mode for previewing changes
    """

    def __init__(
        self,
        notes: Optional[DocumentStore] = None,
        reminders: Optional[TaskStore] = None,
        sync_state: Optional[SyncState] = None,
        settings: Optional[SyncSettings] = None,
    ):
        """
        Initialize the sync engine.

        Args:
            notes: Document store holding the source notes and the Action List
            reminders: Task store holding the target list
            sync_state: Pass history (opened from settings.state_db if None)
            settings: Folder, list and tag names (from config if None)
        """
        self.settings = settings or SyncSettings.from_config()
        self.notes = notes or default_notes_store()
        self.reminders = reminders or default_task_store()
        if sync_state is None and self.settings.state_db is not None:
            sync_state = SyncState(self.settings.state_db)
        self.sync_state = sync_state
        self.parser = TagParser(self.settings.open_tag, self.settings.done_tag)

    @property
    def folder(self) -> str:
        return self.settings.notes_folder

    @property
    def action_list_name(self) -> str:
        return self.settings.action_list_note

    def run_once(self, dry_run: bool = False) -> SyncResult:
        """
        Execute one full pass.

        A pass is skipped (not queued) while another holds the lock.
        Store failures abort the pass and are reported in the result;
        the lock is released on every path.

        Args:
            dry_run: If True, compute and log changes without writing them

        Returns:
            SyncResult with summary of operations
        """
        result = SyncResult(started_at=datetime.now(), dry_run=dry_run)

        try:
            with PassLock(self.settings.lock_file, self.settings.lock_timeout):
                self._guarded_pass(result, dry_run)
        except LockContention as e:
            logger.info(f"SKIP: {e}")
            result.skipped = True
            result.completed_at = datetime.now()
            self._record("sync_skipped", result)
            return result

        result.completed_at = datetime.now()
        logger.info("\n" + result.summary())
        self._record("sync_complete" if result.success else "sync_failed", result)
        return result

    def _guarded_pass(self, result: SyncResult, dry_run: bool):
        """Run the pass, turning failures into result errors."""
        try:
            logger.info("=== Action sync started ===")
            if dry_run:
                logger.info("=== DRY RUN MODE ===")
            self._run_pass(result, dry_run)
            logger.info("=== Action sync completed ===")
        except StoreUnavailable as e:
            logger.error(f"Sync failed: {e}")
            result.errors.append(str(e))
        except Exception as e:
            logger.exception(f"Sync failed: {e}")
            result.errors.append(str(e))

    def _run_pass(self, result: SyncResult, dry_run: bool):
        # Parse all source notes
        documents = self.notes.list_documents(self.folder)
        source_items = self.read_sources(documents)
        result.items_parsed = len(source_items)
        logger.info(f"Found {len(source_items)} tagged lines in {len(documents)} notes")

        # Build, annotate and order the Action List
        list_name, lines, original = self._load_action_list(documents, dry_run)
        build = build_action_list(lines, source_items)
        result.new_entries = build.new_entries
        lines = build.lines
        result.annotated = ProvenanceAnnotator(source_items).annotate(lines)
        lines = organize(lines, self.settings.separator)
        original = self._save_action_list(list_name, lines, original, dry_run)

        # Action List → Reminders
        tasks = self.reminders.list_tasks(self.settings.reminders_list)
        logger.info(f"Found {len(tasks)} reminders in '{self.settings.reminders_list}'")
        result.tasks_created = self.project(open_items(lines), tasks, dry_run)

        # Completed reminders → Action List → source notes
        result.completions, result.sources_updated = self.back_propagate(lines, tasks, dry_run)
        lines = organize(lines, self.settings.separator)
        self._save_action_list(list_name, lines, original, dry_run)

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    def _is_source(self, name: str) -> bool:
        return name.strip().lower() != self.action_list_name.strip().lower()

    def _find_action_list(self, documents: list[str]) -> Optional[str]:
        """Stored name of the Action List note, matched like _is_source."""
        for name in documents:
            if not self._is_source(name):
                return name
        return None

    def read_sources(self, documents: list[str]) -> list[ActionItem]:
        """Parse tagged lines from every note except the Action List."""
        items = []
        for name in documents:
            if not self._is_source(name):
                continue
            try:
                text = self.notes.read_text(self.folder, name)
            except SourceNotFound:
                logger.warning(f"  Note '{name}' disappeared while scanning, skipping")
                continue
            items.extend(self.parser.parse(text, source=name))
        return items

    def _load_action_list(
        self, documents: list[str], dry_run: bool
    ) -> tuple[str, list[Line], list[str]]:
        """
        Read the Action List, creating it when missing.

        An existing note whose name differs only in case is used as is.

        Returns:
            (note name, parsed lines, lines as stored)
        """
        name = self._find_action_list(documents)
        if name is None:
            name = self.action_list_name
            title = [name]
            if dry_run:
                logger.info(f"  [DRY RUN] Create note '{name}'")
            else:
                self.notes.create_document(self.folder, name, title)
            return name, list(title), list(title)

        text = self.notes.read_text(self.folder, name)
        return name, self.parser.parse_lines(text), split_lines(text)

    def _save_action_list(
        self, name: str, lines: list[Line], original: list[str], dry_run: bool
    ) -> list[str]:
        """Write the Action List if its content changed; returns what is now stored."""
        rendered = self.parser.render(lines)
        if rendered == original:
            return original
        if dry_run:
            logger.info(f"  [DRY RUN] Rewrite '{name}' ({len(rendered)} lines)")
            return rendered
        self.notes.write_raw(self.folder, name, self.notes.format_lines(rendered))
        logger.info(f"  ✓ Updated '{name}'")
        return rendered

    # -------------------------------------------------------------------------
    # Action List → Reminders
    # -------------------------------------------------------------------------

    def project(self, items: list[ActionItem], tasks: list[TargetTask], dry_run: bool = False) -> int:
        """
        Create a reminder for every open action that has none.

        Completed reminders count as existing, so an action completed
        and later deleted in Reminders is not recreated.

        Returns:
            Number of reminders created
        """
        existing = {task.key for task in tasks}
        created = 0
        for item in items:
            if not item.is_open or item.key in existing:
                continue
            existing.add(item.key)
            if dry_run:
                logger.info(f"  [DRY RUN] Create reminder: '{item.text}'")
            else:
                self.reminders.create_task(self.settings.reminders_list, item.text)
                logger.info(f"  ✓ Created reminder: '{item.text}'")
            created += 1
        return created

    # -------------------------------------------------------------------------
    # Reminders → Action List → source notes
    # -------------------------------------------------------------------------

    def back_propagate(
        self,
        lines: list[Line],
        tasks: list[TargetTask],
        dry_run: bool = False
    ) -> tuple[int, int]:
        """
        Mark actions completed in Reminders as completed everywhere.

        Flips the matching open Action List line (keeping its provenance)
        and then the first matching open line in the source note. A
        missing note or line is logged and skipped.

        Returns:
            (Action List lines completed, source notes updated)
        """
        open_by_key: dict[str, ActionItem] = {}
        for item in open_items(lines):
            open_by_key.setdefault(item.key, item)

        completions = 0
        sources_updated = 0
        for task in tasks:
            if not task.completed:
                continue
            item = open_by_key.pop(task.key, None)
            if item is None:
                continue

            logger.info(f"  '{task.name}' completed in Reminders")
            item.complete()
            completions += 1

            if not item.source:
                logger.warning(f"  No source note recorded for '{item.text}', updated Action List only")
                continue
            if self.complete_in_source(item, dry_run):
                sources_updated += 1

        return completions, sources_updated

    def complete_in_source(self, item: ActionItem, dry_run: bool = False) -> bool:
        """
        Rewrite the item's open tag to completed in its source note.

        Returns:
            True if the note was (or in dry run would be) updated
        """
        source = item.source
        try:
            text = self.notes.read_text(self.folder, source)
        except SourceNotFound:
            logger.warning(f"  Source note '{source}' no longer exists, skipping")
            return False

        target = None
        for candidate in self.parser.parse(text, source=source):
            if not candidate.is_open:
                continue
            if candidate.key == item.key or identity_key(f"{candidate.text} {source}") == item.key:
                target = candidate
                break
        if target is None:
            logger.warning(f"  No open line for '{item.text}' in '{source}', skipping")
            return False

        try:
            raw = self.notes.read_raw(self.folder, source)
        except SourceNotFound:
            logger.warning(f"  Source note '{source}' no longer exists, skipping")
            return False

        updated = self.rewrite_tag(raw, target.text)
        if updated is None:
            logger.warning(f"  Could not locate '{target.text}' in the content of '{source}', skipping")
            return False

        if dry_run:
            logger.info(f"  [DRY RUN] Mark completed in '{source}': '{target.text}'")
            return True

        try:
            self.notes.write_raw(self.folder, source, updated)
        except SourceNotFound:
            logger.warning(f"  Source note '{source}' no longer exists, skipping")
            return False
        logger.info(f"  ✓ Marked completed in '{source}': '{target.text}'")
        return True

    def rewrite_tag(self, raw: str, text: str) -> Optional[str]:
        """
        Replace the first "<open tag> <text>" in raw content with the done tag.

        The text must end its line (or HTML element), so a shorter action
        never rewrites a longer one that starts the same way.

        Returns:
            Updated raw content, or None if no occurrence was found
        """
        encode = self.notes.encode_text
        pattern = re.compile(
            rf"{re.escape(encode(self.settings.open_tag))}"
            rf"((?:\s|&nbsp;|\xa0)+)"
            rf"({re.escape(encode(text))})"
            rf"(?=[ \t]*(?:<|\r|\n|$))",
            re.IGNORECASE,
        )
        done_tag = encode(self.settings.done_tag)
        updated, count = pattern.subn(
            lambda m: f"{done_tag}{m.group(1)}{m.group(2)}", raw, count=1
        )
        if count == 0:
            return None
        return updated

    # -------------------------------------------------------------------------
    # History and status
    # -------------------------------------------------------------------------

    def _record(self, action: str, result: SyncResult):
        """Append the pass to history; never fails the pass."""
        if self.sync_state is None or result.dry_run:
            return
        try:
            self.sync_state.log_action(action, details=result.to_dict())
        except sqlite3.Error as e:
            logger.warning(f"Could not record pass history: {e}")

    def read_action_list(self) -> list[Line]:
        """Parsed Action List (empty if it does not exist yet)."""
        name = self._find_action_list(self.notes.list_documents(self.folder))
        if name is None:
            return []
        try:
            text = self.notes.read_text(self.folder, name)
        except SourceNotFound:
            return []
        return self.parser.parse_lines(text)

    def get_status(self) -> dict:
        """Get current sync status."""
        try:
            lines = self.read_action_list()
            open_count = len(open_items(lines))
            completed_count = len(completed_items(lines))
        except StoreUnavailable:
            open_count = completed_count = -1

        try:
            tasks = self.reminders.list_tasks(self.settings.reminders_list)
            task_count = len(tasks)
            completed_tasks = sum(1 for t in tasks if t.completed)
        except StoreUnavailable:
            task_count = completed_tasks = -1

        return {
            "open_actions": open_count,
            "completed_actions": completed_count,
            "reminders": task_count,
            "completed_reminders": completed_tasks,
            "sync_state": self.sync_state.get_stats() if self.sync_state else {},
            "last_logs": self.sync_state.get_recent_logs(5) if self.sync_state else [],
        }
