"""
Configuration Management

Centralizes all configurable settings with environment variable overrides.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """Get environment variable with optional default."""
    value = os.environ.get(key, default)
    if required and not value:
        raise ValueError(
            f"Required environment variable {key} is not set. "
            f"Set it with: export {key}='your-value'"
        )
    return value


# =============================================================================
# Notes Configuration
# =============================================================================

# Folder scanned for tagged lines
NOTES_FOLDER = get_env("ACTION_SYNC_NOTES_FOLDER", "Actions")

# Name of the merged note of record (lives in NOTES_FOLDER, never scanned as a source)
ACTION_LIST_NOTE = get_env("ACTION_SYNC_ACTION_LIST", "Action List")

# Backend: "apple" (Notes.app via osascript) or "folder" (plain files)
NOTES_BACKEND = get_env("ACTION_SYNC_NOTES_BACKEND", "apple")

# Root directory for the folder backend
NOTES_DIR = Path(
    os.path.expanduser(get_env("ACTION_SYNC_NOTES_DIR", str(_get_project_root() / "notes")))
)

# Path to osascript binary
OSASCRIPT_PATH = get_env("OSASCRIPT_PATH", "/usr/bin/osascript")


# =============================================================================
# Tag Configuration
# =============================================================================

OPEN_TAG = get_env("ACTION_SYNC_OPEN_TAG", "#act")
DONE_TAG = get_env("ACTION_SYNC_DONE_TAG", "#done")

# Line separating open from completed entries in the action list
SEPARATOR = get_env("ACTION_SYNC_SEPARATOR", "--- Done ---")


# =============================================================================
# Apple Reminders Configuration
# =============================================================================

# Reminders list that receives one reminder per open action
REMINDERS_LIST = get_env("ACTION_SYNC_REMINDERS_LIST", "WORK")

# Path to reminders-cli binary
REMINDERS_CLI_PATH = os.path.expanduser(
    get_env("REMINDERS_CLI_PATH", "~/.local/bin/reminders")
)


# =============================================================================
# Data Paths
# =============================================================================

PROJECT_ROOT = _get_project_root()

DATA_DIR = Path(
    os.path.expanduser(get_env("ACTION_SYNC_DATA_DIR", str(PROJECT_ROOT)))
)

LOCK_FILE = DATA_DIR / "action_sync.lock"

SYNC_STATE_DB = Path(
    get_env("SYNC_STATE_DB", str(DATA_DIR / "sync_state.db"))
)

LOGS_DIR = Path(
    get_env("LOGS_DIR", str(DATA_DIR / "logs"))
)

LOG_FILE = LOGS_DIR / "action_sync.log"


# =============================================================================
# Pass Configuration
# =============================================================================

# A lock younger than this (seconds) means another pass is running
LOCK_TIMEOUT_SECONDS = int(get_env("ACTION_SYNC_LOCK_TIMEOUT", "30"))

# Log retention
MAX_LOG_LINES = int(get_env("ACTION_SYNC_MAX_LOG_LINES", "1000"))


@dataclass(frozen=True)
class SyncSettings:
    """Snapshot of the settings one pass runs with."""
    notes_folder: str = "Actions"
    action_list_note: str = "Action List"
    reminders_list: str = "WORK"
    open_tag: str = "#act"
    done_tag: str = "#done"
    separator: str = "--- Done ---"
    lock_file: Path = Path("action_sync.lock")
    lock_timeout: int = 30
    state_db: Optional[Path] = None

    @classmethod
    def from_config(cls) -> "SyncSettings":
        return cls(
            notes_folder=NOTES_FOLDER,
            action_list_note=ACTION_LIST_NOTE,
            reminders_list=REMINDERS_LIST,
            open_tag=OPEN_TAG,
            done_tag=DONE_TAG,
            separator=SEPARATOR,
            lock_file=LOCK_FILE,
            lock_timeout=LOCK_TIMEOUT_SECONDS,
            state_db=SYNC_STATE_DB,
        )


# =============================================================================
# Helper to print current configuration
# =============================================================================

def print_config():
    """Print current configuration (for debugging)."""
    print("Current Configuration:")
    print(f"  NOTES_BACKEND: {NOTES_BACKEND}")
    if NOTES_BACKEND == "folder":
        print(f"  NOTES_DIR: {NOTES_DIR}")
    else:
        print(f"  OSASCRIPT_PATH: {OSASCRIPT_PATH}")
    print(f"  NOTES_FOLDER: {NOTES_FOLDER}")
    print(f"  ACTION_LIST_NOTE: {ACTION_LIST_NOTE}")
    print(f"  OPEN_TAG: {OPEN_TAG}")
    print(f"  DONE_TAG: {DONE_TAG}")
    print(f"  SEPARATOR: {SEPARATOR}")
    print(f"  REMINDERS_LIST: {REMINDERS_LIST}")
    print(f"  REMINDERS_CLI_PATH: {REMINDERS_CLI_PATH}")
    print(f"  LOCK_FILE: {LOCK_FILE}")
    print(f"  LOCK_TIMEOUT_SECONDS: {LOCK_TIMEOUT_SECONDS}")
    print(f"  SYNC_STATE_DB: {SYNC_STATE_DB}")
    print(f"  LOG_FILE: {LOG_FILE}")
    print(f"  MAX_LOG_LINES: {MAX_LOG_LINES}")
