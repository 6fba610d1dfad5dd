"""
Sync State Management

Keeps a SQLite audit log of reconciliation passes so `status` can
report what recent passes did.
"""

import sqlite3
from pathlib import Path
from datetime import datetime
from typing import Optional
import json

from . import config


class SyncState:
    """
    Manages pass history persistence in a SQLite database.

    Schema:
    - sync_log: One row per pass (sync_complete, sync_failed, sync_skipped)
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize sync state database.

        Args:
            db_path: Path to the SQLite database (env: SYNC_STATE_DB)
        """
        if db_path is None:
            db_path = config.SYNC_STATE_DB

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create database tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sync_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp INTEGER NOT NULL,
                    action TEXT NOT NULL,
                    details TEXT
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_sync_log_action
                ON sync_log(action)
            """)

            conn.commit()

    def log_action(self, action: str, details: Optional[dict] = None):
        """Record a pass for auditing."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO sync_log (timestamp, action, details)
                VALUES (?, ?, ?)
            """, (
                int(datetime.now().timestamp()),
                action,
                json.dumps(details) if details else None,
            ))
            conn.commit()

    def get_recent_logs(self, limit: int = 100) -> list[dict]:
        """Get recent pass log entries, newest first."""
        logs = []
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                "SELECT * FROM sync_log ORDER BY timestamp DESC, id DESC LIMIT ?",
                (limit,)
            )
            for row in cursor:
                logs.append({
                    "id": row["id"],
                    "timestamp": datetime.fromtimestamp(row["timestamp"]),
                    "action": row["action"],
                    "details": json.loads(row["details"]) if row["details"] else None,
                })
        return logs

    def clear_all(self):
        """Clear pass history."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM sync_log")
            conn.commit()

    def get_stats(self) -> dict:
        """Get pass counts and totals across all recorded passes."""
        stats = {
            "passes": 0,
            "completed": 0,
            "failed": 0,
            "skipped": 0,
            "tasks_created": 0,
            "completions": 0,
        }
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("SELECT action, details FROM sync_log")
            for action, details in cursor:
                stats["passes"] += 1
                if action == "sync_complete":
                    stats["completed"] += 1
                elif action == "sync_failed":
                    stats["failed"] += 1
                elif action == "sync_skipped":
                    stats["skipped"] += 1
                if details:
                    data = json.loads(details)
                    stats["tasks_created"] += data.get("tasks_created", 0)
                    stats["completions"] += data.get("completions", 0)
        return stats
