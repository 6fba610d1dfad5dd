"""
Pass Lock

Advisory lock file that keeps two sync passes from overlapping.

The file holds the holder's PID and acquisition time. A lock no older
than the timeout means a pass is running and the new one is skipped;
an older lock is assumed to belong to a crashed pass and is reclaimed.
"""

import json
import logging
import os
import time
from pathlib import Path
from typing import Optional

from .errors import LockContention

logger = logging.getLogger(__name__)


class PassLock:
    """
    Usage:
        with PassLock(path, timeout=30):
            ...  # raises LockContention if a fresh lock exists
    """

    def __init__(self, path: Path, timeout: int = 30):
        self.path = Path(path)
        self.timeout = timeout
        self._held = False

    def _lock_age(self) -> Optional[float]:
        """
        Seconds since the current lock was taken, None if there is none.

        The token's timestamp is used when it is readable and not in the
        future; otherwise the file's mtime dates the lock. The result is
        negative only if the mtime is in the future too.
        """
        try:
            content = self.path.read_text(encoding="utf-8")
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        now = time.time()
        try:
            acquired_at = float(json.loads(content)["acquired_at"])
        except (ValueError, KeyError, TypeError):
            acquired_at = mtime
        if acquired_at > now:
            logger.warning(f"Lock file {self.path} is dated in the future, using its mtime")
            acquired_at = mtime
        return now - acquired_at

    def acquire(self):
        """
        Take the lock.

        Raises:
            LockContention: a lock no older than the timeout exists
        """
        age = self._lock_age()
        if age is not None:
            if 0 <= age <= self.timeout:
                raise LockContention(age)
            if age < 0:
                logger.warning("Lock file cannot be dated (clock moved back), removing")
            else:
                logger.warning(f"Stale lock file ({age:.0f}s old), removing")
            try:
                self.path.unlink()
            except FileNotFoundError:
                pass

        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            # Another pass won the race after the stale lock was removed
            raise LockContention(0.0) from None
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"pid": os.getpid(), "acquired_at": time.time()}, f)
        self._held = True

    def release(self):
        """Remove the lock if this instance holds it."""
        if not self._held:
            return
        self._held = False
        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.warning(f"Lock file {self.path} disappeared before release")

    def __enter__(self) -> "PassLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
