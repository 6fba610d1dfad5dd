"""
Logging Setup

Sync passes log to a file that keeps only its most recent lines,
plus stderr when run interactively.
"""

import logging
import os
import sys
import tempfile
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def rotate_log(path: Path, max_lines: int) -> int:
    """
    Trim a log file to its last max_lines lines.

    Returns:
        Number of lines dropped
    """
    path = Path(path)
    if max_lines <= 0 or not path.exists():
        return 0

    with open(path, encoding="utf-8", errors="replace") as f:
        lines = f.readlines()
    if len(lines) <= max_lines:
        return 0

    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.writelines(lines[-max_lines:])
    os.replace(tmp, path)
    return len(lines) - max_lines


def setup_logging(log_file: Path, max_lines: int = 1000, verbose: bool = False):
    """
    Configure root logging for a sync run.

    Args:
        log_file: File receiving every record
        max_lines: Log retention, applied before the file is opened
        verbose: Also emit DEBUG records
    """
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    rotate_log(log_file, max_lines)

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
