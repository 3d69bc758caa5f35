from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

ErrorCallback = Callable[[Path, OSError], None]

# stat attribute used to judge a file's age
TIMESTAMP_FIELDS = {"atime": "st_atime", "mtime": "st_mtime"}


def compute_deadline(minutes: int, now: Optional[datetime] = None) -> datetime:
    """Return the cutoff instant ``now - minutes`` as an aware UTC datetime.

    Computed once per run and passed unchanged through the whole prune walk.
    """
    if int(minutes) <= 0:
        raise ValueError(f"age threshold must be a positive number of minutes, got {minutes}")
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc) - timedelta(minutes=int(minutes))


def _log_failure(path: Path, exc: OSError) -> None:
    logger.warning(f"Could not delete {path}: {exc}")


def _has_children(path: Path) -> bool:
    return any(True for _ in path.iterdir())


def prune_tree(
    path: Path,
    deadline: datetime,
    on_error: Optional[ErrorCallback] = None,
    timestamp: str = "atime",
) -> int:
    """Delete files last touched strictly before ``deadline``, then drop emptied dirs.

    Files are handled before subdirectories at every level, so a subdirectory's
    own files are gone before its emptiness is judged. Per-item deletion
    failures go to ``on_error`` and the walk continues; a subdirectory that still
    has children is kept without complaint. ``path`` itself is never removed.

    Returns the summed original size of the files actually deleted. Directory
    removals add nothing.
    """
    report = on_error or _log_failure
    field = TIMESTAMP_FIELDS[timestamp]
    cutoff = deadline.timestamp()
    root = Path(path)

    files, subdirs = [], []
    for entry in root.iterdir():
        if entry.is_symlink():
            continue
        if entry.is_file():
            files.append(entry)
        elif entry.is_dir():
            subdirs.append(entry)

    freed = 0
    for f in files:
        try:
            st = f.stat()
            if getattr(st, field) >= cutoff:
                continue
            f.unlink()
        except OSError as e:
            report(f, e)
            continue
        freed += st.st_size
        logger.debug(f"Deleted file {f} ({st.st_size} bytes)")

    for sub in subdirs:
        freed += prune_tree(sub, deadline, report, timestamp)
        if _has_children(sub):
            continue
        try:
            sub.rmdir()
        except OSError as e:
            report(sub, e)
            continue
        logger.debug(f"Removed empty directory {sub}")

    return freed
