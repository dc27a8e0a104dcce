"""Disk usage measurement.

Sizes are reported in 1 KiB blocks of allocated storage, like ``du -sk``:
hard links are counted once and symlinks are not followed.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

BLOCK_SIZE = 512


def disk_usage_kib(path: Path) -> int:
    """Allocated size of a file or directory tree in KiB.

    Unreadable parts of the tree are skipped and logged.

    Args:
        path: File or directory to measure.

    Returns:
        Size in KiB, 0 if the path does not exist.
    """
    seen: set[tuple[int, int]] = set()
    try:
        total = _allocated_bytes(os.lstat(path), seen)
    except FileNotFoundError:
        return 0
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return 0

    if path.is_dir() and not path.is_symlink():
        for dirpath, dirnames, filenames in os.walk(path, onerror=_log_walk_error):
            for name in (*dirnames, *filenames):
                try:
                    st = os.lstat(os.path.join(dirpath, name))
                except OSError as e:
                    logger.debug("Cannot stat %s: %s", name, e)
                    continue
                total += _allocated_bytes(st, seen)

    return total // 1024


def _allocated_bytes(st: os.stat_result, seen: set[tuple[int, int]]) -> int:
    """Allocated bytes of an inode, 0 if it was already counted."""
    inode = (st.st_dev, st.st_ino)
    if inode in seen:
        return 0
    seen.add(inode)
    return st.st_blocks * BLOCK_SIZE


def _log_walk_error(error: OSError) -> None:
    """Log directories that cannot be listed during a walk."""
    logger.warning("Cannot read %s: %s", error.filename, error.strerror)


def format_size(size_kib: int) -> str:
    """Format a KiB count as a binary-prefixed size, e.g. 1.5MiB.

    Args:
        size_kib: Size in KiB.

    Returns:
        Human-readable size string.
    """
    if size_kib <= 0:
        return "0B"
    size = float(size_kib) * 1024
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if abs(size) < 1024:
            return f"{int(size)}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}PiB"
