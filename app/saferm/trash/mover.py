"""Moving items into the trash.

Same-filesystem moves are a single rename(2) and therefore atomic: the item
is either still at its original path or complete inside the trash.
Cross-filesystem moves fall back to copy-then-delete via shutil.move, which
is NOT atomic; an interruption mid-move can leave the data in both places.
"""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def same_device(source: Path, dest_dir: Path) -> bool:
    """Check whether source and destination directory share a filesystem.

    Args:
        source: Item to move (not followed if it is a symlink).
        dest_dir: Existing destination directory.

    Returns:
        True if a rename can move the item.
    """
    return os.lstat(source).st_dev == os.stat(dest_dir).st_dev


def move_to_trash(source: Path, dest: Path) -> bool:
    """Move an item to its trash destination.

    Args:
        source: Item to move. Symlinks are moved as links.
        dest: Destination path, whose parent must exist and which must not.

    Returns:
        True if the move was an atomic rename, False if it was copied
        across filesystems.

    Raises:
        FileExistsError: If the destination already exists.
        OSError: If the move fails.
    """
    if dest.exists() or dest.is_symlink():
        raise FileExistsError(f"Trash destination already exists: {dest}")

    if same_device(source, dest.parent):
        os.rename(source, dest)
        return True

    logger.info("Cross-device move of %s to %s (copy and delete)", source, dest)
    # shutil.move copies with copy2 (mode and timestamps) and keeps symlinks as links
    shutil.move(str(source), str(dest))
    return False
