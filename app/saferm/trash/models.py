"""Trash domain models.

Defines the per-user TrashRoot, the timestamped TrashEntry and the
per-item outcome of a removal request.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from saferm.core.config import PlacementMode


@dataclass(frozen=True, slots=True)
class TrashRoot:
    """Per-user container for all trashed entries.

    Attributes:
        user: Owning user name.
        path: Directory holding the user's TrashEntries.
        alias_path: Trash alias in the user's home directory. In local mode
            it is the TrashRoot itself.
        mode: Placement mode the root was resolved for.
    """

    user: str
    path: Path
    alias_path: Path
    mode: PlacementMode

    @property
    def uses_alias(self) -> bool:
        """Whether the home directory references the root through a symlink."""
        return self.alias_path != self.path


@dataclass(frozen=True, slots=True)
class TrashEntry:
    """A single deletion event inside a TrashRoot.

    Attributes:
        key: Entry name, a timestamp key for entries created by the interceptor.
        path: Absolute path of the entry directory.
        mtime: Modification time of the entry (seconds since the epoch).
    """

    key: str
    path: Path
    mtime: float

    def age_seconds(self, now: float) -> int:
        """Age of the entry in whole seconds relative to now."""
        return int(now) - int(self.mtime)


@dataclass(frozen=True, slots=True)
class RemovalFlags:
    """Flags of a removal command.

    Attributes:
        force: Ignore nonexistent files and never prompt.
        interactive: Prompt before every removal.
        recursive: Allow directories.
    """

    force: bool = False
    interactive: bool = False
    recursive: bool = False


class RemovalStatus(str, Enum):
    """Outcome of one removal argument.

    Attributes:
        TRASHED: Item moved into the trash.
        SKIPPED: Item intentionally left in place (declined or forced-missing).
        FAILED: Item could not be trashed.
    """

    TRASHED = "trashed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RemovalResult:
    """Result of a single removal argument.

    Attributes:
        path: Argument as given on the command line.
        status: Outcome of the removal.
        trash_path: Destination inside the trash when trashed.
        error: Reason when the removal failed.
        atomic: Whether the move was a same-device rename.
    """

    path: str
    status: RemovalStatus
    trash_path: Path | None = None
    error: str | None = None
    atomic: bool = True

    @property
    def success(self) -> bool:
        """Whether the item was moved into the trash."""
        return self.status == RemovalStatus.TRASHED

    @property
    def failed(self) -> bool:
        """Whether the item could not be trashed."""
        return self.status == RemovalStatus.FAILED
