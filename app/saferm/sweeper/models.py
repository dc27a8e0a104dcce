"""Sweep result models.

A sweep produces one ContainerSweep per trash directory it looked at
(TrashRoots and legacy trash directories) and aggregates them into a
SweepReport.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from saferm.core.config import PlacementMode
from saferm.sweeper.age import AgeThreshold


class ContainerKind(str, Enum):
    """Kind of swept trash directory.

    Attributes:
        TRASH_ROOT: A user's TrashRoot.
        LEGACY: A migrated pre-existing trash directory.
    """

    TRASH_ROOT = "trash_root"
    LEGACY = "legacy"


@dataclass(frozen=True, slots=True)
class ContainerSweep:
    """Outcome of sweeping one trash directory.

    Attributes:
        user: Owning user.
        kind: TrashRoot or legacy trash.
        path: Swept directory.
        size_before_kib: Size before any mutation.
        size_after_kib: Size after the sweep (equal to size_before_kib in dry-run).
        matched: Dated entries older than the threshold.
        removed: Dated entries actually deleted.
        loose_matched: Loose legacy entries older than the threshold.
        loose_removed: Loose legacy entries actually deleted.
        container_eligible: The empty legacy directory is (or would be) removable.
        container_removed: The empty legacy directory was removed.
        errors: Per-entry or per-user failures.
    """

    user: str
    kind: ContainerKind
    path: Path
    size_before_kib: int = 0
    size_after_kib: int = 0
    matched: int = 0
    removed: int = 0
    loose_matched: int = 0
    loose_removed: int = 0
    container_eligible: bool = False
    container_removed: bool = False
    errors: tuple[str, ...] = ()

    @property
    def has_old(self) -> bool:
        """Whether anything in the directory exceeded the threshold."""
        return self.matched + self.loose_matched > 0

    @property
    def cleaned(self) -> bool:
        """Whether the sweep deleted anything from this directory."""
        return self.removed + self.loose_removed > 0 or self.container_removed

    @property
    def failed(self) -> bool:
        """Whether any error occurred for this directory."""
        return bool(self.errors)

    @property
    def label(self) -> str:
        """Subject used in reports and log lines, e.g. alice/.trash.old."""
        if self.kind == ContainerKind.LEGACY:
            return f"{self.user}/{self.path.name}"
        return self.user


@dataclass(slots=True)
class SweepReport:
    """Aggregated statistics of a sweep.

    Attributes:
        mode: Placement mode of the host.
        threshold: Age threshold applied.
        execute: Whether deletions were performed.
        location: Directory scanned for TrashRoots.
        target_user: Single-user filter, None for all users.
        users_scanned: Users enumerated for TrashRoots.
        trash: Results for users having a TrashRoot.
        legacy: Results for users having a legacy trash.
        warnings: Non-fatal problems (e.g. log file not writable).
    """

    mode: PlacementMode
    threshold: AgeThreshold
    execute: bool
    location: Path
    target_user: str | None = None
    users_scanned: int = 0
    trash: list[ContainerSweep] = field(default_factory=lambda: [])
    legacy: list[ContainerSweep] = field(default_factory=lambda: [])
    warnings: list[str] = field(default_factory=lambda: [])

    @property
    def with_trash(self) -> int:
        """Users having a TrashRoot."""
        return len(self.trash)

    @property
    def with_old_trash(self) -> int:
        """Users whose TrashRoot holds entries older than the threshold."""
        return sum(1 for r in self.trash if r.has_old)

    @property
    def cleaned(self) -> int:
        """Users whose TrashRoot was cleaned."""
        return sum(1 for r in self.trash if r.cleaned)

    @property
    def total_before_kib(self) -> int:
        """TrashRoot size before the sweep."""
        return sum(r.size_before_kib for r in self.trash)

    @property
    def total_kib(self) -> int:
        """TrashRoot size as it stands after the sweep."""
        return sum(r.size_after_kib for r in self.trash)

    @property
    def with_legacy(self) -> int:
        """Users having a legacy trash directory."""
        return len(self.legacy)

    @property
    def legacy_cleaned(self) -> int:
        """Users whose legacy trash was cleaned."""
        return sum(1 for r in self.legacy if r.cleaned)

    @property
    def legacy_total_kib(self) -> int:
        """Legacy trash size as it stands after the sweep."""
        return sum(r.size_after_kib for r in self.legacy)

    @property
    def combined_kib(self) -> int:
        """Size of all trash locations after the sweep."""
        return self.total_kib + self.legacy_total_kib

    @property
    def failures(self) -> list[ContainerSweep]:
        """Directories whose sweep reported errors."""
        return [r for r in (*self.trash, *self.legacy) if r.failed]

    def top_trash(self, limit: int) -> list[ContainerSweep]:
        """Largest TrashRoots, biggest first."""
        return _top(self.trash, limit)

    def top_legacy(self, limit: int) -> list[ContainerSweep]:
        """Largest legacy trash directories, biggest first."""
        return _top(self.legacy, limit)


def _top(results: list[ContainerSweep], limit: int) -> list[ContainerSweep]:
    """Non-empty results ordered by size, ties broken by user name."""
    sized = [r for r in results if r.size_after_kib > 0]
    sized.sort(key=lambda r: (-r.size_after_kib, r.user))
    return sized[:limit]
