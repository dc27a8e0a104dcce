"""Retention sweep over all TrashRoots and legacy trash directories.

The sweeper only ever matches entries strictly older than its threshold,
while the interceptor only creates brand-new entries, so the two never
target the same object and need no locking. Deleting an entry that has
already vanished (e.g. removed by a concurrent sweep) is not an error.

Every user is swept independently: a failure for one user is recorded in
the report and the sweep continues with the next one.
"""

import logging
import os
import shutil
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from saferm.core.audit import CleanupLog, Outcome, create_log_record
from saferm.core.config import PlacementMode, SafermConfig
from saferm.core.errors import IdentityRequiredError, TrashRootNotFoundError
from saferm.core.identity import UserIdentity, acting_as
from saferm.sweeper.age import AgeThreshold
from saferm.sweeper.models import ContainerKind, ContainerSweep, SweepReport
from saferm.sweeper.usage import disk_usage_kib, format_size
from saferm.trash.keys import is_date_prefixed
from saferm.trash.layout import legacy_trash_path, user_trash_dir
from saferm.trash.models import TrashEntry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


@dataclass(slots=True)
class _Candidates:
    """Entries of a trash directory that exceeded the threshold."""

    dated: list[TrashEntry] = field(default_factory=lambda: [])
    loose: list[TrashEntry] = field(default_factory=lambda: [])
    remaining: int = 0


class TrashSweeper:
    """Applies the retention policy to every user's trash.

    Attributes:
        _config: Host configuration.
        _threshold: Minimum age of purged entries.
        _grace: Minimum age of an empty legacy trash before its removal.
        _execute: If False, only report what would be deleted.
        _log: Append-only cleanup log, written in execute mode only.
        _clock: Wall clock in seconds, read once per sweep.
        _progress: Receives "Checking <user>..." progress lines.
    """

    def __init__(
        self,
        config: SafermConfig,
        threshold: AgeThreshold,
        *,
        execute: bool = False,
        log: CleanupLog | None = None,
        clock: Callable[[], float] = time.time,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Initialize the TrashSweeper.

        Args:
            config: Host configuration.
            threshold: Entries strictly older than this are purged.
            execute: Perform deletions. Dry-run by default.
            log: Cleanup log. Defaults to the configured log file.
            clock: Time source in seconds since the epoch.
            progress: Optional progress sink.
        """
        self._config = config
        self._threshold = threshold
        self._grace = AgeThreshold(config.legacy_grace_days, "d")
        self._execute = execute
        self._log = log or CleanupLog(config.log_path)
        self._clock = clock
        self._progress = progress
        self._warnings: list[str] = []

    @property
    def scan_location(self) -> Path:
        """Directory enumerated for TrashRoots."""
        if self._config.mode == PlacementMode.CENTRALIZED:
            return self._config.trash_base
        return self._config.home_base

    def sweep(self, user: str | None = None) -> SweepReport:
        """Sweep every TrashRoot and legacy trash directory.

        Args:
            user: Restrict the sweep to a single user.

        Returns:
            SweepReport with per-user results and aggregates.

        Raises:
            TrashRootNotFoundError: If user is given and has no TrashRoot.
        """
        if user is not None:
            root = self.trash_root_of(user)
            if not _is_real_dir(root):
                raise TrashRootNotFoundError(user, root)

        now = self._clock()
        report = SweepReport(
            mode=self._config.mode,
            threshold=self._threshold,
            execute=self._execute,
            location=self.scan_location,
            target_user=user,
        )
        self._warnings = report.warnings

        users = [user] if user is not None else self._list_users(self.scan_location)
        for name in users:
            report.users_scanned += 1
            root = self.trash_root_of(name)
            self._notify(f"Checking {name}...")
            if not _is_real_dir(root):
                continue
            report.trash.append(self._sweep_trash_root(name, root, now))

        homes = [user] if user is not None else self._list_users(self._config.home_base)
        for name in homes:
            legacy = legacy_trash_path(self._config.home_base / name, self._config)
            if not _is_real_dir(legacy):
                continue
            self._notify(f"Checking {name}'s {legacy.name}...")
            report.legacy.append(self._sweep_legacy(name, legacy, now))

        if self._execute:
            self._log_summary(report)

        return report

    def trash_root_of(self, user: str) -> Path:
        """TrashRoot location of a user in the configured placement mode."""
        if self._config.mode == PlacementMode.CENTRALIZED:
            return user_trash_dir(user, self._config) / self._config.trash_dirname
        return self._config.home_base / user / self._config.alias_name

    def _list_users(self, base: Path) -> list[str]:
        """User directory names below a base directory, sorted."""
        try:
            return sorted(
                entry.name
                for entry in base.iterdir()
                if entry.is_dir() and not entry.is_symlink()
            )
        except FileNotFoundError:
            logger.warning("Directory does not exist: %s", base)
            return []
        except PermissionError:
            logger.warning("Permission denied listing directory: %s", base)
            return []

    def _sweep_trash_root(self, user: str, root: Path, now: float) -> ContainerSweep:
        """Sweep the dated entries of one TrashRoot."""
        home_resident = self._config.mode == PlacementMode.LOCAL
        size_before = 0
        try:
            size_before = disk_usage_kib(root)
            with self._mutation_scope(user, root, home_resident):
                candidates = self._find_candidates(root, now, include_loose=False)
                removed, errors = self._purge_all(candidates.dated)
            size_after = disk_usage_kib(root) if self._execute else size_before
        except (OSError, IdentityRequiredError) as e:
            logger.warning("Sweep of %s failed: %s", root, e)
            return ContainerSweep(
                user=user,
                kind=ContainerKind.TRASH_ROOT,
                path=root,
                size_before_kib=size_before,
                size_after_kib=size_before,
                errors=(str(e),),
            )

        result = ContainerSweep(
            user=user,
            kind=ContainerKind.TRASH_ROOT,
            path=root,
            size_before_kib=size_before,
            size_after_kib=size_after,
            matched=len(candidates.dated),
            removed=removed,
            errors=tuple(errors),
        )
        if result.removed:
            self._append_log(
                Outcome.CLEANED,
                result.label,
                f"age: {self._threshold.display}",
                f"{result.removed} directories removed",
            )
        return result

    def _sweep_legacy(self, user: str, legacy: Path, now: float) -> ContainerSweep:
        """Sweep a legacy trash directory and drop it once empty and old."""
        size_before = 0
        container_removed = False
        try:
            size_before = disk_usage_kib(legacy)
            # The container's own age is taken before its contents change
            container_mtime = legacy.stat().st_mtime
            with self._mutation_scope(user, legacy, home_resident=True):
                candidates = self._find_candidates(legacy, now, include_loose=True)
                removed, errors = self._purge_all(candidates.dated)
                loose_removed, loose_errors = self._purge_all(candidates.loose)
                errors.extend(loose_errors)
                container_eligible = self._grace.is_exceeded(container_mtime, now) and (
                    candidates.remaining == 0
                )
                if self._execute and container_eligible and not errors:
                    container_removed = self._remove_empty_container(legacy)
            size_after = disk_usage_kib(legacy) if self._execute else size_before
        except (OSError, IdentityRequiredError) as e:
            logger.warning("Sweep of %s failed: %s", legacy, e)
            return ContainerSweep(
                user=user,
                kind=ContainerKind.LEGACY,
                path=legacy,
                size_before_kib=size_before,
                size_after_kib=size_before,
                errors=(str(e),),
            )

        result = ContainerSweep(
            user=user,
            kind=ContainerKind.LEGACY,
            path=legacy,
            size_before_kib=size_before,
            size_after_kib=size_after,
            matched=len(candidates.dated),
            removed=removed,
            loose_matched=len(candidates.loose),
            loose_removed=loose_removed,
            container_eligible=container_eligible,
            container_removed=container_removed,
            errors=tuple(errors),
        )
        if result.removed or result.loose_removed:
            self._append_log(
                Outcome.CLEANED,
                result.label,
                f"age: {self._threshold.display}",
                f"{result.removed} directories removed",
                f"{result.loose_removed} loose files removed",
            )
        if result.container_removed:
            self._append_log(
                Outcome.REMOVED,
                result.label,
                f"empty directory older than {self._grace.display}",
            )
        return result

    @contextmanager
    def _mutation_scope(self, user: str, path: Path, home_resident: bool) -> Iterator[None]:
        """Identity under which a directory's entries are deleted.

        Home-resident directories are mutated as their owner; dry-runs and
        centralized TrashRoots use the sweeper's own identity.
        """
        if not (self._execute and home_resident):
            yield
            return
        identity = UserIdentity.from_owner(
            user, self._config.home_base / user, self._config.home_base
        )
        with acting_as(identity, path):
            yield

    def _find_candidates(self, directory: Path, now: float, *, include_loose: bool) -> _Candidates:
        """Collect the immediate children of a trash directory older than the threshold.

        Dated entries are directories whose name starts with a calendar date.
        With include_loose, every other child is a loose entry.
        """
        candidates = _Candidates()
        with os.scandir(directory) as it:
            for entry in it:
                try:
                    st = entry.stat(follow_symlinks=False)
                    is_dir = entry.is_dir(follow_symlinks=False)
                except FileNotFoundError:
                    continue

                dated = is_dir and is_date_prefixed(entry.name)
                if not dated and not include_loose:
                    candidates.remaining += 1
                    continue

                item = TrashEntry(key=entry.name, path=Path(entry.path), mtime=st.st_mtime)
                if not self._threshold.is_exceeded(item.mtime, now):
                    candidates.remaining += 1
                    continue

                logger.debug("Matched %s (%ds old)", item.path, item.age_seconds(now))
                if dated:
                    candidates.dated.append(item)
                else:
                    candidates.loose.append(item)

        candidates.dated.sort(key=lambda e: e.key)
        candidates.loose.sort(key=lambda e: e.key)
        return candidates

    def _purge_all(self, entries: list[TrashEntry]) -> tuple[int, list[str]]:
        """Delete entries in execute mode; isolate failures per entry.

        Returns:
            Number of entries deleted and the errors encountered.
        """
        if not self._execute:
            return 0, []

        removed = 0
        errors: list[str] = []
        for entry in entries:
            path = entry.path
            try:
                if _purge(path):
                    removed += 1
            except OSError as e:
                logger.warning("Cannot delete %s: %s", path, e)
                errors.append(f"{path}: {e.strerror or e}")
        return removed, errors

    def _remove_empty_container(self, legacy: Path) -> bool:
        """Remove a legacy trash directory if it is empty.

        Returns:
            True if the directory was removed.
        """
        try:
            legacy.rmdir()
        except FileNotFoundError:
            return False
        except OSError as e:
            # Not empty anymore or not removable: retried on the next run
            logger.warning("Cannot remove %s: %s", legacy, e)
            return False
        logger.info("Removed empty legacy trash %s", legacy)
        return True

    def _log_summary(self, report: SweepReport) -> None:
        """Append the end-of-run summary lines."""
        self._append_log(
            Outcome.SUMMARY,
            "trash",
            f"age: {self._threshold.display}",
            f"cleaned {report.cleaned} out of {report.users_scanned} users",
            f"total size: {format_size(report.total_kib)}",
        )
        if report.with_legacy:
            self._append_log(
                Outcome.SUMMARY,
                self._config.legacy_name,
                f"cleaned {report.legacy_cleaned} users",
                f"old trash size: {format_size(report.legacy_total_kib)}",
            )

    def _append_log(self, outcome: Outcome, subject: str, *details: str) -> None:
        """Append a log line in execute mode; logging failures are not fatal."""
        if not self._execute:
            return
        try:
            self._log.append(create_log_record(outcome, subject, *details))
        except (OSError, RuntimeError) as e:
            logger.warning("Could not write cleanup log %s: %s", self._log.path, e)
            self._warnings.append(f"Could not write cleanup log {self._log.path}: {e}")

    def _notify(self, message: str) -> None:
        """Forward a progress line, if anyone listens."""
        if self._progress is not None:
            self._progress(message)


def _purge(path: Path) -> bool:
    """Delete a file or directory tree.

    Returns:
        True if something was deleted, False if it was already gone.

    Raises:
        OSError: If the deletion fails.
    """
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        return False
    return True


def _is_real_dir(path: Path) -> bool:
    """Check for a directory that is not a symlink; unreadable parents count as absent."""
    return os.path.isdir(path) and not os.path.islink(path)
