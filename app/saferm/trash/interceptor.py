"""Trash-on-delete interceptor.

Moves removal targets into the caller's TrashRoot under a fresh timestamped
entry instead of unlinking them. Every argument is handled independently:
a failure is reported for that argument and the remaining ones proceed.
"""

import errno
import logging
from collections.abc import Callable
from pathlib import Path, PurePosixPath

from saferm.core.config import SafermConfig
from saferm.core.errors import TrashKeyCollisionError
from saferm.core.identity import UserIdentity
from saferm.trash.keys import KeyGenerator
from saferm.trash.layout import (
    AliasResult,
    ensure_alias,
    ensure_trash_root,
    resolve_trash_root,
)
from saferm.trash.models import RemovalFlags, RemovalResult, RemovalStatus, TrashRoot
from saferm.trash.mover import move_to_trash

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]


class TrashInterceptor:
    """Moves removal targets into a user's trash.

    Attributes:
        _identity: Invoking user, resolved once per invocation.
        _config: Host configuration (placement mode and layout).
        _flags: Removal flags of the command.
        _confirm: Prompt used in interactive mode; returns True to proceed.
        _keys: Generator for TrashEntry keys.
    """

    def __init__(
        self,
        identity: UserIdentity,
        config: SafermConfig,
        flags: RemovalFlags | None = None,
        *,
        confirm: ConfirmCallback | None = None,
        keys: KeyGenerator | None = None,
    ) -> None:
        """Initialize the TrashInterceptor.

        Args:
            identity: Invoking user.
            config: Host configuration.
            flags: Removal flags. Defaults to no flags set.
            confirm: Interactive prompt. Without one, interactive mode declines.
            keys: Key generator. A fresh generator is used by default.
        """
        self._identity = identity
        self._config = config
        self._flags = flags or RemovalFlags()
        self._confirm = confirm
        self._keys = keys or KeyGenerator()
        self._root = resolve_trash_root(identity, config)

    @property
    def root(self) -> TrashRoot:
        """TrashRoot receiving the removed items."""
        return self._root

    def prepare(self) -> AliasResult:
        """Create the TrashRoot and the home-directory alias if absent.

        Returns:
            AliasResult describing the alias state.

        Raises:
            RuntimeError: If the TrashRoot cannot be created.
            TrashError: If a migration moved old data aside but could not link.
            OSError: If the alias cannot be created.
        """
        ensure_trash_root(self._root)
        return ensure_alias(self._root, self._config.legacy_name, self._keys.next_key())

    def remove(self, paths: list[str]) -> list[RemovalResult]:
        """Move multiple paths into the trash and return results.

        Args:
            paths: Path arguments as given on the command line.

        Returns:
            List of RemovalResult, one per input path.
        """
        return [self._remove_single(path) for path in paths]

    def _remove_single(self, raw: str) -> RemovalResult:
        """Move a single argument into the trash.

        Args:
            raw: Path argument as given on the command line.

        Returns:
            RemovalResult for the argument.
        """
        if not raw:
            # Path("") would name the working directory
            if self._flags.force:
                return RemovalResult(path=raw, status=RemovalStatus.SKIPPED)
            return _failed(raw, "No such file or directory")

        source = Path(raw)

        if _is_dot_path(raw):
            return _failed(raw, "refusing to remove '.' or '..' directory")

        if not source.exists() and not source.is_symlink():
            if self._flags.force:
                return RemovalResult(path=raw, status=RemovalStatus.SKIPPED)
            return _failed(raw, "No such file or directory")

        if source.is_dir() and not source.is_symlink() and not self._flags.recursive:
            return _failed(raw, "Is a directory")

        if self._flags.interactive and not self._flags.force:
            if self._confirm is None or not self._confirm(raw):
                return RemovalResult(path=raw, status=RemovalStatus.SKIPPED)

        try:
            canonical = canonical_path(source)
        except OSError as e:
            return _failed(raw, e.strerror or str(e))

        if canonical == Path(canonical.anchor):
            return _failed(raw, "it is dangerous to operate recursively on '/'")

        if self._contains_trash(canonical):
            return _failed(raw, "refusing to move the trash into itself")

        relative = relative_trash_path(canonical, self._identity, self._config)
        key = self._keys.next_key()
        entry_dir = self._root.path / key
        dest = entry_dir / relative

        try:
            # Exclusive create: a same-key entry from another process is an error
            entry_dir.mkdir()
        except FileExistsError:
            error = TrashKeyCollisionError(entry_dir)
            logger.debug("%s", error)
            return _failed(raw, str(error))
        except OSError as e:
            return _failed(raw, _describe(e))

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            atomic = move_to_trash(source, dest)
        except OSError as e:
            self._discard_empty_entry(entry_dir)
            return _failed(raw, _describe(e))

        logger.debug("Trashed %s -> %s", canonical, dest)
        return RemovalResult(
            path=raw,
            status=RemovalStatus.TRASHED,
            trash_path=dest,
            atomic=atomic,
        )

    def _contains_trash(self, canonical: Path) -> bool:
        """Check whether a target is the TrashRoot or one of its ancestors."""
        try:
            root = self._root.path.resolve()
        except OSError:
            return False
        return canonical == root or canonical in root.parents

    def _discard_empty_entry(self, entry_dir: Path) -> None:
        """Remove the directories created for a failed move, if still empty."""
        for directory in sorted(entry_dir.rglob("*"), reverse=True):
            try:
                directory.rmdir()
            except OSError:
                return
        try:
            entry_dir.rmdir()
        except OSError as e:
            logger.debug("Could not remove entry directory %s: %s", entry_dir, e)


def canonical_path(source: Path) -> Path:
    """Absolute, symlink-resolved location of a removal target.

    The parent directory is fully resolved while the final component is
    kept, so a symlink argument names the link itself rather than its target.

    Raises:
        OSError: If the parent directory cannot be resolved.
    """
    absolute = source.absolute()
    return absolute.parent.resolve(strict=True) / absolute.name


def relative_trash_path(
    canonical: Path,
    identity: UserIdentity,
    config: SafermConfig,
) -> PurePosixPath:
    """Path of a target relative to its TrashEntry directory.

    Paths under the user's home directory map to home/<rest>, paths under
    the user's scratch area to scratch/<rest>; everything else keeps its
    full absolute path without the leading separator.

    Args:
        canonical: Canonical absolute path of the target.
        identity: Invoking user.
        config: Host configuration.

    Returns:
        Relative path to append below TrashRoot/<key>/.
    """
    prefixes = (
        ("home", identity.home),
        ("scratch", config.scratch_base / identity.name),
    )
    for label, base in prefixes:
        for candidate in _spellings(base):
            try:
                rest = canonical.relative_to(candidate)
            except ValueError:
                continue
            if rest.parts:
                return PurePosixPath(label, *rest.parts)

    return PurePosixPath(*canonical.parts[1:])


def _spellings(base: Path) -> list[Path]:
    """A base directory as configured and with symlinks resolved."""
    spellings = [base]
    try:
        resolved = base.resolve()
    except OSError:
        return spellings
    if resolved != base:
        spellings.append(resolved)
    return spellings


def _is_dot_path(raw: str) -> bool:
    """Check whether an argument names "." or ".." (with optional trailing slashes)."""
    name = raw.rstrip("/").rsplit("/", 1)[-1]
    return name in (".", "..")


def _failed(raw: str, reason: str) -> RemovalResult:
    """Build a failed RemovalResult."""
    return RemovalResult(path=raw, status=RemovalStatus.FAILED, error=reason)


def _describe(error: OSError) -> str:
    """Human-readable reason for an OSError, e.g. 'Permission denied'."""
    if error.errno == errno.EXDEV:
        return "Cross-device move failed"
    return error.strerror or str(error)
