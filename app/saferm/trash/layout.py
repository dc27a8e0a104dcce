"""Trash layout resolution and lazy provisioning.

Resolves where a user's TrashRoot lives for the configured placement mode,
creates it on demand and maintains the home-directory trash alias::

    <trash_base>/<user>/trash/<key>/...     TrashRoot (centralized)
    <home>/.trash -> TrashRoot               alias (centralized)
    <home>/.trash/<key>/...                  TrashRoot (local)
    <home>/.trash.old/...                    legacy trash
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from saferm.core.config import PlacementMode, SafermConfig
from saferm.core.errors import TrashError
from saferm.core.identity import UserIdentity
from saferm.trash.models import TrashRoot

logger = logging.getLogger(__name__)

# rwx for the user and the admin group, setgid so new entries keep the group
CENTRALIZED_ROOT_MODE = 0o2770
LOCAL_ROOT_MODE = 0o700


class AliasStatus(str, Enum):
    """State of the home-directory trash alias after ensure_alias().

    Attributes:
        PRESENT: A symlink to the TrashRoot already existed.
        CREATED: The symlink was created.
        MIGRATED: A pre-existing non-symlink was moved aside, then linked.
        MISDIRECTED: A symlink exists but points somewhere else.
        NOT_USED: Local mode, the TrashRoot is the home directory entry itself.
    """

    PRESENT = "present"
    CREATED = "created"
    MIGRATED = "migrated"
    MISDIRECTED = "misdirected"
    NOT_USED = "not_used"


@dataclass(frozen=True, slots=True)
class AliasResult:
    """Outcome of ensuring the trash alias.

    Attributes:
        status: Resulting alias state.
        legacy_path: Where pre-existing data was moved (MIGRATED only).
    """

    status: AliasStatus
    legacy_path: Path | None = None


def resolve_trash_root(identity: UserIdentity, config: SafermConfig) -> TrashRoot:
    """Resolve the TrashRoot of a user for the configured placement mode.

    Args:
        identity: User owning the TrashRoot.
        config: Host configuration.

    Returns:
        TrashRoot describing the location and its alias.
    """
    alias = identity.home / config.alias_name
    if config.mode == PlacementMode.CENTRALIZED:
        path = user_trash_dir(identity.name, config) / config.trash_dirname
    else:
        path = alias
    return TrashRoot(user=identity.name, path=path, alias_path=alias, mode=config.mode)


def user_trash_dir(user: str, config: SafermConfig) -> Path:
    """Per-user directory below the shared trash base."""
    return config.trash_base / user


def legacy_trash_path(home: Path, config: SafermConfig) -> Path:
    """Location of the migrated pre-existing trash of a home directory."""
    return home / config.legacy_name


def ensure_trash_root(root: TrashRoot) -> bool:
    """Create the TrashRoot if it does not exist yet.

    Args:
        root: TrashRoot to provision.

    Returns:
        True if the directory was created, False if it already existed.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    if root.path.is_dir():
        return False

    if root.mode == PlacementMode.CENTRALIZED:
        # The per-user directory and the root share the group-writable mode
        for directory in (root.path.parent, root.path):
            _make_dir(directory, CENTRALIZED_ROOT_MODE)
    else:
        _make_dir(root.path, LOCAL_ROOT_MODE)
    logger.info("Created trash root %s", root.path)
    return True


def _make_dir(path: Path, mode: int) -> None:
    """Create a single directory (parents included) and apply its mode."""
    if path.is_dir():
        return
    try:
        path.mkdir(parents=True, exist_ok=True)
        # mkdir() is subject to the umask and ignores the setgid bit
        os.chmod(path, mode)
    except PermissionError as e:
        msg = f"Cannot create trash directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create trash directory {path}: {e}"
        raise RuntimeError(msg) from e


def ensure_alias(root: TrashRoot, legacy_name: str, key: str) -> AliasResult:
    """Make the home-directory alias a symlink to the TrashRoot.

    A pre-existing non-symlink at the alias location (data from an older
    trash convention) is renamed to the legacy location and the symlink is
    created immediately afterwards. If the legacy location is already taken,
    the old data is nested inside it as <legacy>/<key>.

    Args:
        root: Resolved TrashRoot.
        legacy_name: Name of the legacy trash in the home directory.
        key: Timestamp key used when nesting into an existing legacy trash.

    Returns:
        AliasResult describing what was done.

    Raises:
        TrashError: If the old data was moved aside but the symlink could
            not be created.
        OSError: If the alias cannot be created or the old data cannot be moved.
    """
    if not root.uses_alias:
        return AliasResult(AliasStatus.NOT_USED)

    alias = root.alias_path

    if alias.is_symlink():
        return _existing_link_result(alias, root.path)

    if not alias.exists():
        try:
            alias.symlink_to(root.path, target_is_directory=True)
        except FileExistsError:
            # Another invocation created it in the meantime
            if alias.is_symlink():
                return _existing_link_result(alias, root.path)
            raise
        return AliasResult(AliasStatus.CREATED)

    legacy = alias.parent / legacy_name
    target = legacy / key if (legacy.exists() or legacy.is_symlink()) else legacy

    os.rename(alias, target)
    try:
        alias.symlink_to(root.path, target_is_directory=True)
    except FileExistsError:
        if alias.is_symlink() and _points_to(alias, root.path):
            return AliasResult(AliasStatus.MIGRATED, legacy_path=target)
        msg = f"Moved {alias} to {target} but {alias} was recreated before it could be linked"
        raise TrashError(msg) from None
    except OSError as e:
        msg = f"Moved {alias} to {target} but could not create the trash link: {e}"
        raise TrashError(msg) from e

    logger.info("Migrated %s to %s", alias, target)
    return AliasResult(AliasStatus.MIGRATED, legacy_path=target)


def _existing_link_result(alias: Path, root_path: Path) -> AliasResult:
    """Classify an existing symlink at the alias location."""
    if _points_to(alias, root_path):
        return AliasResult(AliasStatus.PRESENT)
    logger.warning("%s points to %s, expected %s", alias, os.readlink(alias), root_path)
    return AliasResult(AliasStatus.MISDIRECTED)


def _points_to(link: Path, target: Path) -> bool:
    """Check whether a symlink refers to the given directory."""
    return Path(os.readlink(link)) == target or link.resolve() == target.resolve()
