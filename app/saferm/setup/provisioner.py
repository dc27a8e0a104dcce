"""Host provisioning for the trash system.

Decides the placement mode by probing for a shared large-capacity mount,
creates the shared trash base and, for every user, the TrashRoot and the
home-directory alias. Pre-existing non-symlink trash directories are moved
aside to the legacy location first, using the same helper as the
interceptor.
"""

import grp
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from saferm.core.config import PlacementMode, SafermConfig
from saferm.core.errors import IdentityRequiredError, SetupError, TrashError
from saferm.core.identity import UserIdentity, acting_as
from saferm.trash.keys import KeyGenerator
from saferm.trash.layout import (
    AliasStatus,
    ensure_alias,
    ensure_trash_root,
    resolve_trash_root,
)

logger = logging.getLogger(__name__)

# Group-writable and discoverable; setgid so user directories inherit the group
SHARED_BASE_MODE = 0o2775


@dataclass(frozen=True, slots=True)
class UserSetupResult:
    """Provisioning outcome for one user.

    Attributes:
        user: User name.
        root: TrashRoot location.
        root_created: The TrashRoot was (or would be) created.
        alias: Resulting (or planned) alias state.
        legacy_path: Where old trash data was moved, if migrated.
        skipped: The user is excluded from provisioning.
        error: Failure reason, None on success.
    """

    user: str
    root: Path | None = None
    root_created: bool = False
    alias: AliasStatus | None = None
    legacy_path: Path | None = None
    skipped: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Whether provisioning failed for this user."""
        return self.error is not None


@dataclass(slots=True)
class SetupReport:
    """Aggregated provisioning outcome.

    Attributes:
        mode: Placement mode that was applied.
        dry_run: Whether changes were only planned.
        base_created: The shared trash base was (or would be) created.
        users: Per-user results.
    """

    mode: PlacementMode
    dry_run: bool = False
    base_created: bool = False
    users: list[UserSetupResult] = field(default_factory=lambda: [])

    @property
    def roots_created(self) -> int:
        """TrashRoots created."""
        return sum(1 for u in self.users if u.root_created)

    @property
    def aliases_created(self) -> int:
        """Aliases created, including those created after a migration."""
        return sum(1 for u in self.users if u.alias in (AliasStatus.CREATED, AliasStatus.MIGRATED))

    @property
    def migrated(self) -> int:
        """Pre-existing trash directories moved to the legacy location."""
        return sum(1 for u in self.users if u.alias == AliasStatus.MIGRATED)

    @property
    def skipped(self) -> int:
        """Users excluded from provisioning."""
        return sum(1 for u in self.users if u.skipped)

    @property
    def failed(self) -> int:
        """Users whose provisioning failed."""
        return sum(1 for u in self.users if u.failed)


def probe_placement_mode(config: SafermConfig) -> PlacementMode:
    """Choose the placement mode for this host.

    Centralized mode is chosen when the shared trash base already exists or
    its parent is a mount point (a dedicated large-capacity area).

    Args:
        config: Host configuration carrying the candidate trash base.

    Returns:
        The detected PlacementMode.
    """
    base = config.trash_base
    if base.is_dir():
        return PlacementMode.CENTRALIZED
    if base.parent.is_dir() and os.path.ismount(base.parent):
        return PlacementMode.CENTRALIZED
    logger.info("No shared mount found at %s, using local mode", base.parent)
    return PlacementMode.LOCAL


class TrashProvisioner:
    """Creates the trash layout for all users of a host.

    Attributes:
        _config: Host configuration (its mode is the one applied).
        _dry_run: If True, report planned changes without making them.
        _keys: Key generator for nesting migrated data.
    """

    def __init__(
        self,
        config: SafermConfig,
        *,
        dry_run: bool = False,
        keys: KeyGenerator | None = None,
    ) -> None:
        self._config = config
        self._dry_run = dry_run
        self._keys = keys or KeyGenerator()

    def run(self, user: str | None = None) -> SetupReport:
        """Provision the shared base (centralized mode) and user trash.

        Args:
            user: Provision a single user only.

        Returns:
            SetupReport with per-user results.

        Raises:
            SetupError: If the shared trash base cannot be created.
        """
        report = SetupReport(mode=self._config.mode, dry_run=self._dry_run)
        if self._config.mode == PlacementMode.CENTRALIZED:
            report.base_created = self.prepare_shared_base()

        for name in [user] if user is not None else self._list_homes():
            report.users.append(self.provision_user(name))
        return report

    def prepare_shared_base(self) -> bool:
        """Create the shared trash base with group-writable, setgid permissions.

        Returns:
            True if the base was (or would be) created.

        Raises:
            SetupError: If the base cannot be created or fixed up.
        """
        base = self._config.trash_base
        created = not base.is_dir()
        if self._dry_run:
            return created

        try:
            base.mkdir(parents=True, exist_ok=True)
            gid = self._admin_gid()
            if gid != -1 and os.geteuid() == 0:
                os.chown(base, -1, gid)
            if base.stat().st_mode & 0o7777 != SHARED_BASE_MODE:
                os.chmod(base, SHARED_BASE_MODE)
        except OSError as e:
            msg = (
                f"Cannot prepare shared trash base {base}: {e.strerror or e}. "
                f"Run setup as root, or create it manually: "
                f"mkdir -p {base} && chmod 2775 {base}"
            )
            raise SetupError(msg) from e

        if created:
            logger.info("Created shared trash base %s", base)
        return created

    def provision_user(self, name: str) -> UserSetupResult:
        """Ensure a user's TrashRoot and alias exist.

        Args:
            name: User name (a directory below the home base).

        Returns:
            UserSetupResult; failures are captured, not raised.
        """
        if name in self._config.skip_users:
            return UserSetupResult(user=name, skipped=True)

        home = self._config.home_base / name
        try:
            identity = UserIdentity.from_owner(name, home, self._config.home_base)
        except OSError as e:
            return UserSetupResult(user=name, error=f"Cannot read {home}: {e.strerror or e}")

        root = resolve_trash_root(identity, self._config)
        if self._dry_run:
            return UserSetupResult(
                user=name,
                root=root.path,
                root_created=not root.path.is_dir(),
                alias=_planned_alias(root.alias_path, root.path, root.uses_alias),
            )

        try:
            if root.uses_alias:
                root_created = ensure_trash_root(root)
                if root_created:
                    self._hand_over(root.path, identity)
            else:
                with acting_as(identity, root.path):
                    root_created = ensure_trash_root(root)
            with acting_as(identity, root.alias_path):
                alias = ensure_alias(root, self._config.legacy_name, self._keys.next_key())
        except (OSError, RuntimeError, TrashError, IdentityRequiredError) as e:
            logger.warning("Provisioning %s failed: %s", name, e)
            return UserSetupResult(user=name, root=root.path, error=str(e))

        return UserSetupResult(
            user=name,
            root=root.path,
            root_created=root_created,
            alias=alias.status,
            legacy_path=alias.legacy_path,
        )

    def _hand_over(self, root: Path, identity: UserIdentity) -> None:
        """Give a freshly created centralized TrashRoot to its user.

        Only possible when running as root; otherwise the directories keep
        the creating user and the inherited group.
        """
        if os.geteuid() != 0:
            return
        gid = self._admin_gid()
        for directory in (root.parent, root):
            shutil.chown(directory, user=identity.uid, group=gid if gid != -1 else None)

    def _admin_gid(self) -> int:
        """Numeric id of the configured admin group, -1 when unset."""
        if self._config.admin_group is None:
            return -1
        try:
            return grp.getgrnam(self._config.admin_group).gr_gid
        except KeyError as e:
            msg = (
                f"Admin group '{self._config.admin_group}' does not exist. "
                "Create it (groupadd) or change admin_group in the config."
            )
            raise SetupError(msg) from e

    def _list_homes(self) -> list[str]:
        """Home directory names below the home base, sorted."""
        base = self._config.home_base
        try:
            return sorted(
                entry.name for entry in base.iterdir() if entry.is_dir() and not entry.is_symlink()
            )
        except OSError as e:
            msg = f"Cannot list home directories in {base}: {e.strerror or e}"
            raise SetupError(msg) from e


def _planned_alias(alias: Path, root: Path, uses_alias: bool) -> AliasStatus:
    """Alias state ensure_alias() would produce, without touching anything."""
    if not uses_alias:
        return AliasStatus.NOT_USED
    if alias.is_symlink():
        target = Path(os.readlink(alias))
        return AliasStatus.PRESENT if target == root else AliasStatus.MISDIRECTED
    if alias.exists():
        return AliasStatus.MIGRATED
    return AliasStatus.CREATED


def render_alias_snippet(safe_rm_path: str) -> str:
    """Shell snippet that makes rm resolve to safe-rm for interactive shells.

    Args:
        safe_rm_path: Absolute path of the installed safe-rm executable.

    Returns:
        Snippet for the system-wide bashrc.
    """
    return (
        "# Safe rm - move files to trash instead of permanent deletion\n"
        f"if [ -x {safe_rm_path} ]; then\n"
        "    unalias rm 2>/dev/null\n"
        f"    alias rm='{safe_rm_path}'\n"
        "fi\n"
    )


def render_cron_line(trash_cleanup_path: str, log_path: Path) -> str:
    """Crontab line running the sweeper daily at 02:00 in execute mode."""
    return f"0 2 * * * {trash_cleanup_path} --do-it >> {log_path} 2>&1"
