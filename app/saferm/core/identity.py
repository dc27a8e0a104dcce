"""User identities and identity-scoped execution.

Operations inside a user's private home directory must run as that user,
not as the privileged sweeper. Instead of shelling out through sudo, the
required identity is an explicit value and acting_as() either already holds
it, temporarily assumes it (when running as root), or raises
IdentityRequiredError.
"""

import logging
import os
import pwd
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from saferm.core.errors import IdentityRequiredError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """A resolved user identity.

    Attributes:
        name: Login name.
        uid: Numeric user id.
        gid: Primary group id.
        home: Home directory under the configured home base.
    """

    name: str
    uid: int
    gid: int
    home: Path

    def __post_init__(self) -> None:
        """Validate identity data after initialization."""
        if not self.name:
            msg = "User name cannot be empty"
            raise ValueError(msg)

    @classmethod
    def current(cls, home_base: Path) -> "UserIdentity":
        """Resolve the identity of the invoking process.

        Args:
            home_base: Parent directory of home directories.

        Returns:
            UserIdentity for the effective uid.
        """
        uid = os.geteuid()
        try:
            name = pwd.getpwuid(uid).pw_name
        except KeyError:
            name = os.environ.get("USER") or str(uid)
        return cls(name=name, uid=uid, gid=os.getegid(), home=home_base / name)

    @classmethod
    def from_owner(cls, name: str, path: Path, home_base: Path) -> "UserIdentity":
        """Resolve a user identity from the owner of a directory.

        The owner of a home or trash directory is the user it belongs to,
        which also works for accounts unknown to the local passwd database.

        Args:
            name: User name (the directory name).
            path: Directory owned by the user.
            home_base: Parent directory of home directories.

        Returns:
            UserIdentity carrying the directory owner's uid and gid.

        Raises:
            OSError: If the directory cannot be stat'ed.
        """
        st = path.stat()
        return cls(name=name, uid=st.st_uid, gid=st.st_gid, home=home_base / name)


@contextmanager
def acting_as(identity: UserIdentity, path: Path) -> Iterator[None]:
    """Run the enclosed block with the effective identity of a user.

    Args:
        identity: Identity the block must run as.
        path: Location being operated on (for error reporting).

    Yields:
        None, with euid/egid set to the identity for the duration of the block.

    Raises:
        IdentityRequiredError: If the process is neither the user nor root.
    """
    euid = os.geteuid()
    if euid == identity.uid:
        yield
        return

    if euid != 0:
        raise IdentityRequiredError(identity.name, path)

    egid = os.getegid()
    logger.debug("Switching to uid=%d gid=%d for %s", identity.uid, identity.gid, path)
    os.setegid(identity.gid)
    try:
        os.seteuid(identity.uid)
    except OSError:
        os.setegid(egid)
        raise
    try:
        yield
    finally:
        os.seteuid(euid)
        os.setegid(egid)
