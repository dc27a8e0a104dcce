"""Exception hierarchy for saferm."""

from pathlib import Path


class SafermError(Exception):
    """Base exception for all saferm errors."""


class ConfigError(SafermError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""


class TrashError(SafermError):
    """Raised when an item cannot be placed into the trash."""


class TrashKeyCollisionError(TrashError):
    """Raised when a freshly generated trash entry already exists.

    Two deletions produced the same timestamp key. The affected item is
    left in place instead of being merged into another deletion's entry.
    """

    def __init__(self, entry_path: Path) -> None:
        self.entry_path = entry_path
        super().__init__(f"Trash entry already exists: {entry_path}")


class IdentityRequiredError(SafermError):
    """Raised when an operation must run as a user the process cannot become.

    Attributes:
        user: Name of the required user.
        path: Location that requires the identity.
    """

    def __init__(self, user: str, path: Path) -> None:
        self.user = user
        self.path = path
        super().__init__(
            f"Operation on {path} requires running as '{user}' "
            "(run as that user or as root)"
        )


class SetupError(SafermError):
    """Raised when deployment setup cannot proceed.

    The message carries the remediation the operator should apply.
    """


class InvalidAgeError(SafermError, ValueError):
    """Raised when an age threshold string cannot be parsed."""


class TrashRootNotFoundError(SafermError):
    """Raised when an explicitly named user has no TrashRoot.

    Attributes:
        user: Requested user name.
        path: Location where the TrashRoot was expected.
    """

    def __init__(self, user: str, path: Path) -> None:
        self.user = user
        self.path = path
        super().__init__(f"User '{user}' not found: no trash at {path}")
