"""Well-known locations for saferm.

The system-wide configuration lives in /etc/saferm/config.toml and can be
redirected with the SAFERM_CONFIG environment variable. The per-user theme
override follows the XDG config directory.
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "saferm"

CONFIG_ENV_VAR = "SAFERM_CONFIG"
DEFAULT_CONFIG_PATH = Path("/etc") / APP_NAME / "config.toml"

LOG_FILENAME = "trash_cleanup.log"
CRON_LOG_FILENAME = "trash_cleanup.cron.log"


def get_config_path() -> Path:
    """Get the system configuration file path.

    Returns:
        Path from $SAFERM_CONFIG if set, otherwise /etc/saferm/config.toml.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_PATH


def get_user_config_dir() -> Path:
    """Get the per-user configuration directory.

    Returns:
        Path to ~/.config/saferm/ (or XDG_CONFIG_HOME/saferm/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_log_path(log_dir: Path) -> Path:
    """Get the cleanup log file inside a log directory.

    Args:
        log_dir: Directory configured for persisted logs.

    Returns:
        Path to <log_dir>/trash_cleanup.log.
    """
    return log_dir / LOG_FILENAME


def get_cron_log_path(log_dir: Path) -> Path:
    """Get the file collecting the scheduled sweep's console output.

    Separate from the cleanup log, which holds only log records.
    """
    return log_dir / CRON_LOG_FILENAME


def ensure_dir(path: Path, name: str, mode: int = 0o755) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.
        mode: Permission bits for newly created directories.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
