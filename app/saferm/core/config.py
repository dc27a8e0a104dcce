"""Host configuration for saferm.

The placement mode and the filesystem layout are decided once per host at
deployment time and stored in /etc/saferm/config.toml. Every command
resolves the configuration once at startup and passes it down explicitly.

Example::

    mode = "centralized"
    trash_base = "/scratch/trashcan"
    home_base = "/home"
    log_dir = "/usr/local/sw/logs"
    legacy_grace_days = 30
"""

import logging
import os
import tomllib
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from saferm.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError
from saferm.core.paths import get_config_path, get_cron_log_path, get_log_path

logger = logging.getLogger(__name__)


class PlacementMode(str, Enum):
    """Where each user's TrashRoot lives.

    Attributes:
        CENTRALIZED: Under a shared large-capacity area, one directory per
            user, referenced from the home directory through a symlink.
        LOCAL: A plain subdirectory of the user's home directory.
    """

    CENTRALIZED = "centralized"
    LOCAL = "local"


class SafermConfig(BaseModel):
    """Host-wide saferm settings.

    Attributes:
        mode: Placement mode for TrashRoots.
        trash_base: Shared root holding one directory per user (centralized).
        home_base: Parent directory of all home directories.
        scratch_base: Parent of per-user scratch areas.
        log_dir: Directory receiving trash_cleanup.log.
        trash_dirname: Name of the TrashRoot below <trash_base>/<user>.
        alias_name: Name of the trash alias inside each home directory.
        legacy_name: Name of the migrated pre-existing trash directory.
        legacy_grace_days: Minimum age of an empty legacy directory before removal.
        default_age: Sweeper age threshold when none is given.
        top_users: Number of users listed in the size ranking.
        admin_group: Group granted delete access on centralized TrashRoots.
        skip_users: Home directories ignored by setup.
    """

    model_config = ConfigDict(extra="forbid")

    mode: Annotated[
        PlacementMode,
        Field(description="TrashRoot placement mode"),
    ] = PlacementMode.CENTRALIZED
    trash_base: Annotated[
        Path,
        Field(description="Shared trash area (centralized mode)"),
    ] = Path("/scratch/trashcan")
    home_base: Annotated[
        Path,
        Field(description="Parent directory of home directories"),
    ] = Path("/home")
    scratch_base: Annotated[
        Path,
        Field(description="Parent directory of per-user scratch areas"),
    ] = Path("/scratch")
    log_dir: Annotated[
        Path,
        Field(description="Directory for trash_cleanup.log"),
    ] = Path("/usr/local/sw/logs")
    trash_dirname: Annotated[
        str,
        Field(min_length=1, description="TrashRoot name below <trash_base>/<user>"),
    ] = "trash"
    alias_name: Annotated[
        str,
        Field(min_length=1, description="Trash alias name in the home directory"),
    ] = ".trash"
    legacy_name: Annotated[
        str,
        Field(min_length=1, description="Migrated legacy trash name"),
    ] = ".trash.old"
    legacy_grace_days: Annotated[
        int,
        Field(ge=1, le=3650, description="Grace period for empty legacy trash (days)"),
    ] = 30
    default_age: Annotated[
        str,
        Field(pattern=r"^[0-9]+[mhd]$", description="Default sweep age, e.g. 7d"),
    ] = "7d"
    top_users: Annotated[
        int,
        Field(ge=1, le=100, description="Users listed in the size ranking"),
    ] = 3
    admin_group: Annotated[
        str | None,
        Field(description="Group owning centralized TrashRoots"),
    ] = None
    skip_users: Annotated[
        list[str],
        Field(description="Home directories skipped by setup"),
    ] = ["root", "installer"]

    @field_validator("trash_dirname", "alias_name", "legacy_name")
    @classmethod
    def validate_plain_name(cls, v: str) -> str:
        """Reject names that would escape their parent directory."""
        if "/" in v or v in (".", ".."):
            msg = f"must be a plain file name, got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def log_path(self) -> Path:
        """Path of the append-only cleanup log."""
        return get_log_path(self.log_dir)

    @property
    def cron_log_path(self) -> Path:
        """Path receiving the output of the scheduled sweep."""
        return get_cron_log_path(self.log_dir)


def load_config(path: Path | None = None) -> SafermConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated SafermConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return SafermConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def get_config(path: Path | None = None) -> SafermConfig:
    """Load configuration, falling back to defaults when no file exists.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        SafermConfig from the file, or the built-in defaults.

    Raises:
        ConfigParseError: If the file exists but is not valid TOML.
        ConfigError: If the file exists but is invalid.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using built-in defaults")
        return SafermConfig()


def save_config(config: SafermConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written to a temporary file in the same directory and moved
    into place with os.replace(), so readers never see a partial file.

    Args:
        config: The configuration to save.
        path: Destination path. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.chmod(tmp_path, 0o644)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    return config_path


def _config_to_dict(config: SafermConfig) -> dict[str, object]:
    """Convert SafermConfig to a TOML-serializable dictionary.

    None values are omitted since TOML has no null.
    """
    result: dict[str, object] = {}
    for key, value in config.model_dump(mode="json").items():
        if value is None:
            continue
        result[key] = value
    return result
