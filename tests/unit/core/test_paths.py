"""Unit tests for well-known saferm locations.

Tests for the paths module that resolves the config file, the per-user
config directory and the cleanup log.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from saferm.core.paths import (
    APP_NAME,
    DEFAULT_CONFIG_PATH,
    ensure_dir,
    get_config_path,
    get_cron_log_path,
    get_log_path,
    get_user_config_dir,
)


class TestGetConfigPath:
    """Tests for get_config_path function."""

    def test_default_config_path(self) -> None:
        """get_config_path returns /etc/saferm/config.toml without override."""
        with patch.dict(os.environ, {}, clear=True):
            result = get_config_path()

        assert result == DEFAULT_CONFIG_PATH
        assert result == Path("/etc/saferm/config.toml")

    def test_respects_env_override(self, tmp_path: Path) -> None:
        """get_config_path respects the SAFERM_CONFIG environment variable."""
        target = tmp_path / "custom.toml"
        with patch.dict(os.environ, {"SAFERM_CONFIG": str(target)}):
            result = get_config_path()

        assert result == target

    def test_empty_override_ignored(self) -> None:
        """An empty SAFERM_CONFIG falls back to the default."""
        with patch.dict(os.environ, {"SAFERM_CONFIG": ""}):
            result = get_config_path()

        assert result == DEFAULT_CONFIG_PATH


class TestGetUserConfigDir:
    """Tests for get_user_config_dir function."""

    def test_default_user_config_dir(self) -> None:
        """get_user_config_dir returns ~/.config/saferm without XDG_CONFIG_HOME."""
        with patch.dict(os.environ, {}, clear=True):
            os.environ.pop("XDG_CONFIG_HOME", None)

            result = get_user_config_dir()

        assert result == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_user_config_dir respects XDG_CONFIG_HOME."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_user_config_dir()

        assert result == tmp_path / APP_NAME


class TestGetLogPath:
    """Tests for get_log_path function."""

    def test_log_file_name(self, tmp_path: Path) -> None:
        """The cleanup log is trash_cleanup.log inside the log directory."""
        assert get_log_path(tmp_path) == tmp_path / "trash_cleanup.log"

    def test_cron_output_kept_apart(self, tmp_path: Path) -> None:
        """Scheduled sweep output never lands in the cleanup log."""
        assert get_cron_log_path(tmp_path) == tmp_path / "trash_cleanup.cron.log"
        assert get_cron_log_path(tmp_path) != get_log_path(tmp_path)


class TestEnsureDir:
    """Tests for ensure_dir function."""

    def test_creates_nested_directory(self, tmp_path: Path) -> None:
        """ensure_dir creates missing parents."""
        target = tmp_path / "a" / "b"

        result = ensure_dir(target, "test")

        assert result == target
        assert target.is_dir()

    def test_existing_directory_ok(self, tmp_path: Path) -> None:
        """ensure_dir accepts an existing directory."""
        assert ensure_dir(tmp_path, "test") == tmp_path

    def test_raises_runtime_error_on_failure(self, tmp_path: Path) -> None:
        """ensure_dir wraps OS errors in RuntimeError."""
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(RuntimeError, match="Cannot create log directory"):
            ensure_dir(blocker / "sub", "log")
