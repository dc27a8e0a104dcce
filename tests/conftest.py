"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. Every fixture
builds a throwaway host layout below tmp_path: home directories, the shared
trash base, the scratch area and the log directory.
"""

import os
import pwd
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
import tomli_w
from saferm.core.config import PlacementMode, SafermConfig
from saferm.core.identity import UserIdentity


def _current_user() -> str:
    try:
        return pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return os.environ.get("USER") or str(os.geteuid())


@pytest.fixture
def user_name() -> str:
    """Login name of the user running the tests."""
    return _current_user()


@pytest.fixture
def host_config(tmp_path: Path) -> SafermConfig:
    """Centralized-mode configuration rooted in tmp_path."""
    for name in ("home", "scratch/trashcan", "logs"):
        (tmp_path / name).mkdir(parents=True)
    return SafermConfig(
        mode=PlacementMode.CENTRALIZED,
        trash_base=tmp_path / "scratch" / "trashcan",
        home_base=tmp_path / "home",
        scratch_base=tmp_path / "scratch",
        log_dir=tmp_path / "logs",
        skip_users=[],
    )


@pytest.fixture
def local_config(host_config: SafermConfig) -> SafermConfig:
    """Local-mode variant of host_config."""
    return host_config.model_copy(update={"mode": PlacementMode.LOCAL})


@pytest.fixture
def identity(host_config: SafermConfig, user_name: str) -> UserIdentity:
    """Identity of the test user with a home directory below tmp_path."""
    home = host_config.home_base / user_name
    home.mkdir(exist_ok=True)
    return UserIdentity(name=user_name, uid=os.geteuid(), gid=os.getegid(), home=home)


@pytest.fixture
def config_file(tmp_path: Path, host_config: SafermConfig) -> Iterator[Path]:
    """Write host_config to a TOML file and point SAFERM_CONFIG at it."""
    path = tmp_path / "etc" / "config.toml"
    path.parent.mkdir()
    data = {k: v for k, v in host_config.model_dump(mode="json").items() if v is not None}
    with open(path, "wb") as f:
        tomli_w.dump(data, f)
    with patch.dict(os.environ, {"SAFERM_CONFIG": str(path)}):
        yield path


def set_age(path: Path, age_seconds: float, now: float) -> None:
    """Set the modification time of path to now - age_seconds."""
    stamp = now - age_seconds
    os.utime(path, (stamp, stamp), follow_symlinks=False)


def _make_entry(root: Path, name: str, age_seconds: float, now: float, size: int = 10) -> Path:
    entry = root / name
    entry.mkdir(parents=True)
    (entry / "file.txt").write_bytes(b"x" * size)
    set_age(entry, age_seconds, now)
    return entry


@pytest.fixture
def make_entry() -> Callable[..., Path]:
    """Factory creating a trash entry holding one file, aged relative to now."""
    return _make_entry


@pytest.fixture
def aged() -> Callable[[Path, float, float], None]:
    """Factory setting the modification time of a path relative to now."""
    return set_age
