"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.theme import Theme
from saferm.core.theme import (
    ThemeColors,
    _read_user_colors,
    get_rich_theme,
    get_theme,
    get_user_theme_path,
    load_theme,
)


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.eligible == "#f5b332"
        assert colors.removed == "#f53263"

    def test_valid_hex_colors(self) -> None:
        """ThemeColors accepts #RGB and #RRGGBB codes."""
        colors = ThemeColors(text="#AABBCC", muted="#abc")
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="#RGB or #RRGGBB"):
            ThemeColors(size="0ec1c8")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects non-hex digits."""
        with pytest.raises(ValueError, match="#RGB or #RRGGBB"):
            ThemeColors(kept="#gggggg")

    def test_rejects_non_string(self) -> None:
        """Colors must be strings."""
        with pytest.raises(ValueError, match="#RGB or #RRGGBB"):
            ThemeColors(size=123)  # type: ignore[arg-type]

    def test_extra_fields_forbidden(self) -> None:
        """Unknown color names are rejected."""
        with pytest.raises(ValueError):
            ThemeColors(unknown="#ffffff")  # type: ignore[call-arg]


class TestReadUserColors:
    """Tests for _read_user_colors function."""

    def test_loads_colors_section(self, tmp_path: Path) -> None:
        """Colors are read from the [colors] table."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nsize = "#123456"\n')

        assert _read_user_colors(path) == {"size": "#123456"}

    def test_missing_file_has_no_overrides(self, tmp_path: Path) -> None:
        """A missing file yields no overrides."""
        assert _read_user_colors(tmp_path / "missing.toml") == {}

    def test_invalid_toml_has_no_overrides(self, tmp_path: Path) -> None:
        """Broken TOML yields no overrides."""
        path = tmp_path / "theme.toml"
        path.write_text("[colors\n")

        assert _read_user_colors(path) == {}

    def test_colors_must_be_a_table(self, tmp_path: Path) -> None:
        """A scalar colors entry is ignored."""
        path = tmp_path / "theme.toml"
        path.write_text('colors = "red"\n')

        assert _read_user_colors(path) == {}


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_defaults_without_user_theme(self, tmp_path: Path) -> None:
        """Without a user theme the defaults are used."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert load_theme() == ThemeColors()

    def test_user_overrides_applied(self, tmp_path: Path) -> None:
        """A user theme overrides individual colors."""
        theme_dir = tmp_path / "saferm"
        theme_dir.mkdir()
        (theme_dir / "theme.toml").write_text('[colors]\neligible = "#000000"\n')

        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            colors = load_theme()

        assert colors.eligible == "#000000"
        assert colors.removed == ThemeColors().removed

    def test_invalid_user_theme_falls_back(self, tmp_path: Path) -> None:
        """An invalid user theme falls back to the defaults."""
        theme_dir = tmp_path / "saferm"
        theme_dir.mkdir()
        (theme_dir / "theme.toml").write_text('[colors]\nsize = "blue"\n')

        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert load_theme() == ThemeColors()


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_includes_report_styles(self) -> None:
        """The Rich theme defines every style used by the reports."""
        theme = get_rich_theme(ThemeColors())

        for name in ("eligible", "removed", "kept", "size", "bold_header", "user", "muted"):
            assert name in theme.styles

    def test_uses_provided_colors(self) -> None:
        """Provided colors end up in the styles."""
        theme = get_rich_theme(ThemeColors(size="#111111"))

        assert theme.styles["size"].color is not None
        assert theme.styles["size"].color.name == "#111111"


class TestGetTheme:
    """Tests for the cached theme."""

    def test_caches_theme(self) -> None:
        """get_theme returns the same instance on repeated calls."""
        get_theme.cache_clear()
        first = get_theme()
        second = get_theme()

        assert isinstance(first, Theme)
        assert first is second


class TestGetUserThemePath:
    """Tests for get_user_theme_path function."""

    def test_returns_xdg_config_path(self, tmp_path: Path) -> None:
        """The user theme lives in the saferm config directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert get_user_theme_path() == tmp_path / "saferm" / "theme.toml"
