"""Color palette for saferm reports.

The cleanup and setup reports color entries by their fate: eligible for
deletion, removed, or kept. Each user may override single colors in
~/.config/saferm/theme.toml:

    [colors]
    eligible = "#ffaf00"
    removed = "#d70000"
"""

import logging
import re
import tomllib
from functools import cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from saferm.core.paths import get_user_config_dir

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


class ThemeColors(BaseModel):
    """Colors used by saferm output, as #RGB or #RRGGBB hex codes."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Entry fates in the cleanup report
    eligible: str = "#f5b332"
    removed: str = "#f53263"
    kept: str = "#69B9A1"
    size: str = "#0ec1c8"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, v: object) -> str:
        if not isinstance(v, str) or not HEX_COLOR.fullmatch(v.strip()):
            msg = f"expected a #RGB or #RRGGBB color, got {v!r}"
            raise ValueError(msg)
        return v.strip()


def get_user_theme_path() -> Path:
    """Path of the per-user theme override (~/.config/saferm/theme.toml)."""
    return get_user_config_dir() / "theme.toml"


def _read_user_colors(path: Path) -> dict[str, object]:
    """Read the [colors] table of a theme file.

    A missing, unreadable or malformed file yields no overrides.
    """
    try:
        with open(path, "rb") as f:
            colors = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return colors


def load_theme() -> ThemeColors:
    """Default colors with the user's overrides applied.

    An override set that fails validation is dropped as a whole.
    """
    path = get_user_theme_path()
    overrides = _read_user_colors(path)
    if not overrides:
        return ThemeColors()

    try:
        colors = ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Invalid colors in %s, using defaults: %s", path, e)
        return ThemeColors()
    logger.debug("Applied %d color overrides from %s", len(overrides), path)
    return colors


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme used by both consoles.

    Args:
        colors: Palette to use; the user's palette when omitted.
    """
    if colors is None:
        colors = load_theme()

    return Theme(
        {
            "text": colors.text,
            "muted": colors.muted,
            "header": colors.header,
            "bold_header": f"bold {colors.header}",
            "border": colors.border,
            "success": colors.success,
            "warning": colors.warning,
            "error": f"bold {colors.error}",
            "info": colors.info,
            "eligible": colors.eligible,
            "removed": colors.removed,
            "kept": colors.kept,
            "size": colors.size,
            "user": f"bold {colors.text}",
        }
    )


@cache
def get_theme() -> Theme:
    """The user's Rich theme, loaded once per process."""
    return get_rich_theme()
