"""CLI package for saferm.

This package contains the Typer applications and all commands.
"""

from saferm.cli.main import app

__all__ = ["app"]
