"""CLI commands for saferm.

Each module holds one command, also installed as a standalone executable.
"""

from saferm.cli.commands import cleanup, rm, setup

__all__ = ["cleanup", "rm", "setup"]
