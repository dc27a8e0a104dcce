"""Main CLI application entry point.

Defines the saferm Typer application grouping the rm, cleanup and setup
commands. Each command is also installed as its own executable
(safe-rm, trash-cleanup, saferm-setup).
"""

from typing import Annotated

import typer

from saferm import __version__
from saferm.cli.commands import cleanup, rm, setup

app = typer.Typer(
    name="saferm",
    help="Trash-based rm and retention sweep for shared hosts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"saferm version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """saferm - Move deleted files to a trash instead of destroying them.

    Deleted items stay recoverable until the retention sweep removes
    entries older than the configured age.
    """


# Register commands
app.command("rm", context_settings=rm.RM_CONTEXT_SETTINGS)(rm.remove)
app.command("cleanup", context_settings=cleanup.CLEANUP_CONTEXT_SETTINGS)(cleanup.cleanup)
app.command("setup")(setup.setup)


if __name__ == "__main__":
    app()
