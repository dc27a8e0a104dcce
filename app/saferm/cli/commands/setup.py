"""Deployment setup command.

Chooses the placement mode, provisions the shared trash base and every
user's trash, and prints the shell alias and cron line to install.
"""

import shutil
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from saferm.cli.display import create_setup_table, print_setup_summary
from saferm.core.config import PlacementMode, get_config, save_config
from saferm.core.errors import ConfigError, SetupError
from saferm.core.paths import get_config_path
from saferm.setup.provisioner import (
    TrashProvisioner,
    probe_placement_mode,
    render_alias_snippet,
    render_cron_line,
)
from saferm.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)

app = typer.Typer(
    name="saferm-setup",
    help="Provision trash directories for all users.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


class ModeChoice(str, Enum):
    """Placement mode selection for setup."""

    AUTO = "auto"
    CENTRALIZED = "centralized"
    LOCAL = "local"


@app.command()
def setup(
    mode: Annotated[
        ModeChoice,
        typer.Option(
            "--mode",
            "-m",
            help="Placement mode; auto probes for the shared trash mount.",
            case_sensitive=False,
        ),
    ] = ModeChoice.AUTO,
    user: Annotated[
        str | None,
        typer.Option("--user", "-u", help="Provision a single user only."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be created."),
    ] = False,
    write_config: Annotated[
        bool,
        typer.Option(
            "--write-config/--no-write-config",
            help="Store the chosen placement mode in the config file.",
        ),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show diagnostic messages."),
    ] = False,
) -> None:
    """Set up trash directories, aliases and the retention sweep."""
    setup_logging(verbose)

    try:
        config = get_config()
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    if mode == ModeChoice.AUTO:
        chosen = probe_placement_mode(config)
        print_info(f"Detected placement mode: {chosen.value}")
    else:
        chosen = PlacementMode(mode.value)
    config = config.model_copy(update={"mode": chosen})

    provisioner = TrashProvisioner(config, dry_run=dry_run)
    try:
        report = provisioner.run(user)
    except SetupError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    if report.base_created:
        verb = "Would create" if dry_run else "Created"
        print_info(escape(f"{verb} shared trash base {config.trash_base}"))

    console.print(create_setup_table(report))
    print_setup_summary(report)

    if write_config and not dry_run:
        try:
            path = save_config(config)
        except ConfigError as e:
            print_warning(escape(f"{e}. Set mode = \"{chosen.value}\" in {get_config_path()}"))
        else:
            print_success(escape(f"Placement mode saved to {path}"))

    _print_next_steps(config.cron_log_path)

    if report.failed:
        raise typer.Exit(code=1)


def _print_next_steps(output_path: Path) -> None:
    """Print the shell alias snippet and the cron line to install."""
    safe_rm = shutil.which("safe-rm") or "/usr/local/bin/safe-rm"
    trash_cleanup = shutil.which("trash-cleanup") or "/usr/local/bin/trash-cleanup"

    console.print("\n[bold_header]Next steps[/]")
    console.print("1. Add to the system-wide bashrc (e.g. /etc/bash.bashrc):")
    console.print(escape(render_alias_snippet(safe_rm)), soft_wrap=True, highlight=False)
    console.print("2. Add to root's crontab (crontab -e):")
    console.print(
        escape(render_cron_line(trash_cleanup, output_path)), soft_wrap=True, highlight=False
    )
