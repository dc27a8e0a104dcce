"""Retention sweep command.

Reports (default) or deletes trash entries older than an age threshold,
for all users or a single one. Meant to run daily from cron with --do-it.
"""

from typing import Annotated

import typer
from rich.markup import escape

from saferm.cli.display import create_findings_table, print_sweep_header, print_sweep_summary
from saferm.core.config import get_config
from saferm.core.errors import ConfigError, InvalidAgeError, TrashRootNotFoundError
from saferm.sweeper.age import AgeThreshold
from saferm.sweeper.models import SweepReport
from saferm.sweeper.sweeper import TrashSweeper
from saferm.utils.formatting import console, err_console, print_error, print_warning, setup_logging

CLEANUP_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(
    name="trash-cleanup",
    help="Delete trash entries older than a given age.",
    context_settings=CLEANUP_CONTEXT_SETTINGS,
    add_completion=False,
)


@app.command()
def cleanup(
    target: Annotated[
        str | None,
        typer.Argument(help="Restrict the sweep to this user.", show_default=False),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-u", help="Restrict the sweep to this user."),
    ] = None,
    age: Annotated[
        str | None,
        typer.Option(
            "--age",
            "-a",
            help="Minimum age of deleted entries: <N>m, <N>h or <N>d (default from config, 7d).",
        ),
    ] = None,
    do_it: Annotated[
        bool,
        typer.Option("--do-it", help="Actually delete. Without it, only report."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show diagnostic messages."),
    ] = False,
) -> None:
    """Clean up old trash (dry-run unless --do-it is given)."""
    setup_logging(verbose)

    if user is not None and target is not None and user != target:
        print_error(f"Conflicting users: '{escape(user)}' and '{escape(target)}'")
        raise typer.Exit(code=1)
    name = user or target

    try:
        config = get_config()
        threshold = AgeThreshold.parse(age or config.default_age)
    except (ConfigError, InvalidAgeError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    sweeper = TrashSweeper(config, threshold, execute=do_it, progress=_print_progress)

    try:
        report = sweeper.sweep(name)
    except TrashRootNotFoundError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_sweep_header(report, _rerun_command(name, threshold))
    _print_findings(report)
    print_sweep_summary(report, config.top_users)

    for warning in report.warnings:
        print_warning(escape(warning))


def _print_findings(report: SweepReport) -> None:
    """Print the per-user findings, or a note when nothing matched."""
    table = create_findings_table(report)
    if table.row_count:
        console.print(table)
    elif report.execute:
        console.print("[muted]Nothing to clean.[/]")
    else:
        console.print(
            f"[muted]No trash older than {report.threshold.display} found.[/]"
        )


def _rerun_command(user: str | None, threshold: AgeThreshold) -> str:
    """Command line performing the reported sweep for real."""
    parts = ["trash-cleanup"]
    if user is not None:
        parts += ["-u", user]
    parts += ["-a", str(threshold), "--do-it"]
    return " ".join(parts)


def _print_progress(message: str) -> None:
    """Progress lines go to standard error."""
    err_console.print(f"[muted]{escape(message)}[/]", soft_wrap=True)
