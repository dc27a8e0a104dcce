"""Rich rendering of sweep and setup reports.

Provides the table builders and summary printers used by the cleanup and
setup commands.
"""

from rich.markup import escape
from rich.table import Table

from saferm.setup.provisioner import SetupReport
from saferm.sweeper.models import ContainerSweep, SweepReport
from saferm.sweeper.usage import format_size
from saferm.trash.layout import AliasStatus
from saferm.utils.formatting import console


def print_sweep_header(report: SweepReport, command_hint: str | None) -> None:
    """Print the banner describing what the sweep does.

    Args:
        report: Report of the sweep (only its parameters are used).
        command_hint: Command re-running the sweep in execute mode, shown
            after a dry-run.
    """
    title = "CLEANING" if report.execute else "DRY RUN"
    target = f"user '{report.target_user}'" if report.target_user else "ALL users"
    console.rule(f"[bold_header]Trash Cleanup - {title}[/]", style="border")
    console.print(f"Target:   {escape(target)}")
    console.print(f"Action:   Delete trash entries older than {report.threshold.display}")
    console.print(f"Mode:     {report.mode.value}")
    console.print(f"Location: {escape(str(report.location))}", soft_wrap=True)
    if not report.execute and command_hint:
        console.print("\nTo actually perform cleanup, run:")
        console.print(f"  [info]{escape(command_hint)}[/]", soft_wrap=True)
    console.print()


def create_findings_table(report: SweepReport) -> Table:
    """Create a table listing every trash directory holding aged entries.

    Args:
        report: Completed sweep report.

    Returns:
        Rich Table with one row per directory with findings or errors.
    """
    title = "Cleaned Trash" if report.execute else "Eligible Trash (Dry Run)"
    table = Table(title=title, show_header=True, header_style="bold_header", border_style="border")
    table.add_column("User", style="user", no_wrap=True)
    table.add_column("Location", style="muted")
    table.add_column("Old entries", justify="right")
    table.add_column("Removed", justify="right")
    table.add_column("Size", style="size", justify="right")
    table.add_column("Status")

    for result in (*report.trash, *report.legacy):
        if not result.has_old and not result.failed and not result.container_eligible:
            continue
        table.add_row(
            escape(result.user),
            escape(result.path.name),
            str(result.matched + result.loose_matched),
            str(result.removed + result.loose_removed),
            format_size(result.size_after_kib),
            _status_text(result, report.execute),
        )

    return table


def _status_text(result: ContainerSweep, execute: bool) -> str:
    """Status cell of a findings row."""
    if result.failed:
        return f"[error]FAIL[/error] [muted]{escape(result.errors[0])}[/muted]"
    if result.container_removed:
        return "[removed]container removed[/removed]"
    if not execute:
        if result.container_eligible:
            return "[eligible]eligible, container removable[/eligible]"
        return "[eligible]eligible[/eligible]"
    if result.cleaned:
        return "[success]OK[/success]"
    return "[kept]kept[/kept]"


def print_sweep_summary(report: SweepReport, top_users: int) -> None:
    """Print the summary section of a sweep.

    Sizes reflect the state after the sweep, which in dry-run mode is the
    unchanged starting state.

    Args:
        report: Completed sweep report.
        top_users: Number of users in the size ranking.
    """
    console.print()
    console.print(_summary_table(report, top_users))

    if report.with_legacy:
        console.print(_legacy_table(report, top_users))

    console.print(
        f"\n[bold_header]Combined total:[/] all trash locations "
        f"[size]{format_size(report.combined_kib)}[/]"
    )

    failures = report.failures
    if failures:
        console.print(f"[error]{len(failures)} location(s) could not be fully swept[/]")

    if not report.execute:
        console.print("\n[muted]Dry run complete. Use --do-it to actually delete old trash.[/]")


def _summary_table(report: SweepReport, top_users: int) -> Table:
    """Totals of the TrashRoots."""
    table = Table(
        title=f"Trash ({escape(str(report.location))})",
        show_header=False,
        border_style="border",
    )
    table.add_column("Metric", style="muted")
    table.add_column("Value", justify="right")
    table.add_row("Users scanned", str(report.users_scanned))
    table.add_row("Users with trash", str(report.with_trash))
    table.add_row("Users with old trash", str(report.with_old_trash))
    if report.execute:
        table.add_row("Users cleaned", str(report.cleaned))
        table.add_row("Size before cleanup", format_size(report.total_before_kib))
    table.add_row("Total trash size", f"[size]{format_size(report.total_kib)}[/]")
    for rank, result in enumerate(report.top_trash(top_users), start=1):
        table.add_row(f"  {rank}. {escape(result.user)}", format_size(result.size_after_kib))
    return table


def _legacy_table(report: SweepReport, top_users: int) -> Table:
    """Totals of the legacy trash directories."""
    table = Table(title="Legacy trash", show_header=False, border_style="border")
    table.add_column("Metric", style="muted")
    table.add_column("Value", justify="right")
    table.add_row("Users with legacy trash", str(report.with_legacy))
    if report.execute:
        table.add_row("Legacy trash cleaned", str(report.legacy_cleaned))
    table.add_row("Total legacy size", f"[size]{format_size(report.legacy_total_kib)}[/]")
    for rank, result in enumerate(report.top_legacy(top_users), start=1):
        table.add_row(f"  {rank}. {escape(result.user)}", format_size(result.size_after_kib))
    return table


def create_setup_table(report: SetupReport) -> Table:
    """Create a table with the per-user provisioning outcome.

    Args:
        report: Completed setup report.

    Returns:
        Rich Table with one row per user.
    """
    title = "Trash Setup (Dry Run)" if report.dry_run else "Trash Setup"
    table = Table(title=title, show_header=True, header_style="bold_header", border_style="border")
    table.add_column("User", style="user", no_wrap=True)
    table.add_column("Trash root")
    table.add_column("Alias")
    table.add_column("Details", style="muted")

    for user in report.users:
        if user.skipped:
            table.add_row(escape(user.user), "[muted]skipped[/muted]", "", "")
            continue
        if user.failed:
            table.add_row(escape(user.user), "[error]FAIL[/error]", "", escape(user.error or ""))
            continue
        root = "[success]created[/success]" if user.root_created else "exists"
        alias = user.alias.value if user.alias else "-"
        if user.alias == AliasStatus.MISDIRECTED:
            alias = f"[warning]{alias}[/warning]"
        details = f"old trash -> {user.legacy_path}" if user.legacy_path else ""
        table.add_row(escape(user.user), root, alias, escape(details))

    return table


def print_setup_summary(report: SetupReport) -> None:
    """Print provisioning counters."""
    parts = [
        f"Mode: [info]{report.mode.value}[/]",
        f"Roots created: {report.roots_created}",
        f"Aliases created: {report.aliases_created}",
        f"Migrated: {report.migrated}",
        f"Skipped: {report.skipped}",
    ]
    if report.failed:
        parts.append(f"Failed: [error]{report.failed}[/error]")
    console.print("\n" + "  ".join(parts))
