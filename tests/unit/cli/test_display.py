"""Unit tests for report rendering."""

from pathlib import Path

from rich.console import Console
from saferm.cli.display import create_findings_table, create_setup_table, print_sweep_summary
from saferm.core.config import PlacementMode
from saferm.core.theme import get_theme
from saferm.setup.provisioner import SetupReport, UserSetupResult
from saferm.sweeper.age import AgeThreshold
from saferm.sweeper.models import ContainerKind, ContainerSweep, SweepReport
from saferm.trash.layout import AliasStatus
from saferm.utils.formatting import console


def _report(execute: bool = False) -> SweepReport:
    report = SweepReport(
        mode=PlacementMode.CENTRALIZED,
        threshold=AgeThreshold.parse("7d"),
        execute=execute,
        location=Path("/scratch/trashcan"),
        users_scanned=3,
    )
    report.trash = [
        ContainerSweep("alice", ContainerKind.TRASH_ROOT, Path("/t/alice/trash"), 2048, 2048, 2),
        ContainerSweep("bob", ContainerKind.TRASH_ROOT, Path("/t/bob/trash"), 4096, 4096),
    ]
    return report


def _render(renderable: object) -> str:
    renderer = Console(width=120, color_system=None, theme=get_theme())
    with renderer.capture() as capture:
        renderer.print(renderable)
    return capture.get()


class TestFindingsTable:
    """Tests for create_findings_table."""

    def test_only_directories_with_findings(self) -> None:
        """Users without aged entries are not listed."""
        table = create_findings_table(_report())

        assert table.row_count == 1
        output = _render(table)
        assert "alice" in output
        assert "bob" not in output

    def test_failure_shown(self) -> None:
        """Failures are listed with their reason."""
        report = _report()
        report.trash.append(
            ContainerSweep(
                "carol",
                ContainerKind.TRASH_ROOT,
                Path("/t/carol/trash"),
                errors=("Permission denied",),
            )
        )

        output = _render(create_findings_table(report))

        assert "FAIL" in output
        assert "Permission denied" in output


class TestSweepSummary:
    """Tests for print_sweep_summary."""

    def test_top_users_ranked(self) -> None:
        """The ranking lists the largest TrashRoot first."""
        with console.capture() as capture:
            print_sweep_summary(_report(), top_users=3)
        output = capture.get()

        assert output.index("1. bob") < output.index("2. alice")
        assert "Dry run complete" in output


class TestSetupTable:
    """Tests for create_setup_table."""

    def test_rows(self) -> None:
        """Each user's outcome is shown."""
        report = SetupReport(mode=PlacementMode.CENTRALIZED)
        report.users = [
            UserSetupResult("alice", Path("/t/alice/trash"), True, AliasStatus.CREATED),
            UserSetupResult("root", skipped=True),
            UserSetupResult("ghost", error="Cannot read /home/ghost"),
        ]

        output = _render(create_setup_table(report))

        assert "created" in output
        assert "skipped" in output
        assert "FAIL" in output
