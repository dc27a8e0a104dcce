"""Unit tests for the saferm command group."""

from pathlib import Path

from saferm import __version__
from saferm.cli.main import app
from saferm.core.config import SafermConfig
from saferm.core.identity import UserIdentity
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for the grouped CLI."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"saferm version {__version__}" in result.stdout

    def test_no_args_shows_help(self) -> None:
        """Without a command the help is shown."""
        result = runner.invoke(app, [])

        assert "rm" in result.output
        assert "cleanup" in result.output

    def test_rm_subcommand(self, config_file: Path, identity: UserIdentity) -> None:
        """saferm rm behaves like safe-rm, fused flags included."""
        victim = identity.home / "dir"
        victim.mkdir()

        result = runner.invoke(app, ["rm", "-rf", str(victim)])

        assert result.exit_code == 0
        assert not victim.exists()

    def test_cleanup_subcommand(self, config_file: Path, host_config: SafermConfig) -> None:
        """saferm cleanup behaves like trash-cleanup."""
        result = runner.invoke(app, ["cleanup", "-u", "bob"])

        assert result.exit_code == 1
        assert "not found" in result.output
