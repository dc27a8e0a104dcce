"""Trash-on-delete replacement for rm.

Moves its arguments into the caller's trash instead of deleting them.
Installed as the target of the interactive-shell rm alias.
"""

from typing import Annotated

import click
import typer
from rich.markup import escape

from saferm.core.config import SafermConfig, get_config
from saferm.core.errors import ConfigError, TrashError
from saferm.core.identity import UserIdentity
from saferm.trash.interceptor import TrashInterceptor
from saferm.trash.layout import AliasResult, AliasStatus
from saferm.trash.models import RemovalFlags, RemovalResult
from saferm.utils.formatting import (
    console,
    err_console,
    print_error,
    print_warning,
    setup_logging,
)

RM_CONTEXT_SETTINGS = {
    "help_option_names": ["--help"],
    "ignore_unknown_options": True,
}

app = typer.Typer(
    name="safe-rm",
    help="Move files to trash instead of deleting them.",
    context_settings=RM_CONTEXT_SETTINGS,
    add_completion=False,
)


@app.command()
def remove(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Files and directories to move to trash.", show_default=False),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Ignore nonexistent files, never prompt."),
    ] = False,
    interactive: Annotated[
        bool,
        typer.Option("--interactive", "-i", help="Prompt before every removal."),
    ] = False,
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", "-R", help="Remove directories and their contents."),
    ] = False,
) -> None:
    """Move files and directories to your trash.

    Items are kept in the trash until the retention sweep deletes them.
    Use 'command rm' or /bin/rm to bypass the trash.
    """
    setup_logging()

    targets, unknown = _split_flags(paths or [])
    for flag in unknown:
        _rm_message(f"rm: ignoring unsupported flag '{flag}'")

    try:
        config = get_config()
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    identity = UserIdentity.current(config.home_base)
    interceptor = TrashInterceptor(
        identity,
        config,
        RemovalFlags(force=force, interactive=interactive, recursive=recursive),
        confirm=_confirm_removal,
    )

    if not targets:
        _print_usage(interceptor, config)
        raise typer.Exit(code=1)

    try:
        alias = interceptor.prepare()
    except (OSError, RuntimeError, TrashError) as e:
        # Nothing can be trashed; report per item like any other failure
        print_error(escape(f"Cannot prepare trash: {e}"))
        for target in targets:
            _rm_message(f"rm: cannot remove '{target}': trash unavailable")
        return
    _print_alias_notice(alias, interceptor)

    for result in interceptor.remove(targets):
        _print_result(result, force)


def _split_flags(tokens: list[str]) -> tuple[list[str], list[str]]:
    """Separate unsupported flags left over by the option parser from paths.

    A lone "-" is a path, like for conventional rm.
    """
    targets: list[str] = []
    unknown: list[str] = []
    for token in tokens:
        if token.startswith("-") and token != "-":
            unknown.append(token)
        else:
            targets.append(token)
    return targets, unknown


def _confirm_removal(path: str) -> bool:
    """Ask whether an item should be moved to trash."""
    try:
        return typer.confirm(f"rm: remove '{path}'?", default=False, err=True)
    except (click.exceptions.Abort, EOFError):
        # EOF on stdin counts as a decline
        err_console.print()
        return False


def _print_result(result: RemovalResult, force: bool) -> None:
    """Report the outcome of one argument."""
    if result.failed:
        _rm_message(f"rm: cannot remove '{result.path}': {result.error}")
    elif result.success and not force:
        console.print(f"Moved to trash: {escape(str(result.trash_path))}", soft_wrap=True)
        if not result.atomic:
            print_warning(f"'{escape(result.path)}' was copied across filesystems")


def _print_alias_notice(alias: AliasResult, interceptor: TrashInterceptor) -> None:
    """Tell the user about a migrated or misdirected trash alias."""
    root = interceptor.root
    if alias.status == AliasStatus.MIGRATED:
        _rm_message(f"Notice: Old {root.alias_path} moved to {alias.legacy_path}")
        _rm_message(f"New trash location: {root.path} (linked from {root.alias_path})")
    elif alias.status == AliasStatus.MISDIRECTED:
        print_warning(
            f"{escape(str(root.alias_path))} does not point to your trash at "
            f"{escape(str(root.path))}"
        )


def _print_usage(interceptor: TrashInterceptor, config: SafermConfig) -> None:
    """Print usage to standard error."""
    root = interceptor.root
    lines = [
        "Usage: rm [-f] [-i] [-r] FILE...",
        "",
        f"Files are moved to trash at {root.path}",
    ]
    if root.uses_alias:
        lines.append(f"Access it via {root.alias_path}")
    lines += [
        f"Items older than {config.default_age} are deleted by the retention sweep.",
        "",
        "To permanently delete (bypass trash): command rm FILE  or  /bin/rm FILE",
    ]
    for line in lines:
        _rm_message(line)


def _rm_message(message: str) -> None:
    """Print a plain diagnostic line on standard error."""
    err_console.print(escape(message), soft_wrap=True, highlight=False)
