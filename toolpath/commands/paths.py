"""Configured search path commands.

Manage the ``search_paths`` setting: extra directories searched before the
platform defaults when locating helper executables.
"""

from __future__ import annotations

import sys
from typing import cast

import click
from rich.table import Table

from ..console import console
from ..settings import SEARCH_PATHS_ENV
from ..settings import AppSettings
from ..settings import Scope
from ..settings import SettingsError
from ..ui import display_settings_error

_SCOPE_FILES: dict[Scope, str] = {
    "local": ".toolpath/settings.local.yaml",
    "project": ".toolpath/settings.yaml",
    "global": "~/.toolpath/settings.yaml",
}


def _scope(scope_flag: str | None) -> Scope:
    return cast(Scope, scope_flag or "global")


def scope_options(verb: str):
    """Attach --local/--project/--global flags sharing one destination."""

    def decorator(f):
        f = click.option("--global", "scope_flag", flag_value="global", help=f"{verb} globally (all projects)")(f)
        f = click.option("--project", "scope_flag", flag_value="project", help=f"{verb} for project (team)")(f)
        f = click.option("--local", "scope_flag", flag_value="local", help=f"{verb} locally (just you)")(f)
        return f

    return decorator


@click.group(invoke_without_command=True)
@click.pass_context
def paths(ctx: click.Context):
    """Manage configured search paths.

    Configured paths are searched before /usr/local/bin, ~/.local/bin and the
    other platform defaults.
    """
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@paths.command(name="list")
def paths_list():
    """Show configured search paths for every scope."""
    settings = AppSettings()

    table = Table(title="Configured Search Paths", show_header=True, header_style="bold cyan")
    table.add_column("Scope", style="green")
    table.add_column("#", justify="right")
    table.add_column("Path")

    rows = 0
    try:
        for scope in ("local", "project", "global"):
            for index, path in enumerate(settings.get_scope_search_paths(scope), start=1):
                table.add_row(scope, str(index), path)
                rows += 1
    except SettingsError as e:
        display_settings_error(console, e)
        sys.exit(1)

    if rows == 0:
        console.print("[yellow]No search paths configured.[/yellow]")
        console.print("\nAdd one with: [cyan]toolpath paths add <dir>[/cyan]")
    else:
        console.print(table)

    if settings.environ.get(SEARCH_PATHS_ENV, "").strip():
        console.print(f"\n[yellow]Note:[/yellow] {SEARCH_PATHS_ENV} is set and overrides these settings")


@paths.command(name="add")
@click.argument("path")
@scope_options("Add")
def paths_add(path: str, scope_flag: str | None):
    """Append a directory to the configured search paths.

    The path is stored as given; a leading ~ is expanded when the search path
    is built.
    """
    scope = _scope(scope_flag)
    try:
        AppSettings().add_search_path(path, scope=scope)
    except SettingsError as e:
        display_settings_error(console, e)
        sys.exit(1)

    console.print(f"[green]✓ Added {path}[/green]")
    console.print(f"  File: {_SCOPE_FILES[scope]}")
    if scope == "project":
        console.print(f"  [yellow]Remember to commit {_SCOPE_FILES[scope]}[/yellow]")


@paths.command(name="remove")
@click.argument("path")
@scope_options("Remove")
def paths_remove(path: str, scope_flag: str | None):
    """Remove a directory from the configured search paths."""
    scope = _scope(scope_flag)
    try:
        removed = AppSettings().remove_search_path(path, scope=scope)
    except SettingsError as e:
        display_settings_error(console, e)
        sys.exit(1)

    if not removed:
        console.print(f"[yellow]{path} is not configured at {scope} scope[/yellow]")
        sys.exit(1)

    console.print(f"[green]✓ Removed {path}[/green]")
    console.print(f"  File: {_SCOPE_FILES[scope]}")


@paths.command(name="clear")
@scope_options("Clear")
def paths_clear(scope_flag: str | None):
    """Clear configured search paths at one scope."""
    scope = _scope(scope_flag)
    try:
        AppSettings().clear_search_paths(scope=scope)
    except SettingsError as e:
        display_settings_error(console, e)
        sys.exit(1)

    console.print(f"[green]✓ Cleared {scope} search paths[/green]")
