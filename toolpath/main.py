"""toolpath - search paths for helper executables."""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.table import Table

from .commands.logs import logs_cmd
from .commands.paths import paths as paths_group
from .console import console
from .console import err_console
from .logging_setup import LOG_PATH_ENV
from .logging_setup import init_json_logging
from .search_path import SearchPathEncodingError
from .search_path import SearchPaths
from .ui import display_encoding_error

logger = logging.getLogger(__name__)

npm_option = click.option(
    "--npm/--no-npm",
    default=True,
    show_default=True,
    help="Include the npm global binaries directory",
)


def build_search_paths(npm: bool) -> SearchPaths:
    """Build search paths for the running platform and current settings."""
    search_paths = SearchPaths.builder()
    if npm:
        search_paths = search_paths.with_npm()
    return search_paths


def _is_verbose(ctx: click.Context) -> bool:
    return bool((ctx.obj or {}).get("verbose"))


def _fail_encoding(ctx: click.Context, error: SearchPathEncodingError) -> NoReturn:
    """Report an unencodable search path entry and exit with status 1."""
    logger.error(f"Search path rendering failed: {error}")
    display_encoding_error(err_console, error, verbose=_is_verbose(ctx))
    sys.exit(1)


@click.group()
@click.version_option(package_name="toolpath")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write JSONL logs to this file (also: $TOOLPATH_LOG_PATH)",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, log_file: str | None, verbose: bool):
    """toolpath - locate helper executables on an extended PATH."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if log_file or os.environ.get(LOG_PATH_ENV):
        init_json_logging(log_file, "DEBUG" if verbose else None)


@cli.command()
@npm_option
def show(npm: bool):
    """Show the assembled search path entries, in search order."""
    search_paths = build_search_paths(npm)

    table = Table(title="Search Paths", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Path")
    table.add_column("Exists", justify="center")

    for index, entry in enumerate(search_paths, start=1):
        exists = "[green]✓[/green]" if Path(entry).is_dir() else "[dim]-[/dim]"
        table.add_row(str(index), entry, exists)

    console.print(table)
    console.print("\n[dim]Followed by the entries of the current PATH[/dim]")


@cli.command()
@npm_option
@click.pass_context
def env(ctx: click.Context, npm: bool):
    """Print the PATH value used for helper processes.

    Example:
        export PATH="$(toolpath env)"
    """
    try:
        value = build_search_paths(npm).env_var()
    except SearchPathEncodingError as e:
        _fail_encoding(ctx, e)
    click.echo(value)


@cli.command()
@click.argument("name")
@npm_option
@click.pass_context
def which(ctx: click.Context, name: str, npm: bool):
    """Locate an executable on the extended search path."""
    search_paths = build_search_paths(npm)
    try:
        found = search_paths.resolve(name)
    except SearchPathEncodingError as e:
        _fail_encoding(ctx, e)

    if found is None:
        err_console.print(f"[red]Error:[/red] {name} not found on search path")
        sys.exit(1)
    click.echo(str(found))


@cli.command(name="exec", context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@npm_option
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def exec_cmd(ctx: click.Context, npm: bool, command: tuple[str, ...]):
    """Run COMMAND with the extended search path.

    Example:
        toolpath exec npx -y @modelcontextprotocol/server-filesystem .
    """
    search_paths = build_search_paths(npm)
    try:
        env = search_paths.child_env()
        executable = search_paths.resolve(command[0])
    except SearchPathEncodingError as e:
        _fail_encoding(ctx, e)

    if executable is None:
        err_console.print(f"[red]Error:[/red] {command[0]} not found on search path")
        sys.exit(127)

    logger.info(f"Running {executable} with extended search path")
    result = subprocess.run([str(executable), *command[1:]], env=env)
    sys.exit(result.returncode)


cli.add_command(paths_group, name="paths")
cli.add_command(logs_cmd)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
