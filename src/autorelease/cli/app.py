"""Command-line interface for autorelease."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from autorelease import __version__
from autorelease.log import setup_logging

app = typer.Typer(
    name="autorelease",
    help="Conventional-commit release automation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

PathArg = Annotated[
    str | None,
    typer.Argument(help="Project directory (defaults to the current directory)"),
]
ConfigOpt = Annotated[
    str | None,
    typer.Option("--config", "-c", help="Configuration file (default: release-config.json)"),
]
VersionOpt = Annotated[
    str | None,
    typer.Option("--version", help="Release this exact version instead of the computed one"),
]
ExecuteOpt = Annotated[
    bool,
    typer.Option("--execute", help="Apply changes (default is a dry run)"),
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"autorelease {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    show_version: Annotated[
        bool,
        typer.Option(
            "--app-version",
            callback=_version_callback,
            is_eager=True,
            help="Show the autorelease version and exit",
        ),
    ] = False,
) -> None:
    """Compute the next version from conventional commits and release it."""
    setup_logging(verbose, err_console)


@app.command()
def check(path: PathArg = None, config: ConfigOpt = None) -> None:
    """Show the next version and release notes without changing anything."""
    from autorelease.cli.commands.check import run_check

    run_check(path, config, console, err_console)


@app.command()
def update(
    path: PathArg = None,
    execute: ExecuteOpt = False,
    version: VersionOpt = None,
    config: ConfigOpt = None,
) -> None:
    """Write the changelog and bump the version in project files."""
    from autorelease.cli.commands.update import run_update

    run_update(path, execute, version, config, console, err_console)


@app.command()
def release(
    path: PathArg = None,
    execute: ExecuteOpt = False,
    push: Annotated[bool, typer.Option("--push", help="Push commit and tag")] = False,
    version: VersionOpt = None,
    config: ConfigOpt = None,
) -> None:
    """Update files, then commit, tag and publish the release."""
    from autorelease.cli.commands.release import run_release

    run_release(path, execute, push, version, config, console, err_console)


if __name__ == "__main__":
    app()
