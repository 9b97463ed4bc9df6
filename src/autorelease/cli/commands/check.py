"""Implementation of the 'check' command.

Shows what the next release would be without touching anything.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from autorelease.cli.commands.update import prepare_release

if TYPE_CHECKING:
    from rich.console import Console


def run_check(
    path: str | None,
    config_file: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Print the current version, bump level, next version and notes."""
    prepared = prepare_release(path, None, config_file, console, err_console)
    if prepared is None:
        return

    plan = prepared.plan
    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Current version", f"[cyan]{plan.current_version}[/]")
    table.add_row("Commits", str(len(plan.commits)))
    table.add_row("Bump", str(plan.bump))
    table.add_row("Next version", f"[green]{plan.next_version}[/]")
    table.add_row("Tag", prepared.config.tag_for(plan.next_version))
    console.print(table)

    if plan.notes:
        console.print(Panel(Markdown(plan.notes), title="Release Notes", border_style="blue"))
    else:
        console.print("[dim]No visible changes for the release notes.[/]")
