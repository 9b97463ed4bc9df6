"""Implementation of the 'release' command.

Runs the update step, then commits, tags and (when enabled) publishes the
release on GitHub.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from autorelease.cli.commands.update import apply_release_files, prepare_release
from autorelease.exceptions import GitError, MissingToolError, PublishError
from autorelease.platforms import GitHubPublisher

if TYPE_CHECKING:
    from rich.console import Console


def run_release(
    path: str | None,
    execute: bool,
    push: bool,
    version_override: str | None,
    config_file: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually perform the release
        push: Push the release commit and tag to the remote
        version_override: Manual version override (e.g., "2.0.0")
        config_file: Optional configuration file path
        console: Console for standard output
        err_console: Console for error output
    """
    prepared = prepare_release(path, version_override, config_file, console, err_console)
    if prepared is None:
        return

    config, repo, plan = prepared.config, prepared.repo, prepared.plan
    tag = config.tag_for(plan.next_version)

    publisher = None
    if config.publish_enabled:
        publisher = GitHubPublisher(prepared.project_path)
        try:
            publisher.check_available()
        except MissingToolError as e:
            err_console.print(f"[red]Fatal:[/] {e}")
            raise SystemExit(1) from e
        # gh would otherwise create the tag remotely from the default branch tip.
        if not push:
            err_console.print(
                "[red]Error:[/] publishing a GitHub release requires [cyan]--push[/] "
                f"so that {tag} and the release commit exist on the remote."
            )
            raise SystemExit(1)

    if not execute:
        steps = [
            f"  • Release [green]{plan.next_version}[/] ({plan.bump}) "
            f"from [cyan]{plan.current_version}[/]",
            f"  • Commit [cyan]chore(release): {plan.next_version}[/]",
            f"  • Tag [cyan]{tag}[/]",
        ]
        if push:
            steps.append("  • Push commit and tags")
        if publisher is not None:
            steps.append(f"  • Publish GitHub release [cyan]{tag}[/]")
        console.print(
            Panel(
                "\n".join(steps),
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to perform the release.[/]")
        return

    console.print(f"\n[green]EXECUTING[/] - Releasing [green]{tag}[/]\n")
    if repo.is_dirty():
        err_console.print(
            "[yellow]Warning:[/] working tree has uncommitted changes. "
            "Anything already staged goes into the release commit."
        )
    if not apply_release_files(prepared, console, err_console):
        err_console.print("[yellow]Some files could not be updated; see messages above.[/]")

    try:
        repo.commit(f"chore(release): {plan.next_version}")
        console.print(f"  [green]✓[/] Committed chore(release): {plan.next_version}")
        repo.create_tag(tag, f"Release {tag}")
        console.print(f"  [green]✓[/] Created tag {tag}")
        if push:
            repo.push(tags=True)
            console.print("  [green]✓[/] Pushed commit and tags")
    except GitError as e:
        err_console.print(f"[red]Git error:[/] {e}")
        raise SystemExit(1) from e

    if publisher is not None:
        try:
            url = publisher.publish(tag, plan.notes)
        except (PublishError, MissingToolError) as e:
            err_console.print(f"[red]Error publishing release:[/] {e}")
            raise SystemExit(1) from e
        console.print(f"  [green]✓[/] Published GitHub release {url}")

    console.print(
        Panel(
            f"[green]Released {tag}![/]",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )
