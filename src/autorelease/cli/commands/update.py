"""Implementation of the 'update' command.

The update command writes the changelog and the new version into the
configured project files, staging each changed file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel

from autorelease.config import load_config
from autorelease.core.changelog import write_changelog
from autorelease.core.release import ReleasePlan, current_version_from_tag, plan_release
from autorelease.core.version import strip_version_prefix
from autorelease.exceptions import (
    AutoReleaseError,
    ChangelogError,
    ConfigError,
    GitError,
    InvalidVersionFormatError,
    MissingToolError,
    UnsafePathError,
    VersionError,
)
from autorelease.project.updaters import (
    TargetStatus,
    apply_updates,
    check_path_safety,
    validate_version_format,
)
from autorelease.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from autorelease.config.models import ReleaseConfig

logger = logging.getLogger(__name__)

_STATUS_MARKS = {
    TargetStatus.UPDATED: "[green]✓[/]",
    TargetStatus.SKIPPED: "[yellow]-[/]",
    TargetStatus.REJECTED: "[red]✗[/]",
    TargetStatus.FAILED: "[red]✗[/]",
}


@dataclass(frozen=True)
class PreparedRelease:
    """Loaded configuration, repository and computed plan for one run."""

    project_path: Path
    config: ReleaseConfig
    repo: GitRepository
    plan: ReleasePlan


def prepare_release(
    path: str | None,
    version_override: str | None,
    config_file: str | None,
    console: Console,
    err_console: Console,
) -> PreparedRelease | None:
    """Load configuration and history and compute the release plan.

    Returns:
        The prepared release, or None when there is nothing to release

    Raises:
        SystemExit: On configuration errors or a missing git executable
    """
    project_path = Path(path) if path else Path.cwd()

    if version_override:
        version_override = strip_version_prefix(version_override)
        try:
            validate_version_format(version_override)
        except InvalidVersionFormatError as e:
            err_console.print(f"[red]Security error:[/] {e}")
            raise SystemExit(1) from e

    try:
        config = load_config(project_path, config_file)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    try:
        repo = GitRepository(project_path)
    except MissingToolError as e:
        err_console.print(f"[red]Fatal:[/] {e}")
        raise SystemExit(1) from e
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    latest_tag = repo.get_latest_tag(f"{config.tag_prefix}*")
    current_version = current_version_from_tag(latest_tag, config.tag_prefix)

    try:
        commits = repo.get_commits_since_tag(latest_tag)
    except GitError as e:
        err_console.print(f"[red]Error reading history:[/] {e}")
        raise SystemExit(1) from e

    if not commits:
        console.print("[yellow]No commits found since last release. Nothing to do.[/]")
        return None

    try:
        plan = plan_release(commits, current_version, config, version_override=version_override)
    except VersionError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not plan.has_changes:
        console.print(
            "[yellow]No releasable changes found (only non-release commit types).[/]\n"
            "[dim]Use [cyan]--version[/] to force a specific version.[/]"
        )
        return None

    return PreparedRelease(project_path=project_path, config=config, repo=repo, plan=plan)


def apply_release_files(prepared: PreparedRelease, console: Console, err_console: Console) -> bool:
    """Write the changelog and update target files for a prepared release.

    Returns:
        True when every step succeeded
    """
    config, repo, plan = prepared.config, prepared.repo, prepared.plan
    succeeded = True

    if config.changelog.enable:
        try:
            changelog_path = check_path_safety(
                config.changelog.output.as_posix(), prepared.project_path
            )
            write_changelog(changelog_path, plan.next_version, plan.notes)
            repo.add(config.changelog.output)
            console.print(f"  [green]✓[/] Updated {config.changelog.output}")
        except UnsafePathError as e:
            logger.error("SECURITY ERROR [%s]: %s. Skipping changelog.", e.check, e)
            err_console.print(f"[red]Security error:[/] {e}")
            succeeded = False
        except (ChangelogError, GitError) as e:
            err_console.print(f"[red]Error writing changelog:[/] {e}")
            succeeded = False

    try:
        outcomes = apply_updates(
            plan.next_version,
            config.targets,
            prepared.project_path,
            stage=repo.add,
        )
    except InvalidVersionFormatError as e:
        logger.error("SECURITY ERROR [%s]: %s. Aborting file updates.", e.check, e)
        err_console.print(f"[red]Security error:[/] {e}. No project files were updated.")
        return False

    for outcome in outcomes:
        mark = _STATUS_MARKS[outcome.status]
        detail = f" [dim]({outcome.reason})[/]" if outcome.reason else ""
        console.print(f"  {mark} {outcome.target.path}{detail}")
        if outcome.status in (TargetStatus.REJECTED, TargetStatus.FAILED):
            succeeded = False

    return succeeded


def run_update(
    path: str | None,
    execute: bool,
    version_override: str | None,
    config_file: str | None,
    console: Console,
    err_console: Console,
) -> PreparedRelease | None:
    """Run the update command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually apply changes
        version_override: Manual version override (e.g., "2.0.0")
        config_file: Optional configuration file path
        console: Console for standard output
        err_console: Console for error output

    Returns:
        The prepared release when changes were applied, else None
    """
    prepared = prepare_release(path, version_override, config_file, console, err_console)
    if prepared is None:
        return None

    config, plan = prepared.config, prepared.plan
    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(
        f"\n{mode_str} - Updating from [cyan]{plan.current_version}[/] "
        f"to [green]{plan.next_version}[/] ({plan.bump})\n"
    )

    if not execute:
        changes = [f"  • Update version in [cyan]{t.path}[/] ({t.type})" for t in config.targets]
        if config.changelog.enable:
            changes.append(f"  • Prepend release notes to [cyan]{config.changelog.output}[/]")
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n"
                + ("\n".join(changes) or "  (no files configured)"),
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return None

    try:
        ok = apply_release_files(prepared, console, err_console)
    except AutoReleaseError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not ok:
        err_console.print("[yellow]Some files could not be updated; see messages above.[/]")

    console.print(
        Panel(
            f"[green]Updated to version {plan.next_version}.[/]\n\n"
            "Next steps:\n"
            "  1. Review the staged changes\n"
            f"  2. Commit: [cyan]git commit -m 'chore(release): {plan.next_version}'[/]\n"
            f"  3. Tag: [cyan]git tag -a {config.tag_for(plan.next_version)}[/]",
            title="[green]Update Complete[/]",
            border_style="green",
        )
    )
    return prepared
