"""Release planning.

Runs classification, version calculation and note rendering for one release
and returns the result as an immutable :class:`ReleasePlan` that the file
updater, tagging and publishing steps consume.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from autorelease.core.changelog import render_notes
from autorelease.core.commits import CompiledRules, classify, to_records
from autorelease.core.version import BumpType, next_version, strip_version_prefix
from autorelease.exceptions import VersionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from autorelease.config.models import ReleaseConfig
    from autorelease.core.commits import CommitRecord

logger = logging.getLogger(__name__)

INITIAL_VERSION = "0.0.0"


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Everything computed for a release before anything is written."""

    current_version: str
    bump: BumpType
    next_version: str
    notes: str
    commits: tuple[CommitRecord, ...]

    @property
    def has_changes(self) -> bool:
        return self.next_version != self.current_version


def current_version_from_tag(tag: str | None, prefix: str = "v") -> str:
    """Turn the latest release tag into a version string.

    Args:
        tag: Latest tag, or None when the repository has no releases yet
        prefix: Tag prefix to strip

    Returns:
        Version string without prefix
    """
    if not tag:
        return INITIAL_VERSION
    if prefix and tag.startswith(prefix):
        return tag[len(prefix) :]
    return tag


def plan_release(
    commits: Sequence[CommitRecord | str],
    current_version: str,
    config: ReleaseConfig,
    *,
    version_override: str | None = None,
) -> ReleasePlan:
    """Compute bump, next version and notes for a set of commits.

    Args:
        commits: Commits since the last release
        current_version: Version of the last release
        config: Release configuration
        version_override: Use this version instead of the computed one;
            a leading ``v`` is dropped

    Returns:
        The release plan

    Raises:
        VersionError: If ``version_override`` is the current version
    """
    if version_override:
        version_override = strip_version_prefix(version_override)
    if version_override and version_override == current_version:
        raise VersionError(f"Version {version_override} is already the current release")

    records = tuple(to_records(commits))
    rules = CompiledRules.compile(config.commit_types)

    bump = classify(records, rules)
    logger.debug("Bump level for %d commit(s): %s", len(records), bump)

    if version_override:
        new_version = version_override
    else:
        new_version = next_version(current_version, bump)

    notes = render_notes(records, rules, include_scope=config.changelog.include_scope)

    return ReleasePlan(
        current_version=current_version,
        bump=bump,
        next_version=new_version,
        notes=notes,
        commits=records,
    )
