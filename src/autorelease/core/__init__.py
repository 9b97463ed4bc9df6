"""Core business logic for autorelease.

This module contains the fundamental building blocks:
- Version parsing and arithmetic
- Conventional commit classification
- Changelog rendering and persistence
- Release planning
"""

from __future__ import annotations

from autorelease.core.changelog import (
    format_release_block,
    render_notes,
    write_changelog,
)
from autorelease.core.commits import (
    CommitRecord,
    CompiledRules,
    breaking_description,
    classify,
)
from autorelease.core.release import ReleasePlan, current_version_from_tag, plan_release
from autorelease.core.version import BumpType, Version, next_version, parse_version

__all__ = [
    # Version
    "BumpType",
    # Commits
    "CommitRecord",
    "CompiledRules",
    # Release
    "ReleasePlan",
    "Version",
    "breaking_description",
    "classify",
    "current_version_from_tag",
    # Changelog
    "format_release_block",
    "next_version",
    "parse_version",
    "plan_release",
    "render_notes",
    "write_changelog",
]
