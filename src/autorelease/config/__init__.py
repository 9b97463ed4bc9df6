"""Configuration management for autorelease."""

from __future__ import annotations

from autorelease.config.loader import load_config
from autorelease.config.models import (
    DEFAULT_COMMIT_TYPES,
    ChangelogConfig,
    CommitTypeRule,
    GitHubConfig,
    ReleaseConfig,
    UpdateTarget,
)

__all__ = [
    "DEFAULT_COMMIT_TYPES",
    "ChangelogConfig",
    "CommitTypeRule",
    "GitHubConfig",
    "ReleaseConfig",
    "UpdateTarget",
    "load_config",
]
