"""Configuration models for autorelease.

The configuration file uses camelCase keys (``commitTypes``, ``tagPrefix``);
models accept those as aliases as well as their snake_case field names.
All models are frozen: configuration is read once per run and never mutated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

BumpLevel = Literal["major", "minor", "patch", "none"]


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


_M = TypeVar("_M", bound=_FrozenModel)


class CommitTypeRule(_FrozenModel):
    """Maps a conventional-commit type to a changelog section and bump level."""

    type: str = Field(min_length=1)
    section: str = Field(min_length=1)
    bump: BumpLevel
    hidden: bool = False


class UpdateTarget(_FrozenModel):
    """A file that receives the new version.

    ``type`` is kept as free text: unknown kinds are reported and skipped when
    updates are applied rather than rejected while loading.
    """

    path: str = Field(min_length=1)
    type: str = "text"
    pattern: str | None = None


class ChangelogConfig(_FrozenModel):
    """Changelog generation settings."""

    enable: bool = True
    output: Path = Path("CHANGELOG.md")
    include_scope: bool = Field(default=False, alias="includeScope")


class GitHubConfig(_FrozenModel):
    """Hosted release publishing settings."""

    enable: bool = False


DEFAULT_COMMIT_TYPES: tuple[CommitTypeRule, ...] = (
    CommitTypeRule(type="feat", section="Features", bump="minor"),
    CommitTypeRule(type="fix", section="Bug Fixes", bump="patch"),
    CommitTypeRule(type="perf", section="Performance", bump="patch"),
    CommitTypeRule(type="revert", section="Reverts", bump="patch"),
    CommitTypeRule(type="docs", section="Documentation", bump="none", hidden=True),
    CommitTypeRule(type="style", section="Styles", bump="none", hidden=True),
    CommitTypeRule(type="chore", section="Chores", bump="none", hidden=True),
    CommitTypeRule(type="refactor", section="Refactor", bump="none", hidden=True),
    CommitTypeRule(type="test", section="Tests", bump="none", hidden=True),
    CommitTypeRule(type="build", section="Build", bump="none", hidden=True),
    CommitTypeRule(type="ci", section="CI", bump="none", hidden=True),
)


def _keep_valid(items: Any, model: type[_M], label: str) -> list[_M]:
    if not isinstance(items, (list, tuple)):
        raise ValueError(f"{label} must be an array")

    valid: list[_M] = []
    for index, item in enumerate(items):
        if isinstance(item, model):
            valid.append(item)
            continue
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            logger.warning("Ignoring %s entry #%d (invalid fields: %s)", label, index, fields)
    return valid


class ReleaseConfig(_FrozenModel):
    """Root configuration object.

    Entries of ``commitTypes`` or ``targets`` that fail validation are dropped
    with a warning instead of failing the whole load. Duplicate commit types
    keep their first definition.
    """

    commit_types: tuple[CommitTypeRule, ...] = Field(
        default=DEFAULT_COMMIT_TYPES, alias="commitTypes"
    )
    targets: tuple[UpdateTarget, ...] = ()
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    tag_prefix: str = Field(default="v", alias="tagPrefix")

    @field_validator("commit_types", mode="before")
    @classmethod
    def _filter_commit_types(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_COMMIT_TYPES

        rules: list[CommitTypeRule] = []
        seen: set[str] = set()
        for rule in _keep_valid(value, CommitTypeRule, "commitTypes"):
            if rule.type in seen:
                logger.warning("Ignoring duplicate commit type '%s'", rule.type)
                continue
            seen.add(rule.type)
            rules.append(rule)
        return tuple(rules)

    @field_validator("targets", mode="before")
    @classmethod
    def _filter_targets(cls, value: Any) -> Any:
        if value is None:
            return ()
        return tuple(_keep_valid(value, UpdateTarget, "targets"))

    @property
    def publish_enabled(self) -> bool:
        """Whether a hosted release is published after tagging."""
        return self.github.enable

    def tag_for(self, version: str) -> str:
        """Git tag name for ``version``."""
        return f"{self.tag_prefix}{version}"
