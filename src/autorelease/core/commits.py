"""Conventional commit classification.

Commits follow the format::

    <type>[optional scope][!]: <description>

    [optional body]

    [optional footer(s)]

A ``!`` before the colon or a ``BREAKING CHANGE`` marker in the message makes
the commit breaking. Everything else is matched against the configured commit
type rules, whose regular expressions are compiled once per rule set and
reused for every commit.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from autorelease.core.version import BUMP_PRIORITY, BumpType

if TYPE_CHECKING:
    from autorelease.config.models import CommitTypeRule

BREAKING_MARKER = re.compile(r"BREAKING[ -]CHANGE")
BREAKING_FOOTER = re.compile(r"^BREAKING[ -]CHANGE:?[ \t]*(?P<text>.*)$", re.MULTILINE)
BANG_SUBJECT = re.compile(r"^(?P<type>[\w-]+)(?:\((?P<scope>[^)]*)\))?!:[ \t]*(?P<description>.*)$")
ANY_PREFIX = re.compile(r"^[\w-]+(?:\([^)]*\))?!?:[ \t]*")


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """A single commit message as captured from history."""

    message: str
    sha: str = ""

    @property
    def subject(self) -> str:
        """First line of the message."""
        return self.message.strip().split("\n", 1)[0].strip()

    @property
    def body(self) -> str:
        """Everything after the subject line."""
        parts = self.message.strip().split("\n", 1)
        return parts[1].strip() if len(parts) > 1 else ""

    @property
    def is_breaking(self) -> bool:
        return bool(BANG_SUBJECT.match(self.subject) or BREAKING_MARKER.search(self.message))


def to_records(commits: Iterable[CommitRecord | str]) -> list[CommitRecord]:
    """Normalize raw message strings into :class:`CommitRecord` objects."""
    return [c if isinstance(c, CommitRecord) else CommitRecord(c) for c in commits]


def _type_pattern(types: Iterable[str], *, allow_bang: bool) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(t) for t in types)
    bang = "!?" if allow_bang else ""
    return re.compile(rf"^(?:{alternatives})(?:\([^)]*\))?{bang}:[ \t]*")


@dataclass(frozen=True)
class CompiledRules:
    """A commit type rule set with its regular expressions precompiled.

    ``level_patterns`` drive classification (no ``!`` accepted, those commits
    are already breaking); ``section_patterns`` drive changelog grouping and
    accept an optional ``!`` so breaking commits also land in their section.
    """

    rules: tuple[CommitTypeRule, ...]
    level_patterns: dict[BumpType, re.Pattern[str]] = field(default_factory=dict)
    section_patterns: dict[str, re.Pattern[str]] = field(default_factory=dict)

    @classmethod
    def compile(cls, rules: Iterable[CommitTypeRule]) -> CompiledRules:
        rules = tuple(rules)
        level_patterns: dict[BumpType, re.Pattern[str]] = {}
        for level in BUMP_PRIORITY:
            types = [r.type for r in rules if r.bump == level.value]
            if types:
                level_patterns[level] = _type_pattern(types, allow_bang=False)

        section_patterns = {r.type: _type_pattern([r.type], allow_bang=True) for r in rules}
        return cls(rules, level_patterns, section_patterns)

    @cached_property
    def visible_rules(self) -> tuple[CommitTypeRule, ...]:
        return tuple(r for r in self.rules if not r.hidden)


def ensure_compiled(rules: CompiledRules | Iterable[CommitTypeRule]) -> CompiledRules:
    if isinstance(rules, CompiledRules):
        return rules
    return CompiledRules.compile(rules)


def classify(
    commits: Sequence[CommitRecord | str],
    rules: CompiledRules | Iterable[CommitTypeRule],
) -> BumpType:
    """Determine the version bump implied by a set of commits.

    Priority:
        1. Any breaking commit -> MAJOR
        2. Configured major types -> MAJOR
        3. Configured minor types -> MINOR
        4. Configured patch types -> PATCH
        5. Otherwise -> NONE

    The level is decided by priority alone, not by how many commits match.

    Args:
        commits: Commits since the last release, in history order
        rules: Commit type rules, compiled or raw

    Returns:
        The bump level
    """
    records = to_records(commits)
    compiled = ensure_compiled(rules)

    if any(record.is_breaking for record in records):
        return BumpType.MAJOR

    for level in BUMP_PRIORITY:
        pattern = compiled.level_patterns.get(level)
        if pattern is None:
            continue
        if any(pattern.match(record.subject) for record in records):
            return level

    return BumpType.NONE


def split_scope(subject: str) -> str | None:
    """Return the ``(scope)`` of a conventional subject, if any."""
    match = re.match(r"^[\w-]+\((?P<scope>[^)]*)\)!?:", subject)
    return match.group("scope") if match else None


def breaking_description(record: CommitRecord) -> str:
    """Text describing why ``record`` is breaking.

    The ``BREAKING CHANGE:`` footer text wins when present; otherwise the
    subject is used with its ``type(scope)!:`` prefix removed.
    """
    footer = BREAKING_FOOTER.search(record.message.strip())
    if footer and footer.group("text").strip():
        return footer.group("text").strip()
    return ANY_PREFIX.sub("", record.subject, count=1).strip()
