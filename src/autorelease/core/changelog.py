"""Changelog rendering and persistence.

Release notes are grouped into sections: breaking changes first, then one
section per visible commit type rule, in rule order. Each release is written
as a block prepended to the changelog file::

    # 1.3.0 (2024-05-01)

    ### Features

    - add user authentication

    <previous content>
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from autorelease.core.commits import (
    CompiledRules,
    breaking_description,
    ensure_compiled,
    split_scope,
    to_records,
)
from autorelease.exceptions import ChangelogError
from autorelease.project.files import atomic_write_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from autorelease.config.models import CommitTypeRule
    from autorelease.core.commits import CommitRecord

logger = logging.getLogger(__name__)

BREAKING_SECTION = "Breaking Changes"


def _section(title: str, bullets: list[str]) -> str:
    lines = [f"### {title}", ""]
    lines.extend(f"- {bullet}" for bullet in bullets)
    lines.append("")
    return "\n".join(lines) + "\n"


def render_notes(
    commits: Sequence[CommitRecord | str],
    rules: CompiledRules | Iterable[CommitTypeRule],
    *,
    include_scope: bool = False,
) -> str:
    """Render release notes as markdown.

    A commit that is breaking and also of a listed type is emitted in both
    the breaking section and its type section.

    Args:
        commits: Commits since the last release, in history order
        rules: Commit type rules, compiled or raw
        include_scope: Prefix bullets with ``**scope:**`` when present

    Returns:
        Markdown notes; empty when no section has entries
    """
    records = to_records(commits)
    compiled = ensure_compiled(rules)
    sections: list[str] = []

    breaking = [breaking_description(r) for r in records if r.is_breaking]
    if breaking:
        sections.append(_section(BREAKING_SECTION, breaking))

    for rule in compiled.visible_rules:
        pattern = compiled.section_patterns[rule.type]
        bullets = []
        for record in records:
            match = pattern.match(record.subject)
            if not match:
                continue
            text = record.subject[match.end() :].strip()
            scope = split_scope(record.subject) if include_scope else None
            bullets.append(f"**{scope}:** {text}" if scope else text)
        if bullets:
            sections.append(_section(rule.section, bullets))

    return "".join(sections)


def format_release_block(version: str, notes: str, release_date: date | None = None) -> str:
    """Build the changelog block for one release.

    Returns:
        ``# <version> (<date>)``, a blank line, the notes and a blank line
    """
    effective_date = release_date or date.today()
    body = notes.rstrip("\n")
    return f"# {version} ({effective_date.isoformat()})\n\n{body}\n\n"


def prepend_release_block(existing: str, block: str) -> str:
    """Place ``block`` before ``existing`` content, which is kept verbatim."""
    return block + existing


def write_changelog(
    path: Path,
    version: str,
    notes: str,
    *,
    release_date: date | None = None,
) -> Path:
    """Prepend a release block to the changelog file.

    The file is created when missing. The write is atomic.

    Args:
        path: Changelog file
        version: Released version (without prefix)
        notes: Rendered notes from :func:`render_notes`
        release_date: Date for the header (defaults to today)

    Returns:
        Path of the written changelog

    Raises:
        ChangelogError: If the changelog can't be read or written
    """
    logger.info("Writing changelog to %s", path)
    block = format_release_block(version, notes, release_date)

    try:
        existing = path.read_bytes().decode("utf-8") if path.is_file() else ""
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(path, prepend_release_block(existing, block))
    except (OSError, UnicodeDecodeError) as e:
        raise ChangelogError(f"Failed to write changelog {path}: {e}") from e

    return path
