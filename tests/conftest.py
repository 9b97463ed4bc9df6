"""Shared test fixtures."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from autorelease.config.models import DEFAULT_COMMIT_TYPES, CommitTypeRule
from autorelease.core.commits import CommitRecord

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def feat_commit() -> CommitRecord:
    return CommitRecord("feat: add user authentication", sha="feat123")


@pytest.fixture
def fix_commit() -> CommitRecord:
    return CommitRecord("fix(core): handle empty config", sha="fix456")


@pytest.fixture
def breaking_commit() -> CommitRecord:
    return CommitRecord(
        "feat(api): new endpoint layout\n\nBREAKING CHANGE: v1 endpoints removed",
        sha="brk789",
    )


@pytest.fixture
def sample_commits() -> list[CommitRecord]:
    """A mixed history, newest first."""
    return [
        CommitRecord("feat: add user authentication", sha="a1"),
        CommitRecord("fix(core): handle empty config", sha="b2"),
        CommitRecord("docs: update readme", sha="c3"),
        CommitRecord("chore: bump dependencies", sha="d4"),
        CommitRecord("feat(api)!: drop legacy routes", sha="e5"),
        CommitRecord("Merge branch 'main' into dev", sha="f6"),
    ]


@pytest.fixture
def default_rules() -> tuple[CommitTypeRule, ...]:
    return DEFAULT_COMMIT_TYPES


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project tree with one file of each supported target kind."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "demo", "version": "1.2.3", "private": True}, indent=2) + "\n"
    )
    (tmp_path / "VERSION").write_text("1.2.3\n")
    src = tmp_path / "src" / "demo"
    src.mkdir(parents=True)
    (src / "__init__.py").write_text("'''Demo.'''\n\n__version__ = '1.2.3'\nAUTHOR = 'me'\n")
    (tmp_path / "setup.cfg").write_text("[metadata]\nname = demo\nversion = 1.2.3\n")
    return tmp_path


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo handler changes made by the CLI's logging setup."""
    yield
    logger = logging.getLogger("autorelease")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
