"""Git operations through the ``git`` executable.

Only the handful of commands a release needs are wrapped: reading tags and
commit messages, staging, committing, tagging and pushing.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from autorelease.core.commits import CommitRecord
from autorelease.exceptions import GitError, MissingToolError

logger = logging.getLogger(__name__)

# Separates records in `git log` output; cannot appear in commit messages.
_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"


class GitRepository:
    """A git working tree.

    Args:
        path: Directory inside the working tree

    Raises:
        MissingToolError: If ``git`` is not installed
        GitError: If ``path`` is not inside a git repository
    """

    def __init__(self, path: Path) -> None:
        if shutil.which("git") is None:
            raise MissingToolError('Command "git" not found. It is required to read history.')
        self.path = Path(path)
        self.root = Path(self._run("rev-parse", "--show-toplevel").strip())

    def _run(self, *args: str) -> str:
        cmd = ["git", *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout

    def get_latest_tag(self, pattern: str | None = None) -> str | None:
        """Most recent tag reachable from HEAD, or None if there is none."""
        args = ["describe", "--tags", "--abbrev=0"]
        if pattern:
            args.extend(["--match", pattern])
        try:
            return self._run(*args).strip() or None
        except GitError:
            logger.debug("No tag matching %s found", pattern or "*")
            return None

    def get_commits_since_tag(self, tag: str | None) -> list[CommitRecord]:
        """Commit messages after ``tag`` (all history when None), newest first."""
        revision = f"{tag}..HEAD" if tag else "HEAD"
        output = self._run("log", f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}", revision)

        commits = []
        for chunk in output.split(_RECORD_SEP):
            chunk = chunk.strip()
            if not chunk:
                continue
            sha, _, message = chunk.partition(_FIELD_SEP)
            commits.append(CommitRecord(message=message.strip(), sha=sha.strip()))
        return commits

    def add(self, path: Path | str) -> None:
        """Stage ``path`` for the next commit."""
        self._run("add", "--", str(path))

    def commit(self, message: str) -> None:
        self._run("commit", "-m", message)

    def create_tag(self, tag: str, message: str | None = None) -> None:
        """Create an annotated tag at HEAD."""
        self._run("tag", "-a", tag, "-m", message or tag)

    def push(self, *, tags: bool = True) -> None:
        self._run("push")
        if tags:
            self._run("push", "--tags")

    def is_dirty(self) -> bool:
        return bool(self._run("status", "--porcelain").strip())
