"""GitHub release publishing through the GitHub CLI (``gh``).

Authentication is left to ``gh`` itself, which reads ``GITHUB_TOKEN`` or its
own stored login.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from autorelease.exceptions import MissingToolError, PublishError

logger = logging.getLogger(__name__)


class GitHubPublisher:
    """Creates GitHub releases for existing tags.

    Args:
        path: Working directory for ``gh`` (the repository)
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path else Path.cwd()

    def check_available(self) -> None:
        """Make sure the GitHub CLI is installed.

        Raises:
            MissingToolError: If ``gh`` is not on PATH
        """
        if shutil.which("gh") is None:
            raise MissingToolError(
                "GitHub CLI (gh) is not installed. Please install it to proceed."
            )

    def publish(self, tag: str, notes: str) -> str:
        """Create a release for ``tag`` with ``notes`` as its body.

        Args:
            tag: Tag name, also used as the release title
            notes: Markdown release notes; a generic message is used when empty

        Returns:
            Output of ``gh`` (normally the release URL)

        Raises:
            PublishError: If ``gh`` fails
        """
        if not notes.strip():
            notes = f"Automated release {tag}"

        logger.info("Creating GitHub release for tag %s", tag)
        try:
            result = subprocess.run(
                ["gh", "release", "create", tag, "--title", tag, "--notes", notes],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise MissingToolError("GitHub CLI (gh) is not installed.") from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip()
            raise PublishError(f"gh release create failed for {tag}: {detail}") from e
        return result.stdout.strip()
