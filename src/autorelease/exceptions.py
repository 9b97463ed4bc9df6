"""Exception hierarchy for autorelease.

All errors raised by the library derive from :class:`AutoReleaseError`, so
callers can catch everything in one place while still telling the classes
apart: security rejections, missing tools and per-file problems are handled
differently by the CLI.
"""

from __future__ import annotations


class AutoReleaseError(Exception):
    """Base class for all autorelease errors."""


# Configuration


class ConfigError(AutoReleaseError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """An explicitly requested configuration file does not exist."""


class ConfigValidationError(ConfigError):
    """Configuration content is malformed or fails validation."""


# Versions, changelog and project files


class VersionError(AutoReleaseError):
    """A version string or bump request is invalid."""


class ChangelogError(AutoReleaseError):
    """The changelog could not be written."""


class ProjectError(AutoReleaseError):
    """A project file could not be updated."""


class VersionNotFoundError(ProjectError):
    """No version field or constant was found in a project file."""


# Security


class SecurityError(AutoReleaseError):
    """A safety check rejected user-supplied input.

    Attributes:
        check: Name of the check that failed (e.g. ``"path-safety"``)
    """

    check = "security"

    def __init__(self, message: str, *, check: str | None = None) -> None:
        super().__init__(message)
        if check is not None:
            self.check = check


class InvalidVersionFormatError(SecurityError):
    """The new version contains characters outside ``[A-Za-z0-9.-]``."""

    check = "version-format"


class UnsafePathError(SecurityError):
    """A target path points outside the repository root."""

    check = "path-safety"


class UnsafePatternError(SecurityError):
    """A custom substitution pattern requests an unsafe modifier."""

    check = "pattern-safety"


# External collaborators


class GitError(AutoReleaseError):
    """A git command failed.

    Attributes:
        stderr: Captured standard error of the failed command
    """

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        if self.stderr:
            return f"{super().__str__()}: {self.stderr.strip()}"
        return super().__str__()


class PublishError(AutoReleaseError):
    """Creating the hosted release failed."""


class MissingToolError(AutoReleaseError):
    """A required external executable is not installed.

    This is fatal: the run cannot continue without it.
    """
