"""Semantic version arithmetic.

Versions are plain ``MAJOR.MINOR.PATCH`` triples. Parsing is deliberately
lenient: tags such as ``v1.2``, ``1`` or ``1.2.x`` are accepted, with missing
or non-numeric components read as ``0``. Output never carries a prefix;
adding ``v`` is a tagging concern.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class BumpType(StrEnum):
    """Magnitude of a version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


# Highest first; classification walks this order.
BUMP_PRIORITY: tuple[BumpType, ...] = (BumpType.MAJOR, BumpType.MINOR, BumpType.PATCH)


def strip_version_prefix(text: str) -> str:
    """Drop surrounding whitespace and one leading ``v``/``V``."""
    text = text.strip()
    if text[:1] in ("v", "V"):
        return text[1:]
    return text


def _component(raw: str) -> int:
    raw = raw.strip()
    return int(raw) if raw.isascii() and raw.isdigit() else 0


@dataclass(frozen=True, slots=True, order=True)
class Version:
    """An immutable ``major.minor.patch`` version."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        One leading ``v``/``V`` is stripped. Missing trailing components
        default to ``0``, non-numeric components coerce to ``0`` and anything
        past the third component is ignored.

        Args:
            text: Version string such as ``"v1.2.3"`` or ``"0.1"``

        Returns:
            Parsed Version
        """
        text = strip_version_prefix(text)

        parts = text.split(".") if text else []
        parts += ["0"] * (3 - len(parts))
        return cls(_component(parts[0]), _component(parts[1]), _component(parts[2]))

    def bump(self, bump_type: BumpType | str) -> Version:
        """Return the version that follows this one for ``bump_type``.

        An unrecognized bump token is logged and leaves the version unchanged.
        """
        try:
            bump_type = BumpType(bump_type)
        except ValueError:
            logger.error("Unknown bump type: %s", bump_type)
            return self

        if bump_type is BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type is BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type is BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(text: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(text)


def next_version(current: str, bump: BumpType | str) -> str:
    """Compute the next canonical version string.

    Args:
        current: Current version, optionally ``v``-prefixed
        bump: Bump level (``major``, ``minor``, ``patch`` or ``none``)

    Returns:
        Next version as ``"M.N.P"``

    Examples:
        >>> next_version("v1.2.3", "minor")
        '1.3.0'
        >>> next_version("0.1", "patch")
        '0.1.1'
    """
    parsed = Version.parse(current)
    logger.debug(
        "Parsed version components - major: %d, minor: %d, patch: %d",
        parsed.major,
        parsed.minor,
        parsed.patch,
    )
    return str(parsed.bump(bump))
