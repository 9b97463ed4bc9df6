"""Tests for version parsing and arithmetic."""

from __future__ import annotations

import logging

import pytest

from autorelease.core.version import BumpType, Version, next_version, parse_version


class TestVersionParse:
    """Tests for Version.parse()."""

    def test_parse_full(self):
        """Parse a plain three-part version."""
        assert Version.parse("1.2.3") == Version(1, 2, 3)

    @pytest.mark.parametrize("text", ["v1.2.3", "V1.2.3"])
    def test_strips_one_prefix(self, text: str):
        """A single leading v or V is removed."""
        assert Version.parse(text) == Version(1, 2, 3)

    def test_missing_components_default_to_zero(self):
        """Missing trailing components are zero."""
        assert Version.parse("0.1") == Version(0, 1, 0)
        assert Version.parse("4") == Version(4, 0, 0)
        assert Version.parse("") == Version(0, 0, 0)

    def test_non_numeric_components_coerce_to_zero(self):
        """Non-numeric components are read as zero."""
        assert Version.parse("1.x.3") == Version(1, 0, 3)
        assert Version.parse("1.2.3-rc1") == Version(1, 2, 0)
        assert Version.parse("1.\u00b2.3") == Version(1, 0, 3)
        assert next_version("1.\u00b2.3", "patch") == "1.0.4"

    def test_extra_components_ignored(self):
        """Components past patch are ignored."""
        assert Version.parse("1.2.3.4") == Version(1, 2, 3)

    def test_str_is_canonical(self):
        """String form has no prefix."""
        assert str(parse_version("v2.0.1")) == "2.0.1"


class TestVersionBump:
    """Tests for Version.bump()."""

    def test_major_resets_lower(self):
        assert Version(1, 2, 3).bump(BumpType.MAJOR) == Version(2, 0, 0)

    def test_minor_resets_patch(self):
        assert Version(1, 2, 3).bump(BumpType.MINOR) == Version(1, 3, 0)

    def test_patch(self):
        assert Version(1, 2, 3).bump(BumpType.PATCH) == Version(1, 2, 4)

    def test_none_unchanged(self):
        assert Version(1, 2, 3).bump(BumpType.NONE) == Version(1, 2, 3)

    def test_accepts_plain_strings(self):
        """Bump tokens may be given as strings."""
        assert Version(1, 2, 3).bump("minor") == Version(1, 3, 0)

    def test_unknown_bump_logs_and_keeps_version(self, caplog: pytest.LogCaptureFixture):
        """Unknown bump token is logged as an error and changes nothing."""
        with caplog.at_level(logging.ERROR, logger="autorelease"):
            assert Version(1, 2, 3).bump("huge") == Version(1, 2, 3)
        assert "Unknown bump type: huge" in caplog.text


class TestNextVersion:
    """Tests for next_version()."""

    @pytest.mark.parametrize(
        ("current", "bump", "expected"),
        [
            ("1.2.3", "minor", "1.3.0"),
            ("v1.2.3", "major", "2.0.0"),
            ("0.1", "patch", "0.1.1"),
            ("2.0.0", "none", "2.0.0"),
            ("0.0.0", BumpType.MINOR, "0.1.0"),
        ],
    )
    def test_transitions(self, current: str, bump: str, expected: str):
        """Documented transitions."""
        assert next_version(current, bump) == expected

    def test_unknown_bump_returns_current(self):
        """Unknown bump yields the canonical current version."""
        assert next_version("v3.1.4", "bogus") == "3.1.4"
