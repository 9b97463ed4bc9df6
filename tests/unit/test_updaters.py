"""Tests for project file version updates."""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from autorelease.config.models import UpdateTarget
from autorelease.exceptions import (
    GitError,
    InvalidVersionFormatError,
    ProjectError,
    UnsafePathError,
    UnsafePatternError,
    VersionNotFoundError,
)
from autorelease.project.updaters import (
    TargetStatus,
    apply_updates,
    check_path_safety,
    is_safe_path,
    normalize_kind,
    parse_substitution,
    update_custom_pattern,
    update_json,
    update_source_constant,
    update_text,
    validate_version_format,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestValidateVersionFormat:
    """Tests for validate_version_format()."""

    @pytest.mark.parametrize("version", ["1.2.3", "2.0.0-rc.1", "v1", "2024.05.01"])
    def test_accepts(self, version: str):
        validate_version_format(version)

    @pytest.mark.parametrize(
        "version",
        ["1.0.0; rm -rf /", "1.0.0+build", "$(id)", "1.0.0\n", "", "1.0 0", "1/2"],
    )
    def test_rejects(self, version: str):
        with pytest.raises(InvalidVersionFormatError) as exc_info:
            validate_version_format(version)
        assert exc_info.value.check == "version-format"


class TestPathSafety:
    """Tests for is_safe_path() and check_path_safety()."""

    @pytest.mark.parametrize(
        "path",
        ["/etc/passwd", "../../etc/passwd", "a/../../b", "..", "src/..", "..\\secret", "C:\\x"],
    )
    def test_rejects(self, path: str):
        assert not is_safe_path(path)

    @pytest.mark.parametrize("path", ["src/version.txt", "VERSION", "./package.json", "a..b/c"])
    def test_accepts(self, path: str):
        assert is_safe_path(path)

    def test_check_returns_resolved_path(self, tmp_path: Path):
        resolved = check_path_safety("src/version.txt", tmp_path)
        assert resolved == (tmp_path / "src" / "version.txt").resolve()

    def test_check_states_reason(self, tmp_path: Path):
        """Rejections say which rule was broken."""
        with pytest.raises(UnsafePathError, match="absolute paths are not allowed"):
            check_path_safety("/etc/passwd", tmp_path)
        with pytest.raises(UnsafePathError, match=r"parent directory traversal"):
            check_path_safety("a/../../b", tmp_path)

    def test_symlink_escape_rejected(self, tmp_path: Path):
        """A symlink pointing outside the root is rejected."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("x")
        root = tmp_path / "repo"
        root.mkdir()
        os.symlink(outside, root / "link")

        with pytest.raises(UnsafePathError, match="outside the repository root"):
            check_path_safety("link/secret.txt", root)


class TestUpdateJson:
    """Tests for update_json()."""

    def test_preserves_other_fields(self, project_dir: Path):
        """Only version changes; key order is kept."""
        path = project_dir / "package.json"

        update_json(path, "2.0.0")

        data = json.loads(path.read_text())
        assert data == {"name": "demo", "version": "2.0.0", "private": True}
        assert list(data) == ["name", "version", "private"]
        assert path.read_text().endswith("}\n")

    def test_adds_missing_version(self, tmp_path: Path):
        path = tmp_path / "composer.json"
        path.write_text('{"name": "x"}')

        update_json(path, "1.0.0")

        assert json.loads(path.read_text()) == {"name": "x", "version": "1.0.0"}

    def test_non_ascii_kept(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text('{"author": "Jörg", "version": "1.0.0"}')

        update_json(path, "1.0.1")

        assert '"Jörg"' in path.read_text(encoding="utf-8")

    def test_malformed_raises(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("{broken")

        with pytest.raises(ProjectError, match="Malformed JSON"):
            update_json(path, "1.0.0")
        assert path.read_text() == "{broken"

    def test_non_object_raises(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")

        with pytest.raises(ProjectError, match="not an object"):
            update_json(path, "1.0.0")


class TestUpdateText:
    def test_overwrites(self, project_dir: Path):
        path = project_dir / "VERSION"

        update_text(path, "1.3.0")

        assert path.read_text() == "1.3.0\n"


class TestUpdateSourceConstant:
    """Tests for update_source_constant()."""

    def test_keeps_quote_style(self, project_dir: Path):
        """Single quotes stay single quotes; other lines are untouched."""
        path = project_dir / "src" / "demo" / "__init__.py"

        update_source_constant(path, "2.0.0")

        assert path.read_text() == "'''Demo.'''\n\n__version__ = '2.0.0'\nAUTHOR = 'me'\n"

    def test_double_quotes(self, tmp_path: Path):
        path = tmp_path / "_version.py"
        path.write_text('__version__ = "0.1.0"\n')

        update_source_constant(path, "0.2.0")

        assert path.read_text() == '__version__ = "0.2.0"\n'

    def test_only_first_assignment(self, tmp_path: Path):
        path = tmp_path / "v.py"
        path.write_text('__version__ = "1.0.0"\n__version__ = "9.9.9"\n')

        update_source_constant(path, "1.1.0")

        assert path.read_text() == '__version__ = "1.1.0"\n__version__ = "9.9.9"\n'

    def test_annotated_assignment(self, tmp_path: Path):
        path = tmp_path / "v.py"
        path.write_text('__version__: str = "1.0.0"\n')

        update_source_constant(path, "1.0.1")

        assert path.read_text() == '__version__: str = "1.0.1"\n'

    def test_version_constant_fallback(self, tmp_path: Path):
        path = tmp_path / "settings.py"
        path.write_text('NAME = "x"\nVERSION = "3.0.0"\n')

        update_source_constant(path, "3.1.0")

        assert path.read_text() == 'NAME = "x"\nVERSION = "3.1.0"\n'

    def test_missing_constant_raises(self, tmp_path: Path):
        path = tmp_path / "empty.py"
        path.write_text("x = 1\n")

        with pytest.raises(VersionNotFoundError):
            update_source_constant(path, "1.0.0")


class TestParseSubstitution:
    """Tests for parse_substitution()."""

    def test_basic(self):
        sub = parse_substitution("s/^version = .*/version = %VERSION%/")

        assert sub.find == "^version = .*"
        assert sub.replace == "version = %VERSION%"
        assert sub.flags == ""

    def test_custom_delimiter_and_flags(self):
        sub = parse_substitution("s#a/b#c/d#gI")

        assert (sub.find, sub.replace, sub.flags) == ("a/b", "c/d", "gI")
        assert sub.is_global
        assert sub.ignore_case

    def test_escaped_delimiter(self):
        sub = parse_substitution(r"s/a\/b/c\/d/")

        assert sub.find == "a/b"
        assert sub.replace == "c/d"

    @pytest.mark.parametrize(
        "pattern",
        ["s/x/y/e", "s/x/y/w /tmp/out", "s/x/y/ge", "s/x/y/;s/a/b/e"],
    )
    def test_unsafe_flags_rejected(self, pattern: str):
        with pytest.raises(UnsafePatternError) as exc_info:
            parse_substitution(pattern)
        assert exc_info.value.check == "pattern-safety"

    def test_e_in_text_is_not_a_flag(self):
        """Letters in the find/replace parts are not flags."""
        sub = parse_substitution("s/release/version/")

        assert sub.flags == ""

    @pytest.mark.parametrize("pattern", ["version", "s/unterminated", "s/a/b", "sxaxbx"])
    def test_malformed(self, pattern: str):
        with pytest.raises(ProjectError):
            parse_substitution(pattern)

    def test_unsupported_flag(self):
        with pytest.raises(ProjectError, match="Unsupported"):
            parse_substitution("s/a/b/p")


class TestUpdateCustomPattern:
    """Tests for update_custom_pattern()."""

    def test_replaces_placeholder(self, project_dir: Path):
        path = project_dir / "setup.cfg"

        update_custom_pattern(path, "1.3.0", "s/^version = .*/version = %VERSION%/")

        assert path.read_text() == "[metadata]\nname = demo\nversion = 1.3.0\n"

    def test_first_match_per_line_without_g(self, tmp_path: Path):
        path = tmp_path / "f.txt"
        path.write_text("1.0 1.0\n1.0\n")

        update_custom_pattern(path, "2.0", r"s/1\.0/%VERSION%/")

        assert path.read_text() == "2.0 1.0\n2.0\n"

    def test_global_flag(self, tmp_path: Path):
        path = tmp_path / "f.txt"
        path.write_text("1.0 1.0\n")

        update_custom_pattern(path, "2.0", r"s/1\.0/%VERSION%/g")

        assert path.read_text() == "2.0 2.0\n"

    def test_groups_and_ampersand(self, tmp_path: Path):
        path = tmp_path / "Chart.yaml"
        path.write_text("appVersion: 0.9.0\n")

        update_custom_pattern(path, "1.0.0", r"s/^(appVersion: ).*/\1%VERSION% # was &/")

        assert path.read_text() == "appVersion: 1.0.0 # was appVersion: 0.9.0\n"

    def test_unsafe_pattern_leaves_file(self, project_dir: Path):
        path = project_dir / "setup.cfg"
        before = path.read_text()

        with pytest.raises(UnsafePatternError):
            update_custom_pattern(path, "1.3.0", "s/version/touch pwned/e")

        assert path.read_text() == before

    def test_bad_regex(self, tmp_path: Path):
        path = tmp_path / "f.txt"
        path.write_text("x\n")

        with pytest.raises(ProjectError, match="Invalid regular expression"):
            update_custom_pattern(path, "1.0.0", "s/(unclosed/x/")

    def test_missing_group(self, tmp_path: Path):
        path = tmp_path / "f.txt"
        path.write_text("x\n")

        with pytest.raises(ProjectError, match="group 2"):
            update_custom_pattern(path, "1.0.0", r"s/(x)/\2/")


class TestNormalizeKind:
    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            ("npm", "json"),
            ("python", "source-constant"),
            ("custom-regex", "custom-pattern"),
            ("JSON", "json"),
            ("text", "text"),
            ("toml", "toml"),
        ],
    )
    def test_aliases(self, kind: str, expected: str):
        assert normalize_kind(kind) == expected


class TestApplyUpdates:
    """Tests for apply_updates()."""

    def test_updates_all_kinds_and_stages(self, project_dir: Path):
        targets = [
            UpdateTarget(path="package.json", type="json"),
            UpdateTarget(path="VERSION", type="text"),
            UpdateTarget(path="src/demo/__init__.py", type="python"),
            UpdateTarget(path="setup.cfg", type="custom-regex", pattern="s/^version = .*/version = %VERSION%/"),
        ]
        stage = MagicMock()

        outcomes = apply_updates("1.3.0", targets, project_dir, stage=stage)

        assert [o.status for o in outcomes] == [TargetStatus.UPDATED] * 4
        assert [str(c.args[0]) for c in stage.call_args_list] == [
            "package.json",
            "VERSION",
            "src/demo/__init__.py",
            "setup.cfg",
        ]
        assert (project_dir / "VERSION").read_text() == "1.3.0\n"
        assert "version = 1.3.0" in (project_dir / "setup.cfg").read_text()

    def test_invalid_version_touches_nothing(self, project_dir: Path):
        """A bad version aborts before any target is processed."""
        before = {p: p.read_bytes() for p in project_dir.rglob("*") if p.is_file()}
        stage = MagicMock()
        targets = [
            UpdateTarget(path="package.json", type="json"),
            UpdateTarget(path="VERSION", type="text"),
        ]

        with pytest.raises(InvalidVersionFormatError):
            apply_updates("1.0.0; rm -rf /", targets, project_dir, stage=stage)

        assert {p: p.read_bytes() for p in project_dir.rglob("*") if p.is_file()} == before
        stage.assert_not_called()

    def test_best_effort_continues(self, project_dir: Path, caplog: pytest.LogCaptureFixture):
        """Each failure is reported and the batch goes on."""
        (project_dir / "bad.json").write_text("{oops")
        targets = [
            UpdateTarget(path="../../etc/passwd", type="text"),
            UpdateTarget(path="missing.txt", type="text"),
            UpdateTarget(path="VERSION", type="toml"),
            UpdateTarget(path="setup.cfg", type="custom-pattern", pattern="s/a/b/w out.txt"),
            UpdateTarget(path="setup.cfg", type="custom-pattern"),
            UpdateTarget(path="bad.json", type="json"),
            UpdateTarget(path="VERSION", type="text"),
        ]
        stage = MagicMock()

        with caplog.at_level(logging.INFO, logger="autorelease"):
            outcomes = apply_updates("1.3.0", targets, project_dir, stage=stage)

        assert [o.status for o in outcomes] == [
            TargetStatus.REJECTED,
            TargetStatus.SKIPPED,
            TargetStatus.SKIPPED,
            TargetStatus.REJECTED,
            TargetStatus.SKIPPED,
            TargetStatus.FAILED,
            TargetStatus.UPDATED,
        ]
        assert "parent directory traversal" in outcomes[0].reason
        assert outcomes[1].reason == "file not found"
        assert "unknown updater type" in outcomes[2].reason
        assert "unsafe flag" in outcomes[3].reason
        assert outcomes[4].reason == "no pattern provided"
        stage.assert_called_once()
        assert (project_dir / "VERSION").read_text() == "1.3.0\n"
        assert not (project_dir / "out.txt").exists()
        assert "SECURITY ERROR [path-safety]" in caplog.text
        assert "SECURITY ERROR [pattern-safety]" in caplog.text

    def test_no_targets(self, tmp_path: Path):
        assert apply_updates("1.0.0", [], tmp_path) == []

    def test_staging_failure_is_logged(self, project_dir: Path, caplog: pytest.LogCaptureFixture):
        stage = MagicMock(side_effect=GitError("git add failed"))

        with caplog.at_level(logging.ERROR, logger="autorelease"):
            outcomes = apply_updates(
                "1.3.0", [UpdateTarget(path="VERSION", type="text")], project_dir, stage=stage
            )

        assert outcomes[0].ok
        assert "Failed to stage VERSION" in caplog.text
