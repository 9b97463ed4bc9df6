"""Version updates for project files.

Each configured target names a file and how the version is stored in it:

- ``json`` (alias ``npm``): top-level ``"version"`` field, e.g. package.json
- ``text``: the whole file is the version string
- ``source-constant`` (alias ``python``): a ``__version__ = "..."`` assignment
- ``custom-pattern`` (alias ``custom-regex``): a sed-style substitution
  ``s/find/replace/flags`` with a ``%VERSION%`` placeholder

User-supplied values are validated before anything is written. The version
must consist of ``[A-Za-z0-9.-]`` only, target paths must stay inside the
repository root, and custom patterns may not use the ``e`` (execute) or ``w``
(write to file) substitution flags.

Updates are best-effort: a failing target is reported and the next one is
processed. Only an invalid version aborts the whole batch.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path, PureWindowsPath
from typing import TYPE_CHECKING

from autorelease.exceptions import (
    AutoReleaseError,
    InvalidVersionFormatError,
    ProjectError,
    SecurityError,
    UnsafePathError,
    UnsafePatternError,
    VersionNotFoundError,
)
from autorelease.project.files import atomic_write_text

if TYPE_CHECKING:
    from autorelease.config.models import UpdateTarget

logger = logging.getLogger(__name__)

VERSION_FORMAT = re.compile(r"[A-Za-z0-9.-]+")
VERSION_PLACEHOLDER = "%VERSION%"

# Recognized version constants, tried in order; the first match is rewritten.
SOURCE_CONSTANT_NAMES = ("__version__", "VERSION")
SOURCE_CONSTANT_PATTERNS = tuple(
    re.compile(
        rf"^{name}\s*(?::\s*str\s*)?=\s*(?P<quote>[\"'])(?P<value>[^\"'\n]*)(?P=quote)",
        re.MULTILINE,
    )
    for name in SOURCE_CONSTANT_NAMES
)

UNSAFE_FLAGS = frozenset("ew")
SUPPORTED_FLAGS = frozenset("giI")


class TargetStatus(StrEnum):
    """Result of processing one target."""

    UPDATED = "updated"
    SKIPPED = "skipped"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TargetOutcome:
    target: UpdateTarget
    status: TargetStatus
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is TargetStatus.UPDATED


# =============================================================================
# Safety checks
# =============================================================================


def validate_version_format(version: str) -> None:
    """Ensure ``version`` only contains letters, digits, dots and hyphens.

    Raises:
        InvalidVersionFormatError: If any other character is present
    """
    if not VERSION_FORMAT.fullmatch(version):
        raise InvalidVersionFormatError(
            f"Invalid version format '{version}': only letters, digits, '.' and '-' are allowed"
        )


def _path_violation(path: str) -> str | None:
    if not path.strip():
        return "path is empty"

    normalized = path.replace("\\", "/")
    if normalized.startswith("/") or PureWindowsPath(path).drive:
        return "absolute paths are not allowed"
    if ".." in normalized.split("/"):
        return "parent directory traversal ('..') is not allowed"
    return None


def is_safe_path(path: str) -> bool:
    """Check that ``path`` is relative and contains no ``..`` segment."""
    return _path_violation(path) is None


def check_path_safety(path: str, root: Path) -> Path:
    """Validate a target path and resolve it inside ``root``.

    Args:
        path: Repository-relative path from configuration
        root: Repository root

    Returns:
        Resolved absolute path of the target

    Raises:
        UnsafePathError: If the path is absolute, traverses upwards or
                         resolves (e.g. through a symlink) outside ``root``
    """
    violation = _path_violation(path)
    if violation:
        raise UnsafePathError(f"Path '{path}' rejected: {violation}")

    resolved_root = root.resolve()
    resolved = (resolved_root / path.replace("\\", "/")).resolve()
    if not resolved.is_relative_to(resolved_root):
        raise UnsafePathError(f"Path '{path}' rejected: it resolves outside the repository root")
    return resolved


# =============================================================================
# Updaters
# =============================================================================


def update_json(file_path: Path, new_version: str) -> None:
    """Set the top-level ``version`` field of a JSON document.

    All other fields and their order are preserved.

    Raises:
        ProjectError: If the file is not a JSON object
    """
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProjectError(f"Malformed JSON in {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectError(f"Top-level JSON value in {file_path} is not an object")

    data["version"] = new_version
    atomic_write_text(file_path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def update_text(file_path: Path, new_version: str) -> None:
    """Replace the whole file with the version string."""
    atomic_write_text(file_path, f"{new_version}\n")


def update_source_constant(file_path: Path, new_version: str) -> None:
    """Rewrite a ``__version__ = "..."`` assignment in a source file.

    Only the first recognized assignment changes; its quote style is kept.
    ``VERSION = "..."`` is used when no ``__version__`` is present.

    Raises:
        VersionNotFoundError: If no version constant is found
    """
    content = file_path.read_text(encoding="utf-8")

    for pattern in SOURCE_CONSTANT_PATTERNS:
        match = pattern.search(content)
        if match:
            start, end = match.span("value")
            atomic_write_text(file_path, content[:start] + new_version + content[end:])
            return

    raise VersionNotFoundError(f"Could not find a version constant in {file_path}")


@dataclass(frozen=True, slots=True)
class Substitution:
    """A parsed ``s/find/replace/flags`` expression."""

    find: str
    replace: str
    flags: str

    @property
    def is_global(self) -> bool:
        return "g" in self.flags

    @property
    def ignore_case(self) -> bool:
        return "i" in self.flags or "I" in self.flags


def parse_substitution(expression: str) -> Substitution:
    """Split a sed-style substitution into its parts.

    The character after ``s`` is the delimiter; it can appear inside the
    find or replace part when escaped with a backslash. Everything after the
    third delimiter counts as flags, so chained commands such as
    ``s/a/b/;s/c/d/e`` are caught by the unsafe flag check too.

    Raises:
        UnsafePatternError: If the ``e`` or ``w`` flag is requested
        ProjectError: If the expression is malformed
    """
    expression = expression.strip()
    if len(expression) < 2 or expression[0] != "s":
        raise ProjectError(f"Pattern must have the form s/find/replace/flags: {expression!r}")

    delimiter = expression[1]
    if delimiter.isalnum() or delimiter.isspace() or delimiter == "\\":
        raise ProjectError(f"Invalid delimiter {delimiter!r} in pattern {expression!r}")

    parts: list[str] = []
    current: list[str] = []
    index = 2
    while index < len(expression):
        char = expression[index]
        if char == "\\" and index + 1 < len(expression) and len(parts) < 2:
            following = expression[index + 1]
            if following == delimiter:
                # An escaped delimiter is a literal character in both parts.
                current.append(re.escape(delimiter) if not parts else delimiter)
            else:
                current.append(char + following)
            index += 2
            continue
        if char == delimiter and len(parts) < 2:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1

    if len(parts) != 2:
        raise ProjectError(f"Unterminated substitution pattern: {expression!r}")

    flags = "".join(current).strip()
    unsafe = sorted(UNSAFE_FLAGS & set(flags))
    if unsafe:
        raise UnsafePatternError(
            f"Pattern requests unsafe flag(s) {', '.join(repr(f) for f in unsafe)} "
            "(execute command / write to file)"
        )

    unsupported = sorted(set(flags) - SUPPORTED_FLAGS)
    if unsupported:
        raise ProjectError(f"Unsupported substitution flag(s): {''.join(unsupported)}")

    return Substitution(find=parts[0], replace=parts[1], flags=flags)


def _compile_replacement(template: str, groups: int) -> Callable[[re.Match[str]], str]:
    """Build a replacement function with sed semantics.

    ``&`` is the whole match, ``\\1``-``\\9`` are groups, ``\\n``/``\\t`` are
    newline and tab, and any other escaped character is taken literally.
    """
    pieces: list[str | int] = []
    buffer: list[str] = []

    def flush() -> None:
        if buffer:
            pieces.append("".join(buffer))
            buffer.clear()

    index = 0
    while index < len(template):
        char = template[index]
        if char == "\\" and index + 1 < len(template):
            following = template[index + 1]
            if following.isdigit():
                flush()
                pieces.append(int(following))
            elif following == "n":
                buffer.append("\n")
            elif following == "t":
                buffer.append("\t")
            else:
                buffer.append(following)
            index += 2
            continue
        if char == "&":
            flush()
            pieces.append(0)
        else:
            buffer.append(char)
        index += 1
    flush()

    for piece in pieces:
        if isinstance(piece, int) and piece > groups:
            raise ProjectError(f"Replacement refers to group {piece}, pattern has {groups}")

    def expand(match: re.Match[str]) -> str:
        return "".join(p if isinstance(p, str) else (match.group(p) or "") for p in pieces)

    return expand


def update_custom_pattern(file_path: Path, new_version: str, pattern: str) -> None:
    """Apply a sed-style substitution to every line of a file.

    ``%VERSION%`` is replaced with the literal new version in both the find
    and the replace part. Without the ``g`` flag only the first match on each
    line is replaced.

    Raises:
        UnsafePatternError: If the pattern requests an unsafe flag
        ProjectError: If the pattern is malformed
    """
    substitution = parse_substitution(pattern)

    find = substitution.find.replace(VERSION_PLACEHOLDER, re.escape(new_version))
    replace = substitution.replace.replace(VERSION_PLACEHOLDER, new_version)
    try:
        regex = re.compile(find, re.IGNORECASE if substitution.ignore_case else 0)
    except re.error as e:
        raise ProjectError(f"Invalid regular expression {find!r}: {e}") from e

    expand = _compile_replacement(replace, regex.groups)
    count = 0 if substitution.is_global else 1

    content = file_path.read_bytes().decode("utf-8")
    lines = []
    for line in content.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        lines.append(regex.sub(expand, body, count=count) + line[len(body) :])
    new_content = "".join(lines)

    if new_content == content:
        logger.warning("Pattern %r matched nothing in %s", pattern, file_path)
    atomic_write_text(file_path, new_content)


# =============================================================================
# Orchestration
# =============================================================================


KIND_ALIASES = {
    "npm": "json",
    "python": "source-constant",
    "custom-regex": "custom-pattern",
}

_UPDATERS: dict[str, Callable[[Path, str, UpdateTarget], None]] = {
    "json": lambda path, version, _target: update_json(path, version),
    "text": lambda path, version, _target: update_text(path, version),
    "source-constant": lambda path, version, _target: update_source_constant(path, version),
    "custom-pattern": lambda path, version, target: update_custom_pattern(
        path, version, target.pattern or ""
    ),
}


def normalize_kind(kind: str) -> str:
    kind = kind.strip().lower()
    return KIND_ALIASES.get(kind, kind)


def _apply_target(new_version: str, target: UpdateTarget, root: Path) -> TargetOutcome:
    try:
        file_path = check_path_safety(target.path, root)
    except UnsafePathError as e:
        logger.error("SECURITY ERROR [%s]: %s. Skipping.", e.check, e)
        return TargetOutcome(target, TargetStatus.REJECTED, str(e))

    if not file_path.is_file():
        logger.warning("File not found: %s. Skipping.", target.path)
        return TargetOutcome(target, TargetStatus.SKIPPED, "file not found")

    kind = normalize_kind(target.type)
    updater = _UPDATERS.get(kind)
    if updater is None:
        logger.warning("Unknown updater type '%s' for %s. Skipping.", target.type, target.path)
        return TargetOutcome(target, TargetStatus.SKIPPED, f"unknown updater type '{target.type}'")

    if kind == "custom-pattern" and not (target.pattern or "").strip():
        logger.warning("No pattern provided for custom-pattern in %s. Skipping.", target.path)
        return TargetOutcome(target, TargetStatus.SKIPPED, "no pattern provided")

    logger.info("  -> Updating %s (%s)", target.path, kind)
    try:
        updater(file_path, new_version, target)
    except SecurityError as e:
        logger.error("SECURITY ERROR [%s]: %s. Operation aborted for %s.", e.check, e, target.path)
        return TargetOutcome(target, TargetStatus.REJECTED, str(e))
    except (ProjectError, OSError, UnicodeDecodeError) as e:
        logger.error("Failed to update %s: %s", target.path, e)
        return TargetOutcome(target, TargetStatus.FAILED, str(e))

    return TargetOutcome(target, TargetStatus.UPDATED)


def apply_updates(
    new_version: str,
    targets: Iterable[UpdateTarget],
    root: Path,
    *,
    stage: Callable[[Path], object] | None = None,
) -> list[TargetOutcome]:
    """Write ``new_version`` into every configured target.

    Args:
        new_version: Version string to write (no prefix)
        targets: Targets in configured order
        root: Repository root; target paths are relative to it
        stage: Called with the relative path of each updated file, e.g.
               :meth:`GitRepository.add`

    Returns:
        One outcome per target, in order

    Raises:
        InvalidVersionFormatError: If ``new_version`` contains characters
            outside ``[A-Za-z0-9.-]``; no file is touched in that case
    """
    validate_version_format(new_version)

    targets = list(targets)
    if not targets:
        logger.info("No file updates configured.")
        return []

    logger.info("Updating project files to version %s:", new_version)

    outcomes = []
    for target in targets:
        outcome = _apply_target(new_version, target, root)
        if outcome.ok and stage is not None:
            try:
                stage(Path(target.path))
            except AutoReleaseError as e:
                logger.error("Failed to stage %s: %s", target.path, e)
        outcomes.append(outcome)
    return outcomes
