"""Project file updates for autorelease."""

from __future__ import annotations

from autorelease.project.files import atomic_write_text
from autorelease.project.updaters import (
    TargetOutcome,
    TargetStatus,
    apply_updates,
    check_path_safety,
    is_safe_path,
    parse_substitution,
    validate_version_format,
)

__all__ = [
    "TargetOutcome",
    "TargetStatus",
    "apply_updates",
    "atomic_write_text",
    "check_path_safety",
    "is_safe_path",
    "parse_substitution",
    "validate_version_format",
]
