"""Configuration loading.

Configuration lives in a JSON file at the project root, ``release-config.json``
by default. The ``CONFIG_FILE_PATH`` environment variable or an explicit path
overrides the location. A missing default file is not an error: the built-in
defaults apply.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from autorelease.config.models import ReleaseConfig
from autorelease.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "release-config.json"
CONFIG_PATH_ENV = "CONFIG_FILE_PATH"


def resolve_config_path(project_path: Path, config_file: Path | str | None = None) -> Path:
    """Work out which configuration file to read.

    Args:
        project_path: Project root directory
        config_file: Explicit configuration file; relative paths are taken
                     relative to ``project_path``

    Returns:
        Path of the configuration file (which may not exist)
    """
    candidate = config_file or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_FILE
    path = Path(candidate)
    if not path.is_absolute():
        path = project_path / path
    return path


def load_config_file(path: Path) -> dict[str, Any]:
    """Read and decode a JSON configuration file.

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigValidationError: If the content is not a JSON object
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"Configuration in {path} must be a JSON object")
    return data


def parse_config(data: dict[str, Any]) -> ReleaseConfig:
    """Validate raw configuration data into a :class:`ReleaseConfig`.

    Raises:
        ConfigValidationError: If the data fails validation
    """
    try:
        return ReleaseConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}") from e


def load_config(
    project_path: Path | None = None,
    config_file: Path | str | None = None,
) -> ReleaseConfig:
    """Load configuration for a project.

    Args:
        project_path: Project root (defaults to the current directory)
        config_file: Explicit configuration file, overriding the environment
                     and the default name

    Returns:
        Validated, immutable configuration

    Raises:
        ConfigNotFoundError: If an explicitly given file doesn't exist
        ConfigValidationError: If the file is malformed
    """
    project_path = project_path or Path.cwd()
    path = resolve_config_path(project_path, config_file)

    if not path.is_file():
        if config_file is not None:
            raise ConfigNotFoundError(f"Configuration file not found: {path}")
        logger.warning("Config file %s not found. Using default configuration.", path.name)
        return ReleaseConfig()

    logger.debug("Loading configuration from %s", path)
    return parse_config(load_config_file(path))
