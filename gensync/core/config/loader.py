"""
Configuration loader — reads gensync.yml into settings models.

Example::

    project_root: app
    smap_stratum: Xtend
    debug_extensions: [".java"]
    outputs:
      - name: DEFAULT_OUTPUT
        output_directory: src-gen
      - name: docs
        output_directory: docs-gen
        override_existing_resources: false

The loader reads YAML, validates against Pydantic schemas, and returns
typed settings.  The synchronizer gets the resulting
``OutputConfigurations`` table injected; nothing is looked up globally.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from gensync.adapters.base import DEFAULT_ENCODING
from gensync.core.models.output import OutputConfiguration, OutputConfigurations
from gensync.core.services.trace.smap import DEFAULT_DEBUG_EXTENSIONS, DEFAULT_STRATUM
from gensync.core.services.trace.source_index import DEFAULT_GENERATOR_NAME

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "gensync.yml"


class ConfigError(Exception):
    """Raised when the configuration is invalid or missing."""


class SyncSettings(BaseModel):
    """Everything needed to build a synchronizer for one project."""

    project_root: str = "."
    generator_name: str = DEFAULT_GENERATOR_NAME
    default_encoding: str = DEFAULT_ENCODING
    encodings: dict[str, str] = Field(default_factory=dict)
    smap_stratum: str = DEFAULT_STRATUM
    debug_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_DEBUG_EXTENSIONS))
    outputs: list[OutputConfiguration] = Field(default_factory=lambda: [OutputConfiguration()])

    @field_validator("debug_extensions")
    @classmethod
    def _dotted(cls, value: list[str]) -> list[str]:
        for ext in value:
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"Extension must look like '.java', got {ext!r}")
        return value

    def output_configurations(self) -> OutputConfigurations:
        return OutputConfigurations(self.outputs)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for gensync.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to gensync.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None) -> SyncSettings:
    """Load and validate synchronizer settings.

    Args:
        path: Explicit path to gensync.yml. If None, searches upward.

    Returns:
        Validated SyncSettings model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Create one or specify --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = SyncSettings.model_validate(data)
        settings.output_configurations()
    except (ValidationError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info("Loaded %d output configurations from %s", len(settings.outputs), path)
    return settings
