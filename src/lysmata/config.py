# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for lysmata."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import DEFAULT_EXCLUDE_DIRS, LAF_DIR_NAME, LOG_DIR_NAME

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "lysmata"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class LysmataConfig(BaseModel):
    """Resolved settings for a check, insights or log-clearing invocation."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    laf_dir: Path = Path(LAF_DIR_NAME)
    log_dir: Path = Path(LOG_DIR_NAME)
    exclude_dirs: tuple[str, ...] = Field(default=DEFAULT_EXCLUDE_DIRS)
    verbose: bool = False
    emoji: bool = True
    color: bool = True

    @field_validator("exclude_dirs", mode="before")
    @classmethod
    def _normalise_excludes(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            cleaned: list[str] = []
            for entry in value:
                stripped = str(entry).strip().strip("/")
                # Exclusions match the first path component only.
                if "/" in stripped:
                    raise ValueError(f"exclude_dirs entry {entry!r} must name a single top-level directory")
                if stripped and stripped not in cleaned:
                    cleaned.append(stripped)
            return tuple(cleaned)
        return value

    def laf_path(self, root: Path) -> Path:
        """Return the absolute ``.laf`` directory for ``root``."""

        return self.laf_dir if self.laf_dir.is_absolute() else root / self.laf_dir

    def log_path(self, root: Path) -> Path:
        """Return the directory holding persisted run logs for ``root``."""

        if self.log_dir.is_absolute():
            return self.log_dir
        return self.laf_path(root) / self.log_dir


def load_pyproject_section(path: Path) -> Mapping[str, Any]:
    """Return the ``[tool.lysmata]`` table from ``path`` or an empty mapping.

    Raises:
        ConfigError: If the document cannot be parsed as TOML.
    """

    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return {str(key).replace("-", "_"): value for key, value in section.items()}


def load_config(root: Path, **overrides: Any) -> LysmataConfig:
    """Return configuration for ``root`` merged with CLI ``overrides``.

    Overrides whose value is ``None`` are ignored so unset CLI flags leave the
    file values untouched.

    Raises:
        ConfigError: If the file section or overrides fail validation.
    """

    payload = dict(load_pyproject_section(root / PYPROJECT_FILENAME))
    payload.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return LysmataConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid [tool.{PYPROJECT_SECTION_KEY}] configuration: {exc}") from exc


__all__ = [
    "ConfigError",
    "LysmataConfig",
    "load_config",
    "load_pyproject_section",
]
