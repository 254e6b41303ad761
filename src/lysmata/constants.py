# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants used across lysmata modules."""

from __future__ import annotations

from typing import Final

LAF_DIR_NAME: Final[str] = ".laf"
LOG_DIR_NAME: Final[str] = "logs"
REQUIREMENTS_HINT: Final[str] = "pip install -r {laf_dir}/requirements.txt"

DEFAULT_EXCLUDE_DIRS: Final[tuple[str, ...]] = (
    ".venv",
    "venv",
    ".git",
    "node_modules",
    "__pycache__",
)

# Directories never searched for ``requirements*.txt`` files.
REQUIREMENTS_EXCLUDE_DIRS: Final[frozenset[str]] = frozenset({".venv", "venv", LAF_DIR_NAME})
REQUIREMENTS_GLOB: Final[str] = "requirements*.txt"
REQUIREMENTS_MAX_DEPTH: Final[int] = 2

PYTHON_FAMILY_KEYS: Final[frozenset[str]] = frozenset({"python"})
SCRIPT_FAMILY_KEYS: Final[frozenset[str]] = frozenset({"typescript", "tsx", "javascript"})

FAILING_TOOL_THRESHOLD: Final[int] = 2
LARGE_EXCLUSION_THRESHOLD: Final[int] = 100
RECENT_RUN_LIMIT: Final[int] = 5

__all__ = [
    "DEFAULT_EXCLUDE_DIRS",
    "FAILING_TOOL_THRESHOLD",
    "LAF_DIR_NAME",
    "LARGE_EXCLUSION_THRESHOLD",
    "LOG_DIR_NAME",
    "PYTHON_FAMILY_KEYS",
    "RECENT_RUN_LIMIT",
    "REQUIREMENTS_EXCLUDE_DIRS",
    "REQUIREMENTS_GLOB",
    "REQUIREMENTS_HINT",
    "REQUIREMENTS_MAX_DEPTH",
    "SCRIPT_FAMILY_KEYS",
]
