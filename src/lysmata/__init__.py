# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lysmata: offline code-quality checks with per-run usage insights."""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
