# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Text rendering for lysmata reports."""

from __future__ import annotations

from .insights import NO_LOGS_MESSAGE, format_insights

__all__ = ["NO_LOGS_MESSAGE", "format_insights"]
