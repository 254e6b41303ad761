# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Registration hooks for every lysmata CLI command."""

from __future__ import annotations

import typer

from . import check, logs


def register_commands(app: typer.Typer) -> None:
    """Register all CLI commands on ``app``.

    Args:
        app: Typer application receiving the command registrations.
    """

    check.register(app)
    logs.register(app)


__all__ = ["register_commands"]
