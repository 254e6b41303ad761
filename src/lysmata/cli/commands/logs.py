# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI commands showing usage insights and clearing the run logs."""

from __future__ import annotations

from pathlib import Path

import typer

from ...reporting.insights import INSIGHTS_TITLE, NO_LOGS_MESSAGE, format_insights
from ...runlog.insights import build_insights
from ...runlog.lifecycle import clear_all
from ...runlog.models import RunLogError
from ..shared import COLOR_OPTION, EMOJI_OPTION, ROOT_OPTION, CLIError, CLILogger, build_cli_logger, resolve_config


def _log_dir(root: Path, logger: CLILogger) -> Path:
    try:
        config = resolve_config(root)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    return config.log_path(root)


def logs_command(
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
) -> None:
    """Show usage insights aggregated over every recorded run."""

    logger = build_cli_logger(emoji=emoji, no_color=not color)
    report = build_insights(_log_dir(root, logger))
    if report is None:
        logger.echo(NO_LOGS_MESSAGE)
        raise typer.Exit(code=0)

    logger.section(INSIGHTS_TITLE)
    logger.echo("")
    for line in format_insights(report):
        logger.echo(line)
    raise typer.Exit(code=0)


def logs_clear_command(
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
) -> None:
    """Delete every recorded run log."""

    logger = build_cli_logger(emoji=emoji, no_color=not color)
    try:
        removed = clear_all(_log_dir(root, logger))
    except RunLogError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc
    if removed:
        logger.ok("Logs cleared.")
    else:
        logger.echo("No logs to clear.")
    raise typer.Exit(code=0)


def register(app: typer.Typer) -> None:
    """Register the ``logs`` and ``logs-clear`` commands on ``app``."""

    app.command(name="logs")(logs_command)
    app.command(name="logs-clear")(logs_clear_command)


__all__ = ["logs_clear_command", "logs_command", "register"]
