# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command running every detected code-quality check."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType
from typing import Annotated, Final

import typer

from ...orchestrator import CheckRunner, ToolNotFoundError
from ...runlog.recorder import Recorder
from ..shared import (
    COLOR_OPTION,
    EMOJI_OPTION,
    ROOT_OPTION,
    CLIError,
    build_cli_logger,
    cli_overrides,
    resolve_config,
)

CHECK_TITLE: Final[str] = "Lysmata - Code Quality Check"

VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show detailed tool output for failing checks."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Print the commands being executed."),
]


def _raise_exit(signum: int, _frame: FrameType | None) -> None:
    raise SystemExit(128 + signum)


@contextmanager
def terminate_as_exit() -> Iterator[None]:
    """Turn ``SIGTERM`` into ``SystemExit`` so cleanup handlers still run."""

    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGTERM, _raise_exit)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def check_command(
    root: ROOT_OPTION = Path("."),
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Lint, format and security-scan the project, recording a run log."""

    try:
        config = resolve_config(root, **cli_overrides(verbose=verbose, emoji=emoji, color=color))
    except CLIError as exc:
        build_cli_logger(emoji=emoji).fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    logger = build_cli_logger(emoji=config.emoji, debug=debug, no_color=not config.color)

    laf_dir = config.laf_path(root)
    if not laf_dir.is_dir():
        logger.fail(f"Error: {laf_dir.name}/ directory not found")
        raise typer.Exit(code=1)

    logger.section(CHECK_TITLE)
    recorder = Recorder.start(config.log_path(root), root=root, on_disable=logger.warn)
    logger.debug(f"run_id={recorder.record.run_id} logging={recorder.enabled}")
    runner = CheckRunner(root, config, recorder, reporter=logger)
    with recorder, terminate_as_exit():
        try:
            summary = runner.run()
        except ToolNotFoundError as exc:
            logger.fail(f"Error: {exc}")
            logger.echo(f"Fix: {exc.hint}")
            raise typer.Exit(code=1) from exc

    logger.echo("")
    if summary.exit_code == 0:
        logger.ok("All checks passed")
    else:
        logger.fail("Issues found (run with --verbose for details)")
    raise typer.Exit(code=summary.exit_code)


def register(app: typer.Typer) -> None:
    """Register the ``check`` command on ``app``."""

    app.command(name="check")(check_command)


__all__ = ["CHECK_TITLE", "check_command", "register", "terminate_as_exit"]
