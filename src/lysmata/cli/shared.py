# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Console adapter, error type and option aliases shared by every command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Final

import typer
from rich.console import Console
from rich.text import Text

from ..config import ConfigError, LysmataConfig, load_config
from ..logging import fail as core_fail
from ..logging import ok as core_ok
from ..logging import section as core_section
from ..logging import warn as core_warn

DEBUG_PREFIX: Final[str] = "[debug] "


class CLIError(RuntimeError):
    """A command failure carrying the process exit status to report."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Route command output through the console helpers with the run's output flags.

    The orchestrator only sees the ``echo``/``warn``/``debug`` trio, so this
    class doubles as its progress reporter.
    """

    console: Console
    use_emoji: bool
    use_color: bool = True
    debug_enabled: bool = False

    def fail(self, message: str) -> None:
        """Print an error line.

        Args:
            message: Text shown after the failure marker.
        """

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Print a warning line; also receives the recorder's disable notice.

        Args:
            message: Text shown after the warning marker.
        """

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Print a success line.

        Args:
            message: Text shown after the success marker.
        """

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def section(self, title: str) -> None:
        """Print a heading that separates output blocks.

        Args:
            title: Heading text.
        """

        core_section(title, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Write an unstyled line to stdout.

        Args:
            message: Line written verbatim.
        """

        typer.echo(message)

    def debug(self, message: str) -> None:
        """Print ``message`` when ``--debug`` is active.

        Whitespace-separated ``key=value`` tokens get the key and value styled
        separately; everything else is dimmed.
        """

        if not self.debug_enabled:
            return
        text = Text(DEBUG_PREFIX, style="bold cyan")
        for index, token in enumerate(message.split(" ")):
            if index:
                text.append(" ")
            key, sep, value = token.partition("=")
            if sep and key:
                text.append(key, style="bold magenta")
                text.append(sep, style="dim")
                text.append(value, style="bold green")
            else:
                text.append(token, style="dim")
        self.console.print(text)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` writing debug lines to its own Rich console."""

    console = Console(no_color=no_color, highlight=False, soft_wrap=True)
    return CLILogger(console=console, use_emoji=emoji, use_color=not no_color, debug_enabled=debug)


def cli_overrides(*, verbose: bool = False, emoji: bool = True, color: bool = True) -> dict[str, bool]:
    """Return the output flags that differ from their defaults.

    Flags left at their default do not override ``[tool.lysmata]`` values.
    """

    overrides: dict[str, bool] = {}
    if verbose:
        overrides["verbose"] = True
    if not emoji:
        overrides["emoji"] = False
    if not color:
        overrides["color"] = False
    return overrides


def resolve_config(root: Path, **overrides: object) -> LysmataConfig:
    """Load configuration for ``root``, translating failures into ``CLIError``.

    Raises:
        CLIError: If ``[tool.lysmata]`` is invalid.
    """

    try:
        return load_config(root, **overrides)
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc


ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root.", file_okay=False, resolve_path=True),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]

__all__: Final = [
    "CLIError",
    "CLILogger",
    "COLOR_OPTION",
    "EMOJI_OPTION",
    "ROOT_OPTION",
    "build_cli_logger",
    "cli_overrides",
    "resolve_config",
]
