# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; the wrapper never enables ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output and exit status of an external command."""

    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        """Return ``True`` when the command exited with status zero."""

        return self.returncode == 0


class CommandExecutor(Protocol):
    """Callable that runs ``args`` inside ``cwd`` and captures its output."""

    def __call__(self, args: Sequence[str], *, cwd: Path) -> CommandResult: ...


class ExecutableLocator(Protocol):
    """Callable returning the absolute path of ``name`` or ``None``."""

    def __call__(self, name: str) -> str | None: ...


def _normalize_args(args: Sequence[str]) -> list[str]:
    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def run_command(args: Sequence[str], *, cwd: Path) -> CommandResult:
    """Execute ``args`` in ``cwd`` and return its combined stdout/stderr.

    Failures to start the command are reported the way a shell would,
    instead of raising: 127 for a missing executable, 126 when the file
    exists but cannot be executed.
    """

    try:
        normalized = _normalize_args(args)
    except FileNotFoundError as exc:
        return CommandResult(returncode=127, output=str(exc))
    try:
        completed = subprocess.run(  # nosec B603
            normalized,
            cwd=str(cwd),
            check=False,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        return CommandResult(returncode=126, output=str(exc))
    return CommandResult(returncode=completed.returncode, output=completed.stdout or "")


def which(name: str) -> str | None:
    """Return the absolute path of ``name`` on ``PATH``."""

    return shutil.which(name)


__all__ = ["CommandExecutor", "CommandResult", "ExecutableLocator", "run_command", "which"]
