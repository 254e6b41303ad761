# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Catalog of the external tools run for each detected file category."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .discovery import FileCategory
from .process_utils import CommandExecutor, ExecutableLocator
from .runlog.status import ToolFamily

TYPESCRIPT: Final = FileCategory("typescript", ("*.ts",))
TSX: Final = FileCategory("tsx", ("*.tsx",))
JAVASCRIPT: Final = FileCategory("javascript", ("*.js",))
PYTHON: Final = FileCategory("python", ("*.py",))
YAML: Final = FileCategory("yaml", ("*.yaml", "*.yml"))
HTML: Final = FileCategory("html", ("*.html",))

SCRIPT_CATEGORIES: Final[tuple[FileCategory, ...]] = (TYPESCRIPT, TSX, JAVASCRIPT)
ALL_GLOBS: Final[tuple[str, ...]] = tuple(
    glob for category in (*SCRIPT_CATEGORIES, PYTHON, YAML, HTML) for glob in category.globs
)

PNPM_LOCKFILE: Final[str] = "pnpm-lock.yaml"
PYPROJECT: Final[str] = "pyproject.toml"
REQUIREMENTS_KEY: Final[str] = "requirements"
PYPROJECT_KEY: Final[str] = "pyproject"


@dataclass(frozen=True, slots=True)
class ToolCheck:
    """One external command and how its exit status is interpreted.

    Attributes:
        name: Tool key recorded in the run log (``ruff:check``).
        family: Status family used to map the exit status.
        command: Argument vector executed from the project root.
        quiet_args: Extra arguments appended unless running verbosely.
        target: Display label for the files processed (``N files`` when unset).
        files: File count recorded for the execution, when not the stage total.
    """

    name: str
    family: ToolFamily
    command: tuple[str, ...]
    quiet_args: tuple[str, ...] = ()
    target: str | None = None
    files: int | None = None

    def argv(self, *, verbose: bool) -> tuple[str, ...]:
        """Return the command line for the requested verbosity."""

        return self.command if verbose else (*self.command, *self.quiet_args)


VersionProbe = Callable[[str], bool]


def select_package_manager(root: Path, which: ExecutableLocator) -> str | None:
    """Return ``pnpm`` when installed and locked, else ``npm``, else ``None``."""

    if which("pnpm") and (root / PNPM_LOCKFILE).is_file():
        return "pnpm"
    if which("npm"):
        return "npm"
    return None


def package_probe(package_manager: str, root: Path, executor: CommandExecutor) -> VersionProbe:
    """Return a probe reporting whether ``<pm> exec <tool> --version`` succeeds."""

    def probe(tool: str) -> bool:
        return executor((package_manager, "exec", tool, "--version"), cwd=root).ok

    return probe


def script_checks(package_manager: str, probe: VersionProbe) -> list[ToolCheck]:
    """Return prettier, eslint and tsc checks available through ``package_manager``."""

    pm = package_manager
    checks: list[ToolCheck] = []
    if probe("prettier"):
        checks.append(
            ToolCheck(
                "prettier",
                ToolFamily.FORMATTER,
                (pm, "exec", "prettier", "--write", "**/*.{ts,tsx,js,json}", "--log-level=error"),
            )
        )
    if probe("eslint"):
        checks.append(ToolCheck("eslint:fix", ToolFamily.FORMATTER, (pm, "exec", "eslint", "--fix", ".", "--quiet")))
        checks.append(ToolCheck("eslint:check", ToolFamily.CHECKER, (pm, "exec", "eslint", "."), ("--quiet",)))
    if probe("tsc"):
        checks.append(
            ToolCheck("tsc", ToolFamily.CHECKER, (pm, "exec", "tsc", "--noEmit"), target="type checking")
        )
    return checks


def python_checks(laf_dir: Path) -> list[ToolCheck]:
    """Return the ruff fix, format and check steps."""

    config = str(laf_dir / "ruff.toml")
    return [
        ToolCheck("ruff:fix", ToolFamily.FORMATTER, ("ruff", "check", "--config", config, "--fix", "--quiet", ".")),
        ToolCheck("ruff:format", ToolFamily.FORMATTER, ("ruff", "format", "--config", config, "--quiet", ".")),
        ToolCheck("ruff:check", ToolFamily.CHECKER, ("ruff", "check", "--config", config, "."), ("--quiet",)),
    ]


def yaml_checks(laf_dir: Path) -> list[ToolCheck]:
    """Return the yamllint step."""

    return [ToolCheck("yamllint", ToolFamily.CHECKER, ("yamllint", "-c", str(laf_dir / "yamllint.yaml"), "."))]


def html_checks(laf_dir: Path) -> list[ToolCheck]:
    """Return the curlylint step."""

    return [
        ToolCheck("curlylint", ToolFamily.CHECKER, ("curlylint", "--config", str(laf_dir / "curlylint.toml"), "."))
    ]


def dependency_checks(requirement_files: Sequence[Path]) -> list[ToolCheck]:
    """Return one pip-audit step per requirements file, or one for ``pyproject.toml``."""

    spinner_off = ("--progress-spinner=off",)
    if not requirement_files:
        return [ToolCheck("pip-audit", ToolFamily.AUDITOR, ("pip-audit",), spinner_off, target=PYPROJECT, files=1)]
    return [
        ToolCheck(
            "pip-audit",
            ToolFamily.AUDITOR,
            ("pip-audit", "-r", str(path)),
            spinner_off,
            target=str(path),
            files=1,
        )
        for path in requirement_files
    ]


__all__ = [
    "ALL_GLOBS",
    "HTML",
    "JAVASCRIPT",
    "PYPROJECT",
    "PYPROJECT_KEY",
    "PYTHON",
    "REQUIREMENTS_KEY",
    "SCRIPT_CATEGORIES",
    "TSX",
    "TYPESCRIPT",
    "ToolCheck",
    "VersionProbe",
    "YAML",
    "dependency_checks",
    "html_checks",
    "package_probe",
    "python_checks",
    "script_checks",
    "select_package_manager",
    "yaml_checks",
]
