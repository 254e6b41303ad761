# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run every applicable tool for a project and record the run log."""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .config import LysmataConfig
from .constants import REQUIREMENTS_GLOB, REQUIREMENTS_HINT
from .discovery import FileCategory, ProjectScan, build_exclusions, find_requirement_files, scan_project
from .process_utils import CommandExecutor, ExecutableLocator, run_command, which
from .runlog.models import RunLogError, RunRecord
from .runlog.recorder import Recorder
from .runlog.status import StatusClass, classify_status, status_for
from .tools import (
    ALL_GLOBS,
    HTML,
    PYPROJECT,
    PYPROJECT_KEY,
    PYTHON,
    REQUIREMENTS_KEY,
    SCRIPT_CATEGORIES,
    YAML,
    ToolCheck,
    dependency_checks,
    html_checks,
    package_probe,
    python_checks,
    script_checks,
    select_package_manager,
    yaml_checks,
)


class CheckReporter(Protocol):
    """Sink for the progress lines printed while checks run."""

    def echo(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...


class ToolNotFoundError(RuntimeError):
    """Raised when a tool required by a detected file type is not installed."""

    def __init__(self, executable: str, *, hint: str) -> None:
        super().__init__(f"{executable} not found")
        self.executable = executable
        self.hint = hint


@dataclass(frozen=True, slots=True)
class CheckSummary:
    """Final state of a check run."""

    exit_code: int
    record: RunRecord
    logged: bool


class CheckRunner:
    """Detect file types under ``root``, run their tools and record the outcomes.

    The run log is sealed in every case, including when a required tool is
    missing and the run aborts early.
    """

    def __init__(
        self,
        root: Path,
        config: LysmataConfig,
        recorder: Recorder,
        *,
        reporter: CheckReporter,
        executor: CommandExecutor = run_command,
        locate: ExecutableLocator = which,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._root = root
        self._config = config
        self._recorder = recorder
        self._reporter = reporter
        self._executor = executor
        self._locate = locate
        self._clock = clock
        self._exclusions = build_exclusions(config.exclude_dirs)
        self._excluded_totals: Counter[str] = Counter()

    @property
    def recorder(self) -> Recorder:
        """Return the recorder collecting this run's telemetry."""

        return self._recorder

    def run(self) -> CheckSummary:
        """Execute every stage and return the run's exit status.

        Raises:
            ToolNotFoundError: If a detected file type needs a missing tool.
        """

        exit_code = 1
        try:
            scan = scan_project(self._root, ALL_GLOBS, self._exclusions)
            self._run_script_stage(scan)
            self._run_python_stage(scan)
            self._run_simple_stage(scan, YAML, "yamllint", yaml_checks)
            self._run_simple_stage(scan, HTML, "curlylint", html_checks)
            self._run_dependency_stage()
            exit_code = self._recorder.exit_code()
        finally:
            self._seal(exit_code)
        return CheckSummary(exit_code=exit_code, record=self._recorder.record, logged=self._recorder.enabled)

    def _run_script_stage(self, scan: ProjectScan) -> None:
        globs = [glob for category in SCRIPT_CATEGORIES for glob in category.globs]
        if not scan.has_files(globs):
            return
        total = scan.count(globs)
        for category in SCRIPT_CATEGORIES:
            self._recorder.record_detection(category.language, scan.count(category.globs), category.pattern)
        self._record_exclusions(scan, globs)

        package_manager = select_package_manager(self._root, self._locate)
        if package_manager is None:
            self._reporter.warn(
                f"[ts/js] {total} TS/JS files found but no package manager (npm/pnpm) available; "
                "install npm or pnpm to enable linting and formatting"
            )
            return
        probe = package_probe(package_manager, self._root, self._executor)
        self._run_checks(script_checks(package_manager, probe), files=total)

    def _run_python_stage(self, scan: ProjectScan) -> None:
        if not scan.has_files(PYTHON.globs):
            return
        self._require("ruff")
        count = scan.count(PYTHON.globs)
        self._recorder.record_detection(PYTHON.language, count, PYTHON.pattern)
        self._record_exclusions(scan, PYTHON.globs)
        self._run_checks(python_checks(self._laf_dir), files=count)

    def _run_simple_stage(
        self,
        scan: ProjectScan,
        category: FileCategory,
        executable: str,
        build: Callable[[Path], list[ToolCheck]],
    ) -> None:
        if not scan.has_files(category.globs):
            return
        self._require(executable)
        count = scan.count(category.globs)
        self._recorder.record_detection(category.language, count, category.pattern)
        self._record_exclusions(scan, category.globs)
        self._run_checks(build(self._laf_dir), files=count)

    def _run_dependency_stage(self) -> None:
        requirement_files = find_requirement_files(self._root)
        if requirement_files:
            self._require("pip-audit")
            self._recorder.record_detection(REQUIREMENTS_KEY, len(requirement_files), REQUIREMENTS_GLOB)
        elif (self._root / PYPROJECT).is_file():
            self._require("pip-audit")
            self._recorder.record_detection(PYPROJECT_KEY, 1, PYPROJECT)
        else:
            return
        self._run_checks(dependency_checks(requirement_files), files=1)

    def _run_checks(self, checks: Sequence[ToolCheck], *, files: int) -> None:
        for check in checks:
            self._run_check(check, files=files)

    def _run_check(self, check: ToolCheck, *, files: int) -> None:
        verbose = self._config.verbose
        argv = check.argv(verbose=verbose)
        self._reporter.debug(f"tool={check.name} cmd={' '.join(argv)}")
        started = self._clock()
        result = self._executor(argv, cwd=self._root)
        duration = round(max(self._clock() - started, 0.0), 2)
        status = status_for(check.family, result.returncode)

        label = check.target or f"{files} files"
        self._reporter.echo(f"[{check.name}] {label}... {status.upper()}")
        if verbose and classify_status(status) is StatusClass.FAILURE and result.output.strip():
            self._reporter.echo(result.output.rstrip())
            self._reporter.echo("")
        self._recorder.record_tool(check.name, status, files if check.files is None else check.files, duration)

    def _record_exclusions(self, scan: ProjectScan, globs: Sequence[str]) -> None:
        for glob in globs:
            for directory, count in scan.excluded_counts([glob]).items():
                if count <= 0:
                    continue
                self._excluded_totals[directory] += count
                self._recorder.record_exclusion(directory, self._excluded_totals[directory])

    def _require(self, executable: str) -> None:
        if self._locate(executable) is None:
            hint = REQUIREMENTS_HINT.format(laf_dir=self._laf_dir)
            raise ToolNotFoundError(executable, hint=hint)

    def _seal(self, exit_code: int) -> None:
        try:
            self._recorder.finalize(exit_code)
        except RunLogError as exc:
            self._reporter.warn(f"Unable to finalize run log: {exc}")

    @property
    def _laf_dir(self) -> Path:
        return self._config.laf_path(self._root)


__all__ = ["CheckReporter", "CheckRunner", "CheckSummary", "ToolNotFoundError"]
