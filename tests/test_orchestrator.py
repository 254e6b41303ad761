# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the check runner that drives the external tools."""

from __future__ import annotations

import json
import os
import signal
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from lysmata.cli.commands.check import terminate_as_exit
from lysmata.config import LysmataConfig
from lysmata.orchestrator import CheckRunner, ToolNotFoundError
from lysmata.process_utils import CommandResult
from lysmata.runlog.recorder import Recorder

Responder = Callable[[tuple[str, ...]], CommandResult]


@dataclass
class FakeReporter:
    lines: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def echo(self, message: str) -> None:
        self.lines.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def debug(self, message: str) -> None:
        del message


@dataclass
class FakeExecutor:
    respond: Responder = lambda argv: CommandResult(0)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def __call__(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        argv = tuple(args)
        self.calls.append(argv)
        return self.respond(argv)


def locator(*installed: str) -> Callable[[str], str | None]:
    available = set(installed)
    return lambda name: f"/usr/bin/{name}" if name in available else None


def _project(root: Path, *relatives: str) -> Path:
    (root / ".laf").mkdir(exist_ok=True)
    for relative in relatives:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
    return root


def _runner(
    root: Path,
    recorder: Recorder,
    *,
    installed: Iterable[str] = (),
    executor: FakeExecutor | None = None,
    reporter: FakeReporter | None = None,
    verbose: bool = False,
) -> CheckRunner:
    return CheckRunner(
        root,
        LysmataConfig(verbose=verbose),
        recorder,
        reporter=reporter or FakeReporter(),
        executor=executor or FakeExecutor(),
        locate=locator(*installed),
    )


def _ruff_check_fails(argv: tuple[str, ...]) -> CommandResult:
    if argv[:2] == ("ruff", "check") and "--fix" not in argv:
        return CommandResult(1, "app.py:1:1: F401 unused import")
    return CommandResult(0)


def test_python_project_runs_ruff_and_persists_log(tmp_path: Path, log_dir: Path) -> None:
    root = _project(tmp_path, "app.py", "pkg/mod.py", ".venv/lib/site.py")
    reporter = FakeReporter()
    with Recorder.start(log_dir, root=root, run_id="python-run") as recorder:
        summary = _runner(
            root,
            recorder,
            installed=["ruff"],
            executor=FakeExecutor(_ruff_check_fails),
            reporter=reporter,
        ).run()

    assert summary.exit_code == 1
    assert summary.logged
    assert [(entry.tool, entry.status, entry.files) for entry in summary.record.tool_executions] == [
        ("ruff:fix", "done", 2),
        ("ruff:format", "done", 2),
        ("ruff:check", "issues", 2),
    ]
    assert reporter.lines == [
        "[ruff:fix] 2 files... DONE",
        "[ruff:format] 2 files... DONE",
        "[ruff:check] 2 files... ISSUES",
    ]

    document = json.loads((log_dir / "python-run.json").read_text(encoding="utf-8"))
    assert document["detection"] == {"python": {"count": 2, "pattern": "*.py"}}
    assert document["exclusions"] == {".venv": 1}
    assert document["exit_code"] == 1
    assert document["duration_sec"] >= 0


def test_quiet_arguments_are_dropped_in_verbose_mode(tmp_path: Path) -> None:
    root = _project(tmp_path, "app.py")
    reporter = FakeReporter()
    executor = FakeExecutor(_ruff_check_fails)

    runner = _runner(
        root,
        Recorder.disabled(root=root),
        installed=["ruff"],
        executor=executor,
        reporter=reporter,
        verbose=True,
    )
    runner.run()

    check_call = executor.calls[-1]
    assert check_call[:2] == ("ruff", "check")
    assert "--quiet" not in check_call
    assert "app.py:1:1: F401 unused import" in reporter.lines


def test_missing_required_tool_aborts_with_sealed_log(tmp_path: Path, log_dir: Path) -> None:
    root = _project(tmp_path, "app.py")
    with Recorder.start(log_dir, root=root, run_id="missing") as recorder:
        runner = _runner(root, recorder)
        with pytest.raises(ToolNotFoundError) as excinfo:
            runner.run()

    assert excinfo.value.executable == "ruff"
    assert "requirements.txt" in excinfo.value.hint
    document = json.loads((log_dir / "missing.json").read_text(encoding="utf-8"))
    assert document["exit_code"] == 1
    assert document["tools"] == []


def test_script_files_without_package_manager_warn(tmp_path: Path) -> None:
    root = _project(tmp_path, "web/app.ts", "web/view.tsx", "web/legacy.js")
    reporter = FakeReporter()
    recorder = Recorder.disabled(root=root)

    summary = _runner(root, recorder, reporter=reporter).run()

    assert summary.exit_code == 0
    assert summary.record.tool_executions == ()
    assert {key: entry.count for key, entry in summary.record.detections.items()} == {
        "typescript": 1,
        "tsx": 1,
        "javascript": 1,
    }
    assert len(reporter.warnings) == 1
    assert "3 TS/JS files found" in reporter.warnings[0]


def test_script_tools_run_only_when_resolvable(tmp_path: Path) -> None:
    root = _project(tmp_path, "src/index.ts", "src/util.ts")

    def respond(argv: tuple[str, ...]) -> CommandResult:
        if argv == ("npm", "exec", "eslint", "--version"):
            return CommandResult(1)
        if argv[:3] == ("npm", "exec", "tsc") and "--version" not in argv:
            return CommandResult(2, "error TS2322")
        return CommandResult(0)

    reporter = FakeReporter()
    summary = _runner(
        root,
        Recorder.disabled(root=root),
        installed=["npm"],
        executor=FakeExecutor(respond),
        reporter=reporter,
    ).run()

    assert [(entry.tool, entry.status, entry.files) for entry in summary.record.tool_executions] == [
        ("prettier", "done", 2),
        ("tsc", "issues", 2),
    ]
    assert "[tsc] type checking... ISSUES" in reporter.lines
    assert summary.exit_code == 1


def test_pnpm_requires_lockfile(tmp_path: Path) -> None:
    root = _project(tmp_path, "index.js")
    executor = FakeExecutor()

    _runner(root, Recorder.disabled(root=root), installed=["pnpm", "npm"], executor=executor).run()
    assert {call[0] for call in executor.calls} == {"npm"}

    (root / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    executor = FakeExecutor()
    _runner(root, Recorder.disabled(root=root), installed=["pnpm", "npm", "yamllint"], executor=executor).run()
    assert "pnpm" in {call[0] for call in executor.calls}


def test_requirements_are_audited_individually(tmp_path: Path) -> None:
    root = _project(tmp_path, "requirements.txt", "service/requirements-dev.txt")

    def respond(argv: tuple[str, ...]) -> CommandResult:
        return CommandResult(1) if "service/requirements-dev.txt" in argv else CommandResult(0)

    reporter = FakeReporter()
    summary = _runner(
        root,
        Recorder.disabled(root=root),
        installed=["pip-audit"],
        executor=FakeExecutor(respond),
        reporter=reporter,
    ).run()

    assert [(entry.tool, entry.status, entry.files) for entry in summary.record.tool_executions] == [
        ("pip-audit", "ok", 1),
        ("pip-audit", "vulnerabilities", 1),
    ]
    assert summary.record.detections["requirements"].count == 2
    assert "[pip-audit] requirements.txt... OK" in reporter.lines
    assert summary.exit_code == 1


def test_pyproject_is_audited_without_requirements(tmp_path: Path) -> None:
    root = _project(tmp_path, "pyproject.toml")
    executor = FakeExecutor()

    summary = _runner(root, Recorder.disabled(root=root), installed=["pip-audit"], executor=executor).run()

    assert executor.calls == [("pip-audit", "--progress-spinner=off")]
    assert summary.record.detections["pyproject"].count == 1
    assert summary.exit_code == 0


def test_exclusion_totals_accumulate_across_stages(tmp_path: Path) -> None:
    root = _project(tmp_path, "app.py", "config.yaml", ".venv/a.py", ".venv/b.yml", ".venv/c.yaml")

    summary = _runner(root, Recorder.disabled(root=root), installed=["ruff", "yamllint"]).run()

    assert summary.record.exclusions == {".venv": 3}
    assert summary.exit_code == 0


def test_empty_project_succeeds_without_tools(tmp_path: Path) -> None:
    root = _project(tmp_path, "README.md")
    executor = FakeExecutor()

    summary = _runner(root, Recorder.disabled(root=root), executor=executor).run()

    assert summary.exit_code == 0
    assert executor.calls == []
    assert summary.record.exit_code == 0


def test_sigterm_during_a_tool_seals_the_log_and_releases_scratch(tmp_path: Path, log_dir: Path) -> None:
    root = _project(tmp_path, "app.py")

    def terminate(argv: tuple[str, ...]) -> CommandResult:
        os.kill(os.getpid(), signal.SIGTERM)
        return CommandResult(0)

    handler = signal.getsignal(signal.SIGTERM)
    recorder = Recorder.start(log_dir, root=root, run_id="terminated")
    scratch_dirs = list(log_dir.glob(".tmp-terminated-*"))
    assert len(scratch_dirs) == 1

    with pytest.raises(SystemExit) as excinfo:
        with recorder, terminate_as_exit():
            _runner(root, recorder, installed=["ruff"], executor=FakeExecutor(terminate)).run()

    assert excinfo.value.code == 128 + signal.SIGTERM
    document = json.loads((log_dir / "terminated.json").read_text(encoding="utf-8"))
    assert document["exit_code"] == 1
    assert document["tools"] == []
    assert not scratch_dirs[0].exists()
    assert signal.getsignal(signal.SIGTERM) == handler
