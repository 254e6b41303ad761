# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""End-to-end tests for the lysmata command line."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

from typer.testing import CliRunner

from lysmata.cli.app import app
from lysmata.cli.shared import CLILogger


def _invoke(*args: str):
    runner = CliRunner()
    return runner.invoke(app, [*args, "--no-emoji", "--no-color"])


def test_logs_without_history(tmp_path: Path) -> None:
    result = _invoke("logs", "--root", str(tmp_path))

    assert result.exit_code == 0
    assert "No logs found. Run `lysmata check` first." in result.stdout


def test_logs_renders_insights(tmp_path: Path, write_run_log: Callable[..., Path]) -> None:
    write_run_log("a", detection={"python": (2, "*.py")}, tools=[("ruff:check", "ok")])
    write_run_log("b", detection={"python": (4, "*.py")}, tools=[("ruff:check", "ok")])
    write_run_log("c", detection={"python": (6, "*.py")}, tools=[("ruff:check", "issues")])

    result = _invoke("logs", "--root", str(tmp_path))

    assert result.exit_code == 0
    assert "Lysmata Usage Insights" in result.stdout
    assert "Total runs logged: 3" in result.stdout
    assert "python: 3 runs, avg 4 files" in result.stdout
    assert "ruff:check: 2/3 success" in result.stdout
    assert "Nothing to report" in result.stdout


def test_logs_clear_is_idempotent(tmp_path: Path, log_dir: Path, write_run_log: Callable[..., Path]) -> None:
    write_run_log("a")

    first = _invoke("logs-clear", "--root", str(tmp_path))
    second = _invoke("logs-clear", "--root", str(tmp_path))

    assert first.exit_code == 0
    assert "Logs cleared." in first.stdout
    assert not log_dir.exists()
    assert second.exit_code == 0
    assert "No logs to clear." in second.stdout


def test_check_requires_laf_directory(tmp_path: Path) -> None:
    result = _invoke("check", "--root", str(tmp_path))

    assert result.exit_code == 1
    assert "Error: .laf/ directory not found" in result.stdout
    assert not (tmp_path / ".laf").exists()


def test_check_on_project_without_sources_records_a_run(tmp_path: Path, log_dir: Path) -> None:
    (tmp_path / ".laf").mkdir()
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")

    result = _invoke("check", "--root", str(tmp_path))

    assert result.exit_code == 0
    assert "Lysmata - Code Quality Check" in result.stdout
    assert "All checks passed" in result.stdout
    logs = sorted(log_dir.glob("*.json"))
    assert len(logs) == 1
    document = json.loads(logs[0].read_text(encoding="utf-8"))
    assert document["exit_code"] == 0
    assert document["project"] == tmp_path.name
    assert [path for path in log_dir.iterdir() if path.name.startswith(".tmp-")] == []


def test_check_rejects_invalid_configuration(tmp_path: Path) -> None:
    (tmp_path / ".laf").mkdir()
    (tmp_path / "pyproject.toml").write_text("[tool.lysmata]\nunknown = 1\n", encoding="utf-8")

    result = _invoke("check", "--root", str(tmp_path))

    assert result.exit_code == 1
    assert "Invalid [tool.lysmata] configuration" in result.stdout


def test_logger_methods_document_their_arguments() -> None:
    for name in ("fail", "warn", "ok", "section", "echo"):
        doc = getattr(CLILogger, name).__doc__
        assert doc is not None
        assert "Args:" in doc
