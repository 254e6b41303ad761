# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from lysmata.logging import reset_consoles

RunLogWriter = Callable[..., Path]


@pytest.fixture(autouse=True)
def _fresh_consoles() -> Iterator[None]:
    """Keep cached Rich consoles from leaking between CliRunner invocations."""

    reset_consoles()
    yield
    reset_consoles()


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Return the run-log directory of a throwaway project."""

    return tmp_path / ".laf" / "logs"


@pytest.fixture
def write_run_log(log_dir: Path) -> RunLogWriter:
    """Return a helper persisting a run log document the way the store does."""

    def _write(
        run_id: str,
        *,
        timestamp: str = "2025-01-01T00:00:00Z",
        project: str = "demo",
        detection: Mapping[str, tuple[int, str]] | None = None,
        tools: Sequence[tuple[str, str]] = (),
        exclusions: Mapping[str, int] | None = None,
        duration_sec: float | None = 1.0,
        exit_code: int | None = 0,
    ) -> Path:
        payload: dict[str, Any] = {
            "run_id": run_id,
            "timestamp": timestamp,
            "project": project,
            "cwd": f"/work/{project}",
            "detection": {
                language: {"count": count, "pattern": pattern}
                for language, (count, pattern) in (detection or {}).items()
            },
            "tools": [
                {"tool": tool, "status": status, "files": 1, "duration_sec": 0.5} for tool, status in tools
            ],
            "exclusions": dict(exclusions or {}),
            "duration_sec": duration_sec,
            "exit_code": exit_code,
        }
        log_dir.mkdir(parents=True, exist_ok=True)
        path = log_dir / f"{run_id}.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
