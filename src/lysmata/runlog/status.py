# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Closed status vocabulary recorded for tool executions."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Final

from .models import ToolExecution

STATUS_DONE: Final[str] = "done"
STATUS_OK: Final[str] = "ok"
STATUS_ISSUES: Final[str] = "issues"
STATUS_VULNERABILITIES: Final[str] = "vulnerabilities"

SUCCESS_STATUSES: Final[frozenset[str]] = frozenset({STATUS_OK, STATUS_DONE})
FAILURE_STATUSES: Final[frozenset[str]] = frozenset({STATUS_ISSUES, STATUS_VULNERABILITIES})


class ToolFamily(str, Enum):
    """Describe how a tool's exit status maps onto a recorded status."""

    FORMATTER = "formatter"
    CHECKER = "checker"
    AUDITOR = "auditor"


class StatusClass(str, Enum):
    """Success classification used by the exit code and the insights report."""

    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


_CLEAN_STATUS: Final[dict[ToolFamily, str]] = {
    ToolFamily.FORMATTER: STATUS_DONE,
    ToolFamily.CHECKER: STATUS_OK,
    ToolFamily.AUDITOR: STATUS_OK,
}
_DIRTY_STATUS: Final[dict[ToolFamily, str]] = {
    # A non-zero exit from a formatter means it rewrote files.
    ToolFamily.FORMATTER: STATUS_DONE,
    ToolFamily.CHECKER: STATUS_ISSUES,
    ToolFamily.AUDITOR: STATUS_VULNERABILITIES,
}


def status_for(family: ToolFamily, returncode: int) -> str:
    """Return the recorded status for a ``family`` tool exiting with ``returncode``."""

    return _CLEAN_STATUS[family] if returncode == 0 else _DIRTY_STATUS[family]


def classify_status(status: str) -> StatusClass:
    """Return the success classification of ``status``.

    Unrecognised statuses are never credited as success.
    """

    if status in SUCCESS_STATUSES:
        return StatusClass.SUCCESS
    if status in FAILURE_STATUSES:
        return StatusClass.FAILURE
    return StatusClass.UNKNOWN


def exit_code_for(executions: Iterable[ToolExecution]) -> int:
    """Return ``0`` when every execution succeeded, otherwise ``1``."""

    return 0 if all(classify_status(entry.status) is StatusClass.SUCCESS for entry in executions) else 1


__all__ = [
    "FAILURE_STATUSES",
    "STATUS_DONE",
    "STATUS_ISSUES",
    "STATUS_OK",
    "STATUS_VULNERABILITIES",
    "SUCCESS_STATUSES",
    "StatusClass",
    "ToolFamily",
    "classify_status",
    "exit_code_for",
    "status_for",
]
