# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-run telemetry records, their store and the cross-run insights."""

from __future__ import annotations

from .insights import (
    Corpus,
    ExclusionStat,
    InsightsReport,
    LanguageStat,
    RecentRun,
    ToolStat,
    build_insights,
    compute_insights,
    load_corpus,
)
from .lifecycle import clear_all
from .models import DetectionEntry, RunLogError, RunRecord, ToolExecution
from .recorder import Recorder, finalize
from .status import StatusClass, ToolFamily, classify_status, exit_code_for, status_for
from .store import RunRecordStore, new_run_id

__all__ = [
    "Corpus",
    "DetectionEntry",
    "ExclusionStat",
    "InsightsReport",
    "LanguageStat",
    "RecentRun",
    "Recorder",
    "RunLogError",
    "RunRecord",
    "RunRecordStore",
    "StatusClass",
    "ToolExecution",
    "ToolFamily",
    "ToolStat",
    "build_insights",
    "classify_status",
    "clear_all",
    "compute_insights",
    "exit_code_for",
    "finalize",
    "load_corpus",
    "new_run_id",
    "status_for",
]
