# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cross-run statistics and advisories computed over persisted run logs."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from ..constants import (
    FAILING_TOOL_THRESHOLD,
    LARGE_EXCLUSION_THRESHOLD,
    PYTHON_FAMILY_KEYS,
    RECENT_RUN_LIMIT,
    SCRIPT_FAMILY_KEYS,
)
from .models import RunRecord
from .status import StatusClass, classify_status
from .store import RECORD_SUFFIX

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Corpus:
    """Run logs that parsed successfully plus the files that did not."""

    records: tuple[RunRecord, ...] = ()
    skipped: tuple[Path, ...] = ()

    @property
    def empty(self) -> bool:
        """Return ``True`` when no valid run log was found."""

        return not self.records


@dataclass(frozen=True, slots=True)
class LanguageStat:
    """How often a language was detected and its typical file count."""

    language: str
    runs: int
    avg_files: int


@dataclass(frozen=True, slots=True)
class ToolStat:
    """Outcome counts for one tool across the corpus."""

    tool: str
    successes: int
    failures: int
    total: int

    @property
    def ratio(self) -> float:
        """Return ``successes / total``."""

        return self.successes / self.total if self.total else 0.0


@dataclass(frozen=True, slots=True)
class ExclusionStat:
    """Total number of files skipped under one exclusion directory."""

    pattern: str
    total: int


@dataclass(frozen=True, slots=True)
class RecentRun:
    """Short summary of one recent run."""

    date: str
    project: str
    duration_seconds: float | None
    exit_code: int | None


@dataclass(frozen=True, slots=True)
class InsightsReport:
    """Aggregated view over every valid run log."""

    run_count: int
    languages: tuple[LanguageStat, ...] = ()
    tools: tuple[ToolStat, ...] = ()
    exclusions: tuple[ExclusionStat, ...] = ()
    advisories: tuple[str, ...] = ()
    recent: tuple[RecentRun, ...] = ()
    skipped: tuple[Path, ...] = field(default=())

    def tool(self, name: str) -> ToolStat | None:
        """Return the statistics for ``name`` when it appears in the corpus."""

        return next((stat for stat in self.tools if stat.tool == name), None)

    def language(self, name: str) -> LanguageStat | None:
        """Return the detection statistics for ``name`` when present."""

        return next((stat for stat in self.languages if stat.language == name), None)


def iter_log_files(log_dir: Path) -> list[Path]:
    """Return the run-log documents directly under ``log_dir``, sorted by name."""

    if not log_dir.is_dir():
        return []
    return sorted(path for path in log_dir.glob(f"*{RECORD_SUFFIX}") if path.is_file())


def load_corpus(log_dir: Path) -> Corpus:
    """Load every parseable run log in ``log_dir``.

    Unreadable or invalid documents are skipped and reported through
    :attr:`Corpus.skipped`; they never abort the load.
    """

    records: list[RunRecord] = []
    skipped: list[Path] = []
    for path in iter_log_files(log_dir):
        try:
            records.append(RunRecord.from_json(path.read_bytes()))
        except (OSError, ValidationError) as exc:
            LOGGER.debug("skipping unreadable run log path=%s error=%s", path, exc)
            skipped.append(path)
    return Corpus(records=tuple(records), skipped=tuple(skipped))


def compute_insights(corpus: Corpus) -> InsightsReport | None:
    """Fold ``corpus`` into an :class:`InsightsReport`.

    Returns:
        InsightsReport | None: ``None`` when the corpus holds no valid run log.
    """

    if corpus.empty:
        return None
    records = corpus.records
    languages = _language_stats(records)
    tools = _tool_stats(records)
    exclusions = _exclusion_stats(records)
    return InsightsReport(
        run_count=len(records),
        languages=languages,
        tools=tools,
        exclusions=exclusions,
        advisories=_advisories(records, tools, exclusions),
        recent=_recent_runs(records),
        skipped=corpus.skipped,
    )


def build_insights(log_dir: Path) -> InsightsReport | None:
    """Load the corpus under ``log_dir`` and compute its insights."""

    return compute_insights(load_corpus(log_dir))


def _language_stats(records: Sequence[RunRecord]) -> tuple[LanguageStat, ...]:
    runs: dict[str, int] = defaultdict(int)
    files: dict[str, int] = defaultdict(int)
    for record in records:
        for language, entry in record.detections.items():
            runs[language] += 1
            files[language] += entry.count
    stats = [LanguageStat(language=key, runs=runs[key], avg_files=files[key] // runs[key]) for key in runs]
    return tuple(sorted(stats, key=lambda stat: (-stat.runs, stat.language)))


def _tool_stats(records: Sequence[RunRecord]) -> tuple[ToolStat, ...]:
    totals: dict[str, list[int]] = {}
    for record in records:
        for execution in record.tool_executions:
            counters = totals.setdefault(execution.tool, [0, 0, 0])
            outcome = classify_status(execution.status)
            if outcome is StatusClass.SUCCESS:
                counters[0] += 1
            elif outcome is StatusClass.FAILURE:
                counters[1] += 1
            counters[2] += 1
    stats = [
        ToolStat(tool=tool, successes=successes, failures=failures, total=total)
        for tool, (successes, failures, total) in totals.items()
    ]
    return tuple(sorted(stats, key=lambda stat: (-stat.total, stat.tool)))


def _exclusion_stats(records: Sequence[RunRecord]) -> tuple[ExclusionStat, ...]:
    totals: dict[str, int] = defaultdict(int)
    for record in records:
        for pattern, count in record.exclusions.items():
            totals[pattern] += count
    stats = [ExclusionStat(pattern=pattern, total=total) for pattern, total in totals.items()]
    return tuple(sorted(stats, key=lambda stat: (-stat.total, stat.pattern)))


def _advisories(
    records: Sequence[RunRecord],
    tools: Iterable[ToolStat],
    exclusions: Iterable[ExclusionStat],
) -> tuple[str, ...]:
    advisories: list[str] = [
        f"Tool '{stat.tool}' frequently has issues - consider reviewing config"
        for stat in tools
        if stat.failures > FAILING_TOOL_THRESHOLD
    ]
    advisories.extend(
        f"Pattern '{stat.pattern}' excludes many files - verify this is intended"
        for stat in exclusions
        if stat.total > LARGE_EXCLUSION_THRESHOLD
    )
    supported = PYTHON_FAMILY_KEYS | SCRIPT_FAMILY_KEYS
    if not any(supported.intersection(record.detections) for record in records):
        advisories.append("No TS/JS or Python detected - lysmata works best with these")
    return tuple(advisories)


def _recent_runs(records: Sequence[RunRecord]) -> tuple[RecentRun, ...]:
    newest = sorted(records, key=lambda record: (record.timestamp, record.run_id), reverse=True)
    return tuple(
        RecentRun(
            date=record.timestamp.date().isoformat(),
            project=record.project,
            duration_seconds=record.duration_seconds,
            exit_code=record.exit_code,
        )
        for record in newest[:RECENT_RUN_LIMIT]
    )


__all__ = [
    "Corpus",
    "ExclusionStat",
    "InsightsReport",
    "LanguageStat",
    "RecentRun",
    "ToolStat",
    "build_insights",
    "compute_insights",
    "iter_log_files",
    "load_corpus",
]
