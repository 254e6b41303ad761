# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plain-text rendering of the usage insights report."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from ..runlog.insights import InsightsReport, RecentRun

INSIGHTS_TITLE: Final[str] = "Lysmata Usage Insights"
NO_LOGS_MESSAGE: Final[str] = "No logs found. Run `lysmata check` first."
NO_DATA: Final[str] = "  (no data)"
INDENT: Final[str] = "  "


def format_insights(report: InsightsReport) -> list[str]:
    """Return the report body as printable lines (title excluded).

    Args:
        report: Aggregated statistics computed over the run-log corpus.

    Returns:
        list[str]: Lines in display order, blank lines separating sections.
    """

    lines = [f"Total runs logged: {report.run_count}"]
    if report.skipped:
        lines.append(f"Unreadable logs skipped: {len(report.skipped)}")
    lines.append("")

    lines.append("Language Detection (across all runs):")
    lines.extend(
        _or_no_data(
            f"{INDENT}{stat.language}: {stat.runs} runs, avg {stat.avg_files} files" for stat in report.languages
        )
    )
    lines.append("")

    lines.append("Tool Results:")
    lines.extend(
        _or_no_data(f"{INDENT}{stat.tool}: {stat.successes}/{stat.total} success" for stat in report.tools)
    )
    lines.append("")

    lines.append("Files Excluded (total across runs):")
    lines.extend(_or_no_data(f"{INDENT}{stat.pattern}: {stat.total} files" for stat in report.exclusions))
    lines.append("")

    lines.append("Recent Runs:")
    lines.extend(_or_no_data(_format_recent(run) for run in report.recent))
    lines.append("")

    lines.append("Insights for Improvement:")
    if report.advisories:
        lines.extend(f"{INDENT}- {advisory}" for advisory in report.advisories)
    else:
        lines.append(f"{INDENT}- Nothing to report")
    return lines


def _format_recent(run: RecentRun) -> str:
    duration = "running" if run.duration_seconds is None else f"{run.duration_seconds:g}s"
    exit_code = "-" if run.exit_code is None else str(run.exit_code)
    return f"{INDENT}{run.date} {run.project}: {duration}, exit {exit_code}"


def _or_no_data(lines: Iterable[str]) -> list[str]:
    rendered = list(lines)
    return rendered or [NO_DATA]


__all__ = ["INSIGHTS_TITLE", "NO_LOGS_MESSAGE", "format_insights"]
