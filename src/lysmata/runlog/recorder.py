# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Best-effort mutation API used by the checker while tools run."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType

from .models import DetectionEntry, RunLogError, RunRecord, ToolExecution, new_record
from .status import exit_code_for
from .store import RecordTransform, RunRecordStore, new_run_id

LOGGER = logging.getLogger(__name__)

DisableHandler = Callable[[str], None]
Clock = Callable[[], float]


def _require_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def with_detection(record: RunRecord, language: str, count: int, pattern: str) -> RunRecord:
    """Return ``record`` with ``detections[language]`` set to the new entry."""

    _require_non_negative("count", count)
    detections = dict(record.detections)
    detections[language] = DetectionEntry(count=count, pattern=pattern)
    return record.model_copy(update={"detections": detections})


def with_tool(record: RunRecord, tool: str, status: str, files: int, duration: float) -> RunRecord:
    """Return ``record`` with one more tool execution appended."""

    _require_non_negative("files", files)
    _require_non_negative("duration", duration)
    execution = ToolExecution(tool=tool, status=status, files=files, duration_sec=duration)
    return record.model_copy(update={"tool_executions": (*record.tool_executions, execution)})


def with_exclusion(record: RunRecord, directory_key: str, count: int) -> RunRecord:
    """Return ``record`` with ``exclusions[directory_key]`` set to ``count``."""

    _require_non_negative("count", count)
    exclusions = dict(record.exclusions)
    exclusions[directory_key] = count
    return record.model_copy(update={"exclusions": exclusions})


def sealed_with(record: RunRecord, duration: float, exit_code: int) -> RunRecord:
    """Return ``record`` stamped with its total duration and exit code."""

    _require_non_negative("duration", duration)
    return record.model_copy(update={"duration_seconds": duration, "exit_code": exit_code})


class Recorder:
    """Accumulate the telemetry of one run and mirror it to a store.

    A recorder without a store is *disabled*: it keeps the record in memory so
    the run's exit code still derives from the recorded executions, but never
    touches the filesystem. A persistence failure mid-run switches the
    recorder to that mode instead of failing the check.
    """

    def __init__(
        self,
        record: RunRecord,
        store: RunRecordStore | None = None,
        *,
        on_disable: DisableHandler | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._record = record
        self._store = store
        self._on_disable = on_disable
        self._clock = clock
        self._started = clock()

    @classmethod
    def start(
        cls,
        log_dir: Path,
        *,
        root: Path,
        run_id: str | None = None,
        now: datetime | None = None,
        on_disable: DisableHandler | None = None,
        clock: Clock = time.monotonic,
    ) -> Recorder:
        """Create the run log for ``root`` under ``log_dir``.

        Falls back to a disabled recorder when the log cannot be created.
        """

        created = now or datetime.now(UTC)
        identifier = run_id or new_run_id(created)
        root = root.resolve()
        project = root.name
        try:
            store = RunRecordStore.create(log_dir, identifier, project=project, cwd=str(root), now=created)
        except RunLogError as exc:
            if on_disable is not None:
                on_disable(f"Run logging disabled: {exc}")
            LOGGER.debug("run log unavailable run_id=%s error=%s", identifier, exc)
            record = new_record(identifier, timestamp=created, project=project, cwd=str(root))
            return cls(record, None, on_disable=on_disable, clock=clock)
        return cls(store.record, store, on_disable=on_disable, clock=clock)

    @classmethod
    def disabled(cls, *, root: Path, clock: Clock = time.monotonic) -> Recorder:
        """Return an in-memory recorder that never persists anything."""

        created = datetime.now(UTC)
        record = new_record(new_run_id(created), timestamp=created, project=root.name, cwd=str(root))
        return cls(record, None, clock=clock)

    @property
    def enabled(self) -> bool:
        """Return ``True`` while updates are being persisted."""

        return self._store is not None

    @property
    def record(self) -> RunRecord:
        """Return the current record."""

        return self._record

    @property
    def path(self) -> Path | None:
        """Return the persisted document path, if logging is enabled."""

        return None if self._store is None else self._store.path

    def record_detection(self, language: str, count: int, pattern: str) -> None:
        """Record how many ``language`` files matched ``pattern``."""

        self._apply(lambda record: with_detection(record, language, count, pattern))

    def record_tool(self, tool: str, status: str, files: int, duration: float) -> None:
        """Append the outcome of one tool invocation."""

        self._apply(lambda record: with_tool(record, tool, status, files, duration))

    def record_exclusion(self, directory_key: str, count: int) -> None:
        """Record how many files were skipped under ``directory_key``."""

        self._apply(lambda record: with_exclusion(record, directory_key, count))

    def exit_code(self) -> int:
        """Return the process exit code implied by the recorded executions."""

        return exit_code_for(self._record.tool_executions)

    def finalize(self, exit_code: int) -> RunRecord:
        """Seal the record with its elapsed duration and ``exit_code``.

        Raises:
            RunLogError: If the record has already been sealed.
        """

        duration = round(max(self._clock() - self._started, 0.0), 2)
        self._apply(lambda record: sealed_with(record, duration, exit_code))
        return self._record

    def close(self) -> None:
        """Release the store's scratch space."""

        if self._store is not None:
            self._store.close()

    def __enter__(self) -> Recorder:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _apply(self, transform: RecordTransform) -> None:
        if self._record.sealed:
            raise RunLogError(f"Run log {self._record.run_id} is sealed")
        if self._store is not None:
            try:
                self._record = self._store.update(transform)
                return
            except RunLogError as exc:
                self._disable(exc)
        self._record = transform(self._record)

    def _disable(self, exc: RunLogError) -> None:
        store, self._store = self._store, None
        if store is not None:
            store.close()
        if self._on_disable is not None:
            self._on_disable(f"Run logging disabled: {exc}")


def finalize(recorder: Recorder, exit_code: int) -> RunRecord:
    """Seal ``recorder``'s record; see :meth:`Recorder.finalize`."""

    return recorder.finalize(exit_code)


__all__ = [
    "Recorder",
    "finalize",
    "sealed_with",
    "with_detection",
    "with_exclusion",
    "with_tool",
]
