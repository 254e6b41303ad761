# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File-backed storage for a single run log with atomic replacement."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import weakref
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType
from typing import Final

from .models import RunLogError, RunRecord, new_record

LOGGER = logging.getLogger(__name__)

RUN_ID_FORMAT: Final[str] = "%Y%m%d_%H%M%S"
RECORD_SUFFIX: Final[str] = ".json"
SCRATCH_PREFIX: Final[str] = ".tmp-"
# Mode a plain `open` would give, before the umask is applied.
DEFAULT_FILE_MODE: Final[int] = 0o666

RecordTransform = Callable[[RunRecord], RunRecord]


def new_run_id(now: datetime | None = None, pid: int | None = None) -> str:
    """Return a run identifier built from the UTC start time and process id."""

    stamp = (now or datetime.now(UTC)).astimezone(UTC).strftime(RUN_ID_FORMAT)
    return f"{stamp}_{os.getpid() if pid is None else pid}"


def record_path(log_dir: Path, run_id: str) -> Path:
    """Return the canonical document path for ``run_id``."""

    return log_dir / f"{run_id}{RECORD_SUFFIX}"


def _default_file_mode() -> int:
    # The umask can only be read by replacing it.
    current = os.umask(0)
    os.umask(current)
    return DEFAULT_FILE_MODE & ~current


class RunRecordStore:
    """Own the on-disk document of one run and persist every update atomically.

    Each write lands in a private scratch directory beside the log files and is
    then renamed over the canonical path, so concurrent readers only ever see
    a complete document. The scratch directory is removed by :meth:`close`, on
    garbage collection, or at interpreter exit, whichever happens first.
    """

    def __init__(self, path: Path, record: RunRecord, *, scratch_dir: Path) -> None:
        self._path = path
        self._record = record
        self._scratch_dir = scratch_dir
        self._file_mode = _default_file_mode()
        self._cleanup = weakref.finalize(self, shutil.rmtree, str(scratch_dir), ignore_errors=True)

    @classmethod
    def create(
        cls,
        log_dir: Path,
        run_id: str,
        *,
        project: str,
        cwd: str,
        now: datetime | None = None,
    ) -> RunRecordStore:
        """Initialise and persist an empty record for ``run_id``.

        Args:
            log_dir: Directory holding one JSON document per run.
            run_id: Unique identifier used as the document's filename stem.
            project: Descriptive project name.
            cwd: Working directory the run was started from.
            now: Creation instant; defaults to the current UTC time.

        Returns:
            RunRecordStore: Store bound to the freshly written document.

        Raises:
            RunLogError: If the directory cannot be prepared, the identifier is
                already taken, or the initial document cannot be written.
        """

        path = record_path(log_dir, run_id)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            if path.exists():
                raise RunLogError(f"Run log {path.name} already exists")
            scratch_dir = Path(tempfile.mkdtemp(prefix=f"{SCRATCH_PREFIX}{run_id}-", dir=log_dir))
        except OSError as exc:
            raise RunLogError(f"Unable to prepare log directory {log_dir}: {exc}") from exc

        record = new_record(
            run_id,
            timestamp=now or datetime.now(UTC),
            project=project,
            cwd=cwd,
        )
        store = cls(path, record, scratch_dir=scratch_dir)
        try:
            store._persist(record)
        except RunLogError:
            store.close()
            raise
        return store

    @property
    def path(self) -> Path:
        """Return the canonical document path."""

        return self._path

    @property
    def record(self) -> RunRecord:
        """Return the most recently persisted record."""

        return self._record

    @property
    def scratch_dir(self) -> Path:
        """Return the private directory used to stage writes."""

        return self._scratch_dir

    @property
    def closed(self) -> bool:
        """Return ``True`` once the scratch directory has been released."""

        return not self._cleanup.alive

    def update(self, transform: RecordTransform) -> RunRecord:
        """Apply ``transform`` to the current record and persist the result.

        The in-memory record only advances when the write succeeds.

        Raises:
            RunLogError: If the store is closed or the write fails.
        """

        if self.closed:
            raise RunLogError(f"Run log {self._path.name} is closed")
        updated = transform(self._record)
        self._persist(updated)
        self._record = updated
        return updated

    def close(self) -> None:
        """Remove the scratch directory; the persisted document is kept."""

        self._cleanup()

    def __enter__(self) -> RunRecordStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _persist(self, record: RunRecord) -> None:
        payload = record.to_json()
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(suffix=RECORD_SUFFIX, dir=self._scratch_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                os.fchmod(handle.fileno(), self._file_mode)
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise RunLogError(f"Unable to write run log {self._path}: {exc}") from exc
        LOGGER.debug("persisted run log path=%s tools=%d", self._path, len(record.tool_executions))


__all__ = ["RecordTransform", "RunRecordStore", "new_run_id", "record_path"]
