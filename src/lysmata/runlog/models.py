# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pydantic models describing the persisted telemetry of one check run."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    field_serializer,
    field_validator,
)

TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%SZ"


class RunLogError(RuntimeError):
    """Raised when a run log cannot be created, persisted or mutated."""


class DetectionEntry(BaseModel):
    """Number of files found for one language or file category."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    count: NonNegativeInt
    pattern: str = Field(default="", validation_alias=AliasChoices("pattern", "patterns"))


class ToolExecution(BaseModel):
    """Outcome of a single external tool invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tool: str
    status: str
    files: NonNegativeInt = 0
    duration_seconds: NonNegativeFloat = Field(default=0.0, alias="duration_sec")


class RunRecord(BaseModel):
    """Telemetry document for one invocation of the checker.

    The model is frozen; mutations go through ``model_copy`` in the recorder
    transforms so every persisted snapshot is a complete value. Field aliases
    match the on-disk key names (``cwd``, ``detection``, ``tools``,
    ``duration_sec``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    run_id: str = Field(min_length=1)
    timestamp: datetime
    project: str = ""
    working_directory: str = Field(default="", alias="cwd")
    detections: dict[str, DetectionEntry] = Field(default_factory=dict, alias="detection")
    tool_executions: tuple[ToolExecution, ...] = Field(default_factory=tuple, alias="tools")
    exclusions: dict[str, NonNegativeInt] = Field(default_factory=dict)
    duration_seconds: NonNegativeFloat | None = Field(default=None, alias="duration_sec")
    exit_code: int | None = None

    @field_validator("timestamp")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        # Persisted timestamps have second resolution.
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        try:
            converted = value.astimezone(UTC)
        except OverflowError as exc:
            raise ValueError(f"timestamp {value.isoformat()} is out of range in UTC") from exc
        return converted.replace(microsecond=0)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return value.strftime(TIMESTAMP_FORMAT)

    @property
    def sealed(self) -> bool:
        """Return ``True`` once the finalizer has stamped the exit code."""

        return self.exit_code is not None

    def to_json(self) -> str:
        """Return the persisted JSON document for this record."""

        return self.model_dump_json(by_alias=True, indent=2) + "\n"

    @classmethod
    def from_json(cls, payload: str | bytes) -> RunRecord:
        """Parse a persisted document.

        Raises:
            pydantic.ValidationError: If ``payload`` is not a valid run record.
        """

        return cls.model_validate_json(payload)


def new_record(run_id: str, *, timestamp: datetime, project: str, cwd: str) -> RunRecord:
    """Return an empty record ready for the recorder."""

    return RunRecord(run_id=run_id, timestamp=timestamp, project=project, cwd=cwd)


__all__ = [
    "DetectionEntry",
    "RunLogError",
    "RunRecord",
    "TIMESTAMP_FORMAT",
    "ToolExecution",
    "new_record",
]
