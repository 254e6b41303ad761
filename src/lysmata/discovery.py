# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File-type detection with typed directory exclusions."""

from __future__ import annotations

import os
from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path, PurePath

from .constants import REQUIREMENTS_EXCLUDE_DIRS, REQUIREMENTS_GLOB, REQUIREMENTS_MAX_DEPTH


@dataclass(frozen=True, slots=True)
class DirectoryExclusion:
    """Exclude every path below a top-level directory of the project."""

    name: str

    def matches(self, relative: PurePath) -> bool:
        """Return ``True`` when ``relative`` lives under the excluded directory."""

        parts = relative.parts
        return len(parts) > 1 and parts[0] == self.name


@dataclass(frozen=True, slots=True)
class FileCategory:
    """A detection key together with the filename globs it covers."""

    language: str
    globs: tuple[str, ...]

    @property
    def pattern(self) -> str:
        """Return the globs as recorded in the run log (comma separated)."""

        return ",".join(self.globs)


@dataclass(slots=True)
class ProjectScan:
    """Per-glob file counts gathered in a single walk of the project."""

    included: Counter[str] = field(default_factory=Counter)
    excluded: Counter[tuple[str, str]] = field(default_factory=Counter)

    def count(self, globs: Iterable[str]) -> int:
        """Return how many non-excluded files match any of ``globs``."""

        return sum(self.included[glob] for glob in globs)

    def has_files(self, globs: Iterable[str]) -> bool:
        """Return ``True`` when at least one non-excluded file matches ``globs``."""

        return self.count(globs) > 0

    def excluded_counts(self, globs: Iterable[str]) -> dict[str, int]:
        """Return the excluded-file counts per exclusion directory for ``globs``."""

        wanted = set(globs)
        totals: Counter[str] = Counter()
        for (glob, directory), count in self.excluded.items():
            if glob in wanted:
                totals[directory] += count
        return dict(totals)


def build_exclusions(names: Iterable[str]) -> tuple[DirectoryExclusion, ...]:
    """Return exclusion predicates for the configured directory names."""

    return tuple(DirectoryExclusion(name) for name in dict.fromkeys(names))


def scan_project(
    root: Path,
    globs: Sequence[str],
    exclusions: Sequence[DirectoryExclusion],
) -> ProjectScan:
    """Walk ``root`` once and count files matching each of ``globs``.

    Files below an excluded directory are tallied separately so the run log can
    report how much each exclusion hides.

    Args:
        root: Project root to walk.
        globs: Filename globs (``*.py``) to count; matched case-sensitively.
        exclusions: Directory predicates whose files are not checked.

    Returns:
        ProjectScan: Included and excluded counts keyed by glob.
    """

    scan = ProjectScan()
    for relative in _iter_relative_files(root):
        name = relative.name
        matched = [glob for glob in globs if fnmatchcase(name, glob)]
        if not matched:
            continue
        hit = next((exclusion for exclusion in exclusions if exclusion.matches(relative)), None)
        for glob in matched:
            if hit is None:
                scan.included[glob] += 1
            else:
                scan.excluded[(glob, hit.name)] += 1
    return scan


def find_requirement_files(root: Path) -> list[Path]:
    """Return ``requirements*.txt`` files at most one directory below ``root``.

    Returns:
        list[Path]: Sorted, de-duplicated paths relative to ``root``.
    """

    found: set[Path] = set()
    for directory, dirnames, filenames in os.walk(root):
        current = Path(directory)
        relative_dir = current.relative_to(root)
        depth = len(relative_dir.parts) + 1
        if relative_dir.parts and relative_dir.parts[0] in REQUIREMENTS_EXCLUDE_DIRS:
            dirnames[:] = []
            continue
        if depth >= REQUIREMENTS_MAX_DEPTH:
            dirnames[:] = []
        for filename in filenames:
            if fnmatchcase(filename, REQUIREMENTS_GLOB):
                found.add(relative_dir / filename)
    return sorted(found)


def _iter_relative_files(root: Path) -> Iterator[PurePath]:
    for directory, _dirnames, filenames in os.walk(root):
        relative_dir = Path(directory).relative_to(root)
        for filename in filenames:
            yield relative_dir / filename


__all__ = [
    "DirectoryExclusion",
    "FileCategory",
    "ProjectScan",
    "build_exclusions",
    "find_requirement_files",
    "scan_project",
]
