# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for project file discovery."""

from __future__ import annotations

from pathlib import Path, PurePath

from lysmata.discovery import (
    DirectoryExclusion,
    FileCategory,
    build_exclusions,
    find_requirement_files,
    scan_project,
)


def _touch(root: Path, *relatives: str) -> None:
    for relative in relatives:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")


def test_directory_exclusion_matches_top_level_prefix_only() -> None:
    exclusion = DirectoryExclusion(".venv")

    assert exclusion.matches(PurePath(".venv/lib/site.py"))
    assert not exclusion.matches(PurePath("src/.venv/site.py"))
    assert not exclusion.matches(PurePath(".venv"))
    assert not exclusion.matches(PurePath(".venvs/site.py"))


def test_build_exclusions_deduplicates() -> None:
    assert build_exclusions([".git", "node_modules", ".git"]) == (
        DirectoryExclusion(".git"),
        DirectoryExclusion("node_modules"),
    )


def test_file_category_pattern_joins_globs() -> None:
    assert FileCategory("yaml", ("*.yaml", "*.yml")).pattern == "*.yaml,*.yml"


def test_scan_counts_included_and_excluded_files(tmp_path: Path) -> None:
    _touch(
        tmp_path,
        "app.py",
        "pkg/mod.py",
        "pkg/data.yml",
        ".venv/lib/site.py",
        ".venv/lib/other.py",
        "node_modules/x/index.ts",
        "README.md",
    )

    scan = scan_project(tmp_path, ["*.py", "*.yml", "*.ts"], build_exclusions([".venv", "node_modules"]))

    assert scan.count(["*.py"]) == 2
    assert scan.has_files(["*.yml"])
    assert not scan.has_files(["*.ts"])
    assert scan.excluded_counts(["*.py"]) == {".venv": 2}
    assert scan.excluded_counts(["*.ts"]) == {"node_modules": 1}
    assert scan.excluded_counts(["*.yml"]) == {}


def test_scan_matches_case_sensitively(tmp_path: Path) -> None:
    _touch(tmp_path, "upper.PY", "lower.py")

    scan = scan_project(tmp_path, ["*.py"], ())

    assert scan.count(["*.py"]) == 1


def test_find_requirement_files_limits_depth_and_skips_environments(tmp_path: Path) -> None:
    _touch(
        tmp_path,
        "requirements.txt",
        "requirements-dev.txt",
        "service/requirements.txt",
        "service/deep/requirements.txt",
        ".venv/requirements.txt",
        "venv/requirements.txt",
        ".laf/requirements.txt",
        "notes.txt",
    )

    assert find_requirement_files(tmp_path) == [
        Path("requirements-dev.txt"),
        Path("requirements.txt"),
        Path("service/requirements.txt"),
    ]
