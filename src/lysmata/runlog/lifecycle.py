# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Removal of the persisted run-log corpus."""

from __future__ import annotations

import shutil
from pathlib import Path

from .models import RunLogError


def clear_all(log_dir: Path) -> bool:
    """Delete ``log_dir`` and every run log inside it.

    Calling this when no logs exist is a no-op success.

    Args:
        log_dir: Directory holding one JSON document per run.

    Returns:
        bool: ``True`` when a directory was removed, ``False`` when there was
        nothing to clear.

    Raises:
        RunLogError: If the directory exists but cannot be removed.
    """

    if not log_dir.is_symlink() and not log_dir.is_dir():
        return False
    try:
        if log_dir.is_symlink():
            log_dir.unlink()
        else:
            shutil.rmtree(log_dir)
    except FileNotFoundError:
        # Another process cleared it first.
        return True
    except OSError as exc:
        raise RunLogError(f"Unable to clear logs in {log_dir}: {exc}") from exc
    return True


__all__ = ["clear_all"]
