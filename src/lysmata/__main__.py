# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Allow ``python -m lysmata``."""

from __future__ import annotations

from .cli.app import main

if __name__ == "__main__":
    main()
