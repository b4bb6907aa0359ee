"""CLI command modules for kai.

This package contains the user-facing commands:
    - init: Shell wrapper generation
    - nav: Interactive picker and project listing
"""

from __future__ import annotations

from . import init, nav

__all__ = ["init", "nav"]
