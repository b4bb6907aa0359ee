"""kai - jump to project directories with a fuzzy terminal picker.

This package provides the `kai` command-line tool: it scans a projects
directory, lets the user fuzzy-search the result, and prints a `cd` command
for a shell wrapper to evaluate.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
