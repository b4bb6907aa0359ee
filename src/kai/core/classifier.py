"""Project detection for a single directory.

A directory is a project when one of PROJECT_MARKERS is among its immediate
children. Nothing here raises on filesystem errors: an unreadable directory
is simply "not a project" with no visible subdirectories.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

VCS_MARKER = ".git"
HIDDEN_PREFIX = "."

# Order only decides which marker name is reported.
PROJECT_MARKERS: tuple[str, ...] = (
    "package.json",
    "pom.xml",
    "Cargo.toml",
    "go.mod",
    "requirements.txt",
    "Gemfile",
    "composer.json",
    VCS_MARKER,
    "Makefile",
    "CMakeLists.txt",
    "build.gradle",
    "pyproject.toml",
    "deno.json",
    "bun.lock",
)


@dataclass(frozen=True, slots=True)
class Classification:
    is_project: bool
    marker: str | None = None


NOT_A_PROJECT = Classification(is_project=False)


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def classify(path: Path | str) -> Classification:
    """Report whether ``path`` directly contains a project marker."""
    try:
        children = set(os.listdir(path))
    except OSError:
        return NOT_A_PROJECT

    for marker in PROJECT_MARKERS:
        if marker in children:
            return Classification(is_project=True, marker=marker)
    return NOT_A_PROJECT


def has_visible_subdirectories(path: Path | str) -> bool:
    """True if at least one non-hidden child of ``path`` is a directory."""
    try:
        with os.scandir(path) as it:
            for entry in it:
                if is_hidden(entry.name):
                    continue
                try:
                    if entry.is_dir():
                        return True
                except OSError:
                    continue
    except OSError:
        return False
    return False


def has_vcs_marker(path: Path | str) -> bool:
    return os.path.exists(os.path.join(path, VCS_MARKER))
