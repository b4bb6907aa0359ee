"""Directory scanning for the project picker.

Provides:
    - DirectoryEntry: immutable snapshot of one scanned directory
    - scan_root(): one-level scan plus nested git repositories, as a Result
    - scan_directory(): same scan, logging failures and returning [] instead
    - collect_projects(): bounded-depth walk built on scan_directory()
    - format_time_ago(): compact age labels for the picker table
"""

from __future__ import annotations

import logging
import os
import time
import unicodedata
from dataclasses import dataclass
from pathlib import Path

from kai.core.classifier import (
    VCS_MARKER,
    classify,
    has_vcs_marker,
    has_visible_subdirectories,
    is_hidden,
)
from kai.core.result import Err, Ok, Result, ScanError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    name: str
    path: str
    is_project: bool
    has_subdirectories: bool
    last_modified: float
    project_marker: str | None = None
    parent_name: str | None = None
    is_subdirectory: bool = False

    @property
    def display_name(self) -> str:
        """``parent/name`` for nested repositories, plain name otherwise."""
        if self.is_subdirectory and self.parent_name:
            return f"{self.parent_name}/{self.name}"
        return self.name


def collation_key(name: str) -> tuple[str, str]:
    """Sort key approximating locale collation.

    Accents and case are ignored at the first level; on a tie lowercase sorts
    before uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name.swapcase()


def _scan_nested_git(parent_path: str, parent_name: str) -> list[DirectoryEntry]:
    found: list[DirectoryEntry] = []
    try:
        with os.scandir(parent_path) as it:
            children = list(it)
    except OSError as exc:
        logger.debug("Skipping nested scan of %s: %s", parent_path, exc)
        return found

    for child in children:
        if is_hidden(child.name):
            continue
        try:
            if not child.is_dir():
                continue
            if not has_vcs_marker(child.path):
                continue
            mtime = child.stat().st_mtime
        except OSError as exc:
            logger.debug("Skipping %s: %s", child.path, exc)
            continue

        classification = classify(child.path)
        found.append(
            DirectoryEntry(
                name=child.name,
                path=child.path,
                is_project=True,
                has_subdirectories=has_visible_subdirectories(child.path),
                last_modified=mtime,
                project_marker=classification.marker or VCS_MARKER,
                parent_name=parent_name,
                is_subdirectory=True,
            )
        )
    return found


def scan_root(root: Path | str, include_hidden: bool = False) -> Result[list[DirectoryEntry], ScanError]:
    """Scan ``root`` one level deep, adding git repositories found one level below.

    A missing root is an empty result, not an error. Entries that vanish or
    cannot be stat'ed while scanning are skipped individually.
    """
    root_path = os.path.abspath(os.fspath(root))
    if not os.path.exists(root_path):
        return Ok([])

    try:
        with os.scandir(root_path) as it:
            children = list(it)
    except OSError as exc:
        return Err(ScanError("Failed to list projects root", context={"root": root_path, "error": str(exc)}))

    entries: list[DirectoryEntry] = []
    for child in children:
        if not include_hidden and is_hidden(child.name):
            continue
        try:
            if not child.is_dir():
                continue
            mtime = child.stat().st_mtime
        except OSError as exc:
            logger.debug("Skipping %s: %s", child.path, exc)
            continue

        classification = classify(child.path)
        has_subdirs = has_visible_subdirectories(child.path)
        entries.append(
            DirectoryEntry(
                name=child.name,
                path=child.path,
                is_project=classification.is_project,
                has_subdirectories=has_subdirs,
                last_modified=mtime,
                project_marker=classification.marker,
            )
        )

        # Projects are probed too, so repositories nested in monorepo folders show up.
        if has_subdirs:
            entries.extend(_scan_nested_git(child.path, child.name))

    entries.sort(key=lambda entry: collation_key(entry.name))
    return Ok(entries)


def scan_directory(root: Path | str, include_hidden: bool = False) -> list[DirectoryEntry]:
    """Scan ``root``; an unreadable root is logged and yields no entries."""
    match scan_root(root, include_hidden=include_hidden):
        case Ok(entries):
            return entries
        case Err(err):
            logger.warning("Error scanning directory: %s", err)
            return []


def collect_projects(root: Path | str, max_depth: int = 3) -> list[DirectoryEntry]:
    """Walk ``root`` descending into folders that are not projects themselves."""
    collected: list[DirectoryEntry] = []

    def _walk(path: str, depth: int) -> None:
        if depth > max_depth:
            return
        for entry in scan_directory(path):
            collected.append(entry)
            if not entry.is_project and entry.has_subdirectories:
                _walk(entry.path, depth + 1)

    _walk(os.fspath(root), 0)
    return collected


def format_time_ago(timestamp: float, now: float | None = None) -> str:
    """Render the age of ``timestamp`` (seconds since the epoch) like ``3d ago``."""
    current = time.time() if now is None else now
    seconds = int(max(0.0, current - timestamp))
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    for amount, unit in (
        (days // 365, "y"),
        (days // 30, "mo"),
        (days // 7, "w"),
        (days, "d"),
        (hours, "h"),
        (minutes, "m"),
    ):
        if amount > 0:
            return f"{amount}{unit} ago"
    return "just now"
