from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from kai.core.scanner import DirectoryEntry  # noqa: E402


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config to a temp path so tests don't touch user state."""
    cfg_path = tmp_path / "kai-config" / "config.json"
    monkeypatch.setenv("KAI_CONFIG", str(cfg_path))
    for name in ("KAI_PROJECTS_DIR", "KAI_RECENT_DIRS", "KAI_MAX_RECENTS"):
        monkeypatch.delenv(name, raising=False)
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use an in-memory Rich console during tests."""
    test_console = Console(record=True, file=io.StringIO(), width=140)
    import kai.commands.nav as nav_cmd
    import kai.core.console as core_console
    import kai.main as kai_main

    monkeypatch.setattr(core_console, "console", test_console)
    monkeypatch.setattr(kai_main, "console", test_console)
    monkeypatch.setattr(nav_cmd, "console", test_console)
    return test_console


@pytest.fixture
def projects_root(tmp_path: Path) -> Path:
    root = tmp_path / "projects"
    root.mkdir()
    return root


def _make_entry(
    name: str,
    parent: str | None = None,
    path: str | None = None,
    last_modified: float = 0.0,
) -> DirectoryEntry:
    """In-memory entry with a short synthetic path."""
    if path is None:
        path = f"/p/{parent}/{name}" if parent else f"/p/{name}"
    return DirectoryEntry(
        name=name,
        path=path,
        is_project=True,
        has_subdirectories=False,
        last_modified=last_modified,
        parent_name=parent,
        is_subdirectory=parent is not None,
    )


@pytest.fixture
def make_entry() -> Any:
    return _make_entry
