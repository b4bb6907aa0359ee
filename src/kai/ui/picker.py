"""Interactive picker session.

Wires the selection engine to the terminal: decoded key events go in,
re-rendered frames come out on the stderr console, and the session ends with
the first terminal ``Action`` (commit, create or cancel).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable

from rich.console import Console
from rich.live import Live

from kai.core.config import RecentDirectory
from kai.core.console import console as default_console
from kai.core.scanner import DirectoryEntry
from kai.core.selection import Action, ActionKind, KeyEvent, SelectionEngine, SelectionView
from kai.ui.keys import KeyReader
from kai.ui.render import render_view
from kai.ui.terminal import TerminalController

logger = logging.getLogger(__name__)


def drive(
    engine: SelectionEngine,
    next_event: Callable[[], KeyEvent],
    on_change: Callable[[SelectionView], None],
) -> Action:
    """Feed events into ``engine`` until one of them ends the session."""
    while True:
        event = next_event()
        action = engine.dispatch(event)
        if action is not None:
            logger.debug("Picker finished with %s", action.kind.value)
            return action
        on_change(engine.view)


def run_picker(
    entries: Iterable[DirectoryEntry],
    recents: Iterable[RecentDirectory],
    *,
    console: Console | None = None,
    stdin_fd: int | None = None,
) -> Action:
    """Run an interactive session on the controlling terminal.

    Raises:
        TerminalError: stdin is not an interactive terminal.
    """
    out = console or default_console
    fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
    terminal = TerminalController(fd)
    reader = KeyReader(fd)
    engine = SelectionEngine(entries, recents)

    with terminal.cbreak_mode():
        with Live(render_view(engine.view), console=out, auto_refresh=False, transient=True) as live:
            try:
                return drive(
                    engine,
                    reader.read_key,
                    lambda view: live.update(render_view(view), refresh=True),
                )
            except KeyboardInterrupt:
                return Action(ActionKind.CANCEL)
