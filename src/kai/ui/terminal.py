"""Terminal mode handling for the picker session.

Switches the controlling terminal into cbreak mode (no line buffering, no
echo) for the lifetime of the session and always restores it on exit.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty
from collections.abc import Iterator

from kai.core.result import TerminalError


class TerminalController:
    def __init__(self, stdin_fd: int) -> None:
        if not os.isatty(stdin_fd):
            raise TerminalError("kai needs an interactive terminal on stdin", context={"fd": stdin_fd})
        self.stdin_fd = stdin_fd
        try:
            self._saved_tty_state = termios.tcgetattr(stdin_fd)
        except termios.error as exc:
            raise TerminalError("Cannot read terminal attributes", context={"error": str(exc)}) from exc

    def enable_input_mode(self) -> None:
        tty.setcbreak(self.stdin_fd, termios.TCSANOW)

    def restore(self) -> None:
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def cbreak_mode(self) -> Iterator[None]:
        try:
            self.enable_input_mode()
            yield
        finally:
            self.restore()
