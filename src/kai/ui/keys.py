"""Low-level terminal input decoding.

Reads raw bytes from a terminal file descriptor and translates them into
``KeyEvent``s for the selection engine. Handles ESC-sequence timing and
multi-byte UTF-8 characters.
"""

from __future__ import annotations

import os
import select

from kai.core.selection import KeyEvent, KeyKind

ESC_SEQUENCE_TIMEOUT_MS = 25

_SINGLE_BYTE_KEYS: dict[bytes, KeyKind] = {
    b"\x03": KeyKind.INTERRUPT,
    b"\x04": KeyKind.INTERRUPT,
    b"\t": KeyKind.TAB,
    b"\x08": KeyKind.BACKSPACE,
    b"\x7f": KeyKind.BACKSPACE,
    b"\r": KeyKind.ENTER,
    b"\n": KeyKind.ENTER,
}

_ARROW_KEYS: dict[bytes, KeyKind] = {
    b"A": KeyKind.UP,
    b"B": KeyKind.DOWN,
    b"C": KeyKind.OTHER,
    b"D": KeyKind.OTHER,
}


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


class KeyReader:
    """Reads one ``KeyEvent`` at a time from ``fd``."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending: list[bytes] = []

    def _read_byte(self) -> bytes:
        if self._pending:
            return self._pending.pop(0)
        return os.read(self.fd, 1)

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def _read_escape(self) -> KeyEvent:
        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return KeyEvent(KeyKind.ESCAPE)
        if seq not in {b"[", b"O"}:
            self._pending.append(seq)
            return KeyEvent(KeyKind.ESCAPE)

        final = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return KeyEvent(KeyKind.ESCAPE)
        if final in _ARROW_KEYS:
            return KeyEvent(_ARROW_KEYS[final])

        # Swallow the rest of a CSI sequence (e.g. ESC [ 3 ~).
        while not (0x40 <= final[0] <= 0x7E):
            nxt = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                break
            final = nxt
        return KeyEvent(KeyKind.OTHER)

    def read_key(self) -> KeyEvent:
        ch = self._read_byte()
        if not ch:
            # EOF on the terminal ends the session.
            return KeyEvent(KeyKind.INTERRUPT)

        kind = _SINGLE_BYTE_KEYS.get(ch)
        if kind is not None:
            return KeyEvent(kind)
        if ch == b"\x1b":
            return self._read_escape()
        if ch[0] < 0x20:
            return KeyEvent(KeyKind.OTHER)

        raw = ch
        for _ in range(_utf8_length(ch[0]) - 1):
            nxt = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                break
            raw += nxt
        return KeyEvent.text(raw.decode("utf-8", errors="replace"))
