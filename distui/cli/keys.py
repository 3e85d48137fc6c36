"""Raw terminal key reading for the interactive session.

`read_key` blocks for one key press and returns its name: "up", "down",
"left", "right", "enter", "esc", "tab", "shift+tab", "space", "backspace",
"ctrl+c", or the typed character. It returns None when input is closed.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager

__all__ = ["raw_terminal", "read_key", "decode_escape"]

_CSI_KEYS = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "Z": "shift+tab",
}

_WINDOWS_KEYS = {
    "H": "up",
    "P": "down",
    "M": "right",
    "K": "left",
}


def _plain_key(ch: str) -> str:
    if ch in ("\r", "\n"):
        return "enter"
    if ch in ("\x08", "\x7f"):
        return "backspace"
    if ch == "\t":
        return "tab"
    if ch == " ":
        return "space"
    if ch == "\x03":
        return "ctrl+c"
    return ch


def decode_escape(sequence: str) -> str:
    """Name the key for what followed an ESC byte ("" means a bare ESC)."""
    if sequence.startswith("[") and len(sequence) >= 2:
        return _CSI_KEYS.get(sequence[-1], "esc")
    return "esc"


@contextmanager
def raw_terminal() -> Iterator[None]:
    """Put stdin in cbreak mode for the duration; no-op off a POSIX tty."""
    if os.name == "nt" or not sys.stdin.isatty():
        yield
        return

    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _read_char(fd: int) -> str:
    """One character straight from the descriptor; "" at end of input."""
    data = b""
    while True:
        byte = os.read(fd, 1)
        if not byte:
            return data.decode("utf-8", errors="replace")
        data += byte
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            if len(data) >= 4:
                return data.decode("utf-8", errors="replace")


def read_key(fd: int | None = None) -> str | None:
    """Block for one key press on fd (stdin by default)."""
    if os.name == "nt":
        import msvcrt

        ch = msvcrt.getwch()
        if ch in ("\x00", "\xe0"):
            return _WINDOWS_KEYS.get(msvcrt.getwch(), "esc")
        if ch == "\x1b":
            return "esc"
        return _plain_key(ch)

    import select

    if fd is None:
        fd = sys.stdin.fileno()
    ch = _read_char(fd)
    if ch == "":
        return None
    if ch != "\x1b":
        return _plain_key(ch)

    # A bare ESC has nothing queued behind it.
    sequence = ""
    while select.select([fd], [], [], 0.03)[0]:
        nxt = _read_char(fd)
        if not nxt:
            break
        sequence += nxt
        if (len(sequence) >= 2 and nxt.isalpha()) or nxt == "~":
            break
    return decode_escape(sequence)
