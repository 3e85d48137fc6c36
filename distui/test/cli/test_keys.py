"""Tests for distui.cli.keys module."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from distui.cli.keys import _plain_key, decode_escape, read_key


class TestKeyNames:
    @pytest.mark.parametrize(
        ("ch", "name"),
        [
            ("\r", "enter"),
            ("\n", "enter"),
            ("\x7f", "backspace"),
            ("\t", "tab"),
            (" ", "space"),
            ("\x03", "ctrl+c"),
            ("q", "q"),
        ],
    )
    def test_plain(self, ch: str, name: str) -> None:
        assert _plain_key(ch) == name

    def test_arrows(self) -> None:
        assert decode_escape("[A") == "up"
        assert decode_escape("[D") == "left"
        assert decode_escape("[Z") == "shift+tab"

    def test_bare_escape(self) -> None:
        """Nothing or an unknown sequence after ESC is ESC itself."""
        assert decode_escape("") == "esc"
        assert decode_escape("[5~") == "esc"


@pytest.fixture
def terminal() -> Iterator[tuple[int, int]]:
    """A pty in cbreak mode: (master, slave) descriptors."""
    pty = pytest.importorskip("pty")
    tty = pytest.importorskip("tty")
    master, slave = pty.openpty()
    tty.setcbreak(slave)
    yield master, slave
    os.close(master)
    os.close(slave)


@pytest.mark.skipif(os.name == "nt", reason="POSIX terminals only")
class TestReadKey:
    def test_arrow_sequence_is_one_key(self, terminal: tuple[int, int]) -> None:
        """ESC [ A arrives as "up" and the next key is read on its own."""
        master, slave = terminal
        os.write(master, b"\x1b[Ax")
        assert [read_key(slave), read_key(slave)] == ["up", "x"]

    def test_down_then_enter(self, terminal: tuple[int, int]) -> None:
        master, slave = terminal
        os.write(master, b"\x1b[B\r")
        assert [read_key(slave), read_key(slave)] == ["down", "enter"]

    def test_bare_escape(self, terminal: tuple[int, int]) -> None:
        master, slave = terminal
        os.write(master, b"\x1b")
        assert read_key(slave) == "esc"

    def test_multibyte_character(self, terminal: tuple[int, int]) -> None:
        master, slave = terminal
        os.write(master, "é".encode())
        assert read_key(slave) == "é"

    def test_closed_input(self) -> None:
        read_end, write_end = os.pipe()
        os.close(write_end)
        try:
            assert read_key(read_end) is None
        finally:
            os.close(read_end)
