"""Tests for distui.output.console module."""

from __future__ import annotations

import pytest

from distui.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.HEADER) == "header"


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("failed")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == ["OK done", "error: failed", "warning: careful", "info: fyi"]
        assert console.has_error()
        assert console.has_success()

    def test_field(self) -> None:
        console = MockConsole()
        console.field("Branch", "main")
        assert console.text == "Branch: main"

    def test_confirm_answers_in_order(self) -> None:
        """Scripted answers are consumed; once exhausted the answer is no."""
        console = MockConsole(answers=[True, False])
        assert console.confirm("one?") is True
        assert console.confirm("two?") is False
        assert console.confirm("three?") is False
        assert console.find("?")[0].message == "one?"

    def test_satisfies_protocol(self) -> None:
        def accept(_c: ConsoleProtocol) -> bool:
            return True

        assert accept(MockConsole())


class TestRichConsole:
    def test_markup_in_messages_is_literal(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Square brackets in file names are printed, not parsed as markup."""
        console = RichConsole(no_color=True)
        console.error("cannot stage [bold]x.go")
        console.print("plain [red]text", Style.WARNING)

        out = capsys.readouterr().out
        assert "error: cannot stage [bold]x.go" in out
        assert "plain [red]text" in out

    def test_field_alignment(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole(no_color=True)
        console.field("Branch", "main")
        assert "Branch:        main" in capsys.readouterr().out
