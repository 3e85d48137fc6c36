"""Tests for distui.session.commands module."""

from __future__ import annotations

from distui.core.result import Ok
from distui.session.commands import CommandTracker
from distui.session.events import CommandCrashed, CommitFinished, StatusExpired


class TestCommandTracker:
    def test_tokens_increase(self) -> None:
        tracker = CommandTracker()
        first = tracker.issue("commit", lambda t: CommitFinished(t, Ok("done")))
        second = tracker.issue("scan", StatusExpired)
        assert second.token > first.token

    def test_accept_once(self) -> None:
        """A result is accepted once; repeats are stale."""
        tracker = CommandTracker()
        command = tracker.issue("commit", lambda t: CommitFinished(t, Ok("done")))

        assert tracker.in_flight("commit")
        assert tracker.accept("commit", command.token)
        assert not tracker.in_flight("commit")
        assert not tracker.accept("commit", command.token)

    def test_newer_command_supersedes(self) -> None:
        tracker = CommandTracker()
        old = tracker.issue("name-check", StatusExpired)
        new = tracker.issue("name-check", StatusExpired)

        assert not tracker.accept("name-check", old.token)
        assert tracker.accept("name-check", new.token)

    def test_abandon(self) -> None:
        tracker = CommandTracker()
        command = tracker.issue("branches", StatusExpired)
        tracker.abandon("branches")
        assert not tracker.accept("branches", command.token)

    def test_delay_is_kept(self) -> None:
        command = CommandTracker().issue("status-expiry", StatusExpired, delay=3.0)
        assert command.delay == 3.0


class TestCommandExecute:
    def test_event_carries_token(self) -> None:
        command = CommandTracker().issue("commit", lambda t: CommitFinished(t, Ok("done")))
        event = command.execute()
        assert event == CommitFinished(command.token, Ok("done"))

    def test_exception_becomes_crash(self) -> None:
        def boom(token: int) -> CommitFinished:
            raise RuntimeError("index.lock exists")

        command = CommandTracker().issue("commit", boom)
        event = command.execute()

        assert event == CommandCrashed("commit", command.token, "index.lock exists")

    def test_empty_message_uses_type(self) -> None:
        def boom(token: int) -> CommitFinished:
            raise KeyError()

        event = CommandTracker().issue("commit", boom).execute()
        assert isinstance(event, CommandCrashed)
        assert event.message == "KeyError"
