"""Tests for distui.session.loop module."""

from __future__ import annotations

from distui.session.events import KeyPressed
from distui.session.loop import EventLoop
from distui.session.session import ConfigureSession

from ._fakes import FakeServices, make_config


def _session() -> ConfigureSession:
    return ConfigureSession(make_config(), FakeServices())


class TestEventLoop:
    def test_quit_key_ends_run(self) -> None:
        """A queued quit key ends the loop after start-up."""
        session = _session()
        seen: list[bool] = []
        loop = EventLoop(session, on_change=lambda s: seen.append(s.quit))
        loop.post(KeyPressed("q"))

        loop.run()

        assert session.quit
        assert seen[0] is False
        assert seen[-1] is True

    def test_closed_input_stops(self) -> None:
        """A key reader returning None stops the loop without quitting."""
        session = _session()
        EventLoop(session).run(lambda: None)
        assert not session.quit

    def test_keys_from_reader(self) -> None:
        keys = iter(["ctrl+c"])
        session = _session()
        EventLoop(session).run(lambda: next(keys, None))
        assert session.quit

    def test_command_results_reach_session(self) -> None:
        """Start-up reads run on the pool and their events are handled."""
        session = _session()

        def on_change(s: ConfigureSession) -> None:
            if s.cleanup.initialized:
                loop.post(KeyPressed("q"))

        loop = EventLoop(session, on_change=on_change)
        loop.run()

        assert [item.path for item in session.cleanup.items] == ["main.go", "README.md", "bin/tool"]

    def test_post_after_stop_is_dropped(self) -> None:
        session = _session()
        loop = EventLoop(session)
        loop.stop()
        loop.run()

        loop.post(KeyPressed("q"))
        assert loop._mailbox.empty()
