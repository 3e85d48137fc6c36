"""Background git watcher.

A self-rescheduling tick. Each tick refreshes the working-tree snapshot if
the cleanup cache has been loaded at least once and no read is already in
flight, then schedules the next tick. Before the first load a tick only
reschedules.
"""

from __future__ import annotations

from collections.abc import Callable

from distui.core.result import Result

from .commands import Command, CommandTracker
from .events import CleanupSnapshot, WatchRefreshed, WatchTick

__all__ = ["GitWatcher", "WATCH_INTERVAL_SECONDS"]

WATCH_INTERVAL_SECONDS = 2.0


class GitWatcher:
    def __init__(self, interval: float = WATCH_INTERVAL_SECONDS) -> None:
        self.interval = interval
        self.running = False

    def schedule(self, tracker: CommandTracker) -> Command:
        self.running = True
        return tracker.issue("watch-tick", WatchTick, delay=self.interval)

    def on_tick(
        self,
        tracker: CommandTracker,
        *,
        initialized: bool,
        refresh: Callable[[], Result[CleanupSnapshot, str]],
    ) -> list[Command]:
        commands: list[Command] = []
        busy = tracker.in_flight("watch-refresh") or tracker.in_flight("cleanup-load")
        if initialized and not busy:
            commands.append(tracker.issue("watch-refresh", lambda t: WatchRefreshed(t, refresh())))
        commands.append(self.schedule(tracker))
        return commands
