"""Event loop for the configuration session.

One mailbox, one consumer. Commands run on a small thread pool (or a timer
when they carry a delay) and post their single event back to the mailbox;
key presses are posted by a reader thread. The loop hands events to the
session strictly one at a time, so session state is never touched from two
threads.

Usage:
    loop = EventLoop(session, on_change=view.refresh)
    loop.run(read_key)
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor

from .commands import Command
from .events import Event, KeyPressed
from .session import ConfigureSession

__all__ = ["EventLoop"]

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


class EventLoop:
    def __init__(
        self,
        session: ConfigureSession,
        *,
        on_change: Callable[[ConfigureSession], None] | None = None,
        max_workers: int = DEFAULT_WORKERS,
    ) -> None:
        self.session = session
        self._on_change = on_change
        self._mailbox: queue.Queue[Event | None] = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="distui")
        self._timers: list[threading.Timer] = []
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    def post(self, event: Event) -> None:
        """Queue an event; safe from any thread."""
        if not self._stopped.is_set():
            self._mailbox.put(event)

    def stop(self) -> None:
        self._mailbox.put(None)

    def dispatch(self, commands: Iterable[Command]) -> None:
        for command in commands:
            if command.delay > 0:
                timer = threading.Timer(command.delay, self._run_command, args=(command,))
                timer.daemon = True
                with self._lock:
                    self._timers = [t for t in self._timers if t.is_alive()]
                    self._timers.append(timer)
                timer.start()
            else:
                self._executor.submit(self._run_command, command)

    def _run_command(self, command: Command) -> None:
        if self._stopped.is_set():
            return
        self.post(command.execute())

    def _read_keys(self, read_key: Callable[[], str | None]) -> None:
        while not self._stopped.is_set():
            key = read_key()
            if key is None:
                self.stop()
                return
            self.post(KeyPressed(key))

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.session)

    def run(self, read_key: Callable[[], str | None] | None = None) -> None:
        """Process events until the session quits or `stop()` is called.

        Args:
            read_key: Blocking key reader run on a daemon thread; returning
                None ends the loop (input closed).
        """
        if read_key is not None:
            reader = threading.Thread(
                target=self._read_keys, args=(read_key,), name="distui-keys", daemon=True
            )
            reader.start()

        try:
            self.dispatch(self.session.start())
            self._changed()
            while not self.session.quit:
                event = self._mailbox.get()
                if event is None:
                    break
                self.dispatch(self.session.handle(event))
                self._changed()
        finally:
            self._shutdown()

    def _shutdown(self) -> None:
        self._stopped.set()
        with self._lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
        logger.debug("event loop stopped")
