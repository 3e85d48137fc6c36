"""Commands: units of work that run off the event loop.

A command produces exactly one event. The session never waits on one; it
returns commands from `handle` and the loop (or a test) runs them and feeds
the resulting events back in.

Tokens: each op keeps the token of its most recent command. A result whose
token is no longer current for its op is stale and is dropped; abandoning
an op (closing the view that started it) is just forgetting its token.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass

from .events import CommandCrashed, Event, Op

__all__ = ["Command", "CommandTracker"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Command:
    op: Op
    token: int
    work: Callable[[], Event]
    delay: float = 0.0

    def execute(self) -> Event:
        """Run the work; an exception becomes a CommandCrashed event."""
        try:
            return self.work()
        except Exception as e:
            logger.exception("command %s (token %d) crashed", self.op, self.token)
            return CommandCrashed(op=self.op, token=self.token, message=str(e) or type(e).__name__)


class CommandTracker:
    """Hands out tokens and remembers which one is current per op."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._current: dict[Op, int] = {}

    def issue(self, op: Op, make: Callable[[int], Event], *, delay: float = 0.0) -> Command:
        """Create a command for op; `make` receives the token and builds the event."""
        token = next(self._counter)
        self._current[op] = token
        return Command(op=op, token=token, work=lambda: make(token), delay=delay)

    def accept(self, op: Op, token: int) -> bool:
        """True (and forget the token) if token is the current one for op."""
        if self._current.get(op) != token:
            logger.debug("dropping stale %s result (token %d)", op, token)
            return False
        del self._current[op]
        return True

    def in_flight(self, op: Op) -> bool:
        return op in self._current

    def abandon(self, op: Op) -> None:
        self._current.pop(op, None)
