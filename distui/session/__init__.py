"""Configuration session for `distui configure`.

The session is a state machine driven by events; slow work runs as
commands whose results come back as events.
"""

from distui.session.commands import Command, CommandTracker
from distui.session.events import Event, KeyPressed, Resized
from distui.session.loop import EventLoop
from distui.session.services import ProjectServices, SessionServices
from distui.session.session import ConfigureSession, StatusMessage
from distui.session.watcher import GitWatcher

__all__ = [
    # Session
    "ConfigureSession",
    "StatusMessage",
    "EventLoop",
    # Commands and events
    "Command",
    "CommandTracker",
    "Event",
    "KeyPressed",
    "Resized",
    "GitWatcher",
    # Collaborators
    "ProjectServices",
    "SessionServices",
]
