"""Events delivered to the configuration session.

Input events come from the terminal; every other event is the single
completion of a command and carries the command's op and token so the
session can drop results it no longer cares about.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal

from distui.cleanup.categorize import GitFile
from distui.cleanup.scanner import ScanResult
from distui.core.result import Result
from distui.git.repository import BranchInfo, RepoState
from distui.registry.client import NameCheck

from .setup import SetupDetection, VerifiedDistributions

__all__ = [
    "BranchPushed",
    "BranchesLoaded",
    "CleanupLoaded",
    "CleanupSnapshot",
    "CommandCrashed",
    "CommitFinished",
    "Event",
    "FilesGenerated",
    "GitHubStatusLoaded",
    "KeyPressed",
    "NameChecked",
    "Op",
    "RepoCreated",
    "Resized",
    "ResultEvent",
    "ScanFinished",
    "SetupDetected",
    "SetupVerified",
    "SmartCommitFinished",
    "StatusExpired",
    "WatchRefreshed",
    "WatchTick",
]

Op = Literal[
    "cleanup-load",
    "watch-refresh",
    "watch-tick",
    "github-status",
    "name-check",
    "commit",
    "smart-commit",
    "generate",
    "repo-create",
    "branches",
    "branch-push",
    "setup-detect",
    "setup-verify",
    "scan",
    "status-expiry",
]


@dataclass(frozen=True, slots=True)
class CleanupSnapshot:
    """Changed files plus repository state, read together."""

    files: tuple[GitFile, ...]
    repo: RepoState


# -----------------------------------------------------------------------------
# Input
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class KeyPressed:
    """One key: a name such as "up", "enter", "esc", "shift+tab", "space",
    "backspace", or a single typed character.
    """

    key: str


@dataclass(frozen=True, slots=True)
class Resized:
    width: int
    height: int


# -----------------------------------------------------------------------------
# Timers
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WatchTick:
    op: ClassVar[Op] = "watch-tick"
    token: int


@dataclass(frozen=True, slots=True)
class StatusExpired:
    op: ClassVar[Op] = "status-expiry"
    token: int


# -----------------------------------------------------------------------------
# Command results
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CleanupLoaded:
    op: ClassVar[Op] = "cleanup-load"
    token: int
    result: Result[CleanupSnapshot, str]


@dataclass(frozen=True, slots=True)
class WatchRefreshed:
    op: ClassVar[Op] = "watch-refresh"
    token: int
    result: Result[CleanupSnapshot, str]


@dataclass(frozen=True, slots=True)
class GitHubStatusLoaded:
    op: ClassVar[Op] = "github-status"
    token: int
    result: Result[RepoState, str]


@dataclass(frozen=True, slots=True)
class NameChecked:
    op: ClassVar[Op] = "name-check"
    token: int
    check: NameCheck


@dataclass(frozen=True, slots=True)
class CommitFinished:
    op: ClassVar[Op] = "commit"
    token: int
    result: Result[str, str]


@dataclass(frozen=True, slots=True)
class SmartCommitFinished:
    op: ClassVar[Op] = "smart-commit"
    token: int
    result: Result[str, str]


@dataclass(frozen=True, slots=True)
class FilesGenerated:
    op: ClassVar[Op] = "generate"
    token: int
    result: Result[list[str], str]


@dataclass(frozen=True, slots=True)
class RepoCreated:
    op: ClassVar[Op] = "repo-create"
    token: int
    result: Result[str, str]


@dataclass(frozen=True, slots=True)
class BranchesLoaded:
    op: ClassVar[Op] = "branches"
    token: int
    result: Result[list[BranchInfo], str]


@dataclass(frozen=True, slots=True)
class BranchPushed:
    op: ClassVar[Op] = "branch-push"
    token: int
    result: Result[str, str]


@dataclass(frozen=True, slots=True)
class SetupDetected:
    op: ClassVar[Op] = "setup-detect"
    token: int
    result: Result[SetupDetection, str]


@dataclass(frozen=True, slots=True)
class SetupVerified:
    op: ClassVar[Op] = "setup-verify"
    token: int
    result: Result[VerifiedDistributions, str]


@dataclass(frozen=True, slots=True)
class ScanFinished:
    op: ClassVar[Op] = "scan"
    token: int
    result: Result[ScanResult, str]


@dataclass(frozen=True, slots=True)
class CommandCrashed:
    """A command raised instead of returning a Result."""

    op: Op
    token: int
    message: str


ResultEvent = (
    WatchTick
    | StatusExpired
    | CleanupLoaded
    | WatchRefreshed
    | GitHubStatusLoaded
    | NameChecked
    | CommitFinished
    | SmartCommitFinished
    | FilesGenerated
    | RepoCreated
    | BranchesLoaded
    | BranchPushed
    | SetupDetected
    | SetupVerified
    | ScanFinished
    | CommandCrashed
)

type Event = KeyPressed | Resized | ResultEvent
