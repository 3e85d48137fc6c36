"""Smart-commit partitioning.

Turns categorized files plus the user's per-file actions into a commit
plan: what to stage and commit, what to add to `.gitignore`, and the
commit message. Pure; `smart_commit.execute_plan` does the git work.

Usage:
    items = [CleanupItem.from_file(f) for f in files]
    match partition(items):
        case Ok(plan):
            print(plan.message, plan.commit_paths)
        case Err(error):
            print(error.message)  # "no files to commit"
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Literal

from distui.core.result import Err, Ok, Result

from .categorize import GitFile
from .rules import Category

__all__ = [
    "Action",
    "CleanupItem",
    "CommitError",
    "CommitPlan",
    "cycle_action",
    "default_action",
    "generate_commit_message",
    "partition",
]

Action = Literal["commit", "skip", "ignore"]

CommitErrorKind = Literal["no_files_to_commit", "ignore_failed", "stage_failed", "commit_failed"]

_DEFAULT_ACTIONS: dict[Category, Action] = {
    "auto": "commit",
    "ignore": "ignore",
    "docs": "skip",
    "other": "skip",
}

_NEXT_ACTION: dict[Action, Action] = {
    "commit": "skip",
    "skip": "ignore",
    "ignore": "commit",
}

_SOURCE_EXTENSIONS = frozenset(
    {".go", ".mod", ".sum", ".py", ".js", ".ts", ".rs", ".c", ".h", ".cpp", ".java", ".rb", ".sh"}
)
_DOC_EXTENSIONS = frozenset({".md", ".txt", ".rst", ".adoc"})
_CONFIG_EXTENSIONS = frozenset({".json", ".yaml", ".yml", ".toml"})


@dataclass(frozen=True, slots=True)
class CommitError:
    kind: CommitErrorKind
    message: str


def default_action(category: Category) -> Action:
    return _DEFAULT_ACTIONS[category]


def cycle_action(action: Action) -> Action:
    """commit -> skip -> ignore -> commit"""
    return _NEXT_ACTION[action]


@dataclass(frozen=True, slots=True)
class CleanupItem:
    """A changed file and what the user wants done with it."""

    file: GitFile
    action: Action

    @classmethod
    def from_file(cls, file: GitFile) -> CleanupItem:
        return cls(file=file, action=default_action(file.category))

    @property
    def path(self) -> str:
        return self.file.path

    @property
    def is_deleted(self) -> bool:
        return "D" in self.file.status

    def with_action(self, action: Action) -> CleanupItem:
        return replace(self, action=action)

    def cycled(self) -> CleanupItem:
        return replace(self, action=cycle_action(self.action))


@dataclass(frozen=True, slots=True)
class CommitPlan:
    """Result of partitioning: what one smart commit will do."""

    commit_paths: tuple[str, ...]
    deleted_paths: frozenset[str]
    ignore_paths: tuple[str, ...]
    message: str


def _extension(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path))[1].lower()


def generate_commit_message(paths: Iterable[str]) -> str:
    """Describe a commit by the kinds of files in it, most specific first."""
    exts = {_extension(p) for p in paths}
    has_source = bool(exts & _SOURCE_EXTENSIONS)
    has_docs = bool(exts & _DOC_EXTENSIONS)
    has_config = bool(exts & _CONFIG_EXTENSIONS)

    if has_source and has_docs:
        return "Update source code and documentation"
    if has_source:
        return "Update source code"
    if has_docs and exts <= _DOC_EXTENSIONS:
        return "Update documentation"
    if has_config and exts <= _CONFIG_EXTENSIONS:
        return "Update configuration files"
    return "Update project files"


def partition(
    items: Sequence[CleanupItem],
    *,
    message: str | None = None,
) -> Result[CommitPlan, CommitError]:
    """Split cleanup items into a commit plan.

    Args:
        items: Files with their chosen action; `skip` items are left alone.
        message: Explicit commit message; generated from extensions if None.

    Returns:
        Ok(CommitPlan), or Err(no_files_to_commit) when nothing has the
        `commit` action.
    """
    commit_items = [i for i in items if i.action == "commit"]
    ignore_paths = tuple(dict.fromkeys(i.path for i in items if i.action == "ignore"))

    if not commit_items:
        return Err(CommitError(kind="no_files_to_commit", message="no files to commit"))

    commit_paths = tuple(dict.fromkeys(i.path for i in commit_items))
    return Ok(
        CommitPlan(
            commit_paths=commit_paths,
            deleted_paths=frozenset(i.path for i in commit_items if i.is_deleted),
            ignore_paths=ignore_paths,
            message=message or generate_commit_message(commit_paths),
        )
    )
