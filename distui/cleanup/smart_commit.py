"""Execute a commit plan through git.

Two steps. `record_ignores` appends the plan's ignore entries to
.gitignore; the configuration session runs it while handling the confirm
key so the ignore file is only ever written from the event loop.
`execute_plan` then marks tracked ignored files assume-unchanged, stages
.gitignore and the commit set, and makes one commit.

Any failing step aborts and returns git's error text. Files already staged
when a later step fails stay staged; nothing is rolled back.
"""

from __future__ import annotations

import logging
from pathlib import Path

from distui.core.result import Err, Ok, Result
from distui.git.repository import Repository

from .gitignore import add_to_gitignore
from .partition import CommitError, CommitPlan

__all__ = ["execute_plan", "record_ignores"]

logger = logging.getLogger(__name__)


def record_ignores(root: Path, plan: CommitPlan) -> Result[list[str], CommitError]:
    """Append the plan's ignore paths to .gitignore; returns the new entries."""
    if not plan.ignore_paths:
        return Ok([])
    added = add_to_gitignore(root, plan.ignore_paths)
    if isinstance(added, Err):
        return Err(CommitError(kind="ignore_failed", message=added.error))
    return added


def _untrack_ignored(repo: Repository, paths: tuple[str, ...]) -> Result[None, CommitError]:
    for path in paths:
        if not repo.is_tracked(path):
            continue
        marked = repo.assume_unchanged(path)
        if isinstance(marked, Err):
            return Err(CommitError(kind="ignore_failed", message=marked.error.message))
    if paths:
        staged = repo.add(".gitignore")
        if isinstance(staged, Err):
            return Err(CommitError(kind="stage_failed", message=staged.error.message))
    return Ok(None)


def execute_plan(repo: Repository, plan: CommitPlan) -> Result[str, CommitError]:
    """Stage and commit a plan whose ignores are already recorded.

    Returns a one-line summary on success.
    """
    untracked = _untrack_ignored(repo, plan.ignore_paths)
    if isinstance(untracked, Err):
        return untracked

    for path in plan.commit_paths:
        staged = repo.add(path, deleted=path in plan.deleted_paths)
        if isinstance(staged, Err):
            logger.warning("staging %s failed: %s", path, staged.error.message)
            return Err(CommitError(kind="stage_failed", message=staged.error.message))

    committed = repo.commit(plan.message)
    if isinstance(committed, Err):
        logger.warning("commit failed after staging %d files", len(plan.commit_paths))
        return Err(CommitError(kind="commit_failed", message=committed.error.message))

    return Ok(f"Committed {len(plan.commit_paths)} files: {plan.message}")
