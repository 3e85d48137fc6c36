"""Git and hosting-provider operations.

- Repository: status, staging, commits, pushes, remotes, branches
- github: gh CLI wrappers (auth, repo create/view, pull requests)

Usage:
    from distui.git import Repository

    repo = Repository(Path("/path/to/project"))
    status = repo.status()
    if status.is_ok():
        print(f"Branch: {status.unwrap().branch}")
"""

from distui.git.github import GhError, RepoCreateRequest
from distui.git.repository import (
    BranchInfo,
    GitError,
    GitStatus,
    RepoState,
    Repository,
    StatusEntry,
)

__all__ = [
    "BranchInfo",
    "GhError",
    "GitError",
    "GitStatus",
    "RepoCreateRequest",
    "RepoState",
    "Repository",
    "StatusEntry",
]
