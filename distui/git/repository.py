"""Git repository abstraction.

The Repository class wraps the handful of git invocations distui needs:
reading working-tree status, staging, committing, pushing, and inspecting
remotes and branches. Every operation returns a Result; git itself is a
black box and its stderr is the error text shown to the user.

Usage:
    repo = Repository(Path("/path/to/project"))

    match repo.status():
        case Ok(status):
            for entry in status.entries:
                print(entry.xy, entry.path)
        case Err(e):
            print(f"Error: {e.message}")

    match repo.repo_state():
        case Ok(state):
            print(state.kind)  # no_repo | no_remote | unpushed | dirty | clean
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from distui.core.result import Err, Ok, Result
from distui.platform.process import ProcessError
from distui.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "BranchInfo",
    "GitError",
    "GitStatus",
    "RemoteInfo",
    "RepoState",
    "RepoStateKind",
    "Repository",
    "StatusEntry",
    "parse_remote_url",
]

logger = logging.getLogger(__name__)

RepoStateKind = Literal["no_repo", "no_remote", "unpushed", "dirty", "clean"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??", "D ")
        path: File path relative to the repository root
    """

    xy: str
    path: str

    @property
    def is_staged(self) -> bool:
        return self.xy != "??" and self.xy[0] != " "

    @property
    def is_unstaged(self) -> bool:
        return self.xy != "??" and self.xy[1] != " "

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    @property
    def is_deleted(self) -> bool:
        """True if either side of the status reports a deletion."""
        return "D" in self.xy

    @property
    def code(self) -> str:
        """Compact status code for display ("M", "A", "D", "R", "??")."""
        if self.is_untracked:
            return "??"
        return self.xy.strip()[:1] or self.xy


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed `git status --porcelain=v1 -b` output.

    Attributes:
        branch: Current branch name
        upstream: Upstream branch (e.g., "origin/main"), None if not set
        ahead: Number of commits ahead of upstream
        behind: Number of commits behind upstream
        entries: All status entries (staged, unstaged, untracked)
    """

    branch: str
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0


@dataclass(frozen=True, slots=True)
class RemoteInfo:
    url: str
    owner: str
    name: str


@dataclass(frozen=True, slots=True)
class RepoState:
    """Where the repository stands relative to its hosting provider."""

    kind: RepoStateKind
    branch: str = ""
    remote: RemoteInfo | None = None
    unpushed: int = 0
    changed: int = 0


@dataclass(frozen=True, slots=True)
class BranchInfo:
    name: str
    is_current: bool = False
    tracking: str = ""


def _unquote(quoted: str) -> str:
    """Undo git's C-style quoting (octal escapes are UTF-8 bytes)."""
    raw = quoted.encode("latin-1", errors="backslashreplace").decode("unicode_escape")
    return raw.encode("latin-1").decode("utf-8", errors="replace")


def parse_remote_url(url: str) -> tuple[str, str]:
    """Extract (owner, name) from a GitHub SSH or HTTPS remote URL.

    Non-GitHub URLs yield an empty owner and the last path component.
    """
    cleaned = url.strip().removesuffix("/").removesuffix(".git")

    if cleaned.startswith("git@github.com:"):
        parts = cleaned.removeprefix("git@github.com:").split("/")
        if len(parts) == 2:
            return parts[0], parts[1]

    marker = "github.com/"
    idx = cleaned.find(marker)
    if idx >= 0:
        parts = cleaned[idx + len(marker) :].split("/")
        if len(parts) >= 2:
            return parts[0], parts[1]

    return "", cleaned.rsplit("/", 1)[-1].rsplit(":", 1)[-1]


class Repository:
    """Git operations on one project working tree.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a git repository (.git dir or worktree file)."""
        return (self.path / ".git").exists()

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def status(self) -> Result[GitStatus, GitError]:
        """Runs `git status --porcelain=v1 -b -uall` and parses the output."""
        result = self._run(["status", "--porcelain=v1", "-b", "--untracked-files=all"])
        match result:
            case Err(e):
                return Err(self._error("status", e))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def is_tracked(self, path: str) -> bool:
        return isinstance(self._run(["ls-files", "--error-unmatch", "--", path]), Ok)

    def remote(self, name: str = "origin") -> RemoteInfo | None:
        result = self._run(["remote", "get-url", name])
        if isinstance(result, Err):
            return None
        url = result.value.strip()
        if not url:
            return None
        owner, repo_name = parse_remote_url(url)
        return RemoteInfo(url=url, owner=owner, name=repo_name)

    def unpushed_count(self) -> int:
        """Commits on HEAD not yet on the upstream.

        Falls back to origin/main, then origin/master when no upstream is set.
        Returns 0 when nothing can be compared.
        """
        for base in ("@{upstream}", "origin/main", "origin/master"):
            result = self._run(["rev-list", "--count", f"{base}..HEAD"])
            if isinstance(result, Ok):
                try:
                    return int(result.value.strip() or "0")
                except ValueError:
                    return 0
        return 0

    def tracked_files(self) -> Result[list[str], GitError]:
        result = self._run(["ls-files"])
        if isinstance(result, Err):
            return Err(self._error("ls-files", result.error))
        return Ok([line for line in result.value.splitlines() if line.strip()])

    def has_commits(self) -> bool:
        return isinstance(self._run(["rev-parse", "--verify", "HEAD"]), Ok)

    def default_branch(self) -> str:
        """origin/HEAD's branch, else the current branch, else "main"."""
        result = self._run(["symbolic-ref", "refs/remotes/origin/HEAD"])
        if isinstance(result, Ok):
            branch = result.value.strip().removeprefix("refs/remotes/origin/")
            if branch:
                return branch
        return self.current_branch() or "main"

    def latest_tag(self) -> str | None:
        result = self._run(["describe", "--tags", "--abbrev=0"])
        if isinstance(result, Err):
            return None
        return result.value.strip() or None

    def repo_state(self) -> Result[RepoState, GitError]:
        """Classify the repository: no_repo, no_remote, unpushed, dirty or clean."""
        if not self.exists():
            return Ok(RepoState(kind="no_repo"))

        status = self.status()
        if isinstance(status, Err):
            return status
        st = status.value
        changed = len(st.entries)

        remote = self.remote()
        if remote is None:
            return Ok(RepoState(kind="no_remote", branch=st.branch, changed=changed))

        unpushed = self.unpushed_count() if self.has_commits() else 0
        if unpushed > 0:
            kind: RepoStateKind = "unpushed"
        elif changed > 0:
            kind = "dirty"
        else:
            kind = "clean"
        return Ok(
            RepoState(
                kind=kind,
                branch=st.branch,
                remote=remote,
                unpushed=unpushed,
                changed=changed,
            )
        )

    def branches(self) -> Result[list[BranchInfo], GitError]:
        """Local branches with their upstreams, current branch first."""
        result = self._run(
            [
                "for-each-ref",
                "--format=%(refname:short)|%(upstream:short)|%(HEAD)",
                "refs/heads",
            ]
        )
        if isinstance(result, Err):
            return Err(self._error("for-each-ref", result.error))

        branches: list[BranchInfo] = []
        for line in result.value.splitlines():
            parts = line.strip().split("|")
            if len(parts) != 3 or not parts[0]:
                continue
            branches.append(
                BranchInfo(name=parts[0], tracking=parts[1], is_current=parts[2] == "*")
            )
        branches.sort(key=lambda b: (not b.is_current, b.name))
        return Ok(branches)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, path: str, *, deleted: bool = False) -> Result[None, GitError]:
        """Stage one path; deletions go through `add -A` so the removal is recorded."""
        args = ["add", "-A", "--", path] if deleted else ["add", "--", path]
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(f"add {path}", result.error))
        return Ok(None)

    def commit(self, message: str) -> Result[str, GitError]:
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            return Err(self._error("commit", result.error))
        return Ok(result.value.strip())

    def assume_unchanged(self, path: str) -> Result[None, GitError]:
        """Stop reporting local changes to a tracked file (history is kept)."""
        result = self._run(["update-index", "--assume-unchanged", "--", path])
        if isinstance(result, Err):
            return Err(self._error(f"update-index {path}", result.error))
        return Ok(None)

    def push_head(self) -> Result[str, GitError]:
        """Push the current branch and set its upstream."""
        result = self._run(["push", "-u", "origin", "HEAD"])
        if isinstance(result, Err):
            return Err(self._error("push", result.error))
        return Ok(result.value.strip())

    def push_to_branch(self, branch: str) -> Result[str, GitError]:
        """Push HEAD to a named remote branch."""
        result = self._run(["push", "origin", f"HEAD:refs/heads/{branch}"])
        if isinstance(result, Err):
            return Err(self._error(f"push {branch}", result.error))
        return Ok(result.value.strip())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _error(self, command: str, e: ProcessError) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
            returncode=e.returncode,
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]

        if not lines:
            return GitStatus(branch="")

        branch = ""
        upstream: str | None = None
        ahead = behind = 0
        if lines[0].startswith("##"):
            branch, upstream = self._parse_branch_line(lines[0])
            ahead, behind = self._parse_ahead_behind(lines[0])
            lines = lines[1:]

        entries: list[StatusEntry] = []
        for line in lines:
            entry = self._parse_entry(line)
            if entry:
                entries.append(entry)

        return GitStatus(
            branch=branch,
            upstream=upstream,
            ahead=ahead,
            behind=behind,
            entries=tuple(entries),
        )

    def _parse_branch_line(self, line: str) -> tuple[str, str | None]:
        """Parse branch line: ## branch...upstream [info]"""
        s = line.strip()[2:].lstrip()
        s = s.split(" [", 1)[0].strip()
        if s.startswith("No commits yet on "):
            s = s.removeprefix("No commits yet on ")

        if "..." in s:
            left, right = s.split("...", 1)
            return (left.strip(), right.strip())

        return (s, None)

    def _parse_ahead_behind(self, line: str) -> tuple[int, int]:
        match = re.search(r"\[([^\]]+)\]", line)
        if not match:
            return (0, 0)

        inside = match.group(1)
        ahead_match = re.search(r"ahead\s+(\d+)", inside)
        behind_match = re.search(r"behind\s+(\d+)", inside)
        ahead = int(ahead_match.group(1)) if ahead_match else 0
        behind = int(behind_match.group(1)) if behind_match else 0
        return (ahead, behind)

    def _parse_entry(self, line: str) -> StatusEntry | None:
        if len(line) < 4:
            return None

        xy = line[:2]
        path = line[3:]
        # Renames and copies: "R  old -> new"
        if xy[0] in "RC" and " -> " in path:
            path = path.split(" -> ", 1)[1]
        if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
            path = _unquote(path[1:-1])

        return StatusEntry(xy=xy, path=path)
