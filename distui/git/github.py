from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from time import sleep
from typing import Literal

from distui.core.result import Err, Ok, Result
from distui.platform.process import ProcessError
from distui.platform.process import run as run_process

logger = logging.getLogger(__name__)

GH_TIMEOUT_SECONDS = 60.0
GH_CREATE_TIMEOUT_SECONDS = 3 * 60.0
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

GhErrorKind = Literal[
    "gh_missing",
    "gh_auth_required",
    "repo_create_failed",
    "repo_not_found",
    "pr_create_failed",
]


@dataclass(frozen=True, slots=True)
class GhError:
    kind: GhErrorKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RepoCreateRequest:
    name: str
    description: str = ""
    private: bool = True
    owner: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}" if self.owner else self.name


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "http 429",
        "http 502",
        "http 503",
    )
    return any(marker in text for marker in markers)


def run_gh_read(
    *,
    cwd: Path,
    cmd: list[str],
    kind: GhErrorKind,
    message: str,
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, GhError]:
    """Run a read-only gh command, retrying transient network failures."""
    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(cmd, cwd=cwd, timeout=timeout)
        if isinstance(result, Ok):
            return result

        error = result.error
        if attempt < attempts - 1 and _is_transient_gh_error(error):
            logger.debug("transient gh failure, retrying: %s", error.detail)
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue

        return Err(GhError(kind=kind, message=message, hint=error.stderr.strip() or None))

    return Err(GhError(kind=kind, message=message))


def ensure_gh_available() -> Result[None, GhError]:
    if shutil.which("gh") is None:
        return Err(
            GhError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, cwd: Path) -> Result[None, GhError]:
    result = run_process(["gh", "auth", "status"], cwd=cwd, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            GhError(
                kind="gh_auth_required",
                message="gh auth required",
                hint="Run: gh auth login",
            )
        )
    return Ok(None)


def repo_exists(*, cwd: Path, owner: str, name: str) -> bool:
    """Check the hosting provider for owner/name."""
    result = run_gh_read(
        cwd=cwd,
        cmd=["gh", "repo", "view", f"{owner}/{name}"],
        kind="repo_not_found",
        message=f"repository not found: {owner}/{name}",
    )
    return isinstance(result, Ok)


def create_repo(*, cwd: Path, request: RepoCreateRequest) -> Result[str, GhError]:
    """Create the remote repository from the local one and push it.

    Runs `gh repo create [owner/]name --source . --private|--public
    [--description ...] --push`. Returns the created repository name.
    """
    available = ensure_gh_available()
    if isinstance(available, Err):
        return available
    auth = ensure_gh_auth(cwd=cwd)
    if isinstance(auth, Err):
        return auth

    cmd = [
        "gh",
        "repo",
        "create",
        request.full_name,
        "--source",
        ".",
        "--private" if request.private else "--public",
    ]
    if request.description:
        cmd += ["--description", request.description]
    cmd.append("--push")

    result = run_process(cmd, cwd=cwd, timeout=GH_CREATE_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            GhError(
                kind="repo_create_failed",
                message=f"failed to create {request.full_name}",
                hint=result.error.detail,
            )
        )
    logger.info("created repository %s", request.full_name)
    return Ok(request.full_name)


def create_pull_request(*, cwd: Path, base: str, head: str) -> Result[str, GhError]:
    """Open a pull request from head into base; returns the PR URL."""
    result = run_process(
        ["gh", "pr", "create", "--base", base, "--head", head, "--fill"],
        cwd=cwd,
        timeout=GH_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return Err(
            GhError(
                kind="pr_create_failed",
                message=f"failed to open pull request {head} -> {base}",
                hint=result.error.detail,
            )
        )
    return Ok(result.value.strip())
