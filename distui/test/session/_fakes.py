"""Fake services and a synchronous driver for configuration-session tests."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from distui.cleanup.categorize import GitFile
from distui.cleanup.partition import CommitPlan
from distui.cleanup.scanner import FlaggedFile, ScanAction, ScanResult
from distui.core.config import (
    BinaryInfo,
    ModuleInfo,
    ProjectConfig,
    ProjectInfo,
    RepositoryInfo,
)
from distui.core.result import Ok, Result
from distui.core.structured import StrDict
from distui.generation.drift import ArtifactKind, PendingGeneration
from distui.git.github import RepoCreateRequest
from distui.git.repository import BranchInfo, RemoteInfo, RepoState
from distui.registry.client import NameCheck
from distui.session.commands import Command
from distui.session.events import CleanupSnapshot, KeyPressed
from distui.session.session import ConfigureSession
from distui.session.setup import SetupDetection, SetupForm, VerifiedDistributions

REMOTE = RemoteInfo(url="git@github.com:acme/tool.git", owner="acme", name="tool")

DEFAULT_FILES = (
    GitFile(path="main.go", status="M", category="auto"),
    GitFile(path="README.md", status="??", category="docs"),
    GitFile(path="bin/tool", status="??", category="ignore"),
)


def make_config(*, setup_done: bool = True) -> ProjectConfig:
    config = ProjectConfig(
        project=ProjectInfo(
            identifier="github-com-acme-tool",
            path=Path("/work/tool"),
            module=ModuleInfo(name="github.com/acme/tool", version="v0.1.0"),
            repository=RepositoryInfo(owner="acme", name="tool"),
            binary=BinaryInfo(name="tool"),
        )
    )
    config.first_time_setup_completed = setup_done
    return config


class FakeServices:
    """Records calls and returns canned results; every field can be swapped."""

    def __init__(self) -> None:
        self.repo = RepoState(kind="dirty", branch="main", remote=REMOTE, changed=3)
        self.files: tuple[GitFile, ...] = DEFAULT_FILES
        self.cleanup_error: str | None = None
        self.name_check: NameCheck | None = None
        self.ignore_result: Result[list[str], str] = Ok([])
        self.commit_result: Result[str, str] = Ok("Committed 1 files: Update source code")
        self.commit_raises: Exception | None = None
        self.missing: list[ArtifactKind] = []
        self.pending = PendingGeneration()
        self.hand_authored_paths: list[str] = []
        self.archive_result: Result[str, str] = Ok(".distui-backup/20250101-000000.000000")
        self.generate_result: Result[list[str], str] = Ok([".goreleaser.yaml"])
        self.accounts = ["alice", "acme"]
        self.create_result: Result[str, str] = Ok("https://github.com/alice/tool")
        self.branch_list: Result[list[BranchInfo], str] = Ok(
            [BranchInfo("main", is_current=True), BranchInfo("release")]
        )
        self.push_result: Result[str, str] = Ok("Pushed main")
        self.detection: Result[SetupDetection, str] = Ok(SetupDetection(managed=True))
        self.verified: Result[VerifiedDistributions, str] = Ok(VerifiedDistributions())
        self.scan_result: Result[ScanResult, str] = Ok(ScanResult())
        self.save_result: Result[None, str] = Ok(None)

        self.saved: list[StrDict] = []
        self.plans: list[CommitPlan] = []
        self.committed: list[CommitPlan] = []
        self.generated: list[PendingGeneration] = []
        self.archived: list[list[str]] = []
        self.name_checks: list[str] = []
        self.repo_requests: list[RepoCreateRequest] = []
        self.pushed: list[BranchInfo] = []
        self.scan_actions: list[tuple[str, ScanAction]] = []
        self.verify_forms: list[SetupForm] = []

    def load_cleanup(self, config: ProjectConfig) -> Result[CleanupSnapshot, str]:
        if self.cleanup_error is not None:
            raise RuntimeError(self.cleanup_error)
        return Ok(CleanupSnapshot(files=self.files, repo=self.repo))

    def repo_state(self) -> Result[RepoState, str]:
        return Ok(self.repo)

    def check_npm_name(self, name: str) -> NameCheck:
        self.name_checks.append(name)
        return self.name_check or NameCheck(name=name, status="available")

    def record_ignores(self, plan: CommitPlan) -> Result[list[str], str]:
        self.plans.append(plan)
        return self.ignore_result

    def execute_commit(self, plan: CommitPlan) -> Result[str, str]:
        if self.commit_raises is not None:
            raise self.commit_raises
        self.committed.append(plan)
        return self.commit_result

    def missing_artifacts(self, config: ProjectConfig) -> list[ArtifactKind]:
        return list(self.missing)

    def detect_changes(self, config: ProjectConfig) -> PendingGeneration:
        return self.pending

    def hand_authored(
        self, config: ProjectConfig, kinds: Iterable[ArtifactKind] | None = None
    ) -> list[str]:
        return list(self.hand_authored_paths)

    def archive(self, paths: list[str]) -> Result[str, str]:
        self.archived.append(list(paths))
        return self.archive_result

    def generate(self, config: ProjectConfig, pending: PendingGeneration) -> Result[list[str], str]:
        self.generated.append(pending)
        return self.generate_result

    def github_accounts(self) -> list[str]:
        return list(self.accounts)

    def create_repo(self, request: RepoCreateRequest) -> Result[str, str]:
        self.repo_requests.append(request)
        return self.create_result

    def branches(self) -> Result[list[BranchInfo], str]:
        return self.branch_list

    def push_branch(self, branch: BranchInfo) -> Result[str, str]:
        self.pushed.append(branch)
        return self.push_result

    def detect_setup(self, config: ProjectConfig) -> Result[SetupDetection, str]:
        return self.detection

    def verify_distributions(self, form: SetupForm) -> Result[VerifiedDistributions, str]:
        self.verify_forms.append(form)
        return self.verified

    def scan(self) -> Result[ScanResult, str]:
        return self.scan_result

    def apply_scan_action(self, flagged: FlaggedFile, action: ScanAction) -> Result[str, str]:
        self.scan_actions.append((flagged.path, action))
        return Ok(f"{action} {flagged.path}")

    def save(self, config: ProjectConfig) -> Result[None, str]:
        if isinstance(self.save_result, Ok):
            self.saved.append(config.to_dict())
        return self.save_result


# -----------------------------------------------------------------------------
# Driver
# -----------------------------------------------------------------------------


def drain(session: ConfigureSession, commands: Iterable[Command]) -> list[Command]:
    """Run immediate commands to completion, feeding events back in order.

    Delayed commands (timers) are not run; they are returned instead.
    """
    queue = list(commands)
    delayed: list[Command] = []
    while queue:
        command = queue.pop(0)
        if command.delay > 0:
            delayed.append(command)
            continue
        queue.extend(session.handle(command.execute()))
    return delayed


def press(session: ConfigureSession, *keys: str) -> list[Command]:
    """Press keys one after another, draining after each; returns the timers."""
    delayed: list[Command] = []
    for key in keys:
        delayed += drain(session, session.handle(KeyPressed(key)))
    return delayed


def started(
    services: FakeServices | None = None, config: ProjectConfig | None = None
) -> tuple[ConfigureSession, FakeServices]:
    """A session that has run its start-up commands."""
    services = services or FakeServices()
    session = ConfigureSession(config or make_config(), services)
    drain(session, session.start())
    return session, services
