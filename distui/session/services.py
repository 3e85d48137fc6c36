"""Collaborators the configuration session talks to.

The session only sees `SessionServices`. `ProjectServices` is the real
implementation over git, gh, the registries and the config store; tests pass
a fake. Every method returns plain Results with string errors, ready to be
shown as a status message.

Anything touching git, gh or a registry is only called from inside a
command; the rest is cheap enough to call while handling an event.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from distui.cleanup.categorize import categorize_entries
from distui.cleanup.partition import CommitPlan
from distui.cleanup.scanner import (
    FlaggedFile,
    ScanAction,
    ScanResult,
    apply_scan_action,
    scan_repository,
)
from distui.cleanup.smart_commit import execute_plan, record_ignores
from distui.core.config import GlobalConfig, ProjectConfig
from distui.core.result import Err, Ok, Result
from distui.core.store import ConfigStore
from distui.detection.distributions import detect_distributions
from distui.generation import drift
from distui.generation.drift import ArtifactKind, PendingGeneration
from distui.git import github
from distui.git.github import RepoCreateRequest
from distui.git.repository import BranchInfo, RepoState, Repository
from distui.registry import client as registry
from distui.registry.client import NameCheck, PublishedVersion

from .events import CleanupSnapshot
from .setup import SetupDetection, SetupForm, VerifiedDistributions

__all__ = ["ProjectServices", "SessionServices"]

logger = logging.getLogger(__name__)


class SessionServices(Protocol):
    def load_cleanup(self, config: ProjectConfig) -> Result[CleanupSnapshot, str]:
        """Read changed files and repository state."""
        ...

    def repo_state(self) -> Result[RepoState, str]: ...

    def check_npm_name(self, name: str) -> NameCheck: ...

    def record_ignores(self, plan: CommitPlan) -> Result[list[str], str]: ...

    def execute_commit(self, plan: CommitPlan) -> Result[str, str]: ...

    def missing_artifacts(self, config: ProjectConfig) -> list[ArtifactKind]: ...

    def detect_changes(self, config: ProjectConfig) -> PendingGeneration: ...

    def hand_authored(
        self, config: ProjectConfig, kinds: Iterable[ArtifactKind] | None = None
    ) -> list[str]: ...

    def archive(self, paths: list[str]) -> Result[str, str]: ...

    def generate(
        self, config: ProjectConfig, pending: PendingGeneration
    ) -> Result[list[str], str]: ...

    def github_accounts(self) -> list[str]: ...

    def create_repo(self, request: RepoCreateRequest) -> Result[str, str]: ...

    def branches(self) -> Result[list[BranchInfo], str]: ...

    def push_branch(self, branch: BranchInfo) -> Result[str, str]: ...

    def detect_setup(self, config: ProjectConfig) -> Result[SetupDetection, str]: ...

    def verify_distributions(self, form: SetupForm) -> Result[VerifiedDistributions, str]: ...

    def scan(self) -> Result[ScanResult, str]: ...

    def apply_scan_action(self, flagged: FlaggedFile, action: ScanAction) -> Result[str, str]: ...

    def save(self, config: ProjectConfig) -> Result[None, str]: ...


class ProjectServices:
    """SessionServices for one project directory."""

    def __init__(
        self,
        root: Path,
        *,
        store: ConfigStore | None = None,
        global_config: GlobalConfig | None = None,
    ) -> None:
        self.root = root
        self.repo = Repository(root)
        self.store = store or ConfigStore()
        self.global_config = global_config or self.store.load_global_or_default()

    # -------------------------------------------------------------------------
    # Working tree
    # -------------------------------------------------------------------------

    def load_cleanup(self, config: ProjectConfig) -> Result[CleanupSnapshot, str]:
        state = self.repo_state()
        if isinstance(state, Err):
            return state
        if state.value.kind == "no_repo":
            return Ok(CleanupSnapshot(files=(), repo=state.value))

        status = self.repo.status()
        if isinstance(status, Err):
            return Err(status.error.message)

        prefs = config.config.smart_commit
        rules = prefs.categories if prefs.use_custom_rules else None
        files = categorize_entries(
            ((entry.code, entry.path) for entry in status.value.entries),
            rules,
            binary_name=config.project.binary_name,
        )
        return Ok(CleanupSnapshot(files=tuple(files), repo=state.value))

    def repo_state(self) -> Result[RepoState, str]:
        result = self.repo.repo_state()
        if isinstance(result, Err):
            return Err(result.error.message)
        return result

    def record_ignores(self, plan: CommitPlan) -> Result[list[str], str]:
        result = record_ignores(self.root, plan)
        if isinstance(result, Err):
            return Err(result.error.message)
        return result

    def execute_commit(self, plan: CommitPlan) -> Result[str, str]:
        result = execute_plan(self.repo, plan)
        if isinstance(result, Err):
            return Err(result.error.message)
        return result

    # -------------------------------------------------------------------------
    # Release artifacts
    # -------------------------------------------------------------------------

    def missing_artifacts(self, config: ProjectConfig) -> list[ArtifactKind]:
        return drift.missing_artifacts(config.project, config)

    def detect_changes(self, config: ProjectConfig) -> PendingGeneration:
        return drift.detect_changes(config.project, config)

    def hand_authored(
        self, config: ProjectConfig, kinds: Iterable[ArtifactKind] | None = None
    ) -> list[str]:
        paths = drift.hand_authored_paths(self.root, config)
        if kinds is None:
            return paths
        wanted = {rel for kind in kinds for rel in drift.artifact(kind, config).candidates}
        return [p for p in paths if p in wanted]

    def archive(self, paths: list[str]) -> Result[str, str]:
        if not paths:
            return Ok("")
        result = drift.archive_files(self.root, paths)
        if isinstance(result, Err):
            return Err(result.error.message)
        return Ok(result.value.relative_to(self.root).as_posix())

    def generate(self, config: ProjectConfig, pending: PendingGeneration) -> Result[list[str], str]:
        result = drift.generate(config.project, config, pending)
        if isinstance(result, Err):
            return Err(result.error.message)
        return result

    # -------------------------------------------------------------------------
    # Hosting provider
    # -------------------------------------------------------------------------

    def github_accounts(self) -> list[str]:
        accounts = [a.username for a in self.global_config.accounts() if a.username]
        return accounts or [""]

    def create_repo(self, request: RepoCreateRequest) -> Result[str, str]:
        result = github.create_repo(cwd=self.root, request=request)
        if isinstance(result, Err):
            error = result.error
            return Err(f"{error.message}: {error.hint}" if error.hint else error.message)
        return result

    def branches(self) -> Result[list[BranchInfo], str]:
        result = self.repo.branches()
        if isinstance(result, Err):
            return Err(result.error.message)
        return result

    def push_branch(self, branch: BranchInfo) -> Result[str, str]:
        """Current branch: push it. main/master: push and open a pull request
        into it. Anything else: push HEAD to that branch.
        """
        if branch.is_current:
            pushed = self.repo.push_head()
            if isinstance(pushed, Err):
                return Err(pushed.error.message)
            return Ok(f"Pushed {branch.name}")

        if branch.name in ("main", "master"):
            head = self.repo.current_branch()
            if head is None:
                return Err("cannot open a pull request from a detached HEAD")
            pushed = self.repo.push_head()
            if isinstance(pushed, Err):
                return Err(pushed.error.message)
            pr = github.create_pull_request(cwd=self.root, base=branch.name, head=head)
            if isinstance(pr, Err):
                error = pr.error
                return Err(f"{error.message}: {error.hint}" if error.hint else error.message)
            return Ok(f"Opened pull request {pr.value}")

        pushed = self.repo.push_to_branch(branch.name)
        if isinstance(pushed, Err):
            return Err(pushed.error.message)
        return Ok(f"Pushed HEAD to {branch.name}")

    # -------------------------------------------------------------------------
    # Registries and setup
    # -------------------------------------------------------------------------

    def check_npm_name(self, name: str) -> NameCheck:
        return registry.check_npm_name(
            name, username=self.global_config.user.npm_scope.lstrip("@"), cwd=self.root
        )

    def detect_setup(self, config: ProjectConfig) -> Result[SetupDetection, str]:
        custom, needs_setup = drift.detect_project_mode(self.root)
        if custom:
            custom_files = tuple(drift.hand_authored_paths(self.root, config))
            return Ok(SetupDetection(custom_files=custom_files))
        if not needs_setup:
            return Ok(SetupDetection(managed=True))

        found = detect_distributions(config.project, self.global_config)
        brew = registry.homebrew_version(found.homebrew_tap, found.formula_name, cwd=self.root)
        if isinstance(brew, Err):
            return Err(brew.error.message)
        npm = registry.npm_version(found.npm_package, cwd=self.root)
        if isinstance(npm, Err):
            return Err(npm.error.message)
        return Ok(SetupDetection(distributions=found, homebrew=brew.value, npm=npm.value))

    def verify_distributions(self, form: SetupForm) -> Result[VerifiedDistributions, str]:
        brew: PublishedVersion | None = None
        npm: PublishedVersion | None = None
        if form.homebrew:
            if not form.tap or not form.formula:
                return Err("Homebrew needs a tap and a formula name")
            checked = registry.homebrew_version(form.tap, form.formula, cwd=self.root)
            if isinstance(checked, Err):
                return Err(checked.error.message)
            brew = checked.value
        if form.npm:
            if not form.package:
                return Err("npm needs a package name")
            checked = registry.npm_version(form.package, cwd=self.root)
            if isinstance(checked, Err):
                return Err(checked.error.message)
            npm = checked.value
        return Ok(VerifiedDistributions(homebrew=brew, npm=npm))

    # -------------------------------------------------------------------------
    # Repository cleanup scan
    # -------------------------------------------------------------------------

    def scan(self) -> Result[ScanResult, str]:
        return scan_repository(self.root)

    def apply_scan_action(self, flagged: FlaggedFile, action: ScanAction) -> Result[str, str]:
        return apply_scan_action(self.root, flagged, action)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, config: ProjectConfig) -> Result[None, str]:
        result = self.store.save_project(config)
        if isinstance(result, Err):
            return Err(result.error.message)
        return result
