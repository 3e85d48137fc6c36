"""Session states, the branch overlay, and list items.

Exactly one SessionState is active. Each state owns the model of its view,
so a view's model exists only while that view is active: entering a state
builds it, leaving drops it. The branch-selection overlay sits above the
active state and sees input first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from distui.cleanup.partition import CleanupItem
from distui.cleanup.scanner import ScanResult
from distui.core.config import ProjectConfig, SmartCommitPrefs
from distui.generation.drift import PendingGeneration
from distui.git.repository import BranchInfo
from distui.registry.client import NameCheck

from .events import CleanupSnapshot
from .setup import SetupModel

__all__ = [
    "ADVANCED_KEYS",
    "BUILD_KEYS",
    "BranchSelection",
    "CleanupCache",
    "CommitView",
    "CommitWizard",
    "ConfigRegenerationConsent",
    "DISTRIBUTION_KEYS",
    "FileSelection",
    "FirstTimeSetupView",
    "GitHubRepoCreation",
    "ItemKind",
    "ListItem",
    "ModeSwitchWarning",
    "OverwriteWarning",
    "PreferencesModel",
    "PreferencesView",
    "RepoCleanupScan",
    "RepoForm",
    "ScanModel",
    "SessionState",
    "SmartCommitConfirm",
    "SmartCommitFileSelection",
    "TAB_ADVANCED",
    "TAB_BUILD",
    "TAB_CLEANUP",
    "TAB_COUNT",
    "TAB_DISTRIBUTIONS",
    "TAB_NAMES",
    "TabView",
    "TextField",
    "advanced_items",
    "build_items",
    "distribution_items",
]

TAB_CLEANUP = 0
TAB_DISTRIBUTIONS = 1
TAB_BUILD = 2
TAB_ADVANCED = 3
TAB_COUNT = 4
TAB_NAMES = ("Cleanup", "Distributions", "Build", "Advanced")


@dataclass(slots=True)
class TextField:
    value: str = ""

    def type_char(self, ch: str) -> None:
        self.value += ch

    def backspace(self) -> None:
        self.value = self.value[:-1]


# -----------------------------------------------------------------------------
# List items
# -----------------------------------------------------------------------------

ItemKind = Literal["distribution", "build", "advanced"]

DISTRIBUTION_KEYS = ("github_release", "homebrew", "npm", "go_module")
BUILD_KEYS = ("run_tests", "clean_build", "all_platforms", "arm64")
ADVANCED_KEYS = ("create_draft", "pre_release", "generate_changelog", "sign_commits")


@dataclass(frozen=True, slots=True)
class ListItem:
    """One toggleable row; `kind` decides how a toggle is applied."""

    kind: ItemKind
    key: str
    label: str
    enabled: bool
    detail: str = ""


def _npm_detail(config: ProjectConfig, check: NameCheck | None) -> str:
    name = config.distributions.npm.package_name
    if check is None:
        return name
    match check.status:
        case "checking":
            return f"{name} (checking...)"
        case "available":
            return f"{name} ({check.message or 'available'})"
        case "unavailable":
            return f"{name} (unavailable: {check.message})"
        case "error":
            return f"{name} (check failed: {check.message})"


def distribution_items(config: ProjectConfig, npm_check: NameCheck | None) -> list[ListItem]:
    d = config.distributions
    return [
        ListItem("distribution", "github_release", "GitHub Releases", d.github_release.enabled),
        ListItem(
            "distribution",
            "homebrew",
            "Homebrew",
            d.homebrew.enabled,
            "/".join(x for x in (d.homebrew.tap_repo, d.homebrew.formula_name) if x),
        ),
        ListItem("distribution", "npm", "npm", d.npm.enabled, _npm_detail(config, npm_check)),
        ListItem("distribution", "go_module", "Go module", d.go_module.enabled),
    ]


def build_items(config: ProjectConfig) -> list[ListItem]:
    b = config.config.build
    return [
        ListItem(
            "build", "run_tests", "Run tests before release", not config.config.release.skip_tests
        ),
        ListItem("build", "clean_build", "Clean build", b.clean_build),
        ListItem("build", "all_platforms", "All platforms (incl. Windows)", b.all_platforms),
        ListItem("build", "arm64", "arm64 builds", b.arm64),
    ]


def advanced_items(config: ProjectConfig) -> list[ListItem]:
    r = config.config.release
    return [
        ListItem("advanced", "create_draft", "Create draft releases", r.create_draft),
        ListItem("advanced", "pre_release", "Mark pre-releases", r.pre_release),
        ListItem("advanced", "generate_changelog", "Generate changelog", r.generate_changelog),
        ListItem("advanced", "sign_commits", "Sign commits", r.sign_commits),
    ]


# -----------------------------------------------------------------------------
# View models
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class CommitWizard:
    items: list[CleanupItem]
    cursor: int = 0
    phase: Literal["files", "message"] = "files"
    message: TextField = field(default_factory=TextField)
    committing: bool = False


@dataclass(slots=True)
class FileSelection:
    items: list[CleanupItem]
    selected: set[str]
    custom_rules: bool
    cursor: int = 0
    committing: bool = False

    def can_toggle(self, item: CleanupItem) -> bool:
        return self.custom_rules or item.file.category != "auto"


@dataclass(slots=True)
class RepoForm:
    name: TextField
    description: TextField = field(default_factory=TextField)
    private: bool = True
    accounts: list[str] = field(default_factory=list)
    account_index: int = 0
    focus: Literal["name", "description", "private", "account"] = "name"
    creating: bool = False

    @property
    def owner(self) -> str:
        if not self.accounts:
            return ""
        return self.accounts[self.account_index % len(self.accounts)]


@dataclass(slots=True)
class PreferencesModel:
    prefs: SmartCommitPrefs
    cursor: int = 0
    input_kind: Literal["extension", "pattern"] | None = None
    input: TextField = field(default_factory=TextField)
    confirm_reset: bool = False
    error: str = ""


@dataclass(slots=True)
class ScanModel:
    result: ScanResult | None = None
    cursor: int = 0
    loading: bool = True


# -----------------------------------------------------------------------------
# Cleanup cache
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class CleanupCache:
    """Last working-tree read and the user's per-file actions on it."""

    snapshot: CleanupSnapshot | None = None
    items: list[CleanupItem] = field(default_factory=list)
    loading: bool = False

    @property
    def initialized(self) -> bool:
        return self.snapshot is not None

    def replace(self, snapshot: CleanupSnapshot) -> None:
        """Swap in a fresh read; unchanged files keep the action the user chose."""
        previous = {item.path: item for item in self.items}
        items: list[CleanupItem] = []
        for file in snapshot.files:
            old = previous.get(file.path)
            keep = old is not None and old.file == file
            items.append(old if keep and old is not None else CleanupItem.from_file(file))
        self.snapshot = snapshot
        self.items = items
        self.loading = False


# -----------------------------------------------------------------------------
# States
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class TabView:
    npm_edit: TextField | None = None


@dataclass(slots=True)
class FirstTimeSetupView:
    setup: SetupModel = field(default_factory=SetupModel)


@dataclass(slots=True)
class GitHubRepoCreation:
    form: RepoForm


@dataclass(slots=True)
class CommitView:
    wizard: CommitWizard


@dataclass(slots=True)
class SmartCommitConfirm:
    commit_count: int
    total: int


@dataclass(slots=True)
class SmartCommitFileSelection:
    selection: FileSelection


@dataclass(slots=True)
class ConfigRegenerationConsent:
    pending: PendingGeneration


@dataclass(slots=True)
class OverwriteWarning:
    pending: PendingGeneration
    paths: list[str]


@dataclass(slots=True)
class ModeSwitchWarning:
    paths: list[str]


@dataclass(slots=True)
class PreferencesView:
    model: PreferencesModel


@dataclass(slots=True)
class RepoCleanupScan:
    model: ScanModel = field(default_factory=ScanModel)


@dataclass(slots=True)
class BranchSelection:
    branches: list[BranchInfo] = field(default_factory=list)
    cursor: int = 0
    loading: bool = True
    pushing: bool = False


type SessionState = (
    TabView
    | FirstTimeSetupView
    | GitHubRepoCreation
    | CommitView
    | SmartCommitConfirm
    | SmartCommitFileSelection
    | ConfigRegenerationConsent
    | OverwriteWarning
    | ModeSwitchWarning
    | PreferencesView
    | RepoCleanupScan
)
