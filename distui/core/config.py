"""Typed configuration models.

Global settings live in `config.yaml`, each project in
`projects/<identifier>.yaml` (see `store.py`). These dataclasses mirror the
YAML layout one-to-one and convert through `from_dict` / `to_dict`.

Project models are mutable: a configuration session owns exactly one
ProjectConfig and edits it in place before funnelling it through a save.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "BinaryInfo",
    "BuildSettings",
    "CICDSettings",
    "CategoryRules",
    "ConfigError",
    "Distributions",
    "GitHubAccount",
    "GitHubActionsConfig",
    "GitHubReleaseConfig",
    "GlobalConfig",
    "GoModuleConfig",
    "HomebrewConfig",
    "ModuleInfo",
    "NPMConfig",
    "ProjectConfig",
    "ProjectInfo",
    "ProjectSettings",
    "ReleaseHistory",
    "ReleaseRecord",
    "ReleaseSettings",
    "RepositoryInfo",
    "SmartCommitPrefs",
    "DEFAULT_WORKFLOW_PATH",
    "sanitize_identifier",
]

DEFAULT_WORKFLOW_PATH = ".github/workflows/release.yml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when a config file cannot be loaded, parsed or saved."""

    message: str
    path: Path | None = None


def sanitize_identifier(module_path: str) -> str:
    """Turn a module path into a filesystem-safe project identifier.

    `github.com/acme/my_tool` -> `github-com-acme-my-tool`
    """
    identifier = re.sub(r"[/._]", "-", module_path.strip())
    identifier = re.sub(r"[^A-Za-z0-9-]", "-", identifier)
    return identifier.strip("-")


def _get_datetime(table: Mapping[str, object], key: str) -> datetime | None:
    value = table.get(key)
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _drop_empty(data: StrDict) -> StrDict:
    """Remove None values so optional keys are omitted like `omitempty`."""
    return {k: v for k, v in data.items() if v is not None}


# -----------------------------------------------------------------------------
# Global configuration
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class GitHubAccount:
    username: str
    is_org: bool = False
    default: bool = False


@dataclass(slots=True)
class UserConfig:
    github_username: str = ""
    github_accounts: list[GitHubAccount] = field(default_factory=list)
    default_homebrew_tap: str = ""
    npm_scope: str = ""


@dataclass(slots=True)
class Preferences:
    confirm_before_release: bool = True
    default_version_bump: str = "patch"
    show_command_output: bool = False
    auto_detect_projects: bool = True


@dataclass(slots=True)
class UIConfig:
    theme: str = "default"
    compact_mode: bool = False
    show_hints: bool = True


@dataclass(slots=True)
class PathsConfig:
    homebrew_tap_location: str = ""
    goreleaser_config: str = ""


@dataclass(slots=True)
class GlobalConfig:
    """User identity and default-channel preferences."""

    version: str = "1"
    user: UserConfig = field(default_factory=UserConfig)
    preferences: Preferences = field(default_factory=Preferences)
    ui: UIConfig = field(default_factory=UIConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    def accounts(self) -> list[GitHubAccount]:
        """All GitHub accounts, with the primary username first."""
        accounts = list(self.user.github_accounts)
        primary = self.user.github_username
        if primary and not any(a.username == primary for a in accounts):
            accounts.insert(0, GitHubAccount(username=primary, default=not accounts))
        return accounts

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> GlobalConfig:
        user: StrDict = get_table(data, "user") or {}
        prefs: StrDict = get_table(data, "preferences") or {}
        ui: StrDict = get_table(data, "ui") or {}
        paths: StrDict = get_table(data, "paths") or {}

        accounts: list[GitHubAccount] = []
        for raw in get_list(user, "github_accounts") or []:
            entry = as_str_dict(raw)
            if entry is None:
                continue
            username = get_str(entry, "username")
            if username is None:
                continue
            accounts.append(
                GitHubAccount(
                    username=username,
                    is_org=get_bool(entry, "is_org"),
                    default=get_bool(entry, "default"),
                )
            )

        defaults = Preferences()
        ui_defaults = UIConfig()
        return cls(
            version=get_str(data, "version") or "1",
            user=UserConfig(
                github_username=get_str(user, "github_username") or "",
                github_accounts=accounts,
                default_homebrew_tap=get_str(user, "default_homebrew_tap") or "",
                npm_scope=get_str(user, "npm_scope") or "",
            ),
            preferences=Preferences(
                confirm_before_release=get_bool(
                    prefs, "confirm_before_release", defaults.confirm_before_release
                ),
                default_version_bump=get_str(prefs, "default_version_bump")
                or defaults.default_version_bump,
                show_command_output=get_bool(prefs, "show_command_output"),
                auto_detect_projects=get_bool(
                    prefs, "auto_detect_projects", defaults.auto_detect_projects
                ),
            ),
            ui=UIConfig(
                theme=get_str(ui, "theme") or ui_defaults.theme,
                compact_mode=get_bool(ui, "compact_mode"),
                show_hints=get_bool(ui, "show_hints", ui_defaults.show_hints),
            ),
            paths=PathsConfig(
                homebrew_tap_location=get_str(paths, "homebrew_tap_location") or "",
                goreleaser_config=get_str(paths, "goreleaser_config") or "",
            ),
        )

    def to_dict(self) -> StrDict:
        user: StrDict = {"github_username": self.user.github_username}
        if self.user.github_accounts:
            user["github_accounts"] = [
                {"username": a.username, "is_org": a.is_org, "default": a.default}
                for a in self.user.github_accounts
            ]
        if self.user.default_homebrew_tap:
            user["default_homebrew_tap"] = self.user.default_homebrew_tap
        if self.user.npm_scope:
            user["npm_scope"] = self.user.npm_scope

        return {
            "version": self.version,
            "user": user,
            "preferences": {
                "confirm_before_release": self.preferences.confirm_before_release,
                "default_version_bump": self.preferences.default_version_bump,
                "show_command_output": self.preferences.show_command_output,
                "auto_detect_projects": self.preferences.auto_detect_projects,
            },
            "ui": {
                "theme": self.ui.theme,
                "compact_mode": self.ui.compact_mode,
                "show_hints": self.ui.show_hints,
            },
            "paths": {
                "homebrew_tap_location": self.paths.homebrew_tap_location,
                "goreleaser_config": self.paths.goreleaser_config,
            },
        }


# -----------------------------------------------------------------------------
# Project information (detected)
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class RepositoryInfo:
    owner: str = ""
    name: str = ""
    default_branch: str = "main"


@dataclass(slots=True)
class ModuleInfo:
    name: str
    version: str = ""


@dataclass(slots=True)
class BinaryInfo:
    name: str
    build_flags: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ProjectInfo:
    """What detection found about a project on disk."""

    identifier: str
    path: Path
    module: ModuleInfo
    repository: RepositoryInfo | None = None
    binary: BinaryInfo | None = None
    last_accessed: datetime | None = None
    detected_at: datetime | None = None

    @property
    def binary_name(self) -> str:
        if self.binary is not None and self.binary.name:
            return self.binary.name
        return self.module.name.rsplit("/", 1)[-1] or "app"

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProjectInfo | None:
        identifier = get_str(data, "identifier")
        if identifier is None:
            return None

        repo_data = get_table(data, "repository")
        module_data: StrDict = get_table(data, "module") or {}
        binary_data = get_table(data, "binary")

        repository = None
        if repo_data is not None:
            repository = RepositoryInfo(
                owner=get_str(repo_data, "owner") or "",
                name=get_str(repo_data, "name") or "",
                default_branch=get_str(repo_data, "default_branch") or "main",
            )

        binary = None
        if binary_data is not None:
            binary = BinaryInfo(
                name=get_str(binary_data, "name") or "",
                build_flags=get_str_list(binary_data, "build_flags"),
            )

        return cls(
            identifier=identifier,
            path=Path(get_str(data, "path") or "."),
            module=ModuleInfo(
                name=get_str(module_data, "name") or identifier,
                version=get_str(module_data, "version") or "",
            ),
            repository=repository,
            binary=binary,
            last_accessed=_get_datetime(data, "last_accessed"),
            detected_at=_get_datetime(data, "detected_at"),
        )

    def to_dict(self) -> StrDict:
        data: StrDict = {
            "identifier": self.identifier,
            "path": str(self.path),
            "last_accessed": self.last_accessed,
            "detected_at": self.detected_at,
            "repository": None,
            "module": _drop_empty(
                {"name": self.module.name, "version": self.module.version or None}
            ),
        }
        if self.repository is not None:
            data["repository"] = {
                "owner": self.repository.owner,
                "name": self.repository.name,
                "default_branch": self.repository.default_branch,
            }
        if self.binary is not None:
            binary: StrDict = {"name": self.binary.name}
            if self.binary.build_flags:
                binary["build_flags"] = list(self.binary.build_flags)
            data["binary"] = binary
        return _drop_empty(data)


# -----------------------------------------------------------------------------
# Project settings
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class GitHubReleaseConfig:
    enabled: bool = True
    draft: bool = False
    prerelease: bool = False


@dataclass(slots=True)
class HomebrewConfig:
    enabled: bool = False
    tap_repo: str = ""
    tap_path: str = ""
    formula_name: str = ""
    formula_path: str = ""


@dataclass(slots=True)
class NPMConfig:
    enabled: bool = False
    package_name: str = ""
    registry: str = ""
    access: str = ""


@dataclass(slots=True)
class GoModuleConfig:
    enabled: bool = True
    proxy: str = ""


@dataclass(slots=True)
class Distributions:
    github_release: GitHubReleaseConfig = field(default_factory=GitHubReleaseConfig)
    homebrew: HomebrewConfig = field(default_factory=HomebrewConfig)
    npm: NPMConfig = field(default_factory=NPMConfig)
    go_module: GoModuleConfig = field(default_factory=GoModuleConfig)

    @property
    def any_release_channel(self) -> bool:
        """True when something needs the release pipeline descriptor."""
        return self.github_release.enabled or self.homebrew.enabled or self.npm.enabled

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Distributions:
        gh: StrDict = get_table(data, "github_release") or {}
        brew: StrDict = get_table(data, "homebrew") or {}
        npm: StrDict = get_table(data, "npm") or {}
        gomod: StrDict = get_table(data, "go_module") or {}
        return cls(
            github_release=GitHubReleaseConfig(
                enabled=get_bool(gh, "enabled", "github_release" not in data),
                draft=get_bool(gh, "draft"),
                prerelease=get_bool(gh, "prerelease"),
            ),
            homebrew=HomebrewConfig(
                enabled=get_bool(brew, "enabled"),
                tap_repo=get_str(brew, "tap_repo") or "",
                tap_path=get_str(brew, "tap_path") or "",
                formula_name=get_str(brew, "formula_name") or "",
                formula_path=get_str(brew, "formula_path") or "",
            ),
            npm=NPMConfig(
                enabled=get_bool(npm, "enabled"),
                package_name=get_str(npm, "package_name") or "",
                registry=get_str(npm, "registry") or "",
                access=get_str(npm, "access") or "",
            ),
            go_module=GoModuleConfig(
                enabled=get_bool(gomod, "enabled", "go_module" not in data),
                proxy=get_str(gomod, "proxy") or "",
            ),
        )

    def to_dict(self) -> StrDict:
        def strip_blank(d: StrDict) -> StrDict:
            return {k: v for k, v in d.items() if v != "" and v is not None}

        return {
            "github_release": {
                "enabled": self.github_release.enabled,
                "draft": self.github_release.draft,
                "prerelease": self.github_release.prerelease,
            },
            "homebrew": strip_blank(
                {
                    "enabled": self.homebrew.enabled,
                    "tap_repo": self.homebrew.tap_repo,
                    "tap_path": self.homebrew.tap_path,
                    "formula_name": self.homebrew.formula_name,
                    "formula_path": self.homebrew.formula_path,
                }
            ),
            "npm": strip_blank(
                {
                    "enabled": self.npm.enabled,
                    "package_name": self.npm.package_name,
                    "registry": self.npm.registry,
                    "access": self.npm.access,
                }
            ),
            "go_module": strip_blank(
                {"enabled": self.go_module.enabled, "proxy": self.go_module.proxy}
            ),
        }


@dataclass(slots=True)
class BuildSettings:
    goreleaser_config: str = ""
    test_command: str = "go test ./..."
    clean_build: bool = True
    all_platforms: bool = False
    arm64: bool = False


@dataclass(slots=True)
class ReleaseSettings:
    skip_tests: bool = False
    create_draft: bool = False
    pre_release: bool = False
    generate_changelog: bool = True
    sign_commits: bool = False


@dataclass(slots=True)
class CategoryRules:
    """Extensions and glob patterns that put a file into a category."""

    extensions: list[str] = field(default_factory=list)
    patterns: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SmartCommitPrefs:
    enabled: bool = True
    use_custom_rules: bool = False
    categories: dict[str, CategoryRules] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> SmartCommitPrefs:
        categories: dict[str, CategoryRules] = {}
        for name, raw in (get_table(data, "categories") or {}).items():
            rules = as_str_dict(raw)
            if rules is None:
                continue
            categories[name] = CategoryRules(
                extensions=get_str_list(rules, "extensions"),
                patterns=get_str_list(rules, "patterns"),
            )
        return cls(
            enabled=get_bool(data, "enabled", True),
            use_custom_rules=get_bool(data, "use_custom_rules"),
            categories=categories,
        )

    def to_dict(self) -> StrDict:
        return {
            "enabled": self.enabled,
            "use_custom_rules": self.use_custom_rules,
            "categories": {
                name: {"extensions": list(r.extensions), "patterns": list(r.patterns)}
                for name, r in self.categories.items()
            },
        }


@dataclass(slots=True)
class GitHubActionsConfig:
    enabled: bool = False
    workflow_path: str = DEFAULT_WORKFLOW_PATH
    auto_regenerate: bool = False
    include_tests: bool = True
    environments: list[str] = field(default_factory=list)
    secrets_required: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CICDSettings:
    github_actions: GitHubActionsConfig = field(default_factory=GitHubActionsConfig)


@dataclass(slots=True)
class ProjectSettings:
    distributions: Distributions = field(default_factory=Distributions)
    build: BuildSettings = field(default_factory=BuildSettings)
    release: ReleaseSettings = field(default_factory=ReleaseSettings)
    smart_commit: SmartCommitPrefs = field(default_factory=SmartCommitPrefs)
    ci_cd: CICDSettings = field(default_factory=CICDSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProjectSettings:
        build: StrDict = get_table(data, "build") or {}
        release: StrDict = get_table(data, "release") or {}
        ci_cd: StrDict = get_table(data, "ci_cd") or {}
        actions: StrDict = get_table(ci_cd, "github_actions") or {}

        build_defaults = BuildSettings()
        release_defaults = ReleaseSettings()
        actions_defaults = GitHubActionsConfig()
        return cls(
            distributions=Distributions.from_dict(get_table(data, "distributions") or {}),
            build=BuildSettings(
                goreleaser_config=get_str(build, "goreleaser_config") or "",
                test_command=get_str(build, "test_command") or build_defaults.test_command,
                clean_build=get_bool(build, "clean_build", build_defaults.clean_build),
                all_platforms=get_bool(build, "all_platforms"),
                arm64=get_bool(build, "arm64"),
            ),
            release=ReleaseSettings(
                skip_tests=get_bool(release, "skip_tests"),
                create_draft=get_bool(release, "create_draft"),
                pre_release=get_bool(release, "pre_release"),
                generate_changelog=get_bool(
                    release, "generate_changelog", release_defaults.generate_changelog
                ),
                sign_commits=get_bool(release, "sign_commits"),
            ),
            smart_commit=SmartCommitPrefs.from_dict(get_table(data, "smart_commit") or {}),
            ci_cd=CICDSettings(
                github_actions=GitHubActionsConfig(
                    enabled=get_bool(actions, "enabled"),
                    workflow_path=get_str(actions, "workflow_path")
                    or actions_defaults.workflow_path,
                    auto_regenerate=get_bool(actions, "auto_regenerate"),
                    include_tests=get_bool(
                        actions, "include_tests", actions_defaults.include_tests
                    ),
                    environments=get_str_list(actions, "environments"),
                    secrets_required=get_str_list(actions, "secrets_required"),
                )
            ),
        )

    def to_dict(self) -> StrDict:
        actions = self.ci_cd.github_actions
        return {
            "distributions": self.distributions.to_dict(),
            "build": {
                "goreleaser_config": self.build.goreleaser_config,
                "test_command": self.build.test_command,
                "clean_build": self.build.clean_build,
                "all_platforms": self.build.all_platforms,
                "arm64": self.build.arm64,
            },
            "release": {
                "skip_tests": self.release.skip_tests,
                "create_draft": self.release.create_draft,
                "pre_release": self.release.pre_release,
                "generate_changelog": self.release.generate_changelog,
                "sign_commits": self.release.sign_commits,
            },
            "smart_commit": self.smart_commit.to_dict(),
            "ci_cd": {
                "github_actions": {
                    "enabled": actions.enabled,
                    "workflow_path": actions.workflow_path,
                    "auto_regenerate": actions.auto_regenerate,
                    "include_tests": actions.include_tests,
                    "environments": list(actions.environments),
                    "secrets_required": list(actions.secrets_required),
                }
            },
        }


@dataclass(slots=True)
class ReleaseRecord:
    version: str
    date: datetime
    status: str
    method: str = ""
    duration: str = ""
    channels: dict[str, bool] = field(default_factory=dict)
    error: str = ""


@dataclass(slots=True)
class ReleaseHistory:
    releases: list[ReleaseRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseHistory:
        releases: list[ReleaseRecord] = []
        for raw in get_list(data, "releases") or []:
            entry = as_str_dict(raw)
            if entry is None:
                continue
            version = get_str(entry, "version")
            date = _get_datetime(entry, "date")
            if version is None or date is None:
                continue
            channels_raw: StrDict = get_table(entry, "channels") or {}
            releases.append(
                ReleaseRecord(
                    version=version,
                    date=date,
                    status=get_str(entry, "status") or "",
                    method=get_str(entry, "method") or "",
                    duration=get_str(entry, "duration") or "",
                    channels={k: v for k, v in channels_raw.items() if isinstance(v, bool)},
                    error=get_str(entry, "error") or "",
                )
            )
        return cls(releases=releases)

    def to_dict(self) -> StrDict:
        out: list[StrDict] = []
        for r in self.releases:
            entry: StrDict = {"version": r.version, "date": r.date, "status": r.status}
            if r.method:
                entry["method"] = r.method
            if r.duration:
                entry["duration"] = r.duration
            if r.channels:
                entry["channels"] = dict(r.channels)
            if r.error:
                entry["error"] = r.error
            out.append(entry)
        return {"releases": out}


@dataclass(slots=True)
class ProjectConfig:
    """Root persisted entity for one project."""

    project: ProjectInfo
    config: ProjectSettings = field(default_factory=ProjectSettings)
    history: ReleaseHistory = field(default_factory=ReleaseHistory)
    first_time_setup_completed: bool = False
    custom_files_mode: bool = False

    @property
    def identifier(self) -> str:
        return self.project.identifier

    @property
    def distributions(self) -> Distributions:
        return self.config.distributions

    def copy(self) -> ProjectConfig:
        """Deep copy, handed to commands so they never see later mutations."""
        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProjectConfig | None:
        """Build a ProjectConfig, or None when the project identifier is missing."""
        project_data = get_table(data, "project")
        if project_data is None:
            return None
        project = ProjectInfo.from_dict(project_data)
        if project is None:
            return None
        return cls(
            project=project,
            config=ProjectSettings.from_dict(get_table(data, "config") or {}),
            history=ReleaseHistory.from_dict(get_table(data, "history") or {}),
            first_time_setup_completed=get_bool(data, "first_time_setup_completed"),
            custom_files_mode=get_bool(data, "custom_files_mode"),
        )

    def to_dict(self) -> StrDict:
        data: StrDict = {
            "project": self.project.to_dict(),
            "config": self.config.to_dict(),
        }
        if self.history.releases:
            data["history"] = self.history.to_dict()
        if self.first_time_setup_completed:
            data["first_time_setup_completed"] = True
        if self.custom_files_mode:
            data["custom_files_mode"] = True
        return data
