"""Configuration session: the state machine behind `distui configure`.

The session owns one ProjectConfig and reacts to one event at a time.
`handle` mutates state and returns commands; it never blocks on git, gh or
the registries. Commands run elsewhere and come back as result events,
possibly out of order. A result whose token is stale is dropped.

Input goes to the branch overlay when one is open, otherwise to the active
state. Any change to the persisted shape of the configuration is saved
immediately through `_save`; navigation never saves.

Usage:
    session = ConfigureSession(config, ProjectServices(root))
    commands = session.start()
    while not session.quit:
        ...  # run commands, feed their events and key presses to handle()
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, replace
from typing import Literal

from distui.cleanup.partition import CleanupItem, CommitPlan, generate_commit_message, partition
from distui.cleanup.rules import (
    DEFAULT_CATEGORY_RULES,
    default_category_rules,
    normalize_extension,
    validate_pattern,
)
from distui.cleanup.scanner import ScanAction, ScanResult
from distui.core.config import ProjectConfig, RepositoryInfo
from distui.core.result import Err, Ok, Result
from distui.core.structured import StrDict
from distui.generation.drift import PendingGeneration
from distui.git.github import RepoCreateRequest
from distui.git.repository import BranchInfo, RepoState
from distui.registry.client import NameCheck

from .commands import Command, CommandTracker
from .events import (
    BranchesLoaded,
    BranchPushed,
    CleanupLoaded,
    CleanupSnapshot,
    CommandCrashed,
    CommitFinished,
    Event,
    FilesGenerated,
    GitHubStatusLoaded,
    KeyPressed,
    NameChecked,
    RepoCreated,
    Resized,
    ResultEvent,
    ScanFinished,
    SetupDetected,
    SetupVerified,
    SmartCommitFinished,
    StatusExpired,
    WatchRefreshed,
    WatchTick,
)
from .services import SessionServices
from .setup import SetupDetection, SetupModel, VerifiedDistributions, handle_setup_key
from .state import (
    TAB_ADVANCED,
    TAB_BUILD,
    TAB_CLEANUP,
    TAB_COUNT,
    TAB_DISTRIBUTIONS,
    BranchSelection,
    CleanupCache,
    CommitView,
    CommitWizard,
    ConfigRegenerationConsent,
    FileSelection,
    FirstTimeSetupView,
    GitHubRepoCreation,
    ListItem,
    ModeSwitchWarning,
    OverwriteWarning,
    PreferencesModel,
    PreferencesView,
    RepoCleanupScan,
    RepoForm,
    ScanModel,
    SessionState,
    SmartCommitConfirm,
    SmartCommitFileSelection,
    TabView,
    TextField,
    advanced_items,
    build_items,
    distribution_items,
)
from .watcher import GitWatcher

__all__ = ["ConfigureSession", "STATUS_SECONDS", "StatusMessage"]

logger = logging.getLogger(__name__)

STATUS_SECONDS = 3.0

StatusLevel = Literal["info", "success", "error"]

_FORM_FOCUS: tuple[Literal["name", "description", "private", "account"], ...] = (
    "name",
    "description",
    "private",
    "account",
)


@dataclass(frozen=True, slots=True)
class StatusMessage:
    text: str
    level: StatusLevel = "info"


class ConfigureSession:
    """Tabs, modal views and the branch overlay for one project."""

    def __init__(
        self,
        config: ProjectConfig,
        services: SessionServices,
        *,
        watcher: GitWatcher | None = None,
    ) -> None:
        self.config = config
        self.services = services
        self.state: SessionState = (
            TabView() if config.first_time_setup_completed else FirstTimeSetupView()
        )
        self.overlay: BranchSelection | None = None
        self.active_tab = TAB_CLEANUP
        self.cursors = [0] * TAB_COUNT
        self.cleanup = CleanupCache()
        self.repo_state: RepoState | None = None
        self.npm_check: NameCheck | None = None
        self.needs_regeneration = False
        self.status: StatusMessage | None = None
        self.quit = False
        self.width = 80
        self.height = 24

        self._commands = CommandTracker()
        self._watcher = watcher or GitWatcher()
        self._last_toggle: list[str] = []
        self._saved: StrDict = config.to_dict()

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def start(self) -> list[Command]:
        if isinstance(self.state, FirstTimeSetupView):
            return [self._detect_setup()]
        return self._enter_tabs()

    def handle(self, event: Event) -> list[Command]:
        match event:
            case KeyPressed(key=key):
                return self._on_key(key)
            case Resized(width=width, height=height):
                self.width, self.height = width, height
                return []
            case _:
                if not self._commands.accept(event.op, event.token):
                    return []
                return self._on_result(event)

    def items_for_tab(self, tab: int) -> list[ListItem]:
        if tab == TAB_DISTRIBUTIONS:
            return distribution_items(self.config, self.npm_check)
        if tab == TAB_BUILD:
            return build_items(self.config)
        if tab == TAB_ADVANCED:
            return advanced_items(self.config)
        return []

    # -------------------------------------------------------------------------
    # Shared plumbing
    # -------------------------------------------------------------------------

    def _notify(self, text: str, level: StatusLevel = "info") -> Command:
        """Show a status line; it clears itself after STATUS_SECONDS."""
        self.status = StatusMessage(text, level)
        return self._commands.issue("status-expiry", StatusExpired, delay=STATUS_SECONDS)

    def _save(self, *, regenerate: bool = True) -> list[Command]:
        """Persist the config if its saved shape changed.

        `regenerate` marks release files as out of date when something was
        actually written.
        """
        current = self.config.to_dict()
        if current == self._saved:
            return []
        result = self.services.save(self.config)
        if isinstance(result, Err):
            logger.warning("save failed: %s", result.error)
            return [self._notify(f"Save failed: {result.error}", "error")]
        self._saved = current
        if regenerate:
            self.needs_regeneration = True
        return []

    def _to_tabs(self) -> None:
        self.state = TabView()

    def _enter_tabs(self) -> list[Command]:
        self._to_tabs()
        commands: list[Command] = []
        if self.active_tab == TAB_CLEANUP:
            commands += self._ensure_cleanup()
        commands.append(self._load_github_status())
        if not self._watcher.running:
            commands.append(self._watcher.schedule(self._commands))
        return commands

    def _ensure_cleanup(self) -> list[Command]:
        """First visit loads the cache; later visits only refresh it."""
        if not self.cleanup.initialized:
            if self.cleanup.loading:
                return []
            return [self._load_cleanup()]
        return self._refresh_cleanup()

    def _load_cleanup(self) -> Command:
        self.cleanup.loading = True
        self._commands.abandon("watch-refresh")
        snapshot = self.config.copy()
        return self._commands.issue(
            "cleanup-load", lambda t: CleanupLoaded(t, self.services.load_cleanup(snapshot))
        )

    def _refresh_cleanup(self) -> list[Command]:
        if self._commands.in_flight("watch-refresh") or self._commands.in_flight("cleanup-load"):
            return []
        snapshot = self.config.copy()
        return [
            self._commands.issue(
                "watch-refresh", lambda t: WatchRefreshed(t, self.services.load_cleanup(snapshot))
            )
        ]

    def _load_github_status(self) -> Command:
        return self._commands.issue(
            "github-status", lambda t: GitHubStatusLoaded(t, self.services.repo_state())
        )

    def _move(self, cursor: int, step: int, length: int) -> int:
        if length <= 0:
            return 0
        return max(0, min(length - 1, cursor + step))

    # -------------------------------------------------------------------------
    # Input routing
    # -------------------------------------------------------------------------

    def _on_key(self, key: str) -> list[Command]:
        if key == "ctrl+c":
            self.quit = True
            return []
        if self.overlay is not None:
            return self._overlay_key(self.overlay, key)

        match self.state:
            case TabView() as view:
                return self._tab_key(view, key)
            case FirstTimeSetupView(setup=setup):
                return self._setup_key(setup, key)
            case GitHubRepoCreation(form=form):
                return self._repo_form_key(form, key)
            case CommitView(wizard=wizard):
                return self._commit_key(wizard, key)
            case SmartCommitConfirm():
                return self._smart_confirm_key(key)
            case SmartCommitFileSelection(selection=selection):
                return self._selection_key(selection, key)
            case ConfigRegenerationConsent(pending=pending):
                return self._consent_key(pending, key)
            case OverwriteWarning() as warning:
                return self._overwrite_key(warning, key)
            case ModeSwitchWarning(paths=paths):
                return self._mode_switch_key(paths, key)
            case PreferencesView(model=model):
                return self._preferences_key(model, key)
            case RepoCleanupScan(model=model):
                return self._scan_key(model, key)

    # -------------------------------------------------------------------------
    # Tab view
    # -------------------------------------------------------------------------

    def _tab_key(self, view: TabView, key: str) -> list[Command]:
        if view.npm_edit is not None:
            return self._npm_edit_key(view, view.npm_edit, key)

        match key:
            case "q" | "esc":
                self.quit = True
                return []
            case "tab":
                return self._switch_tab(1)
            case "shift+tab":
                return self._switch_tab(-1)
            case "up" | "down":
                self._move_tab_cursor(-1 if key == "up" else 1)
                return []
            case "R" if self.active_tab != TAB_CLEANUP:
                return self._request_regeneration()

        if self.active_tab == TAB_CLEANUP:
            return self._cleanup_key(key)

        if key == "C" and self.config.custom_files_mode:
            self.state = ModeSwitchWarning(paths=self.services.hand_authored(self.config))
            return []
        if self.active_tab == TAB_DISTRIBUTIONS:
            if key == "a":
                return self._toggle_all_distributions()
            if key == "e":
                view.npm_edit = TextField(self._npm_name())
                return []
        if key == "space":
            return self._toggle_current()
        return []

    def _switch_tab(self, step: int) -> list[Command]:
        self.active_tab = (self.active_tab + step) % TAB_COUNT
        if self.active_tab == TAB_CLEANUP:
            return self._ensure_cleanup()
        return []

    def _tab_length(self, tab: int) -> int:
        if tab == TAB_CLEANUP:
            return len(self.cleanup.items)
        return len(self.items_for_tab(tab))

    def _move_tab_cursor(self, step: int) -> None:
        tab = self.active_tab
        self.cursors[tab] = self._move(self.cursors[tab], step, self._tab_length(tab))

    def _cleanup_key(self, key: str) -> list[Command]:
        items = self.cleanup.items
        cursor = self.cursors[TAB_CLEANUP]
        match key:
            case "space" if items:
                items[cursor] = items[cursor].cycled()
            case "C" if items:
                wizard = CommitWizard(items=list(items))
                self.state = CommitView(wizard=wizard)
            case "s" if items:
                commit_count = sum(1 for i in items if i.action == "commit")
                self.state = SmartCommitConfirm(commit_count=commit_count, total=len(items))
            case "p":
                prefs = copy.deepcopy(self.config.config.smart_commit)
                self.state = PreferencesView(model=PreferencesModel(prefs=prefs))
            case "f":
                self.state = RepoCleanupScan(model=ScanModel())
                return [self._start_scan()]
            case "P" if self.repo_state is not None and self.repo_state.remote is not None:
                self.overlay = BranchSelection()
                return [
                    self._commands.issue(
                        "branches", lambda t: BranchesLoaded(t, self.services.branches())
                    )
                ]
            case "G" if self.repo_state is not None and self.repo_state.kind == "no_remote":
                self.state = GitHubRepoCreation(form=self._new_repo_form())
            case "r":
                commands = [self._load_github_status()]
                if not self.cleanup.loading:
                    commands.append(self._load_cleanup())
                return commands
        return []

    # -------------------------------------------------------------------------
    # Distribution, build and advanced toggles
    # -------------------------------------------------------------------------

    def _toggle_current(self) -> list[Command]:
        items = self.items_for_tab(self.active_tab)
        if not items:
            return []
        item = items[min(self.cursors[self.active_tab], len(items) - 1)]
        match item.kind:
            case "distribution":
                return self._toggle_distribution(item.key)
            case "build":
                self._last_toggle = []
                return self._toggle_build(item.key)
            case "advanced":
                self._last_toggle = []
                release = self.config.config.release
                setattr(release, item.key, not getattr(release, item.key))
                return self._save(regenerate=item.key != "sign_commits")

    def _toggle_build(self, key: str) -> list[Command]:
        if key == "run_tests":
            release = self.config.config.release
            release.skip_tests = not release.skip_tests
        else:
            build = self.config.config.build
            setattr(build, key, not getattr(build, key))
        return self._save()

    def _toggle_distribution(self, key: str) -> list[Command]:
        if self.config.custom_files_mode:
            self.state = ModeSwitchWarning(paths=self.services.hand_authored(self.config))
            return []

        channel = getattr(self.config.distributions, key)
        channel.enabled = not channel.enabled
        self._last_toggle = [key]
        commands = self._save(regenerate=key != "go_module")
        if key == "npm":
            commands += self._after_npm_toggle()
        return commands

    def _toggle_all_distributions(self) -> list[Command]:
        if self.config.custom_files_mode:
            self.state = ModeSwitchWarning(paths=self.services.hand_authored(self.config))
            return []

        dists = self.config.distributions
        channels = {
            "github_release": dists.github_release,
            "homebrew": dists.homebrew,
            "npm": dists.npm,
            "go_module": dists.go_module,
        }
        target = not all(c.enabled for c in channels.values())
        changed = [key for key, c in channels.items() if c.enabled != target]
        for key in changed:
            channels[key].enabled = target
        self._last_toggle = changed
        commands = self._save()
        if "npm" in changed:
            commands += self._after_npm_toggle()
        return commands

    def _after_npm_toggle(self) -> list[Command]:
        if self.config.distributions.npm.enabled:
            return [self._check_npm_name()]
        self.npm_check = None
        self._commands.abandon("name-check")
        return []

    def _npm_name(self) -> str:
        return self.config.distributions.npm.package_name or self.config.project.binary_name

    def _check_npm_name(self) -> Command:
        name = self._npm_name()
        self.npm_check = NameCheck(name=name, status="checking")
        return self._commands.issue(
            "name-check", lambda t: NameChecked(t, self.services.check_npm_name(name))
        )

    def _npm_edit_key(self, view: TabView, field: TextField, key: str) -> list[Command]:
        match key:
            case "esc":
                view.npm_edit = None
            case "enter":
                name = field.value.strip()
                if not name:
                    return []
                view.npm_edit = None
                self.config.distributions.npm.package_name = name
                commands = self._save(regenerate=self.config.distributions.npm.enabled)
                if self.config.distributions.npm.enabled:
                    commands.append(self._check_npm_name())
                return commands
            case "backspace":
                field.backspace()
            case _ if len(key) == 1 and not key.isspace():
                field.type_char(key)
        return []

    def _revert_last_toggle(self) -> list[Command]:
        if not self._last_toggle:
            return []
        dists = self.config.distributions
        for key in self._last_toggle:
            channel = getattr(dists, key)
            channel.enabled = not channel.enabled
        reverted = self._last_toggle
        self._last_toggle = []
        commands = self._save()
        if "npm" in reverted:
            commands += self._after_npm_toggle()
        return commands

    # -------------------------------------------------------------------------
    # Regeneration
    # -------------------------------------------------------------------------

    def _request_regeneration(self) -> list[Command]:
        if self.config.custom_files_mode:
            self.state = ModeSwitchWarning(paths=self.services.hand_authored(self.config))
            return []

        missing = self.services.missing_artifacts(self.config)
        if missing:
            pending = PendingGeneration(to_generate=tuple(missing))
        else:
            pending = self.services.detect_changes(self.config)

        if pending.is_empty:
            self.needs_regeneration = False
            return [self._notify("Release files are up to date")]
        self.state = ConfigRegenerationConsent(pending=pending)
        return []

    def _consent_key(self, pending: PendingGeneration, key: str) -> list[Command]:
        match key:
            case "y":
                if pending.blocked:
                    paths = self.services.hand_authored(self.config, pending.blocked)
                    self.state = OverwriteWarning(pending=pending, paths=paths)
                    return []
                return self._start_generation(pending)
            case "n" | "esc":
                self._last_toggle = []
                self._to_tabs()
        return []

    def _overwrite_key(self, warning: OverwriteWarning, key: str) -> list[Command]:
        match key:
            case "y":
                archived = self.services.archive(warning.paths)
                if isinstance(archived, Err):
                    self._to_tabs()
                    return [self._notify(f"Archive failed: {archived.error}", "error")]
                return self._start_generation(warning.pending.with_blocked_resolved())
            case "n" | "esc":
                self._to_tabs()
                return self._revert_last_toggle()
        return []

    def _mode_switch_key(self, paths: list[str], key: str) -> list[Command]:
        match key:
            case "y":
                archived = self.services.archive(paths)
                if isinstance(archived, Err):
                    self._to_tabs()
                    return [self._notify(f"Archive failed: {archived.error}", "error")]
                self.config.custom_files_mode = False
                commands = self._save()
                pending = self.services.detect_changes(self.config)
                if pending.is_empty:
                    self._to_tabs()
                    return [*commands, self._notify("Switched to managed release files")]
                return commands + self._start_generation(pending)
            case "n" | "esc":
                self._to_tabs()
        return []

    def _start_generation(self, pending: PendingGeneration) -> list[Command]:
        self._to_tabs()
        snapshot = self.config.copy()
        command = self._commands.issue(
            "generate", lambda t: FilesGenerated(t, self.services.generate(snapshot, pending))
        )
        return [self._notify("Generating release files..."), command]

    # -------------------------------------------------------------------------
    # Commit wizard and smart commit
    # -------------------------------------------------------------------------

    def _commit_key(self, wizard: CommitWizard, key: str) -> list[Command]:
        if wizard.committing:
            return []

        if wizard.phase == "message":
            match key:
                case "esc":
                    wizard.phase = "files"
                case "enter":
                    message = wizard.message.value.strip()
                    if message:
                        return self._run_commit(wizard, message)
                case "backspace":
                    wizard.message.backspace()
                case "space":
                    wizard.message.type_char(" ")
                case _ if len(key) == 1:
                    wizard.message.type_char(key)
            return []

        match key:
            case "esc":
                self._to_tabs()
            case "up" | "down":
                step = -1 if key == "up" else 1
                wizard.cursor = self._move(wizard.cursor, step, len(wizard.items))
            case "space" if wizard.items:
                wizard.items[wizard.cursor] = wizard.items[wizard.cursor].cycled()
            case "enter":
                paths = [i.path for i in wizard.items if i.action == "commit"]
                if paths:
                    wizard.phase = "message"
                    wizard.message = TextField(generate_commit_message(paths))
        return []

    def _prepare_plan(
        self, items: list[CleanupItem], message: str | None
    ) -> Result[CommitPlan, str]:
        planned = partition(items, message=message)
        if isinstance(planned, Err):
            return Err(planned.error.message)
        recorded = self.services.record_ignores(planned.value)
        if isinstance(recorded, Err):
            return recorded
        return Ok(planned.value)

    def _run_commit(self, wizard: CommitWizard, message: str) -> list[Command]:
        plan = self._prepare_plan(wizard.items, message)
        if isinstance(plan, Err):
            return [self._notify(plan.error, "error")]
        wizard.committing = True
        return [
            self._commands.issue(
                "commit", lambda t: CommitFinished(t, self.services.execute_commit(plan.value))
            )
        ]

    def _smart_confirm_key(self, key: str) -> list[Command]:
        match key:
            case "y":
                items = list(self.cleanup.items)
                custom = self.config.config.smart_commit.use_custom_rules
                if custom:
                    selected = {i.path for i in items if i.file.category != "ignore"}
                else:
                    selected = {i.path for i in items if i.action == "commit"}
                selection = FileSelection(items=items, selected=selected, custom_rules=custom)
                self.state = SmartCommitFileSelection(selection=selection)
            case "n" | "esc":
                self._to_tabs()
        return []

    def _selection_key(self, selection: FileSelection, key: str) -> list[Command]:
        if selection.committing:
            return []
        match key:
            case "esc":
                self._to_tabs()
            case "up" | "down":
                step = -1 if key == "up" else 1
                selection.cursor = self._move(selection.cursor, step, len(selection.items))
            case "space" if selection.items:
                item = selection.items[selection.cursor]
                if selection.can_toggle(item):
                    selection.selected ^= {item.path}
            case "enter":
                return self._run_smart_commit(selection)
        return []

    def _run_smart_commit(self, selection: FileSelection) -> list[Command]:
        items: list[CleanupItem] = []
        for item in selection.items:
            if item.path in selection.selected:
                items.append(item.with_action("commit"))
            elif item.action == "ignore":
                items.append(item)
            else:
                items.append(item.with_action("skip"))

        plan = self._prepare_plan(items, None)
        if isinstance(plan, Err):
            return [self._notify(plan.error, "error")]
        selection.committing = True
        return [
            self._commands.issue(
                "smart-commit",
                lambda t: SmartCommitFinished(t, self.services.execute_commit(plan.value)),
            )
        ]

    # -------------------------------------------------------------------------
    # Smart-commit preferences
    # -------------------------------------------------------------------------

    def _category_names(self, model: PreferencesModel) -> list[str]:
        return sorted(model.prefs.categories or DEFAULT_CATEGORY_RULES)

    def _seed_rules(self, model: PreferencesModel) -> None:
        if not model.prefs.categories:
            model.prefs.categories = default_category_rules()

    def _preferences_key(self, model: PreferencesModel, key: str) -> list[Command]:
        if model.input_kind is not None:
            return self._preferences_input_key(model, key)

        if model.confirm_reset:
            model.confirm_reset = False
            if key == "y":
                model.prefs.categories = default_category_rules()
            return []

        names = self._category_names(model)
        match key:
            case "esc":
                self._to_tabs()
            case "up" | "down":
                step = -1 if key == "up" else 1
                model.cursor = self._move(model.cursor, step, len(names))
            case "space":
                model.prefs.use_custom_rules = not model.prefs.use_custom_rules
                if model.prefs.use_custom_rules:
                    self._seed_rules(model)
            case "e" | "p":
                self._seed_rules(model)
                model.input_kind = "extension" if key == "e" else "pattern"
                model.input = TextField()
                model.error = ""
            case "x":
                self._seed_rules(model)
                rules = model.prefs.categories.get(names[model.cursor])
                if rules is not None and rules.patterns:
                    rules.patterns.pop()
            case "r":
                model.confirm_reset = True
            case "s":
                return self._save_preferences(model)
        return []

    def _preferences_input_key(self, model: PreferencesModel, key: str) -> list[Command]:
        match key:
            case "esc":
                model.input_kind = None
                model.error = ""
            case "backspace":
                model.input.backspace()
            case "enter":
                self._add_rule(model)
            case _ if len(key) == 1 and not key.isspace():
                model.input.type_char(key)
        return []

    def _add_rule(self, model: PreferencesModel) -> None:
        name = self._category_names(model)[model.cursor]
        rules = model.prefs.categories[name]
        if model.input_kind == "extension":
            ext = normalize_extension(model.input.value)
            if not ext:
                return
            if ext not in rules.extensions:
                rules.extensions.append(ext)
        else:
            checked = validate_pattern(model.input.value)
            if isinstance(checked, Err):
                model.error = checked.error
                return
            if checked.value not in rules.patterns:
                rules.patterns.append(checked.value)
        model.input_kind = None
        model.error = ""

    def _save_preferences(self, model: PreferencesModel) -> list[Command]:
        for name, rules in model.prefs.categories.items():
            for pattern in rules.patterns:
                checked = validate_pattern(pattern)
                if isinstance(checked, Err):
                    model.error = f"{name}: {checked.error}"
                    return []
        self.config.config.smart_commit = model.prefs
        self._to_tabs()
        commands = self._save(regenerate=False)
        if not self.cleanup.loading:
            commands.append(self._load_cleanup())
        commands.append(self._notify("Smart commit preferences saved", "success"))
        return commands

    # -------------------------------------------------------------------------
    # Repository cleanup scan
    # -------------------------------------------------------------------------

    def _start_scan(self) -> Command:
        return self._commands.issue("scan", lambda t: ScanFinished(t, self.services.scan()))

    def _scan_key(self, model: ScanModel, key: str) -> list[Command]:
        if key == "esc":
            self._commands.abandon("scan")
            self._to_tabs()
            return []
        if model.loading:
            return []

        files = model.result.files if model.result is not None else ()
        actions: dict[str, ScanAction] = {"d": "delete", "i": "ignore", "a": "archive"}
        match key:
            case "up" | "down":
                step = -1 if key == "up" else 1
                model.cursor = self._move(model.cursor, step, len(files))
            case "r":
                model.loading = True
                return [self._start_scan()]
            case _ if key in actions and files and model.result is not None:
                flagged = files[model.cursor]
                applied = self.services.apply_scan_action(flagged, actions[key])
                if isinstance(applied, Err):
                    return [self._notify(applied.error, "error")]
                model.result = _without(model.result, flagged.path)
                model.cursor = self._move(model.cursor, 0, len(model.result.files))
                return [self._notify(applied.value, "success")]
        return []

    # -------------------------------------------------------------------------
    # Repository creation and branch overlay
    # -------------------------------------------------------------------------

    def _new_repo_form(self) -> RepoForm:
        repo = self.config.project.repository
        name = repo.name if repo is not None and repo.name else self.config.project.binary_name
        return RepoForm(name=TextField(name), accounts=self.services.github_accounts())

    def _repo_form_key(self, form: RepoForm, key: str) -> list[Command]:
        if form.creating:
            return []

        text = {"name": form.name, "description": form.description}.get(form.focus)
        match key:
            case "esc":
                self._to_tabs()
            case "tab":
                index = _FORM_FOCUS.index(form.focus)
                form.focus = _FORM_FOCUS[(index + 1) % len(_FORM_FOCUS)]
            case "space" if form.focus == "private":
                form.private = not form.private
            case "space" if form.focus == "account" and form.accounts:
                form.account_index = (form.account_index + 1) % len(form.accounts)
            case "space" if form.focus == "description":
                form.description.type_char(" ")
            case "backspace" if text is not None:
                text.backspace()
            case "enter":
                name = form.name.value.strip()
                if not name:
                    return []
                form.creating = True
                request = RepoCreateRequest(
                    name=name,
                    description=form.description.value.strip(),
                    private=form.private,
                    owner=form.owner,
                )
                return [
                    self._commands.issue(
                        "repo-create", lambda t: RepoCreated(t, self.services.create_repo(request))
                    )
                ]
            case _ if len(key) == 1 and text is not None:
                if not (text is form.name and key.isspace()):
                    text.type_char(key)
        return []

    def _overlay_key(self, overlay: BranchSelection, key: str) -> list[Command]:
        if key == "esc":
            self.overlay = None
            self._commands.abandon("branches")
            self._commands.abandon("branch-push")
            return []
        if overlay.loading or overlay.pushing:
            return []

        match key:
            case "up" | "down":
                step = -1 if key == "up" else 1
                overlay.cursor = self._move(overlay.cursor, step, len(overlay.branches))
            case "enter" if overlay.branches:
                branch = overlay.branches[overlay.cursor]
                overlay.pushing = True
                return [
                    self._commands.issue(
                        "branch-push", lambda t: BranchPushed(t, self.services.push_branch(branch))
                    )
                ]
        return []

    # -------------------------------------------------------------------------
    # First-time setup
    # -------------------------------------------------------------------------

    def _detect_setup(self) -> Command:
        snapshot = self.config.copy()
        return self._commands.issue(
            "setup-detect", lambda t: SetupDetected(t, self.services.detect_setup(snapshot))
        )

    def _setup_key(self, setup: SetupModel, key: str) -> list[Command]:
        match handle_setup_key(setup, key):
            case "none":
                return []
            case "verify":
                form = replace(setup.form)
                return [
                    self._commands.issue(
                        "setup-verify",
                        lambda t: SetupVerified(t, self.services.verify_distributions(form)),
                    )
                ]
            case "keep_custom":
                self.config.custom_files_mode = True
                self.config.first_time_setup_completed = True
                return self._save(regenerate=False) + self._enter_tabs()
            case "overwrite_custom":
                files = list(setup.detection.custom_files) if setup.detection else []
                archived = self.services.archive(files)
                if isinstance(archived, Err):
                    return [self._notify(f"Archive failed: {archived.error}", "error")]
                self.config.custom_files_mode = False
                self.state = FirstTimeSetupView()
                return [self._detect_setup()]
            case "skip":
                self.config.first_time_setup_completed = True
                return self._save(regenerate=False) + self._enter_tabs()

    def _on_setup_detected(self, result: Result[SetupDetection, str]) -> list[Command]:
        if not isinstance(self.state, FirstTimeSetupView):
            return []
        setup = self.state.setup
        if isinstance(result, Err):
            setup.phase = "manual"
            return [self._notify(f"Detection failed: {result.error}", "error")]
        if result.value.managed:
            self.config.first_time_setup_completed = True
            return self._save(regenerate=False) + self._enter_tabs()
        setup.apply_detection(result.value)
        return []

    def _on_setup_verified(self, result: Result[VerifiedDistributions, str]) -> list[Command]:
        if not isinstance(self.state, FirstTimeSetupView):
            return []
        setup = self.state.setup
        if isinstance(result, Err):
            setup.phase = "confirming"
            setup.error = result.error
            return [self._notify(f"Verification failed: {result.error}", "error")]

        form = setup.form
        dists = self.config.distributions
        dists.homebrew.enabled = form.homebrew
        if form.homebrew:
            dists.homebrew.tap_repo = form.tap
            dists.homebrew.formula_name = form.formula
        dists.npm.enabled = form.npm
        if form.npm:
            dists.npm.package_name = form.package
        self.config.first_time_setup_completed = True

        found = [
            f"{label} {v.version}"
            for label, v in (("Homebrew", result.value.homebrew), ("npm", result.value.npm))
            if v is not None and v.exists
        ]
        summary = "Setup complete" + (f" (published: {', '.join(found)})" if found else "")
        return self._save() + self._enter_tabs() + [self._notify(summary, "success")]

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def _on_result(self, event: ResultEvent) -> list[Command]:
        match event:
            case StatusExpired():
                self.status = None
                return []
            case WatchTick():
                snapshot = self.config.copy()
                return self._watcher.on_tick(
                    self._commands,
                    initialized=self.cleanup.initialized,
                    refresh=lambda: self.services.load_cleanup(snapshot),
                )
            case CleanupLoaded(result=result):
                return self._on_cleanup(result, background=False)
            case WatchRefreshed(result=result):
                return self._on_cleanup(result, background=True)
            case GitHubStatusLoaded(result=result):
                return self._on_github_status(result)
            case NameChecked(check=check):
                return self._on_name_checked(check)
            case CommitFinished(result=result):
                return self._on_commit_finished(result)
            case SmartCommitFinished(result=result):
                return self._on_commit_finished(result)
            case FilesGenerated(result=result):
                return self._on_generated(result)
            case RepoCreated(result=result):
                return self._on_repo_created(result)
            case BranchesLoaded(result=result):
                return self._on_branches(result)
            case BranchPushed(result=result):
                return self._on_pushed(result)
            case SetupDetected(result=result):
                return self._on_setup_detected(result)
            case SetupVerified(result=result):
                return self._on_setup_verified(result)
            case ScanFinished(result=result):
                return self._on_scan(result)
            case CommandCrashed():
                return self._on_crash(event)

    def _on_crash(self, event: CommandCrashed) -> list[Command]:
        """Treat a crashed command as a failed one so its view recovers."""
        failure: ResultEvent | None = None
        match event.op:
            case "cleanup-load":
                failure = CleanupLoaded(event.token, Err(event.message))
            case "watch-refresh":
                failure = WatchRefreshed(event.token, Err(event.message))
            case "github-status":
                failure = GitHubStatusLoaded(event.token, Err(event.message))
            case "name-check":
                failure = NameChecked(
                    event.token, NameCheck(self._npm_name(), "error", event.message)
                )
            case "commit":
                failure = CommitFinished(event.token, Err(event.message))
            case "smart-commit":
                failure = SmartCommitFinished(event.token, Err(event.message))
            case "generate":
                failure = FilesGenerated(event.token, Err(event.message))
            case "repo-create":
                failure = RepoCreated(event.token, Err(event.message))
            case "branches":
                failure = BranchesLoaded(event.token, Err(event.message))
            case "branch-push":
                failure = BranchPushed(event.token, Err(event.message))
            case "setup-detect":
                failure = SetupDetected(event.token, Err(event.message))
            case "setup-verify":
                failure = SetupVerified(event.token, Err(event.message))
            case "scan":
                failure = ScanFinished(event.token, Err(event.message))
            case "watch-tick":
                failure = WatchTick(event.token)
            case "status-expiry":
                failure = StatusExpired(event.token)
        commands = self._on_result(failure) if failure is not None else []
        if commands:
            return commands
        return [self._notify(f"Internal error in {event.op}: {event.message}", "error")]

    def _on_cleanup(
        self, result: Result[CleanupSnapshot, str], *, background: bool
    ) -> list[Command]:
        if isinstance(result, Err):
            if background:
                logger.warning("background refresh failed: %s", result.error)
                return []
            self.cleanup.loading = False
            return [self._notify(f"Git status failed: {result.error}", "error")]
        self.cleanup.replace(result.value)
        self.repo_state = result.value.repo
        cursor = self.cursors[TAB_CLEANUP]
        self.cursors[TAB_CLEANUP] = self._move(cursor, 0, len(self.cleanup.items))
        return []

    def _on_github_status(self, result: Result[RepoState, str]) -> list[Command]:
        if isinstance(result, Err):
            return [self._notify(f"Repository status failed: {result.error}", "error")]
        self.repo_state = result.value
        remote = result.value.remote
        current = self.config.project.repository
        if remote is None or not remote.owner or not remote.name:
            return []
        if current is not None and (current.owner, current.name) == (remote.owner, remote.name):
            return []
        default_branch = current.default_branch if current is not None else "main"
        self.config.project.repository = RepositoryInfo(
            owner=remote.owner, name=remote.name, default_branch=default_branch
        )
        return self._save()

    def _on_name_checked(self, check: NameCheck) -> list[Command]:
        if not self.config.distributions.npm.enabled:
            return []
        self.npm_check = check
        if check.status == "error":
            return [self._notify(f"npm name check failed: {check.message}", "error")]
        return []

    def _on_commit_finished(self, result: Result[str, str]) -> list[Command]:
        if isinstance(result, Err):
            match self.state:
                case CommitView(wizard=wizard):
                    wizard.committing = False
                case SmartCommitFileSelection(selection=selection):
                    selection.committing = False
            return [self._notify(f"Commit failed: {result.error}", "error")]

        self._to_tabs()
        commands = [self._notify(result.value, "success"), self._load_github_status()]
        if not self.cleanup.loading:
            commands.append(self._load_cleanup())
        return commands

    def _on_generated(self, result: Result[list[str], str]) -> list[Command]:
        if isinstance(result, Err):
            return [self._notify(f"Generation failed: {result.error}", "error")]
        self.needs_regeneration = False
        self._last_toggle = []
        touched = ", ".join(result.value) or "nothing to change"
        commands = [self._notify(f"Release files updated: {touched}", "success")]
        if self.cleanup.initialized:
            commands += self._refresh_cleanup()
        return commands

    def _on_repo_created(self, result: Result[str, str]) -> list[Command]:
        if isinstance(result, Err):
            if isinstance(self.state, GitHubRepoCreation):
                self.state.form.creating = False
            return [self._notify(f"Repository creation failed: {result.error}", "error")]
        self._to_tabs()
        return [self._notify(f"Created {result.value}", "success"), self._load_github_status()]

    def _on_branches(self, result: Result[list[BranchInfo], str]) -> list[Command]:
        if self.overlay is None:
            return []
        if isinstance(result, Err):
            self.overlay = None
            return [self._notify(f"Listing branches failed: {result.error}", "error")]
        self.overlay.branches = result.value
        self.overlay.loading = False
        return []

    def _on_pushed(self, result: Result[str, str]) -> list[Command]:
        if isinstance(result, Err):
            if self.overlay is not None:
                self.overlay.pushing = False
            return [self._notify(f"Push failed: {result.error}", "error")]
        self.overlay = None
        return [self._notify(result.value, "success"), self._load_github_status()]

    def _on_scan(self, result: Result[ScanResult, str]) -> list[Command]:
        if not isinstance(self.state, RepoCleanupScan):
            return []
        model = self.state.model
        model.loading = False
        if isinstance(result, Err):
            return [self._notify(f"Scan failed: {result.error}", "error")]
        model.result = result.value
        model.cursor = self._move(model.cursor, 0, len(result.value.files))
        return []


def _without(result: ScanResult, path: str) -> ScanResult:
    return replace(
        result,
        media=tuple(f for f in result.media if f.path != path),
        excess_docs=tuple(f for f in result.excess_docs if f.path != path),
        dev_artifacts=tuple(f for f in result.dev_artifacts if f.path != path),
    )
