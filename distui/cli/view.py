"""Plain rich rendering of a ConfigureSession.

The session owns no layout; this module turns its current state into one
rich renderable per frame. It reads the session and never mutates it.
"""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from distui.cleanup.partition import CleanupItem
from distui.session.session import ConfigureSession
from distui.session.setup import MANUAL_FIELDS, SetupModel
from distui.session.state import (
    TAB_CLEANUP,
    TAB_NAMES,
    BranchSelection,
    CommitView,
    ConfigRegenerationConsent,
    FirstTimeSetupView,
    GitHubRepoCreation,
    ListItem,
    ModeSwitchWarning,
    OverwriteWarning,
    PreferencesView,
    RepoCleanupScan,
    SmartCommitConfirm,
    SmartCommitFileSelection,
    TabView,
)

__all__ = ["render"]

_ACTION_STYLES = {"commit": "green", "skip": "dim", "ignore": "yellow"}
_STATUS_STYLES = {"info": "cyan", "success": "green", "error": "red bold"}


def _pointer(selected: bool) -> str:
    return "> " if selected else "  "


def _check(enabled: bool) -> str:
    return "[x]" if enabled else "[ ]"


def _cleanup_line(item: CleanupItem, selected: bool) -> Text:
    text = Text(_pointer(selected))
    text.append(f"{item.action:<7}", style=_ACTION_STYLES[item.action])
    text.append(f"{item.file.status:<3}")
    text.append(item.path, style="bold" if selected else "")
    text.append(f"  {item.file.category}", style="dim")
    return text


def _toggle_line(item: ListItem, selected: bool) -> Text:
    text = Text(f"{_pointer(selected)}{_check(item.enabled)} ")
    text.append(item.label, style="bold" if selected else "")
    if item.detail:
        text.append(f"  {item.detail}", style="dim")
    return text


def _tabs(session: ConfigureSession, view: TabView) -> RenderableType:
    bar = Text()
    for index, name in enumerate(TAB_NAMES):
        style = "reverse bold" if index == session.active_tab else "dim"
        bar.append(f" {name} ", style=style)
        bar.append(" ")

    lines: list[RenderableType] = [bar, Text()]
    cursor = session.cursors[session.active_tab]
    if session.active_tab == TAB_CLEANUP:
        if session.cleanup.loading and not session.cleanup.initialized:
            lines.append(Text("Reading working tree...", style="dim"))
        elif not session.cleanup.items:
            lines.append(Text("No changes", style="dim"))
        for index, item in enumerate(session.cleanup.items):
            lines.append(_cleanup_line(item, index == cursor))
        hint = "space action  C commit  s smart commit  p prefs  f scan  P push  r refresh"
    else:
        for index, entry in enumerate(session.items_for_tab(session.active_tab)):
            lines.append(_toggle_line(entry, index == cursor))
        hint = "space toggle  R regenerate  tab switch  q quit"
        if session.active_tab == 1:
            hint = "space toggle  a all  e edit npm name  " + hint
    if view.npm_edit is not None:
        lines.append(Text(f"\nnpm package name: {view.npm_edit.value}_", style="bold"))
    if session.needs_regeneration:
        lines.append(Text("\nRelease files are out of date (press R)", style="yellow"))
    lines.append(Text(hint, style="dim"))
    return Group(*lines)


def _setup(setup: SetupModel) -> RenderableType:
    lines: list[RenderableType] = [Text("First-time setup", style="bold")]
    match setup.phase:
        case "detecting":
            lines.append(Text("Looking for release files and published packages..."))
        case "verifying":
            lines.append(Text("Verifying with Homebrew and npm..."))
        case "custom_choice":
            files = setup.detection.custom_files if setup.detection else ()
            lines.append(Text("Hand-authored release files found:"))
            lines.extend(Text(f"  {f}", style="yellow") for f in files)
            lines.append(Text("k keep them (custom mode)  o archive and let distui manage"))
        case "auto_detected" | "confirming":
            form = setup.form
            if form.homebrew:
                lines.append(Text(f"Homebrew  {form.tap}/{form.formula}"))
            if form.npm:
                lines.append(Text(f"npm       {form.package}"))
            back = "e" if setup.phase == "auto_detected" else "esc"
            lines.append(Text(f"enter verify  {back} edit", style="dim"))
        case "manual":
            form = setup.form
            for index, name in enumerate(MANUAL_FIELDS):
                value = getattr(form, name)
                shown = _check(value) if isinstance(value, bool) else value
                lines.append(Text(f"{_pointer(index == form.focus)}{name:<8} {shown}"))
            lines.append(Text("space toggle  enter continue  esc skip", style="dim"))
    if setup.error:
        lines.append(Text(setup.error, style="red"))
    return Group(*lines)


def _modal(session: ConfigureSession) -> RenderableType | None:
    match session.state:
        case CommitView(wizard=wizard):
            if wizard.phase == "message":
                body: list[RenderableType] = [
                    Text("Commit message:"),
                    Text(f"{wizard.message.value}_", style="bold"),
                ]
                if wizard.committing:
                    body.append(Text("Committing...", style="dim"))
                return Panel(Group(*body), title="Commit")
            rows = [_cleanup_line(i, n == wizard.cursor) for n, i in enumerate(wizard.items)]
            rows.append(Text("space action  enter message  esc back", style="dim"))
            return Panel(Group(*rows), title="Commit")
        case SmartCommitConfirm(commit_count=count, total=total):
            return Panel(Text(f"Smart commit {count} of {total} files? (y/n)"), title="Commit")
        case SmartCommitFileSelection(selection=sel):
            rows = [
                Text(f"{_pointer(n == sel.cursor)}{_check(i.path in sel.selected)} {i.path}")
                for n, i in enumerate(sel.items)
            ]
            return Panel(Group(*rows), title="Select files")
        case ConfigRegenerationConsent(pending=pending):
            kinds = ", ".join(pending.to_generate + pending.to_delete + pending.blocked)
            return Panel(Text(f"Regenerate {kinds}? (y/n)"), title="Release files")
        case OverwriteWarning(paths=paths):
            text = "These files were not generated by distui:\n" + "\n".join(paths)
            return Panel(Text(text + "\nArchive and overwrite? (y/n)"), border_style="yellow")
        case ModeSwitchWarning(paths=paths):
            text = "This project uses hand-authored release files:\n" + "\n".join(paths)
            text += "\nArchive them and switch to managed mode? (y/n)"
            return Panel(Text(text), border_style="yellow")
        case PreferencesView(model=model):
            prefs = model.prefs
            rows = [Text(f"{_check(prefs.use_custom_rules)} use custom rules")]
            for n, (name, rules) in enumerate(sorted(prefs.categories.items())):
                exts = " ".join(rules.extensions)
                rows.append(Text(f"{_pointer(n == model.cursor)}{name:<8} {exts}"))
            if model.input_kind is not None:
                rows.append(Text(f"add {model.input_kind}: {model.input.value}_", style="bold"))
            if model.confirm_reset:
                rows.append(Text("Reset to defaults? (y/n)", style="yellow"))
            if model.error:
                rows.append(Text(model.error, style="red"))
            return Panel(Group(*rows), title="Smart commit preferences")
        case RepoCleanupScan(model=model):
            if model.loading:
                return Panel(Text("Scanning..."), title="Repository cleanup")
            files = model.result.files if model.result is not None else ()
            rows = [
                Text(f"{_pointer(n == model.cursor)}{f.issue:<14} {f.path}")
                for n, f in enumerate(files)
            ] or [Text("Nothing to clean up", style="dim")]
            rows.append(Text("d delete  i ignore  a archive  r rescan  esc back", style="dim"))
            return Panel(Group(*rows), title="Repository cleanup")
        case GitHubRepoCreation(form=form):
            fields = {
                "name": form.name.value,
                "description": form.description.value,
                "private": _check(form.private),
                "account": form.owner,
            }
            rows = [
                Text(f"{_pointer(form.focus == key)}{key:<12} {value}")
                for key, value in fields.items()
            ]
            if form.creating:
                rows.append(Text("Creating...", style="dim"))
            return Panel(Group(*rows), title="Create GitHub repository")
        case _:
            return None


def _overlay(overlay: BranchSelection) -> RenderableType:
    if overlay.loading:
        return Panel(Text("Loading branches..."), title="Push")
    rows = [
        Text(f"{_pointer(n == overlay.cursor)}{b.name}{' (current)' if b.is_current else ''}")
        for n, b in enumerate(overlay.branches)
    ]
    if overlay.pushing:
        rows.append(Text("Pushing...", style="dim"))
    return Panel(Group(*rows), title="Push to branch")


def render(session: ConfigureSession) -> RenderableType:
    parts: list[RenderableType] = [
        Text(f"distui  {session.config.identifier}", style="bold blue"),
    ]
    repo = session.repo_state
    if repo is not None and repo.branch:
        parts.append(Text(f"{repo.branch}  {repo.kind}", style="dim"))

    match session.state:
        case FirstTimeSetupView(setup=setup):
            parts.append(_setup(setup))
        case TabView() as view:
            parts.append(_tabs(session, view))
        case _:
            modal = _modal(session)
            if modal is not None:
                parts.append(modal)

    if session.overlay is not None:
        parts.append(_overlay(session.overlay))
    if session.status is not None:
        parts.append(Text(session.status.text, style=_STATUS_STYLES[session.status.level]))
    return Group(*parts)
