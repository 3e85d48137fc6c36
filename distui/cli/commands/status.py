"""Status command - categorized working-tree changes and release-file drift."""

from __future__ import annotations

from pathlib import Path

import typer

from distui.cleanup.partition import CleanupItem
from distui.cli.commands._helpers import exit_on_error
from distui.cli.context import CLIContext, build_context
from distui.core.errors import ErrorCode
from distui.git.repository import RepoState
from distui.output.console import Style
from distui.session.services import ProjectServices

_CATEGORY_TITLES = {
    "auto": "Source and config",
    "docs": "Documentation",
    "ignore": "Ignored candidates",
    "other": "Other",
}


def describe_repo(state: RepoState) -> str:
    match state.kind:
        case "no_repo":
            return "not a git repository"
        case "no_remote":
            return "no remote configured"
        case "unpushed":
            return f"{state.unpushed} unpushed commit(s)"
        case "dirty":
            return f"{state.changed} uncommitted change(s)"
        case "clean":
            return "clean"


def _print_items(ctx: CLIContext, items: list[CleanupItem]) -> None:
    for category, title in _CATEGORY_TITLES.items():
        group = [i for i in items if i.file.category == category]
        if not group:
            continue
        ctx.console.header(f"{title} ({len(group)})")
        for item in group:
            ctx.console.print(f"  {item.file.status:<2} {item.path}  -> {item.action}")


def render_status(ctx: CLIContext, services: ProjectServices) -> None:
    config = ctx.config
    snapshot = exit_on_error(services.load_cleanup(config), ctx, ErrorCode.GIT_ERROR)

    ctx.console.header(config.identifier)
    ctx.console.field("path", str(ctx.root))
    if snapshot.repo.branch:
        ctx.console.field("branch", snapshot.repo.branch)
    remote = snapshot.repo.remote
    if remote is not None:
        ctx.console.field("remote", f"{remote.owner}/{remote.name}")
    ctx.console.field("repository", describe_repo(snapshot.repo))
    ctx.console.field("mode", "custom release files" if config.custom_files_mode else "managed")

    if not config.custom_files_mode:
        missing = services.missing_artifacts(config)
        pending = services.detect_changes(config)
        if missing:
            ctx.console.field("release files", "missing: " + ", ".join(missing))
        elif pending.is_empty:
            ctx.console.field("release files", "up to date")
        else:
            kinds = pending.to_generate + pending.to_delete + pending.blocked
            ctx.console.field("release files", "out of date: " + ", ".join(kinds))

    items = [CleanupItem.from_file(f) for f in snapshot.files]
    if not items:
        ctx.console.print("\nNo changes", Style.DIM)
        return
    _print_items(ctx, items)


def status(
    path: Path | None = typer.Argument(None, help="Project directory (default: cwd)"),
) -> None:
    """Show categorized changes and repository state."""
    ctx = build_context(path)
    render_status(ctx, ProjectServices(ctx.root, store=ctx.store, global_config=ctx.global_config))
