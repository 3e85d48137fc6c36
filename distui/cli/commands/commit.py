"""Commit command - one smart commit with the default per-file actions."""

from __future__ import annotations

from pathlib import Path

import typer

from distui.cleanup.partition import CleanupItem, partition
from distui.cli.commands._helpers import exit_on_error, exit_with_code
from distui.cli.context import CLIContext, build_context
from distui.core.errors import ErrorCode
from distui.session.services import ProjectServices


def run_commit(
    ctx: CLIContext, services: ProjectServices, *, yes: bool, message: str | None = None
) -> None:
    snapshot = exit_on_error(services.load_cleanup(ctx.config), ctx, ErrorCode.GIT_ERROR)
    if snapshot.repo.kind == "no_repo":
        ctx.console.error("not a git repository")
        exit_with_code(ErrorCode.ENV_ERROR)

    items = [CleanupItem.from_file(f) for f in snapshot.files]
    plan = exit_on_error(partition(items, message=message), ctx, ErrorCode.USER_ERROR)

    ctx.console.header(plan.message)
    for rel in plan.commit_paths:
        ctx.console.print(f"  commit  {rel}")
    for rel in plan.ignore_paths:
        ctx.console.print(f"  ignore  {rel}")
    skipped = len(items) - len(plan.commit_paths) - len(plan.ignore_paths)
    if skipped:
        ctx.console.print(f"  ({skipped} file(s) left untouched)")

    if not yes and not ctx.console.confirm("Commit these files?"):
        ctx.console.print("Aborted")
        exit_with_code(ErrorCode.USER_ERROR)

    exit_on_error(services.record_ignores(plan), ctx, ErrorCode.IO_ERROR)
    summary = exit_on_error(services.execute_commit(plan), ctx, ErrorCode.GIT_ERROR)
    ctx.console.success(summary)


def commit(
    path: Path | None = typer.Argument(None, help="Project directory (default: cwd)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message"),
) -> None:
    """Commit source and docs changes, ignore build noise, skip the rest."""
    ctx = build_context(path)
    services = ProjectServices(ctx.root, store=ctx.store, global_config=ctx.global_config)
    run_commit(ctx, services, yes=yes, message=message)
