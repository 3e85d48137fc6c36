"""Regenerate command - bring release files in line with the configuration."""

from __future__ import annotations

from pathlib import Path

import typer

from distui.cli.commands._helpers import exit_on_error, exit_with_code, save_or_exit
from distui.cli.context import CLIContext, build_context
from distui.core.errors import ErrorCode
from distui.generation.drift import PendingGeneration
from distui.session.services import ProjectServices


def run_regenerate(ctx: CLIContext, services: ProjectServices, *, yes: bool) -> None:
    config = ctx.config
    if config.custom_files_mode:
        ctx.console.error("project uses hand-authored release files")
        ctx.console.print("hint: run `distui configure` to switch to managed files")
        exit_with_code(ErrorCode.USER_ERROR)

    missing = services.missing_artifacts(config)
    pending = (
        PendingGeneration(to_generate=tuple(missing))
        if missing
        else services.detect_changes(config)
    )
    if pending.is_empty:
        ctx.console.success("Release files are up to date")
        return

    for kind in pending.to_generate:
        ctx.console.print(f"  write   {kind}")
    for kind in pending.to_delete:
        ctx.console.print(f"  delete  {kind}")
    blocked = services.hand_authored(config, pending.blocked)
    for rel in blocked:
        ctx.console.warning(f"{rel} was not generated by distui and will be archived")

    if not yes and not ctx.console.confirm("Apply these changes?"):
        ctx.console.print("Aborted")
        exit_with_code(ErrorCode.USER_ERROR)

    if blocked:
        archived = exit_on_error(services.archive(blocked), ctx, ErrorCode.IO_ERROR)
        ctx.console.info(f"archived to {archived}")
        pending = pending.with_blocked_resolved()

    written = exit_on_error(services.generate(config, pending), ctx, ErrorCode.IO_ERROR)
    save_or_exit(ctx)
    ctx.console.success("Updated " + ", ".join(written) if written else "Nothing to write")


def regenerate(
    path: Path | None = typer.Argument(None, help="Project directory (default: cwd)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Write, update or delete release files to match the configuration."""
    ctx = build_context(path)
    services = ProjectServices(ctx.root, store=ctx.store, global_config=ctx.global_config)
    run_regenerate(ctx, services, yes=yes)
