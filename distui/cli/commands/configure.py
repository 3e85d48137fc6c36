"""Configure command - the interactive configuration session."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live

from distui.cli.commands._helpers import exit_with_code
from distui.cli.context import build_context
from distui.cli.keys import raw_terminal, read_key
from distui.cli.view import render
from distui.core.errors import ErrorCode
from distui.session.loop import EventLoop
from distui.session.services import ProjectServices
from distui.session.session import ConfigureSession


def configure(
    path: Path | None = typer.Argument(None, help="Project directory (default: cwd)"),
) -> None:
    """Configure distribution channels, commit changes and regenerate release files."""
    ctx = build_context(path)
    if not sys.stdin.isatty():
        ctx.console.error("configure needs an interactive terminal")
        exit_with_code(ErrorCode.ENV_ERROR)

    services = ProjectServices(ctx.root, store=ctx.store, global_config=ctx.global_config)
    session = ConfigureSession(ctx.config, services)
    console = Console()

    with raw_terminal(), Live(
        render(session), console=console, auto_refresh=False, screen=True
    ) as live:
        loop = EventLoop(session, on_change=lambda s: live.update(render(s), refresh=True))
        try:
            loop.run(read_key)
        except KeyboardInterrupt:
            pass
