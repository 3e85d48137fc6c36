"""check-name command - npm package name availability."""

from __future__ import annotations

from pathlib import Path

import typer

from distui.core.errors import ErrorCode
from distui.core.store import ConfigStore
from distui.output.console import ConsoleProtocol, RichConsole, Style
from distui.registry.client import NameCheck, check_npm_name


def report_name_check(check: NameCheck, console: ConsoleProtocol) -> ErrorCode:
    match check.status:
        case "available":
            if check.owned:
                console.success(f"{check.name} is yours ({check.message})")
            else:
                console.success(f"{check.name} is available")
            return ErrorCode.OK
        case "unavailable":
            console.warning(f"{check.name} is taken: {check.message}")
            if check.suggestions:
                console.print("Available alternatives:", Style.DIM)
                for suggestion in check.suggestions:
                    console.print(f"  {suggestion}")
            return ErrorCode.USER_ERROR
        case "error" | "checking":
            console.error(f"could not check {check.name}: {check.message}")
            return ErrorCode.NETWORK_ERROR


def check_name(
    name: str = typer.Argument(..., help="npm package name, optionally @scope/name"),
) -> None:
    """Check whether an npm package name can be published."""
    global_config = ConfigStore().load_global_or_default()
    username = global_config.user.npm_scope.lstrip("@")
    check = check_npm_name(name, username=username, cwd=Path.cwd())
    code = report_name_check(check, RichConsole())
    if code != ErrorCode.OK:
        raise typer.Exit(code=int(code))
