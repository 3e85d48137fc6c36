"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from distui.core.errors import ErrorCode
from distui.core.result import Err, Ok, Result
from distui.output.console import Style

if TYPE_CHECKING:
    from distui.cli.context import CLIContext


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the Ok value, or print the error and exit.

    Error values may be plain strings or carry `message` and an optional
    `hint` attribute.
    """
    if isinstance(result, Ok):
        return result.value

    error = result.error
    message: str = getattr(error, "message", str(error))
    hint: str | None = getattr(error, "hint", None)
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(error_code))


def exit_with_code(code: ErrorCode) -> NoReturn:
    raise typer.Exit(code=int(code))


def save_or_exit(ctx: CLIContext) -> None:
    saved = ctx.store.save_project(ctx.config)
    if isinstance(saved, Err):
        exit_on_error(saved, ctx, ErrorCode.IO_ERROR)
