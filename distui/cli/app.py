from __future__ import annotations

from pathlib import Path

import typer

from distui import __version__
from distui.cli.commands.check_name import check_name
from distui.cli.commands.commit import commit
from distui.cli.commands.configure import configure
from distui.cli.commands.regenerate import regenerate
from distui.cli.commands.status import status
from distui.output.logging import configure_logging

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(status)
app.command()(regenerate)
app.command()(commit)
app.command("check-name")(check_name)
app.command()(configure)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More logging (repeat)."),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to a file."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    # The interactive screen owns the terminal; its logs only go to --log-file.
    interactive = ctx.invoked_subcommand == "configure"
    configure_logging(verbose, log_file, to_stderr=not interactive)


def main() -> None:
    app()
