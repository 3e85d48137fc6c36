"""Logging setup for the command line.

Library modules only call `logging.getLogger(__name__)`; the CLI calls
`configure_logging` once. Records go to stderr through rich, and
optionally to a plain log file. The interactive session passes
`to_stderr=False` so log lines never land on the screen it draws.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging", "level_for_verbosity"]

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(threadName)s] %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    """0 -> WARNING, 1 -> INFO, 2+ -> DEBUG."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    log_file: Path | None = None,
    *,
    to_stderr: bool = True,
) -> None:
    level = level_for_verbosity(verbosity)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if to_stderr:
        console = Console(stderr=True)
        stderr_handler = RichHandler(
            console=console,
            level=level,
            show_path=verbosity >= 2,
            rich_tracebacks=True,
        )
        stderr_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(stderr_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG if verbosity >= 2 else level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(min((h.level for h in root.handlers), default=level))
