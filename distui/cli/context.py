from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import typer

from distui.core.config import GlobalConfig, ProjectConfig
from distui.core.errors import ErrorCode
from distui.core.result import Err
from distui.core.store import ConfigStore
from distui.detection.project import detect_project, new_project_config
from distui.output.console import ConsoleProtocol, RichConsole

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ProjectConfig
    store: ConfigStore
    global_config: GlobalConfig
    console: ConsoleProtocol
    is_new: bool = False


def load_project_config(
    root: Path, store: ConfigStore, global_config: GlobalConfig
) -> tuple[ProjectConfig, bool] | str:
    """Saved config for the project at root (refreshed), or a fresh one.

    An unreadable saved file is moved aside before starting fresh. Returns
    an error message when root is not a detectable project or the broken
    file cannot be moved.
    """
    detected = detect_project(root)
    if isinstance(detected, Err):
        return detected.error.message
    project = detected.value

    if not store.project_path(project.identifier).exists():
        return new_project_config(project, global_config), True

    loaded = store.load_project(project.identifier)
    if isinstance(loaded, Err):
        moved = store.set_aside(project.identifier)
        if isinstance(moved, Err):
            return f"{loaded.error.message} ({moved.error.message})"
        logger.warning("%s; starting from a fresh configuration", loaded.error.message)
        return new_project_config(project, global_config), True

    config = loaded.value
    config.project.path = project.path
    config.project.last_accessed = datetime.now()
    if config.project.repository is None or not config.project.repository.name:
        config.project.repository = project.repository
    return config, False


def build_context(path: Path | None = None, console: ConsoleProtocol | None = None) -> CLIContext:
    out = console or RichConsole()
    root = (path or Path.cwd()).expanduser().resolve()
    store = ConfigStore()
    global_config = store.load_global_or_default()

    loaded = load_project_config(root, store, global_config)
    if isinstance(loaded, str):
        out.error(loaded)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config, is_new = loaded
    return CLIContext(
        root=root,
        config=config,
        store=store,
        global_config=global_config,
        console=out,
        is_new=is_new,
    )
