"""Detect a Go project from its working directory.

Reads the module path from `go.mod`, the repository owner/name from the
origin remote and the version from the latest tag. Everything else in a
new project's configuration starts at defaults.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from distui.core.config import (
    BinaryInfo,
    GlobalConfig,
    ModuleInfo,
    ProjectConfig,
    ProjectInfo,
    RepositoryInfo,
    sanitize_identifier,
)
from distui.core.result import Err, Ok, Result
from distui.git.repository import Repository

__all__ = [
    "DEFAULT_VERSION",
    "DetectionError",
    "detect_project",
    "new_project_config",
    "parse_module_path",
]

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "v0.0.1"

_MODULE_RE = re.compile(r'^module\s+"?([^"\s]+)"?')


@dataclass(frozen=True, slots=True)
class DetectionError:
    message: str
    path: Path | None = None


def parse_module_path(go_mod: str) -> str | None:
    """Module path from go.mod text, None when there is no module line."""
    for raw in go_mod.splitlines():
        line = raw.split("//", 1)[0].strip()
        match = _MODULE_RE.match(line)
        if match:
            return match.group(1)
    return None


def _repository_info(repo: Repository) -> RepositoryInfo | None:
    if not repo.exists():
        return None
    remote = repo.remote()
    if remote is None:
        return RepositoryInfo()
    return RepositoryInfo(
        owner=remote.owner,
        name=remote.name,
        default_branch=repo.default_branch(),
    )


def detect_project(
    path: Path, *, now: datetime | None = None
) -> Result[ProjectInfo, DetectionError]:
    root = path.resolve()
    go_mod = root / "go.mod"
    try:
        text = go_mod.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(DetectionError(f"go.mod not found at {root}", go_mod))
    except OSError as e:
        return Err(DetectionError(f"failed to read go.mod: {e}", go_mod))

    module_path = parse_module_path(text)
    if not module_path:
        return Err(DetectionError("no module declaration found in go.mod", go_mod))

    repo = Repository(root)
    version = (repo.latest_tag() if repo.exists() else None) or DEFAULT_VERSION
    detected = now or datetime.now()

    project = ProjectInfo(
        identifier=sanitize_identifier(module_path),
        path=root,
        module=ModuleInfo(name=module_path, version=version),
        repository=_repository_info(repo),
        binary=BinaryInfo(name=module_path.rsplit("/", 1)[-1] or "app"),
        last_accessed=detected,
        detected_at=detected,
    )
    logger.debug("detected project %s at %s", project.identifier, root)
    return Ok(project)


def new_project_config(
    project: ProjectInfo, global_config: GlobalConfig | None = None
) -> ProjectConfig:
    """Configuration for a project seen for the first time."""
    config = ProjectConfig(project=project)
    if global_config is not None and global_config.user.default_homebrew_tap:
        config.distributions.homebrew.tap_repo = global_config.user.default_homebrew_tap
    return config
