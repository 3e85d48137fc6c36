"""YAML persistence for global and per-project configuration.

Layout under the config home (see `distui.platform.paths`):

    config.yaml                 global user settings
    projects/<identifier>.yaml  one file per project

Every save is atomic (temp file in the same directory, then rename). A file
that cannot be parsed, or a project without an identifier, fails the load
outright; callers treat such a project as undetected.

Usage:
    store = ConfigStore()
    match store.load_project("github-com-acme-tool"):
        case Ok(project):
            project.custom_files_mode = False
            store.save_project(project)
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import yaml

from distui.platform.files import atomic_write_text
from distui.platform.paths import config_home, global_config_path, projects_dir

from .config import ConfigError, GlobalConfig, ProjectConfig
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict

__all__ = ["ConfigStore"]

logger = logging.getLogger(__name__)


def _read_yaml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ConfigError(f"config not found: {path}", path))
    except OSError as e:
        return Err(ConfigError(f"cannot read {path}: {e}", path))

    try:
        data: object = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return Err(ConfigError(f"invalid YAML in {path}: {e}", path))

    if data is None:
        return Ok({})
    table = as_str_dict(data)
    if table is None:
        return Err(ConfigError(f"expected a mapping at top level of {path}", path))
    return Ok(table)


def _write_yaml(path: Path, data: StrDict) -> Result[None, ConfigError]:
    content = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    try:
        atomic_write_text(path, content)
    except OSError as e:
        return Err(ConfigError(f"cannot write {path}: {e}", path))
    return Ok(None)


class ConfigStore:
    """Reads and writes distui configuration files under one home directory."""

    def __init__(self, home: Path | None = None) -> None:
        self.home = home or config_home()

    def project_path(self, identifier: str) -> Path:
        return projects_dir(self.home) / f"{identifier}.yaml"

    def load_global(self) -> Result[GlobalConfig, ConfigError]:
        path = global_config_path(self.home)
        raw = _read_yaml(path)
        if isinstance(raw, Err):
            return raw
        return Ok(GlobalConfig.from_dict(raw.value))

    def load_global_or_default(self) -> GlobalConfig:
        """Global config, falling back to defaults when absent or unreadable."""
        result = self.load_global()
        if isinstance(result, Err):
            if result.error.path is None or result.error.path.exists():
                logger.warning("%s", result.error.message)
            return GlobalConfig()
        return result.value

    def save_global(self, config: GlobalConfig) -> Result[None, ConfigError]:
        return _write_yaml(global_config_path(self.home), config.to_dict())

    def load_project(self, identifier: str) -> Result[ProjectConfig, ConfigError]:
        path = self.project_path(identifier)
        raw = _read_yaml(path)
        if isinstance(raw, Err):
            return raw

        project = ProjectConfig.from_dict(raw.value)
        if project is None:
            return Err(ConfigError(f"project missing identifier: {path}", path))
        return Ok(project)

    def save_project(self, project: ProjectConfig) -> Result[None, ConfigError]:
        if not project.identifier:
            return Err(ConfigError("project missing identifier"))
        path = self.project_path(project.identifier)
        logger.debug("saving project %s -> %s", project.identifier, path)
        return _write_yaml(path, project.to_dict())

    def set_aside(self, identifier: str) -> Result[Path, ConfigError]:
        """Rename an unreadable project file so a fresh save cannot overwrite it."""
        path = self.project_path(identifier)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        target = path.with_name(f"{path.name}.broken-{stamp}")
        try:
            path.replace(target)
        except OSError as e:
            return Err(ConfigError(f"cannot move {path} aside: {e}", path))
        logger.warning("moved unreadable project file to %s", target)
        return Ok(target)

    def list_projects(self) -> list[ProjectConfig]:
        """All loadable projects; broken files are skipped with a warning."""
        directory = projects_dir(self.home)
        if not directory.is_dir():
            return []

        projects: list[ProjectConfig] = []
        for path in sorted(directory.glob("*.yaml")):
            result = self.load_project(path.stem)
            if isinstance(result, Err):
                logger.warning("skipping project %s: %s", path.name, result.error.message)
                continue
            projects.append(result.value)
        return projects
