"""Location of distui's configuration home.

Global config lives in `<home>/config.yaml`, projects in
`<home>/projects/<identifier>.yaml`. `DISTUI_HOME` overrides the default
`~/.distui`, which is how tests and CI point the tool at a scratch dir.
"""

from __future__ import annotations

import os
from pathlib import Path

__all__ = [
    "config_home",
    "global_config_path",
    "projects_dir",
]

HOME_ENV = "DISTUI_HOME"


def config_home() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".distui"


def global_config_path(home: Path | None = None) -> Path:
    return (home or config_home()) / "config.yaml"


def projects_dir(home: Path | None = None) -> Path:
    return (home or config_home()) / "projects"
