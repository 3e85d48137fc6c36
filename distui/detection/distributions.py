"""Read distribution settings back out of existing release artifacts.

Used by first-time setup to pre-fill the Homebrew tap/formula and the npm
package name before asking the registries whether they already exist.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import yaml

from distui.core.config import GlobalConfig, ProjectInfo
from distui.core.result import Err, Ok, Result
from distui.core.structured import as_obj_list, as_str_dict, get_str, get_table

from .project import DetectionError

__all__ = [
    "DetectedDistributions",
    "PipelineChannels",
    "detect_distributions",
    "read_package_name",
    "read_pipeline_channels",
]

_PIPELINE_FILES = (".goreleaser.yaml", ".goreleaser.yml")


@dataclass(frozen=True, slots=True)
class PipelineChannels:
    has_homebrew: bool = False
    homebrew_tap: str = ""
    formula_name: str = ""
    has_npm: bool = False


@dataclass(frozen=True, slots=True)
class DetectedDistributions:
    """Best guess at a project's channels, before any registry lookup."""

    homebrew_tap: str = ""
    formula_name: str = ""
    npm_package: str = ""
    homebrew_in_pipeline: bool = False
    npm_in_pipeline: bool = False


def read_pipeline_channels(root: Path) -> Result[PipelineChannels, DetectionError]:
    """Parse `brews` and `publishers` from the pipeline descriptor, if any."""
    path = next((root / name for name in _PIPELINE_FILES if (root / name).is_file()), None)
    if path is None:
        return Ok(PipelineChannels())

    try:
        data = as_str_dict(yaml.safe_load(path.read_text(encoding="utf-8")))
    except OSError as e:
        return Err(DetectionError(f"failed to read {path.name}: {e}", path))
    except yaml.YAMLError as e:
        return Err(DetectionError(f"invalid YAML in {path.name}: {e}", path))
    if data is None:
        return Ok(PipelineChannels())

    has_homebrew = False
    tap = ""
    formula = ""
    brews = as_obj_list(data.get("brews"))
    if brews:
        has_homebrew = True
        brew = as_str_dict(brews[0])
        if brew is not None:
            repository = get_table(brew, "repository")
            if repository is not None:
                owner = get_str(repository, "owner")
                name = get_str(repository, "name")
                if owner and name:
                    tap = f"{owner}/{name}"
            formula = get_str(brew, "name") or ""

    has_npm = False
    for publisher in as_obj_list(data.get("publishers")) or []:
        pub = as_str_dict(publisher)
        if pub is not None and "npm publish" in (get_str(pub, "cmd") or ""):
            has_npm = True
            break

    return Ok(
        PipelineChannels(
            has_homebrew=has_homebrew,
            homebrew_tap=tap,
            formula_name=formula,
            has_npm=has_npm,
        )
    )


def read_package_name(root: Path) -> Result[str | None, DetectionError]:
    """The `name` field of package.json; Ok(None) when there is no manifest."""
    path = root / "package.json"
    if not path.is_file():
        return Ok(None)
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(DetectionError(f"failed to read package.json: {e}", path))
    except json.JSONDecodeError as e:
        return Err(DetectionError(f"invalid JSON in package.json: {e}", path))
    data = as_str_dict(obj)
    if data is None:
        return Ok(None)
    return Ok(get_str(data, "name") or None)


def detect_distributions(
    project: ProjectInfo,
    global_config: GlobalConfig | None = None,
) -> DetectedDistributions:
    """Combine artifact contents with global defaults.

    Unreadable artifacts count as absent; this only seeds form fields.
    """
    channels = read_pipeline_channels(project.path)
    pipeline = channels.value if isinstance(channels, Ok) else PipelineChannels()
    package = read_package_name(project.path)
    package_name = package.value if isinstance(package, Ok) else None

    user = global_config.user if global_config is not None else None
    binary = project.binary_name

    tap = pipeline.homebrew_tap or (user.default_homebrew_tap if user else "")
    formula = pipeline.formula_name or binary

    npm_package = package_name or ""
    if not npm_package:
        scope = user.npm_scope.strip().lstrip("@") if user else ""
        npm_package = f"@{scope}/{binary}" if scope else binary

    return DetectedDistributions(
        homebrew_tap=tap,
        formula_name=formula,
        npm_package=npm_package,
        homebrew_in_pipeline=pipeline.has_homebrew,
        npm_in_pipeline=pipeline.has_npm or package_name is not None,
    )
