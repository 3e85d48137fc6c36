"""Config drift detection and artifact generation.

Compares a project's distribution settings against the release artifacts on
disk and decides what to (re)generate or delete. Only marker-bearing files
are touched automatically; hand-authored files that a setting needs are
reported as blocked and must be archived with the operator's consent first.

Usage:
    pending = detect_changes(project, config)
    if pending.blocked:
        archive_files(project.path, hand_authored_paths(project.path, config))
        pending = pending.with_blocked_resolved()
    match generate(project, config, pending):
        case Ok(touched):
            ...
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from distui.core.config import DEFAULT_WORKFLOW_PATH, ProjectConfig, ProjectInfo
from distui.core.result import Err, Ok, Result
from distui.platform.files import atomic_write_text, timestamp_dir_name

from .markers import is_distui_authored
from .templates import render_package_json, render_pipeline_descriptor, render_release_workflow

__all__ = [
    "ARTIFACT_KINDS",
    "Artifact",
    "ArtifactKind",
    "BACKUP_DIR",
    "GenerationError",
    "PendingGeneration",
    "archive_files",
    "artifact",
    "detect_changes",
    "detect_project_mode",
    "generate",
    "hand_authored_paths",
    "is_required",
    "missing_artifacts",
    "render",
]

logger = logging.getLogger(__name__)

BACKUP_DIR = ".distui-backup"

ArtifactKind = Literal["pipeline-descriptor", "package-manifest", "release-workflow"]

ARTIFACT_KINDS: tuple[ArtifactKind, ...] = (
    "pipeline-descriptor",
    "package-manifest",
    "release-workflow",
)

_PIPELINE_PATHS = (".goreleaser.yaml", ".goreleaser.yml", "goreleaser.yaml", "goreleaser.yml")


@dataclass(frozen=True, slots=True)
class GenerationError:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Artifact:
    """A managed file; the first candidate is where new files are written."""

    kind: ArtifactKind
    candidates: tuple[str, ...]

    @property
    def default_path(self) -> str:
        return self.candidates[0]

    def existing(self, root: Path) -> Path | None:
        for rel in self.candidates:
            path = root / rel
            if path.is_file():
                return path
        return None

    def target(self, root: Path) -> Path:
        return self.existing(root) or root / self.default_path


@dataclass(frozen=True, slots=True)
class PendingGeneration:
    """What a confirmed regeneration will do, in artifact kinds."""

    to_generate: tuple[ArtifactKind, ...] = ()
    to_delete: tuple[ArtifactKind, ...] = ()
    blocked: tuple[ArtifactKind, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.to_generate or self.to_delete or self.blocked)

    def with_blocked_resolved(self) -> PendingGeneration:
        """Blocked artifacts become plain generations once their files are archived."""
        merged = tuple(dict.fromkeys(self.to_generate + self.blocked))
        return PendingGeneration(to_generate=merged, to_delete=self.to_delete)


def artifact(kind: ArtifactKind, config: ProjectConfig | None = None) -> Artifact:
    match kind:
        case "pipeline-descriptor":
            return Artifact(kind, _PIPELINE_PATHS)
        case "package-manifest":
            return Artifact(kind, ("package.json",))
        case "release-workflow":
            workflow_path = DEFAULT_WORKFLOW_PATH
            if config is not None:
                workflow_path = config.config.ci_cd.github_actions.workflow_path or workflow_path
            return Artifact(kind, (workflow_path,))


def is_required(kind: ArtifactKind, config: ProjectConfig) -> bool:
    dists = config.distributions
    match kind:
        case "pipeline-descriptor":
            return dists.any_release_channel
        case "package-manifest":
            return dists.npm.enabled
        case "release-workflow":
            return config.config.ci_cd.github_actions.enabled


def render(kind: ArtifactKind, project: ProjectInfo, config: ProjectConfig) -> str:
    renderers: dict[ArtifactKind, Callable[[], str]] = {
        "pipeline-descriptor": lambda: render_pipeline_descriptor(project, config),
        "package-manifest": lambda: render_package_json(project, config),
        "release-workflow": lambda: render_release_workflow(config),
    }
    return renderers[kind]()


def missing_artifacts(project: ProjectInfo, config: ProjectConfig) -> list[ArtifactKind]:
    """Required artifacts with no file on disk at all."""
    return [
        kind
        for kind in ARTIFACT_KINDS
        if is_required(kind, config) and artifact(kind, config).existing(project.path) is None
    ]


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def detect_changes(project: ProjectInfo, config: ProjectConfig) -> PendingGeneration:
    """Work out which artifacts drifted from the distribution settings.

    - required and absent: generate
    - marker-bearing, required, stale content: generate
    - marker-bearing, no longer required: delete
    - hand-authored and required: blocked (never touched here)
    - hand-authored and not required: left alone

    Reads only; calling it twice on an unchanged tree gives the same answer.
    """
    to_generate: list[ArtifactKind] = []
    to_delete: list[ArtifactKind] = []
    blocked: list[ArtifactKind] = []

    for kind in ARTIFACT_KINDS:
        required = is_required(kind, config)
        existing = artifact(kind, config).existing(project.path)

        if existing is None:
            if required:
                to_generate.append(kind)
            continue

        if not is_distui_authored(existing):
            if required:
                blocked.append(kind)
            continue

        if not required:
            to_delete.append(kind)
        elif _read(existing) != render(kind, project, config):
            to_generate.append(kind)

    pending = PendingGeneration(tuple(to_generate), tuple(to_delete), tuple(blocked))
    logger.debug("drift for %s: %s", project.identifier, pending)
    return pending


def generate(
    project: ProjectInfo,
    config: ProjectConfig,
    pending: PendingGeneration,
) -> Result[list[str], GenerationError]:
    """Apply a pending generation: deletions first, then writes.

    Refuses to overwrite or delete a hand-authored file. Returns the
    project-relative paths that were written or removed.
    """
    root = project.path
    touched: list[str] = []

    for kind in pending.to_delete:
        existing = artifact(kind, config).existing(root)
        if existing is None:
            continue
        if not is_distui_authored(existing):
            return Err(GenerationError("refusing to delete hand-authored file", existing))
        try:
            existing.unlink()
        except OSError as e:
            return Err(GenerationError(f"failed to delete: {e}", existing))
        logger.info("deleted %s", existing)
        touched.append(existing.relative_to(root).as_posix())

    for kind in pending.to_generate:
        target = artifact(kind, config).target(root)
        if target.exists() and not is_distui_authored(target):
            return Err(GenerationError("refusing to overwrite hand-authored file", target))
        try:
            atomic_write_text(target, render(kind, project, config))
        except OSError as e:
            return Err(GenerationError(f"failed to write: {e}", target))
        logger.info("generated %s", target)
        touched.append(target.relative_to(root).as_posix())

    return Ok(touched)


def hand_authored_paths(root: Path, config: ProjectConfig | None = None) -> list[str]:
    """Project-relative paths of every release artifact that lacks the marker."""
    found: list[str] = []
    for kind in ARTIFACT_KINDS:
        for rel in artifact(kind, config).candidates:
            path = root / rel
            if path.is_file() and not is_distui_authored(path):
                found.append(rel)
    return found


def detect_project_mode(root: Path) -> tuple[bool, bool]:
    """Return (custom_files_mode, needs_setup) from the files in root.

    No release files: a fresh project that needs setup. Any hand-authored
    file: custom mode, still needs setup. Only distui files: nothing to do.
    """
    paths = [root / rel for rel in _PIPELINE_PATHS] + [root / "package.json"]
    present = [p for p in paths if p.is_file()]
    if not present:
        return False, True
    if any(not is_distui_authored(p) for p in present):
        return True, True
    return False, False


def archive_files(root: Path, paths: Iterable[str]) -> Result[Path, GenerationError]:
    """Move files into `.distui-backup/<timestamp>/`, keeping their layout."""
    backup = root / BACKUP_DIR / timestamp_dir_name()
    for rel in paths:
        src = root / rel
        dst = backup / rel
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(src), str(dst))
        except OSError as e:
            return Err(GenerationError(f"failed to archive {rel}: {e}", src))
        logger.info("archived %s -> %s", rel, dst)
    return Ok(backup)
