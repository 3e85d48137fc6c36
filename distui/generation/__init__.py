"""Generated release artifacts: rendering, ownership markers, drift."""

from .drift import (
    ArtifactKind,
    GenerationError,
    PendingGeneration,
    archive_files,
    detect_changes,
    detect_project_mode,
    generate,
    hand_authored_paths,
    missing_artifacts,
)
from .markers import has_marker, is_distui_authored

__all__ = [
    "ArtifactKind",
    "GenerationError",
    "PendingGeneration",
    "archive_files",
    "detect_changes",
    "detect_project_mode",
    "generate",
    "hand_authored_paths",
    "has_marker",
    "is_distui_authored",
    "missing_artifacts",
]
