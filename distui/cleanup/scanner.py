"""Repository cleanup scan.

Flags files that usually should not live in a release repository:
tracked media, excess documentation, and untracked editor/OS artifacts.
Each flagged file can be deleted, ignored by extension, or archived to
`.distui-archive/<timestamp>/`.
"""

from __future__ import annotations

import fnmatch
import logging
import posixpath
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from distui.core.result import Err, Ok, Result
from distui.git.repository import Repository
from distui.platform.files import timestamp_dir_name

from .gitignore import add_to_gitignore

__all__ = [
    "ARCHIVE_DIR",
    "FlaggedFile",
    "ScanAction",
    "ScanResult",
    "apply_scan_action",
    "scan_repository",
]

logger = logging.getLogger(__name__)

ARCHIVE_DIR = ".distui-archive"

IssueType = Literal["media", "excess-docs", "dev-artifact"]
ScanAction = Literal["delete", "ignore", "archive"]

_MEDIA_PATTERNS = (
    "*.mp4", "*.mov", "*.avi", "*.mkv", "*.flv", "*.wmv",
    "*.wav", "*.mp3", "*.flac", "*.aac", "*.ogg",
    "*.jpg", "*.jpeg", "*.png", "*.gif", "*.bmp", "*.svg",
)  # fmt: skip
_DOC_PATTERNS = ("*.md", "*.markdown", "*.pdf", "*.doc", "*.docx", "*.ppt", "*.pptx")
_KEPT_DOCS = frozenset(
    {"readme.md", "readme.markdown", "changelog.md", "license.md", "contributing.md"}
)
_ARTIFACT_NAMES = frozenset({".DS_Store", "Thumbs.db", "desktop.ini"})
_ARTIFACT_EXTENSIONS = frozenset({".log", ".tmp", ".temp", ".swp", ".swo"})
_SKIPPED_DIRS = frozenset({".git", ARCHIVE_DIR, ".distui-backup", "node_modules"})


@dataclass(frozen=True, slots=True)
class FlaggedFile:
    path: str
    issue: IssueType
    size_bytes: int
    suggested_action: ScanAction


@dataclass(frozen=True, slots=True)
class ScanResult:
    media: tuple[FlaggedFile, ...] = ()
    excess_docs: tuple[FlaggedFile, ...] = ()
    dev_artifacts: tuple[FlaggedFile, ...] = ()
    duration_seconds: float = 0.0

    @property
    def files(self) -> tuple[FlaggedFile, ...]:
        return self.media + self.excess_docs + self.dev_artifacts

    @property
    def total_size_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)


def _is_icon_or_logo(basename: str) -> bool:
    lower = basename.lower()
    return "icon" in lower or "logo" in lower


def _size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def _matches_any(basename: str, patterns: tuple[str, ...]) -> bool:
    lower = basename.lower()
    return any(fnmatch.fnmatchcase(lower, p) for p in patterns)


def _flag_tracked(root: Path, tracked: list[str]) -> tuple[list[FlaggedFile], list[FlaggedFile]]:
    media: list[FlaggedFile] = []
    docs: list[FlaggedFile] = []
    for rel in tracked:
        basename = posixpath.basename(rel)
        if _matches_any(basename, _MEDIA_PATTERNS) and not _is_icon_or_logo(basename):
            media.append(FlaggedFile(rel, "media", _size(root / rel), "delete"))
        elif _matches_any(basename, _DOC_PATTERNS) and basename.lower() not in _KEPT_DOCS:
            docs.append(FlaggedFile(rel, "excess-docs", _size(root / rel), "archive"))
    return media, docs


def _flag_artifacts(root: Path) -> list[FlaggedFile]:
    artifacts: list[FlaggedFile] = []
    for path in sorted(root.rglob("*")):
        rel_parts = path.relative_to(root).parts
        if any(part in _SKIPPED_DIRS for part in rel_parts):
            continue
        if not path.is_file():
            continue
        if path.name in _ARTIFACT_NAMES or path.suffix.lower() in _ARTIFACT_EXTENSIONS:
            rel = "/".join(rel_parts)
            artifacts.append(FlaggedFile(rel, "dev-artifact", _size(path), "ignore"))
    return artifacts


def scan_repository(root: Path) -> Result[ScanResult, str]:
    """Scan a project tree; tracked-file checks run only inside a git repo."""
    if not root.is_dir():
        return Err(f"not a directory: {root}")

    start = time.monotonic()
    media: list[FlaggedFile] = []
    docs: list[FlaggedFile] = []

    repo = Repository(root)
    if repo.exists():
        tracked = repo.tracked_files()
        if isinstance(tracked, Err):
            return Err(tracked.error.message)
        media, docs = _flag_tracked(root, tracked.value)

    try:
        artifacts = _flag_artifacts(root)
    except OSError as e:
        return Err(f"scan failed: {e}")

    return Ok(
        ScanResult(
            media=tuple(media),
            excess_docs=tuple(docs),
            dev_artifacts=tuple(artifacts),
            duration_seconds=time.monotonic() - start,
        )
    )


def _ignore_entry(rel: str) -> str:
    basename = posixpath.basename(rel)
    ext = posixpath.splitext(basename)[1]
    if ext:
        return f"*{ext}"
    return basename


def apply_scan_action(root: Path, flagged: FlaggedFile, action: ScanAction) -> Result[str, str]:
    """Delete, ignore or archive one flagged file; returns a status line."""
    target = root / flagged.path
    match action:
        case "delete":
            try:
                target.unlink()
            except FileNotFoundError:
                return Ok(f"Already gone: {flagged.path}")
            except OSError as e:
                return Err(f"delete failed: {e}")
            return Ok(f"Deleted {flagged.path}")
        case "ignore":
            entry = _ignore_entry(flagged.path)
            added = add_to_gitignore(root, [entry])
            if isinstance(added, Err):
                return added
            return Ok(f"Ignoring {entry}" if added.value else f"Already ignored: {entry}")
        case "archive":
            dest = root / ARCHIVE_DIR / timestamp_dir_name() / flagged.path
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(target), str(dest))
            except OSError as e:
                return Err(f"archive failed: {e}")
            logger.info("archived %s -> %s", flagged.path, dest)
            return Ok(f"Archived {flagged.path}")
