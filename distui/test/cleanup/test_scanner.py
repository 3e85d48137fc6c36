"""Tests for distui.cleanup.scanner module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from distui.cleanup.scanner import (
    ARCHIVE_DIR,
    FlaggedFile,
    apply_scan_action,
    scan_repository,
)
from distui.core.result import Err, Ok


def _touch(root: Path, rel: str, content: str = "x") -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestScanRepository:
    def test_artifacts_without_git(self, tmp_path: Path) -> None:
        """Outside a repo only untracked artifacts are reported."""
        _touch(tmp_path, "debug.log", "12345")
        _touch(tmp_path, "sub/.DS_Store")
        _touch(tmp_path, "main.go")
        _touch(tmp_path, "node_modules/pkg/x.log")

        result = scan_repository(tmp_path)

        assert isinstance(result, Ok)
        scan = result.value
        assert [f.path for f in scan.dev_artifacts] == ["debug.log", "sub/.DS_Store"]
        assert scan.media == ()
        assert scan.total_size_bytes == 6

    def test_tracked_media_and_docs(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        for rel in ["demo.mp4", "logo.png", "README.md", "docs/design.md"]:
            _touch(tmp_path, rel)
        tracked = Ok(["demo.mp4", "logo.png", "README.md", "docs/design.md", "main.go"])

        with patch("distui.cleanup.scanner.Repository.tracked_files", return_value=tracked):
            result = scan_repository(tmp_path)

        assert isinstance(result, Ok)
        assert [f.path for f in result.value.media] == ["demo.mp4"]
        assert [f.path for f in result.value.excess_docs] == ["docs/design.md"]
        assert result.value.excess_docs[0].suggested_action == "archive"

    def test_not_a_directory(self, tmp_path: Path) -> None:
        assert isinstance(scan_repository(tmp_path / "missing"), Err)


class TestApplyScanAction:
    def test_delete(self, tmp_path: Path) -> None:
        _touch(tmp_path, "demo.mp4")
        flagged = FlaggedFile("demo.mp4", "media", 1, "delete")

        assert apply_scan_action(tmp_path, flagged, "delete") == Ok("Deleted demo.mp4")
        assert not (tmp_path / "demo.mp4").exists()
        assert apply_scan_action(tmp_path, flagged, "delete") == Ok("Already gone: demo.mp4")

    def test_ignore_by_extension(self, tmp_path: Path) -> None:
        flagged = FlaggedFile("logs/debug.log", "dev-artifact", 1, "ignore")

        assert apply_scan_action(tmp_path, flagged, "ignore") == Ok("Ignoring *.log")
        assert apply_scan_action(tmp_path, flagged, "ignore") == Ok("Already ignored: *.log")

    def test_archive(self, tmp_path: Path) -> None:
        _touch(tmp_path, "docs/design.md", "draft")
        flagged = FlaggedFile("docs/design.md", "excess-docs", 5, "archive")

        assert apply_scan_action(tmp_path, flagged, "archive") == Ok("Archived docs/design.md")
        assert not (tmp_path / "docs/design.md").exists()
        archived = list((tmp_path / ARCHIVE_DIR).rglob("design.md"))
        assert len(archived) == 1
        assert archived[0].read_text(encoding="utf-8") == "draft"
