"""Tests for distui.platform.files module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from distui.platform.files import atomic_write_text, timestamp_dir_name


class TestAtomicWriteText:
    def test_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "config.yaml"
        atomic_write_text(target, "x: 1\n")
        assert target.read_text(encoding="utf-8") == "x: 1\n"

    def test_overwrites(self, tmp_path: Path) -> None:
        target = tmp_path / "f.txt"
        target.write_text("old", encoding="utf-8")
        atomic_write_text(target, "new")
        assert target.read_text(encoding="utf-8") == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["f.txt"]

    def test_failed_rename_keeps_original(self, tmp_path: Path) -> None:
        """A failing rename leaves the old content and no temp file behind."""
        target = tmp_path / "f.txt"
        target.write_text("old", encoding="utf-8")

        with patch("distui.platform.files.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                atomic_write_text(target, "new")

        assert target.read_text(encoding="utf-8") == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["f.txt"]


class TestTimestampDirName:
    def test_sortable(self) -> None:
        assert timestamp_dir_name(1000.0) < timestamp_dir_name(2000.0)

    def test_format(self) -> None:
        name = timestamp_dir_name(0.0)
        date, rest = name.split("-")
        assert len(date) == 8
        assert len(rest.split(".")[1]) == 6
