"""Tests for distui.platform.process module."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from distui.core.result import Err, Ok
from distui.platform.process import ProcessError, run, tool_available


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "push", "-u", "origin", "main"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "git push -u ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        assert ProcessError(("x",), 1, "out", " err \n").detail == "err"
        assert ProcessError(("x",), 1, "out\n", "").detail == "out"
        assert ProcessError(("x",), 1, "", "").detail == "x failed (exit 1)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run function."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        with patch(
            "distui.platform.process.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd=["npm"], timeout=10),
        ):
            result = run(["npm", "view", "x"], cwd=tmp_path, timeout=10)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr


class TestToolAvailable:
    def test_present_and_missing(self) -> None:
        with patch("distui.platform.process.shutil.which", return_value="/usr/bin/git"):
            assert tool_available("git") is True
        with patch("distui.platform.process.shutil.which", return_value=None):
            assert tool_available("goreleaser") is False
