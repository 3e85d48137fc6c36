"""Tests for distui.cleanup.smart_commit module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from distui.cleanup.partition import CommitPlan
from distui.cleanup.smart_commit import execute_plan, record_ignores
from distui.core.result import Err, Ok
from distui.git.repository import GitError, Repository


def _plan(ignore: tuple[str, ...] = ()) -> CommitPlan:
    return CommitPlan(
        commit_paths=("main.go", "old.go"),
        deleted_paths=frozenset({"old.go"}),
        ignore_paths=ignore,
        message="Update source code",
    )


def _repo(path: Path, *, tracked: bool = False) -> MagicMock:
    repo = MagicMock(spec=Repository)
    repo.path = path
    repo.is_tracked.return_value = tracked
    repo.add.return_value = Ok(None)
    repo.assume_unchanged.return_value = Ok(None)
    repo.commit.return_value = Ok("[main abc123] Update source code")
    return repo


class TestRecordIgnores:
    def test_writes_gitignore(self, tmp_path: Path) -> None:
        result = record_ignores(tmp_path, _plan(("bin/tool",)))
        assert result == Ok(["bin/tool"])
        assert "bin/tool" in (tmp_path / ".gitignore").read_text(encoding="utf-8")

    def test_nothing_to_ignore(self, tmp_path: Path) -> None:
        assert record_ignores(tmp_path, _plan()) == Ok([])
        assert not (tmp_path / ".gitignore").exists()


class TestExecutePlan:
    def test_stages_and_commits(self, tmp_path: Path) -> None:
        repo = _repo(tmp_path)
        result = execute_plan(repo, _plan())

        assert result == Ok("Committed 2 files: Update source code")
        repo.add.assert_any_call("main.go", deleted=False)
        repo.add.assert_any_call("old.go", deleted=True)
        repo.commit.assert_called_once_with("Update source code")

    def test_tracked_ignores_marked_unchanged(self, tmp_path: Path) -> None:
        """Ignored files git already tracks stop showing up as changed."""
        repo = _repo(tmp_path, tracked=True)
        execute_plan(repo, _plan(("secrets.env",)))

        repo.assume_unchanged.assert_called_once_with("secrets.env")
        repo.add.assert_any_call(".gitignore")

    def test_stage_failure_stops(self, tmp_path: Path) -> None:
        repo = _repo(tmp_path)
        repo.add.return_value = Err(GitError("add main.go", "pathspec did not match"))

        result = execute_plan(repo, _plan())

        assert isinstance(result, Err)
        assert result.error.kind == "stage_failed"
        repo.commit.assert_not_called()

    def test_commit_failure(self, tmp_path: Path) -> None:
        repo = _repo(tmp_path)
        repo.commit.return_value = Err(GitError("commit", "hook rejected"))

        result = execute_plan(repo, _plan())

        assert isinstance(result, Err)
        assert result.error.kind == "commit_failed"
        assert result.error.message == "hook rejected"
