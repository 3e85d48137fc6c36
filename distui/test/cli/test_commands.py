"""Tests for the non-interactive CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer

from distui.cleanup.categorize import GitFile
from distui.cli.commands.check_name import report_name_check
from distui.cli.commands.commit import run_commit
from distui.cli.commands.regenerate import run_regenerate
from distui.cli.commands.status import describe_repo, render_status
from distui.cli.context import CLIContext
from distui.core.config import GlobalConfig
from distui.core.errors import ErrorCode
from distui.core.result import Err
from distui.core.store import ConfigStore
from distui.generation.drift import PendingGeneration
from distui.git.repository import RepoState
from distui.output.console import MockConsole
from distui.registry.client import NameCheck
from distui.test.session._fakes import FakeServices, make_config


def _ctx(tmp_path: Path, answers: list[bool] | None = None) -> CLIContext:
    return CLIContext(
        root=tmp_path,
        config=make_config(),
        store=ConfigStore(tmp_path / "home"),
        global_config=GlobalConfig(),
        console=MockConsole(answers=answers or []),
    )


def _console(ctx: CLIContext) -> MockConsole:
    assert isinstance(ctx.console, MockConsole)
    return ctx.console


# =============================================================================
# commit
# =============================================================================


class TestRunCommit:
    def test_commits_with_default_actions(self, tmp_path: Path) -> None:
        """Source is committed, build output ignored, docs left alone."""
        ctx = _ctx(tmp_path)
        services = FakeServices()

        run_commit(ctx, services, yes=True)  # type: ignore[arg-type]

        plan = services.committed[0]
        assert plan.commit_paths == ("main.go",)
        assert plan.ignore_paths == ("bin/tool",)
        assert services.plans == [plan]
        out = _console(ctx)
        assert "  (1 file(s) left untouched)" in out.messages
        assert out.has_success()

    def test_explicit_message(self, tmp_path: Path) -> None:
        services = FakeServices()
        ctx = _ctx(tmp_path)
        run_commit(ctx, services, yes=True, message="Fix flag parsing")  # type: ignore[arg-type]
        assert services.committed[0].message == "Fix flag parsing"

    def test_declined(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, answers=[False])
        services = FakeServices()

        with pytest.raises(typer.Exit) as exc:
            run_commit(ctx, services, yes=False)  # type: ignore[arg-type]

        assert exc.value.exit_code == ErrorCode.USER_ERROR
        assert services.committed == []
        assert services.plans == []

    def test_nothing_to_commit(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        services = FakeServices()
        services.files = (GitFile("README.md", "M", "docs"),)

        with pytest.raises(typer.Exit) as exc:
            run_commit(ctx, services, yes=True)  # type: ignore[arg-type]

        assert exc.value.exit_code == ErrorCode.USER_ERROR
        assert "error: no files to commit" in _console(ctx).messages

    def test_not_a_repository(self, tmp_path: Path) -> None:
        services = FakeServices()
        services.repo = RepoState(kind="no_repo")

        with pytest.raises(typer.Exit) as exc:
            run_commit(_ctx(tmp_path), services, yes=True)  # type: ignore[arg-type]

        assert exc.value.exit_code == ErrorCode.ENV_ERROR

    def test_commit_failure(self, tmp_path: Path) -> None:
        """A failed commit exits with the git error code."""
        ctx = _ctx(tmp_path)
        services = FakeServices()
        services.commit_result = Err("nothing added to commit")

        with pytest.raises(typer.Exit) as exc:
            run_commit(ctx, services, yes=True)  # type: ignore[arg-type]

        assert exc.value.exit_code == ErrorCode.GIT_ERROR
        assert "error: nothing added to commit" in _console(ctx).messages


# =============================================================================
# regenerate
# =============================================================================


class TestRunRegenerate:
    def test_up_to_date(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        services = FakeServices()
        run_regenerate(ctx, services, yes=True)  # type: ignore[arg-type]
        assert _console(ctx).messages == ["OK Release files are up to date"]
        assert services.generated == []

    def test_missing_files_generated(self, tmp_path: Path) -> None:
        """Missing artifacts are written and the project config is saved."""
        ctx = _ctx(tmp_path)
        services = FakeServices()
        services.missing = ["pipeline-descriptor"]

        run_regenerate(ctx, services, yes=True)  # type: ignore[arg-type]

        assert services.generated == [PendingGeneration(to_generate=("pipeline-descriptor",))]
        assert ctx.store.project_path(ctx.config.identifier).is_file()
        assert "OK Updated .goreleaser.yaml" in _console(ctx).messages

    def test_blocked_files_archived(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        services = FakeServices()
        services.pending = PendingGeneration(blocked=("package-manifest",))
        services.hand_authored_paths = ["package.json"]

        run_regenerate(ctx, services, yes=True)  # type: ignore[arg-type]

        assert services.archived == [["package.json"]]
        assert services.generated[0].to_generate == ("package-manifest",)
        assert _console(ctx).find("warning: package.json")

    def test_custom_files_mode_refused(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        ctx.config.custom_files_mode = True

        with pytest.raises(typer.Exit):
            run_regenerate(ctx, FakeServices(), yes=True)  # type: ignore[arg-type]

    def test_declined(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, answers=[False])
        services = FakeServices()
        services.pending = PendingGeneration(to_delete=("package-manifest",))

        with pytest.raises(typer.Exit):
            run_regenerate(ctx, services, yes=False)  # type: ignore[arg-type]

        assert services.generated == []


# =============================================================================
# status
# =============================================================================


class TestStatus:
    def test_describe_repo(self) -> None:
        assert describe_repo(RepoState(kind="unpushed", unpushed=2)) == "2 unpushed commit(s)"
        assert describe_repo(RepoState(kind="no_remote")) == "no remote configured"

    def test_render_groups_by_category(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        render_status(ctx, FakeServices())  # type: ignore[arg-type]

        out = _console(ctx)
        assert "remote: acme/tool" in out.messages
        assert "release files: up to date" in out.messages
        assert "Source and config (1)" in out.messages
        assert "  M  main.go  -> commit" in out.messages
        assert "  ?? bin/tool  -> ignore" in out.messages

    def test_render_clean_tree(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        services = FakeServices()
        services.files = ()
        services.missing = ["release-workflow"]

        render_status(ctx, services)  # type: ignore[arg-type]

        out = _console(ctx)
        assert "release files: missing: release-workflow" in out.messages
        assert "\nNo changes" in out.messages


# =============================================================================
# check-name
# =============================================================================


class TestReportNameCheck:
    def test_available(self) -> None:
        console = MockConsole()
        code = report_name_check(NameCheck("tool", "available"), console)
        assert code == ErrorCode.OK
        assert console.messages == ["OK tool is available"]

    def test_owned(self) -> None:
        console = MockConsole()
        check = NameCheck("tool", "available", message="you maintain it", owner="alice")
        assert report_name_check(check, console) == ErrorCode.OK
        assert console.messages == ["OK tool is yours (you maintain it)"]

    def test_taken_lists_suggestions(self) -> None:
        console = MockConsole()
        check = NameCheck("tool", "unavailable", "name is taken", suggestions=("@alice/tool",))
        assert report_name_check(check, console) == ErrorCode.USER_ERROR
        assert "  @alice/tool" in console.messages

    def test_network_error(self) -> None:
        console = MockConsole()
        check = NameCheck("tool", "error", "registry unreachable")
        assert report_name_check(check, console) == ErrorCode.NETWORK_ERROR
        assert console.has_error()
