"""Tests for distui.core.store."""

from __future__ import annotations

from pathlib import Path

import pytest

from distui.core.config import GlobalConfig, ModuleInfo, ProjectConfig, ProjectInfo
from distui.core.result import Err, Ok
from distui.core.store import ConfigStore


def _config(identifier: str = "github-com-acme-tool") -> ProjectConfig:
    return ProjectConfig(
        project=ProjectInfo(
            identifier=identifier,
            path=Path("/work/tool"),
            module=ModuleInfo(name="github.com/acme/tool"),
        )
    )


class TestConfigStore:
    def test_save_and_load_project(self, tmp_path: Path) -> None:
        """A saved project loads back equal."""
        store = ConfigStore(tmp_path)
        config = _config()
        config.distributions.npm.enabled = True

        assert store.save_project(config) == Ok(None)
        assert (tmp_path / "projects" / "github-com-acme-tool.yaml").is_file()

        loaded = store.load_project("github-com-acme-tool")
        assert isinstance(loaded, Ok)
        assert loaded.value == config

    def test_save_without_identifier(self, tmp_path: Path) -> None:
        """Saving a project without an identifier is refused."""
        result = ConfigStore(tmp_path).save_project(_config(identifier=""))
        assert isinstance(result, Err)
        assert "identifier" in result.error.message

    def test_load_missing_project(self, tmp_path: Path) -> None:
        """A missing project file is an error naming the path."""
        result = ConfigStore(tmp_path).load_project("nope")
        assert isinstance(result, Err)
        assert result.error.path == tmp_path / "projects" / "nope.yaml"

    def test_load_invalid_yaml(self, tmp_path: Path) -> None:
        """Unparseable YAML is an error, not an exception."""
        store = ConfigStore(tmp_path)
        path = store.project_path("broken")
        path.parent.mkdir(parents=True)
        path.write_text("project: [unclosed\n", encoding="utf-8")
        result = store.load_project("broken")
        assert isinstance(result, Err)
        assert "invalid YAML" in result.error.message

    def test_load_without_identifier(self, tmp_path: Path) -> None:
        """A project file without project.identifier fails to load."""
        store = ConfigStore(tmp_path)
        path = store.project_path("anon")
        path.parent.mkdir(parents=True)
        path.write_text("project:\n  path: /x\n", encoding="utf-8")
        assert isinstance(store.load_project("anon"), Err)

    def test_list_projects_skips_broken(self, tmp_path: Path) -> None:
        """Broken files are skipped; good ones are listed."""
        store = ConfigStore(tmp_path)
        store.save_project(_config("good"))
        (tmp_path / "projects" / "bad.yaml").write_text("project: [unclosed\n", encoding="utf-8")

        projects = store.list_projects()
        assert [p.identifier for p in projects] == ["good"]

    def test_global_defaults_when_absent(self, tmp_path: Path) -> None:
        """No global file means default settings."""
        assert ConfigStore(tmp_path).load_global_or_default() == GlobalConfig()

    def test_global_round_trip(self, tmp_path: Path) -> None:
        """Global config is saved and loaded."""
        store = ConfigStore(tmp_path)
        config = GlobalConfig()
        config.user.github_username = "alice"
        store.save_global(config)
        assert store.load_global() == Ok(config)

    def test_home_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """DISTUI_HOME decides where the store lives."""
        monkeypatch.setenv("DISTUI_HOME", str(tmp_path / "home"))
        store = ConfigStore()
        assert store.home == tmp_path / "home"

    def test_set_aside(self, tmp_path: Path) -> None:
        """A broken project file is renamed out of the way, not deleted."""
        store = ConfigStore(tmp_path)
        path = store.project_path("broken")
        path.parent.mkdir(parents=True)
        path.write_text("project: [unclosed\n", encoding="utf-8")

        moved = store.set_aside("broken")

        assert isinstance(moved, Ok)
        assert not path.exists()
        assert moved.value.name.startswith("broken.yaml.broken-")
        assert moved.value.read_text(encoding="utf-8") == "project: [unclosed\n"
        assert store.list_projects() == []

    def test_set_aside_missing_file(self, tmp_path: Path) -> None:
        result = ConfigStore(tmp_path).set_aside("nope")
        assert isinstance(result, Err)
        assert "cannot move" in result.error.message
