"""Tests for distui.generation.templates module."""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from distui.core.config import (
    BinaryInfo,
    ModuleInfo,
    ProjectConfig,
    ProjectInfo,
    RepositoryInfo,
)
from distui.generation.markers import has_marker
from distui.generation.templates import (
    DEFAULT_LDFLAGS,
    render_package_json,
    render_pipeline_descriptor,
    render_release_workflow,
)


def _config() -> ProjectConfig:
    return ProjectConfig(
        project=ProjectInfo(
            identifier="github-com-acme-tool",
            path=Path("/work/tool"),
            module=ModuleInfo(name="github.com/acme/tool", version="v1.4.0"),
            repository=RepositoryInfo(owner="acme", name="tool"),
            binary=BinaryInfo(name="tool"),
        )
    )


class TestPipelineDescriptor:
    def test_defaults(self) -> None:
        config = _config()
        text = render_pipeline_descriptor(config.project, config)
        data = yaml.safe_load(text)

        assert has_marker(text)
        assert data["project_name"] == "tool"
        assert data["builds"][0]["goos"] == ["linux", "darwin"]
        assert data["builds"][0]["goarch"] == ["amd64"]
        assert data["builds"][0]["ldflags"] == [DEFAULT_LDFLAGS]
        assert data["before"]["hooks"] == ["go mod tidy", "go test ./..."]
        assert data["release"] == {"draft": False, "prerelease": False}
        assert "brews" not in data
        assert "publishers" not in data

    def test_homebrew_and_npm(self) -> None:
        config = _config()
        config.distributions.homebrew.enabled = True
        config.distributions.homebrew.tap_repo = "acme/homebrew-tap"
        config.distributions.npm.enabled = True
        config.distributions.npm.package_name = "@acme/tool"
        data = yaml.safe_load(render_pipeline_descriptor(config.project, config))

        brew = data["brews"][0]
        assert brew["repository"] == {"owner": "acme", "name": "homebrew-tap"}
        assert brew["homepage"] == "https://github.com/acme/tool"
        assert data["publishers"][0]["cmd"] == "npm publish --access public"

    def test_platform_switches(self) -> None:
        config = _config()
        config.config.build.all_platforms = True
        config.config.build.arm64 = True
        config.config.release.skip_tests = True
        data = yaml.safe_load(render_pipeline_descriptor(config.project, config))

        assert data["builds"][0]["goos"] == ["linux", "darwin", "windows"]
        assert data["builds"][0]["goarch"] == ["amd64", "arm64"]
        assert data["before"]["hooks"] == ["go mod tidy"]
        assert data["archives"][0]["format_overrides"][0]["goos"] == "windows"

    def test_releases_disabled(self) -> None:
        config = _config()
        config.distributions.github_release.enabled = False
        data = yaml.safe_load(render_pipeline_descriptor(config.project, config))
        assert data["release"] == {"disable": True}

    def test_deterministic(self) -> None:
        config = _config()
        first = render_pipeline_descriptor(config.project, config)
        assert render_pipeline_descriptor(config.project, config.copy()) == first


class TestPackageJson:
    def test_fields(self) -> None:
        config = _config()
        config.distributions.npm.package_name = "@acme/tool"
        text = render_package_json(config.project, config)
        pkg = json.loads(text)

        assert has_marker(text, json=True)
        assert pkg["name"] == "@acme/tool"
        assert pkg["version"] == "1.4.0"
        assert pkg["bin"] == {"tool": "./bin/tool"}
        assert pkg["goBinary"]["url"].startswith(
            "https://github.com/acme/tool/releases/download/v{{version}}/tool_"
        )

    def test_name_defaults_to_binary(self) -> None:
        config = _config()
        assert json.loads(render_package_json(config.project, config))["name"] == "tool"


class TestReleaseWorkflow:
    def test_workflow(self) -> None:
        config = _config()
        text = render_release_workflow(config)
        data = yaml.safe_load(text)

        assert has_marker(text)
        steps = data["jobs"]["release"]["steps"]
        assert any(s.get("name") == "Run tests" for s in steps)
        assert "NPM_TOKEN" not in text

    def test_npm_token_and_no_tests(self) -> None:
        config = _config()
        config.distributions.npm.enabled = True
        config.config.ci_cd.github_actions.include_tests = False
        text = render_release_workflow(config)

        assert "NPM_TOKEN" in text
        assert "Run tests" not in text
