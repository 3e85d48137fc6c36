"""Tests for distui.detection.distributions module."""

from __future__ import annotations

from pathlib import Path

from distui.core.config import GlobalConfig, ModuleInfo, ProjectInfo
from distui.core.result import Err, Ok
from distui.detection.distributions import (
    PipelineChannels,
    detect_distributions,
    read_package_name,
    read_pipeline_channels,
)

_PIPELINE = """\
project_name: tool
brews:
  - name: tool
    repository:
      owner: acme
      name: homebrew-tap
publishers:
  - name: npm
    cmd: npm publish --access public
"""


def _project(root: Path) -> ProjectInfo:
    return ProjectInfo(
        identifier="github-com-acme-tool",
        path=root,
        module=ModuleInfo(name="github.com/acme/tool"),
    )


class TestReadPipelineChannels:
    def test_channels(self, tmp_path: Path) -> None:
        (tmp_path / ".goreleaser.yml").write_text(_PIPELINE, encoding="utf-8")
        result = read_pipeline_channels(tmp_path)
        assert result == Ok(
            PipelineChannels(
                has_homebrew=True,
                homebrew_tap="acme/homebrew-tap",
                formula_name="tool",
                has_npm=True,
            )
        )

    def test_absent(self, tmp_path: Path) -> None:
        assert read_pipeline_channels(tmp_path) == Ok(PipelineChannels())

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / ".goreleaser.yaml").write_text("brews: [oops\n", encoding="utf-8")
        assert isinstance(read_pipeline_channels(tmp_path), Err)


class TestReadPackageName:
    def test_name(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text('{"name": "@acme/tool"}', encoding="utf-8")
        assert read_package_name(tmp_path) == Ok("@acme/tool")

    def test_missing_and_invalid(self, tmp_path: Path) -> None:
        assert read_package_name(tmp_path) == Ok(None)
        (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
        assert isinstance(read_package_name(tmp_path), Err)


class TestDetectDistributions:
    def test_from_artifacts(self, tmp_path: Path) -> None:
        (tmp_path / ".goreleaser.yaml").write_text(_PIPELINE, encoding="utf-8")
        detected = detect_distributions(_project(tmp_path))

        assert detected.homebrew_tap == "acme/homebrew-tap"
        assert detected.homebrew_in_pipeline
        assert detected.npm_in_pipeline
        assert detected.npm_package == "tool"

    def test_from_global_defaults(self, tmp_path: Path) -> None:
        global_config = GlobalConfig()
        global_config.user.default_homebrew_tap = "me/homebrew-tools"
        global_config.user.npm_scope = "@me"

        detected = detect_distributions(_project(tmp_path), global_config)

        assert detected.homebrew_tap == "me/homebrew-tools"
        assert detected.formula_name == "tool"
        assert detected.npm_package == "@me/tool"
        assert not detected.homebrew_in_pipeline
        assert not detected.npm_in_pipeline
