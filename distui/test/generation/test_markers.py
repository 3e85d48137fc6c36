"""Tests for distui.generation.markers module."""

from __future__ import annotations

from pathlib import Path

from distui.generation.markers import JSON_MARKER, YAML_HEADER, has_marker, is_distui_authored


class TestHasMarker:
    def test_yaml_header(self) -> None:
        assert has_marker(f"{YAML_HEADER}\n\nversion: 2\n")

    def test_marker_after_other_comments(self) -> None:
        assert has_marker("# vim: set ft=yaml\n\n# Generated by distui\nversion: 2\n")

    def test_marker_below_content_is_ignored(self) -> None:
        """Only the leading comment block counts."""
        assert not has_marker("version: 2\n# Generated by distui\n")

    def test_json(self) -> None:
        assert has_marker(f'{{"description": "tool - {JSON_MARKER}"}}', json=True)
        assert not has_marker('{"description": "tool"}', json=True)


class TestIsDistuiAuthored:
    def test_by_suffix(self, tmp_path: Path) -> None:
        pkg = tmp_path / "package.json"
        pkg.write_text(f'{{"description": "x - {JSON_MARKER}"}}', encoding="utf-8")
        yml = tmp_path / ".goreleaser.yaml"
        yml.write_text("project_name: tool\n", encoding="utf-8")

        assert is_distui_authored(pkg)
        assert not is_distui_authored(yml)

    def test_missing_file(self, tmp_path: Path) -> None:
        assert not is_distui_authored(tmp_path / "nope.yaml")
