"""Renderers for the generated release artifacts.

Every renderer is a pure function of the project configuration: the same
settings always produce byte-identical output, which is what lets the drift
detector compare a generated file against a fresh render.
"""

from __future__ import annotations

import json

import yaml

from distui.core.config import ProjectConfig, ProjectInfo
from distui.core.structured import StrDict

from .markers import JSON_MARKER, YAML_HEADER

__all__ = [
    "render_package_json",
    "render_pipeline_descriptor",
    "render_release_workflow",
]

DEFAULT_LDFLAGS = "-s -w -X main.version={{ .Version }}"
GOLANG_NPM_VERSION = "^0.0.6"


def _split_tap(tap_repo: str, fallback_owner: str) -> tuple[str, str]:
    owner, sep, name = tap_repo.strip().partition("/")
    if not sep:
        return fallback_owner, owner or "homebrew-tap"
    return owner, name


def _homepage(project: ProjectInfo) -> str:
    repo = project.repository
    if repo is None or not repo.owner or not repo.name:
        return ""
    return f"https://github.com/{repo.owner}/{repo.name}"


def _dump_yaml(data: StrDict) -> str:
    body = yaml.safe_dump(data, sort_keys=False, default_flow_style=False, width=1000)
    return f"{YAML_HEADER}\n\n{body}"


def render_pipeline_descriptor(project: ProjectInfo, config: ProjectConfig) -> str:
    """Render `.goreleaser.yaml` for the enabled channels."""
    settings = config.config
    dists = settings.distributions
    binary = project.binary_name

    hooks = ["go mod tidy"]
    if not settings.release.skip_tests and settings.build.test_command:
        hooks.append(settings.build.test_command)

    goos = ["linux", "darwin", "windows"] if settings.build.all_platforms else ["linux", "darwin"]
    goarch = ["amd64", "arm64"] if settings.build.arm64 else ["amd64"]
    ldflags = (
        list(project.binary.build_flags)
        if project.binary is not None and project.binary.build_flags
        else [DEFAULT_LDFLAGS]
    )

    archive: StrDict = {
        "formats": ["tar.gz"],
        "name_template": "{{ .Binary }}_{{ .Version }}_{{ .Os }}_{{ .Arch }}",
    }
    if settings.build.all_platforms:
        archive["format_overrides"] = [{"goos": "windows", "formats": ["zip"]}]

    data: StrDict = {
        "version": 2,
        "project_name": binary,
        "before": {"hooks": hooks},
        "builds": [
            {
                "id": binary,
                "binary": binary,
                "main": ".",
                "env": ["CGO_ENABLED=0"],
                "goos": goos,
                "goarch": goarch,
                "ldflags": ldflags,
            }
        ],
        "archives": [archive],
        "checksum": {"name_template": "checksums.txt"},
        "changelog": {
            "disable": not settings.release.generate_changelog,
            "sort": "asc",
            "filters": {"exclude": ["^docs:", "^test:", "^chore:"]},
        },
    }

    if dists.github_release.enabled:
        prerelease: bool | str = False
        if dists.github_release.prerelease:
            prerelease = True
        elif settings.release.pre_release:
            prerelease = "auto"
        data["release"] = {
            "draft": dists.github_release.draft or settings.release.create_draft,
            "prerelease": prerelease,
        }
    else:
        data["release"] = {"disable": True}

    if dists.homebrew.enabled:
        fallback_owner = project.repository.owner if project.repository else ""
        tap_owner, tap_name = _split_tap(dists.homebrew.tap_repo, fallback_owner)
        brew: StrDict = {
            "name": dists.homebrew.formula_name or binary,
            "repository": {"owner": tap_owner, "name": tap_name},
            "directory": dists.homebrew.formula_path or "Formula",
            "description": f"{project.module.name} command-line tool",
            "install": f'bin.install "{binary}"',
        }
        homepage = _homepage(project)
        if homepage:
            brew["homepage"] = homepage
        data["brews"] = [brew]

    if dists.npm.enabled:
        access = dists.npm.access or "public"
        cmd = f"npm publish --access {access}"
        if dists.npm.registry:
            cmd += f" --registry {dists.npm.registry}"
        data["publishers"] = [
            {"name": "npm", "ids": [binary], "cmd": cmd, "dir": "{{ dir .ArtifactPath }}"}
        ]

    return _dump_yaml(data)


def render_package_json(project: ProjectInfo, config: ProjectConfig) -> str:
    """Render the npm `package.json` that installs the released binary."""
    binary = project.binary_name
    package_name = config.distributions.npm.package_name or binary

    version = project.module.version or "0.0.1"
    version = version.removeprefix("v")

    pkg: StrDict = {
        "name": package_name,
        "version": version,
        "description": f"{project.module.name} - {JSON_MARKER}",
        "bin": {binary: f"./bin/{binary}"},
        "scripts": {"postinstall": "golang-npm install"},
    }

    repo = project.repository
    if repo is not None and repo.owner and repo.name:
        pkg["repository"] = {
            "type": "git",
            "url": f"https://github.com/{repo.owner}/{repo.name}.git",
        }

    pkg["keywords"] = ["cli", "tool"]
    pkg["license"] = "MIT"
    pkg["dependencies"] = {"golang-npm": GOLANG_NPM_VERSION}

    if repo is not None and repo.owner and repo.name:
        pkg["goBinary"] = {
            "name": binary,
            "path": "./bin",
            "url": (
                f"https://github.com/{repo.owner}/{repo.name}/releases/download/"
                f"v{{{{version}}}}/{binary}_{{{{version}}}}_{{{{platform}}}}_{{{{arch}}}}.tar.gz"
            ),
        }

    return json.dumps(pkg, indent=2) + "\n"


def render_release_workflow(config: ProjectConfig) -> str:
    """Render the tag-triggered release workflow."""
    actions = config.config.ci_cd.github_actions
    lines = [
        YAML_HEADER,
        "",
        "name: Release",
        "",
        "on:",
        "  push:",
        "    tags: ['v*']",
        "  workflow_dispatch:",
        "",
        "jobs:",
        "  release:",
        "    runs-on: ubuntu-latest",
        "    steps:",
        "      - uses: actions/checkout@v4",
        "        with:",
        "          fetch-depth: 0",
        "",
        "      - uses: actions/setup-go@v5",
        "        with:",
        "          go-version: '1.21'",
    ]
    if actions.include_tests:
        test_command = config.config.build.test_command or "go test ./..."
        lines += [
            "",
            "      - name: Run tests",
            f"        run: {test_command}",
        ]
    lines += [
        "",
        "      - uses: goreleaser/goreleaser-action@v5",
        "        with:",
        "          version: latest",
        "          args: release --clean",
        "        env:",
        "          GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }}",
    ]
    if config.distributions.npm.enabled:
        lines.append("          NPM_TOKEN: ${{ secrets.NPM_TOKEN }}")
    return "\n".join(lines) + "\n"
