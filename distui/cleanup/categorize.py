"""File categorization for the cleanup tab and smart commits.

`categorize` is pure and total: any string maps to exactly one of
auto / docs / ignore / other, with no filesystem access.

Built-in rules, in precedence order:
    1. ignore  - VCS and build output dirs, binaries, media, the project's
                 own binary name, extensionless build outputs
    2. auto    - source files, module manifests, release descriptors
    3. docs    - documentation and data/config text formats
    4. other   - everything else (e.g. notes.txt)

Custom rules (a mapping of rule name -> CategoryRules) replace the built-in
table: extensions are tested across every rule first, then glob patterns,
both in sorted rule-name order.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from distui.core.config import CategoryRules

from .rules import Category, category_for_rule_name, glob_matches, normalize_extension

__all__ = [
    "GitFile",
    "categorize",
    "categorize_entries",
    "normalize_path",
]

_IGNORED_DIRS = frozenset({".git", "bin", "dist", "node_modules", "vendor"})

_IGNORED_EXTENSIONS = frozenset(
    {
        # binaries and objects
        ".out", ".exe", ".dll", ".so", ".dylib", ".test", ".a", ".o", ".class", ".pyc",
        # images and media
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".svg", ".webp",
        ".mp4", ".mov", ".avi", ".mp3", ".wav",
    }
)  # fmt: skip

_IGNORED_NAMES = frozenset({".ds_store", "thumbs.db"})

_AUTO_NAMES = frozenset(
    {
        "go.mod",
        "go.sum",
        "go.work",
        "go.work.sum",
        ".goreleaser.yaml",
        ".goreleaser.yml",
        "makefile",
        "dockerfile",
    }
)

_AUTO_EXTENSIONS = frozenset(
    {".go", ".py", ".js", ".ts", ".rs", ".c", ".h", ".cpp", ".java", ".rb", ".sh", ".mod", ".sum"}
)

_DOCS_EXTENSIONS = frozenset({".md", ".rst", ".adoc", ".yaml", ".yml", ".json", ".toml"})

_DOCS_NAMES = frozenset({"readme", "license", "changelog", "authors", "contributing", "notice"})

# Extensionless names that are not build outputs
_KNOWN_EXTENSIONLESS = _DOCS_NAMES | frozenset(
    {"makefile", "dockerfile", "procfile", "vagrantfile"}
)


@dataclass(frozen=True, slots=True)
class GitFile:
    """A changed file as reported by git, with its derived category."""

    path: str
    status: str
    category: Category


def normalize_path(path: str) -> str:
    """Forward slashes, no leading "./"."""
    p = path.replace("\\", "/").strip()
    while p.startswith("./"):
        p = p[2:]
    return p


def _split(path: str) -> tuple[list[str], str, str]:
    parts = [part for part in path.split("/") if part]
    basename = parts[-1] if parts else ""
    _, ext = posixpath.splitext(basename)
    return parts[:-1], basename, ext.lower()


def _builtin(path: str, binary_name: str) -> Category:
    dirs, basename, ext = _split(path)
    lower_name = basename.lower()

    if path.startswith((".git/", "dist/")) or any(d in _IGNORED_DIRS for d in dirs):
        return "ignore"
    if ext in _IGNORED_EXTENSIONS or lower_name in _IGNORED_NAMES:
        return "ignore"
    if binary_name and basename == binary_name:
        return "ignore"

    if lower_name in _AUTO_NAMES or ext in _AUTO_EXTENSIONS:
        return "auto"
    if ext in _DOCS_EXTENSIONS or lower_name in _DOCS_NAMES:
        return "docs"

    is_dotfile = basename.startswith(".")
    if basename and not ext and not is_dotfile and lower_name not in _KNOWN_EXTENSIONLESS:
        # Extensionless, non-dot files in a Go tree are almost always binaries
        return "ignore"
    return "other"


def _custom(path: str, rules: Mapping[str, CategoryRules]) -> Category:
    names = sorted(rules)
    lower_path = path.lower()

    for name in names:
        for ext in rules[name].extensions:
            normalized = normalize_extension(ext)
            if normalized and lower_path.endswith(normalized):
                return category_for_rule_name(name)

    for name in names:
        for pattern in rules[name].patterns:
            if glob_matches(pattern, path):
                return category_for_rule_name(name)

    return "other"


def categorize(
    path: str,
    custom_rules: Mapping[str, CategoryRules] | None = None,
    *,
    binary_name: str = "",
) -> Category:
    """Map a working-tree path to its category.

    Args:
        path: Path relative to the repository root.
        custom_rules: Per-category rules; None (or empty) uses the built-in table.
        binary_name: The project's build output name, always ignored by default.
    """
    normalized = normalize_path(path)
    if custom_rules:
        return _custom(normalized, custom_rules)
    return _builtin(normalized, binary_name)


def categorize_entries(
    entries: Iterable[tuple[str, str]],
    custom_rules: Mapping[str, CategoryRules] | None = None,
    *,
    binary_name: str = "",
) -> list[GitFile]:
    """Categorize (status, path) pairs from a status read."""
    return [
        GitFile(
            path=path,
            status=status,
            category=categorize(path, custom_rules, binary_name=binary_name),
        )
        for status, path in entries
    ]
