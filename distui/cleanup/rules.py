"""Category rule tables and glob handling for smart commits.

Custom rules are per-category extension lists plus gitignore-style glob
patterns, matched with pathspec. The default table here seeds a project's
custom rules when the user turns them on; it is never persisted on its own.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Literal

import pathspec

from distui.core.config import CategoryRules
from distui.core.result import Err, Ok, Result

__all__ = [
    "Category",
    "DEFAULT_CATEGORY_RULES",
    "category_for_rule_name",
    "default_category_rules",
    "glob_matches",
    "normalize_extension",
    "validate_pattern",
]

Category = Literal["auto", "docs", "ignore", "other"]

DEFAULT_CATEGORY_RULES: Mapping[str, CategoryRules] = {
    "config": CategoryRules(
        extensions=[".yaml", ".yml", ".json", ".toml", ".ini", ".conf", ".env"],
        patterns=["**/config/**", "**/configs/**", "**/.env*"],
    ),
    "code": CategoryRules(
        extensions=[".go", ".js", ".ts", ".py", ".rb", ".java", ".c", ".cpp", ".h", ".rs"],
        patterns=["**/src/**", "**/lib/**", "**/pkg/**"],
    ),
    "docs": CategoryRules(
        extensions=[".md", ".txt", ".rst", ".adoc"],
        patterns=["**/docs/**", "**/doc/**", "**/*.md"],
    ),
    "build": CategoryRules(
        extensions=[".mod", ".sum", ".lock"],
        patterns=["**/.goreleaser*", "**/Makefile", "**/Dockerfile", "**/.github/**"],
    ),
    "test": CategoryRules(
        extensions=["_test.go", ".test", ".spec.js", ".spec.ts"],
        patterns=["**/test/**", "**/tests/**", "**/*_test.go"],
    ),
    "assets": CategoryRules(
        extensions=[".png", ".jpg", ".svg", ".ico", ".gif", ".woff", ".ttf", ".css"],
        patterns=["**/assets/**", "**/static/**", "**/public/**"],
    ),
    "data": CategoryRules(
        extensions=[".sql", ".db", ".csv", ".xml"],
        patterns=["**/data/**", "**/migrations/**"],
    ),
}

_RULE_NAME_CATEGORIES: Mapping[str, Category] = {
    "code": "auto",
    "config": "auto",
    "build": "auto",
    "test": "auto",
    "docs": "docs",
    "ignore": "ignore",
    "assets": "ignore",
}


def default_category_rules() -> dict[str, CategoryRules]:
    """Fresh, mutable copy of the default rule table."""
    return {
        name: CategoryRules(extensions=list(r.extensions), patterns=list(r.patterns))
        for name, r in DEFAULT_CATEGORY_RULES.items()
    }


def category_for_rule_name(name: str) -> Category:
    """Map a user-defined rule name onto one of the four categories."""
    return _RULE_NAME_CATEGORIES.get(name.strip().lower(), "other")


def normalize_extension(ext: str) -> str:
    """Lowercase and add the leading dot: "GO" -> ".go", "_test.go" stays."""
    ext = ext.strip().lower()
    if not ext or ext.startswith((".", "_")):
        return ext
    return "." + ext


def validate_pattern(pattern: str) -> Result[str, str]:
    """Check a glob pattern before it is saved into a project's rules."""
    stripped = pattern.strip()
    if not stripped:
        return Err("pattern is empty")
    if stripped.startswith("!"):
        return Err(f"negated patterns are not supported: {stripped}")
    if stripped.startswith("#"):
        return Err(f"pattern would be read as a comment: {stripped}")
    if stripped.startswith(("/", "\\")) or (stripped[1:2] == ":" and stripped[0].isalpha()):
        return Err(f"absolute paths are not allowed: {stripped}")
    try:
        _compile(stripped)
    except ValueError as e:
        return Err(f"invalid pattern '{stripped}': {e}")
    return Ok(stripped)


@lru_cache(maxsize=512)
def _compile(pattern: str) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", [pattern])


def glob_matches(pattern: str, path: str) -> bool:
    """True if a gitignore-style pattern matches path; bad patterns never match."""
    if not pattern.strip() or pattern.lstrip().startswith(("!", "#")):
        return False
    try:
        spec = _compile(pattern.strip())
    except ValueError:
        return False
    return spec.match_file(path)
