"""Ownership markers for generated artifacts.

A file distui wrote carries a marker; anything without one is treated as
hand-authored and is never rewritten or deleted without confirmation.

YAML artifacts start with a `# Generated by distui` header comment. JSON
has no comments, so package manifests carry the marker in their
description ("<module> - distributed via distui").
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "JSON_MARKER",
    "YAML_HEADER",
    "has_marker",
    "is_distui_authored",
]

MARKER_TEXT = "Generated by distui"
YAML_HEADER = f"# {MARKER_TEXT}. Changes are overwritten on regeneration."
JSON_MARKER = "distributed via distui"

# Only the leading comment block is searched for the YAML marker
_HEADER_SCAN_LINES = 10


def has_marker(content: str, *, json: bool = False) -> bool:
    if json:
        return JSON_MARKER in content
    for line in content.splitlines()[:_HEADER_SCAN_LINES]:
        stripped = line.strip()
        if not stripped:
            continue
        if not stripped.startswith("#"):
            return False
        if MARKER_TEXT in stripped:
            return True
    return False


def is_distui_authored(path: Path) -> bool:
    """True if path exists and carries the marker for its format."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False
    return has_marker(content, json=path.suffix == ".json")
