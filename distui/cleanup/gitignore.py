"""Idempotent updates to a project's .gitignore."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from distui.core.result import Err, Ok, Result
from distui.platform.files import atomic_write_text

__all__ = ["add_to_gitignore", "read_gitignore_entries"]

logger = logging.getLogger(__name__)

GITIGNORE = ".gitignore"


def read_gitignore_entries(root: Path) -> list[str]:
    path = root / GITIGNORE
    if not path.exists():
        return []
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines()]


def add_to_gitignore(root: Path, entries: Iterable[str]) -> Result[list[str], str]:
    """Append entries that are not already present.

    An entry counts as present if the file already holds it verbatim or with
    a leading "/". Returns the entries actually added (possibly empty, in
    which case the file is not rewritten).
    """
    path = root / GITIGNORE
    try:
        existing_text = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as e:
        return Err(f"cannot read {path}: {e}")

    present = {line.strip().lstrip("/") for line in existing_text.splitlines() if line.strip()}
    added: list[str] = []
    for entry in entries:
        clean = entry.strip()
        key = clean.lstrip("/")
        if not clean or key in present:
            continue
        present.add(key)
        added.append(clean)

    if not added:
        return Ok([])

    content = existing_text
    if content and not content.endswith("\n"):
        content += "\n"
    content += "\n".join(added) + "\n"

    try:
        atomic_write_text(path, content)
    except OSError as e:
        return Err(f"cannot write {path}: {e}")

    logger.debug("added %d entries to %s", len(added), path)
    return Ok(added)
