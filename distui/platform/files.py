"""Filesystem helpers."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path

__all__ = ["atomic_write_text", "timestamp_dir_name"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using a temp file in the same directory.

    On any failure (including the final rename) the temp file is removed and
    the original exception propagates; the target keeps its old content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def timestamp_dir_name(now: float | None = None) -> str:
    """Sortable directory name for backups and archives (20250101-120000.123456)."""
    moment = datetime.now() if now is None else datetime.fromtimestamp(now)
    return moment.strftime("%Y%m%d-%H%M%S.%f")
