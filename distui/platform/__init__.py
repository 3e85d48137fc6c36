"""Platform abstraction layer: processes, files, config home."""

from .files import atomic_write_text
from .paths import config_home
from .process import ProcessError, run, tool_available

__all__ = [
    "atomic_write_text",
    "config_home",
    "ProcessError",
    "run",
    "tool_available",
]
