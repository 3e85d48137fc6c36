"""Distribution registry lookups (Homebrew, npm)."""

from .client import (
    NameCheck,
    NameStatus,
    PublishedVersion,
    RegistryError,
    check_npm_name,
    homebrew_version,
    npm_version,
)

__all__ = [
    "NameCheck",
    "NameStatus",
    "PublishedVersion",
    "RegistryError",
    "check_npm_name",
    "homebrew_version",
    "npm_version",
]
