from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from distui.core.result import Err, Ok, Result
from distui.core.structured import as_obj_list, as_str_dict, get_table
from distui.platform.process import run as run_process

__all__ = [
    "NameCheck",
    "NameStatus",
    "PublishedVersion",
    "RegistryError",
    "check_npm_name",
    "homebrew_version",
    "name_suggestions",
    "name_variations",
    "npm_version",
]

logger = logging.getLogger(__name__)

REGISTRY_TIMEOUT_SECONDS = 30.0

NameStatus = Literal["available", "unavailable", "checking", "error"]


@dataclass(frozen=True, slots=True)
class RegistryError:
    message: str


@dataclass(frozen=True, slots=True)
class PublishedVersion:
    exists: bool
    version: str = ""


@dataclass(frozen=True, slots=True)
class NameCheck:
    """Outcome of an npm package-name availability check."""

    name: str
    status: NameStatus
    message: str = ""
    owner: str = ""
    suggestions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def owned(self) -> bool:
        return self.status == "available" and bool(self.owner)


def _ensure_v_prefix(version: str) -> str:
    if not version or version.startswith("v"):
        return version
    return "v" + version


def _cwd(cwd: Path | None) -> Path:
    return cwd if cwd is not None else Path.cwd()


def homebrew_version(
    tap: str, formula: str, *, cwd: Path | None = None
) -> Result[PublishedVersion, RegistryError]:
    """Stable version of tap/formula; a failed lookup means it does not exist."""
    if not tap or not formula:
        return Ok(PublishedVersion(exists=False))

    result = run_process(
        ["brew", "info", f"{tap}/{formula}", "--json=v2"],
        cwd=_cwd(cwd),
        timeout=REGISTRY_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        logger.debug("brew info %s/%s: %s", tap, formula, result.error.detail)
        return Ok(PublishedVersion(exists=False))

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(RegistryError(f"parsing brew info: {e}"))

    data = as_str_dict(obj) or {}
    formulae = as_obj_list(data.get("formulae")) or []
    if not formulae:
        return Ok(PublishedVersion(exists=False))
    first = as_str_dict(formulae[0]) or {}
    versions = get_table(first, "versions") or {}
    stable = versions.get("stable")
    if not isinstance(stable, str) or not stable:
        return Ok(PublishedVersion(exists=False))
    return Ok(PublishedVersion(exists=True, version=_ensure_v_prefix(stable)))


def npm_version(
    package: str, *, cwd: Path | None = None
) -> Result[PublishedVersion, RegistryError]:
    """Latest published version of an npm package."""
    if not package:
        return Ok(PublishedVersion(exists=False))

    result = run_process(
        ["npm", "view", package, "version"],
        cwd=_cwd(cwd),
        timeout=REGISTRY_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        logger.debug("npm view %s: %s", package, result.error.detail)
        return Ok(PublishedVersion(exists=False))

    version = result.value.strip()
    if not version:
        return Ok(PublishedVersion(exists=False))
    return Ok(PublishedVersion(exists=True, version=_ensure_v_prefix(version)))


def name_variations(name: str) -> list[str]:
    """Names npm would consider too similar: separator swaps, split points, case."""
    lower = name.lower()
    variations: list[str] = []
    if "-" in lower:
        variations += [lower.replace("-", "_"), lower.replace("-", "")]
    if "_" in lower:
        variations += [lower.replace("_", "-"), lower.replace("_", "")]
    for sep in ("-", "_"):
        variations += [lower[:i] + sep + lower[i:] for i in range(1, len(lower))]
    if lower != name:
        variations.append(lower)
    variations.append(name.upper())
    return [v for v in dict.fromkeys(variations) if v != name]


def name_suggestions(name: str, username: str = "") -> tuple[str, ...]:
    suggestions = [f"@{username}/{name}"] if username else []
    suggestions += [f"{name}-cli", f"{name}-tool", f"{name}-release", f"{name}-dist"]
    return tuple(suggestions)


def _is_not_found(text: str) -> bool:
    return "E404" in text or "404" in text


def _npm_user(cwd: Path) -> str:
    result = run_process(["npm", "whoami"], cwd=cwd, timeout=REGISTRY_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return ""
    return result.value.strip()


def _maintained_by(output: str, user: str) -> bool:
    user = user.lower()
    try:
        obj: object = json.loads(output)
    except json.JSONDecodeError:
        return user in output.lower()
    if isinstance(obj, str):
        obj = [obj]
    names: list[str] = []
    for item in as_obj_list(obj) or []:
        if isinstance(item, str):
            names.append(item.split("<", 1)[0].strip().lower())
        elif (entry := as_str_dict(item)) is not None and isinstance(entry.get("name"), str):
            names.append(str(entry["name"]).lower())
    return user in names


def check_npm_name(name: str, *, username: str = "", cwd: Path | None = None) -> NameCheck:
    """Decide whether an npm package name can be published by the current user.

    - not registered and no similar name registered: available
    - registered and maintained by the logged-in npm user: available (owned)
    - registered by someone else, or a similar name exists: unavailable,
      with suggestions
    - anything else (npm missing, network): error
    """
    if not name:
        return NameCheck(name=name, status="error", message="package name cannot be empty")

    workdir = _cwd(cwd)
    npm_user = _npm_user(workdir)
    suggest_as = username or npm_user

    result = run_process(
        ["npm", "view", name, "maintainers", "--json"],
        cwd=workdir,
        timeout=REGISTRY_TIMEOUT_SECONDS,
    )

    if isinstance(result, Err):
        error = result.error
        if not _is_not_found(f"{error.stdout}\n{error.stderr}"):
            logger.warning("npm name check failed for %s: %s", name, error.detail)
            return NameCheck(
                name=name, status="error", message=f"checking npm registry: {error.detail}"
            )
        for variation in name_variations(name):
            probe = run_process(
                ["npm", "view", variation, "name"],
                cwd=workdir,
                timeout=REGISTRY_TIMEOUT_SECONDS,
            )
            if isinstance(probe, Ok):
                return NameCheck(
                    name=name,
                    status="unavailable",
                    message=f"similar package exists: {variation}",
                    suggestions=name_suggestions(name, suggest_as),
                )
        return NameCheck(name=name, status="available")

    if npm_user and _maintained_by(result.value, npm_user):
        return NameCheck(
            name=name,
            status="available",
            message=f"You own this package ({npm_user})",
            owner=npm_user,
        )

    return NameCheck(
        name=name,
        status="unavailable",
        message="name is taken",
        suggestions=name_suggestions(name, suggest_as),
    )
