"""First-time setup sub-machine.

Runs once per project, before the tabs are shown. Phases:

    detecting      waiting for artifact/registry detection
    custom_choice  hand-authored release files found: keep or overwrite
    auto_detected  published formula/package found: verify or edit
    manual         operator fills in channels by hand
    confirming     summary before verification
    verifying      waiting for the registry verification

`handle_setup_key` only edits the model and returns an intent; the session
performs the intent (saving, archiving, starting commands).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from distui.detection.distributions import DetectedDistributions
from distui.registry.client import PublishedVersion

__all__ = [
    "MANUAL_FIELDS",
    "ManualField",
    "SetupDetection",
    "SetupForm",
    "SetupIntent",
    "SetupModel",
    "SetupPhase",
    "VerifiedDistributions",
    "handle_setup_key",
]

SetupPhase = Literal[
    "detecting",
    "custom_choice",
    "auto_detected",
    "manual",
    "confirming",
    "verifying",
]

ManualField = Literal["homebrew", "tap", "formula", "npm", "package"]

MANUAL_FIELDS: tuple[ManualField, ...] = ("homebrew", "tap", "formula", "npm", "package")
_CHECKBOXES: frozenset[ManualField] = frozenset({"homebrew", "npm"})

SetupIntent = Literal["none", "verify", "keep_custom", "overwrite_custom", "skip"]


@dataclass(frozen=True, slots=True)
class SetupDetection:
    """What setup detection found on disk and in the registries."""

    custom_files: tuple[str, ...] = ()
    managed: bool = False
    distributions: DetectedDistributions = field(default_factory=DetectedDistributions)
    homebrew: PublishedVersion = field(default_factory=lambda: PublishedVersion(exists=False))
    npm: PublishedVersion = field(default_factory=lambda: PublishedVersion(exists=False))

    @property
    def found_in_registry(self) -> bool:
        return self.homebrew.exists or self.npm.exists


@dataclass(frozen=True, slots=True)
class VerifiedDistributions:
    homebrew: PublishedVersion | None = None
    npm: PublishedVersion | None = None


@dataclass(slots=True)
class SetupForm:
    homebrew: bool = False
    tap: str = ""
    formula: str = ""
    npm: bool = False
    package: str = ""
    focus: int = 0

    @property
    def focused(self) -> ManualField:
        return MANUAL_FIELDS[self.focus]

    @property
    def any_channel(self) -> bool:
        return self.homebrew or self.npm

    def move(self, step: int) -> None:
        self.focus = (self.focus + step) % len(MANUAL_FIELDS)

    def toggle(self) -> None:
        if self.focused == "homebrew":
            self.homebrew = not self.homebrew
        elif self.focused == "npm":
            self.npm = not self.npm

    def type_char(self, ch: str) -> None:
        name = self.focused
        if name in _CHECKBOXES or ch.isspace():
            return
        setattr(self, name, getattr(self, name) + ch)

    def backspace(self) -> None:
        name = self.focused
        if name not in _CHECKBOXES:
            setattr(self, name, getattr(self, name)[:-1])

    @classmethod
    def prefilled(cls, detection: SetupDetection) -> SetupForm:
        dists = detection.distributions
        return cls(
            homebrew=detection.homebrew.exists,
            tap=dists.homebrew_tap,
            formula=dists.formula_name,
            npm=detection.npm.exists,
            package=dists.npm_package,
        )


@dataclass(slots=True)
class SetupModel:
    phase: SetupPhase = "detecting"
    form: SetupForm = field(default_factory=SetupForm)
    detection: SetupDetection | None = None
    error: str = ""

    def apply_detection(self, detection: SetupDetection) -> None:
        """Pick the phase after detection (managed projects never get here)."""
        self.detection = detection
        self.form = SetupForm.prefilled(detection)
        if detection.custom_files:
            self.phase = "custom_choice"
        elif detection.found_in_registry:
            self.phase = "auto_detected"
        else:
            self.phase = "manual"


def handle_setup_key(model: SetupModel, key: str) -> SetupIntent:
    match model.phase:
        case "detecting" | "verifying":
            return "none"
        case "custom_choice":
            if key == "k":
                return "keep_custom"
            if key == "o":
                return "overwrite_custom"
            return "none"
        case "auto_detected":
            if key == "enter":
                model.error = ""
                model.phase = "verifying"
                return "verify"
            if key == "e":
                model.phase = "manual"
            return "none"
        case "confirming":
            if key == "enter":
                model.error = ""
                model.phase = "verifying"
                return "verify"
            if key == "esc":
                model.phase = "manual"
            return "none"
        case "manual":
            return _handle_manual_key(model, key)


def _handle_manual_key(model: SetupModel, key: str) -> SetupIntent:
    form = model.form
    match key:
        case "esc":
            return "skip"
        case "enter":
            if form.any_channel:
                model.phase = "confirming"
            return "none"
        case "tab" | "down":
            form.move(1)
        case "shift+tab" | "up":
            form.move(-1)
        case "space":
            form.toggle()
        case "backspace":
            form.backspace()
        case _ if len(key) == 1:
            form.type_char(key)
    return "none"
