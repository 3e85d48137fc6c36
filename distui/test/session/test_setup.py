"""Tests for distui.session.setup module."""

from __future__ import annotations

from distui.detection.distributions import DetectedDistributions
from distui.registry.client import PublishedVersion
from distui.session.setup import SetupDetection, SetupForm, SetupModel, handle_setup_key


def _detection(**kwargs: object) -> SetupDetection:
    return SetupDetection(
        distributions=DetectedDistributions(
            homebrew_tap="acme/homebrew-tap", formula_name="tool", npm_package="@acme/tool"
        ),
        **kwargs,  # type: ignore[arg-type]
    )


class TestSetupModel:
    def test_custom_files_first(self) -> None:
        model = SetupModel()
        model.apply_detection(_detection(custom_files=("package.json",)))
        assert model.phase == "custom_choice"

    def test_registry_hit(self) -> None:
        model = SetupModel()
        model.apply_detection(_detection(homebrew=PublishedVersion(True, "v1.0.0")))
        assert model.phase == "auto_detected"
        assert model.form.homebrew
        assert not model.form.npm
        assert model.form.tap == "acme/homebrew-tap"

    def test_nothing_found(self) -> None:
        model = SetupModel()
        model.apply_detection(_detection())
        assert model.phase == "manual"
        assert model.form.package == "@acme/tool"


class TestHandleSetupKey:
    def test_waiting_phases_ignore_keys(self) -> None:
        for phase in ("detecting", "verifying"):
            model = SetupModel(phase=phase)  # type: ignore[arg-type]
            assert handle_setup_key(model, "enter") == "none"

    def test_custom_choice(self) -> None:
        model = SetupModel(phase="custom_choice")
        assert handle_setup_key(model, "x") == "none"
        assert handle_setup_key(model, "k") == "keep_custom"
        assert handle_setup_key(model, "o") == "overwrite_custom"

    def test_auto_detected_edit(self) -> None:
        model = SetupModel(phase="auto_detected")
        handle_setup_key(model, "e")
        assert model.phase == "manual"

    def test_manual_needs_a_channel(self) -> None:
        """Enter does nothing until at least one channel is ticked."""
        model = SetupModel(phase="manual")
        assert handle_setup_key(model, "enter") == "none"
        assert model.phase == "manual"

        handle_setup_key(model, "space")
        handle_setup_key(model, "enter")
        assert model.phase == "confirming"

    def test_confirming(self) -> None:
        model = SetupModel(phase="confirming", error="old")
        handle_setup_key(model, "esc")
        assert model.phase == "manual"

        model.phase = "confirming"
        assert handle_setup_key(model, "enter") == "verify"
        assert model.phase == "verifying"
        assert model.error == ""

    def test_manual_escape_skips(self) -> None:
        assert handle_setup_key(SetupModel(phase="manual"), "esc") == "skip"


class TestSetupForm:
    def test_focus_wraps(self) -> None:
        form = SetupForm()
        form.move(-1)
        assert form.focused == "package"
        form.move(1)
        assert form.focused == "homebrew"

    def test_typing_only_into_text_fields(self) -> None:
        form = SetupForm()
        form.type_char("x")
        assert (form.tap, form.formula, form.package) == ("", "", "")

        form.move(1)
        for ch in "me/ tap":
            form.type_char(ch)
        assert form.tap == "me/tap"
        form.backspace()
        assert form.tap == "me/ta"

    def test_toggle(self) -> None:
        form = SetupForm()
        form.toggle()
        assert form.homebrew and form.any_channel
        form.move(3)
        form.toggle()
        assert form.npm
