"""Directory picker tests."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from whisk.config.models import PickerSettings
from whisk.picker import (
    CommandPicker,
    PickerError,
    PromptPicker,
    build_picker,
    project_name_for,
)


def _python_command(code: str) -> str:
    return shlex.join([sys.executable, "-c", code])


def test_command_picker_returns_last_printed_path(tmp_path: Path) -> None:
    target = tmp_path / "chosen"
    picker = CommandPicker(_python_command(f"print('ignored'); print({str(target)!r})"))

    assert picker.pick() == str(target)


def test_command_picker_without_output_is_cancel() -> None:
    picker = CommandPicker(_python_command("pass"))

    assert picker.pick() is None


def test_command_picker_non_zero_exit_is_error() -> None:
    picker = CommandPicker(_python_command("import sys; sys.exit(3)"))

    with pytest.raises(PickerError, match="status 3"):
        picker.pick()


def test_command_picker_missing_program_is_error() -> None:
    picker = CommandPicker("whisk-test-no-such-picker --select")

    with pytest.raises(PickerError, match="not found"):
        picker.pick()


def test_empty_command_is_rejected() -> None:
    with pytest.raises(PickerError):
        CommandPicker("   ")


def test_prompt_picker_empty_answer_cancels(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("whisk.picker.click.prompt", lambda *args, **kwargs: "")

    assert PromptPicker().pick() is None


def test_prompt_picker_reprompts_until_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    answers = iter([str(tmp_path / "missing"), str(tmp_path)])
    monkeypatch.setattr("whisk.picker.click.prompt", lambda *args, **kwargs: next(answers))

    assert PromptPicker().pick() == str(tmp_path.resolve())


def test_build_picker_follows_mode() -> None:
    assert isinstance(build_picker(PickerSettings(mode="prompt")), PromptPicker)
    picker = build_picker(PickerSettings(command="xplr --print-pwd-as-result"))
    assert isinstance(picker, CommandPicker)
    assert picker.argv == ["xplr", "--print-pwd-as-result"]


@pytest.mark.parametrize(
    ("path", "name"),
    [
        ("/home/me/code/rocket", "rocket"),
        ("/home/me/code/rocket/", "rocket"),
        ("relative/dir", "dir"),
        ("/", "/"),
    ],
)
def test_project_name_for(path: str, name: str) -> None:
    assert project_name_for(path) == name
