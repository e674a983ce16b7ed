"""Directory pickers used when adding a project."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Optional, Protocol

import click

from whisk.config.models import PickerSettings

LOGGER = logging.getLogger(__name__)


class PickerError(Exception):
    """Raised when a directory picker fails (as opposed to being cancelled)."""


class DirectoryPicker(Protocol):
    """Interactive directory chooser."""

    def pick(self) -> Optional[str]:
        """Return the chosen directory, or ``None`` if the user cancelled."""
        ...


class CommandPicker:
    """Run an external file manager and read the chosen path from its output.

    The command inherits the terminal. The last non-empty line it writes to
    stdout is the selection; no output means the user cancelled.
    """

    def __init__(self, command: str) -> None:
        self._argv = shlex.split(command)
        if not self._argv:
            raise PickerError("No directory picker command configured")

    @property
    def argv(self) -> list[str]:
        """Return the command line that will be executed."""
        return list(self._argv)

    def pick(self) -> Optional[str]:
        LOGGER.debug("Running directory picker %s", self._argv)
        try:
            completed = subprocess.run(
                self._argv,
                stdout=subprocess.PIPE,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise PickerError(f"Directory picker '{self._argv[0]}' was not found") from exc
        except OSError as exc:
            raise PickerError(f"Unable to run directory picker: {exc}") from exc

        if completed.returncode != 0:
            raise PickerError(
                f"Directory picker '{self._argv[0]}' exited with status {completed.returncode}"
            )

        lines = [line.strip() for line in (completed.stdout or "").splitlines() if line.strip()]
        if not lines:
            LOGGER.debug("Directory picker returned no selection")
            return None
        return os.path.abspath(os.path.expanduser(lines[-1]))


class PromptPicker:
    """Ask for a directory path on the terminal; an empty answer cancels."""

    def pick(self) -> Optional[str]:
        while True:
            try:
                answer = click.prompt(
                    "Project directory (empty to cancel)", default="", show_default=False
                )
            except click.Abort:
                return None
            answer = answer.strip()
            if not answer:
                return None
            path = Path(answer).expanduser()
            if path.is_dir():
                return str(path.resolve())
            click.echo(f"{path} is not a directory.", err=True)


def build_picker(settings: PickerSettings) -> DirectoryPicker:
    """Return the picker described by ``settings``."""
    if settings.mode == "prompt":
        return PromptPicker()
    return CommandPicker(settings.command)


def project_name_for(path: str) -> str:
    """Return the display name for a picked directory: its final path segment."""
    trimmed = path.rstrip("/")
    if not trimmed:
        return path
    return trimmed.rsplit("/", 1)[-1]


__all__ = [
    "PickerError",
    "DirectoryPicker",
    "CommandPicker",
    "PromptPicker",
    "build_picker",
    "project_name_for",
]
