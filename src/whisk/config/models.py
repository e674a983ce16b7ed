"""Configuration models describing whisk settings."""

from __future__ import annotations

import shlex
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

INTERRUPT_KEY = "ctrl+c"


class WhiskBaseModel(BaseModel):
    """Shared configuration for whisk Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StoreSettings(WhiskBaseModel):
    """Location of the project document.

    Attributes:
        path: Path of the JSON document holding project records.
    """

    path: str = "~/.config/whisk/db.json"


class UISettings(WhiskBaseModel):
    """Presentation and scheduling options for the interactive screen.

    Attributes:
        tick_ms: Interval between redraw ticks when no key is pressed.
        timestamp_format: ``strftime`` pattern used for creation timestamps.
        list_ratio: Relative width of the project list column.
        detail_ratio: Relative width of the project detail column.
    """

    tick_ms: int = Field(default=200, gt=0)
    timestamp_format: str = "%Y-%m-%d %H:%M:%S UTC"
    list_ratio: int = Field(default=1, ge=1)
    detail_ratio: int = Field(default=4, ge=1)


class KeyBindings(WhiskBaseModel):
    """Keys bound to screen commands.

    Single characters match literally; ``up`` and ``down`` name the arrow keys.
    """

    quit: str = "q"
    home: str = "h"
    projects: str = "p"
    add: str = "a"
    delete: str = "d"
    up: str = "up"
    down: str = "down"

    @model_validator(mode="after")
    def _check_distinct(self) -> "KeyBindings":
        seen: dict[str, str] = {}
        for action, key in self.model_dump().items():
            if not key:
                raise ValueError(f"key for {action} must not be empty")
            if key == INTERRUPT_KEY:
                raise ValueError(f"{INTERRUPT_KEY} is reserved for quitting, not {action}")
            if key in seen:
                raise ValueError(f"key {key!r} is bound to both {seen[key]} and {action}")
            seen[key] = action
        return self


class PickerSettings(WhiskBaseModel):
    """Directory picker configuration.

    Attributes:
        mode: ``command`` runs an external chooser, ``prompt`` asks for a path.
        command: Shell-style command line of the external chooser. The last
            non-empty line it prints is taken as the chosen directory.
    """

    mode: Literal["command", "prompt"] = "command"
    command: str = "xplr"

    @field_validator("command")
    @classmethod
    def _check_command(cls, value: str) -> str:
        try:
            argv = shlex.split(value)
        except ValueError as exc:
            raise ValueError(f"cannot parse picker command: {exc}") from exc
        if not argv:
            raise ValueError("picker command must not be empty")
        return value


class LoggingSettings(WhiskBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Destination of the rotating log file.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: str = "~/.config/whisk/whisk.log"
    max_size_mb: int = 5
    backup_count: int = 3


class WhiskConfig(WhiskBaseModel):
    """Top-level configuration struct for whisk.

    Attributes:
        store: Project document settings.
        ui: Interactive screen settings.
        keys: Key bindings.
        picker: Directory picker settings.
        logging: Logging configuration.
    """

    store: StoreSettings = Field(default_factory=StoreSettings)
    ui: UISettings = Field(default_factory=UISettings)
    keys: KeyBindings = Field(default_factory=KeyBindings)
    picker: PickerSettings = Field(default_factory=PickerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


__all__ = [
    "INTERRUPT_KEY",
    "WhiskBaseModel",
    "StoreSettings",
    "UISettings",
    "KeyBindings",
    "PickerSettings",
    "LoggingSettings",
    "WhiskConfig",
]
