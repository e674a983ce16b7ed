"""Configuration management for whisk.

Settings live in ``~/.config/whisk/config.yaml`` next to the project document.
Effective values are layered as defaults, then the file, then ``WHISK__``
environment variables, then command line overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import WhiskConfig
from .resolver import ENV_PREFIX, flatten_for_env, parse_literal, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.config/whisk/config.yaml")
_HEADER_LINES = (
    "# whisk configuration file",
    "# Generated automatically; manage via `whisk config edit` or `whisk config set`.",
)


@dataclass(frozen=True)
class ConfigSources:
    """Raw override layers feeding the effective configuration.

    Attributes:
        file: Mapping read from the configuration file.
        env: Dotted overrides taken from ``WHISK__`` variables.
        cli: Dotted overrides supplied on the command line.
    """

    file: dict[str, Any]
    env: dict[str, Any]
    cli: dict[str, Any]

    def resolve(self) -> WhiskConfig:
        """Return the validated configuration for these layers."""
        return resolve_with_precedence(
            defaults=WhiskConfig(),
            file_overrides=self.file,
            env_overrides=self.env or None,
            cli_overrides=self.cli or None,
        )


class ConfigManager:
    """Read, validate and rewrite the whisk configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            config_path: Configuration file location; defaults to
                ``DEFAULT_CONFIG_PATH``.
            env: Environment mapping consulted for ``WHISK__`` overrides.
        """
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def sources(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> ConfigSources:
        """Collect every override layer without validating the result.

        Raises:
            ConfigError: If the configuration file cannot be read or parsed.
        """
        env: dict[str, Any] = {}
        if include_env:
            env = env_overrides_from(self._env if env_overrides is None else env_overrides)
        return ConfigSources(file=self._read_file(), env=env, cli=dict(cli_overrides or {}))

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> WhiskConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted keys supplied on the command line.
            include_env: Whether ``WHISK__`` variables are applied.
            ensure_file: Create the default file first when it is missing.
            env_overrides: Environment mapping to use instead of the process one.

        Returns:
            WhiskConfig: Validated configuration.

        Raises:
            ConfigError: If any layer is malformed or the result is invalid.
        """
        if ensure_file:
            self.ensure_exists()
        layers = self.sources(
            cli_overrides=cli_overrides,
            include_env=include_env,
            env_overrides=env_overrides,
        )
        return layers.resolve()

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file."""
        return self._read_file()

    def set_value(self, key: str, raw_value: str) -> Any:
        """Assign a YAML literal to a dotted key in the configuration file.

        The file is only rewritten when the updated mapping still validates.

        Args:
            key: Dotted path such as ``ui.tick_ms``.
            raw_value: YAML literal to assign.

        Returns:
            Any: The parsed value that was stored.

        Raises:
            ConfigError: If the key is not dotted, a parent is not a mapping,
                the value cannot be parsed, or the result is invalid.
        """
        segments = [segment.strip() for segment in key.split(".") if segment.strip()]
        if len(segments) < 2:
            raise ConfigError("KEY must specify a dotted path such as 'ui.tick_ms'.")
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value: {exc}") from exc

        data = self._read_file()
        node = data
        for segment in segments[:-1]:
            node = node.setdefault(segment, {})
            if not isinstance(node, dict):
                raise ConfigError(f"Cannot assign into '{segment}' because it is not a mapping.")
        node[segments[-1]] = value

        ConfigSources(file=data, env={}, cli={}).resolve()
        self.save(data)
        return value

    def replace_text(self, text: str) -> None:
        """Replace the configuration file with edited YAML after validating it.

        Raises:
            ConfigError: If ``text`` is not a valid configuration mapping.
        """
        try:
            parsed = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ConfigError("Configuration file must contain a top-level mapping.")
        ConfigSources(file=parsed, env={}, cli={}).resolve()
        self.save(parsed)

    def save(self, config: WhiskConfig | Mapping[str, Any]) -> None:
        """Write configuration data to disk with a fresh header."""
        data = config.model_dump(mode="python") if isinstance(config, WhiskConfig) else config
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        header = "\n".join((*_HEADER_LINES, f"# Last updated: {stamp}"))
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)
            self._config_path.write_text(f"{header}\n{body}", encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Unable to write {self._config_path}: {exc}") from exc

    def ensure_exists(self) -> Path:
        """Write the default configuration when no file exists yet."""
        if not self._config_path.exists():
            self.save(WhiskConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the configuration file contents, or an empty string.

        Raises:
            ConfigError: If the file exists but cannot be read.
        """
        try:
            return self._config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except OSError as exc:
            raise ConfigError(f"Unable to read {self._config_path}: {exc}") from exc

    def _read_file(self) -> dict[str, Any]:
        text = self.read_text()
        if not text:
            return {}
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._config_path}: {exc}") from exc
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw


def env_overrides_from(env: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``WHISK__SECTION__KEY`` variables into dotted overrides."""
    overrides: dict[str, Any] = {}
    for name, raw_value in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if segments:
            overrides[".".join(segments)] = parse_literal(raw_value)
    return overrides


__all__ = [
    "ConfigManager",
    "ConfigSources",
    "DEFAULT_CONFIG_PATH",
    "WhiskConfig",
    "resolve_with_precedence",
    "flatten_for_env",
    "env_overrides_from",
    "ConfigError",
]
