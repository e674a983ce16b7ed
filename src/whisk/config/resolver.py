"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import WhiskConfig

ENV_PREFIX = "WHISK__"


def resolve_with_precedence(
    *,
    defaults: WhiskConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> WhiskConfig:
    """Layer override sources on top of defaults and validate the result.

    Later sources win: file values replace defaults, environment values replace
    file values, and CLI values replace everything else. Keys may be nested
    mappings or dotted paths such as ``ui.tick_ms``.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the configuration file.
        env_overrides: Values derived from ``WHISK__`` environment variables.
        cli_overrides: Values supplied on the command line.

    Returns:
        WhiskConfig: Validated configuration.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    sources = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for name, source in sources:
        if source is None:
            continue
        merged = _deep_merge(merged, _expand(source, source_name=name))

    try:
        return WhiskConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: WhiskConfig) -> Dict[str, str]:
    """Return the ``WHISK__SECTION__KEY`` variables equivalent to ``config``."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for key, value in values.items():
            env_key = f"{ENV_PREFIX}{section.upper()}__{key.upper()}"
            flat[env_key] = "null" if value is None else str(value)
    return flat


def _expand(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = _expand(value, source_name=source_name)
        node = result
        *parents, leaf = key.split(".")
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value."
                )
            node = child
        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            node[leaf] = _deep_merge(node[leaf], value)
        else:
            node[leaf] = value
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def parse_literal(raw: str) -> Any:
    """Interpret a string as a YAML scalar, falling back to the raw text."""
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


__all__ = ["resolve_with_precedence", "flatten_for_env", "parse_literal", "ENV_PREFIX"]
