"""Layered configuration resolution."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TypesortConfig

ENV_PREFIX = "TYPESORT__"


def resolve_with_precedence(
    *,
    defaults: TypesortConfig,
    file_overrides: Mapping[str, Any] | None = None,
    preset_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TypesortConfig:
    """Merge configuration layers and validate the result.

    Layers apply in order, later ones winning: defaults, the YAML file, a named
    preset, ``TYPESORT__`` environment variables, then command line flags. Keys in
    any layer may be nested mappings or dotted paths.

    Raises:
        ConfigError: If a layer is malformed or the merged values fail validation.
    """
    layers = (
        ("file", file_overrides),
        ("preset", preset_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    merged = defaults.model_dump(mode="python")
    for layer, overrides in layers:
        if overrides:
            merged = _deep_merge(merged, expand_dotted(overrides, layer=layer))

    try:
        return TypesortConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(overrides: Mapping[str, Any], *, layer: str = "config") -> dict[str, Any]:
    """Turn ``{"a.b": 1}`` style keys into nested dictionaries."""
    if not isinstance(overrides, MappingABC):
        raise ConfigError(f"{layer.capitalize()} overrides must be a mapping.")

    nested: dict[str, Any] = {}
    for key, value in overrides.items():
        if not isinstance(key, str):
            raise ConfigError(f"{layer.capitalize()} override keys must be strings.")
        assign_dotted(nested, key.split("."), value, layer=layer)
    return nested


def assign_dotted(
    target: dict[str, Any], path: list[str], value: Any, *, layer: str = "config"
) -> None:
    """Store ``value`` at ``path`` inside ``target``, creating sections as needed.

    Raises:
        ConfigError: If a scalar already occupies part of the path.
    """
    node = target
    for segment in path[:-1]:
        child = node.get(segment)
        if child is None:
            child = node[segment] = {}
        elif not isinstance(child, dict):
            raise ConfigError(
                f"{layer.capitalize()} override for {'.'.join(path)} conflicts with "
                f"the scalar value at {segment!r}."
            )
        node = child

    leaf = path[-1]
    if isinstance(value, MappingABC):
        current = node.get(leaf)
        node[leaf] = _deep_merge(
            current if isinstance(current, dict) else {}, expand_dotted(value, layer=layer)
        )
    else:
        node[leaf] = value


def collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``TYPESORT__SECTION__KEY`` variables as a nested override mapping.

    Values are parsed as YAML so lists and booleans survive; unparsable values are
    kept verbatim.
    """
    overrides: dict[str, Any] = {}
    for key, raw in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if not path:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        assign_dotted(overrides, path, value, layer="environment")
    return overrides


def flatten_for_env(config: TypesortConfig) -> Dict[str, str]:
    """Render ``config`` as the environment variables that would reproduce it."""
    flat: Dict[str, str] = {}

    def _walk(path: list[str], value: Any) -> None:
        if isinstance(value, dict) and value:
            for key, child in value.items():
                _walk([*path, str(key)], child)
            return
        name = ENV_PREFIX + "__".join(part.upper() for part in path)
        if isinstance(value, (dict, list)):
            flat[name] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[name] = "null"
        else:
            flat[name] = str(value)

    _walk([], config.model_dump(mode="python"))
    return flat


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    result = deepcopy(dict(base))
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = deepcopy(value)
    return result


__all__ = [
    "ENV_PREFIX",
    "assign_dotted",
    "collect_env_overrides",
    "expand_dotted",
    "flatten_for_env",
    "resolve_with_precedence",
]
