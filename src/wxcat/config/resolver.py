"""Merging of configuration layers into a validated :class:`WxcatConfig`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Sequence

import yaml
from pydantic import ValidationError

from .models import WxcatConfig

ENV_PREFIX = "WXCAT__"


class ConfigError(Exception):
    """Raised when configuration data cannot be parsed or validated."""


def resolve_with_precedence(
    *,
    defaults: WxcatConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> WxcatConfig:
    """Layer overrides on top of ``defaults`` and validate the result.

    Later layers win: file, then environment, then CLI. Keys may be nested
    mappings or dotted paths such as ``scan.workers``.

    Raises:
        ConfigError: If a layer is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for label, layer in layers:
        if layer is not None:
            merged = _merge(merged, _expand(layer, label))

    try:
        return WxcatConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: WxcatConfig) -> Dict[str, str]:
    """Return the ``WXCAT__SECTION__KEY`` variables that reproduce ``config``."""
    flat: Dict[str, str] = {}
    stack: list[tuple[list[str], Any]] = [([], config.model_dump(mode="python"))]
    while stack:
        prefix, value = stack.pop()
        if isinstance(value, dict):
            stack.extend((prefix + [str(key)], child) for key, child in value.items())
            continue
        flat[ENV_PREFIX + "__".join(part.upper() for part in prefix)] = _render(value)
    return dict(sorted(flat.items()))


def nest_value(target: dict[str, Any], path: Sequence[str], value: Any) -> None:
    """Store ``value`` at ``path`` inside ``target``, creating mappings on the way.

    Raises:
        ConfigError: If a segment along ``path`` already holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot nest {'.'.join(path)} under non-mapping '{segment}'.")
        node = child
    node[path[-1]] = value


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, list):
        return yaml.safe_dump(value, default_flow_style=True).strip()
    return str(value)


def _expand(layer: Mapping[str, Any], label: str) -> dict[str, Any]:
    if not isinstance(layer, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in layer.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = _expand(value, label)
        path = key.split(".")
        try:
            existing = _lookup(expanded, path)
        except KeyError:
            nest_value(expanded, path, value)
        else:
            if isinstance(existing, dict) and isinstance(value, dict):
                nest_value(expanded, path, _merge(existing, value))
            else:
                nest_value(expanded, path, value)
    return expanded


def _lookup(tree: Mapping[str, Any], path: Sequence[str]) -> Any:
    node: Any = tree
    for segment in path:
        if not isinstance(node, MappingABC):
            raise KeyError(segment)
        node = node[segment]
    return node


def _merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ConfigError", "ENV_PREFIX", "flatten_for_env", "nest_value", "resolve_with_precedence"]
