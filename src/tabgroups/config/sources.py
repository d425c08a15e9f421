"""Configuration layers: defaults, the YAML file, and environment variables."""

from __future__ import annotations

from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TabGroupsConfig

ENV_PREFIX = "TABGROUPS__"


def environment_layer(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``TABGROUPS__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars or flow collections, so ``true``, ``150``
    and ``[code, --reload-window]`` arrive typed.

    Args:
        env: Environment to scan.

    Returns:
        dict[str, Any]: Overrides keyed by section then field.
    """
    layer: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        set_dotted(layer, ".".join(segments), value)
    return layer


def set_dotted(target: dict[str, Any], key: str, value: Any) -> None:
    """Assign ``value`` at a dotted ``key``, creating sections on the way.

    Raises:
        ConfigError: If the key is empty or crosses a non-mapping value.
    """
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise ConfigError("Configuration keys look like 'section.field', e.g. 'host.install_dir'.")
    node = target
    for segment in segments[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"'{segment}' in {key!r} is a value, not a section.")
        node = child
    node[segments[-1]] = value


def build_config(*layers: Mapping[str, Any]) -> TabGroupsConfig:
    """Overlay ``layers`` onto the defaults, later layers winning, and validate.

    Raises:
        ConfigError: If the merged data fails validation.
    """
    data = TabGroupsConfig().model_dump(mode="python")
    for layer in layers:
        for section, fields in layer.items():
            if isinstance(fields, Mapping) and isinstance(data.get(section), dict):
                data[section] = {**data[section], **fields}
            else:
                data[section] = fields
    try:
        return TabGroupsConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


__all__ = ["ENV_PREFIX", "environment_layer", "set_dotted", "build_config"]
