"""Configuration management for tabgroups."""

from __future__ import annotations

import os
from copy import deepcopy
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import TabGroupsConfig
from .sources import ENV_PREFIX, build_config, environment_layer, set_dotted

DEFAULT_CONFIG_PATH = Path("~/.tabgroups/config.yaml")
_HEADER = (
    "# tabgroups configuration\n"
    "# Change values with `tabgroups config set` or `tabgroups config edit`.\n"
    "# Environment variables named TABGROUPS__SECTION__FIELD take precedence.\n"
)


class ConfigManager:
    """Own the YAML configuration file and resolve the effective settings."""

    def __init__(self, path: Path | None = None, *, env: Mapping[str, str] | None = None) -> None:
        self._path = (path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, include_env: bool = True) -> TabGroupsConfig:
        """Resolve defaults, then the file, then the environment.

        Args:
            include_env: Whether ``TABGROUPS__`` variables apply.

        Returns:
            TabGroupsConfig: Validated settings.

        Raises:
            ConfigError: If the file is unreadable or a value is invalid.
        """
        layers = [self.stored()]
        if include_env:
            layers.append(environment_layer(self._env))
        return build_config(*layers)

    def stored(self) -> dict[str, Any]:
        """Return the file's mapping, writing the defaults first if it is missing."""
        if not self._path.exists():
            self._write(TabGroupsConfig().model_dump(mode="python"))
        return self._parse(self._path.read_text(encoding="utf-8"))

    def read_text(self) -> str:
        self.stored()
        return self._path.read_text(encoding="utf-8")

    def set_value(self, key: str, raw_value: str) -> bool:
        """Store one dotted ``key`` in the file.

        Args:
            key: Dotted path such as ``colors.max_luminance``.
            raw_value: YAML text for the new value.

        Returns:
            bool: ``False`` when the file already held that value.

        Raises:
            ConfigError: If the value does not parse or fails validation.
        """
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value {raw_value!r}: {exc}") from exc

        data = self.stored()
        updated = deepcopy(data)
        set_dotted(updated, key, value)
        build_config(updated)
        if updated == data:
            return False
        self._write(updated)
        return True

    def replace(self, text: str) -> bool:
        """Validate edited file contents and store them.

        Returns:
            bool: ``False`` when the edit left the settings unchanged.

        Raises:
            ConfigError: If the text is not a valid configuration mapping.
        """
        data = self._parse(text)
        build_config(data)
        if data == self.stored():
            return False
        self._write(data)
        return True

    def _parse(self, text: str) -> dict[str, Any]:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{self._path} must hold a mapping of sections.")
        return data

    def _write(self, data: Mapping[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        saved = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._path.write_text(f"{_HEADER}# Saved: {saved}\n{body}", encoding="utf-8")


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "TabGroupsConfig",
]
