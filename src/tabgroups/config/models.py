"""Configuration models describing tabgroups settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tabgroups.colors import DEFAULT_MAX_LUMINANCE
from tabgroups.patching import DEFAULT_BACKUP_NAME, DEFAULT_RESOURCE_CANDIDATES


class TabGroupsBaseModel(BaseModel):
    """Shared configuration for tabgroups Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class HostSettings(TabGroupsBaseModel):
    """Location of the host application and how to reach it.

    Attributes:
        install_dir: Host installation directory holding the UI document candidates.
        resource_candidates: Ordered relative locations of the UI document.
        backup_name: File name of the pristine backup kept beside the document.
        reload_command: Optional argv executed as the host reload signal.
    """

    install_dir: Optional[str] = None
    resource_candidates: List[str] = Field(
        default_factory=lambda: list(DEFAULT_RESOURCE_CANDIDATES), min_length=1
    )
    backup_name: str = DEFAULT_BACKUP_NAME
    reload_command: Optional[List[str]] = None


class StateSettings(TabGroupsBaseModel):
    """Snapshot persistence options.

    Attributes:
        path: Location of the persisted group snapshot.
    """

    path: str = "~/.tabgroups/groups.json"


class ColorSettings(TabGroupsBaseModel):
    """Group color allocation.

    Attributes:
        max_luminance: Upper bound on the perceived luminance of new colors.
    """

    max_luminance: float = Field(default=DEFAULT_MAX_LUMINANCE, ge=0, le=255)


class PatchSettings(TabGroupsBaseModel):
    """Behavior of mutation-driven repaints.

    Attributes:
        reload_on_change: Whether repaints after a mutation request a host reload.
        home_alias: Replacement for the home directory in tab path labels.
    """

    reload_on_change: bool = False
    home_alias: str = "~"


class WatchSettings(TabGroupsBaseModel):
    """Host document watcher options.

    Attributes:
        debounce_seconds: Quiet period before checking the document after events.
    """

    debounce_seconds: float = Field(default=1.0, gt=0)


class LoggingSettings(TabGroupsBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; enables the rotating file handler.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(TabGroupsBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class TabGroupsConfig(TabGroupsBaseModel):
    """Top-level configuration struct for tabgroups.

    Attributes:
        host: Host application settings.
        state: Snapshot persistence settings.
        colors: Color allocation settings.
        patch: Repaint behavior settings.
        watch: Watcher settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    host: HostSettings = Field(default_factory=HostSettings)
    state: StateSettings = Field(default_factory=StateSettings)
    colors: ColorSettings = Field(default_factory=ColorSettings)
    patch: PatchSettings = Field(default_factory=PatchSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "TabGroupsBaseModel",
    "HostSettings",
    "StateSettings",
    "ColorSettings",
    "PatchSettings",
    "WatchSettings",
    "LoggingSettings",
    "CLIOptions",
    "TabGroupsConfig",
]
