"""Compile group state into the runtime binding bundle."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from tabgroups.groups import GroupStore

from .runtime import BINDINGS_PLACEHOLDER, RUNTIME_SCRIPT, RUNTIME_STYLE

LOGGER = logging.getLogger(__name__)


class BindingDescriptor(BaseModel):
    """Lookup and decoration record for one grouped file.

    Attributes:
        path_label: Normalized absolute path with the home prefix collapsed.
        basename_fallback: File base name, used when the full label does not match.
        group_name: Group shown on the tab chip.
        color: Group color applied to the tab.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    path_label: str = Field(alias="pathLabel")
    basename_fallback: str = Field(alias="basename")
    group_name: str = Field(alias="groupName")
    color: str


@dataclass(slots=True)
class BindingBundle:
    """Rendered script and stylesheet ready for the resource patcher.

    Attributes:
        script: Runtime program with the descriptor list embedded as data.
        style: Stylesheet for decorated and grouped tabs.
        descriptors: Descriptors embedded in the script.
    """

    script: str
    style: str
    descriptors: list[BindingDescriptor]


def normalize_path_label(path: str, *, home: Optional[str] = None, alias: str = "~") -> str:
    """Return the label a host tab is expected to show for ``path``.

    Args:
        path: Absolute file path.
        home: Home directory to collapse; defaults to the current user's home.
        alias: Replacement for the home prefix.

    Returns:
        str: Forward-slash path with the home prefix replaced by ``alias``.
    """
    normalized = path.replace("\\", "/")
    home_dir = (home if home is not None else str(Path.home())).replace("\\", "/").rstrip("/")
    if home_dir and (normalized == home_dir or normalized.startswith(home_dir + "/")):
        return alias + normalized[len(home_dir) :]
    return normalized


def basename(path: str) -> str:
    return path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


def _script_literal(descriptors: list[BindingDescriptor]) -> str:
    payload = json.dumps(
        [descriptor.model_dump(by_alias=True) for descriptor in descriptors],
        ensure_ascii=False,
    )
    # Keep the literal from closing the enclosing <script> element.
    return (
        payload.replace("</", "<\\/")
        .replace("<!--", "<\\!--")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


class BindingScriptGenerator:
    """Translate a store snapshot into binding descriptors and a runtime bundle.

    The generator never sees the live UI tree. It emits, for every grouped file,
    a descriptor the runtime program resolves against the host's tab strip.
    """

    def __init__(self, *, home: Optional[str] = None, home_alias: str = "~") -> None:
        self._home = home
        self._home_alias = home_alias

    def build_descriptors(
        self,
        store: GroupStore,
        open_paths: Optional[Iterable[str]] = None,
    ) -> list[BindingDescriptor]:
        """Build descriptors for grouped files.

        Args:
            store: Group state to read.
            open_paths: When given, only files currently open in the host are bound.

        Returns:
            list[BindingDescriptor]: Descriptors in group then file order.
        """
        allowed = set(open_paths) if open_paths is not None else None
        descriptors: list[BindingDescriptor] = []
        for group in store.groups():
            for entry in group.files:
                if allowed is not None and entry.path not in allowed:
                    continue
                descriptors.append(
                    BindingDescriptor(
                        path_label=normalize_path_label(
                            entry.path, home=self._home, alias=self._home_alias
                        ),
                        basename_fallback=basename(entry.path),
                        group_name=group.name,
                        color=group.color,
                    )
                )
        return descriptors

    def render(
        self,
        store: GroupStore,
        open_paths: Optional[Iterable[str]] = None,
    ) -> BindingBundle:
        """Render the runtime bundle for the current store state.

        Args:
            store: Group state to read.
            open_paths: Optional filter restricting bindings to open files.

        Returns:
            BindingBundle: Script and style text plus the embedded descriptors.
        """
        descriptors = self.build_descriptors(store, open_paths)
        script = RUNTIME_SCRIPT.replace(BINDINGS_PLACEHOLDER, _script_literal(descriptors))
        LOGGER.debug("Rendered binding script with %d descriptor(s).", len(descriptors))
        return BindingBundle(script=script, style=RUNTIME_STYLE, descriptors=descriptors)


__all__ = [
    "BindingDescriptor",
    "BindingBundle",
    "BindingScriptGenerator",
    "normalize_path_label",
    "basename",
]
