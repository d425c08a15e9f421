"""Backup, patch and restore lifecycle for the host's static UI document."""

from __future__ import annotations

import logging
import re
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup

from .errors import NoBackupError, PatchWriteError, ResourceNotFoundError

LOGGER = logging.getLogger(__name__)

DEFAULT_RESOURCE_CANDIDATES: tuple[str, ...] = (
    "out/vs/code/electron-sandbox/workbench/workbench.html",
    "out/vs/code/electron-browser/workbench/workbench.html",
)
DEFAULT_BACKUP_NAME = "workbench.tabgroups.bak.html"
STYLE_ELEMENT_ID = "tabgroups-style"
SCRIPT_ELEMENT_ID = "tabgroups-script"

_CSP_PATTERN = re.compile(r"^\s*content-security-policy\s*$", re.IGNORECASE)


@dataclass(slots=True)
class PatchResult:
    """Outcome of a patch or restore.

    Attributes:
        resource: Live resource that was written.
        backup: Sibling backup path.
        backup_created: Whether this call created the backup.
        reload_requested: Whether the host reload signal was emitted.
    """

    resource: Path
    backup: Path
    backup_created: bool
    reload_requested: bool


@dataclass(slots=True)
class PatchStatus:
    """Snapshot of the resource's patch state."""

    resource: Optional[Path]
    backup_exists: bool
    patched: bool


class ResourcePatcher:
    """Inject and remove the tabgroups style/script pair in the host document.

    The first patch copies the untouched document to a sibling backup that is
    never overwritten afterwards. Every patch replaces previously injected
    nodes, so repeated calls leave exactly one style node and one script node.
    """

    def __init__(
        self,
        install_dir: Path,
        *,
        candidates: Sequence[str] = DEFAULT_RESOURCE_CANDIDATES,
        backup_name: str = DEFAULT_BACKUP_NAME,
        reload: Optional[Callable[[], None]] = None,
    ) -> None:
        """Initialize the patcher.

        Args:
            install_dir: Host installation directory the candidates are relative to.
            candidates: Ordered relative locations of the UI document.
            backup_name: File name of the pristine backup next to the document.
            reload: Host reload signal; called after successful writes when requested.
        """
        self._install_dir = install_dir.expanduser()
        self._candidates = tuple(candidates)
        self._backup_name = backup_name
        self._reload = reload
        self._lock = threading.Lock()

    @property
    def install_dir(self) -> Path:
        return self._install_dir

    def resolve_resource(self) -> Path:
        """Return the first existing candidate location.

        Returns:
            Path: Live UI document.

        Raises:
            ResourceNotFoundError: If no candidate exists.
        """
        for relative in self._candidates:
            candidate = self._install_dir / relative
            if candidate.is_file():
                return candidate
        raise ResourceNotFoundError(
            f"No host UI resource found under {self._install_dir} "
            f"(tried {', '.join(self._candidates)})."
        )

    def backup_path(self, resource: Path) -> Path:
        return resource.with_name(self._backup_name)

    def write_patch(self, script_text: str, style_text: str, reload: bool = False) -> PatchResult:
        """Write the style and script nodes into the host document.

        Args:
            script_text: Runtime program to inject.
            style_text: Stylesheet to inject.
            reload: Emit the host reload signal after a successful write.

        Returns:
            PatchResult: Paths touched and side effects performed.

        Raises:
            ResourceNotFoundError: If the document cannot be located.
            PatchWriteError: If reading, backing up, or writing the document fails.
        """
        with self._lock:
            resource = self.resolve_resource()
            try:
                markup = resource.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise PatchWriteError(f"Unable to read {resource}: {exc}") from exc

            backup = self.backup_path(resource)
            backup_created = self._ensure_backup(resource, backup)

            soup = BeautifulSoup(markup, "html.parser")
            removed = self._strip_content_policy(soup)
            if removed:
                LOGGER.debug("Removed %d content security policy node(s).", removed)
            self._strip_injected(soup)
            self._inject(soup, script_text, style_text)

            try:
                resource.write_text(str(soup), encoding="utf-8")
            except OSError as exc:
                raise PatchWriteError(f"Unable to write {resource}: {exc}") from exc
            LOGGER.info("Patched %s.", resource)

            reload_requested = self._emit_reload() if reload else False
            return PatchResult(
                resource=resource,
                backup=backup,
                backup_created=backup_created,
                reload_requested=reload_requested,
            )

    def restore_patch(self) -> PatchResult:
        """Copy the pristine backup over the live document and request a reload.

        Returns:
            PatchResult: Paths touched and side effects performed.

        Raises:
            ResourceNotFoundError: If the document cannot be located.
            NoBackupError: If no backup has been taken yet.
            PatchWriteError: If the copy fails.
        """
        with self._lock:
            resource = self.resolve_resource()
            backup = self.backup_path(resource)
            if not backup.is_file():
                raise NoBackupError(f"No backup found at {backup}.")
            try:
                shutil.copyfile(backup, resource)
            except OSError as exc:
                raise PatchWriteError(f"Unable to restore {resource}: {exc}") from exc
            LOGGER.info("Restored %s from %s.", resource, backup)
            return PatchResult(
                resource=resource,
                backup=backup,
                backup_created=False,
                reload_requested=self._emit_reload(),
            )

    def is_patched(self) -> bool:
        """Return whether the live document carries both injected nodes."""
        try:
            markup = self.resolve_resource().read_text(encoding="utf-8")
        except (ResourceNotFoundError, OSError, UnicodeDecodeError):
            return False
        soup = BeautifulSoup(markup, "html.parser")
        return (
            soup.find(id=STYLE_ELEMENT_ID) is not None
            and soup.find(id=SCRIPT_ELEMENT_ID) is not None
        )

    def status(self) -> PatchStatus:
        try:
            resource = self.resolve_resource()
        except ResourceNotFoundError:
            return PatchStatus(resource=None, backup_exists=False, patched=False)
        return PatchStatus(
            resource=resource,
            backup_exists=self.backup_path(resource).is_file(),
            patched=self.is_patched(),
        )

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _ensure_backup(self, resource: Path, backup: Path) -> bool:
        if backup.exists():
            return False
        try:
            shutil.copyfile(resource, backup)
        except OSError as exc:
            raise PatchWriteError(f"Unable to back up {resource}: {exc}") from exc
        LOGGER.info("Backed up %s to %s.", resource, backup)
        return True

    def _strip_content_policy(self, soup: BeautifulSoup) -> int:
        nodes = soup.find_all("meta", attrs={"http-equiv": _CSP_PATTERN})
        for node in nodes:
            node.decompose()
        return len(nodes)

    def _strip_injected(self, soup: BeautifulSoup) -> None:
        for element_id in (STYLE_ELEMENT_ID, SCRIPT_ELEMENT_ID):
            for node in soup.find_all(id=element_id):
                node.decompose()

    def _inject(self, soup: BeautifulSoup, script_text: str, style_text: str) -> None:
        style = soup.new_tag("style", id=STYLE_ELEMENT_ID)
        style.string = style_text
        (soup.head or soup.html or soup).append(style)

        script = soup.new_tag("script", id=SCRIPT_ELEMENT_ID)
        script.string = script_text
        (soup.body or soup.html or soup).append(script)

    def _emit_reload(self) -> bool:
        if self._reload is None:
            LOGGER.info("Host reload requested but no reload signal is configured.")
            return False
        self._reload()
        return True


__all__ = [
    "ResourcePatcher",
    "PatchResult",
    "PatchStatus",
    "DEFAULT_RESOURCE_CANDIDATES",
    "DEFAULT_BACKUP_NAME",
    "STYLE_ELEMENT_ID",
    "SCRIPT_ELEMENT_ID",
]
