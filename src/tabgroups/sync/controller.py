"""Translate store mutations and host lifecycle events into repaints."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal, Optional, Protocol

from tabgroups.binding import BindingScriptGenerator
from tabgroups.groups import FileReference, Group, GroupStore
from tabgroups.patching import PatchError, PatchResult, ResourcePatcher

LOGGER = logging.getLogger(__name__)

NoticeLevel = Literal["info", "warning", "error"]


@dataclass(frozen=True)
class AffordanceState:
    """Enablement signals published after every refresh.

    Attributes:
        has_groups: Whether any group exists.
        grouped_paths: Paths currently held by a group.
    """

    has_groups: bool
    grouped_paths: frozenset[str] = field(default_factory=frozenset)


class Notifier(Protocol):
    """Message sink; resolves ``key`` against a catalog outside the core."""

    def __call__(self, level: NoticeLevel, key: str, *params: object) -> None: ...


def _silent(level: NoticeLevel, key: str, *params: object) -> None:
    LOGGER.debug("Notice %s %s %s", level, key, params)


class SyncController:
    """Decide between full repaints and cheap affordance refreshes.

    File-list mutations regenerate the binding script and rewrite the host
    document. Editor visibility and focus events only republish the affordance
    state. Repaints and restores run one at a time.
    """

    def __init__(
        self,
        store: GroupStore,
        generator: BindingScriptGenerator,
        patcher: Optional[ResourcePatcher],
        *,
        affordances: Optional[Callable[[AffordanceState], None]] = None,
        notifier: Optional[Notifier] = None,
        open_paths: Optional[Callable[[], Optional[Iterable[str]]]] = None,
        reload_on_change: bool = False,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Authoritative group state.
            generator: Binding script generator.
            patcher: Patcher for the host document; ``None`` when no host is configured.
            affordances: Sink receiving the affordance state after refreshes.
            notifier: Message sink for user-visible reports.
            open_paths: Provider for paths currently open in the host; ``None`` binds all files.
            reload_on_change: Whether mutation-driven repaints request a host reload.
        """
        self._store = store
        self._generator = generator
        self._patcher = patcher
        self._affordances = affordances
        self._notify: Notifier = notifier or _silent
        self._open_paths = open_paths
        self._reload_on_change = reload_on_change
        self._patch_lock = threading.Lock()
        self._activated = False
        self.last_affordances: Optional[AffordanceState] = None

    @property
    def store(self) -> GroupStore:
        return self._store

    # ------------------------------------------------------------------ #
    # Lifecycle                                                          #
    # ------------------------------------------------------------------ #

    def activate(self) -> Optional[PatchResult]:
        """Reflect the persisted snapshot once, without reloading the host."""
        if self._activated:
            LOGGER.debug("Controller already active; skipping startup repaint.")
            return None
        self._activated = True
        result = self.repaint(reload=False)
        self.refresh_affordances()
        return result

    # ------------------------------------------------------------------ #
    # Mutations                                                          #
    # ------------------------------------------------------------------ #

    def create_group(self, name: str) -> Group:
        group = self._store.create_group(name)
        self.refresh_affordances()
        return group

    def add_file(self, group_name: str, display_name: str, path: str) -> Optional[str]:
        """Add a file to a group and repaint.

        Returns:
            Optional[str]: Group the file was moved out of, if any.
        """
        previous = self._store.add_file(group_name, display_name, path)
        self._after_mutation()
        return previous

    def remove_file(self, group_name: str, display_name: str) -> FileReference:
        removed = self._store.remove_file(group_name, display_name)
        self._after_mutation()
        return removed

    def remove_group(self, name: str) -> Group:
        removed = self._store.remove_group(name)
        self._after_mutation()
        return removed

    # ------------------------------------------------------------------ #
    # Host events                                                        #
    # ------------------------------------------------------------------ #

    def handle_document_closed(self, path: str) -> Optional[str]:
        """Drop a closed resource from its group, matching by path.

        Args:
            path: Path of the closed resource.

        Returns:
            Optional[str]: Group the path was removed from, if any.
        """
        group_name = self._store.remove_path(path)
        if group_name is not None:
            self.repaint(reload=self._reload_on_change)
        self.refresh_affordances()
        return group_name

    def handle_visible_editors_changed(self) -> AffordanceState:
        return self.refresh_affordances()

    def handle_active_editor_changed(self) -> AffordanceState:
        return self.refresh_affordances()

    def handle_window_state_changed(self) -> AffordanceState:
        return self.refresh_affordances()

    # ------------------------------------------------------------------ #
    # Repaint / refresh                                                  #
    # ------------------------------------------------------------------ #

    def refresh_affordances(self) -> AffordanceState:
        """Publish enablement signals without touching the host document."""
        state = AffordanceState(
            has_groups=len(self._store) > 0,
            grouped_paths=frozenset(self._store.grouped_paths()),
        )
        self.last_affordances = state
        if self._affordances is not None:
            self._affordances(state)
        return state

    def repaint(self, reload: bool = False) -> Optional[PatchResult]:
        """Regenerate the binding bundle and patch the host document.

        Patch failures are reported once and leave the store untouched.

        Args:
            reload: Request a host reload after a successful write.

        Returns:
            Optional[PatchResult]: Patch outcome, or ``None`` when patching failed.
        """
        if self._patcher is None:
            LOGGER.info("No host configured; skipping repaint.")
            return None
        with self._patch_lock:
            open_paths = self._open_paths() if self._open_paths is not None else None
            bundle = self._generator.render(self._store, open_paths)
            try:
                result = self._patcher.write_patch(bundle.script, bundle.style, reload=reload)
            except PatchError as exc:
                LOGGER.error("Repaint failed: %s", exc)
                self._notify("error", "patch.failed", str(exc))
                return None
            LOGGER.debug(
                "Repainted %s with %d binding(s).", result.resource, len(bundle.descriptors)
            )
            return result

    def restore(self) -> PatchResult:
        """Restore the pristine host document.

        Raises:
            PatchError: Propagated from the patcher.
            RuntimeError: If no host is configured.
        """
        if self._patcher is None:
            raise RuntimeError("No host configured; nothing to restore.")
        with self._patch_lock:
            return self._patcher.restore_patch()

    def _after_mutation(self) -> None:
        self.repaint(reload=self._reload_on_change)
        self.refresh_affordances()


__all__ = ["SyncController", "AffordanceState", "Notifier", "NoticeLevel"]
