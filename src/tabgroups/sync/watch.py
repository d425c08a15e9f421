"""Re-apply the patch when the host replaces its UI document."""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from tabgroups.patching import PatchResult, ResourcePatcher

from .controller import SyncController

LOGGER = logging.getLogger(__name__)


class HostResourceWatcher:
    """Watch the host document's directory and repaint after host updates.

    A host update rewrites the document without the injected nodes. Events are
    debounced; once the directory settles the watcher checks the document and
    repaints only when the injection is missing, so its own writes do not loop.
    """

    def __init__(
        self,
        controller: SyncController,
        patcher: ResourcePatcher,
        *,
        debounce_seconds: float = 1.0,
    ) -> None:
        self._controller = controller
        self._patcher = patcher
        self._debounce_seconds = max(0.1, debounce_seconds)
        self._queue: queue.Queue[Optional[Path]] = queue.Queue()
        self._stop_event = threading.Event()
        self._observer: Optional[Observer] = None

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def check_once(self) -> Optional[PatchResult]:
        """Repaint if the document exists and lost its injection.

        Returns:
            Optional[PatchResult]: Patch outcome when a repaint ran, else ``None``.
        """
        status = self._patcher.status()
        if status.resource is None:
            LOGGER.warning("Host UI resource not found under %s.", self._patcher.install_dir)
            return None
        if status.patched:
            return None
        LOGGER.info("Injection missing from %s; repainting.", status.resource)
        return self._controller.repaint(reload=False)

    def watch(self, callback: Optional[Callable[[PatchResult], None]] = None) -> None:
        """Block while processing filesystem events until :meth:`stop` is called.

        Args:
            callback: Invoked with the outcome of every repaint the watcher triggers.

        Raises:
            RuntimeError: If the watcher is already running.
            ResourceNotFoundError: If the host document cannot be located.
        """
        if self._observer is not None:
            raise RuntimeError("HostResourceWatcher is already running.")

        resource = self._patcher.resolve_resource()
        self._stop_event.clear()
        self._queue = queue.Queue()
        self._observer = Observer()
        self._observer.schedule(
            _ResourceEventHandler(resource, self._queue), str(resource.parent), recursive=False
        )
        self._observer.start()
        LOGGER.info("Watching %s for host updates.", resource)
        try:
            self._run_loop(callback)
        finally:
            self.stop()

    def stop(self) -> None:
        """Terminate the observer and unblock the processing loop."""
        self._stop_event.set()
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join(timeout=5)
        self._queue.put(None)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _run_loop(self, callback: Optional[Callable[[PatchResult], None]]) -> None:
        flush_deadline: Optional[float] = None

        while not self._stop_event.is_set():
            timeout: Optional[float] = None
            if flush_deadline is not None:
                timeout = max(0.0, flush_deadline - time.monotonic())

            try:
                path = self._queue.get(timeout=timeout)
            except queue.Empty:
                flush_deadline = None
                result = self.check_once()
                if result is not None and callback is not None:
                    callback(result)
                continue

            if path is None:
                break
            flush_deadline = time.monotonic() + self._debounce_seconds


class _ResourceEventHandler(FileSystemEventHandler):
    """Forward events touching the host document into the watcher queue."""

    def __init__(self, resource: Path, queue_handle: queue.Queue[Optional[Path]]) -> None:
        self._resource = resource
        self._queue = queue_handle

    def on_created(self, event: FileSystemEvent) -> None:
        self._enqueue(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._enqueue(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:  # pragma: no cover - watchdog-specific
        self._enqueue(event.dest_path)

    def _enqueue(self, raw_path: str | bytes) -> None:
        path = Path(raw_path.decode() if isinstance(raw_path, bytes) else raw_path)
        if path.name != self._resource.name:
            return
        self._queue.put(path)


__all__ = ["HostResourceWatcher"]
