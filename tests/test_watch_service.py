"""Host resource watcher tests."""

from __future__ import annotations

import threading
import time
from pathlib import Path

from tabgroups.binding import BindingScriptGenerator
from tabgroups.groups import GroupSnapshot, GroupStore
from tabgroups.patching import DEFAULT_RESOURCE_CANDIDATES, ResourcePatcher
from tabgroups.sync import HostResourceWatcher, SyncController

UPDATED = "<!DOCTYPE html>\n<html><head></head><body><p>v2</p></body></html>\n"


class MemoryPort:
    def __init__(self) -> None:
        self.snapshot = GroupSnapshot()

    def load(self) -> GroupSnapshot:
        return self.snapshot

    def save(self, snapshot: GroupSnapshot) -> None:
        self.snapshot = snapshot


def _watcher(tmp_path: Path) -> tuple[HostResourceWatcher, ResourcePatcher]:
    patcher = ResourcePatcher(tmp_path / "host")
    controller = SyncController(GroupStore(MemoryPort()), BindingScriptGenerator(), patcher)
    return HostResourceWatcher(controller, patcher, debounce_seconds=0.1), patcher


def test_check_once_without_resource_does_nothing(tmp_path: Path) -> None:
    watcher, _ = _watcher(tmp_path)

    assert watcher.check_once() is None


def test_check_once_repaints_after_host_update(tmp_path: Path) -> None:
    resource = tmp_path / "host" / DEFAULT_RESOURCE_CANDIDATES[0]
    resource.parent.mkdir(parents=True)
    resource.write_text(UPDATED, encoding="utf-8")
    watcher, patcher = _watcher(tmp_path)

    result = watcher.check_once()

    assert result is not None
    assert result.resource == resource
    assert patcher.is_patched() is True
    assert "<p>v2</p>" in resource.read_text(encoding="utf-8")


def test_check_once_skips_already_patched_document(tmp_path: Path) -> None:
    resource = tmp_path / "host" / DEFAULT_RESOURCE_CANDIDATES[0]
    resource.parent.mkdir(parents=True)
    resource.write_text(UPDATED, encoding="utf-8")
    watcher, _ = _watcher(tmp_path)
    watcher.check_once()
    contents = resource.read_text(encoding="utf-8")

    assert watcher.check_once() is None
    assert resource.read_text(encoding="utf-8") == contents


def test_watch_runs_again_after_stop(tmp_path: Path) -> None:
    resource = tmp_path / "host" / DEFAULT_RESOURCE_CANDIDATES[0]
    resource.parent.mkdir(parents=True)
    resource.write_text(UPDATED, encoding="utf-8")
    watcher, _ = _watcher(tmp_path)
    watcher.stop()

    thread = threading.Thread(target=watcher.watch, daemon=True)
    thread.start()
    time.sleep(0.3)

    assert thread.is_alive()
    watcher.stop()
    thread.join(timeout=5)
    assert not thread.is_alive()
