"""Synchronization between group state and the host UI."""

from .controller import AffordanceState, Notifier, NoticeLevel, SyncController
from .watch import HostResourceWatcher

__all__ = [
    "SyncController",
    "AffordanceState",
    "Notifier",
    "NoticeLevel",
    "HostResourceWatcher",
]
