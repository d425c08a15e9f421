"""Snapshot persistence for the group store."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from tabgroups.groups.models import GroupSnapshot

from .errors import StateError

DEFAULT_STATE_PATH = Path("~/.tabgroups/groups.json")


class SnapshotRepository:
    """Load and save the group snapshot as a JSON document."""

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the repository.

        Args:
            path: Location of the snapshot file; defaults to ``~/.tabgroups/groups.json``.
        """
        self._path = (path or DEFAULT_STATE_PATH).expanduser()

    @property
    def path(self) -> Path:
        """Return the resolved snapshot path.

        Returns:
            Path: File that holds the persisted snapshot.
        """
        return self._path

    def load(self) -> GroupSnapshot:
        """Load the persisted snapshot.

        Returns:
            GroupSnapshot: Stored groups, or an empty snapshot when no file exists yet.

        Raises:
            StateError: If the stored data cannot be parsed or validated.
        """
        if not self._path.exists():
            return GroupSnapshot()

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StateError(f"Invalid group snapshot data: {exc}") from exc

        try:
            return GroupSnapshot.model_validate(data)
        except ValidationError as exc:
            raise StateError(f"Invalid group snapshot structure: {exc}") from exc

    def save(self, snapshot: GroupSnapshot) -> None:
        """Persist the snapshot.

        Args:
            snapshot: Groups to serialize to disk.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(snapshot.to_payload(), indent=2, sort_keys=False), encoding="utf-8"
        )


__all__ = ["SnapshotRepository", "DEFAULT_STATE_PATH", "StateError"]
