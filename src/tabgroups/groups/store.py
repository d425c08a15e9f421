"""Authoritative in-memory state of groups and their files."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Protocol

from tabgroups.colors import ColorAllocator

from .errors import AlreadyMemberWarning, GroupExistsError, GroupNotFoundError, NotMemberWarning
from .models import FileReference, Group, GroupSnapshot

LOGGER = logging.getLogger(__name__)


class SnapshotPort(Protocol):
    """Persistence collaborator used by :class:`GroupStore`."""

    def load(self) -> GroupSnapshot: ...

    def save(self, snapshot: GroupSnapshot) -> None: ...


class GroupStore:
    """Own the group mapping and keep its invariants.

    Each path belongs to at most one group, and removing a group's last file
    deletes the group in the same operation. Every successful mutation is
    persisted through the injected port; failed operations raise and leave the
    mapping untouched.
    """

    def __init__(
        self,
        port: SnapshotPort,
        *,
        allocator: ColorAllocator | None = None,
    ) -> None:
        self._port = port
        self._allocator = allocator or ColorAllocator()
        self._groups: dict[str, Group] = {}

    @classmethod
    def load(cls, port: SnapshotPort, *, allocator: ColorAllocator | None = None) -> "GroupStore":
        """Build a store populated from the port's persisted snapshot.

        Args:
            port: Persistence collaborator.
            allocator: Optional color allocator override.

        Returns:
            GroupStore: Store reflecting the stored snapshot.
        """
        store = cls(port, allocator=allocator)
        snapshot = port.load()
        for name, record in snapshot.root.items():
            store._groups[name] = Group(name=name, color=record.color, files=list(record.files))
        LOGGER.debug("Loaded %d group(s) from snapshot.", len(store._groups))
        return store

    # ------------------------------------------------------------------ #
    # Mutations                                                          #
    # ------------------------------------------------------------------ #

    def create_group(self, name: str) -> Group:
        """Create an empty group with a freshly allocated color.

        Args:
            name: Unique group name.

        Returns:
            Group: The created group.

        Raises:
            ValueError: If the name is blank.
            GroupExistsError: If a group with that name already exists.
        """
        if not name or not name.strip():
            raise ValueError("Group name must not be blank.")
        if name in self._groups:
            raise GroupExistsError(f"Group {name!r} already exists.")

        group = Group(name=name, color=self._allocator.next_color())
        self._groups[name] = group
        LOGGER.info("Created group %s with color %s.", name, group.color)
        self._persist()
        return group

    def add_file(self, group_name: str, display_name: str, path: str) -> Optional[str]:
        """Append a file to a group, moving it out of any other group first.

        Args:
            group_name: Target group.
            display_name: Label shown for the file.
            path: Identity of the file.

        Returns:
            Optional[str]: Name of the group the file was moved out of, if any.

        Raises:
            GroupNotFoundError: If the target group does not exist.
            AlreadyMemberWarning: If the group already holds the path.
        """
        target = self._require(group_name)
        if path in target.paths():
            raise AlreadyMemberWarning(f"{display_name} is already in group {group_name!r}.")

        previous = self.find_group_for_path(path)
        if previous is not None:
            self._discard(previous, path)
            LOGGER.info("Moved %s out of group %s.", path, previous.name)

        target.files.append(FileReference(display_name=display_name, path=path))
        LOGGER.info("Added %s to group %s.", path, group_name)
        self._persist()
        return previous.name if previous is not None else None

    def remove_file(self, group_name: str, display_name: str) -> FileReference:
        """Remove the first file with the given display name from a group.

        Args:
            group_name: Group holding the file.
            display_name: Label of the file to remove.

        Returns:
            FileReference: The removed entry.

        Raises:
            GroupNotFoundError: If the group does not exist.
            NotMemberWarning: If no file in the group carries that label.
        """
        group = self._require(group_name)
        for entry in group.files:
            if entry.display_name == display_name:
                break
        else:
            raise NotMemberWarning(f"{display_name} is not in group {group_name!r}.")

        self._discard(group, entry.path)
        LOGGER.info("Removed %s from group %s.", entry.path, group_name)
        self._persist()
        return entry

    def remove_path(self, path: str) -> Optional[str]:
        """Remove a file by path from whichever group holds it.

        Args:
            path: Identity of the file.

        Returns:
            Optional[str]: Name of the affected group, or ``None`` when the path is ungrouped.
        """
        group = self.find_group_for_path(path)
        if group is None:
            return None
        self._discard(group, path)
        LOGGER.info("Dropped %s from group %s.", path, group.name)
        self._persist()
        return group.name

    def remove_group(self, name: str) -> Group:
        """Delete a group and all its file references.

        Args:
            name: Group to delete.

        Returns:
            Group: The deleted group.

        Raises:
            GroupNotFoundError: If the group does not exist.
        """
        group = self._require(name)
        del self._groups[name]
        LOGGER.info("Removed group %s.", name)
        self._persist()
        return group

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #

    def get(self, name: str) -> Optional[Group]:
        """Return the group called ``name``, or ``None`` when it does not exist."""
        return self._groups.get(name)

    def groups(self) -> list[Group]:
        """Return the groups in creation order."""
        return list(self._groups.values())

    def find_group_for_file(self, display_name: str) -> Optional[Group]:
        """Return the first group holding a file with the given label.

        Labels are not unique; files sharing a base name in different
        directories make the answer ambiguous.
        """
        for group in self._groups.values():
            if any(entry.display_name == display_name for entry in group.files):
                return group
        return None

    def find_group_for_path(self, path: str) -> Optional[Group]:
        for group in self._groups.values():
            if path in group.paths():
                return group
        return None

    def grouped_paths(self) -> set[str]:
        return {entry.path for group in self._groups.values() for entry in group.files}

    def ungrouped(self, open_paths: Iterable[str]) -> list[str]:
        """Return the open paths that belong to no group, keeping their order."""
        grouped = self.grouped_paths()
        seen: set[str] = set()
        result: list[str] = []
        for path in open_paths:
            if path in grouped or path in seen:
                continue
            seen.add(path)
            result.append(path)
        return result

    def snapshot(self) -> GroupSnapshot:
        return GroupSnapshot({name: group.to_record() for name, group in self._groups.items()})

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, name: object) -> bool:
        return name in self._groups

    def __iter__(self) -> Iterator[Group]:
        return iter(list(self._groups.values()))

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _require(self, name: str) -> Group:
        group = self._groups.get(name)
        if group is None:
            raise GroupNotFoundError(f"Group {name!r} does not exist.")
        return group

    def _discard(self, group: Group, path: str) -> None:
        group.files = [entry for entry in group.files if entry.path != path]
        if not group.files:
            del self._groups[group.name]
            LOGGER.info("Group %s is empty and was removed.", group.name)

    def _persist(self) -> None:
        self._port.save(self.snapshot())


__all__ = ["GroupStore", "SnapshotPort"]
