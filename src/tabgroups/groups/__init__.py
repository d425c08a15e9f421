"""Group state model for tabgroups."""

from .errors import (
    AlreadyMemberWarning,
    GroupError,
    GroupExistsError,
    GroupNotFoundError,
    GroupWarning,
    NotMemberWarning,
)
from .models import FileReference, Group, GroupRecord, GroupSnapshot
from .store import GroupStore, SnapshotPort

__all__ = [
    "GroupStore",
    "SnapshotPort",
    "FileReference",
    "Group",
    "GroupRecord",
    "GroupSnapshot",
    "GroupError",
    "GroupNotFoundError",
    "GroupExistsError",
    "GroupWarning",
    "AlreadyMemberWarning",
    "NotMemberWarning",
]
