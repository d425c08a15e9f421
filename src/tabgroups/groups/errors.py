"""Group store errors."""


class GroupError(Exception):
    """Base exception for group store operations."""


class GroupNotFoundError(GroupError):
    """Raised when an operation names a group that does not exist."""


class GroupExistsError(GroupError):
    """Raised when creating a group whose name is already taken."""


class GroupWarning(GroupError):
    """Non-fatal outcome; the store was left unchanged."""


class AlreadyMemberWarning(GroupWarning):
    """Raised when a file is added to the group that already holds it."""


class NotMemberWarning(GroupWarning):
    """Raised when removing a file that the group does not contain."""
