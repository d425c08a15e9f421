"""Errors raised while patching the host UI resource."""


class PatchError(Exception):
    """Base exception for resource patch operations."""


class ResourceNotFoundError(PatchError):
    """Raised when none of the known resource locations exist."""


class NoBackupError(PatchError):
    """Raised when a restore is requested but no pristine backup exists."""


class PatchWriteError(PatchError):
    """Raised when the patched document cannot be written back."""
