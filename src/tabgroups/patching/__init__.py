"""Host UI resource patching."""

from .errors import NoBackupError, PatchError, PatchWriteError, ResourceNotFoundError
from .patcher import (
    DEFAULT_BACKUP_NAME,
    DEFAULT_RESOURCE_CANDIDATES,
    SCRIPT_ELEMENT_ID,
    STYLE_ELEMENT_ID,
    PatchResult,
    PatchStatus,
    ResourcePatcher,
)

__all__ = [
    "ResourcePatcher",
    "PatchResult",
    "PatchStatus",
    "PatchError",
    "ResourceNotFoundError",
    "NoBackupError",
    "PatchWriteError",
    "DEFAULT_RESOURCE_CANDIDATES",
    "DEFAULT_BACKUP_NAME",
    "STYLE_ELEMENT_ID",
    "SCRIPT_ELEMENT_ID",
]
