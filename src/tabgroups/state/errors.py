"""Snapshot persistence errors."""


class StateError(Exception):
    """Raised when the persisted group snapshot cannot be read."""
