"""Exception types raised inside the sync service."""

from __future__ import annotations


class PermitSyncError(Exception):
    """Base class for sync service errors."""


class PermitTransformError(PermitSyncError, ValueError):
    """A source field could not be turned into a derived value."""


class ChannelSendError(PermitSyncError):
    """A pipeline channel rejected a payload."""

    def __init__(self, pipeline: str, message: str):
        self.pipeline = pipeline
        super().__init__(message)


class FallbackStoreError(PermitSyncError):
    """The fallback database rejected an upsert."""
