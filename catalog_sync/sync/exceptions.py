"""Exceptions raised by the background sync runner."""


class SyncError(Exception):
    """Base exception for background sync errors."""

    pass


class DispatchError(SyncError):
    """Raised when a background worker could not be scheduled."""

    def __init__(self, message: str, queue_name: str | None = None):
        super().__init__(message)
        self.queue_name = queue_name
