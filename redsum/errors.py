"""Exception taxonomy shared by every redsum component."""

from __future__ import annotations


class RedsumError(RuntimeError):
    """Base class for all redsum failures."""


class StorageUnavailable(RedsumError):
    """Raised when the activity database cannot be reached or queried."""


class InvalidDateFormat(RedsumError, ValueError):
    """Raised when a date string is not a valid ``YYYY-MM-DD`` calendar date."""


class InvalidDateRange(RedsumError, ValueError):
    """Raised when the start date is later than the end date."""


class GenerationFailed(RedsumError):
    """Raised when the generative-text backend does not return usable text."""

    def __init__(self, message: str, *, status: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is None:
            return base
        return f"{base} (status={self.status}, body={self.body})"


class TrackerApiError(RedsumError):
    """Raised for non-2xx tracker responses and transport failures."""

    def __init__(self, message: str, *, status: int, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        return f"{super().__str__()} (status={self.status}, body={self.body})"


class ResponseParseError(RedsumError):
    """Raised when a tracker response body is not valid JSON."""

    def __init__(self, message: str, *, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class CheckpointIoError(RedsumError):
    """Raised when a checkpoint file cannot be written or listed."""


__all__ = [
    "CheckpointIoError",
    "GenerationFailed",
    "InvalidDateFormat",
    "InvalidDateRange",
    "RedsumError",
    "ResponseParseError",
    "StorageUnavailable",
    "TrackerApiError",
]
