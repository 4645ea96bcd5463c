"""Exception taxonomy shared by the booking core."""

from __future__ import annotations

from typing import Optional


class CourtBotError(Exception):
    """Base class for failures raised by the booking core."""


class AuthenticationError(CourtBotError):
    """The court system rejected the login or no session is available."""


class RemoteError(CourtBotError):
    """A court system call failed in transport or returned a non-success status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResolutionError(CourtBotError):
    """No catalog slot matches the requested court and time."""


class StorageError(CourtBotError):
    """A JSON store could not be read or written."""


__all__ = [
    'CourtBotError',
    'AuthenticationError',
    'RemoteError',
    'ResolutionError',
    'StorageError',
]
