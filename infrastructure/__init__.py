"""Infrastructure helpers."""

from .settings import get_settings, load_settings, AppSettings
from .constants import *  # noqa: F401,F403
from .errors import (  # noqa: F401
    AuthenticationError,
    CourtBotError,
    RemoteError,
    ResolutionError,
    StorageError,
)

__all__ = [
    "get_settings",
    "load_settings",
    "AppSettings",
    "AuthenticationError",
    "CourtBotError",
    "RemoteError",
    "ResolutionError",
    "StorageError",
]
