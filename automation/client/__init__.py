"""HTTP client for the remote court booking system."""

from .court_client import CourtClient
from .session import CourtSession

__all__ = ['CourtClient', 'CourtSession']
