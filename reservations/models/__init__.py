"""Domain model definitions for the court booking bot."""

from .booking import BookingRequest, BookingStatus
from .slot import SlotCatalogEntry

__all__ = ["BookingRequest", "BookingStatus", "SlotCatalogEntry"]
