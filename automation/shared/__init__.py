"""Contracts shared between the court client and the booking core."""

from .booking_contracts import BookingOutcome, OutcomeKind, SlotInfo

__all__ = ['BookingOutcome', 'OutcomeKind', 'SlotInfo']
