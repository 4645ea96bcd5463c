"""State transition helpers for booking requests."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from reservations.models import BookingRequest, BookingStatus
from tracking import t


def can_transition(current: BookingStatus, new_status: BookingStatus) -> bool:
    """Only pending bookings move, and only to a terminal status."""

    t('reservations.queue.reservation_transitions.can_transition')
    return current is BookingStatus.PENDING and new_status.is_terminal


def apply_status_update(
    booking: BookingRequest,
    new_status: BookingStatus,
    reason: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> BookingRequest:
    """Return ``booking`` moved to ``new_status`` with its triggering reason.

    Raises:
        ValueError: the transition would leave a terminal status or re-enter pending.
    """

    t('reservations.queue.reservation_transitions.apply_status_update')
    if not can_transition(booking.status, new_status):
        raise ValueError(
            f"Booking #{booking.booking_id} cannot move from "
            f"{booking.status.value} to {new_status.value}"
        )
    return booking.with_status(new_status, reason, updated_at=now)
