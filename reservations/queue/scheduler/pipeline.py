"""Classify pending bookings by how soon they must be executed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable, List, Optional, Set

from tracking import t

from reservations.models import BookingRequest


def days_until(target_date: date, today: date) -> int:
    """Whole days from ``today`` to ``target_date`` (negative when past)."""

    t('reservations.queue.scheduler.pipeline.days_until')
    return (target_date - today).days


@dataclass
class ScanEvaluation:
    """Buckets produced after evaluating pending bookings."""

    urgent: List[BookingRequest] = field(default_factory=list)
    deadline: List[BookingRequest] = field(default_factory=list)
    deferred: List[BookingRequest] = field(default_factory=list)

    @property
    def evaluated(self) -> int:
        return len(self.urgent) + len(self.deadline) + len(self.deferred)

    @staticmethod
    def dates_of(bookings: Iterable[BookingRequest]) -> Set[date]:
        return {booking.target_date for booking in bookings}


def classify_pending(
    bookings: Iterable[BookingRequest],
    *,
    now: datetime,
    urgent_days: int,
    deadline_days: int,
    window_start: time,
    logger: Optional[Any] = None,
) -> ScanEvaluation:
    """Split ``bookings`` into urgent, deadline, and deferred groups.

    ``now`` must already be in the operating timezone. A booking is urgent
    when it is at most ``urgent_days`` away, and waits for the deadline when
    it is exactly ``deadline_days`` away and the local clock has reached
    ``window_start``. Load order is preserved inside each group.
    """

    t('reservations.queue.scheduler.pipeline.classify_pending')
    evaluation = ScanEvaluation()
    today = now.date()
    in_window = now.time() >= window_start

    for booking in bookings:
        days_diff = days_until(booking.target_date, today)
        if days_diff <= urgent_days:
            evaluation.urgent.append(booking)
            bucket = "urgent"
        elif days_diff == deadline_days and in_window:
            evaluation.deadline.append(booking)
            bucket = "deadline"
        else:
            evaluation.deferred.append(booking)
            bucket = "deferred"
        if logger:
            logger.debug(
                "Booking #%s for %s is %s days away -> %s",
                booking.booking_id,
                booking.target_date,
                days_diff,
                bucket,
            )
    return evaluation
