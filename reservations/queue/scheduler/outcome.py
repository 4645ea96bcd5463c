"""Map remote booking outcomes onto stored statuses and user messages."""

from __future__ import annotations

from dataclasses import dataclass

from tracking import t

from automation.shared.booking_contracts import BookingOutcome, OutcomeKind
from botapp.notifications import NotificationBuilder
from reservations.models import BookingRequest, BookingStatus


@dataclass(frozen=True)
class OutcomeRecord:
    """The transition and notification that follow one booking attempt."""

    status: BookingStatus
    reason: str
    message: str


def record_for_outcome(
    booking: BookingRequest,
    outcome: BookingOutcome,
    messages: NotificationBuilder,
) -> OutcomeRecord:
    """Success completes the booking; a conflict or an error fails it."""

    t('reservations.queue.scheduler.outcome.record_for_outcome')
    if outcome.kind is OutcomeKind.SUCCESS:
        return OutcomeRecord(BookingStatus.COMPLETED, outcome.message, messages.booking_success(booking))
    if outcome.kind is OutcomeKind.ALREADY_BOOKED:
        return OutcomeRecord(BookingStatus.FAILED, outcome.message, messages.booking_already_booked(booking))
    return OutcomeRecord(
        BookingStatus.FAILED,
        outcome.message,
        messages.booking_error(booking, outcome.message),
    )
