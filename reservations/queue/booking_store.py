"""
Booking Store Module

Durable storage for user booking requests. Records live in memory and every
mutation is written through to a JSON file before it becomes visible, so a
failed write leaves the previous state intact.
"""
from tracking import t

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from reservations.models import BookingRequest, BookingStatus
from reservations.queue.record_repository import JsonRecordRepository
from reservations.queue.reservation_transitions import apply_status_update, can_transition


class BookingStore:
    """
    Manages creation, lookup, status transitions, and cancellation of bookings.

    Attributes:
        file_path (str): Path to the JSON file for persistence
        logger (logging.Logger): Logger instance for this class
    """

    def __init__(
        self,
        file_path: str = 'data/bookings.json',
        *,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        repository: Optional[JsonRecordRepository] = None,
    ) -> None:
        t('reservations.queue.booking_store.BookingStore.__init__')
        self.logger = logger or logging.getLogger('BookingStore')
        self.file_path = file_path
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.repository = repository or JsonRecordRepository(file_path, logger=self.logger)
        self._records: Dict[int, BookingRequest] = {}

        for payload in self.repository.load():
            try:
                record = BookingRequest.from_payload(payload)
            except (KeyError, TypeError, ValueError) as exc:
                self.logger.warning("Skipping malformed booking record %s: %s", payload, exc)
                continue
            self._records[record.booking_id] = record

        self.logger.info(f"""BOOKING STORE INITIALIZED
        File: {self.file_path}
        Existing bookings: {len(self._records)}
        Pending: {len(self.find_pending())}
        """)

    def _persist(self, records: Dict[int, BookingRequest]) -> None:
        t('reservations.queue.booking_store.BookingStore._persist')
        self.repository.save(record.to_payload() for record in records.values())

    def _commit(self, records: Dict[int, BookingRequest]) -> None:
        """Write ``records`` and only then make them the visible state."""

        t('reservations.queue.booking_store.BookingStore._commit')
        self._persist(records)
        self._records = records

    def create(self, request: BookingRequest) -> int:
        """
        Store a new pending booking.

        The identifier and status carried by ``request`` are ignored; the store
        assigns the next integer id and starts every booking as pending.

        Returns:
            int: Identifier assigned to the new booking

        Raises:
            StorageError: the booking could not be written
        """
        t('reservations.queue.booking_store.BookingStore.create')

        booking_id = max(self._records, default=0) + 1
        record = BookingRequest(
            booking_id=booking_id,
            user_id=request.user_id,
            target_date=request.target_date,
            target_time=request.target_time,
            court_number=request.court_number,
            created_at=request.created_at or self._clock(),
            status=BookingStatus.PENDING,
        )
        records = dict(self._records)
        records[booking_id] = record
        self._commit(records)

        self.logger.info(f"""NEW BOOKING REQUEST
        Booking ID: {booking_id}
        User ID: {record.user_id}
        Date: {record.target_date}
        Time: {record.target_time}
        Court: {record.court_number}
        """)
        return booking_id

    def find_pending(self) -> List[BookingRequest]:
        """Return pending bookings in creation order."""
        t('reservations.queue.booking_store.BookingStore.find_pending')
        return [record for _, record in sorted(self._records.items()) if record.is_pending]

    def find_by_id(self, booking_id: int) -> Optional[BookingRequest]:
        t('reservations.queue.booking_store.BookingStore.find_by_id')
        return self._records.get(booking_id)

    def find_by_user(self, user_id: int) -> List[BookingRequest]:
        t('reservations.queue.booking_store.BookingStore.find_by_user')
        return [record for _, record in sorted(self._records.items()) if record.user_id == user_id]

    def update_status(
        self,
        booking_id: int,
        status: BookingStatus,
        reason: Optional[str] = None,
    ) -> bool:
        """
        Record a status transition together with its reason.

        Returns:
            bool: True if the transition was stored, False if the booking is
            unknown or already terminal

        Raises:
            StorageError: the transition could not be written
        """
        t('reservations.queue.booking_store.BookingStore.update_status')

        current = self._records.get(booking_id)
        if current is None:
            self.logger.warning("Booking #%s not found; status %s not recorded", booking_id, status.value)
            return False
        if not can_transition(current.status, status):
            self.logger.warning(
                "Booking #%s is already %s; ignoring transition to %s",
                booking_id,
                current.status.value,
                status.value,
            )
            return False

        records = dict(self._records)
        records[booking_id] = apply_status_update(current, status, reason, now=self._clock())
        self._commit(records)
        self.logger.info(
            "Booking #%s status updated to: %s%s",
            booking_id,
            status.value,
            f" - {reason}" if reason else "",
        )
        return True

    def delete(self, booking_id: int) -> bool:
        """
        Remove a booking.

        Returns:
            bool: True if a booking was removed

        Raises:
            StorageError: the removal could not be written
        """
        t('reservations.queue.booking_store.BookingStore.delete')

        if booking_id not in self._records:
            return False
        records = dict(self._records)
        del records[booking_id]
        self._commit(records)
        self.logger.info("Booking #%s deleted", booking_id)
        return True


__all__ = ['BookingStore']
