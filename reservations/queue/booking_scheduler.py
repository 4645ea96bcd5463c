"""
Booking Scheduler

Periodic scan over pending bookings. Each scan classifies bookings by how many
days remain until their target date, executes urgent ones right away, holds
bookings whose slots open at the coming midnight until that instant, and leaves
the rest for a later scan. Every terminal outcome is stored before the owner
is notified.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Set

import pytz

from tracking import t

from automation.shared.booking_contracts import BookingOutcome
from botapp.notifications import NotificationBuilder
from infrastructure.errors import StorageError
from infrastructure.settings import AppSettings
from reservations.models import BookingRequest, BookingStatus
from reservations.queue.booking_store import BookingStore
from reservations.queue.scheduler import (
    ScanEvaluation,
    SchedulerStats,
    classify_pending,
    next_midnight,
    record_for_outcome,
    wait_until,
)
from reservations.queue.scheduler.timing import Clock, Sleeper
from reservations.queue.slot_fetcher import SlotFetchCoordinator
from reservations.slots.resolver import BookingResolver


class BookingScheduler:
    """Drive pending bookings from the store to a terminal status."""

    def __init__(
        self,
        *,
        store: BookingStore,
        resolver: BookingResolver,
        client,
        notifier,
        slot_fetches: SlotFetchCoordinator,
        settings: AppSettings,
        clock: Optional[Clock] = None,
        sleep: Sleeper = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
        messages: Optional[NotificationBuilder] = None,
    ) -> None:
        t('reservations.queue.booking_scheduler.BookingScheduler.__init__')
        self.store = store
        self.resolver = resolver
        self.client = client
        self.notifier = notifier
        self.slot_fetches = slot_fetches
        self.settings = settings
        self.timezone = pytz.timezone(settings.timezone)
        self.clock = clock or (lambda: datetime.now(self.timezone))
        self.sleep = sleep
        self.logger = logger or logging.getLogger('BookingScheduler')
        self.messages = messages or NotificationBuilder()
        self.stats = SchedulerStats()
        self.running = False
        # Bookings settled in this process even if the store could not record it
        self._settled: Set[int] = set()

    async def run_async(self) -> None:
        """Scan every ``scan_interval_seconds`` until :meth:`stop` is called."""

        t('reservations.queue.booking_scheduler.BookingScheduler.run_async')
        self.running = True
        self.logger.info(
            "Booking scheduler started (interval %ss, timezone %s)",
            self.settings.scan_interval_seconds,
            self.settings.timezone,
        )
        while self.running:
            try:
                await self.scan_once()
            except Exception as exc:
                self.stats.record_scan_error()
                self.logger.error("Error processing bookings: %s", exc, exc_info=True)
            if not self.running:
                break
            await self.sleep(self._next_delay())
        self.logger.info("Booking scheduler loop exited")

    async def stop(self) -> None:
        t('reservations.queue.booking_scheduler.BookingScheduler.stop')
        self.logger.info("Stopping booking scheduler...")
        self.running = False
        await self.slot_fetches.cancel_all()

    def _next_delay(self) -> float:
        """Seconds until the next scan, landing one scan on the deadline window start."""

        t('reservations.queue.booking_scheduler.BookingScheduler._next_delay')
        interval = float(self.settings.scan_interval_seconds)
        local_now = self._local_now()
        window = self.timezone.localize(
            datetime.combine(local_now.date(), self.settings.deadline_window_start)
        )
        if local_now >= window:
            window = self.timezone.localize(
                datetime.combine(local_now.date() + timedelta(days=1), self.settings.deadline_window_start)
            )
        return min(interval, (window - local_now).total_seconds())

    def _local_now(self, now: Optional[datetime] = None) -> datetime:
        t('reservations.queue.booking_scheduler.BookingScheduler._local_now')
        now = now or self.clock()
        if now.tzinfo is None:
            return self.timezone.localize(now)
        return now.astimezone(self.timezone)

    async def scan_once(self, now: Optional[datetime] = None) -> ScanEvaluation:
        """Evaluate all pending bookings once and act on the urgent and deadline groups."""

        t('reservations.queue.booking_scheduler.BookingScheduler.scan_once')
        local_now = self._local_now(now)
        self.stats.record_scan()
        self._preload_catalog(local_now)

        pending = [
            booking for booking in self.store.find_pending()
            if booking.booking_id not in self._settled
        ]
        if not pending:
            return ScanEvaluation()

        self.logger.info(
            "Checking %s pending booking(s) at %s time: %s",
            len(pending),
            self.settings.timezone,
            local_now.strftime('%H:%M:%S'),
        )
        evaluation = classify_pending(
            pending,
            now=local_now,
            urgent_days=self.settings.urgent_days_threshold,
            deadline_days=self.settings.deadline_days_ahead,
            window_start=self.settings.deadline_window_start,
            logger=self.logger,
        )

        if evaluation.urgent:
            await self._run_urgent(evaluation.urgent)
        if evaluation.deadline:
            await self._run_deadline(evaluation.deadline, local_now)
        return evaluation

    def _preload_catalog(self, local_now: datetime) -> None:
        """Inside the deadline window, make sure the date opening at midnight gets fetched."""

        t('reservations.queue.booking_scheduler.BookingScheduler._preload_catalog')
        if local_now.time() < self.settings.deadline_window_start:
            return
        opening = local_now.date() + timedelta(days=self.settings.deadline_days_ahead)
        self.slot_fetches.schedule(opening)

    async def _run_urgent(self, bookings: List[BookingRequest]) -> None:
        t('reservations.queue.booking_scheduler.BookingScheduler._run_urgent')
        self.logger.info("Executing %s urgent booking(s) immediately", len(bookings))
        await self.slot_fetches.wait_for_completion(
            ScanEvaluation.dates_of(bookings),
            self.settings.slot_fetch_wait_seconds,
        )
        await self.execute_batch(bookings)

    async def _run_deadline(self, bookings: List[BookingRequest], local_now: datetime) -> None:
        t('reservations.queue.booking_scheduler.BookingScheduler._run_deadline')
        dates = ScanEvaluation.dates_of(bookings)
        for target_date in sorted(dates):
            self.slot_fetches.schedule(target_date)

        for booking in bookings:
            await self.notifier.deliver(booking.user_id, self.messages.deadline_imminent(booking))

        deadline = next_midnight(local_now, self.timezone)
        self.logger.info(
            "Waiting until midnight (%s) for %s booking(s)", deadline.isoformat(), len(bookings)
        )
        await wait_until(deadline, clock=self.clock, sleep=self.sleep)
        self.logger.info("Midnight reached, waiting for slot catalog")

        await self.slot_fetches.wait_for_completion(dates, self.settings.slot_fetch_wait_seconds)
        await self.execute_batch(bookings)

    async def execute_batch(self, bookings: Iterable[BookingRequest]) -> None:
        """Authenticate once, then process ``bookings`` sequentially in order."""

        t('reservations.queue.booking_scheduler.BookingScheduler.execute_batch')
        bookings = list(bookings)
        if not bookings:
            return
        self.logger.info("Executing %s booking(s)", len(bookings))

        if not await self.client.authenticate():
            self.logger.error("Authentication failed, cannot proceed with bookings")
            for booking in bookings:
                await self._finalize(
                    booking,
                    BookingStatus.FAILED,
                    "Authentication failed",
                    self.messages.authentication_failed(booking),
                )
            return

        for booking in bookings:
            await self._process_booking(booking)

    async def _process_booking(self, booking: BookingRequest) -> None:
        t('reservations.queue.booking_scheduler.BookingScheduler._process_booking')
        self.logger.info(
            "Processing booking #%s: date=%s, time=%s, court=%s",
            booking.booking_id,
            booking.target_date,
            booking.target_time,
            booking.court_number,
        )
        try:
            if self.resolver.amenity_for(booking.court_number) is None:
                await self._finalize(
                    booking,
                    BookingStatus.FAILED,
                    f"Unknown court number: {booking.court_number}",
                    self.messages.unknown_court(booking),
                )
                return

            resolved = self.resolver.resolve(booking.court_number, booking.target_time)
            if resolved is None:
                self.logger.error(
                    "Slot not found for time=%s, court=%s", booking.target_time, booking.court_number
                )
                await self._finalize(
                    booking,
                    BookingStatus.FAILED,
                    f"Slot not found for time={booking.target_time}, court={booking.court_number}",
                    self.messages.slot_not_found(booking),
                )
                return

            outcome = await self.client.book(booking.target_date, resolved.slot_id, resolved.amenity_id)
            record = record_for_outcome(booking, outcome, self.messages)
            await self._finalize(booking, record.status, record.reason, record.message)
        except Exception as exc:
            self.logger.error("Exception processing booking #%s: %s", booking.booking_id, exc, exc_info=True)
            reason = str(exc) or type(exc).__name__
            await self._finalize(
                booking,
                BookingStatus.FAILED,
                reason,
                self.messages.unexpected_error(booking, reason),
            )

    def _record_transition(self, booking: BookingRequest, status: BookingStatus, reason: str) -> bool:
        """Store the transition; False means the booking was already settled."""

        t('reservations.queue.booking_scheduler.BookingScheduler._record_transition')
        if booking.booking_id in self._settled:
            return False
        try:
            recorded = self.store.update_status(booking.booking_id, status, reason)
        except StorageError as exc:
            self.logger.error(
                "Failed to record %s for booking #%s: %s", status.value, booking.booking_id, exc
            )
        else:
            # a booking cancelled mid-batch has no record left; it still counts as settled
            if not recorded and self.store.find_by_id(booking.booking_id) is not None:
                return False

        self._settled.add(booking.booking_id)
        if status is BookingStatus.COMPLETED:
            self.stats.record_success()
        else:
            self.stats.record_failure()
        return True

    async def _finalize(
        self,
        booking: BookingRequest,
        status: BookingStatus,
        reason: str,
        message: str,
    ) -> None:
        t('reservations.queue.booking_scheduler.BookingScheduler._finalize')
        if not self._record_transition(booking, status, reason):
            self.logger.warning(
                "Booking #%s already settled; skipping %s notification", booking.booking_id, status.value
            )
            return
        await self.notifier.deliver(booking.user_id, message)

    async def book_now(self, target_date: date, target_time: str, court_number: int) -> BookingOutcome:
        """Book a near date immediately without storing a request.

        Raises:
            ResolutionError: unknown court, or no catalog slot for ``target_time``.
        """

        t('reservations.queue.booking_scheduler.BookingScheduler.book_now')
        await self.slot_fetches.wait_for_completion(
            [target_date], self.settings.slot_fetch_wait_seconds
        )
        resolved = self.resolver.require(court_number, target_time)
        if not await self.client.authenticate():
            return BookingOutcome.error("Authentication failed")
        return await self.client.book(target_date, resolved.slot_id, resolved.amenity_id)


__all__ = ['BookingScheduler']
