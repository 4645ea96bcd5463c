"""Notification texts and the delivery boundary used by the booking core."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Sequence

from tracking import t

from botapp.ui.text_blocks import TextBlockBuilder, TextBuilderBase

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from datetime import date

    from reservations.models import BookingRequest
    from reservations.queue.slot_fetcher import SlotFetchSummary


class NotificationBuilder(TextBuilderBase):
    """Build the messages users and the admin receive about bookings."""

    def __init__(self, builder_factory=TextBlockBuilder) -> None:
        t('botapp.notifications.NotificationBuilder.__init__')
        super().__init__(builder_factory=builder_factory)

    def _booking_details(self, builder: TextBlockBuilder, booking: "BookingRequest") -> TextBlockBuilder:
        t('botapp.notifications.NotificationBuilder._booking_details')
        return (
            builder.field("ID", booking.booking_id)
            .field("Date", booking.target_date.isoformat())
            .field("Time", booking.target_time or "any")
            .field("Court", booking.court_number)
        )

    def booking_success(self, booking: "BookingRequest") -> str:
        t('botapp.notifications.NotificationBuilder.booking_success')
        builder = self.create_builder().heading("✅ Booking successful!").blank()
        return self._booking_details(builder, booking).build()

    def booking_already_booked(self, booking: "BookingRequest") -> str:
        t('botapp.notifications.NotificationBuilder.booking_already_booked')
        builder = self.create_builder().heading(
            "⚠️ Unfortunately the court is already booked."
        ).blank()
        return self._booking_details(builder, booking).build()

    def booking_error(self, booking: "BookingRequest", error: str) -> str:
        t('botapp.notifications.NotificationBuilder.booking_error')
        builder = self.create_builder().heading("❌ Booking error.").blank()
        return self._booking_details(builder, booking).field("Error", error).build()

    def authentication_failed(self, booking: "BookingRequest") -> str:
        t('botapp.notifications.NotificationBuilder.authentication_failed')
        return (
            f"❌ Authentication failed. Booking #{booking.booking_id} "
            "was not completed."
        )

    def unknown_court(self, booking: "BookingRequest") -> str:
        t('botapp.notifications.NotificationBuilder.unknown_court')
        return (
            f"❌ Unknown court number: {booking.court_number}. "
            f"Booking #{booking.booking_id} was not completed."
        )

    def slot_not_found(self, booking: "BookingRequest") -> str:
        t('botapp.notifications.NotificationBuilder.slot_not_found')
        return (
            f"❌ Slot not found for {booking.target_time or 'the requested time'} "
            f"on court {booking.court_number}. "
            f"Booking #{booking.booking_id} was not completed."
        )

    def unexpected_error(self, booking: "BookingRequest", error: str) -> str:
        t('botapp.notifications.NotificationBuilder.unexpected_error')
        return f"❌ An error occurred while processing booking #{booking.booking_id}: {error}"

    def deadline_imminent(self, booking: "BookingRequest") -> str:
        t('botapp.notifications.NotificationBuilder.deadline_imminent')
        return (
            f"⏰ Booking #{booking.booking_id} opens at midnight. "
            "It will be attempted in a few minutes."
        )

    def slot_summary(self, summary: "SlotFetchSummary") -> str:
        t('botapp.notifications.NotificationBuilder.slot_summary')
        builder = self.create_builder().heading(
            f"📋 Slots loaded for {summary.target_date.isoformat()}:"
        )
        for court_number in sorted(summary.slots_by_court):
            labels = summary.slots_by_court[court_number]
            builder.line(f"Court {court_number}:")
            if labels:
                builder.bullets(labels, indent=2)
            else:
                builder.line("  no slots")
        builder.blank().line(f"Total saved: {summary.new_slots} new slots")
        return builder.build()

    def slot_fetch_failed(self, target_date: "date", reason: str) -> str:
        t('botapp.notifications.NotificationBuilder.slot_fetch_failed')
        return f"❌ Error loading slots for {target_date.isoformat()}: {reason}"

    def booking_list(self, bookings: Sequence["BookingRequest"]) -> str:
        t('botapp.notifications.NotificationBuilder.booking_list')
        if not bookings:
            return "You have no pending bookings."
        builder = self.create_builder().heading("📅 Your pending bookings:").blank()
        for booking in bookings:
            builder.bullet(
                f"#{booking.booking_id}: {booking.target_date.isoformat()} "
                f"{booking.target_time or 'any time'}, court {booking.court_number}"
            )
        return builder.build()


class Notifier(ABC):
    """Best-effort delivery boundary: failures are logged, never raised."""

    def __init__(
        self,
        *,
        admin_chat_id: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('botapp.notifications.Notifier.__init__')
        self.admin_chat_id = admin_chat_id
        self.logger = logger or logging.getLogger('Notifier')

    @abstractmethod
    async def _send(self, recipient_id: int, text: str) -> None:
        """Push ``text`` to ``recipient_id``; may raise."""

    async def deliver(self, recipient_id: int, text: str) -> None:
        t('botapp.notifications.Notifier.deliver')
        try:
            await self._send(recipient_id, text)
        except Exception as exc:
            self.logger.error("Failed to notify user %s: %s", recipient_id, exc)

    async def notify_admin(self, text: str) -> None:
        t('botapp.notifications.Notifier.notify_admin')
        if self.admin_chat_id is None:
            self.logger.info("No admin chat registered; dropping admin message: %s", text)
            return
        await self.deliver(self.admin_chat_id, text)


class TelegramNotifier(Notifier):
    """Deliver plain-text messages through a ``telegram.Bot``."""

    def __init__(
        self,
        bot: Any = None,
        *,
        admin_chat_id: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('botapp.notifications.TelegramNotifier.__init__')
        super().__init__(admin_chat_id=admin_chat_id, logger=logger)
        self.bot = bot

    async def _send(self, recipient_id: int, text: str) -> None:
        t('botapp.notifications.TelegramNotifier._send')
        if self.bot is None:
            self.logger.warning("Telegram bot not attached; message to %s dropped", recipient_id)
            return
        await self.bot.send_message(chat_id=recipient_id, text=text)


__all__ = ['NotificationBuilder', 'Notifier', 'TelegramNotifier']
