"""Telegram command handlers and their registration."""

from __future__ import annotations
from tracking import t

import logging
from datetime import datetime, timezone
from typing import Optional

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from automation.shared.booking_contracts import OutcomeKind
from botapp.bootstrap import BotDependencies
from botapp.error_handler import ErrorHandler
from botapp.notifications import NotificationBuilder
from botapp.ui.text_blocks import TextBlockBuilder
from botapp.validation import ValidationHelpers
from infrastructure.errors import ResolutionError, StorageError
from reservations.models import BookingRequest
from reservations.queue.scheduler import days_until

SCHEDULE_USAGE = (
    "Invalid format. Use: /schedule YYYY-MM-DD HH:MM COURT\n"
    "Example: /schedule 2025-10-25 06:00 3"
)


class CommandHandlers:
    """Handle the bot's slash commands on top of the runtime dependencies."""

    def __init__(
        self,
        dependencies: BotDependencies,
        *,
        messages: Optional[NotificationBuilder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('botapp.commands.handlers.CommandHandlers.__init__')
        self.dependencies = dependencies
        self.settings = dependencies.settings
        self.messages = messages or NotificationBuilder()
        self.logger = logger or logging.getLogger('CommandHandlers')

    async def _reply(self, update: Update, text: str) -> None:
        t('botapp.commands.handlers.CommandHandlers._reply')
        await update.message.reply_text(text)

    def _today(self):
        t('botapp.commands.handlers.CommandHandlers._today')
        return self.dependencies.scheduler.clock().date()

    def _is_admin(self, update: Update) -> bool:
        t('botapp.commands.handlers.CommandHandlers._is_admin')
        admin_chat_id = self.dependencies.notifier.admin_chat_id
        return admin_chat_id is not None and update.effective_chat.id == admin_chat_id

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /start command."""
        t('botapp.commands.handlers.CommandHandlers.start')

        user = update.effective_user
        courts = ' or '.join(str(court) for court in self.settings.court_numbers)
        text = (
            TextBlockBuilder()
            .heading(f"Hello, {user.first_name or 'there'}!")
            .blank()
            .line("I book tennis courts automatically the moment they open.")
            .blank()
            .line("Available commands:")
            .line("/schedule <date> <time> <court> - schedule a booking")
            .line("  Example: /schedule 2025-10-25 06:00 3")
            .line("/list - show your scheduled bookings")
            .line("/cancel <id> - cancel a booking")
            .line("/test_auth - check the connection to the booking system")
            .blank()
            .line(f"Courts: {courts}")
            .line(f"Bookings run automatically at midnight ({self.settings.timezone})!")
            .build()
        )
        await self._reply(update, text)
        self.logger.info("User %s (%s) started the bot", user.id, user.first_name)

    async def schedule(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /schedule <date> <time> <court>."""
        t('botapp.commands.handlers.CommandHandlers.schedule')

        args = context.args or []
        if len(args) < 3:
            await self._reply(update, SCHEDULE_USAGE)
            return

        ok, target_date, error = ValidationHelpers.validate_date(args[0])
        if not ok:
            await self._reply(update, error)
            return
        ok, target_time = ValidationHelpers.validate_time(args[1])
        if not ok:
            await self._reply(update, target_time)
            return
        ok, court_number, error = ValidationHelpers.validate_court(args[2], self.settings.court_numbers)
        if not ok:
            await self._reply(update, error)
            return

        user_id = update.effective_user.id
        days_diff = days_until(target_date, self._today())
        details = f"Date: {target_date.isoformat()}\nTime: {target_time}\nCourt: {court_number}"

        if days_diff <= self.settings.urgent_days_threshold:
            self.logger.info(
                "Immediate booking: user=%s, date=%s, time=%s, court=%s, days_diff=%s",
                user_id, target_date, target_time, court_number, days_diff,
            )
            await self._reply(update, f"Starting booking...\n\n{details}")
            await self._book_immediately(update, target_date, target_time, court_number, details)
            return

        try:
            booking_id = self.dependencies.booking_store.create(
                BookingRequest(
                    booking_id=0,
                    user_id=user_id,
                    target_date=target_date,
                    target_time=target_time,
                    court_number=court_number,
                    created_at=datetime.now(timezone.utc),
                )
            )
        except StorageError as exc:
            self.logger.error("Error scheduling booking: %s", exc)
            await self._reply(update, f"An error occurred while scheduling the booking: {exc}")
            return

        await self._reply(
            update,
            f"Booking scheduled!\n\nID: {booking_id}\n{details}\n\n"
            f"It will run automatically at midnight ({self.settings.timezone}).",
        )

    async def _book_immediately(self, update: Update, target_date, target_time: str, court_number: int, details: str) -> None:
        t('botapp.commands.handlers.CommandHandlers._book_immediately')
        try:
            outcome = await self.dependencies.scheduler.book_now(target_date, target_time, court_number)
        except ResolutionError:
            await self._reply(
                update,
                f"Slot for {target_time} on court {court_number} was not found. "
                "Slots may not be loaded yet.",
            )
            return

        if outcome.kind is OutcomeKind.SUCCESS:
            text = f"✅ Booking successful!\n\n{details}\n\n{outcome.message}"
        elif outcome.kind is OutcomeKind.ALREADY_BOOKED:
            text = f"⚠️ Unfortunately the court is already booked.\n\n{details}\n\n{outcome.message}"
        else:
            text = f"❌ Booking error.\n\n{details}\n\nError: {outcome.message}"
        self.logger.info("Immediate booking result for %s: %s", update.effective_user.id, outcome.kind.value)
        await self._reply(update, text)

    async def list_bookings(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /list: the caller's pending bookings."""
        t('botapp.commands.handlers.CommandHandlers.list_bookings')

        user_id = update.effective_user.id
        bookings = [
            booking for booking in self.dependencies.booking_store.find_by_user(user_id)
            if booking.is_pending
        ]
        await self._reply(update, self.messages.booking_list(bookings))

    async def cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /cancel <id>; only the owner's pending bookings can be removed."""
        t('botapp.commands.handlers.CommandHandlers.cancel')

        args = context.args or []
        if not args:
            await self._reply(update, "Specify the booking ID. Use: /cancel <id>")
            return
        ok, booking_id, error = ValidationHelpers.validate_booking_id(args[0])
        if not ok:
            await self._reply(update, error)
            return

        user_id = update.effective_user.id
        store = self.dependencies.booking_store
        booking = store.find_by_id(booking_id)
        if booking is None or booking.user_id != user_id or not booking.is_pending:
            await self._reply(update, "Booking not found or it does not belong to you.")
            return

        try:
            store.delete(booking_id)
        except StorageError as exc:
            self.logger.error("Error cancelling booking #%s: %s", booking_id, exc)
            await self._reply(update, f"An error occurred while cancelling the booking: {exc}")
            return
        self.logger.info("Booking cancelled: user=%s, booking=%s", user_id, booking_id)
        await self._reply(update, f"Booking #{booking_id} cancelled.")

    async def test_auth(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /test_auth."""
        t('botapp.commands.handlers.CommandHandlers.test_auth')

        await self._reply(update, "Testing authentication...")
        success = await self.dependencies.court_client.authenticate()
        self.logger.info("Test auth command executed, result: %s", success)
        await self._reply(
            update,
            "✅ Authentication successful!" if success
            else "❌ Authentication failed. Check the logs for details.",
        )

    async def sendme(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /sendme: route admin reports to this chat."""
        t('botapp.commands.handlers.CommandHandlers.sendme')

        chat_id = update.effective_chat.id
        configured = self.settings.admin_chat_id
        if configured is not None and configured != chat_id:
            await self._reply(update, "❌ Admin reports are already routed to another chat.")
            return

        self.dependencies.notifier.admin_chat_id = chat_id
        self.logger.info("Admin chat registered: %s", chat_id)
        await self._reply(update, f"Admin reports will be sent to this chat ({chat_id}).")

    async def fetch_slots(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /fetch_slots [date]: load the slot catalog right now (admin only)."""
        t('botapp.commands.handlers.CommandHandlers.fetch_slots')

        if not self._is_admin(update):
            await self._reply(update, "❌ Only the admin chat can fetch slots. Use /sendme first.")
            return

        args = context.args or []
        if args:
            ok, target_date, error = ValidationHelpers.validate_date(args[0])
            if not ok:
                await self._reply(update, error)
                return
        else:
            target_date = self._today()

        await self._reply(update, f"Fetching slots for {target_date.isoformat()}...")
        # the fetcher reports its summary to the admin chat itself
        await self.dependencies.slot_fetches.run_now(target_date)

    async def error_handler(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Central error handler for Telegram exceptions."""
        t('botapp.commands.handlers.CommandHandlers.error_handler')
        await ErrorHandler.handle_telegram_error(update, context, context.error)


def register_core_handlers(application: Application, handlers: CommandHandlers) -> None:
    """Wire up the bot's command and error handlers."""

    t('botapp.commands.handlers.register_core_handlers')

    application.add_handler(CommandHandler("start", handlers.start))
    application.add_handler(CommandHandler("schedule", handlers.schedule))
    application.add_handler(CommandHandler("list", handlers.list_bookings))
    application.add_handler(CommandHandler("cancel", handlers.cancel))
    application.add_handler(CommandHandler("test_auth", handlers.test_auth))
    application.add_handler(CommandHandler("sendme", handlers.sendme))
    application.add_handler(CommandHandler("fetch_slots", handlers.fetch_slots))
    application.add_error_handler(handlers.error_handler)


__all__ = ['CommandHandlers', 'register_core_handlers']
