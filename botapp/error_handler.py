"""
Centralized error handling for Telegram updates
"""
from tracking import t

import logging
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes


class ErrorHandler:
    """
    Centralized error handling for the court bot

    Logs failures raised inside command handlers and sends a short apology so
    the user is never left without a reply.
    """

    @staticmethod
    async def handle_telegram_error(
        update: object,
        context: ContextTypes.DEFAULT_TYPE,
        error: Optional[BaseException],
    ) -> None:
        """
        Main entry point for handling errors that occur during Telegram updates

        Args:
            update: The telegram update that caused the error (may be None)
            context: The callback context
            error: The exception that occurred
        """
        t('botapp.error_handler.ErrorHandler.handle_telegram_error')
        logger = logging.getLogger('ErrorHandler')

        if error is not None and "message is not modified" in str(error).lower():
            logger.warning("Telegram message not modified: %s", error)
            return

        logger.error(
            "Telegram error occurred: %s: %s",
            type(error).__name__,
            error,
            exc_info=error,
        )

        if isinstance(update, Update) and update.message:
            try:
                await update.message.reply_text("❌ Something went wrong. Please try again.")
            except Exception as exc:  # pragma: no cover - defensive guard
                logger.error("Failed to send error message to user: %s", exc)
