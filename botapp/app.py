#!/usr/bin/env python3
"""
Court booking bot - entrypoint wrapper around the runtime application.
"""
from tracking import t

import logging
import signal
import sys
from pathlib import Path

if __name__ == "__main__" and __package__ is None:
    sys.path.append(str(Path(__file__).resolve().parents[1]))
    __package__ = "botapp"

from infrastructure.logging_config import setup_logging
from infrastructure.settings import get_settings
from botapp.runtime import BotApplication


def signal_handler(signum, frame):
    """Handle SIGTERM by raising KeyboardInterrupt so polling stops cleanly."""
    t('botapp.app.signal_handler')
    logger = logging.getLogger('Main')
    logger.info(f"🚨 Received signal {signum}, initiating graceful shutdown...")
    raise KeyboardInterrupt


def main() -> None:
    """Entry point used by both CLI script and module execution."""
    t('botapp.app.main')

    settings = get_settings()
    setup_logging(settings)

    logger = logging.getLogger('Main')
    logger.info("=" * 50)
    logger.info("Court Booking Bot")
    logger.info("=" * 50)

    if not settings.bot_token:
        logger.error("TELEGRAM_BOT_TOKEN is not set; refusing to start")
        sys.exit(1)

    signal.signal(signal.SIGTERM, signal_handler)

    bot = BotApplication(settings)
    try:
        logger.info("🚀 Starting bot...")
        bot.run()
    except KeyboardInterrupt:
        logger.info("✅ Stopped by user")
    except Exception as exc:
        logger.error("❌ Error: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
