"""Telegram bot runtime application wiring."""

from __future__ import annotations
from tracking import t

import logging
from typing import Any, Dict, Optional

from telegram.ext import Application

from botapp.bootstrap.container import DependencyContainer
from botapp.commands import CommandHandlers, register_core_handlers
from botapp.runtime.lifecycle import LifecycleManager
from infrastructure.settings import AppSettings, get_settings


class BotApplication:
    """Assemble dependencies and handlers for the Telegram bot runtime."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        *,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        t('botapp.runtime.bot_application.BotApplication.__init__')
        self.logger = logging.getLogger('CourtBot')
        self.settings = settings or get_settings()
        self.token = self.settings.bot_token
        self.container = DependencyContainer(self.settings, overrides=overrides)
        self.dependencies = self.container.build_dependencies()
        self.handlers = CommandHandlers(self.dependencies)
        self.lifecycle = LifecycleManager(self.dependencies, logger=self.logger)
        self.application: Optional[Application] = None

    def build_application(self) -> Application:
        """Create the python-telegram-bot application with handlers and hooks."""
        t('botapp.runtime.bot_application.BotApplication.build_application')

        app = (
            Application.builder()
            .token(self.token)
            .post_init(self.lifecycle.post_init)
            .post_stop(self.lifecycle.post_stop)
            .build()
        )
        register_core_handlers(app, self.handlers)
        self.application = app
        return app

    def run(self) -> None:
        """Run the Telegram bot with long polling until interrupted."""
        t('botapp.runtime.bot_application.BotApplication.run')

        app = self.build_application()
        self.logger.info(
            "Starting bot (courts %s, timezone %s, production=%s)...",
            ', '.join(str(court) for court in self.settings.court_numbers),
            self.settings.timezone,
            self.settings.production_mode,
        )
        app.run_polling()


__all__ = ['BotApplication']
