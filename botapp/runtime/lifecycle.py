"""Start and stop the background work that runs beside Telegram polling."""

from __future__ import annotations
from tracking import t

import asyncio
import logging
from typing import Optional

from botapp.bootstrap import BotDependencies

METRICS_INTERVAL_SECONDS = 300


async def _cancel(task: Optional[asyncio.Task]) -> None:
    """Cancel ``task`` and wait until it has unwound."""
    t('botapp.runtime.lifecycle._cancel')
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


class LifecycleManager:
    """Own the scheduler and metrics tasks for one Application run."""

    def __init__(
        self,
        dependencies: BotDependencies,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('botapp.runtime.lifecycle.LifecycleManager.__init__')
        self.dependencies = dependencies
        self.logger = logger or logging.getLogger('LifecycleManager')
        self.application = None
        self.scheduler_task: Optional[asyncio.Task] = None
        self.metrics_task: Optional[asyncio.Task] = None

    async def post_init(self, application) -> None:
        """Application hook: hand the bot to the notifier, then start the loops."""

        t('botapp.runtime.lifecycle.LifecycleManager.post_init')
        self.application = application
        self.dependencies.notifier.bot = application.bot

        self.scheduler_task = asyncio.create_task(self.dependencies.scheduler.run_async())
        self.metrics_task = asyncio.create_task(self._metrics_loop())
        self.logger.info(f"""BOT RUNTIME STARTED
        Courts: {', '.join(str(court) for court in self.dependencies.settings.court_numbers)}
        Timezone: {self.dependencies.settings.timezone}
        Scan interval: {self.dependencies.settings.scan_interval_seconds}s
        Admin chat: {self.dependencies.notifier.admin_chat_id or 'not registered'}
        """)

    async def post_stop(self, application) -> None:
        """Application hook: stop the loops, pending slot fetches and the HTTP client."""

        t('botapp.runtime.lifecycle.LifecycleManager.post_stop')
        self.logger.info("🔴 Shutting down bot runtime...")

        await _cancel(self.metrics_task)
        self.metrics_task = None

        scheduler = self.dependencies.scheduler
        scheduler.running = False
        await _cancel(self.scheduler_task)
        self.scheduler_task = None
        await scheduler.stop()
        self.logger.info("✅ Booking scheduler and slot fetches stopped")

        try:
            await self.dependencies.court_client.aclose()
        except Exception as exc:  # pragma: no cover - defensive guard
            self.logger.error("❌ Error closing court API client: %s", exc)

        await self.log_metrics()
        self.application = None
        self.logger.info("✅ Bot runtime shut down")

    async def log_metrics(self) -> None:
        """Log pending bookings, catalog size and scheduler counters."""

        t('botapp.runtime.lifecycle.LifecycleManager.log_metrics')
        report = self.dependencies.scheduler.stats.format_report()
        self.logger.info(
            "=== BOT METRICS REPORT ===\n"
            f"📋 Pending bookings: {len(self.dependencies.booking_store.find_pending())}\n"
            f"🎾 Catalog slots: {len(self.dependencies.slot_catalog)}\n"
            f"{report}\n"
            "=========================="
        )

    async def _metrics_loop(self) -> None:
        t('botapp.runtime.lifecycle.LifecycleManager._metrics_loop')
        while True:
            try:
                await self.log_metrics()
            except Exception as exc:  # pragma: no cover - defensive guard
                self.logger.error("Error collecting bot metrics: %s", exc, exc_info=True)
            await asyncio.sleep(METRICS_INTERVAL_SECONDS)


__all__ = ['LifecycleManager']
