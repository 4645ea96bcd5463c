"""Dependency container wiring bot runtime components together."""

from __future__ import annotations
from tracking import t

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import pytz

from automation.client import CourtClient
from botapp.notifications import TelegramNotifier
from infrastructure.settings import AppSettings
from reservations.queue.booking_scheduler import BookingScheduler
from reservations.queue.booking_store import BookingStore
from reservations.queue.slot_fetcher import SlotFetchCoordinator
from reservations.slots import BookingResolver, SlotCatalogStore


@dataclass(frozen=True)
class BotDependencies:
    """Concrete dependency snapshot for the Telegram bot runtime."""

    settings: AppSettings
    court_client: CourtClient
    booking_store: BookingStore
    slot_catalog: SlotCatalogStore
    resolver: BookingResolver
    notifier: TelegramNotifier
    slot_fetches: SlotFetchCoordinator
    scheduler: BookingScheduler

    def as_dict(self) -> Dict[str, Any]:
        """Return dependencies as a mapping keyed by attribute name."""
        t('botapp.bootstrap.container.BotDependencies.as_dict')

        return {
            'settings': self.settings,
            'court_client': self.court_client,
            'booking_store': self.booking_store,
            'slot_catalog': self.slot_catalog,
            'resolver': self.resolver,
            'notifier': self.notifier,
            'slot_fetches': self.slot_fetches,
            'scheduler': self.scheduler,
        }


class DependencyContainer:
    """Lazy dependency container with optional override support."""

    def __init__(
        self,
        settings: AppSettings,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        t('botapp.bootstrap.container.DependencyContainer.__init__')
        self.settings = settings
        self.timezone = pytz.timezone(settings.timezone)
        self._cache: Dict[str, Any] = {}
        if overrides:
            self._cache.update(overrides)

    # ------------------------------------------------------------------
    # Internal helpers
    def _resolve(self, key: str, factory: Callable[[], Any]) -> Any:
        t('botapp.bootstrap.container.DependencyContainer._resolve')
        if key not in self._cache:
            self._cache[key] = factory()
        return self._cache[key]

    def clock(self) -> datetime:
        """Current time in the operating timezone."""
        return datetime.now(self.timezone)

    # ------------------------------------------------------------------
    # Core dependencies
    @property
    def court_client(self) -> CourtClient:
        t('botapp.bootstrap.container.DependencyContainer.court_client')
        return self._resolve('court_client', lambda: CourtClient(self.settings))

    @property
    def booking_store(self) -> BookingStore:
        t('botapp.bootstrap.container.DependencyContainer.booking_store')
        return self._resolve('booking_store', lambda: BookingStore(self.settings.bookings_file))

    @property
    def slot_catalog(self) -> SlotCatalogStore:
        t('botapp.bootstrap.container.DependencyContainer.slot_catalog')
        return self._resolve('slot_catalog', lambda: SlotCatalogStore(self.settings.slots_file))

    @property
    def resolver(self) -> BookingResolver:
        t('botapp.bootstrap.container.DependencyContainer.resolver')
        return self._resolve(
            'resolver',
            lambda: BookingResolver(self.slot_catalog, self.settings.court_amenity_ids),
        )

    @property
    def notifier(self) -> TelegramNotifier:
        t('botapp.bootstrap.container.DependencyContainer.notifier')
        return self._resolve(
            'notifier',
            lambda: TelegramNotifier(admin_chat_id=self.settings.admin_chat_id),
        )

    @property
    def slot_fetches(self) -> SlotFetchCoordinator:
        t('botapp.bootstrap.container.DependencyContainer.slot_fetches')

        def factory() -> SlotFetchCoordinator:
            t('botapp.bootstrap.container.DependencyContainer.slot_fetches.factory')
            return SlotFetchCoordinator(
                client=self.court_client,
                catalog=self.slot_catalog,
                notifier=self.notifier,
                court_mapping=self.settings.court_amenity_ids,
                timezone=self.timezone,
                clock=self.clock,
            )

        return self._resolve('slot_fetches', factory)

    @property
    def scheduler(self) -> BookingScheduler:
        t('botapp.bootstrap.container.DependencyContainer.scheduler')

        def factory() -> BookingScheduler:
            t('botapp.bootstrap.container.DependencyContainer.scheduler.factory')
            return BookingScheduler(
                store=self.booking_store,
                resolver=self.resolver,
                client=self.court_client,
                notifier=self.notifier,
                slot_fetches=self.slot_fetches,
                settings=self.settings,
                clock=self.clock,
            )

        return self._resolve('scheduler', factory)

    def build_dependencies(self) -> BotDependencies:
        """Return a frozen snapshot of every runtime component."""
        t('botapp.bootstrap.container.DependencyContainer.build_dependencies')

        return BotDependencies(
            settings=self.settings,
            court_client=self.court_client,
            booking_store=self.booking_store,
            slot_catalog=self.slot_catalog,
            resolver=self.resolver,
            notifier=self.notifier,
            slot_fetches=self.slot_fetches,
            scheduler=self.scheduler,
        )


__all__ = ['BotDependencies', 'DependencyContainer']
