"""One-shot slot catalog fetch for a single target date.

A :class:`SlotFetcher` waits for local midnight, logs in, pulls the slot list
for every configured court, and inserts unseen slots into the catalog. Its
completion event is set on every exit path so bookings waiting on the catalog
are never blocked for good. :class:`SlotFetchCoordinator` keeps at most one
fetcher per date.
"""

from __future__ import annotations
from tracking import t

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from botapp.notifications import NotificationBuilder
from reservations.models import SlotCatalogEntry
from reservations.queue.scheduler.timing import Clock, Sleeper, next_midnight, wait_until
from reservations.slots.catalog_store import SlotCatalogStore
from reservations.slots.time_utils import normalize_time


class SlotFetchState(Enum):
    """Lifecycle of one fetch cycle; DONE and FAILED are terminal."""

    IDLE = "idle"
    WAITING_FOR_DEADLINE = "waiting_for_deadline"
    FETCHING = "fetching"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SlotFetchSummary:
    """What one fetch cycle stored, for the admin report."""

    target_date: date
    slots_by_court: Dict[int, List[str]] = field(default_factory=dict)
    new_slots: int = 0


class SlotFetcher:
    """Fetch and store the slot catalog for ``target_date`` exactly once."""

    def __init__(
        self,
        target_date: date,
        *,
        client,
        catalog: SlotCatalogStore,
        notifier,
        court_mapping: Mapping[int, str],
        timezone,
        clock: Clock,
        sleep: Sleeper = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
        messages: Optional[NotificationBuilder] = None,
    ) -> None:
        t('reservations.queue.slot_fetcher.SlotFetcher.__init__')
        self.target_date = target_date
        self.client = client
        self.catalog = catalog
        self.notifier = notifier
        self.court_mapping = dict(court_mapping)
        self.timezone = timezone
        self.clock = clock
        self.sleep = sleep
        self.logger = logger or logging.getLogger('SlotFetcher')
        self.messages = messages or NotificationBuilder()
        self.state = SlotFetchState.IDLE
        self.summary: Optional[SlotFetchSummary] = None
        self.error: Optional[str] = None
        self.completed = asyncio.Event()

    @property
    def is_complete(self) -> bool:
        return self.completed.is_set()

    async def run(self, *, wait_for_deadline: bool = True) -> SlotFetchState:
        """Drive the fetch cycle to a terminal state and return it."""

        t('reservations.queue.slot_fetcher.SlotFetcher.run')
        if self.state is not SlotFetchState.IDLE:
            self.logger.warning(
                "Slot fetch for %s already %s; not running again",
                self.target_date,
                self.state.value,
            )
            return self.state

        try:
            if wait_for_deadline:
                self.state = SlotFetchState.WAITING_FOR_DEADLINE
                deadline = next_midnight(self.clock(), self.timezone)
                self.logger.info(
                    "Scheduling slot fetch for %s at %s", self.target_date, deadline.isoformat()
                )
                await wait_until(deadline, clock=self.clock, sleep=self.sleep)

            self.state = SlotFetchState.FETCHING
            self.logger.info("Fetching slots for %s", self.target_date)

            if not await self.client.authenticate():
                self.logger.error("Authentication failed, cannot fetch slots")
                await self._fail("authentication failed")
                return self.state

            self.summary = await self._fetch_all()
            self.state = SlotFetchState.DONE
        except Exception as exc:
            self.logger.error("Error during slot fetch for %s: %s", self.target_date, exc, exc_info=True)
            await self._fail(str(exc) or type(exc).__name__)
            return self.state
        finally:
            if self.state in (SlotFetchState.WAITING_FOR_DEADLINE, SlotFetchState.FETCHING):
                # cancelled mid-cycle
                self.state = SlotFetchState.FAILED
                self.error = self.error or "cancelled"
            self.completed.set()

        self.logger.info(
            "Slot fetch completed: saved %s new slots for %s", self.summary.new_slots, self.target_date
        )
        await self.notifier.notify_admin(self.messages.slot_summary(self.summary))
        return self.state

    async def _fetch_all(self) -> SlotFetchSummary:
        t('reservations.queue.slot_fetcher.SlotFetcher._fetch_all')
        summary = SlotFetchSummary(target_date=self.target_date)
        for court_number, amenity_id in sorted(self.court_mapping.items()):
            slots = await self.client.fetch_slots(self.target_date, amenity_id)
            self.logger.info("Court %s: fetched %s slots", court_number, len(slots))

            labels: List[str] = []
            for slot in slots:
                entry = SlotCatalogEntry(
                    slot_id=slot.id,
                    amenity_id=amenity_id,
                    start_time=normalize_time(slot.start_time),
                    end_time=normalize_time(slot.end_time),
                )
                if self.catalog.insert_if_absent(entry):
                    summary.new_slots += 1
                labels.append(entry.label)
            summary.slots_by_court[court_number] = labels
        return summary

    async def _fail(self, reason: str) -> None:
        t('reservations.queue.slot_fetcher.SlotFetcher._fail')
        self.state = SlotFetchState.FAILED
        self.error = reason
        self.completed.set()
        await self.notifier.notify_admin(
            self.messages.slot_fetch_failed(self.target_date, reason)
        )


class SlotFetchCoordinator:
    """Keep at most one slot fetcher per target date and expose its signal."""

    def __init__(
        self,
        *,
        client,
        catalog: SlotCatalogStore,
        notifier,
        court_mapping: Mapping[int, str],
        timezone,
        clock: Clock,
        sleep: Sleeper = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('reservations.queue.slot_fetcher.SlotFetchCoordinator.__init__')
        self.client = client
        self.catalog = catalog
        self.notifier = notifier
        self.court_mapping = dict(court_mapping)
        self.timezone = timezone
        self.clock = clock
        self.sleep = sleep
        self.logger = logger or logging.getLogger('SlotFetchCoordinator')
        self._fetchers: Dict[date, SlotFetcher] = {}
        self._tasks: Dict[date, asyncio.Task] = {}

    def _build(self, target_date: date) -> SlotFetcher:
        t('reservations.queue.slot_fetcher.SlotFetchCoordinator._build')
        return SlotFetcher(
            target_date,
            client=self.client,
            catalog=self.catalog,
            notifier=self.notifier,
            court_mapping=self.court_mapping,
            timezone=self.timezone,
            clock=self.clock,
            sleep=self.sleep,
        )

    def get(self, target_date: date) -> Optional[SlotFetcher]:
        t('reservations.queue.slot_fetcher.SlotFetchCoordinator.get')
        return self._fetchers.get(target_date)

    def schedule(self, target_date: date, *, wait_for_deadline: bool = True) -> SlotFetcher:
        """Start a background fetch for ``target_date`` unless one already exists."""

        t('reservations.queue.slot_fetcher.SlotFetchCoordinator.schedule')
        self._prune()
        existing = self._fetchers.get(target_date)
        if existing is not None:
            self.logger.debug("Slot fetch for %s already scheduled (%s)", target_date, existing.state.value)
            return existing

        fetcher = self._build(target_date)
        self._fetchers[target_date] = fetcher
        self._tasks[target_date] = asyncio.create_task(
            fetcher.run(wait_for_deadline=wait_for_deadline)
        )
        self.logger.info("Slot fetch scheduled for %s", target_date)
        return fetcher

    def _prune(self) -> None:
        """Forget finished fetches for dates that are already in the past."""

        t('reservations.queue.slot_fetcher.SlotFetchCoordinator._prune')
        now = self.clock()
        today = (now.astimezone(self.timezone) if now.tzinfo else now).date()
        for target_date in [d for d in self._fetchers if d < today]:
            task = self._tasks.get(target_date)
            if task is not None and not task.done():
                continue
            del self._fetchers[target_date]
            self._tasks.pop(target_date, None)

    async def run_now(self, target_date: date) -> SlotFetcher:
        """Fetch ``target_date`` immediately.

        A fetch already talking to the server is joined. One still waiting for
        midnight stays registered and runs again then; repeated inserts add nothing.
        """

        t('reservations.queue.slot_fetcher.SlotFetchCoordinator.run_now')
        existing = self._fetchers.get(target_date)
        if existing is not None and existing.state is SlotFetchState.FETCHING:
            await existing.completed.wait()
            return existing

        fetcher = self._build(target_date)
        waiting = existing is not None and not existing.is_complete
        if not waiting:
            self._fetchers[target_date] = fetcher
        await fetcher.run(wait_for_deadline=False)
        return fetcher

    def is_complete(self, target_date: date) -> bool:
        t('reservations.queue.slot_fetcher.SlotFetchCoordinator.is_complete')
        fetcher = self._fetchers.get(target_date)
        return fetcher is not None and fetcher.is_complete

    async def wait_for_completion(self, dates: Iterable[date], timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for in-flight fetches of ``dates``.

        Returns True when nothing is pending or everything finished in time.
        """

        t('reservations.queue.slot_fetcher.SlotFetchCoordinator.wait_for_completion')
        pending = []
        for target_date in set(dates):
            fetcher = self._fetchers.get(target_date)
            if fetcher is not None and not fetcher.is_complete:
                pending.append(fetcher)
        if not pending:
            return True

        self.logger.info("Waiting for slot fetch to complete...")
        try:
            await asyncio.wait_for(
                asyncio.gather(*(fetcher.completed.wait() for fetcher in pending)),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                "Slot fetch did not complete within %s seconds, proceeding anyway", timeout
            )
            return False
        self.logger.info("Slot fetch completed, proceeding with bookings")
        return True

    async def cancel_all(self) -> None:
        t('reservations.queue.slot_fetcher.SlotFetchCoordinator.cancel_all')
        tasks = [task for task in self._tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks.clear()


__all__ = ['SlotFetchState', 'SlotFetchSummary', 'SlotFetcher', 'SlotFetchCoordinator']
