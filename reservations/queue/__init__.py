"""Booking storage, slot fetching, and scheduling services."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .booking_scheduler import BookingScheduler
    from .booking_store import BookingStore
    from .slot_fetcher import SlotFetchCoordinator, SlotFetcher, SlotFetchState

__all__ = [
    "BookingStore",
    "BookingScheduler",
    "SlotFetchCoordinator",
    "SlotFetcher",
    "SlotFetchState",
]


def __getattr__(name: str):
    if name == "BookingStore":
        module = import_module("reservations.queue.booking_store")
    elif name == "BookingScheduler":
        module = import_module("reservations.queue.booking_scheduler")
    elif name in {"SlotFetchCoordinator", "SlotFetcher", "SlotFetchState"}:
        module = import_module("reservations.queue.slot_fetcher")
    else:
        raise AttributeError(name)
    return getattr(module, name)
