"""Resolve a court number and local time into court system identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from infrastructure.errors import ResolutionError
from tracking import t

from .catalog_store import SlotCatalogStore
from .time_utils import normalize_time


@dataclass(frozen=True)
class ResolvedSlot:
    """Identifiers needed for one registration call."""

    amenity_id: str
    slot_id: str


class BookingResolver:
    """Pure lookup over the static court mapping and the slot catalog.

    "Not found" covers both an unfetched catalog and a missing slot; callers
    tell them apart through the slot fetch coordinator.
    """

    def __init__(self, catalog: SlotCatalogStore, court_mapping: Mapping[int, str]) -> None:
        t('reservations.slots.resolver.BookingResolver.__init__')
        self.catalog = catalog
        self.court_mapping = dict(court_mapping)

    def amenity_for(self, court_number: int) -> Optional[str]:
        t('reservations.slots.resolver.BookingResolver.amenity_for')
        return self.court_mapping.get(court_number)

    def resolve(self, court_number: int, time: Optional[str]) -> Optional[ResolvedSlot]:
        t('reservations.slots.resolver.BookingResolver.resolve')
        amenity_id = self.amenity_for(court_number)
        if amenity_id is None or not time:
            return None
        entry = self.catalog.find_by_resource_and_time(amenity_id, normalize_time(time))
        if entry is None:
            return None
        return ResolvedSlot(amenity_id=amenity_id, slot_id=entry.slot_id)

    def require(self, court_number: int, time: Optional[str]) -> ResolvedSlot:
        """Like :meth:`resolve` but raises :class:`ResolutionError` on a miss."""

        t('reservations.slots.resolver.BookingResolver.require')
        if self.amenity_for(court_number) is None:
            raise ResolutionError(f"Unknown court number: {court_number}")
        resolved = self.resolve(court_number, time)
        if resolved is None:
            raise ResolutionError(f"Slot not found for time={time}, court={court_number}")
        return resolved


__all__ = ['BookingResolver', 'ResolvedSlot']
