"""Append-only catalog of court system slots keyed by slot id."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from reservations.models import SlotCatalogEntry
from reservations.queue.record_repository import JsonRecordRepository
from tracking import t

from .time_utils import normalize_time


class SlotCatalogStore:
    """Durable (amenity id, start time) to slot id mapping."""

    def __init__(
        self,
        file_path: str = 'data/slots.json',
        *,
        logger: Optional[logging.Logger] = None,
        repository: Optional[JsonRecordRepository] = None,
    ) -> None:
        t('reservations.slots.catalog_store.SlotCatalogStore.__init__')
        self.logger = logger or logging.getLogger('SlotCatalogStore')
        self.repository = repository or JsonRecordRepository(file_path, logger=self.logger)
        self._entries: Dict[str, SlotCatalogEntry] = {}

        for payload in self.repository.load():
            try:
                entry = SlotCatalogEntry.from_payload(payload)
            except (KeyError, TypeError) as exc:
                self.logger.warning("Skipping malformed slot record %s: %s", payload, exc)
                continue
            self._entries.setdefault(entry.slot_id, entry)
        self.logger.debug("Slot catalog loaded with %s entries", len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def find_by_resource_and_time(self, amenity_id: str, time: str) -> Optional[SlotCatalogEntry]:
        """Return the first entry for ``amenity_id`` starting at ``time``."""

        t('reservations.slots.catalog_store.SlotCatalogStore.find_by_resource_and_time')
        wanted = normalize_time(time)
        for entry in self._entries.values():
            if entry.amenity_id == amenity_id and entry.start_time == wanted:
                return entry
        return None

    def insert_if_absent(self, entry: SlotCatalogEntry) -> bool:
        """Store ``entry`` unless its slot id is already known.

        Returns:
            bool: True when the entry was new and has been written.

        Raises:
            StorageError: the new entry could not be written.
        """

        t('reservations.slots.catalog_store.SlotCatalogStore.insert_if_absent')
        if entry.slot_id in self._entries:
            self.logger.debug("Slot %s already exists, skipping", entry.slot_id)
            return False

        entries = dict(self._entries)
        entries[entry.slot_id] = entry
        self.repository.save(item.to_payload() for item in entries.values())
        self._entries = entries
        return True

    def all_entries(self) -> List[SlotCatalogEntry]:
        t('reservations.slots.catalog_store.SlotCatalogStore.all_entries')
        return list(self._entries.values())


__all__ = ['SlotCatalogStore']
