"""Slot catalog storage and booking resolution."""

from .catalog_store import SlotCatalogStore
from .resolver import BookingResolver, ResolvedSlot
from .time_utils import normalize_time

__all__ = ['SlotCatalogStore', 'BookingResolver', 'ResolvedSlot', 'normalize_time']
