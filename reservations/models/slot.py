"""Slot catalog entry as stored after a fetch cycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class SlotCatalogEntry:
    """One court system slot with normalized ``HH:MM`` times."""

    slot_id: str
    amenity_id: str
    start_time: str
    end_time: str

    @property
    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"

    def to_payload(self) -> Dict[str, Any]:
        return {
            'slot_id': self.slot_id,
            'amenity_id': self.amenity_id,
            'start_time': self.start_time,
            'end_time': self.end_time,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SlotCatalogEntry":
        return cls(
            slot_id=str(payload['slot_id']),
            amenity_id=str(payload['amenity_id']),
            start_time=str(payload['start_time']),
            end_time=str(payload['end_time']),
        )


__all__ = ['SlotCatalogEntry']
