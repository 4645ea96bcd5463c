"""Time helpers shared by the slot fetcher, resolver, and bot validation."""

from __future__ import annotations

from typing import Optional

from tracking import t


def normalize_time(value: Optional[str]) -> Optional[str]:
    """Return ``value`` as zero-padded ``HH:MM``.

    ``"6:0"``, ``"06:00"`` and ``"6:00:00"`` all become ``"06:00"``. Values
    without a colon are returned stripped but otherwise unchanged.
    """

    t('reservations.slots.time_utils.normalize_time')
    if value is None:
        return None
    parts = str(value).strip().split(':')
    if len(parts) >= 2:
        hour = parts[0].strip().zfill(2)
        minute = parts[1].strip().zfill(2)
        return f"{hour}:{minute}"
    return str(value).strip()
