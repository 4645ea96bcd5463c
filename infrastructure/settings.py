"""Centralized application settings.

Every runtime value (credentials, court mapping, timing knobs, file
locations) is read here once and handed to components through
:class:`AppSettings`. Modules never call ``os.getenv`` directly.
"""

from __future__ import annotations
from tracking import t

import os
from dataclasses import dataclass, field
from datetime import time
from functools import lru_cache
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from . import constants


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    """Normalize environment strings such as "true"/"1" into booleans."""
    t('infrastructure.settings._to_bool')

    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: Optional[str], default: int) -> int:
    t('infrastructure.settings._to_int')

    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _to_float(value: Optional[str], default: float) -> float:
    t('infrastructure.settings._to_float')

    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return default


def parse_court_mapping(raw: Optional[str]) -> Dict[int, str]:
    """Parse ``"3:<amenity id>,4:<amenity id>"`` into a court mapping.

    Malformed pairs are ignored. An empty or missing value yields the
    built-in default mapping.
    """
    t('infrastructure.settings.parse_court_mapping')

    if not raw or not raw.strip():
        return dict(constants.DEFAULT_COURT_AMENITY_IDS)

    mapping: Dict[int, str] = {}
    for chunk in raw.split(','):
        court, sep, amenity_id = chunk.partition(':')
        if not sep:
            continue
        try:
            court_number = int(court.strip())
        except ValueError:
            continue
        amenity_id = amenity_id.strip()
        if amenity_id:
            mapping[court_number] = amenity_id
    return mapping or dict(constants.DEFAULT_COURT_AMENITY_IDS)


def _parse_clock(raw: Optional[str], default: str) -> time:
    t('infrastructure.settings._parse_clock')

    for candidate in (raw, default):
        if not candidate:
            continue
        hour, _, minute = candidate.strip().partition(':')
        try:
            return time(int(hour), int(minute or 0))
        except ValueError:
            continue
    return time(23, 57)


@dataclass(frozen=True)
class AppSettings:
    """Immutable snapshot of high-level configuration values."""

    bot_token: str
    production_mode: bool
    timezone: str
    court_api_base_url: str
    court_api_token: str
    court_auth_identifier: str
    court_booking_identifier: str
    court_username: str
    court_password: str
    booking_unit_id: str
    guest_count: int
    court_amenity_ids: Dict[int, str] = field(default_factory=dict)
    admin_chat_id: Optional[int] = None
    scan_interval_seconds: int = constants.SCAN_INTERVAL_SECONDS
    urgent_days_threshold: int = constants.URGENT_DAYS_THRESHOLD
    deadline_days_ahead: int = constants.DEADLINE_DAYS_AHEAD
    deadline_window_start: time = time(23, 57)
    slot_fetch_wait_seconds: float = constants.SLOT_FETCH_WAIT_SECONDS
    http_timeout_seconds: float = constants.DEFAULT_HTTP_TIMEOUT_SECONDS
    data_directory: str = "data"
    bookings_file: str = "data/bookings.json"
    slots_file: str = "data/slots.json"
    log_directory: str = "logs"

    @property
    def court_numbers(self) -> list[int]:
        return sorted(self.court_amenity_ids)


def load_settings(env: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Load configuration from the environment and fall back to defaults."""
    t('infrastructure.settings.load_settings')

    if env is None:
        load_dotenv(override=False)
        env = os.environ

    admin_raw = (env.get("ADMIN_CHAT_ID") or "").strip()
    admin_chat_id = _to_int(admin_raw, 0) if admin_raw else None

    data_directory = env.get("DATA_DIRECTORY", "data")

    return AppSettings(
        bot_token=env.get("TELEGRAM_BOT_TOKEN", ""),
        production_mode=_to_bool(env.get("PRODUCTION_MODE"), default=False),
        timezone=env.get("BOT_TIMEZONE", constants.DEFAULT_TIMEZONE),
        court_api_base_url=env.get("COURT_API_BASE_URL", constants.COURT_API_BASE_URL).rstrip('/'),
        court_api_token=env.get("COURT_API_TOKEN", ""),
        court_auth_identifier=env.get("COURT_AUTH_IDENTIFIER", ""),
        court_booking_identifier=env.get("COURT_BOOKING_IDENTIFIER", ""),
        court_username=(env.get("COURT_USERNAME") or "").strip(),
        court_password=(env.get("COURT_PASSWORD") or "").strip(),
        booking_unit_id=env.get("COURT_BOOKING_UNIT_ID", constants.DEFAULT_BOOKING_UNIT_ID),
        guest_count=_to_int(env.get("COURT_GUEST_COUNT"), constants.DEFAULT_GUEST_COUNT),
        court_amenity_ids=parse_court_mapping(env.get("COURT_AMENITY_IDS")),
        admin_chat_id=admin_chat_id,
        scan_interval_seconds=_to_int(env.get("SCAN_INTERVAL_SECONDS"), constants.SCAN_INTERVAL_SECONDS),
        urgent_days_threshold=_to_int(env.get("URGENT_DAYS_THRESHOLD"), constants.URGENT_DAYS_THRESHOLD),
        deadline_days_ahead=_to_int(env.get("DEADLINE_DAYS_AHEAD"), constants.DEADLINE_DAYS_AHEAD),
        deadline_window_start=_parse_clock(env.get("DEADLINE_WINDOW_START"), constants.DEADLINE_WINDOW_START),
        slot_fetch_wait_seconds=_to_float(env.get("SLOT_FETCH_WAIT_SECONDS"), constants.SLOT_FETCH_WAIT_SECONDS),
        http_timeout_seconds=_to_float(env.get("HTTP_TIMEOUT_SECONDS"), constants.DEFAULT_HTTP_TIMEOUT_SECONDS),
        data_directory=data_directory,
        bookings_file=env.get("BOOKINGS_FILE", os.path.join(data_directory, "bookings.json")),
        slots_file=env.get("SLOTS_FILE", os.path.join(data_directory, "slots.json")),
        log_directory=env.get("LOG_DIRECTORY", "logs"),
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached :class:`AppSettings` instance."""
    t('infrastructure.settings.get_settings')

    return load_settings()
