"""Shared booking outcome and slot contracts for the client, fetcher, and scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutcomeKind(Enum):
    """The only outcome kinds a booking attempt can produce."""

    SUCCESS = "success"
    ALREADY_BOOKED = "already_booked"
    ERROR = "error"


@dataclass(frozen=True)
class BookingOutcome:
    """Result of one remote booking attempt with a human-readable message."""

    kind: OutcomeKind
    message: str

    @classmethod
    def success(cls, message: str = "Court booked successfully") -> "BookingOutcome":
        return cls(OutcomeKind.SUCCESS, message)

    @classmethod
    def already_booked(cls, message: str = "Court already booked") -> "BookingOutcome":
        return cls(OutcomeKind.ALREADY_BOOKED, message)

    @classmethod
    def error(cls, message: str) -> "BookingOutcome":
        return cls(OutcomeKind.ERROR, message)

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


@dataclass(frozen=True)
class SlotInfo:
    """A bookable slot exactly as the court system reports it."""

    id: str
    start_time: str
    end_time: str


__all__ = ['OutcomeKind', 'BookingOutcome', 'SlotInfo']
