"""Booking request record and its status state machine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from infrastructure import constants


class BookingStatus(Enum):
    """Booking status states; completed and failed are terminal."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not BookingStatus.PENDING


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


@dataclass(frozen=True)
class BookingRequest:
    """A user's request to book one court slot on a target date."""

    booking_id: int
    user_id: int
    target_date: date
    target_time: Optional[str]
    court_number: int = constants.DEFAULT_COURT_NUMBER
    created_at: Optional[datetime] = None
    status: BookingStatus = BookingStatus.PENDING
    status_reason: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status is BookingStatus.PENDING

    def with_status(
        self,
        status: BookingStatus,
        reason: Optional[str] = None,
        *,
        updated_at: Optional[datetime] = None,
    ) -> "BookingRequest":
        """Return a copy carrying ``status``; terminal records never change."""

        if self.status.is_terminal:
            raise ValueError(
                f"Booking #{self.booking_id} is already {self.status.value}"
            )
        return replace(
            self,
            status=status,
            status_reason=reason,
            updated_at=updated_at or datetime.now(timezone.utc),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            'id': self.booking_id,
            'user_id': self.user_id,
            'target_date': self.target_date.strftime(constants.DATE_FORMAT),
            'target_time': self.target_time,
            'court_number': self.court_number,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'status': self.status.value,
            'status_reason': self.status_reason,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BookingRequest":
        """Hydrate a record written by :meth:`to_payload`.

        Raises:
            KeyError / ValueError: when required fields are missing or malformed.
        """

        return cls(
            booking_id=int(payload['id']),
            user_id=int(payload['user_id']),
            target_date=datetime.strptime(payload['target_date'], constants.DATE_FORMAT).date(),
            target_time=payload.get('target_time') or None,
            court_number=int(payload.get('court_number') or constants.DEFAULT_COURT_NUMBER),
            created_at=_parse_datetime(payload.get('created_at')),
            status=BookingStatus(payload.get('status', BookingStatus.PENDING.value)),
            status_reason=payload.get('status_reason'),
            updated_at=_parse_datetime(payload.get('updated_at')),
        )


__all__ = ['BookingStatus', 'BookingRequest']
