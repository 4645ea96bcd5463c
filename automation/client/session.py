"""Authenticated session held by a single court client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CourtSession:
    """Access token and account identifier returned by a successful login."""

    access_token: str
    account_id: str

    def bearer(self) -> str:
        return f"Bearer {self.access_token}"


__all__ = ['CourtSession']
