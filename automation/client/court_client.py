"""Async client for the court system's login, slot, and registration endpoints.

Every public call makes at most one HTTP request. The client never retries;
the scheduler decides what happens after a failed attempt.
"""

from __future__ import annotations
from tracking import t

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

import httpx

from automation.shared.booking_contracts import BookingOutcome, SlotInfo
from infrastructure import constants
from infrastructure.errors import AuthenticationError, RemoteError
from infrastructure.settings import AppSettings

from .session import CourtSession

DateLike = Union[date, str]


def _format_date(value: DateLike) -> str:
    t('automation.client.court_client._format_date')
    if isinstance(value, date):
        return value.strftime(constants.DATE_FORMAT)
    return str(value)


class CourtClient:
    """Own one authenticated session against the court system."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('automation.client.court_client.CourtClient.__init__')
        self.settings = settings
        self.logger = logger or logging.getLogger('CourtClient')
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        self._session: Optional[CourtSession] = None

    @property
    def session(self) -> Optional[CourtSession]:
        return self._session

    @property
    def court_mapping(self) -> Dict[int, str]:
        """Court number to amenity id mapping used for every fetch and booking."""
        t('automation.client.court_client.CourtClient.court_mapping')
        return dict(self.settings.court_amenity_ids)

    def _url(self, path: str) -> str:
        return f"{self.settings.court_api_base_url}{path}"

    def _headers(self, identifier: str, session: Optional[CourtSession] = None) -> Dict[str, str]:
        t('automation.client.court_client.CourtClient._headers')
        headers = dict(constants.PORTAL_HEADERS)
        headers['api-token'] = self.settings.court_api_token
        headers['x-custom-identifier'] = identifier
        if session is not None:
            headers['authorization'] = session.bearer()
        return headers

    async def authenticate(self) -> bool:
        """Log in and replace the session only when the response carries a token and account id."""

        t('automation.client.court_client.CourtClient.authenticate')
        username = self.settings.court_username
        password = self.settings.court_password
        if not username or not password:
            self.logger.error(
                "Username or password is empty; username=%r, password length=%s",
                username,
                len(password),
            )
            return False

        body = {'user_name': username, 'password': password, **constants.LOGIN_DEVICE_FIELDS}
        self.logger.info("Attempting to authenticate with username: %s", username)

        try:
            response = await self._http.post(
                self._url(constants.LOGIN_PATH),
                json=body,
                headers=self._headers(self.settings.court_auth_identifier),
            )
        except httpx.HTTPError as exc:
            self.logger.error("Authentication error: %s", exc)
            return False

        if not response.is_success:
            self.logger.error(
                "Authentication failed with status: %s %s",
                response.status_code,
                response.reason_phrase,
            )
            return False

        try:
            payload = response.json()
        except ValueError as exc:
            self.logger.error("Authentication response was not JSON: %s", exc)
            return False

        party = self._extract_party(payload)
        access_token = party.get('access_token')
        account_id = party.get('account_id')
        if not access_token or not account_id:
            self.logger.error("Authentication failed: No token or account_id in response")
            return False

        self._session = CourtSession(access_token=str(access_token), account_id=str(account_id))
        self.logger.info(
            "Authentication successful for user: %s, account_id: %s",
            party.get('customer_name'),
            account_id,
        )
        return True

    @staticmethod
    def _extract_party(payload: Any) -> Dict[str, Any]:
        t('automation.client.court_client.CourtClient._extract_party')
        if not isinstance(payload, dict):
            return {}
        data = payload.get('data')
        if not isinstance(data, dict):
            return {}
        party = data.get('party')
        return party if isinstance(party, dict) else {}

    async def fetch_slots(self, target_date: DateLike, amenity_id: str) -> List[SlotInfo]:
        """Return the slots the court system lists for ``amenity_id`` on ``target_date``.

        Requires an existing session; callers authenticate first.

        Raises:
            AuthenticationError: no session has been established.
            RemoteError: transport failure or a non-success status other than 204.
        """

        t('automation.client.court_client.CourtClient.fetch_slots')
        session = self._session
        if session is None:
            raise AuthenticationError("No active session; authenticate before fetching slots")

        booking_date = _format_date(target_date)
        try:
            response = await self._http.get(
                self._url(constants.SLOTS_PATH),
                params={'amenity_id': amenity_id, 'booking_date': booking_date},
                headers=self._headers(self.settings.court_booking_identifier, session),
            )
        except httpx.HTTPError as exc:
            raise RemoteError(f"Slot fetch error: {exc}") from exc

        if response.status_code == 204:
            return []
        if not response.is_success:
            raise RemoteError(
                f"Slot fetch failed with status: {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return []

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteError(f"Slot fetch returned invalid JSON: {exc}") from exc

        slots = self._parse_slots(payload)
        self.logger.debug(
            "Fetched %s slots for amenity %s on %s", len(slots), amenity_id, booking_date
        )
        return slots

    def _parse_slots(self, payload: Any) -> List[SlotInfo]:
        t('automation.client.court_client.CourtClient._parse_slots')
        data = payload.get('data') if isinstance(payload, dict) else payload
        if isinstance(data, dict):
            data = data.get('slots') or data.get('amenity_slots') or []
        if not isinstance(data, list):
            return []

        slots: List[SlotInfo] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            slot_id = entry.get('id') or entry.get('slot_id')
            start_time = entry.get('start_time')
            end_time = entry.get('end_time')
            if not slot_id or not start_time or not end_time:
                self.logger.warning("Skipping incomplete slot entry: %s", entry)
                continue
            slots.append(SlotInfo(id=str(slot_id), start_time=str(start_time), end_time=str(end_time)))
        return slots

    async def book(self, target_date: DateLike, slot_id: str, amenity_id: str) -> BookingOutcome:
        """Register one slot and classify the response into a :class:`BookingOutcome`."""

        t('automation.client.court_client.CourtClient.book')
        booking_date = _format_date(target_date)
        self.logger.info(
            "Attempting to book slot %s (amenity %s) for %s", slot_id, amenity_id, booking_date
        )

        if self._session is None and not await self.authenticate():
            return BookingOutcome.error("Authentication failed")
        session = self._session

        body = {
            'origin': constants.BOOKING_ORIGIN,
            'fm_case_id': '',
            'account_id': session.account_id,
            'booking_unit_id': self.settings.booking_unit_id,
            'amenity_id': amenity_id,
            'amenity_slot_id': slot_id,
            'booking_date': booking_date,
            'no_of_guest': self.settings.guest_count,
            'comments': '',
        }

        try:
            response = await self._http.post(
                self._url(constants.REGISTRATION_PATH),
                json=body,
                headers=self._headers(self.settings.court_booking_identifier, session),
            )
        except httpx.HTTPError as exc:
            self.logger.error("Booking error: %s", exc)
            return BookingOutcome.error(f"Booking error: {exc}")

        if response.is_success:
            self.logger.info("Booking successful for %s", booking_date)
            return BookingOutcome.success()
        if response.status_code == 409:
            self.logger.warning("Court already booked for %s", booking_date)
            return BookingOutcome.already_booked()

        self.logger.error(
            "Booking failed with status: %s %s", response.status_code, response.reason_phrase
        )
        return BookingOutcome.error(f"Booking failed with status: {response.status_code}")

    async def aclose(self) -> None:
        t('automation.client.court_client.CourtClient.aclose')
        if self._owns_http:
            await self._http.aclose()


__all__ = ['CourtClient']
