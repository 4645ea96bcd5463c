"""Shared fakes and utilities for unit tests."""

from __future__ import annotations
from tracking import t

from typing import Any, Dict, List, Tuple

from botapp.notifications import Notifier


class DummyLogger:
    """Lightweight stand-in for ``logging.Logger`` that records calls."""

    def __init__(self) -> None:
        t('tests.helpers.DummyLogger.__init__')
        self.records: List[Tuple[str, Tuple[Any, ...], Dict[str, Any]]] = []
        # ``entries`` is kept for compatibility with existing assertions.
        self.entries = self.records

    def _record(self, level: str, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger._record')
        self.records.append((level, args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.debug')
        self._record("debug", *args, **kwargs)

    def info(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.info')
        self._record("info", *args, **kwargs)

    def warning(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.warning')
        self._record("warning", *args, **kwargs)

    def error(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.error')
        self._record("error", *args, **kwargs)

    def critical(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.critical')
        self._record("critical", *args, **kwargs)

    def exception(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.exception')
        self._record("exception", *args, **kwargs)

    @property
    def messages(self) -> List[Tuple[str, Any]]:
        """Return formatted messages for quick assertions."""
        t('tests.helpers.DummyLogger.messages')

        formatted: List[Tuple[str, Any]] = []
        for level, args, kwargs in self.records:
            message: Any = kwargs.get("msg")
            if args:
                template = args[0]
                if isinstance(template, str) and len(args) > 1:
                    try:
                        message = template % args[1:]
                    except (TypeError, ValueError):
                        message = template
                else:
                    message = template
            formatted.append((level, message))
        return formatted

    def clear(self) -> None:
        t('tests.helpers.DummyLogger.clear')
        self.records.clear()

    def last(self, level: str | None = None) -> Tuple[str, Tuple[Any, ...], Dict[str, Any]] | None:
        """Return the most recent record, optionally filtered by level."""
        t('tests.helpers.DummyLogger.last')

        if not self.records:
            return None
        if level is None:
            return self.records[-1]
        for entry in reversed(self.records):
            if entry[0] == level:
                return entry
        return None


def make_settings(tmp_path=None, **overrides: Any):
    """Build ``AppSettings`` from a test environment plus field overrides."""
    t('tests.helpers.make_settings')

    from dataclasses import replace

    from infrastructure.settings import load_settings

    env = {
        "TELEGRAM_BOT_TOKEN": "test-token",
        "COURT_USERNAME": "player@example.com",
        "COURT_PASSWORD": "secret",
        "COURT_API_BASE_URL": "https://courts.test/api/v1",
        "COURT_API_TOKEN": "api-token",
        "COURT_AMENITY_IDS": "3:amenity-3,4:amenity-4",
    }
    if tmp_path is not None:
        env["DATA_DIRECTORY"] = str(tmp_path)
    settings = load_settings(env=env)
    return replace(settings, **overrides) if overrides else settings


class FixedClock:
    """Callable clock returning a settable aware datetime."""

    def __init__(self, now) -> None:
        t('tests.helpers.FixedClock.__init__')
        self.now = now

    def __call__(self):
        t('tests.helpers.FixedClock.__call__')
        return self.now


class RecordingSleeper:
    """Async sleep replacement that records delays and advances a clock."""

    def __init__(self, clock: FixedClock | None = None) -> None:
        t('tests.helpers.RecordingSleeper.__init__')
        self.delays: List[float] = []
        self.clock = clock

    async def __call__(self, delay: float) -> None:
        t('tests.helpers.RecordingSleeper.__call__')
        from datetime import timedelta

        self.delays.append(delay)
        if self.clock is not None:
            self.clock.now = self.clock.now + timedelta(seconds=delay)


class RecordingNotifier(Notifier):
    """Notifier that keeps every delivered message in memory."""

    def __init__(self, *, admin_chat_id: int | None = None, fail_for: Tuple[int, ...] = ()) -> None:
        t('tests.helpers.RecordingNotifier.__init__')
        super().__init__(admin_chat_id=admin_chat_id, logger=DummyLogger())
        self.sent: List[Tuple[int, str]] = []
        self.fail_for = set(fail_for)

    async def _send(self, recipient_id: int, text: str) -> None:
        t('tests.helpers.RecordingNotifier._send')
        if recipient_id in self.fail_for:
            raise RuntimeError("chat unreachable")
        self.sent.append((recipient_id, text))

    def messages_for(self, recipient_id: int) -> List[str]:
        t('tests.helpers.RecordingNotifier.messages_for')
        return [text for chat_id, text in self.sent if chat_id == recipient_id]


class FakeCourtClient:
    """In-memory stand-in for ``CourtClient`` with scripted responses."""

    def __init__(
        self,
        *,
        authenticated: bool = True,
        slots: Dict[str, list] | None = None,
        outcomes: List[Any] | None = None,
        fetch_error: Exception | None = None,
    ) -> None:
        t('tests.helpers.FakeCourtClient.__init__')
        self.authenticated = authenticated
        self.slots = slots or {}
        self.outcomes = list(outcomes or [])
        self.fetch_error = fetch_error
        self.auth_calls = 0
        self.fetch_calls: List[Tuple[Any, str]] = []
        self.book_calls: List[Tuple[Any, str, str]] = []

    async def authenticate(self) -> bool:
        t('tests.helpers.FakeCourtClient.authenticate')
        self.auth_calls += 1
        return self.authenticated

    async def fetch_slots(self, target_date, amenity_id: str) -> list:
        t('tests.helpers.FakeCourtClient.fetch_slots')
        self.fetch_calls.append((target_date, amenity_id))
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.slots.get(amenity_id, []))

    async def book(self, target_date, slot_id: str, amenity_id: str):
        t('tests.helpers.FakeCourtClient.book')
        from automation.shared.booking_contracts import BookingOutcome

        self.book_calls.append((target_date, slot_id, amenity_id))
        if not self.outcomes:
            return BookingOutcome.success()
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def aclose(self) -> None:
        t('tests.helpers.FakeCourtClient.aclose')
