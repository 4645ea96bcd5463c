from tracking import t
from datetime import date, datetime
from types import SimpleNamespace

import pytest
import pytz

from automation.shared.booking_contracts import BookingOutcome
from botapp.commands import CommandHandlers, register_core_handlers
from infrastructure.errors import ResolutionError
from reservations.models import BookingRequest, BookingStatus
from reservations.queue.booking_store import BookingStore
from tests.helpers import DummyLogger, FakeCourtClient, RecordingNotifier, make_settings

DUBAI = pytz.timezone("Asia/Dubai")
NOW = DUBAI.localize(datetime(2025, 10, 20, 10, 0))


class StubScheduler:
    def __init__(self, outcome=None, error=None):
        t('tests.unit.test_command_handlers.StubScheduler.__init__')
        self.outcome = outcome or BookingOutcome.success()
        self.error = error
        self.calls = []

    def clock(self):
        t('tests.unit.test_command_handlers.StubScheduler.clock')
        return NOW

    async def book_now(self, target_date, target_time, court_number):
        t('tests.unit.test_command_handlers.StubScheduler.book_now')
        self.calls.append((target_date, target_time, court_number))
        if self.error is not None:
            raise self.error
        return self.outcome


class StubFetches:
    def __init__(self):
        t('tests.unit.test_command_handlers.StubFetches.__init__')
        self.run_now_calls = []

    async def run_now(self, target_date):
        t('tests.unit.test_command_handlers.StubFetches.run_now')
        self.run_now_calls.append(target_date)


def _handlers(tmp_path, *, scheduler=None, admin_chat_id=None, **settings_overrides):
    t('tests.unit.test_command_handlers._handlers')
    settings = make_settings(tmp_path, admin_chat_id=admin_chat_id, **settings_overrides)
    dependencies = SimpleNamespace(
        settings=settings,
        booking_store=BookingStore(str(tmp_path / "bookings.json"), logger=DummyLogger()),
        court_client=FakeCourtClient(),
        notifier=RecordingNotifier(admin_chat_id=admin_chat_id),
        scheduler=scheduler or StubScheduler(),
        slot_fetches=StubFetches(),
    )
    return CommandHandlers(dependencies, logger=DummyLogger()), dependencies


def _update(user_id=42, chat_id=None):
    t('tests.unit.test_command_handlers._update')
    replies = []

    async def reply_text(text, **kwargs):
        t('tests.unit.test_command_handlers._update.reply_text')
        replies.append(text)

    update = SimpleNamespace(
        message=SimpleNamespace(reply_text=reply_text),
        effective_user=SimpleNamespace(id=user_id, first_name="Ana"),
        effective_chat=SimpleNamespace(id=chat_id or user_id),
    )
    return update, replies


def _context(*args):
    t('tests.unit.test_command_handlers._context')
    return SimpleNamespace(args=list(args))


@pytest.mark.asyncio
async def test_schedule_requires_three_arguments(tmp_path):
    t('tests.unit.test_command_handlers.test_schedule_requires_three_arguments')
    handlers, _ = _handlers(tmp_path)
    update, replies = _update()

    await handlers.schedule(update, _context("2025-10-25", "06:00"))

    assert replies[0].startswith("Invalid format. Use: /schedule YYYY-MM-DD HH:MM COURT")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "args, expected",
    [
        (("25-10-2025", "06:00", "3"), "Invalid date format. Use yyyy-MM-dd"),
        (("2025-10-25", "6am", "3"), "Invalid time format. Use HH:mm"),
        (("2025-10-25", "06:00", "7"), "Invalid court number. Available courts: 3, 4"),
    ],
)
async def test_schedule_rejects_invalid_arguments(tmp_path, args, expected):
    t('tests.unit.test_command_handlers.test_schedule_rejects_invalid_arguments')
    handlers, dependencies = _handlers(tmp_path)
    update, replies = _update()

    await handlers.schedule(update, _context(*args))

    assert replies == [expected]
    assert dependencies.booking_store.find_pending() == []


@pytest.mark.asyncio
async def test_schedule_far_date_stores_pending_request(tmp_path):
    t('tests.unit.test_command_handlers.test_schedule_far_date_stores_pending_request')
    handlers, dependencies = _handlers(tmp_path)
    update, replies = _update()

    await handlers.schedule(update, _context("2025-10-25", "6:00", "3"))

    [booking] = dependencies.booking_store.find_pending()
    assert booking.user_id == 42
    assert booking.target_date == date(2025, 10, 25)
    assert booking.target_time == "06:00"
    assert booking.court_number == 3
    assert replies[0].startswith(f"Booking scheduled!\n\nID: {booking.booking_id}")
    assert dependencies.scheduler.calls == []


@pytest.mark.asyncio
async def test_schedule_near_date_books_immediately(tmp_path):
    t('tests.unit.test_command_handlers.test_schedule_near_date_books_immediately')
    handlers, dependencies = _handlers(tmp_path)
    update, replies = _update()

    await handlers.schedule(update, _context("2025-10-21", "06:00", "3"))

    assert dependencies.scheduler.calls == [(date(2025, 10, 21), "06:00", 3)]
    assert dependencies.booking_store.find_pending() == []
    assert replies[0].startswith("Starting booking...")
    assert replies[1].startswith("✅ Booking successful!")


@pytest.mark.asyncio
async def test_schedule_near_date_reports_conflict_and_missing_slot(tmp_path):
    t('tests.unit.test_command_handlers.test_schedule_near_date_reports_conflict_and_missing_slot')
    handlers, _ = _handlers(tmp_path, scheduler=StubScheduler(outcome=BookingOutcome.already_booked()))
    update, replies = _update()
    await handlers.schedule(update, _context("2025-10-22", "06:00", "4"))
    assert replies[-1].startswith("⚠️ Unfortunately the court is already booked.")

    missing = StubScheduler(error=ResolutionError("Slot not found for time=06:00, court=4"))
    handlers, _ = _handlers(tmp_path, scheduler=missing)
    update, replies = _update()
    await handlers.schedule(update, _context("2025-10-22", "06:00", "4"))
    assert replies[-1] == "Slot for 06:00 on court 4 was not found. Slots may not be loaded yet."


@pytest.mark.asyncio
async def test_list_shows_only_callers_pending_bookings(tmp_path):
    t('tests.unit.test_command_handlers.test_list_shows_only_callers_pending_bookings')
    handlers, dependencies = _handlers(tmp_path)
    store = dependencies.booking_store
    mine = store.create(BookingRequest(0, 42, date(2025, 10, 25), "06:00", 3))
    done = store.create(BookingRequest(0, 42, date(2025, 10, 26), "07:00", 3))
    store.create(BookingRequest(0, 7, date(2025, 10, 25), "08:00", 4))
    store.update_status(done, BookingStatus.COMPLETED, "Court booked successfully")
    update, replies = _update()

    await handlers.list_bookings(update, _context())

    assert f"#{mine}: 2025-10-25 06:00, court 3" in replies[0]
    assert "07:00" not in replies[0]
    assert "08:00" not in replies[0]

    update, replies = _update(user_id=99)
    await handlers.list_bookings(update, _context())
    assert replies == ["You have no pending bookings."]


@pytest.mark.asyncio
async def test_cancel_removes_only_own_pending_booking(tmp_path):
    t('tests.unit.test_command_handlers.test_cancel_removes_only_own_pending_booking')
    handlers, dependencies = _handlers(tmp_path)
    store = dependencies.booking_store
    theirs = store.create(BookingRequest(0, 7, date(2025, 10, 25), "06:00", 3))
    mine = store.create(BookingRequest(0, 42, date(2025, 10, 25), "07:00", 3))
    finished = store.create(BookingRequest(0, 42, date(2025, 10, 25), "08:00", 3))
    store.update_status(finished, BookingStatus.FAILED, "Court already booked")

    update, replies = _update()
    await handlers.cancel(update, _context(str(theirs)))
    await handlers.cancel(update, _context(str(finished)))
    await handlers.cancel(update, _context(f"#{mine}"))

    assert replies == [
        "Booking not found or it does not belong to you.",
        "Booking not found or it does not belong to you.",
        f"Booking #{mine} cancelled.",
    ]
    assert store.find_by_id(mine) is None
    assert store.find_by_id(theirs) is not None
    assert store.find_by_id(finished) is not None


@pytest.mark.asyncio
async def test_cancel_requires_valid_id(tmp_path):
    t('tests.unit.test_command_handlers.test_cancel_requires_valid_id')
    handlers, _ = _handlers(tmp_path)
    update, replies = _update()

    await handlers.cancel(update, _context())
    await handlers.cancel(update, _context("abc"))

    assert replies == ["Specify the booking ID. Use: /cancel <id>", "Invalid booking ID"]


@pytest.mark.asyncio
async def test_test_auth_reports_result(tmp_path):
    t('tests.unit.test_command_handlers.test_test_auth_reports_result')
    handlers, dependencies = _handlers(tmp_path)
    update, replies = _update()

    await handlers.test_auth(update, _context())
    dependencies.court_client.authenticated = False
    await handlers.test_auth(update, _context())

    assert replies[1] == "✅ Authentication successful!"
    assert replies[3].startswith("❌ Authentication failed.")


@pytest.mark.asyncio
async def test_sendme_registers_admin_chat_unless_configured_elsewhere(tmp_path):
    t('tests.unit.test_command_handlers.test_sendme_registers_admin_chat_unless_configured_elsewhere')
    handlers, dependencies = _handlers(tmp_path)
    update, replies = _update(chat_id=555)

    await handlers.sendme(update, _context())

    assert dependencies.notifier.admin_chat_id == 555
    assert "555" in replies[0]

    locked, locked_deps = _handlers(tmp_path, admin_chat_id=111)
    update, replies = _update(chat_id=555)
    await locked.sendme(update, _context())
    assert locked_deps.notifier.admin_chat_id == 111
    assert replies[0].startswith("❌")


@pytest.mark.asyncio
async def test_fetch_slots_is_admin_only(tmp_path):
    t('tests.unit.test_command_handlers.test_fetch_slots_is_admin_only')
    handlers, dependencies = _handlers(tmp_path, admin_chat_id=555)

    stranger, replies = _update(chat_id=42)
    await handlers.fetch_slots(stranger, _context())
    assert dependencies.slot_fetches.run_now_calls == []
    assert replies[0].startswith("❌ Only the admin chat")

    admin, replies = _update(chat_id=555)
    await handlers.fetch_slots(admin, _context("2025-10-23"))
    await handlers.fetch_slots(admin, _context())
    assert dependencies.slot_fetches.run_now_calls == [date(2025, 10, 23), date(2025, 10, 20)]


@pytest.mark.asyncio
async def test_start_lists_commands_and_courts(tmp_path):
    t('tests.unit.test_command_handlers.test_start_lists_commands_and_courts')
    handlers, _ = _handlers(tmp_path)
    update, replies = _update()

    await handlers.start(update, _context())

    assert replies[0].startswith("Hello, Ana!")
    assert "/schedule" in replies[0]
    assert "Courts: 3 or 4" in replies[0]


def test_register_core_handlers_adds_every_command(tmp_path):
    t('tests.unit.test_command_handlers.test_register_core_handlers_adds_every_command')
    handlers, _ = _handlers(tmp_path)
    added = []
    errors = []
    application = SimpleNamespace(add_handler=added.append, add_error_handler=errors.append)

    register_core_handlers(application, handlers)

    commands = set()
    for handler in added:
        commands.update(handler.commands)
    assert commands == {"start", "schedule", "list", "cancel", "test_auth", "sendme", "fetch_slots"}
    assert errors == [handlers.error_handler]
