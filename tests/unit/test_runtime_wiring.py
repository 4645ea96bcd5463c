from tracking import t
from types import SimpleNamespace

import pytest

from botapp.bootstrap import DependencyContainer
from botapp.runtime import LifecycleManager
from tests.helpers import DummyLogger, FakeCourtClient, make_settings


def test_container_builds_shared_components(tmp_path):
    t('tests.unit.test_runtime_wiring.test_container_builds_shared_components')
    settings = make_settings(tmp_path, admin_chat_id=555)
    client = FakeCourtClient()
    container = DependencyContainer(settings, overrides={'court_client': client})

    dependencies = container.build_dependencies()

    assert dependencies.court_client is client
    assert dependencies.scheduler.client is client
    assert dependencies.slot_fetches.client is client
    assert dependencies.scheduler.notifier is dependencies.notifier
    assert dependencies.resolver.catalog is dependencies.slot_catalog
    assert dependencies.notifier.admin_chat_id == 555
    assert dependencies.booking_store.file_path == settings.bookings_file
    assert container.booking_store is dependencies.booking_store


@pytest.mark.asyncio
async def test_lifecycle_starts_and_stops_scheduler(tmp_path):
    t('tests.unit.test_runtime_wiring.test_lifecycle_starts_and_stops_scheduler')
    settings = make_settings(tmp_path, scan_interval_seconds=3600)
    client = FakeCourtClient()
    dependencies = DependencyContainer(settings, overrides={'court_client': client}).build_dependencies()
    lifecycle = LifecycleManager(dependencies, logger=DummyLogger())
    bot = SimpleNamespace(name="bot")

    await lifecycle.post_init(SimpleNamespace(bot=bot))

    assert dependencies.notifier.bot is bot
    assert lifecycle.scheduler_task is not None

    await lifecycle.post_stop(SimpleNamespace(bot=bot))

    assert lifecycle.scheduler_task is None
    assert lifecycle.metrics_task is None
    assert dependencies.scheduler.running is False
