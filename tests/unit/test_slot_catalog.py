from tracking import t
import json

import pytest

from infrastructure.errors import ResolutionError
from reservations.models import SlotCatalogEntry
from reservations.slots import BookingResolver, SlotCatalogStore
from tests.helpers import DummyLogger

MAPPING = {3: "amenity-3", 4: "amenity-4"}


def _catalog(tmp_path):
    t('tests.unit.test_slot_catalog._catalog')
    return SlotCatalogStore(str(tmp_path / "slots.json"), logger=DummyLogger())


def test_insert_if_absent_is_idempotent_and_keeps_first_times(tmp_path):
    t('tests.unit.test_slot_catalog.test_insert_if_absent_is_idempotent_and_keeps_first_times')
    catalog = _catalog(tmp_path)
    first = SlotCatalogEntry("slot-6", "amenity-3", "06:00", "07:00")

    assert catalog.insert_if_absent(first) is True
    assert catalog.insert_if_absent(SlotCatalogEntry("slot-6", "amenity-3", "09:00", "10:00")) is False

    assert len(catalog) == 1
    assert catalog.all_entries() == [first]
    saved = json.loads((tmp_path / "slots.json").read_text(encoding="utf-8"))
    assert saved == [first.to_payload()]


def test_catalog_survives_reload(tmp_path):
    t('tests.unit.test_slot_catalog.test_catalog_survives_reload')
    catalog = _catalog(tmp_path)
    catalog.insert_if_absent(SlotCatalogEntry("slot-6", "amenity-3", "06:00", "07:00"))

    reloaded = _catalog(tmp_path)

    assert reloaded.find_by_resource_and_time("amenity-3", "6:0").slot_id == "slot-6"
    assert reloaded.find_by_resource_and_time("amenity-4", "06:00") is None


def test_resolver_maps_court_and_normalized_time(tmp_path):
    t('tests.unit.test_slot_catalog.test_resolver_maps_court_and_normalized_time')
    catalog = _catalog(tmp_path)
    catalog.insert_if_absent(SlotCatalogEntry("slot-6", "amenity-3", "06:00", "07:00"))
    catalog.insert_if_absent(SlotCatalogEntry("slot-6b", "amenity-4", "06:00", "07:00"))
    resolver = BookingResolver(catalog, MAPPING)

    for raw in ("6:0", "06:00", "6:00:00"):
        resolved = resolver.resolve(3, raw)
        assert resolved.slot_id == "slot-6"
        assert resolved.amenity_id == "amenity-3"
    assert resolver.resolve(4, "06:00").slot_id == "slot-6b"


def test_resolver_is_stable_across_repeated_fetches(tmp_path):
    t('tests.unit.test_slot_catalog.test_resolver_is_stable_across_repeated_fetches')
    catalog = _catalog(tmp_path)
    resolver = BookingResolver(catalog, MAPPING)
    entry = SlotCatalogEntry("slot-6", "amenity-3", "06:00", "07:00")

    catalog.insert_if_absent(entry)
    before = resolver.resolve(3, "06:00")
    catalog.insert_if_absent(entry)

    assert resolver.resolve(3, "06:00") == before


def test_resolver_not_found_cases(tmp_path):
    t('tests.unit.test_slot_catalog.test_resolver_not_found_cases')
    catalog = _catalog(tmp_path)
    catalog.insert_if_absent(SlotCatalogEntry("slot-6", "amenity-3", "06:00", "07:00"))
    resolver = BookingResolver(catalog, MAPPING)

    assert resolver.resolve(3, "07:00") is None
    assert resolver.resolve(3, None) is None
    assert resolver.resolve(9, "06:00") is None

    with pytest.raises(ResolutionError, match="Unknown court number: 9"):
        resolver.require(9, "06:00")
    with pytest.raises(ResolutionError, match="Slot not found for time=07:00, court=3"):
        resolver.require(3, "07:00")
