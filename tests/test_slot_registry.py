"""Tests for SlotRegistry."""

from datetime import datetime

import pytest

from smart_parking.metrics import REGISTRY
from smart_parking.state.errors import DuplicateKeyError, NotFoundError, SlotUnavailableError
from smart_parking.state.models import Coordinates, ParkingSlot, SlotStatus, SlotType


def new_slot(slot_number="A101", **overrides) -> ParkingSlot:
    fields = dict(
        slot_number=slot_number,
        building="A",
        floor=1,
        section="North",
        coordinates=Coordinates(x=5, y=5),
    )
    fields.update(overrides)
    return ParkingSlot(**fields)


class TestFindAvailable:
    def test_returns_empty_slot(self, registry, make_slot):
        slot = make_slot("A101")
        assert registry.find_available(slot.id).id == slot.id

    def test_missing_slot_is_not_found(self, registry):
        with pytest.raises(NotFoundError, match="Parking slot not found"):
            registry.find_available("missing")

    @pytest.mark.parametrize("status", [SlotStatus.BOOKED, SlotStatus.OCCUPIED])
    def test_non_empty_slot_is_unavailable(self, registry, make_slot, status):
        slot = make_slot("A101", status=status)
        with pytest.raises(SlotUnavailableError, match="not available"):
            registry.find_available(slot.id)


class TestReserveAndRelease:
    def test_try_reserve_only_succeeds_from_empty(self, registry, make_slot):
        slot = make_slot("A101")

        assert registry.try_reserve(slot.id) is True
        assert registry.try_reserve(slot.id) is False
        assert registry.get(slot.id).status == SlotStatus.BOOKED

    def test_try_reserve_missing_slot(self, registry):
        assert registry.try_reserve("missing") is False

    def test_lost_reserve_is_counted(self, registry, make_slot):
        slot = make_slot("A101", status=SlotStatus.BOOKED)
        before = REGISTRY.get_sample_value("parking_reserve_conflicts_total") or 0

        registry.try_reserve(slot.id)

        assert REGISTRY.get_sample_value("parking_reserve_conflicts_total") == before + 1

    def test_missing_slot_is_not_a_conflict(self, registry):
        before = REGISTRY.get_sample_value("parking_reserve_conflicts_total") or 0

        registry.try_reserve("missing")

        assert (REGISTRY.get_sample_value("parking_reserve_conflicts_total") or 0) == before

    def test_mark_booked_does_not_recheck(self, registry, make_slot):
        slot = make_slot("A101", status=SlotStatus.OCCUPIED)

        registry.mark_booked(slot.id)

        assert registry.get(slot.id).status == SlotStatus.BOOKED

    @pytest.mark.parametrize("status", list(SlotStatus))
    def test_release_sets_empty_from_any_status(self, registry, make_slot, status):
        slot = make_slot("A101", status=status)

        assert registry.release_if_present(slot.id) is True
        assert registry.get(slot.id).status == SlotStatus.EMPTY

    def test_release_missing_slot_is_silent(self, registry):
        assert registry.release_if_present("deleted-slot") is False
        assert registry.mark_empty("deleted-slot") is False


class TestCrud:
    def test_create_forces_empty_status(self, registry, clock):
        created = registry.create(new_slot(status=SlotStatus.OCCUPIED))

        assert created.status == SlotStatus.EMPTY
        assert created.updated_at == clock.now
        assert registry.get(created.id).slot_number == "A101"

    def test_create_duplicate_slot_number(self, registry):
        registry.create(new_slot("A101"))

        with pytest.raises(DuplicateKeyError, match="Slot number already exists"):
            registry.create(new_slot("A101", floor=2))

    def test_update_is_partial(self, registry, make_slot, clock):
        slot = make_slot("A101", x=10, y=20)
        clock.advance(minutes=5)

        updated = registry.update(slot.id, {"status": SlotStatus.OCCUPIED})

        assert updated.status == SlotStatus.OCCUPIED
        assert updated.coordinates == Coordinates(x=10, y=20)
        assert updated.section == "North"
        assert updated.updated_at == datetime(2024, 5, 1, 9, 5)

    def test_update_ignores_none_values(self, registry, make_slot):
        slot = make_slot("A101", section="North")

        updated = registry.update(slot.id, {"section": None, "floor": 3})

        assert updated.section == "North"
        assert updated.floor == 3

    def test_update_missing_slot(self, registry):
        with pytest.raises(NotFoundError):
            registry.update("missing", {"section": "South"})

    def test_update_to_taken_slot_number(self, registry, make_slot):
        make_slot("A101")
        other = make_slot("A102")

        with pytest.raises(DuplicateKeyError):
            registry.update(other.id, {"slot_number": "A101"})

    def test_delete_ignores_status(self, registry, make_slot):
        slot = make_slot("A101", status=SlotStatus.BOOKED)

        registry.delete(slot.id)

        with pytest.raises(NotFoundError):
            registry.get(slot.id)

    def test_delete_missing_slot(self, registry):
        with pytest.raises(NotFoundError):
            registry.delete("missing")

    def test_bulk_create_skips_existing_numbers(self, registry, make_slot):
        make_slot("A101")

        created = registry.bulk_create([new_slot("A101"), new_slot("A102")])

        assert [s.slot_number for s in created] == ["A102"]


class TestQueries:
    @pytest.fixture
    def garage(self, make_slot):
        make_slot("B2S01", building="B", floor=2, section="South")
        make_slot("A1S02", floor=1, section="South", status=SlotStatus.BOOKED)
        make_slot("A1N02", floor=1, section="North", type=SlotType.ELECTRIC)
        make_slot("A1N01", floor=1, section="North")
        make_slot("A2N01", floor=2, section="North", status=SlotStatus.OCCUPIED)

    def test_list_orders_by_floor_section_number(self, registry, garage):
        numbers = [s.slot_number for s in registry.list_slots()]
        assert numbers == ["A1N01", "A1N02", "A1S02", "A2N01", "B2S01"]

    def test_list_filters_combine_with_and(self, registry, garage):
        assert [s.slot_number for s in registry.list_slots(floor=1, section="North")] == [
            "A1N01",
            "A1N02",
        ]
        assert [s.slot_number for s in registry.list_slots(type=SlotType.ELECTRIC)] == ["A1N02"]
        assert [s.slot_number for s in registry.list_slots(building="B")] == ["B2S01"]
        assert registry.list_slots(status=SlotStatus.BOOKED, floor=2) == []

    def test_list_by_floor(self, registry, garage):
        assert [s.slot_number for s in registry.list_by_floor(2)] == ["A2N01", "B2S01"]
        assert [s.slot_number for s in registry.list_by_floor(1, status=SlotStatus.EMPTY)] == [
            "A1N01",
            "A1N02",
        ]
        assert [s.slot_number for s in registry.list_by_floor(1, section="South")] == ["A1S02"]

    def test_status_counts(self, registry, garage):
        assert registry.status_counts() == {"empty": 3, "booked": 1, "occupied": 1}
