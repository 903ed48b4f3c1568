"""Pytest configuration and fixtures for the parking reservation service."""

from datetime import datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from smart_parking.api.handlers import register_exception_handlers
from smart_parking.api.router import init_router, router
from smart_parking.state.booking_ledger import BookingLedger
from smart_parking.state.models import (
    Coordinates,
    ParkingSlot,
    Principal,
    Role,
    SlotStatus,
    SlotType,
)
from smart_parking.state.repositories import BookingRepository, SlotRepository
from smart_parking.state.slot_registry import SlotRegistry

USER_HEADERS = {"X-User-Id": "user-1", "X-User-Role": "user"}
OTHER_USER_HEADERS = {"X-User-Id": "user-2", "X-User-Role": "user"}
ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 9, 0, 0))


@pytest.fixture
def slot_repository():
    return SlotRepository()


@pytest.fixture
def booking_repository():
    return BookingRepository()


@pytest.fixture
def registry(slot_repository, clock):
    return SlotRegistry(slot_repository, clock=clock)


@pytest.fixture
def ledger(booking_repository, registry, clock):
    return BookingLedger(booking_repository, registry, clock=clock)


@pytest.fixture
def make_slot(slot_repository):
    """Insert a slot directly into the store, in any status."""

    def _make(
        slot_number: str = "A101",
        status: SlotStatus = SlotStatus.EMPTY,
        building: str = "A",
        floor: int = 1,
        section: str = "North",
        type: SlotType = SlotType.STANDARD,
        x: float = 10,
        y: float = 20,
    ) -> ParkingSlot:
        return slot_repository.insert(
            ParkingSlot(
                slot_number=slot_number,
                building=building,
                floor=floor,
                section=section,
                type=type,
                status=status,
                coordinates=Coordinates(x=x, y=y),
            )
        )

    return _make


@pytest.fixture
def user():
    return Principal(user_id="user-1", role=Role.USER)


@pytest.fixture
def other_user():
    return Principal(user_id="user-2", role=Role.USER)


@pytest.fixture
def admin():
    return Principal(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def client(registry, ledger):
    """Test client for an app wired to the fixture registry and ledger."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router, prefix="/api")
    init_router(registry, ledger)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
