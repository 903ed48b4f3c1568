"""FastAPI route definitions."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..metrics import get_metrics
from ..state.booking_ledger import BookingLedger
from ..state.models import BookingStatus, ParkingSlot, Principal, SlotStatus, SlotType
from ..state.slot_registry import SlotRegistry
from .auth import get_principal, require_admin
from .schemas import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    HealthResponse,
    MessageResponse,
    SlotCreate,
    SlotListResponse,
    SlotResponse,
    SlotUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependencies injected at startup
_slot_registry: Optional[SlotRegistry] = None
_booking_ledger: Optional[BookingLedger] = None
_start_time: datetime = datetime.now()


def init_router(slot_registry: SlotRegistry, booking_ledger: BookingLedger) -> None:
    """
    Initialize router with dependencies.

    Args:
        slot_registry: Registry owning slot state
        booking_ledger: Ledger owning booking lifecycle
    """
    global _slot_registry, _booking_ledger, _start_time

    _slot_registry = slot_registry
    _booking_ledger = booking_ledger
    _start_time = datetime.now()

    logger.info("API router initialized")


def _registry() -> SlotRegistry:
    if _slot_registry is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _slot_registry


def _ledger() -> BookingLedger:
    if _booking_ledger is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _booking_ledger


def _slot_list(slots: list[ParkingSlot]) -> SlotListResponse:
    return SlotListResponse(count=len(slots), data=slots)


def _booking_list(ledger: BookingLedger, bookings) -> BookingListResponse:
    details = [ledger.describe(b) for b in bookings]
    return BookingListResponse(count=len(details), data=details)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Reports slot counts per status, the number of stored bookings and
    the number of active bookings.
    """
    registry = _registry()
    ledger = _ledger()

    return HealthResponse(
        status="ok",
        message="Server is running",
        slots=registry.status_counts(),
        bookings=ledger.repository.count(),
        active_bookings=len(ledger.list_all(status=BookingStatus.ACTIVE)),
        uptime_seconds=(datetime.now() - _start_time).total_seconds(),
    )


# Parking slots


@router.get("/parking", response_model=SlotListResponse)
async def list_parking_slots(
    status: Optional[SlotStatus] = None,
    building: Optional[str] = None,
    floor: Optional[int] = None,
    section: Optional[str] = None,
    slot_type: Optional[SlotType] = Query(default=None, alias="type"),
) -> SlotListResponse:
    """
    List parking slots.

    All given filters must match. Slots are ordered by floor, section and
    slot number.
    """
    slots = _registry().list_slots(
        status=status,
        building=building,
        floor=floor,
        section=section,
        type=slot_type,
    )
    return _slot_list(slots)


@router.get("/parking/floor/{floor}", response_model=SlotListResponse)
async def list_parking_slots_by_floor(
    floor: int,
    section: Optional[str] = None,
    status: Optional[SlotStatus] = None,
) -> SlotListResponse:
    """List the slots of one floor, ordered by section and slot number."""
    return _slot_list(_registry().list_by_floor(floor, section=section, status=status))


@router.get("/parking/{slot_id}", response_model=SlotResponse)
async def get_parking_slot(slot_id: str) -> SlotResponse:
    return SlotResponse(data=_registry().get(slot_id))


@router.post(
    "/parking",
    response_model=SlotResponse,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
async def create_parking_slot(body: SlotCreate) -> SlotResponse:
    """Create an empty slot. The slot number must be unique."""
    slot = _registry().create(ParkingSlot(**body.model_dump()))
    return SlotResponse(data=slot)


@router.put(
    "/parking/{slot_id}",
    response_model=SlotResponse,
    dependencies=[Depends(require_admin)],
)
async def update_parking_slot(
    slot_id: str,
    body: SlotUpdate,
) -> SlotResponse:
    """
    Partially update a slot.

    Only the fields present in the request body change. Setting ``status``
    here bypasses the booking lifecycle.
    """
    slot = _registry().update(slot_id, body.to_patch())
    return SlotResponse(data=slot)


@router.delete(
    "/parking/{slot_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_parking_slot(slot_id: str) -> MessageResponse:
    """Delete a slot. Bookings that reference it are left as they are."""
    _registry().delete(slot_id)
    return MessageResponse(success=True, message="Parking slot deleted successfully")


# Bookings


@router.post("/bookings", response_model=BookingResponse, status_code=201)
async def create_booking(
    body: BookingCreate,
    principal: Principal = Depends(get_principal),
) -> BookingResponse:
    """Book an empty slot for the caller's vehicle."""
    ledger = _ledger()
    booking = ledger.create(body.parking_slot_id, body.vehicle_number, principal)
    return BookingResponse(data=ledger.describe(booking))


@router.get(
    "/bookings",
    response_model=BookingListResponse,
    dependencies=[Depends(require_admin)],
)
async def list_bookings(
    status: Optional[BookingStatus] = None,
) -> BookingListResponse:
    """List all bookings, newest first."""
    ledger = _ledger()
    return _booking_list(ledger, ledger.list_all(status=status))


@router.get("/bookings/my-bookings", response_model=BookingListResponse)
async def list_my_bookings(
    status: Optional[BookingStatus] = None,
    principal: Principal = Depends(get_principal),
) -> BookingListResponse:
    """List the caller's own bookings, newest first."""
    ledger = _ledger()
    return _booking_list(ledger, ledger.list_for_user(principal.user_id, status=status))


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    principal: Principal = Depends(get_principal),
) -> BookingResponse:
    ledger = _ledger()
    return BookingResponse(data=ledger.describe(ledger.get(booking_id, principal)))


@router.put(
    "/bookings/{booking_id}/status",
    response_model=BookingResponse,
    dependencies=[Depends(require_admin)],
)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
) -> BookingResponse:
    """
    Set a booking's status directly.

    Accepts active, completed or cancelled regardless of the current status.
    Completing or cancelling releases the slot.
    """
    ledger = _ledger()
    booking = ledger.update_status(booking_id, body.status)
    return BookingResponse(data=ledger.describe(booking))


@router.put("/bookings/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking_id: str,
    principal: Principal = Depends(get_principal),
) -> BookingResponse:
    """Complete an active booking and free its slot."""
    ledger = _ledger()
    return BookingResponse(data=ledger.describe(ledger.complete(booking_id, principal)))


@router.put("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    principal: Principal = Depends(get_principal),
) -> BookingResponse:
    """Cancel an active booking and free its slot."""
    ledger = _ledger()
    return BookingResponse(data=ledger.describe(ledger.cancel(booking_id, principal)))


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - parking_bookings_created_total: Bookings created
    - parking_booking_transitions_total: Status transitions by status and actor
    - parking_reserve_conflicts_total: Create requests that lost the slot reserve
    - parking_slots: Slots per status
    - parking_slots_total: Total number of slots
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
