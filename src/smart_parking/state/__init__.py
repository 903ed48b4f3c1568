"""Slot and booking state module."""

from .booking_ledger import BookingLedger
from .models import Booking, BookingStatus, ParkingSlot, Principal, Role, SlotStatus, SlotType
from .repositories import BookingRepository, SlotRepository
from .slot_registry import SlotRegistry

__all__ = [
    "Booking",
    "BookingLedger",
    "BookingRepository",
    "BookingStatus",
    "ParkingSlot",
    "Principal",
    "Role",
    "SlotRegistry",
    "SlotRepository",
    "SlotStatus",
    "SlotType",
]
