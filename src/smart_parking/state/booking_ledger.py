"""Booking lifecycle management."""

import logging
import math
from datetime import datetime
from typing import Callable, Optional

from ..metrics import record_booking_created, record_booking_transition
from .errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    SlotUnavailableError,
)
from .models import Booking, BookingDetail, BookingStatus, Principal, SlotSummary
from .repositories import BookingRepository
from .slot_registry import SlotRegistry

logger = logging.getLogger(__name__)


def compute_duration(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between start and end, rounded up."""
    return max(0, math.ceil((end_time - start_time).total_seconds() / 60))


class BookingLedger:
    """
    Creates bookings and moves them through their lifecycle.

    A booking is created ``active`` and ends exactly once, as ``completed`` or
    ``cancelled``. Ending a booking releases its slot. Self-service
    transitions require the caller to be the owner or an admin and the
    booking to still be active; ``update_status`` is the admin override and
    skips the active check.
    """

    def __init__(
        self,
        repository: BookingRepository,
        slots: SlotRegistry,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the ledger.

        Args:
            repository: Booking storage
            slots: Registry used to reserve and release slots
            clock: Source of the current time
        """
        self.repository = repository
        self.slots = slots
        self.clock = clock

    def create(self, slot_id: str, vehicle_number: str, principal: Principal) -> Booking:
        """
        Book an empty slot for a vehicle.

        Raises:
            InvalidInputError: Vehicle number is blank
            NotFoundError: Slot does not exist
            SlotUnavailableError: Slot is not empty, or was taken concurrently
        """
        vehicle_number = (vehicle_number or "").strip()
        if not vehicle_number:
            raise InvalidInputError("Please provide a vehicle number")

        self.slots.find_available(slot_id)
        if not self.slots.try_reserve(slot_id):
            # Raises NotFoundError if the slot was deleted meanwhile
            self.slots.get(slot_id)
            raise SlotUnavailableError("Parking slot is not available")

        now = self.clock()
        booking = Booking(
            user=principal.user_id,
            parking_slot=slot_id,
            vehicle_number=vehicle_number,
            start_time=now,
            status=BookingStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        try:
            created = self.repository.insert(booking)
        except Exception:
            # Insert failed: give back the slot reserved above
            self.slots.release_if_present(slot_id)
            raise

        record_booking_created()
        logger.info(
            f"Booking {created.id} created: slot {slot_id}, vehicle {vehicle_number}, "
            f"user {principal.user_id}"
        )
        return created

    def complete(self, booking_id: str, principal: Principal) -> Booking:
        """End an active booking as completed and release its slot."""
        return self._finish(booking_id, principal, BookingStatus.COMPLETED, "complete")

    def cancel(self, booking_id: str, principal: Principal) -> Booking:
        """End an active booking as cancelled and release its slot."""
        return self._finish(booking_id, principal, BookingStatus.CANCELLED, "cancel")

    def update_status(self, booking_id: str, status: Optional[str]) -> Booking:
        """
        Set a booking's status directly (admin only).

        Unlike complete/cancel, the current status is not checked, so a
        terminal booking can be moved to another state. Moving to active
        does not re-book the slot.

        Raises:
            InvalidInputError: Status is not active, completed or cancelled
            NotFoundError: Booking does not exist
        """
        try:
            target = BookingStatus(status)
        except ValueError:
            raise InvalidInputError("Invalid status") from None

        booking = self._get_existing(booking_id)
        now = self.clock()

        if target.is_terminal:
            changes = self._terminal_changes(booking, target, now)
            if booking.status.is_terminal:
                logger.warning(
                    f"Admin override: booking {booking_id} moved from "
                    f"{booking.status.value} to {target.value}"
                )
        else:
            changes = {"status": target, "updated_at": now}

        updated = self.repository.update(booking_id, changes)
        if updated is None:
            raise NotFoundError("Booking not found")

        if target.is_terminal:
            self.slots.release_if_present(booking.parking_slot)
        record_booking_transition(target.value, "admin")
        logger.info(f"Booking {booking_id} status set to {target.value} by admin")
        return updated

    def get(self, booking_id: str, principal: Principal) -> Booking:
        """Fetch a booking the caller owns, or any booking for an admin."""
        booking = self._get_existing(booking_id)
        if not principal.can_access(booking):
            raise ForbiddenError("Not authorized to access this booking")
        return booking

    def list_all(self, status: Optional[BookingStatus] = None) -> list[Booking]:
        """List every booking, newest first."""
        return self._newest_first(self.repository.find(status=status))

    def list_for_user(self, user_id: str, status: Optional[BookingStatus] = None) -> list[Booking]:
        """List one user's bookings, newest first."""
        return self._newest_first(self.repository.find(user=user_id, status=status))

    def describe(self, booking: Booking) -> BookingDetail:
        """Attach a summary of the referenced slot, if it still exists."""
        try:
            slot = self.slots.get(booking.parking_slot)
        except NotFoundError:
            summary = None
        else:
            summary = SlotSummary(
                id=slot.id,
                slot_number=slot.slot_number,
                floor=slot.floor,
                section=slot.section,
            )
        return BookingDetail(**booking.model_dump(), parking_slot_details=summary)

    def _finish(
        self,
        booking_id: str,
        principal: Principal,
        target: BookingStatus,
        verb: str,
    ) -> Booking:
        booking = self._get_existing(booking_id)

        if not principal.can_access(booking):
            raise ForbiddenError(f"Not authorized to {verb} this booking")

        if booking.status != BookingStatus.ACTIVE:
            raise InvalidStateError(f"Booking is already {booking.status.value}")

        changes = self._terminal_changes(booking, target, self.clock())
        updated = self.repository.transition(booking_id, BookingStatus.ACTIVE, changes)
        if updated is None:
            # Lost to a concurrent transition between the read and the write
            current = self._get_existing(booking_id)
            raise InvalidStateError(f"Booking is already {current.status.value}")

        self.slots.release_if_present(booking.parking_slot)

        actor = "owner" if booking.user == principal.user_id else "admin"
        record_booking_transition(target.value, actor)
        logger.info(f"Booking {booking_id} {target.value} by {actor} {principal.user_id}")
        return updated

    @staticmethod
    def _terminal_changes(booking: Booking, target: BookingStatus, now: datetime) -> dict:
        changes = {"status": target, "end_time": now, "updated_at": now}
        if target == BookingStatus.COMPLETED:
            changes["duration"] = compute_duration(booking.start_time, now)
        return changes

    def _get_existing(self, booking_id: str) -> Booking:
        booking = self.repository.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def _newest_first(bookings: list[Booking]) -> list[Booking]:
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)
