"""Parking slot inventory and availability state."""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from ..metrics import record_reserve_conflict, update_slot_counts
from .errors import NotFoundError, SlotUnavailableError
from .models import ParkingSlot, SlotStatus, SlotType
from .repositories import SlotRepository

logger = logging.getLogger(__name__)


class SlotRegistry:
    """
    Authoritative owner of slot records and their availability status.

    Slot status moves empty -> booked when a booking is created and back to
    empty when the booking ends. Administrators may also set any status
    directly through ``update``. The registry has no knowledge of bookings;
    deleting a slot never looks at the bookings that reference it.
    """

    def __init__(
        self,
        repository: SlotRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the registry.

        Args:
            repository: Slot storage
            clock: Source of the current time, used for update stamps
        """
        self.repository = repository
        self.clock = clock

    def get(self, slot_id: str) -> ParkingSlot:
        """Fetch a slot or raise NotFoundError."""
        slot = self.repository.get(slot_id)
        if slot is None:
            raise NotFoundError("Parking slot not found")
        return slot

    def find_available(self, slot_id: str) -> ParkingSlot:
        """
        Return the slot if it exists and is empty.

        Raises:
            NotFoundError: The slot does not exist
            SlotUnavailableError: The slot exists but is booked or occupied
        """
        slot = self.get(slot_id)
        if slot.status != SlotStatus.EMPTY:
            raise SlotUnavailableError("Parking slot is not available")
        return slot

    def try_reserve(self, slot_id: str) -> bool:
        """
        Atomically move a slot from empty to booked.

        Returns:
            True if this call reserved the slot, False if the slot is missing
            or was no longer empty. Only a slot that still exists counts as a
            reserve conflict.
        """
        reserved = self.repository.compare_and_set_status(
            slot_id,
            expected=SlotStatus.EMPTY,
            new=SlotStatus.BOOKED,
            updated_at=self.clock(),
        )
        if reserved:
            self._refresh_counts()
        elif self.repository.get(slot_id) is None:
            logger.info(f"Slot {slot_id} could not be reserved: no longer exists")
        else:
            record_reserve_conflict()
            logger.warning(f"Slot {slot_id} could not be reserved: no longer empty")
        return reserved

    def mark_booked(self, slot_id: str) -> None:
        """Set a slot to booked. Availability must already have been checked."""
        self._set_status(slot_id, SlotStatus.BOOKED)

    def release_if_present(self, slot_id: str) -> bool:
        """
        Set a slot back to empty.

        A slot that was deleted while booked is skipped without error.

        Returns:
            True if the slot existed and was released
        """
        released = self._set_status(slot_id, SlotStatus.EMPTY)
        if not released:
            logger.info(f"Release skipped: slot {slot_id} no longer exists")
        return released

    mark_empty = release_if_present

    def create(self, slot: ParkingSlot) -> ParkingSlot:
        """Add a new, empty slot. Raises DuplicateKeyError on a taken slot number."""
        slot = slot.model_copy(update={"status": SlotStatus.EMPTY, "updated_at": self.clock()})
        created = self.repository.insert(slot)
        logger.info(f"Created slot {created.slot_number} ({created.id})")
        self._refresh_counts()
        return created

    def bulk_create(self, slots: Iterable[ParkingSlot]) -> list[ParkingSlot]:
        """Insert slots as given, skipping slot numbers that already exist."""
        created = []
        for slot in slots:
            if self.repository.find(slot_number=slot.slot_number):
                logger.debug(f"Skipping existing slot number {slot.slot_number}")
                continue
            created.append(self.repository.insert(slot))
        self._refresh_counts()
        return created

    def update(self, slot_id: str, patch: dict[str, Any]) -> ParkingSlot:
        """
        Apply a partial update.

        Args:
            slot_id: Slot to update
            patch: Field values to change; None values are ignored

        Raises:
            NotFoundError: The slot does not exist
            DuplicateKeyError: The new slot number belongs to another slot
        """
        changes = {k: v for k, v in patch.items() if v is not None}
        changes["updated_at"] = self.clock()

        slot = self.repository.update(slot_id, changes)
        if slot is None:
            raise NotFoundError("Parking slot not found")

        logger.info(f"Updated slot {slot.slot_number}: {sorted(k for k in changes if k != 'updated_at')}")
        self._refresh_counts()
        return slot

    def delete(self, slot_id: str) -> None:
        """Remove a slot regardless of its status or bookings."""
        if not self.repository.delete(slot_id):
            raise NotFoundError("Parking slot not found")
        logger.info(f"Deleted slot {slot_id}")
        self._refresh_counts()

    def list_slots(
        self,
        status: Optional[SlotStatus] = None,
        building: Optional[str] = None,
        floor: Optional[int] = None,
        section: Optional[str] = None,
        type: Optional[SlotType] = None,
    ) -> list[ParkingSlot]:
        """List slots matching all given filters, by floor, section, slot number."""
        slots = self.repository.find(
            status=status,
            building=building,
            floor=floor,
            section=section,
            type=type,
        )
        return sorted(slots, key=lambda s: (s.floor, s.section, s.slot_number))

    def list_by_floor(
        self,
        floor: int,
        section: Optional[str] = None,
        status: Optional[SlotStatus] = None,
    ) -> list[ParkingSlot]:
        """List the slots on one floor, by section then slot number."""
        slots = self.repository.find(floor=floor, section=section, status=status)
        return sorted(slots, key=lambda s: (s.section, s.slot_number))

    def status_counts(self) -> dict[str, int]:
        """Get the number of slots in each status."""
        return {status.value: count for status, count in self.repository.count_by_status().items()}

    def _set_status(self, slot_id: str, status: SlotStatus) -> bool:
        slot = self.repository.update(slot_id, {"status": status, "updated_at": self.clock()})
        if slot is None:
            return False
        logger.debug(f"Slot {slot.slot_number} -> {status.value}")
        self._refresh_counts()
        return True

    def _refresh_counts(self) -> None:
        update_slot_counts(self.status_counts())
