"""In-memory document repositories for slots and bookings.

Every mutation runs under the collection lock, which gives single-document
atomicity. Conditional updates (``compare_and_set_status``, ``transition``)
check and write inside one critical section. Records are copied on the way in
and out so callers never hold a reference into the store.
"""

import threading
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from .errors import DuplicateKeyError
from .models import Booking, BookingStatus, ParkingSlot, SlotStatus


RecordT = TypeVar("RecordT", bound=BaseModel)


class InMemoryCollection(Generic[RecordT]):
    """Dict-backed collection keyed by record id."""

    def __init__(self):
        self._records: dict[str, RecordT] = {}
        self._lock = threading.RLock()

    def get(self, record_id: str) -> Optional[RecordT]:
        with self._lock:
            record = self._records.get(record_id)
            return record.model_copy(deep=True) if record else None

    def find(self, **filters: Any) -> list[RecordT]:
        """Return records matching every non-None filter exactly."""
        criteria = {k: v for k, v in filters.items() if v is not None}
        with self._lock:
            return [
                r.model_copy(deep=True)
                for r in self._records.values()
                if all(getattr(r, field) == value for field, value in criteria.items())
            ]

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _apply(self, record_id: str, changes: dict[str, Any]) -> Optional[RecordT]:
        # Caller must hold the lock.
        record = self._records.get(record_id)
        if record is None:
            return None
        data = record.model_dump()
        for field, value in changes.items():
            # Partial nested documents merge into the stored one
            if isinstance(value, dict) and isinstance(data.get(field), dict):
                value = {**data[field], **value}
            data[field] = value
        updated = type(record).model_validate(data)
        self._records[record_id] = updated
        return updated.model_copy(deep=True)


class SlotRepository(InMemoryCollection[ParkingSlot]):
    """Storage for parking slots with a unique slot number index."""

    def insert(self, slot: ParkingSlot) -> ParkingSlot:
        with self._lock:
            if self._number_taken(slot.slot_number):
                raise DuplicateKeyError("Slot number already exists")
            self._records[slot.id] = slot.model_copy(deep=True)
            return slot.model_copy(deep=True)

    def update(self, slot_id: str, changes: dict[str, Any]) -> Optional[ParkingSlot]:
        """Apply field changes; returns None if the slot does not exist."""
        with self._lock:
            number = changes.get("slot_number")
            if number is not None and self._number_taken(number, exclude_id=slot_id):
                raise DuplicateKeyError("Slot number already exists")
            return self._apply(slot_id, changes)

    def compare_and_set_status(
        self,
        slot_id: str,
        expected: SlotStatus,
        new: SlotStatus,
        **changes: Any,
    ) -> bool:
        """Set ``status`` to ``new`` only if it is currently ``expected``."""
        with self._lock:
            slot = self._records.get(slot_id)
            if slot is None or slot.status != expected:
                return False
            self._apply(slot_id, {"status": new, **changes})
            return True

    def count_by_status(self) -> dict[SlotStatus, int]:
        with self._lock:
            counts = {status: 0 for status in SlotStatus}
            for slot in self._records.values():
                counts[slot.status] += 1
            return counts

    def _number_taken(self, slot_number: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            s.slot_number == slot_number and s.id != exclude_id
            for s in self._records.values()
        )


class BookingRepository(InMemoryCollection[Booking]):
    """Storage for bookings."""

    def insert(self, booking: Booking) -> Booking:
        with self._lock:
            self._records[booking.id] = booking.model_copy(deep=True)
            return booking.model_copy(deep=True)

    def update(self, booking_id: str, changes: dict[str, Any]) -> Optional[Booking]:
        with self._lock:
            return self._apply(booking_id, changes)

    def transition(
        self,
        booking_id: str,
        expected: BookingStatus,
        changes: dict[str, Any],
    ) -> Optional[Booking]:
        """
        Apply ``changes`` only if the stored status is still ``expected``.

        Returns:
            The updated booking, or None if the booking is missing or its
            status no longer matches.
        """
        with self._lock:
            booking = self._records.get(booking_id)
            if booking is None or booking.status != expected:
                return None
            return self._apply(booking_id, changes)
