"""Data models for parking slots and bookings."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a persistent record id."""
    return uuid.uuid4().hex


class SlotStatus(str, Enum):
    """Availability of a parking slot."""

    EMPTY = "empty"
    BOOKED = "booked"
    OCCUPIED = "occupied"


class SlotType(str, Enum):
    """Classification of a parking slot."""

    STANDARD = "standard"
    HANDICAPPED = "handicapped"
    ELECTRIC = "electric"
    COMPACT = "compact"
    VIP = "vip"


class BookingStatus(str, Enum):
    """Lifecycle state of a booking."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not BookingStatus.ACTIVE


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FREE = "free"


class Role(str, Enum):
    """Role of an authenticated caller."""

    USER = "user"
    ADMIN = "admin"


class CamelModel(BaseModel):
    """Base model serialised with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(CamelModel):
    """Position of a slot on the parking map."""

    x: float
    y: float


class Dimensions(CamelModel):
    """Size of a slot on the parking map, in grid units."""

    width: float = 1
    height: float = 1


class ParkingSlot(CamelModel):
    """A physical parking space."""

    id: str = Field(default_factory=new_id)
    slot_number: str
    building: str
    floor: int = Field(ge=1)
    section: str
    type: SlotType = SlotType.STANDARD
    status: SlotStatus = SlotStatus.EMPTY
    coordinates: Coordinates
    dimensions: Dimensions = Field(default_factory=Dimensions)
    updated_at: datetime = Field(default_factory=datetime.now)


class SlotSummary(CamelModel):
    """Slot fields embedded in booking read responses."""

    id: str
    slot_number: str
    floor: int
    section: str


class Booking(CamelModel):
    """A user's reservation of a slot for a vehicle."""

    id: str = Field(default_factory=new_id)
    user: str
    parking_slot: str
    vehicle_number: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: BookingStatus = BookingStatus.ACTIVE
    payment_status: PaymentStatus = PaymentStatus.PENDING
    amount: float = 0
    duration: int = 0  # minutes
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class BookingDetail(Booking):
    """Booking with its slot populated, as returned by read endpoints."""

    parking_slot_details: Optional[SlotSummary] = None


class Principal(BaseModel):
    """Authenticated caller identity."""

    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_access(self, booking: Booking) -> bool:
        """Owner-or-admin rule applied to every booking operation."""
        return self.is_admin or booking.user == self.user_id
