"""API request and response schemas."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..state.models import (
    BookingDetail,
    CamelModel,
    Coordinates,
    Dimensions,
    ParkingSlot,
    SlotStatus,
    SlotType,
)


class SlotCreate(CamelModel):
    """Request body for creating a parking slot."""

    slot_number: str = Field(min_length=1)
    building: str = Field(min_length=1)
    floor: int = Field(ge=1)
    section: str = Field(min_length=1)
    type: SlotType = SlotType.STANDARD
    coordinates: Coordinates
    dimensions: Dimensions = Field(default_factory=Dimensions)

    @field_validator("slot_number", "building", "section", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Surrounding whitespace is not part of a name."""
        return v.strip() if isinstance(v, str) else v


class SlotUpdate(CamelModel):
    """
    Request body for a partial slot update.

    Only fields present in the request are applied; omitted or null fields
    keep their stored value.
    """

    slot_number: Optional[str] = Field(default=None, min_length=1)
    building: Optional[str] = Field(default=None, min_length=1)
    floor: Optional[int] = Field(default=None, ge=1)
    section: Optional[str] = Field(default=None, min_length=1)
    status: Optional[SlotStatus] = None
    type: Optional[SlotType] = None
    coordinates: Optional[Coordinates] = None
    dimensions: Optional[Dimensions] = None

    @field_validator("slot_number", "building", "section", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Surrounding whitespace is not part of a name."""
        return v.strip() if isinstance(v, str) else v

    def to_patch(self) -> dict:
        """
        Fields explicitly sent by the client.

        Nested objects are reduced to the sub-fields that were sent, so the
        store merges them into the current value.
        """
        patch = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, BaseModel):
                value = value.model_dump(exclude_unset=True)
            patch[name] = value
        return patch


class BookingCreate(CamelModel):
    """Request body for booking a slot."""

    parking_slot_id: str = Field(min_length=1)
    vehicle_number: str = Field(min_length=1)


class BookingStatusUpdate(CamelModel):
    """Request body for the admin status override."""

    # Validated by the ledger so unknown values answer "Invalid status"
    status: Optional[str] = None


class SlotResponse(BaseModel):
    """Response envelope for a single slot."""

    success: bool = True
    data: ParkingSlot


class SlotListResponse(BaseModel):
    """Response envelope for a list of slots."""

    success: bool = True
    count: int
    data: list[ParkingSlot]


class BookingResponse(BaseModel):
    success: bool = True
    data: BookingDetail


class BookingListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[BookingDetail]


class MessageResponse(BaseModel):
    """Envelope carrying only a message, also used for errors."""

    success: bool
    message: str


class HealthResponse(CamelModel):
    """Health check response."""

    status: str
    message: str
    slots: dict[str, int]
    bookings: int
    active_bookings: int
    uptime_seconds: float
