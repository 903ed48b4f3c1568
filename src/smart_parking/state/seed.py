"""Demo inventory seeding."""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..config import BuildingConfig, SeedConfig
from .models import (
    Booking,
    BookingStatus,
    Coordinates,
    Dimensions,
    ParkingSlot,
    SlotStatus,
    SlotType,
)
from .repositories import BookingRepository
from .slot_registry import SlotRegistry

logger = logging.getLogger(__name__)

GRID_COLUMNS = 5
COLUMN_SPACING = 30
ROW_SPACING = 40


@dataclass
class SeedResult:
    """Outcome of a seeding run."""

    slots_created: int
    bookings_created: int


def slot_number(building: str, floor: int, section: str, index: int) -> str:
    """Build a slot number such as ``A1N03``."""
    return f"{building}{floor}{section[0]}{index:02d}"


def generate_slots(
    building: BuildingConfig,
    rng: random.Random,
    special_probability: float = 0.3,
    occupied_ratio: float = 0.3,
    now: Optional[datetime] = None,
) -> list[ParkingSlot]:
    """
    Lay out every slot of a building on a grid.

    Each section gets its own pool of special slot types; a slot draws from
    the pool with ``special_probability`` until the pool is exhausted.

    Args:
        building: Building layout
        rng: Random source
        special_probability: Chance that a slot takes a special type
        occupied_ratio: Chance that a slot starts out occupied
        now: Timestamp for ``updated_at``

    Returns:
        Slots ordered by floor, section and index
    """
    now = now or datetime.now()
    base_x = ord(building.name[0]) * 100
    slots = []

    for floor in range(1, building.floors + 1):
        base_y = floor * 100
        for section in building.sections:
            pool = [t for t, count in building.special_slots.items() for _ in range(count)]

            for i in range(1, building.slots_per_section + 1):
                slot_type = SlotType.STANDARD
                if pool and rng.random() < special_probability:
                    slot_type = pool.pop(rng.randrange(len(pool)))

                row, col = divmod(i - 1, GRID_COLUMNS)
                size = 1.5 if slot_type == SlotType.HANDICAPPED else 1
                status = SlotStatus.OCCUPIED if rng.random() < occupied_ratio else SlotStatus.EMPTY

                slots.append(
                    ParkingSlot(
                        slot_number=slot_number(building.name, floor, section, i),
                        building=building.name,
                        floor=floor,
                        section=section,
                        type=slot_type,
                        status=status,
                        coordinates=Coordinates(
                            x=base_x + col * COLUMN_SPACING,
                            y=base_y + row * ROW_SPACING,
                        ),
                        dimensions=Dimensions(width=size, height=size),
                        updated_at=now,
                    )
                )

    return slots


def seed_parking(
    registry: SlotRegistry,
    bookings: BookingRepository,
    config: SeedConfig,
    clock: Callable[[], datetime] = datetime.now,
) -> SeedResult:
    """
    Populate the store with the configured demo buildings.

    Every occupied slot created here gets an active booking for the demo user
    that started 0 to 9 hours ago. Slot numbers already present are left
    alone, so seeding twice does not duplicate inventory.
    """
    rng = random.Random(config.random_seed)
    now = clock()

    slots_created = 0
    bookings_created = 0

    for building in config.buildings:
        generated = generate_slots(
            building,
            rng,
            special_probability=config.special_probability,
            occupied_ratio=config.occupied_ratio,
            now=now,
        )
        created = registry.bulk_create(generated)
        slots_created += len(created)
        logger.info(f"Seeded {len(created)} slots in building {building.name}")

        for slot in created:
            if slot.status != SlotStatus.OCCUPIED:
                continue
            started = now - timedelta(hours=rng.randrange(10))
            bookings.insert(
                Booking(
                    user=config.demo_user_id,
                    parking_slot=slot.id,
                    vehicle_number=rng.choice(config.demo_vehicles),
                    start_time=started,
                    status=BookingStatus.ACTIVE,
                    created_at=started,
                    updated_at=started,
                )
            )
            bookings_created += 1

    logger.info(f"Seeding complete: {slots_created} slots, {bookings_created} bookings")
    return SeedResult(slots_created=slots_created, bookings_created=bookings_created)
